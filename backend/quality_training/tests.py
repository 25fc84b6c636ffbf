"""
Test suite for the Quality Training module
Tests: programmes, jenis with nested details and subdetails, detail endpoints
"""
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.quality_training.models import (
    QualityTraining, JenisQualityTraining, DetailQualityTraining, SubdetailQualityTraining,
)


class QualityTrainingAPITests(TestCase):
    """Test quality training endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_requires_title(self):
        """Test creating a programme without a title"""
        response = self.client.post('/api/v1/quality-training/', {'description': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Title is required')

    def test_create(self):
        """Test creating a programme"""
        response = self.client.post('/api/v1/quality-training/', {
            'title': 'Onboarding', 'logos': ['https://cdn.test/logo.png'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.user.email)
        self.assertEqual(response.data['jenis_quality_trainings'], [])

    def test_update(self):
        """Test updating a programme records notes and editor"""
        item = TestDataFactory.create_quality_training()
        response = self.client.put(f'/api/v1/quality-training/{item.id}/', {
            'title': 'Renamed', 'update_notes': 'rename', 'updated_by': 'editor@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertEqual(item.title, 'Renamed')
        self.assertEqual(item.update_notes, 'rename')

    def test_delete_cascades(self):
        """Test deleting a programme removes the whole tree"""
        item = TestDataFactory.create_quality_training()
        jenis = JenisQualityTraining.objects.create(name='Modul', quality_training=item)
        detail = DetailQualityTraining.objects.create(name='Sesi', jenis_quality_training=jenis)
        SubdetailQualityTraining.objects.create(name='Topik', detail_quality_training=detail)
        response = self.client.delete(f'/api/v1/quality-training/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Deleted')
        self.assertFalse(SubdetailQualityTraining.objects.exists())

    def test_not_found(self):
        """Test reading a missing programme"""
        response = self.client.get('/api/v1/quality-training/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Not found')


class JenisQualityTrainingAPITests(TestCase):
    """Test jenis quality training endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.training = TestDataFactory.create_quality_training()

    def _payload(self, **extra):
        payload = {
            'name': 'Modul 1',
            'quality_training': str(self.training.id),
            'details': [
                {
                    'name': 'Sesi 1',
                    'linkslide': 'https://slides.test/1',
                    'subdetails': [{'name': 'Topik A'}, {'name': ''}],
                },
                {'name': ''},
            ],
        }
        payload.update(extra)
        return payload

    def test_create_requires_training(self):
        """Test creating a jenis without its programme"""
        response = self.client.post('/api/v1/jenis-quality-training/', {'name': 'Modul 1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'QualityTraining is required')

    def test_create_with_tree(self):
        """Test creating a jenis with details and subdetails"""
        response = self.client.post('/api/v1/jenis-quality-training/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quality_training_id'], str(self.training.id))
        details = response.data['detail_quality_trainings']
        self.assertEqual(len(details), 1)
        self.assertEqual(details[0]['linkslide'], 'https://slides.test/1')
        self.assertEqual([s['name'] for s in details[0]['subdetail_quality_trainings']], ['Topik A'])

    def test_update_rebuilds_details(self):
        """Test an update always replaces the detail tree"""
        response = self.client.post('/api/v1/jenis-quality-training/', self._payload(), format='json')
        jenis_id = response.data['id']
        response = self.client.put(f'/api/v1/jenis-quality-training/{jenis_id}/', self._payload(
            name='Modul 1b', details=[],
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['detail_quality_trainings'], [])
        self.assertFalse(DetailQualityTraining.objects.exists())
        self.assertFalse(SubdetailQualityTraining.objects.exists())

    def test_delete(self):
        """Test deleting a jenis"""
        jenis = JenisQualityTraining.objects.create(name='Modul', quality_training=self.training)
        response = self.client.delete(f'/api/v1/jenis-quality-training/{jenis.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(QualityTraining.objects.filter(pk=self.training.pk).exists())
        self.assertFalse(JenisQualityTraining.objects.exists())


class DetailQualityTrainingAPITests(TestCase):
    """Test detail quality training endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.jenis = JenisQualityTraining.objects.create(
            name='Modul', quality_training=TestDataFactory.create_quality_training()
        )

    def test_create_requires_jenis(self):
        """Test creating a detail without its jenis"""
        response = self.client.post('/api/v1/detail-quality-training/', {'name': 'Sesi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Jenis is required')

    def test_create(self):
        """Test creating a detail"""
        response = self.client.post('/api/v1/detail-quality-training/', {
            'name': 'Sesi', 'jenis_quality_training': str(self.jenis.id), 'linkslide': 'https://slides.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['jenis_quality_training']['name'], 'Modul')

    def test_update_defaults_editor(self):
        """Test the editor falls back to the session user"""
        detail = DetailQualityTraining.objects.create(name='Sesi', jenis_quality_training=self.jenis)
        response = self.client.put(f'/api/v1/detail-quality-training/{detail.id}/', {
            'name': 'Sesi 2', 'jenis_quality_training': str(self.jenis.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        detail.refresh_from_db()
        self.assertEqual(detail.name, 'Sesi 2')
        self.assertTrue(detail.updated_by)

    def test_list(self):
        """Test listing details with their jenis"""
        DetailQualityTraining.objects.create(name='Sesi', jenis_quality_training=self.jenis)
        response = self.client.get('/api/v1/detail-quality-training/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['jenis_quality_training_id'], str(self.jenis.id))
