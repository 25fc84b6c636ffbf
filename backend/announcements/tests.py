"""
Test suite for the Announcements module
Tests: list and search, create with image uploads, update with removed images, delete
"""
import json
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import StorageError
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.announcements.models import Announcement


def image(name):
    return SimpleUploadedFile(name, b'png-bytes', content_type='image/png')


def fake_upload(file, path, bucket=None):
    return f'https://cdn.test/{path}/{file.name}'


class AnnouncementAPITests(TestCase):
    """Test announcement endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(name='Dina')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_search_and_pagination(self):
        """Test search over judul and deskripsi"""
        TestDataFactory.create_announcement(judul='Promo akhir tahun')
        TestDataFactory.create_announcement(judul='Libur nasional')
        response = self.client.get('/api/v1/announcements/', {'search': 'promo', 'limit': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['judul'] for a in response.data['announcements']], ['Promo akhir tahun'])
        self.assertEqual(response.data['pagination'], {'page': 1, 'limit': 5, 'total': 1, 'pages': 1})

    def test_create_requires_judul(self):
        """Test creating without a judul"""
        response = self.client.post('/api/v1/announcements/', {'judul': '  '}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Judul is required')

    @mock.patch('backend.announcements.views.upload_file', side_effect=fake_upload)
    def test_create_with_indexed_images(self, upload_file):
        """Test image_0..n are uploaded in order"""
        response = self.client.post('/api/v1/announcements/', {
            'judul': 'Promo',
            'deskripsi': 'Diskon 20%',
            'image_0': image('a.png'),
            'image_1': image('b.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['image'], [
            'https://cdn.test/images/a.png',
            'https://cdn.test/images/b.png',
        ])
        self.assertEqual(response.data['created_by'], 'Dina')

    @mock.patch('backend.announcements.views.upload_file', side_effect=fake_upload)
    def test_create_with_single_image(self, upload_file):
        """Test a lone ``image`` field is accepted"""
        response = self.client.post('/api/v1/announcements/', {
            'judul': 'Promo', 'image': image('solo.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['image'], ['https://cdn.test/images/solo.png'])

    @mock.patch('backend.announcements.views.upload_file', side_effect=StorageError('boom'))
    def test_create_upload_failure(self, upload_file):
        """Test a failed upload creates nothing"""
        response = self.client.post('/api/v1/announcements/', {
            'judul': 'Promo', 'image_0': image('a.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to upload image')
        self.assertFalse(Announcement.objects.exists())

    @mock.patch('backend.announcements.views.delete_files')
    @mock.patch('backend.announcements.views.upload_file', side_effect=fake_upload)
    def test_update_keeps_old_images_first(self, upload_file, delete_files):
        """Test removed images are dropped and new ones appended"""
        announcement = TestDataFactory.create_announcement(image=[
            'https://cdn.test/images/old1.png',
            'https://cdn.test/images/old2.png',
        ])
        response = self.client.put(f'/api/v1/announcements/{announcement.id}/', {
            'judul': 'Diperbarui',
            'removedImages': json.dumps(['https://cdn.test/images/old1.png']),
            'image_0': image('new.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['image'], [
            'https://cdn.test/images/old2.png',
            'https://cdn.test/images/new.png',
        ])
        self.assertEqual(response.data['updated_by'], 'Dina')
        self.assertEqual(delete_files.call_args[0][0], ['https://cdn.test/images/old1.png'])

    def test_get_not_found(self):
        """Test reading a missing announcement"""
        response = self.client.get('/api/v1/announcements/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Announcement not found')

    def test_delete_requires_id(self):
        """Test a collection delete without ``?id=``"""
        response = self.client.delete('/api/v1/announcements/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'ID is required')

    @mock.patch('backend.announcements.views.delete_files')
    def test_delete_by_query_and_path(self, delete_files):
        """Test both delete routes remove the announcement and its images"""
        first = TestDataFactory.create_announcement(image=['https://cdn.test/images/a.png'])
        second = TestDataFactory.create_announcement()
        response = self.client.delete(f'/api/v1/announcements/?id={first.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Announcement deleted successfully')
        self.assertEqual(delete_files.call_args[0][0], ['https://cdn.test/images/a.png'])
        response = self.client.delete(f'/api/v1/announcements/{second.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Announcement.objects.exists())
