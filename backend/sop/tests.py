"""
Test suite for the SOP module
Tests: kategori SOP, SOP and jenis SOP endpoints, detail replacement and cascading deletes
"""
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.sop.models import KategoriSOP, SOP, JenisSOP, DetailSOP


class KategoriSOPAPITests(TestCase):
    """Test kategori SOP endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_kategori(self):
        """Test creating a kategori SOP"""
        response = self.client.post('/api/v1/kategori-sop/', {
            'name': 'Pengiriman', 'description': 'Alur pengiriman',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Pengiriman')
        self.assertEqual(response.data['sops'], [])

    def test_create_duplicate_kategori(self):
        """Test kategori names are unique"""
        TestDataFactory.create_kategori_sop(name='Pengiriman')
        response = self.client.post('/api/v1/kategori-sop/', {'name': 'Pengiriman'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Kategori SOP dengan nama ini sudah ada')

    def test_list_includes_sops_and_jenis(self):
        """Test the list nests SOPs and their jenis"""
        jenis = TestDataFactory.create_jenis_sop()
        response = self.client.get('/api/v1/kategori-sop/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sop = response.data[0]['sops'][0]
        self.assertEqual(sop['name'], jenis.sop.name)
        self.assertEqual(sop['jenis_sops'][0]['name'], jenis.name)

    def test_update_kategori(self):
        """Test renaming a kategori"""
        kategori = TestDataFactory.create_kategori_sop(name='Lama')
        response = self.client.put(f'/api/v1/kategori-sop/{kategori.id}/', {'name': 'Baru'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        kategori.refresh_from_db()
        self.assertEqual(kategori.name, 'Baru')

    def test_update_to_taken_name(self):
        """Test renaming a kategori to another kategori's name"""
        TestDataFactory.create_kategori_sop(name='Dipakai')
        kategori = TestDataFactory.create_kategori_sop(name='Milikku')
        response = self.client.put(f'/api/v1/kategori-sop/{kategori.id}/', {'name': 'Dipakai'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Kategori SOP dengan nama ini sudah ada')

    def test_delete_cascades(self):
        """Test deleting a kategori removes its SOPs, jenis and details"""
        jenis = TestDataFactory.create_jenis_sop()
        DetailSOP.objects.create(jenis_sop=jenis, name='Langkah 1', value='Cek resi')
        kategori = jenis.sop.kategori_sop
        response = self.client.delete(f'/api/v1/kategori-sop/{kategori.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Kategori SOP deleted successfully')
        self.assertFalse(SOP.objects.exists())
        self.assertFalse(JenisSOP.objects.exists())
        self.assertFalse(DetailSOP.objects.exists())

    def test_kategori_not_found(self):
        """Test reading a missing kategori"""
        response = self.client.get('/api/v1/kategori-sop/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Kategori SOP not found')


class SOPAPITests(TestCase):
    """Test SOP endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.kategori = TestDataFactory.create_kategori_sop()

    def test_create_sop(self):
        """Test creating an SOP"""
        response = self.client.post('/api/v1/sop/', {
            'name': 'Retur barang', 'kategori_sop': str(self.kategori.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['kategori_sop']['name'], self.kategori.name)
        self.assertEqual(response.data['kategori_sop_id'], str(self.kategori.id))

    def test_create_sop_requires_kategori(self):
        """Test creating an SOP without a kategori"""
        response = self.client.post('/api/v1/sop/', {'name': 'Retur barang'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Kategori SOP is required')

    def test_create_sop_unknown_kategori(self):
        """Test creating an SOP under a missing kategori"""
        response = self.client.post('/api/v1/sop/', {
            'name': 'Retur barang', 'kategori_sop': '00000000-0000-0000-0000-000000000000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Kategori SOP not found')

    def test_get_sop_with_jenis_details(self):
        """Test an SOP read nests jenis with their details"""
        jenis = TestDataFactory.create_jenis_sop(sop=TestDataFactory.create_sop(kategori_sop=self.kategori))
        DetailSOP.objects.create(jenis_sop=jenis, name='Langkah 1', value='Cek resi')
        response = self.client.get(f'/api/v1/sop/{jenis.sop_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['jenis_sops'][0]['detail_sops'][0]['value'], 'Cek resi')

    def test_update_sop_moves_kategori(self):
        """Test moving an SOP to another kategori"""
        sop = TestDataFactory.create_sop(kategori_sop=self.kategori)
        other = TestDataFactory.create_kategori_sop()
        response = self.client.put(f'/api/v1/sop/{sop.id}/', {
            'name': 'Dipindah', 'kategori_sop': str(other.id),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sop.refresh_from_db()
        self.assertEqual(sop.kategori_sop, other)

    def test_delete_sop(self):
        """Test deleting an SOP"""
        sop = TestDataFactory.create_sop(kategori_sop=self.kategori)
        response = self.client.delete(f'/api/v1/sop/{sop.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'SOP deleted successfully')
        self.assertTrue(KategoriSOP.objects.filter(pk=self.kategori.pk).exists())


class JenisSOPAPITests(TestCase):
    """Test jenis SOP endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.sop = TestDataFactory.create_sop()

    def test_create_jenis_with_details(self):
        """Test creating a jenis SOP with details"""
        response = self.client.post('/api/v1/jenis-sop/', {
            'name': 'Retur online',
            'content': 'Langkah retur',
            'sop': str(self.sop.id),
            'details': [{'name': 'Batas waktu', 'value': '7 hari'}, {'value': 'tanpa nama'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.user.email)
        self.assertEqual(response.data['sop']['kategori_sop']['id'], str(self.sop.kategori_sop_id))
        self.assertEqual([d['name'] for d in response.data['detail_sops']], ['Batas waktu'])

    def test_create_jenis_requires_sop(self):
        """Test creating a jenis SOP without an SOP"""
        response = self.client.post('/api/v1/jenis-sop/', {'name': 'Retur online'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'SOP is required')

    def test_update_requires_notes(self):
        """Test an update without update notes"""
        jenis = TestDataFactory.create_jenis_sop(sop=self.sop)
        response = self.client.put(f'/api/v1/jenis-sop/{jenis.id}/', {
            'name': 'Baru', 'sop': str(self.sop.id), 'updated_by': 'editor@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Update notes is required')

    def test_update_replaces_details(self):
        """Test a non-empty details list replaces the stored ones"""
        jenis = TestDataFactory.create_jenis_sop(sop=self.sop)
        DetailSOP.objects.create(jenis_sop=jenis, name='Lama', value='1')
        response = self.client.put(f'/api/v1/jenis-sop/{jenis.id}/', {
            'name': 'Baru',
            'sop': str(self.sop.id),
            'update_notes': 'revisi',
            'updated_by': 'editor@test.com',
            'details': [{'name': 'Baru', 'value': '2'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        jenis.refresh_from_db()
        self.assertEqual(jenis.update_notes, 'revisi')
        self.assertEqual(list(jenis.detail_sops.values_list('name', flat=True)), ['Baru'])

    def test_update_without_details_keeps_them(self):
        """Test an update with no details leaves the stored ones"""
        jenis = TestDataFactory.create_jenis_sop(sop=self.sop)
        DetailSOP.objects.create(jenis_sop=jenis, name='Tetap', value='1')
        response = self.client.put(f'/api/v1/jenis-sop/{jenis.id}/', {
            'name': 'Baru',
            'sop': str(self.sop.id),
            'update_notes': 'revisi',
            'updated_by': 'editor@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(jenis.detail_sops.count(), 1)

    def test_delete_jenis(self):
        """Test deleting a jenis SOP"""
        jenis = TestDataFactory.create_jenis_sop(sop=self.sop)
        response = self.client.delete(f'/api/v1/jenis-sop/{jenis.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Jenis SOP deleted successfully')
        self.assertFalse(JenisSOP.objects.filter(pk=jenis.pk).exists())

    def test_jenis_not_found(self):
        """Test reading a missing jenis SOP"""
        response = self.client.get('/api/v1/jenis-sop/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Jenis SOP not found')
