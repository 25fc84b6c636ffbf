"""
Test suite for the Knowledge module
Tests: multipart create and update with logo uploads, nested details, search, delete
"""
import json
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import StorageError
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.knowledge.models import (
    Knowledge, DetailKnowledge, JenisDetailKnowledge, ProdukJenisDetailKnowledge,
)


def image(name='logo.png'):
    return SimpleUploadedFile(name, b'png-bytes', content_type='image/png')


def fake_upload(file, path, bucket=None):
    return f'https://cdn.test/{path}/{file.name}'


class KnowledgeCreateTests(TestCase):
    """Test creating knowledge from a multipart form"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_title_and_description(self):
        """Test creating without a description"""
        response = self.client.post('/api/v1/knowledge/', {'title': 'FAQ'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Title and description are required')

    def test_non_text_title_is_rejected(self):
        """Test a numeric JSON title is treated as missing"""
        response = self.client.post('/api/v1/knowledge/', {'title': 123, 'description': 'd'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Title and description are required')
        self.assertFalse(Knowledge.objects.exists())

    def test_non_text_detail_names_are_skipped(self):
        """Test numeric jenis and produk names in JSON details are ignored"""
        response = self.client.post('/api/v1/knowledge/', {
            'title': 'FAQ',
            'description': 'Pertanyaan umum',
            'details': [{'name': 'Garansi', 'jenis': [{'name': 7, 'produk': [{'name': 8}]}]}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(DetailKnowledge.objects.filter(name='Garansi').exists())
        self.assertFalse(JenisDetailKnowledge.objects.exists())

    @mock.patch('backend.knowledge.views.upload_file', side_effect=fake_upload)
    def test_create_with_logos_and_details(self, upload_file):
        """Test logos and nested details are stored"""
        details = [
            {
                'index': 0,
                'name': 'Garansi',
                'description': 'Klaim garansi',
                'jenis': [{'name': 'Resmi', 'produk': [{'name': 'Speaker X'}]}],
            },
            {'index': 1, 'name': 'Pengiriman', 'existingLogoUrl': 'https://cdn.test/old.png'},
        ]
        response = self.client.post('/api/v1/knowledge/', {
            'title': 'FAQ',
            'description': 'Pertanyaan umum',
            'logo': image('main.png'),
            'logo_0': image('extra.png'),
            'detailLogo_0': image('detail.png'),
            'details': json.dumps(details),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Knowledge created successfully')
        knowledge = Knowledge.objects.get(title='FAQ')
        self.assertEqual(knowledge.logos, [
            'https://cdn.test/knowledge/main.png',
            'https://cdn.test/knowledge/extra.png',
        ])
        self.assertEqual(knowledge.created_by, self.user.email)

        garansi = DetailKnowledge.objects.get(name='Garansi')
        self.assertEqual(garansi.logos, ['https://cdn.test/knowledge/detail/detail.png'])
        self.assertEqual(DetailKnowledge.objects.get(name='Pengiriman').logos, ['https://cdn.test/old.png'])
        jenis = JenisDetailKnowledge.objects.get(detail_knowledge=garansi)
        self.assertEqual(jenis.name, 'Resmi')
        self.assertEqual(ProdukJenisDetailKnowledge.objects.get(jenis_detail_knowledge=jenis).name, 'Speaker X')

    @mock.patch('backend.knowledge.views.upload_file', side_effect=StorageError('boom'))
    def test_logo_upload_failure(self, upload_file):
        """Test a failed logo upload stops the create"""
        response = self.client.post('/api/v1/knowledge/', {
            'title': 'FAQ', 'description': 'Pertanyaan umum', 'logo': image(),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to upload logo')
        self.assertFalse(Knowledge.objects.exists())

    @mock.patch('backend.knowledge.views.upload_file', side_effect=StorageError('boom'))
    def test_detail_logo_upload_failure(self, upload_file):
        """Test a failed detail logo upload stops the create"""
        response = self.client.post('/api/v1/knowledge/', {
            'title': 'FAQ',
            'description': 'Pertanyaan umum',
            'detailLogo_0': image(),
            'details': json.dumps([{'index': 0, 'name': 'Garansi'}]),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to upload detail logo')


class KnowledgeAPITests(TestCase):
    """Test listing, updating, reading and deleting knowledge"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_list_with_search_and_pagination(self):
        """Test search narrows the list and pagination is reported"""
        TestDataFactory.create_knowledge(title='Garansi produk')
        TestDataFactory.create_knowledge(title='Cara retur')
        response = self.client.get('/api/v1/knowledge/', {'search': 'garansi'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([k['title'] for k in response.data['knowledge']], ['Garansi produk'])
        self.assertEqual(response.data['pagination'], {'page': 1, 'limit': 10, 'total': 1, 'pages': 1})

    def test_update_requires_id(self):
        """Test an update without the form id"""
        response = self.client.put('/api/v1/knowledge/', {'title': 'X'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Knowledge ID is required')

    def test_update_missing_knowledge(self):
        """Test updating a missing record"""
        response = self.client.put('/api/v1/knowledge/', {
            'id': '00000000-0000-0000-0000-000000000000', 'title': 'X',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Knowledge not found')

    @mock.patch('backend.knowledge.views.upload_file', side_effect=fake_upload)
    def test_update_appends_logos_and_rebuilds_details(self, upload_file):
        """Test new logos are appended and details replaced"""
        knowledge = TestDataFactory.create_knowledge(logos=['https://cdn.test/knowledge/a.png'])
        DetailKnowledge.objects.create(knowledge=knowledge, name='Lama')
        response = self.client.put('/api/v1/knowledge/', {
            'id': str(knowledge.id),
            'title': 'Baru',
            'update_notes': 'revisi',
            'logo': image('b.png'),
            'details': json.dumps([{'name': 'Baru'}]),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        knowledge.refresh_from_db()
        self.assertEqual(knowledge.title, 'Baru')
        self.assertEqual(knowledge.update_notes, 'revisi')
        self.assertEqual(knowledge.logos, [
            'https://cdn.test/knowledge/a.png',
            'https://cdn.test/knowledge/b.png',
        ])
        self.assertEqual(list(knowledge.detail_knowledges.values_list('name', flat=True)), ['Baru'])

    def test_update_without_details_keeps_them(self):
        """Test an update with no details field leaves the stored ones"""
        knowledge = TestDataFactory.create_knowledge()
        DetailKnowledge.objects.create(knowledge=knowledge, name='Tetap')
        response = self.client.put('/api/v1/knowledge/', {
            'id': str(knowledge.id), 'title': 'Baru',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(knowledge.detail_knowledges.count(), 1)

    def test_update_ignores_non_text_title(self):
        """Test a numeric JSON title leaves the stored title"""
        knowledge = TestDataFactory.create_knowledge(title='Tetap')
        response = self.client.put('/api/v1/knowledge/', {
            'id': str(knowledge.id), 'title': 123, 'update_notes': 456,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        knowledge.refresh_from_db()
        self.assertEqual(knowledge.title, 'Tetap')

    def test_detail_tree(self):
        """Test reading one knowledge with its full tree"""
        knowledge = TestDataFactory.create_knowledge()
        detail = DetailKnowledge.objects.create(knowledge=knowledge, name='Garansi')
        jenis = JenisDetailKnowledge.objects.create(detail_knowledge=detail, name='Resmi')
        ProdukJenisDetailKnowledge.objects.create(jenis_detail_knowledge=jenis, name='Speaker X')
        response = self.client.get(f'/api/v1/knowledge/{knowledge.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tree_jenis = response.data['detail_knowledges'][0]['jenis_detail_knowledges'][0]
        self.assertEqual(tree_jenis['produk_jenis_detail_knowledges'][0]['name'], 'Speaker X')

    def test_detail_not_found(self):
        """Test reading a missing knowledge"""
        response = self.client.get('/api/v1/knowledge/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Not found')

    def test_delete_requires_id(self):
        """Test a delete without the id query parameter"""
        response = self.client.delete('/api/v1/knowledge/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Knowledge ID is required')

    @mock.patch('backend.knowledge.views.delete_files')
    def test_delete_removes_logos(self, delete_files):
        """Test deleting a knowledge removes its logos and detail logos"""
        knowledge = TestDataFactory.create_knowledge(logos=['https://cdn.test/k.png'])
        DetailKnowledge.objects.create(knowledge=knowledge, name='Garansi', logos=['https://cdn.test/d.png'])
        response = self.client.delete(f'/api/v1/knowledge/?id={knowledge.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Knowledge deleted successfully')
        delete_files.assert_called_once_with(['https://cdn.test/k.png', 'https://cdn.test/d.png'])
        self.assertFalse(DetailKnowledge.objects.exists())
