"""
Test suite for the Agents module
Tests: agent CRUD, score edits, cached stats, Excel agent import and score import
"""
from datetime import timedelta
from io import BytesIO

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.utils import timezone
from openpyxl import Workbook
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.agents.models import Agent, Performance
from backend.agents.spreadsheets import SpreadsheetError, parse_score, parse_score_rows
from backend.agents.views import compute_agent_stats


def excel_file(rows, name='data.xlsx'):
    """In-memory workbook with ``rows`` on the first sheet"""
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return SimpleUploadedFile(
        name,
        buffer.getvalue(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    )


class AgentAPITests(TestCase):
    """Test agent list, create, score edit and delete"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_agent(self):
        """Test creating an agent hashes the password and normalizes fields"""
        response = self.client.post('/api/v1/agents/', {
            'name': 'Rina',
            'email': 'Rina@Test.com',
            'password': 'secret1',
            'category': 'ecommerce',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Agent created successfully')
        self.assertNotIn('password', response.data['agent'])
        agent = Agent.objects.get(email='rina@test.com')
        self.assertEqual(agent.category, Agent.CATEGORY_ECOMMERCE)
        self.assertTrue(agent.check_password('secret1'))
        self.assertNotEqual(agent.password, 'secret1')

    def test_create_agent_missing_fields(self):
        """Test creating an agent without a password"""
        response = self.client.post('/api/v1/agents/', {'name': 'Rina', 'email': 'rina@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Name, email, and password are required')

    def test_create_agent_non_text_fields(self):
        """Test creating an agent with a numeric email"""
        response = self.client.post('/api/v1/agents/', {
            'name': 'Rina', 'email': 12345, 'password': 'secret1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Name, email, and password are required')

    def test_create_agent_invalid_email(self):
        """Test creating an agent with a malformed email"""
        response = self.client.post('/api/v1/agents/', {
            'name': 'Rina', 'email': 'rina-at-test', 'password': 'secret1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid email format')

    def test_create_agent_short_password(self):
        """Test creating an agent with a short password"""
        response = self.client.post('/api/v1/agents/', {
            'name': 'Rina', 'email': 'rina@test.com', 'password': '12345',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Password must be at least 6 characters')

    def test_create_agent_duplicate_email(self):
        """Test agent emails are unique regardless of case"""
        TestDataFactory.create_agent(email='rina@test.com')
        response = self.client.post('/api/v1/agents/', {
            'name': 'Rina', 'email': 'RINA@test.com', 'password': 'secret1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Agent with this email already exists')

    def test_list_with_latest_performance(self):
        """Test the list carries each agent's newest score card"""
        agent = TestDataFactory.create_agent(name='Rina')
        TestDataFactory.create_performance(agent, timestamp=timezone.now() - timedelta(days=40), qa_score=70)
        TestDataFactory.create_performance(agent, qa_score=90)
        response = self.client.get('/api/v1/agents/', {'search': 'rina'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['users'][0]['latest_performance']['qa_score'], 90)

    def test_list_agent_without_performance(self):
        """Test agents with no score card"""
        TestDataFactory.create_agent()
        response = self.client.get('/api/v1/agents/')
        self.assertIsNone(response.data['users'][0]['latest_performance'])

    def test_patch_scores_updates_current_month(self):
        """Test editing scores overwrites this month's score card"""
        agent = TestDataFactory.create_agent()
        TestDataFactory.create_performance(agent, qa_score=50, csat=4)
        response = self.client.patch('/api/v1/agents/', {
            'id': str(agent.id), 'qa_score': 95, 'quiz_score': -3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        performance = Performance.objects.get(agent=agent)
        self.assertEqual(performance.qa_score, 95)
        self.assertEqual(performance.quiz_score, 0)
        self.assertEqual(performance.csat, 4)

    def test_patch_scores_rejects_text(self):
        """Test editing a score with a non-number"""
        agent = TestDataFactory.create_agent()
        response = self.client.patch('/api/v1/agents/', {'id': str(agent.id), 'qa_score': 'tinggi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_scores_rejects_non_finite(self):
        """Test nan and inf scores are refused and nothing is stored"""
        agent = TestDataFactory.create_agent()
        for value in ('nan', 'inf', 'Infinity'):
            response = self.client.patch('/api/v1/agents/', {'id': str(agent.id), 'qa_score': value}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error'], 'qa_score: A valid number is required.')
        self.assertFalse(Performance.objects.filter(agent=agent).exists())
        self.assertEqual(self.client.get('/api/v1/agents/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get('/api/v1/agents/stats/').status_code, status.HTTP_200_OK)

    def test_delete_agent(self):
        """Test deleting an agent removes its score cards"""
        agent = TestDataFactory.create_agent()
        TestDataFactory.create_performance(agent)
        response = self.client.delete(f'/api/v1/agents/?id={agent.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Agent deleted successfully')
        self.assertFalse(Performance.objects.exists())

    def test_delete_agent_not_found(self):
        """Test deleting a missing agent"""
        response = self.client.delete('/api/v1/agents/?id=00000000-0000-0000-0000-000000000000')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AgentStatsTests(TestCase):
    """Test the cached agent statistics"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_stats_use_latest_performance(self):
        """Test averages use each agent's newest score card over all agents"""
        social = TestDataFactory.create_agent()
        TestDataFactory.create_agent(category=Agent.CATEGORY_ECOMMERCE)
        TestDataFactory.create_performance(social, timestamp=timezone.now() - timedelta(days=40), qa_score=10)
        TestDataFactory.create_performance(social, qa_score=90, quiz_score=60)
        response = self.client.get('/api/v1/agents/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totals'], {'totalAgents': 2, 'totalSocMed': 1, 'totalECom': 1})
        self.assertEqual(response.data['averages']['qaScore'], 45)
        self.assertEqual(response.data['averages']['quizScore'], 30)

    def test_stats_without_agents(self):
        """Test averages are 0 when there are no agents"""
        stats = compute_agent_stats()
        self.assertEqual(stats['totals']['totalAgents'], 0)
        self.assertEqual(stats['averages']['qaScore'], 0)

    def test_stats_are_cached_until_invalidated(self):
        """Test a cached result survives until the commit hook clears it"""
        TestDataFactory.create_agent()
        self.assertEqual(compute_agent_stats()['totals']['totalAgents'], 1)
        TestDataFactory.create_agent()
        self.assertEqual(compute_agent_stats()['totals']['totalAgents'], 1)
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_agent()
        self.assertEqual(compute_agent_stats()['totals']['totalAgents'], 3)


class AgentUploadTests(TestCase):
    """Test the Excel agent import"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(email='admin@test.com')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_file(self):
        """Test an upload without a file"""
        response = self.client.post('/api/v1/agents/upload/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File diperlukan')

    def test_unreadable_file(self):
        """Test a file that is not a workbook"""
        bogus = SimpleUploadedFile('agents.xlsx', b'not a workbook')
        response = self.client.post('/api/v1/agents/upload/', {'file': bogus}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('File Excel tidak dapat dibaca', response.data['error'])

    def test_missing_password_column(self):
        """Test a sheet without the password column"""
        file = excel_file([['Nama Lengkap', 'Email'], ['Rina', 'rina@test.com']])
        response = self.client.post('/api/v1/agents/upload/', {'file': file}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Kolom "Password" tidak ditemukan di file Excel')

    def test_import_reports_each_row(self):
        """Test valid rows are created and bad rows are reported"""
        TestDataFactory.create_agent(email='taken@test.com')
        file = excel_file([
            ['Nama Lengkap', 'Email', 'Kategori', 'Password'],
            ['Rina', 'Rina@Test.com', 'eCommerce', 'secret1'],
            ['Budi', 'budi-at-test', 'socialMedia', 'secret1'],
            ['Sari', 'sari@test.com', None, '123'],
            ['Tono', 'taken@test.com', None, 'secret1'],
            ['Admin', 'admin@test.com', None, 'secret1'],
            ['Kosong', 'kosong@test.com', None, None],
        ])
        response = self.client.post('/api/v1/agents/upload/', {'file': file}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Upload selesai')
        self.assertEqual(response.data['summary'], {'total': 5, 'success': 1, 'errors': 4})
        errors = {row['nama']: row['error'] for row in response.data['details']['errors']}
        self.assertEqual(errors['Budi'], 'Format email tidak valid')
        self.assertEqual(errors['Sari'], 'Password harus minimal 6 karakter')
        self.assertEqual(errors['Tono'], 'Email sudah terdaftar')
        self.assertEqual(errors['Admin'], 'Email sudah terdaftar')
        agent = Agent.objects.get(email='rina@test.com')
        self.assertEqual(agent.category, Agent.CATEGORY_ECOMMERCE)
        self.assertTrue(agent.check_password('secret1'))

    def test_duplicate_rows_in_one_file(self):
        """Test the second row with the same email is rejected"""
        file = excel_file([
            ['Nama', 'Email', 'Password'],
            ['Rina', 'rina@test.com', 'secret1'],
            ['Rina 2', 'RINA@test.com', 'secret2'],
        ])
        response = self.client.post('/api/v1/agents/upload/', {'file': file}, format='multipart')
        self.assertEqual(response.data['summary']['success'], 1)
        self.assertEqual(response.data['details']['errors'][0]['error'], 'Email sudah terdaftar')


class ScoreUploadTests(TestCase):
    """Test the Excel score import"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.agent = TestDataFactory.create_agent(name='Rina Wati')

    def test_requires_file_or_url(self):
        """Test an upload with neither file nor URL"""
        response = self.client.post('/api/v1/agents/upload-scores/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File atau spreadsheet URL diperlukan')

    def test_url_not_supported(self):
        """Test a spreadsheet URL without a file"""
        response = self.client.post('/api/v1/agents/upload-scores/', {
            'spreadsheetUrl': 'https://docs.google.com/spreadsheets/d/abc',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data['error'],
            'Google Sheets URL support belum tersedia. Silakan upload file Excel.',
        )

    def test_import_overwrites_current_month(self):
        """Test scores are matched by name and replace this month's score card"""
        TestDataFactory.create_performance(self.agent, qa_score=10)
        file = excel_file([
            ['Nama', 'QA Score', 'Quiz_Score', 'Remarks QA Score', 'CSAT'],
            ['rina wati', 88, 'n/a', 'Bagus', -1],
            ['Tidak Ada', 70, 70, None, 4],
        ])
        response = self.client.post('/api/v1/agents/upload-scores/', {'file': file}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary'], {'total': 2, 'success': 1, 'notFound': 1, 'errors': 0})
        self.assertEqual(response.data['details']['notFound'], [{'nama': 'Tidak Ada'}])
        performance = Performance.objects.get(agent=self.agent)
        self.assertEqual(performance.qa_score, 88)
        self.assertEqual(performance.qa_score_remarks, 'Bagus')
        self.assertEqual(performance.quiz_score, 0)
        self.assertEqual(performance.csat, 0)

    def test_import_adds_new_month(self):
        """Test an older score card is kept and a new one added"""
        TestDataFactory.create_performance(self.agent, timestamp=timezone.now() - timedelta(days=62))
        file = excel_file([['Nama', 'QA Score'], ['Rina Wati', 75]])
        self.client.post('/api/v1/agents/upload-scores/', {'file': file}, format='multipart')
        self.assertEqual(Performance.objects.filter(agent=self.agent).count(), 2)

    def test_parse_requires_a_score_column(self):
        """Test a sheet with only names"""
        with self.assertRaises(SpreadsheetError):
            parse_score_rows(excel_file([['Nama'], ['Rina Wati']]))

    def test_parse_score(self):
        """Test scores are non-negative finite numbers"""
        self.assertEqual(parse_score('12.5'), 12.5)
        self.assertEqual(parse_score(None), 0)
        self.assertEqual(parse_score('abc'), 0)
        self.assertEqual(parse_score(-4), 0)
        self.assertEqual(parse_score(float('inf')), 0)
