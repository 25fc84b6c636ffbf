"""
Test suite for the core module
Tests: login, user management, global search, tracer updates, notifications and shared helpers
"""
from io import StringIO
from unittest import mock, skipIf

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import OperationalError, connection
from django.test import TestCase, override_settings
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core import audit, storage
from backend.core.audit_signals import suspend_audit_signals
from backend.core.cache_utils import AGENT_STATS_CACHE_KEY
from backend.core.exceptions import StorageError
from backend.core.models import TracerUpdate, User
from backend.core.utils import (
    clean_text, get_audit_user, normalize_empty_strings, paginate, parse_json_field,
    parse_positive_int, run_audited, with_retry,
)
from backend.catalog.models import Brand


class AuthAPITests(TestCase):
    """Test JWT login and the current user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='admin@test.com', password='secret123')

    def test_login_returns_tokens_and_user(self):
        """Test login with valid credentials"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'admin@test.com',
            'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'admin@test.com')
        self.assertEqual(response.data['user']['role'], User.ROLE_ADMIN)

    def test_login_wrong_password(self):
        """Test login with a wrong password"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'admin@test.com',
            'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    @override_settings(SUPER_ADMIN_EMAIL='root@test.com', SUPER_ADMIN_PASSWORD='rootpass', SUPER_ADMIN_NAME='Root')
    def test_login_provisions_env_super_admin(self):
        """Test first login with the environment credentials creates the super admin"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'root@test.com',
            'password': 'rootpass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user = User.objects.get(email='root@test.com')
        self.assertEqual(user.role, User.ROLE_SUPER_ADMIN)
        self.assertEqual(user.name, 'Root')

    def test_me_requires_authentication(self):
        """Test the current user endpoint without a token"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        """Test the current user endpoint"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'admin@test.com')


class UserAPITests(TestCase):
    """Test user management permissions and validation"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.super_admin = TestDataFactory.create_super_admin()
        self.admin = TestDataFactory.create_user()

    def test_admin_can_list_users(self):
        """Test ADMIN may read the user list"""
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_admin_cannot_create_user(self):
        """Test only SUPER_ADMIN may create users"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'email': 'new@test.com', 'name': 'New', 'password': 'secret123', 'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Forbidden')

    def test_create_user(self):
        """Test creating a user as SUPER_ADMIN"""
        self.client.authenticate_user(self.super_admin)
        response = self.client.post('/api/v1/users/', {
            'email': 'new@test.com', 'name': 'New', 'password': 'secret123', 'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)
        self.assertTrue(User.objects.get(email='new@test.com').check_password('secret123'))

    def test_create_user_missing_fields(self):
        """Test creating a user without a role"""
        self.client.authenticate_user(self.super_admin)
        response = self.client.post('/api/v1/users/', {
            'email': 'new@test.com', 'name': 'New', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required fields')

    def test_create_user_duplicate_email(self):
        """Test creating a user with an email already in use"""
        self.client.authenticate_user(self.super_admin)
        response = self.client.post('/api/v1/users/', {
            'email': self.admin.email.upper(), 'name': 'Dup', 'password': 'secret123', 'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'User already exists')

    def test_partial_update_user(self):
        """Test a partial update and the is_active flag"""
        self.client.authenticate_user(self.super_admin)
        response = self.client.put(f'/api/v1/users/{self.admin.id}/', {
            'name': 'Renamed', 'is_active': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.name, 'Renamed')
        self.assertTrue(self.admin.email)
        self.assertFalse(self.admin.is_active)

    def test_cannot_delete_super_admin(self):
        """Test the super admin account cannot be deleted"""
        other = TestDataFactory.create_super_admin()
        self.client.authenticate_user(self.super_admin)
        response = self.client.delete(f'/api/v1/users/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete super admin')

    def test_role_properties_drive_permissions(self):
        """Test the role flags and the inactive-admin lockout"""
        self.assertTrue(self.super_admin.is_super_admin)
        self.assertTrue(self.super_admin.is_admin_role)
        self.assertFalse(self.admin.is_super_admin)
        self.assertTrue(self.admin.is_admin_role)
        self.client.authenticate_user(self.admin)
        self.assertEqual(self.client.get('/api/v1/users/').status_code, status.HTTP_200_OK)
        self.admin.is_active = False
        self.admin.save()
        self.assertIn(
            self.client.get('/api/v1/users/').status_code,
            (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN),
        )

    def test_delete_user(self):
        """Test deleting an admin"""
        self.client.authenticate_user(self.super_admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=self.admin.pk).exists())

    def test_user_not_found(self):
        """Test reading a missing user"""
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'User not found')


class GlobalSearchAPITests(TestCase):
    """Test the cross-resource search"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_short_query_returns_nothing(self):
        """Test queries under two characters"""
        response = self.client.get('/api/v1/search/', {'q': 'a'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'results': [], 'total': 0})

    def test_search_across_resources(self):
        """Test a query matching a brand, an SOP and an agent"""
        TestDataFactory.create_brand(name='Zephyr Audio')
        TestDataFactory.create_sop(name='Zephyr returns')
        TestDataFactory.create_agent(name='Zephyr Agent')
        response = self.client.get('/api/v1/search/', {'q': 'zephyr'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        types = {result['type'] for result in response.data['results']}
        self.assertEqual(types, {'brand', 'sop', 'agent'})
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['query'], 'zephyr')


class TracerUpdateTests(TestCase):
    """Test tracer updates written by the audit signals and the audit endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_insert_writes_one_row_per_column(self):
        """Test creating a brand traces its non-null columns"""
        brand = run_audited(self.user.pk, lambda: Brand.objects.create(name='Acme'))
        rows = TracerUpdate.objects.filter(source_table='brands', source_key=str(brand.pk))
        fields = set(rows.values_list('field_name', flat=True))
        self.assertIn('name', fields)
        self.assertNotIn('updated_at', fields)
        self.assertTrue(all(row.action_type == 'INSERT' for row in rows))
        self.assertTrue(all(row.changed_by == str(self.user.pk) for row in rows))

    def test_update_writes_changed_columns_only(self):
        """Test updating a brand traces only what changed"""
        brand = TestDataFactory.create_brand(name='Acme')
        brand.name = 'Acme 2'
        brand.save()
        rows = TracerUpdate.objects.filter(source_table='brands', action_type='UPDATE')
        self.assertEqual(list(rows.values_list('field_name', 'old_value', 'new_value')), [('name', 'Acme', 'Acme 2')])

    def test_delete_is_traced(self):
        """Test deleting a brand traces its last values"""
        brand = TestDataFactory.create_brand(name='Gone')
        key = str(brand.pk)
        brand.delete()
        self.assertTrue(TracerUpdate.objects.filter(
            source_key=key, action_type='DELETE', field_name='name', old_value='Gone'
        ).exists())

    def test_suspended_signals_write_nothing(self):
        """Test maintenance blocks skip tracing"""
        with suspend_audit_signals():
            TestDataFactory.create_brand()
        self.assertFalse(TracerUpdate.objects.filter(source_table='brands').exists())

    def test_untraced_tables(self):
        """Test performance rows are not traced"""
        TestDataFactory.create_performance(qa_score=90)
        self.assertFalse(TracerUpdate.objects.filter(source_table='performances').exists())

    def test_audit_requires_a_filter(self):
        """Test the audit endpoint without parameters"""
        response = self.client.get('/api/v1/audit/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Table, action, or related ID parameter is required')

    def test_audit_by_brand_scope(self):
        """Test a brand scope includes its categories and products"""
        product = TestDataFactory.create_product()
        brand = product.brand
        response = self.client.get('/api/v1/audit/', {'brandId': str(brand.pk)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tables = {log['sourceTable'] for log in response.data['logs']}
        self.assertEqual(tables, {'brands', 'kategori_produks', 'subkategori_produks', 'produks'})

    def test_record_history_groups_saves(self):
        """Test history is grouped per save, oldest first"""
        brand = TestDataFactory.create_brand(name='First')
        brand.name = 'Second'
        brand.save()
        response = self.client.get('/api/v1/audit/history/', {'table': 'brands', 'recordId': str(brand.pk)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        history = response.data['history']
        self.assertEqual([entry['action'] for entry in history], ['INSERT', 'UPDATE'])
        self.assertEqual(history[1]['changes'], [{'field': 'name', 'oldValue': 'First', 'newValue': 'Second'}])

    def test_tracer_updates_resolve_names(self):
        """Test foreign keys and the acting user are shown by name"""
        category = TestDataFactory.create_category()
        run_audited(self.user.pk, lambda: TestDataFactory.create_subcategory(category=category, name='Wireless'))
        response = self.client.get('/api/v1/tracer-updates/', {'categoryId': str(category.pk)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        parent_row = next(
            row for row in response.data
            if row['sourceTable'] == 'subkategori_produks' and row['fieldName'] == 'Kategori Produk'
        )
        self.assertEqual(parent_row['newValue'], category.name)
        self.assertEqual(parent_row['changedBy'], self.user.name)
        self.assertEqual(parent_row['relatedTableInfo'][0]['value'], category.name)

    def test_tracer_updates_require_scope(self):
        """Test the tracer endpoint without scope or table"""
        response = self.client.get('/api/v1/tracer-updates/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_format_table_name(self):
        """Test table names are title cased"""
        self.assertEqual(audit.format_table_name('kategori_produks'), 'Kategori Produks')


class NotificationAPITests(TestCase):
    """Test notifications built from tracer updates"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_notifications_carry_parent_info(self):
        """Test a product notification names its place in the catalog"""
        product = TestDataFactory.create_product(name='Speaker')
        response = self.client.get('/api/v1/notifications/', {'limit': 500})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        notification = next(
            item for item in response.data['notifications']
            if item['sourceTable'] == 'produks' and item['sourceKey'] == str(product.pk)
        )
        self.assertEqual(notification['recordName'], 'Speaker')
        self.assertEqual(notification['parentInfo']['brandName'], product.brand.name)
        self.assertEqual(notification['title'], f"Produks - {notification['fieldName']}")
        self.assertFalse(notification['isRead'])
        self.assertEqual(response.data['unreadCount'], len(response.data['notifications']))

    def test_mark_read_requires_list(self):
        """Test marking notifications read without ids"""
        response = self.client.post('/api/v1/notifications/', {'notificationIds': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'notificationIds array is required')

    def test_mark_read(self):
        """Test marking notifications read"""
        response = self.client.post('/api/v1/notifications/', {'notificationIds': [1, 2]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['markedCount'], 2)


class UtilsTests(TestCase):
    """Test shared helpers"""

    def test_clean_text(self):
        """Test only non-blank strings survive"""
        self.assertEqual(clean_text('  FAQ '), 'FAQ')
        self.assertIsNone(clean_text('   '))
        self.assertIsNone(clean_text(123))
        self.assertIsNone(clean_text(None))

    def test_normalize_empty_strings(self):
        """Test blank strings become None recursively"""
        self.assertEqual(
            normalize_empty_strings({'a': '  ', 'b': [' x ', ''], 'c': 3}),
            {'a': None, 'b': ['x', None], 'c': 3},
        )

    def test_parse_positive_int(self):
        """Test junk and non-positive values fall back to the default"""
        self.assertEqual(parse_positive_int('5', 10), 5)
        self.assertEqual(parse_positive_int('abc', 10), 10)
        self.assertEqual(parse_positive_int('0', 10), 10)
        self.assertEqual(parse_positive_int('500', 10, maximum=100), 100)

    def test_parse_json_field(self):
        """Test malformed JSON falls back to the default"""
        self.assertEqual(parse_json_field('[1, 2]'), [1, 2])
        self.assertEqual(parse_json_field('{oops', default=[]), [])
        self.assertEqual(parse_json_field(None, default={}), {})

    def test_paginate(self):
        """Test page slicing and the pagination block"""
        for _ in range(3):
            TestDataFactory.create_brand()
        request = mock.Mock(query_params={'page': '2', 'limit': '2'})
        items, pagination = paginate(Brand.objects.all(), request)
        self.assertEqual(len(items), 1)
        self.assertEqual(pagination, {'page': 2, 'limit': 2, 'total': 3, 'pages': 2})

    @mock.patch('backend.core.utils.time.sleep')
    def test_with_retry_retries_stale_statements(self, sleep):
        """Test prepared statement errors are retried"""
        fn = mock.Mock(side_effect=[OperationalError('prepared statement "s1" does not exist'), 'ok'])
        self.assertEqual(with_retry(fn), 'ok')
        self.assertEqual(fn.call_count, 2)
        sleep.assert_called_once_with(0.5)

    def test_with_retry_raises_other_errors(self):
        """Test other database errors propagate immediately"""
        fn = mock.Mock(side_effect=OperationalError('connection refused'))
        with self.assertRaises(OperationalError):
            with_retry(fn)
        self.assertEqual(fn.call_count, 1)

    def test_run_audited_tags_user(self):
        """Test the acting user is visible only inside the block"""
        seen = run_audited('abc', get_audit_user)
        self.assertEqual(seen, 'abc')
        self.assertIsNone(get_audit_user())


class CacheSignalTests(TestCase):
    """Test agent stats cache invalidation"""

    def setUp(self):
        cache.clear()

    def test_agent_change_invalidates_stats(self):
        """Test saving an agent drops the cached stats after commit"""
        cache.set(AGENT_STATS_CACHE_KEY, {'total': 1})
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_agent()
        self.assertIsNone(cache.get(AGENT_STATS_CACHE_KEY))

    def test_other_models_leave_stats(self):
        """Test unrelated saves keep the cached stats"""
        cache.set(AGENT_STATS_CACHE_KEY, {'total': 1})
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_brand()
        self.assertEqual(cache.get(AGENT_STATS_CACHE_KEY), {'total': 1})


@override_settings(SUPABASE_URL='https://proj.supabase.co', SUPABASE_SERVICE_ROLE_KEY='', SUPABASE_BUCKET_NAME='knowledge')
class StorageTests(TestCase):
    """Test storage path helpers"""

    def test_build_storage_path(self):
        """Test stored names keep the extension under the folder"""
        path = storage.build_storage_path('/knowledge/detail/', 'logo.PNG')
        self.assertRegex(path, r'^knowledge/detail/\d+_[a-z0-9]{13}\.PNG$')

    def test_extract_path_from_public_url(self):
        """Test public URLs map back to bucket paths"""
        url = 'https://proj.supabase.co/storage/v1/object/public/knowledge/images/a.png?t=1'
        self.assertEqual(storage.extract_path_from_public_url(url), 'images/a.png')
        self.assertIsNone(storage.extract_path_from_public_url(url, bucket='other'))
        self.assertIsNone(storage.extract_path_from_public_url('https://elsewhere.test/a.png'))

    def test_delete_file_ignores_foreign_urls(self):
        """Test URLs outside the bucket are skipped"""
        self.assertFalse(storage.delete_file('https://elsewhere.test/a.png'))
        self.assertEqual(storage.delete_files(['', None]), 0)

    def test_upload_without_credentials(self):
        """Test uploads fail clearly when storage is not configured"""
        with self.assertRaises(StorageError):
            storage.upload_file(SimpleUploadedFile('a.png', b'x'), 'images')

    def test_indexed_files_stop_at_gap(self):
        """Test indexed uploads stop at the first missing index"""
        files = {
            'logo_0': SimpleUploadedFile('a.png', b'a'),
            'logo_1': SimpleUploadedFile('b.png', b''),
            'logo_2': SimpleUploadedFile('c.png', b'c'),
            'logo_4': SimpleUploadedFile('e.png', b'e'),
        }
        self.assertEqual([f.name for f in storage.indexed_files(files, 'logo')], ['a.png', 'c.png'])


class CoreCommandTests(TestCase):
    """Test the core management commands"""

    def test_create_super_admin(self):
        """Test the command creates and then updates the super admin"""
        out = StringIO()
        call_command('create_super_admin', '--email', 'root@test.com', '--password', 'rootpass', stdout=out)
        self.assertIn('Created super admin', out.getvalue())
        call_command('create_super_admin', '--email', 'root@test.com', '--password', 'newpass', stdout=out)
        user = User.objects.get(email='root@test.com')
        self.assertEqual(user.role, User.ROLE_SUPER_ADMIN)
        self.assertTrue(user.check_password('newpass'))

    @override_settings(SUPER_ADMIN_EMAIL='', SUPER_ADMIN_PASSWORD='')
    def test_create_super_admin_needs_credentials(self):
        """Test the command refuses without credentials"""
        with self.assertRaises(CommandError):
            call_command('create_super_admin', stdout=StringIO())

    def test_clear_tracer_updates(self):
        """Test --noinput clears the tracer table"""
        TestDataFactory.create_brand()
        call_command('clear_tracer_updates', '--noinput', stdout=StringIO())
        self.assertFalse(TracerUpdate.objects.exists())

    @skipIf(connection.vendor == 'postgresql', 'triggers are installable on PostgreSQL')
    def test_setup_audit_triggers_needs_postgresql(self):
        """Test trigger setup refuses other database engines"""
        with self.assertRaises(CommandError):
            call_command('setup_audit_triggers', stdout=StringIO())
