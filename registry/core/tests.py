"""
Test suite for accounts, officers, permissions, branding and audit logs
"""
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status

from registry.core.models import User, AuditLog
from registry.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class AuthenticationTests(TestCase):
    """Test login, refresh, me and change-password"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaskiadmin', password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'KaskiAdmin',
            'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], 'admin')

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'kaskiadmin',
            'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_user_cannot_login(self):
        self.admin.is_active = False
        self.admin.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'kaskiadmin',
            'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        login = self.client.post('/api/v1/auth/login/', {
            'username': 'kaskiadmin',
            'password': 'secret123',
        }, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'kaskiadmin')
        self.assertIn('permissions', response.data)
        self.assertIn('branding', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_change_password(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/auth/change-password/', {
            'old_password': 'secret123',
            'new_password': 'newsecret456',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password('newsecret456'))

    def test_change_password_wrong_old_password(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/auth/change-password/', {
            'old_password': 'nope',
            'new_password': 'newsecret456',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('old_password', response.data)


class SuperadminUserTests(TestCase):
    """Test superadmin account management"""

    def setUp(self):
        self.superadmin = TestDataFactory.create_superadmin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.superadmin)

    def _admin_payload(self, **overrides):
        payload = {
            'username': 'pokhara',
            'password': 'pokhara123',
            'email': 'pokhara@test.com',
            'contact_number': '9812345678',
            'role': 'admin',
            'branding': {'brand_name': 'Pokhara Homestays'},
        }
        payload.update(overrides)
        return payload

    def test_create_admin(self):
        response = self.client.post('/api/v1/superadmin/users/', self._admin_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'admin')
        self.assertEqual(response.data['branding']['brand_name'], 'Pokhara Homestays')
        self.assertFalse(response.data['permissions']['homestay_edit'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='User').exists())

    def test_create_admin_requires_branding(self):
        payload = self._admin_payload()
        payload.pop('branding')
        response = self.client.post('/api/v1/superadmin/users/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('branding', response.data)

    def test_create_user_invalid_contact_number(self):
        response = self.client.post('/api/v1/superadmin/users/',
                                    self._admin_payload(contact_number='12345'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('contact_number', response.data)

    def test_create_user_invalid_role(self):
        response = self.client.post('/api/v1/superadmin/users/',
                                    self._admin_payload(role='owner'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_user_missing_fields(self):
        response = self.client.post('/api/v1/superadmin/users/', {'username': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_username_conflict(self):
        TestDataFactory.create_admin(username='pokhara')
        response = self.client.post('/api/v1/superadmin/users/',
                                    self._admin_payload(email='other@test.com'), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Username already exists')

    def test_duplicate_email_conflict(self):
        TestDataFactory.create_admin(username='other')
        response = self.client.post('/api/v1/superadmin/users/',
                                    self._admin_payload(email='other@test.com'), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Email already exists')

    def test_list_users_by_role(self):
        TestDataFactory.create_admin()
        response = self.client.get('/api/v1/superadmin/users/?role=admin')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['role'], 'admin')

    def test_update_user(self):
        admin = TestDataFactory.create_admin()
        response = self.client.patch(f'/api/v1/superadmin/users/{admin.pk}/',
                                     {'contact_number': '9800011122'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['contact_number'], '9800011122')

    def test_delete_user(self):
        admin = TestDataFactory.create_admin()
        response = self.client.delete(f'/api/v1/superadmin/users/{admin.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=admin.pk).exists())
        self.assertTrue(AuditLog.objects.filter(action='delete', object_id=str(admin.pk)).exists())

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/superadmin/users/{self.superadmin.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_manage_users(self):
        admin = TestDataFactory.create_admin()
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.get('/api/v1/superadmin/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PermissionsAndBrandingTests(TestCase):
    """Test permission maps and branding updates"""

    def setUp(self):
        self.superadmin = TestDataFactory.create_superadmin()
        self.admin = TestDataFactory.create_admin(permissions={'homestay_edit': False})
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.superadmin)

    def test_update_permissions_merges(self):
        response = self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/permissions/', {
            'permissions': {'homestay_approval': True},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['permissions']['homestay_approval'])
        self.assertFalse(response.data['permissions']['homestay_edit'])

    def test_update_permissions_bare_object(self):
        response = self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/permissions/',
                                     {'homestay_edit': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.has_flag('homestay_edit'))

    def test_update_permissions_rejects_non_boolean(self):
        response = self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/permissions/', {
            'permissions': {'homestay_edit': 'maybe'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_branding_merge_keeps_other_contact_fields(self):
        response = self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/branding/', {
            'contact_details': {'website': 'https://example.com'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        contact = response.data['branding']['contact_details']
        self.assertEqual(contact['website'], 'https://example.com')
        self.assertEqual(contact['phone'], '9801234567')

    def test_delete_slider_image(self):
        response = self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/branding/',
                                     {'delete_slider_index': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['branding']['slider_images'], ['/uploads/slider-2.jpg'])

    def test_cannot_delete_last_slider_image(self):
        self.admin.branding = {'slider_images': ['/uploads/only.jpg']}
        self.admin.save()
        response = self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/branding/',
                                     {'delete_slider_index': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_branding_only_for_admins(self):
        response = self.client.get(f'/api/v1/superadmin/users/{self.superadmin.pk}/branding/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_audit_log_list(self):
        self.client.patch(f'/api/v1/superadmin/users/{self.admin.pk}/permissions/',
                          {'homestay_edit': True}, format='json')
        response = self.client.get('/api/v1/superadmin/audit-logs/?action=permissions_change')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['username'], self.superadmin.username)


class OfficerManagementTests(TestCase):
    """Test admin-side officer management"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.other_admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_officer(self):
        response = self.client.post('/api/v1/admin/officers/', {
            'username': 'officer1',
            'password': 'officer123',
            'email': 'officer1@test.com',
            'contact_number': '9800000001',
            'permissions': {'homestay_edit': True},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'officer')
        self.assertEqual(response.data['parent_admin_username'], self.admin.username)
        self.assertTrue(response.data['permissions']['homestay_edit'])
        self.assertFalse(response.data['permissions']['homestay_delete'])

    def test_list_only_own_officers(self):
        TestDataFactory.create_officer(self.admin)
        TestDataFactory.create_officer(self.other_admin)
        response = self.client.get('/api/v1/admin/officers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_cannot_delete_other_tenants_officer(self):
        officer = TestDataFactory.create_officer(self.other_admin)
        response = self.client.delete(f'/api/v1/admin/officers/{officer.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_officer(self):
        officer = TestDataFactory.create_officer(self.admin)
        response = self.client.delete(f'/api/v1/admin/officers/{officer.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=officer.pk).exists())

    def test_reset_password(self):
        officer = TestDataFactory.create_officer(self.admin)
        response = self.client.post(f'/api/v1/admin/officers/{officer.pk}/reset-password/',
                                    {'new_password': 'fresh1234'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        officer.refresh_from_db()
        self.assertTrue(officer.check_password('fresh1234'))

    def test_toggle_status(self):
        officer = TestDataFactory.create_officer(self.admin)
        response = self.client.patch(f'/api/v1/admin/officers/{officer.pk}/status/',
                                     {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_toggle_status_requires_boolean(self):
        officer = TestDataFactory.create_officer(self.admin)
        response = self.client.patch(f'/api/v1/admin/officers/{officer.pk}/status/',
                                     {'is_active': 'no'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_officer_cannot_manage_officers(self):
        officer = TestDataFactory.create_officer(self.admin)
        client = AuthenticatedAPIClient().authenticate_user(officer)
        response = client.get('/api/v1/admin/officers/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UserModelTests(TestCase):
    """Test role helpers on the user model"""

    def test_tenant_username(self):
        admin = TestDataFactory.create_admin(username='lamjung')
        officer = TestDataFactory.create_officer(admin)
        superadmin = TestDataFactory.create_superadmin()
        self.assertEqual(admin.tenant_username, 'lamjung')
        self.assertEqual(officer.tenant_username, 'lamjung')
        self.assertIsNone(superadmin.tenant_username)

    def test_has_flag(self):
        admin = TestDataFactory.create_admin(permissions={'homestay_edit': True})
        self.assertTrue(admin.has_flag('homestay_edit'))
        self.assertFalse(admin.has_flag('homestay_delete'))
        self.assertTrue(TestDataFactory.create_superadmin().has_flag('homestay_delete'))

    def test_username_is_lowercased(self):
        admin = TestDataFactory.create_admin(username='MixedCase')
        self.assertEqual(admin.username, 'mixedcase')


class SeedSuperadminCommandTests(TestCase):
    """Test the seed_superadmin management command"""

    def test_creates_superadmin(self):
        out = StringIO()
        call_command('seed_superadmin', username='root', email='root@test.com',
                     password='rootpass123', stdout=out)
        user = User.objects.get(username='root')
        self.assertEqual(user.role, 'superadmin')
        self.assertTrue(user.check_password('rootpass123'))

    def test_skips_when_superadmin_exists(self):
        TestDataFactory.create_superadmin()
        call_command('seed_superadmin', username='root', email='root@test.com',
                     password='rootpass123', stdout=StringIO())
        self.assertFalse(User.objects.filter(username='root').exists())

    def test_requires_password(self):
        with self.assertRaises(CommandError):
            call_command('seed_superadmin', username='root', email='root@test.com',
                         password='', stdout=StringIO())
