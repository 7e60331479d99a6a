"""
Test suite for web content, navigation and branding
"""
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from rest_framework.test import APIClient

from registry.content.branding import BrandingError, merge_branding, delete_slider_image, normalize_branding
from registry.content.models import WebContent, Navigation
from registry.content.services import deep_merge
from registry.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class BrandingHelperTests(SimpleTestCase):
    """Test branding merge rules"""

    def test_normalize_fills_missing_keys(self):
        branding = normalize_branding({'brand_name': 'Ilam Tea Stays', 'unknown': 1})
        self.assertEqual(branding['brand_name'], 'Ilam Tea Stays')
        self.assertEqual(branding['slider_images'], [])
        self.assertNotIn('unknown', branding)
        self.assertIn('website', branding['contact_details'])

    def test_merge_nested_keys(self):
        current = {'contact_details': {'phone': '123', 'email': 'a@b.com'}}
        merged = merge_branding(current, {'contact_details': {'phone': '456'}})
        self.assertEqual(merged['contact_details']['phone'], '456')
        self.assertEqual(merged['contact_details']['email'], 'a@b.com')

    def test_merge_rejects_bad_types(self):
        with self.assertRaises(BrandingError):
            merge_branding({}, {'slider_images': 'one.jpg'})
        with self.assertRaises(BrandingError):
            merge_branding({}, {'about_us': 'text'})

    def test_delete_slider_image(self):
        branding = delete_slider_image({'slider_images': ['a', 'b', 'c']}, 1)
        self.assertEqual(branding['slider_images'], ['a', 'c'])
        with self.assertRaises(BrandingError):
            delete_slider_image({'slider_images': ['a', 'b']}, 5)
        with self.assertRaises(BrandingError):
            delete_slider_image({'slider_images': ['a']}, 0)

    def test_deep_merge(self):
        base = {'a': {'b': 1, 'c': 2}, 'd': [1]}
        merged = deep_merge(base, {'a': {'b': 9}, 'd': [2]})
        self.assertEqual(merged, {'a': {'b': 9, 'c': 2}, 'd': [2]})
        self.assertEqual(base['a']['b'], 1)


class WebContentTests(TestCase):
    """Test web content endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.client = AuthenticatedAPIClient()
        self.url = '/api/v1/web-content/'

    def test_public_read_creates_defaults(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['site_info']['site_name'], 'Nepal StayLink')
        self.assertTrue(WebContent.objects.filter(admin_username='main').exists())

    def test_read_section(self):
        response = self.client.get(f'{self.url}?admin_username=kaski&section=footer')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('contact_info', response.data)

    def test_unknown_tenant_not_found(self):
        response = self.client.get(f'{self.url}?admin_username=nobody')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(WebContent.objects.count(), 0)

    def test_superadmin_cannot_create_content_for_unknown_tenant(self):
        self.client.authenticate_user(TestDataFactory.create_superadmin())
        response = self.client.patch(f'{self.url}?admin_username=nobody',
                                     {'site_info': {'site_name': 'X'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(WebContent.objects.filter(admin_username='nobody').exists())

    def test_read_unknown_section(self):
        response = self.client.get(f'{self.url}?section=sidebar')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_requires_authentication(self):
        response = self.client.patch(f'{self.url}?admin_username=kaski',
                                     {'site_info': {'site_name': 'X'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_admin_deep_merges_own_content(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.url}?admin_username=kaski',
                                     {'site_info': {'site_name': 'Kaski Homestays'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        site_info = response.data['content']['site_info']
        self.assertEqual(site_info['site_name'], 'Kaski Homestays')
        self.assertEqual(site_info['tagline'], 'Your Gateway to Authentic Homestays')

    def test_section_update_replaces_section(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.url}?admin_username=kaski&section=site_info',
                                     {'site_name': 'Only Name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content']['site_info'], {'site_name': 'Only Name'})

    def test_update_unknown_section_key(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.url}?admin_username=kaski', {'sidebar': {}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_edit_other_tenant(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.url}?admin_username=ilam',
                                     {'site_info': {'site_name': 'X'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_superadmin_edits_any_tenant(self):
        TestDataFactory.create_admin(username='ilam')
        self.client.authenticate_user(TestDataFactory.create_superadmin())
        response = self.client.patch(f'{self.url}?admin_username=ilam',
                                     {'site_info': {'site_name': 'Ilam'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_reset(self):
        self.client.authenticate_user(self.admin)
        self.client.patch(f'{self.url}?admin_username=kaski',
                          {'site_info': {'site_name': 'Changed'}}, format='json')
        response = self.client.post(f'{self.url}reset/?admin_username=kaski')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content']['site_info']['site_name'], 'Nepal StayLink')


class NavigationAndBrandingTests(TestCase):
    """Test navigation documents and public branding"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.client = AuthenticatedAPIClient()

    def test_read_navbar(self):
        response = self.client.get('/api/v1/navigation/navbar/?admin_username=kaski')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['nav_items']), 4)

    def test_unknown_tenant_navigation_not_found(self):
        response = self.client.get('/api/v1/navigation/navbar/?admin_username=nobody')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Navigation.objects.exists())

    def test_unknown_nav_type(self):
        response = self.client.get('/api/v1/navigation/sidebar/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_footer(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch('/api/v1/navigation/footer/?admin_username=kaski',
                                     {'newsletter_enabled': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['newsletter_enabled'])
        self.assertEqual(response.data['copyright'], 'Nepal StayLink. All rights reserved.')

    def test_anonymous_cannot_update_navigation(self):
        response = self.client.patch('/api/v1/navigation/footer/?admin_username=kaski',
                                     {'newsletter_enabled': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_public_branding(self):
        response = APIClient().get('/api/v1/branding/kaski/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['branding']['brand_name'], 'Kaski Homestays')

    def test_public_branding_inactive_admin(self):
        self.admin.is_active = False
        self.admin.save()
        response = APIClient().get('/api/v1/branding/kaski/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
