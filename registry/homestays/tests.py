"""
Test suite for homestay endpoints
Tests: public listing/detail/registration, admin CRUD and status, officer
scoping, superadmin listing and feature access
"""
from django.contrib.auth.hashers import check_password
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from registry.core.models import AuditLog
from registry.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from registry.homestays.cache import get_cached_homestay_detail
from registry.homestays.models import Homestay, Official, Contact
from registry.homestays.services import build_registration_address
from registry.homestays.utils import generate_homestay_id, generate_secure_password, flatten_address
from registry.locations import lookup


class HomestayUtilsTests(TestCase):
    """Test id/password generation and address helpers"""

    def test_generate_homestay_id(self):
        homestay_id = generate_homestay_id('Sunrise Homestay!')
        prefix, suffix = homestay_id.split('-')
        self.assertEqual(prefix, 'sunriseh')
        self.assertEqual(len(suffix), 6)
        self.assertTrue(suffix.isdigit())

    def test_generate_homestay_id_avoids_collisions(self):
        first = generate_homestay_id('Sunrise')
        TestDataFactory.create_homestay('tenant', homestay_id=first)
        second = generate_homestay_id('Sunrise')
        self.assertNotEqual(first, second)

    def test_generate_secure_password(self):
        password = generate_secure_password()
        self.assertEqual(len(password), 10)
        self.assertTrue(password.isalnum())

    def test_build_registration_address_translates_nepali(self):
        lookup.clear_cache()
        address = build_registration_address({
            'province': 'गण्डकी',
            'district': 'कास्की',
            'municipality': 'पोखरा महानगरपालिका',
            'ward': '६',
            'city': 'Pokhara',
            'tole': 'Lakeside',
        })
        self.assertEqual(address['province_en'], 'Gandaki')
        self.assertEqual(address['district_en'], 'Kaski')
        self.assertEqual(address['municipality_en'], 'Pokhara Metropolitan City')
        self.assertEqual(address['ward_en'], '6')
        self.assertEqual(address['ward_ne'], '६')
        self.assertEqual(address['formatted_address_en'],
                         'Lakeside, Pokhara, Pokhara Metropolitan City, Kaski, Gandaki')

    def test_flatten_address(self):
        homestay = TestDataFactory.create_homestay('tenant')
        flat = flatten_address(homestay.address, 'ne')
        self.assertEqual(flat['district'], 'काठमाडौं')
        self.assertEqual(flat['translations']['district'], {'en': 'Kathmandu', 'ne': 'काठमाडौं'})

    def test_blank_dhsr_stored_as_null(self):
        first = TestDataFactory.create_homestay('tenant', dhsr_no='')
        second = TestDataFactory.create_homestay('tenant', dhsr_no='')
        self.assertIsNone(first.dhsr_no)
        self.assertIsNone(second.dhsr_no)

    def test_formatted_address_derived_on_save(self):
        homestay = Homestay.objects.create(
            homestay_id='bare-001', name='Bare', admin_username='tenant', tole='Sauraha',
            province_en='Bagmati', province_ne='वागमती', district_en='Chitwan', district_ne='चितवन',
        )
        self.assertEqual(homestay.formatted_address_en, 'Sauraha, Chitwan, Bagmati')
        self.assertEqual(homestay.formatted_address_ne, 'Sauraha, चितवन, वागमती')

    def test_explicit_formatted_address_kept(self):
        homestay = Homestay.objects.create(
            homestay_id='bare-002', name='Bare', admin_username='tenant', district_en='Chitwan',
            formatted_address_en='Near the river', formatted_address_ne='नदी नजिक',
        )
        self.assertEqual(homestay.formatted_address_en, 'Near the river')


class PublicHomestayTests(TestCase):
    """Test public listing, detail and registration"""

    def setUp(self):
        lookup.clear_cache()
        cache.clear()
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.client = APIClient()
        self.kathmandu = TestDataFactory.create_homestay('kaski', name='Newa Home')
        self.pokhara = TestDataFactory.create_homestay(
            'kaski', name='Lakeside Stay', province=('Gandaki', 'गण्डकी'), district=('Kaski', 'कास्की'),
            municipality=('Pokhara Metropolitan City', 'पोखरा महानगरपालिका'),
            status=Homestay.STATUS_APPROVED,
        )

    def test_list_defaults_to_nepali(self):
        response = self.client.get('/api/v1/homestays/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total_count'], 2)
        districts = {item['address']['district'] for item in response.data['data']}
        self.assertEqual(districts, {'काठमाडौं', 'कास्की'})

    def test_list_in_english(self):
        response = self.client.get('/api/v1/homestays/?lang=en')
        districts = {item['address']['district'] for item in response.data['data']}
        self.assertEqual(districts, {'Kathmandu', 'Kaski'})
        self.assertIn('translations', response.data['data'][0]['address'])

    def test_list_shows_every_status(self):
        response = self.client.get('/api/v1/homestays/?lang=en')
        statuses = {item['status'] for item in response.data['data']}
        self.assertEqual(statuses, {'pending', 'approved'})

    def test_list_filter_by_district(self):
        response = self.client.get('/api/v1/homestays/?lang=en&province=Gandaki&district=Kaski')
        self.assertEqual(response.data['pagination']['total_count'], 1)
        self.assertEqual(response.data['data'][0]['name'], 'Lakeside Stay')

    def test_list_filter_by_nepali_district(self):
        response = self.client.get('/api/v1/homestays/?province=गण्डकी&district=कास्की')
        self.assertEqual(response.data['pagination']['total_count'], 1)

    def test_list_search(self):
        response = self.client.get('/api/v1/homestays/?lang=en&q=lakeside')
        self.assertEqual(response.data['pagination']['total_count'], 1)

    def test_list_search_city_and_description(self):
        TestDataFactory.create_homestay('kaski', name='Green Hill', city='Bandipur',
                                        description='Organic tea garden')
        response = self.client.get('/api/v1/homestays/?lang=en&q=Bandipur')
        self.assertEqual([item['name'] for item in response.data['data']], ['Green Hill'])
        response = self.client.get('/api/v1/homestays/?lang=en&q=tea')
        self.assertEqual([item['name'] for item in response.data['data']], ['Green Hill'])

    def test_list_search_matches_any_word(self):
        TestDataFactory.create_homestay('kaski', name='Green Hill', city='Bandipur')
        response = self.client.get('/api/v1/homestays/?lang=en&q=Green Lakeside')
        names = {item['name'] for item in response.data['data']}
        self.assertEqual(names, {'Green Hill', 'Lakeside Stay'})

    def test_list_search_nepali_district(self):
        response = self.client.get('/api/v1/homestays/?q=कास्की')
        self.assertEqual([item['name'] for item in response.data['data']], ['Lakeside Stay'])

    def test_list_pagination(self):
        response = self.client.get('/api/v1/homestays/?limit=1&page=2')
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['pagination']['page'], 2)
        self.assertEqual(response.data['pagination']['total_pages'], 2)

    def test_detail_includes_officials_and_contacts(self):
        TestDataFactory.create_official(self.pokhara)
        TestDataFactory.create_contact(self.pokhara)
        response = self.client.get(f'/api/v1/homestays/{self.pokhara.homestay_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['officials']), 1)
        self.assertEqual(len(response.data['contacts']), 1)
        self.assertNotIn('password', response.data)

    def test_detail_is_cached_and_invalidated(self):
        self.client.get(f'/api/v1/homestays/{self.pokhara.homestay_id}/')
        self.assertIsNotNone(get_cached_homestay_detail(self.pokhara.homestay_id))
        self.pokhara.name = 'Renamed'
        self.pokhara.save()
        self.assertIsNone(get_cached_homestay_detail(self.pokhara.homestay_id))
        response = self.client.get(f'/api/v1/homestays/{self.pokhara.homestay_id}/')
        self.assertEqual(response.data['name'], 'Renamed')

    def test_detail_not_found(self):
        response = self.client.get('/api/v1/homestays/missing-000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def _registration_payload(self, **overrides):
        payload = {
            'admin_username': 'Kaski',
            'name': 'Ghandruk Village Homestay',
            'village_name': 'Ghandruk',
            'dhsr_no': 'DHSR-001',
            'home_count': 5,
            'room_count': 10,
            'bed_count': 20,
            'homestay_type': 'community',
            'province': 'गण्डकी',
            'district': 'कास्की',
            'municipality': 'अन्नपूर्ण गाउँपालिका',
            'ward': '११',
            'local_attractions': ['natural:Annapurna View/अन्नपूर्ण दृश्य'],
            'officials': [
                {'name': 'Hari Gurung', 'role': 'Chairperson', 'contact_no': '9846000000', 'gender': 'male'},
                {'name': '', 'role': '', 'contact_no': ''},
            ],
            'contacts': [{'name': 'Maya Gurung', 'mobile': '9846000001'}],
        }
        payload.update(overrides)
        return payload

    def test_register(self):
        response = self.client.post('/api/v1/homestays/register/', self._registration_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['homestay_id'].startswith('ghandruk-'))
        self.assertEqual(len(response.data['password']), 10)

        homestay = Homestay.objects.get(homestay_id=response.data['homestay_id'])
        self.assertEqual(homestay.status, Homestay.STATUS_PENDING)
        self.assertEqual(homestay.admin_username, 'kaski')
        self.assertEqual(homestay.district_en, 'Kaski')
        self.assertEqual(homestay.municipality_en, 'Annapurna Rural Municipality')
        self.assertEqual(homestay.ward_en, '11')
        self.assertTrue(check_password(response.data['password'], homestay.password))
        self.assertEqual(Official.objects.filter(homestay=homestay).count(), 1)
        self.assertEqual(Contact.objects.filter(homestay=homestay).count(), 1)

    def test_register_unknown_admin(self):
        response = self.client.post('/api/v1/homestays/register/',
                                    self._registration_payload(admin_username='nobody'), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_register_duplicate_dhsr(self):
        TestDataFactory.create_homestay('kaski', dhsr_no='DHSR-001')
        response = self.client.post('/api/v1/homestays/register/', self._registration_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('dhsr_no', response.data)

    def test_register_invalid_counts(self):
        response = self.client.post('/api/v1/homestays/register/',
                                    self._registration_payload(room_count=0), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminHomestayTests(TestCase):
    """Test admin homestay management"""

    def setUp(self):
        lookup.clear_cache()
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.other_admin = TestDataFactory.create_admin(username='ilam')
        self.homestay = TestDataFactory.create_homestay('kaski', name='Own Homestay')
        self.foreign = TestDataFactory.create_homestay('ilam', name='Foreign Homestay')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_only_own_tenant(self):
        response = self.client.get('/api/v1/admin/homestays/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [item['name'] for item in response.data['data']]
        self.assertEqual(names, ['Own Homestay'])

    def test_create_homestay(self):
        response = self.client.post('/api/v1/admin/homestays/', {
            'name': 'Hill Top',
            'home_count': 2,
            'room_count': 4,
            'bed_count': 8,
            'homestay_type': 'private',
            'address': {
                'province': 'Gandaki',
                'district': 'कास्की',
                'ward': '३',
                'city': 'Pokhara',
            },
            'features': {'infrastructure': ['Parking', ' ', 'Wi-Fi']},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['admin_username'], 'kaski')
        self.assertIn('password', response.data)
        self.assertEqual(response.data['address']['district'], {'en': 'Kaski', 'ne': 'कास्की'})
        self.assertEqual(response.data['address']['ward'], {'en': '3', 'ne': '३'})
        self.assertEqual(response.data['features']['infrastructure'], ['Parking', 'Wi-Fi'])
        homestay = Homestay.objects.get(homestay_id=response.data['homestay_id'])
        self.assertTrue(homestay.check_password(response.data['password']))

    def test_cannot_access_other_tenant(self):
        response = self.client.get(f'/api/v1/admin/homestays/{self.foreign.homestay_id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_homestay(self):
        response = self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/',
                                     {'description': 'Near the lake'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['description'], 'Near the lake')

    def test_update_province_clears_lower_levels(self):
        response = self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/',
                                     {'address': {'province': 'Koshi'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        address = response.data['address']
        self.assertEqual(address['province'], {'en': 'Koshi', 'ne': 'कोशी'})
        self.assertEqual(address['district'], {'en': '', 'ne': ''})
        self.assertEqual(address['municipality'], {'en': '', 'ne': ''})
        self.assertNotIn('Kathmandu', address['formatted_address']['en'])

    def test_update_district_within_province(self):
        response = self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/',
                                     {'address': {'district': 'ललितपुर'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['address']['district'], {'en': 'Lalitpur', 'ne': 'ललितपुर'})
        self.assertEqual(response.data['address']['municipality'], {'en': '', 'ne': ''})

    def test_update_rejects_district_outside_province(self):
        response = self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/',
                                     {'address': {'district': 'Kaski'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.homestay.refresh_from_db()
        self.assertEqual(self.homestay.district_en, 'Kathmandu')

    def test_update_cannot_change_status(self):
        self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/',
                          {'status': 'approved'}, format='json')
        self.homestay.refresh_from_db()
        self.assertEqual(self.homestay.status, Homestay.STATUS_PENDING)

    def test_update_requires_edit_flag(self):
        admin = TestDataFactory.create_admin(permissions={'homestay_edit': False})
        homestay = TestDataFactory.create_homestay(admin.username)
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.patch(f'/api/v1/admin/homestays/{homestay.homestay_id}/',
                                {'description': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_upload_fields_require_upload_flags(self):
        admin = TestDataFactory.create_admin(permissions={'homestay_edit': True})
        homestay = TestDataFactory.create_homestay(admin.username)
        client = AuthenticatedAPIClient().authenticate_user(admin)
        url = f'/api/v1/admin/homestays/{homestay.homestay_id}/'
        response = client.patch(url, {'documents': ['/uploads/licence.pdf']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = client.patch(url, {'gallery_images': ['/uploads/a.jpg']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = client.patch(url, {'description': 'Still editable'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_upload_fields_with_flags(self):
        response = self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/', {
            'documents': ['/uploads/licence.pdf'], 'profile_image': '/uploads/front.jpg',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['documents'], ['/uploads/licence.pdf'])

    def test_delete_homestay(self):
        response = self.client.delete(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Homestay.objects.filter(pk=self.homestay.pk).exists())

    def test_status_any_transition(self):
        url = f'/api/v1/admin/homestays/{self.homestay.homestay_id}/status/'
        for new_status in ('rejected', 'approved', 'pending'):
            response = self.client.patch(url, {'status': new_status}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.data['status'], new_status)
        self.assertEqual(AuditLog.objects.filter(action='status_change', model_name='Homestay').count(), 3)

    def test_status_invalid_value(self):
        response = self.client.patch(f'/api/v1/admin/homestays/{self.homestay.homestay_id}/status/',
                                     {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_requires_approval_flag(self):
        admin = TestDataFactory.create_admin(permissions={'homestay_approval': False})
        homestay = TestDataFactory.create_homestay(admin.username)
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.patch(f'/api/v1/admin/homestays/{homestay.homestay_id}/status/',
                                {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_officials_and_contacts(self):
        base = f'/api/v1/admin/homestays/{self.homestay.homestay_id}'
        response = self.client.post(f'{base}/officials/', {
            'name': 'Bishnu', 'role': 'Secretary', 'contact_no': '9800000002', 'gender': 'female',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        official_id = response.data['id']

        response = self.client.patch(f'/api/v1/admin/officials/{official_id}/', {'role': 'Treasurer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'Treasurer')

        response = self.client.post(f'{base}/contacts/', {'name': 'Desk', 'mobile': '9800000003'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get(f'{base}/contacts/')
        self.assertEqual(len(response.data), 1)

    def test_cannot_touch_other_tenants_official(self):
        official = TestDataFactory.create_official(self.foreign)
        response = self.client.delete(f'/api/v1/admin/officials/{official.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Official.objects.filter(pk=official.pk).exists())

    def test_superadmin_create_requires_admin_username(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_superadmin())
        payload = {'name': 'Central', 'home_count': 1, 'room_count': 1, 'bed_count': 1, 'homestay_type': 'private'}
        response = client.post('/api/v1/admin/homestays/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        payload['admin_username'] = 'ilam'
        response = client.post('/api/v1/admin/homestays/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['admin_username'], 'ilam')


class OfficerHomestayTests(TestCase):
    """Test officer scoping and restrictions"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.officer = TestDataFactory.create_officer(self.admin, permissions={'homestay_edit': True})
        self.homestay = TestDataFactory.create_homestay('kaski')
        self.foreign = TestDataFactory.create_homestay('ilam')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.officer)

    def test_list_parent_tenant_only(self):
        response = self.client.get('/api/v1/officer/homestays/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['homestay_id'] for item in response.data], [self.homestay.homestay_id])

    def test_other_tenant_not_found(self):
        response = self.client.get(f'/api/v1/officer/homestays/{self.foreign.homestay_id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_edit_homestay(self):
        response = self.client.patch(f'/api/v1/officer/homestays/{self.homestay.homestay_id}/',
                                     {'directions': 'Take the left trail'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['directions'], 'Take the left trail')

    def test_cannot_change_status(self):
        response = self.client.patch(f'/api/v1/officer/homestays/{self.homestay.homestay_id}/',
                                     {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.homestay.refresh_from_db()
        self.assertEqual(self.homestay.status, Homestay.STATUS_PENDING)

    def test_edit_requires_flag(self):
        officer = TestDataFactory.create_officer(self.admin)
        client = AuthenticatedAPIClient().authenticate_user(officer)
        response = client.patch(f'/api/v1/officer/homestays/{self.homestay.homestay_id}/',
                                {'directions': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard_access_required(self):
        officer = TestDataFactory.create_officer(
            self.admin, permissions={'admin_dashboard_access': False, 'homestay_edit': True},
        )
        client = AuthenticatedAPIClient().authenticate_user(officer)
        response = client.get('/api/v1/officer/homestays/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_officer_image_upload_requires_flag(self):
        response = self.client.patch(f'/api/v1/officer/homestays/{self.homestay.homestay_id}/',
                                     {'profile_image': '/uploads/front.jpg'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_endpoints_forbidden(self):
        response = self.client.get('/api/v1/admin/homestays/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class HomestayOwnerTests(TestCase):
    """Test owner sign-in with homestay ID and password"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.homestay = TestDataFactory.create_homestay('kaski', name='Owner Stay', raw_password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_login(self):
        response = self.client.post('/api/v1/homestays/login/', {
            'homestay_id': self.homestay.homestay_id, 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['homestay_id'], self.homestay.homestay_id)
        self.assertEqual(response.data['name'], 'Owner Stay')

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get('/api/v1/homestays/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['homestay_id'], self.homestay.homestay_id)
        self.assertNotIn('password', response.data)

    def test_login_requires_both_fields(self):
        response = self.client.post('/api/v1/homestays/login/', {'homestay_id': self.homestay.homestay_id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_unknown_homestay(self):
        response = self.client.post('/api/v1/homestays/login/', {
            'homestay_id': 'missing-000000', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/homestays/login/', {
            'homestay_id': self.homestay.homestay_id, 'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_owner_updates_own_profile(self):
        self.client.authenticate_homestay(self.homestay)
        response = self.client.patch('/api/v1/homestays/me/', {
            'description': 'Terraced fields and mountain views',
            'dhsr_no': 'DHSR-999',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.homestay.refresh_from_db()
        self.assertEqual(self.homestay.description, 'Terraced fields and mountain views')
        self.assertIsNone(self.homestay.dhsr_no)
        log = AuditLog.objects.get(action='update', object_id=self.homestay.homestay_id)
        self.assertIsNone(log.user)
        self.assertEqual(log.changes['tenant'], 'kaski')

    def test_owner_cannot_change_status(self):
        self.client.authenticate_homestay(self.homestay)
        response = self.client.patch('/api/v1/homestays/me/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.homestay.refresh_from_db()
        self.assertEqual(self.homestay.status, Homestay.STATUS_PENDING)

    def test_me_requires_owner_token(self):
        response = self.client.get('/api/v1/homestays/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/homestays/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_token_refused_by_staff_endpoints(self):
        self.client.authenticate_homestay(self.homestay)
        response = self.client.get('/api/v1/admin/homestays/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class SuperadminHomestayTests(TestCase):
    """Test superadmin listing and feature access"""

    def setUp(self):
        self.superadmin = TestDataFactory.create_superadmin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.superadmin)
        for index in range(3):
            TestDataFactory.create_homestay('kaski', name=f'Kaski {index}', dhsr_no=f'DHSR/{index}')
        self.ilam = TestDataFactory.create_homestay('ilam', name='Tea Garden', village_name='Kanyam')

    def test_list_all_with_pagination(self):
        response = self.client.get('/api/v1/superadmin/homestays/?limit=2&skip=1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['homestays']), 2)
        self.assertEqual(response.data['pagination'], {'total': 4, 'limit': 2, 'skip': 1, 'has_more': True})

    def test_filter_by_admin_username(self):
        response = self.client.get('/api/v1/superadmin/homestays/?admin_username=ILAM')
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_search_by_village_and_dhsr(self):
        response = self.client.get('/api/v1/superadmin/homestays/?search=kanyam')
        self.assertEqual(response.data['pagination']['total'], 1)
        response = self.client.get('/api/v1/superadmin/homestays/?search=DHSR/2')
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_update_feature_access(self):
        url = f'/api/v1/superadmin/homestays/{self.ilam.homestay_id}/feature-access/'
        self.client.patch(url, {'feature_access': {'dashboard': True}}, format='json')
        response = self.client.patch(url, {'feature_access': {'reports': False}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['feature_access'], {'dashboard': True, 'reports': False})

    def test_admin_cannot_list_everything(self):
        admin = TestDataFactory.create_admin()
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.get('/api/v1/superadmin/homestays/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
