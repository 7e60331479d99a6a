"""
Test utilities and factories for creating test data
"""
import random
import string

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from registry.core.models import DEFAULT_PERMISSIONS
from registry.customfields.models import CustomField, CustomFieldAssignment
from registry.homestays.authentication import HomestayAccessToken
from registry.homestays.models import Homestay, Official, Contact

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_superadmin(username=None, password='testpass123'):
        """Create a superadmin with every permission flag"""
        if not username:
            username = f'super_{TestDataFactory.random_string(6)}'
        return User.objects.create_user(
            username=username,
            email=f'{username}@test.com',
            password=password,
            contact_number='9800000000',
            role=User.ROLE_SUPERADMIN,
            permissions={flag: True for flag in DEFAULT_PERMISSIONS},
            is_staff=True,
            is_superuser=True,
        )

    @staticmethod
    def create_admin(username=None, password='testpass123', permissions=None, branding=None):
        """Create a tenant admin; permission flags default to all granted"""
        if not username:
            username = f'admin_{TestDataFactory.random_string(6)}'
        if permissions is None:
            permissions = {flag: True for flag in DEFAULT_PERMISSIONS}
        if branding is None:
            branding = {
                'brand_name': f'{username.title()} Homestays',
                'slider_images': ['/uploads/slider-1.jpg', '/uploads/slider-2.jpg'],
                'contact_details': {'phone': '9801234567', 'email': f'{username}@test.com'},
            }
        return User.objects.create_user(
            username=username,
            email=f'{username}@test.com',
            password=password,
            contact_number='9811111111',
            role=User.ROLE_ADMIN,
            permissions=permissions,
            branding=branding,
        )

    @staticmethod
    def create_officer(parent_admin, username=None, password='testpass123', permissions=None):
        """Create an officer under `parent_admin`; only dashboard access is granted by default"""
        if not username:
            username = f'officer_{TestDataFactory.random_string(6)}'
        perms = dict(DEFAULT_PERMISSIONS, admin_dashboard_access=True)
        perms.update(permissions or {})
        return User.objects.create_user(
            username=username,
            email=f'{username}@test.com',
            password=password,
            contact_number='9822222222',
            role=User.ROLE_OFFICER,
            permissions=perms,
            parent_admin=parent_admin,
        )

    @staticmethod
    def create_homestay(admin_username, name=None, province=('Bagmati', 'वागमती'),
                        district=('Kathmandu', 'काठमाडौं'),
                        municipality=('Kathmandu Metropolitan City', 'काठमाडौं महानगरपालिका'),
                        ward=('5', '५'), **kwargs):
        """Create a homestay; address parts are (en, ne) pairs"""
        if not name:
            name = f'Homestay {TestDataFactory.random_string(6)}'
        raw_password = kwargs.pop('raw_password', 'homestay123')
        homestay_id = kwargs.pop('homestay_id', None) or f'{TestDataFactory.random_string(8)}-{random.randint(0, 999999):06d}'
        formatted = kwargs.pop('formatted_address', None) or (
            f'{municipality[0]}, {district[0]}, {province[0]}',
            f'{municipality[1]}, {district[1]}, {province[1]}',
        )
        homestay = Homestay(
            homestay_id=homestay_id,
            name=name,
            admin_username=admin_username,
            province_en=province[0], province_ne=province[1],
            district_en=district[0], district_ne=district[1],
            municipality_en=municipality[0], municipality_ne=municipality[1],
            ward_en=ward[0], ward_ne=ward[1],
            formatted_address_en=formatted[0], formatted_address_ne=formatted[1],
            **kwargs
        )
        homestay.set_password(raw_password)
        homestay.save()
        return homestay

    @staticmethod
    def create_official(homestay, name='Ram Bahadur', role='Chairperson'):
        return Official.objects.create(
            homestay=homestay, name=name, role=role, contact_no='9840000000', gender='male',
        )

    @staticmethod
    def create_contact(homestay, name='Sita Tamang'):
        return Contact.objects.create(
            homestay=homestay, name=name, mobile='9841000000', email='contact@test.com',
        )

    @staticmethod
    def create_custom_field(label='Has Parking', field_type=CustomField.TYPE_TEXT, homestays=None, **kwargs):
        """Create a custom field and attach it to `homestays`"""
        field = CustomField.objects.create(label=label, field_type=field_type, **kwargs)
        for homestay in homestays or []:
            CustomFieldAssignment.objects.create(field=field, homestay=homestay)
        return field


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def authenticate_homestay(self, homestay):
        """Authenticate the client as the owner of `homestay`"""
        token = HomestayAccessToken.for_homestay(homestay)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
