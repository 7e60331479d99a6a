"""Homestay registration"""
import logging

from django.db import transaction

from registry.locations import lookup
from .models import Homestay, Official, Contact, format_address
from .utils import generate_homestay_id, generate_secure_password

logger = logging.getLogger(__name__)


def build_registration_address(data):
    """Bilingual address columns from registration input given in either language"""
    province = lookup.bilingual(data['province'], lookup.PROVINCE)
    district = lookup.bilingual(data['district'], lookup.DISTRICT)
    municipality = lookup.bilingual(data['municipality'], lookup.MUNICIPALITY)
    ward_ne = data.get('ward', '')
    ward_en = lookup.translate_ward(ward_ne)
    city = data.get('city', '')
    tole = data.get('tole', '')
    return {
        'province_en': province['en'], 'province_ne': province['ne'],
        'district_en': district['en'], 'district_ne': district['ne'],
        'municipality_en': municipality['en'], 'municipality_ne': municipality['ne'],
        'ward_en': ward_en, 'ward_ne': ward_ne,
        'city': city, 'tole': tole,
        'formatted_address_en': format_address(tole, city, municipality['en'], district['en'], province['en']),
        'formatted_address_ne': format_address(tole, city, municipality['ne'], district['ne'], province['ne']),
    }


def register_homestay(data):
    """
    Create a pending homestay with its officials and contacts.

    Returns (homestay, password); the plain password is only available here.
    Officials without name, role and contact number and contacts without name
    and mobile are skipped.
    """
    password = generate_secure_password()
    with transaction.atomic():
        homestay = Homestay(
            homestay_id=generate_homestay_id(data['name']),
            admin_username=data['admin_username'],
            name=data['name'],
            village_name=data.get('village_name', ''),
            dhsr_no=data.get('dhsr_no') or None,
            home_count=data['home_count'],
            room_count=data['room_count'],
            bed_count=data['bed_count'],
            homestay_type=data['homestay_type'],
            directions=data.get('directions', ''),
            description=data.get('description', ''),
            local_attractions=data.get('local_attractions', []),
            tourism_services=data.get('tourism_services', []),
            infrastructure=data.get('infrastructure', []),
            status=Homestay.STATUS_PENDING,
            **build_registration_address(data),
        )
        homestay.set_password(password)
        homestay.save()

        for official in data.get('officials', []):
            if official.get('name') and official.get('role') and official.get('contact_no'):
                Official.objects.create(homestay=homestay, **official)
        for contact in data.get('contacts', []):
            if contact.get('name') and contact.get('mobile'):
                Contact.objects.create(homestay=homestay, **contact)

    logger.info(f"Registered homestay {homestay.homestay_id} under {homestay.admin_username}")
    return homestay, password
