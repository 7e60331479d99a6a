"""
Tests for address lookup tables and the cascading location selection
"""
import json
import shutil
import tempfile
from pathlib import Path

from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from registry.core.test_utils import TestDataFactory
from registry.homestays.models import Homestay
from registry.locations import lookup
from registry.locations.cascade import LocationSelection, InvalidLocation, apply_location_filter


class LookupTests(SimpleTestCase):
    """Test bundled lookup tables"""

    def setUp(self):
        lookup.clear_cache()

    def test_provinces(self):
        provinces = lookup.provinces()
        self.assertEqual(len(provinces), 7)
        self.assertIn({'en': 'Gandaki', 'ne': 'गण्डकी'}, provinces)

    def test_districts_accept_either_language(self):
        by_english = lookup.districts_for('Gandaki')
        by_nepali = lookup.districts_for('गण्डकी')
        self.assertEqual(by_english, by_nepali)
        self.assertIn({'en': 'Kaski', 'ne': 'कास्की'}, by_english)

    def test_unknown_parent_has_no_children(self):
        self.assertEqual(lookup.districts_for('Atlantis'), [])
        self.assertEqual(lookup.municipalities_for(''), [])

    def test_translate_nepali_to_english(self):
        self.assertEqual(lookup.translate('काठमाडौं', lookup.DISTRICT), 'Kathmandu')
        self.assertEqual(lookup.translate('पोखरा महानगरपालिका', lookup.MUNICIPALITY), 'Pokhara Metropolitan City')

    def test_translate_normalizes_whitespace(self):
        self.assertEqual(lookup.translate('पोखरा   महानगरपालिका', lookup.MUNICIPALITY), 'Pokhara Metropolitan City')

    def test_translate_unknown_returns_input(self):
        self.assertEqual(lookup.translate('अज्ञात ठाउँ', lookup.DISTRICT), 'अज्ञात ठाउँ')

    def test_bilingual(self):
        self.assertEqual(lookup.bilingual('kaski', lookup.DISTRICT), {'en': 'Kaski', 'ne': 'कास्की'})
        self.assertEqual(lookup.bilingual('', lookup.DISTRICT), {'en': '', 'ne': ''})

    def test_translate_ward(self):
        self.assertEqual(lookup.translate_ward('१२'), '12')
        self.assertEqual(lookup.translate_ward(7), '7')
        self.assertEqual(lookup.translate_ward(None), '')


class MissingDataTests(SimpleTestCase):
    """Test behaviour when the data directory is empty"""

    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        lookup.clear_cache()

    def tearDown(self):
        shutil.rmtree(self.data_dir)
        lookup.clear_cache()

    def test_missing_files_yield_empty_lists(self):
        with override_settings(ADDRESS_DATA_DIR=Path(self.data_dir)):
            lookup.clear_cache()
            self.assertEqual(lookup.provinces(), [])
            self.assertEqual(lookup.districts_for('Gandaki'), [])

    def test_custom_data_dir(self):
        Path(self.data_dir, 'provinces.json').write_text(
            json.dumps([{'en': 'Test', 'ne': 'परीक्षण'}]), encoding='utf-8')
        with override_settings(ADDRESS_DATA_DIR=Path(self.data_dir)):
            lookup.clear_cache()
            self.assertEqual(lookup.provinces(), [{'en': 'Test', 'ne': 'परीक्षण'}])


class CascadeTests(SimpleTestCase):
    """Test province -> district -> municipality selection changes"""

    def setUp(self):
        lookup.clear_cache()

    def test_reset_values_are_empty(self):
        selection = LocationSelection(province='all', district=None, municipality='')
        self.assertEqual(selection.as_dict(), {'province': '', 'district': '', 'municipality': ''})

    def test_province_change_clears_children(self):
        selection = LocationSelection('Gandaki', 'Kaski', 'Pokhara Metropolitan City')
        changed = selection.change('province', 'वागमती')
        self.assertEqual(changed.as_dict(), {'province': 'Bagmati', 'district': '', 'municipality': ''})

    def test_province_change_stores_english(self):
        changed = LocationSelection().change('province', 'गण्डकी')
        self.assertEqual(changed.province, 'Gandaki')
        self.assertEqual(changed.district, '')

    def test_district_change_clears_municipality(self):
        selection = LocationSelection('Gandaki', 'Kaski', 'Pokhara Metropolitan City')
        changed = selection.change('district', 'Lamjung')
        self.assertEqual(changed.as_dict(), {'province': 'Gandaki', 'district': 'Lamjung', 'municipality': ''})

    def test_district_requires_province(self):
        with self.assertRaises(InvalidLocation):
            LocationSelection().change('district', 'Kaski')

    def test_district_outside_province_rejected(self):
        with self.assertRaises(InvalidLocation):
            LocationSelection(province='Gandaki').change('district', 'Kathmandu')

    def test_municipality_requires_district(self):
        with self.assertRaises(InvalidLocation):
            LocationSelection(province='Gandaki').change('municipality', 'Pokhara Metropolitan City')

    def test_municipality_must_belong_to_district(self):
        selection = LocationSelection(province='Gandaki', district='Kaski')
        with self.assertRaises(InvalidLocation):
            selection.change('municipality', 'Kathmandu Metropolitan City')

    def test_free_text_municipality_without_bundled_data(self):
        selection = LocationSelection(province='Gandaki', district='Manang')
        changed = selection.change('municipality', 'Chame Rural Municipality')
        self.assertEqual(changed.municipality, 'Chame Rural Municipality')

    def test_reset_district_to_all(self):
        selection = LocationSelection('Gandaki', 'Kaski', 'Pokhara Metropolitan City')
        changed = selection.change('district', 'all')
        self.assertEqual(changed.as_dict(), {'province': 'Gandaki', 'district': '', 'municipality': ''})

    def test_unknown_level(self):
        with self.assertRaises(InvalidLocation):
            LocationSelection().change('country', 'Nepal')

    def test_validate_rebuilds_selection_in_english(self):
        selection = LocationSelection('गण्डकी', 'कास्की', 'पोखरा महानगरपालिका').validate()
        self.assertEqual(selection.as_dict(), {
            'province': 'Gandaki', 'district': 'Kaski', 'municipality': 'Pokhara Metropolitan City',
        })

    def test_validate_rejects_district_from_other_province(self):
        with self.assertRaises(InvalidLocation):
            LocationSelection('Koshi', 'Kathmandu', 'Kathmandu Metropolitan City').validate()

    def test_validate_rejects_municipality_without_district(self):
        with self.assertRaises(InvalidLocation):
            LocationSelection(province='Bagmati', municipality='Kathmandu Metropolitan City').validate()

    def test_options_follow_selection(self):
        options = LocationSelection(province='Gandaki').options()
        self.assertEqual(len(options['provinces']), 7)
        self.assertIn({'en': 'Kaski', 'ne': 'कास्की'}, options['districts'])
        self.assertEqual(options['municipalities'], [])

    def test_filter_kwargs_by_language(self):
        selection = LocationSelection(province='Gandaki', district='Kaski')
        self.assertEqual(selection.filter_kwargs('en'), {'province_en': 'Gandaki', 'district_en': 'Kaski'})
        self.assertEqual(selection.filter_kwargs('ne'), {'province_ne': 'गण्डकी', 'district_ne': 'कास्की'})


class LocationFilterTests(TestCase):
    """Test applying a selection to homestay querysets"""

    def setUp(self):
        lookup.clear_cache()
        self.kathmandu = TestDataFactory.create_homestay('tenant')
        self.kaski = TestDataFactory.create_homestay(
            'tenant', province=('Gandaki', 'गण्डकी'), district=('Kaski', 'कास्की'),
            municipality=('Pokhara Metropolitan City', 'पोखरा महानगरपालिका'),
        )

    def test_filter_by_nepali_district(self):
        selection = LocationSelection(province='गण्डकी', district='कास्की')
        result = apply_location_filter(Homestay.objects.all(), selection, 'ne')
        self.assertEqual(list(result), [self.kaski])

    def test_empty_selection_keeps_everything(self):
        result = apply_location_filter(Homestay.objects.all(), LocationSelection())
        self.assertEqual(result.count(), 2)


class LocationAPITests(SimpleTestCase):
    """Test public location endpoints"""

    def setUp(self):
        lookup.clear_cache()
        self.client = APIClient()

    def test_province_list(self):
        response = self.client.get('/api/v1/locations/provinces/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 7)

    def test_district_list(self):
        response = self.client.get('/api/v1/locations/districts/?province=Gandaki')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn({'en': 'Kaski', 'ne': 'कास्की'}, response.data)

    def test_municipality_list(self):
        response = self.client.get('/api/v1/locations/municipalities/?district=Kaski')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('Pokhara Metropolitan City', [m['en'] for m in response.data])

    def test_cascade_change(self):
        response = self.client.post('/api/v1/locations/cascade/', {
            'province': 'Gandaki',
            'district': 'Kaski',
            'municipality': 'Pokhara Metropolitan City',
            'level': 'province',
            'value': 'Bagmati',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['selection'], {'province': 'Bagmati', 'district': '', 'municipality': ''})
        self.assertIn({'en': 'Kathmandu', 'ne': 'काठमाडौं'}, response.data['options']['districts'])

    def test_cascade_change_requires_level(self):
        response = self.client.post('/api/v1/locations/cascade/', {'value': 'Bagmati'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cascade_change_invalid_value(self):
        response = self.client.post('/api/v1/locations/cascade/', {
            'province': 'Gandaki', 'level': 'district', 'value': 'Kathmandu',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_cascade_change_rejects_inconsistent_selection(self):
        response = self.client.post('/api/v1/locations/cascade/', {
            'province': 'Koshi',
            'district': 'Kathmandu',
            'level': 'municipality',
            'value': 'Kathmandu Metropolitan City',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)
