"""
Test suite for custom fields
Tests: application by filter/selection, removal, values, reviews, notifications
"""
from django.test import TestCase
from rest_framework import status

from registry.core.models import AuditLog
from registry.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from registry.customfields.models import CustomField, CustomFieldValue, CustomFieldReview
from registry.customfields.services import (
    NoSelectionCriteria, InvalidFieldValue, build_application_payload, clean_filter, validate_value,
)


class ApplicationPayloadTests(TestCase):
    """Test client-side payload assembly"""

    definition = {'label': 'Solar Power', 'field_type': 'boolean'}

    def test_selection_wins_over_filter(self):
        payload = build_application_payload(self.definition, {'district': 'Kaski'}, ['abc-123456'])
        self.assertFalse(payload['apply_to_all'])
        self.assertEqual(payload['selected_homestay_ids'], ['abc-123456'])

    def test_filter_used_without_selection(self):
        payload = build_application_payload(self.definition, {'district': 'Kaski', 'province': 'all'})
        self.assertTrue(payload['apply_to_all'])
        self.assertEqual(payload['filter'], {'district': 'Kaski'})

    def test_no_criteria(self):
        with self.assertRaises(NoSelectionCriteria):
            build_application_payload(self.definition, {}, [], apply_to_all=False)

    def test_clean_filter_drops_unknown_keys(self):
        self.assertEqual(clean_filter({'status': 'approved', 'homestay_type': 'private'}),
                         {'homestay_type': 'private'})


class ValueValidationTests(TestCase):
    """Test value coercion by field type"""

    def test_number(self):
        field = CustomField(label='Rooms', field_type='number')
        self.assertEqual(validate_value(field, '12'), 12)
        self.assertEqual(validate_value(field, '2.5'), 2.5)
        with self.assertRaises(InvalidFieldValue):
            validate_value(field, 'many')

    def test_date(self):
        field = CustomField(label='Opened', field_type='date')
        self.assertEqual(validate_value(field, '2023-04-14'), '2023-04-14')
        with self.assertRaises(InvalidFieldValue):
            validate_value(field, '14/04/2023')

    def test_date_rejects_trailing_text(self):
        field = CustomField(label='Opened', field_type='date')
        for text in ('2024-01-015', '2024-01-01 garbage', '2024-02-30'):
            with self.assertRaises(InvalidFieldValue):
                validate_value(field, text)

    def test_date_accepts_iso_datetime(self):
        field = CustomField(label='Opened', field_type='date')
        self.assertEqual(validate_value(field, '2024-01-01T10:00'), '2024-01-01')

    def test_boolean(self):
        field = CustomField(label='Solar', field_type='boolean')
        self.assertTrue(validate_value(field, 'yes'))
        self.assertFalse(validate_value(field, False))
        with self.assertRaises(InvalidFieldValue):
            validate_value(field, 'perhaps')

    def test_select(self):
        field = CustomField(label='Grade', field_type='select', options=['A', 'B'])
        self.assertEqual(validate_value(field, 'A'), 'A')
        with self.assertRaises(InvalidFieldValue):
            validate_value(field, 'C')

    def test_required(self):
        field = CustomField(label='Owner', field_type='text', required=True)
        with self.assertRaises(InvalidFieldValue):
            validate_value(field, '  ')
        optional = CustomField(label='Notes', field_type='text')
        self.assertIsNone(validate_value(optional, ''))


class CustomFieldApplyTests(TestCase):
    """Test superadmin custom field endpoints"""

    def setUp(self):
        self.superadmin = TestDataFactory.create_superadmin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.superadmin)
        self.kaski_1 = TestDataFactory.create_homestay(
            'kaski', province=('Gandaki', 'गण्डकी'), district=('Kaski', 'कास्की'),
            municipality=('Pokhara Metropolitan City', 'पोखरा महानगरपालिका'),
        )
        self.kaski_2 = TestDataFactory.create_homestay(
            'kaski', province=('Gandaki', 'गण्डकी'), district=('Kaski', 'कास्की'),
            municipality=('Pokhara Metropolitan City', 'पोखरा महानगरपालिका'),
        )
        self.kathmandu = TestDataFactory.create_homestay('ktm')
        self.url = '/api/v1/superadmin/custom-fields/'

    def _apply(self, **overrides):
        payload = {
            'field_definition': {'label': 'Has Solar', 'field_type': 'boolean'},
            'filter': {'district': 'Kaski', 'province': 'Gandaki'},
            'apply_to_all': True,
        }
        payload.update(overrides)
        return self.client.post(self.url, payload, format='json')

    def test_apply_by_filter(self):
        response = self._apply()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['affected_homestays'], 2)
        self.assertEqual(response.data['matched_homestays'], 2)
        field = CustomField.objects.get(field_id=response.data['field_id'])
        self.assertEqual(set(field.homestays.all()), {self.kaski_1, self.kaski_2})
        self.assertTrue(AuditLog.objects.filter(action='custom_field_apply').exists())

    def test_reapply_is_idempotent(self):
        first = self._apply()
        definition = {'field_id': first.data['field_id'], 'label': 'Has Solar Power', 'field_type': 'boolean'}
        second = self._apply(field_definition=definition)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data['affected_homestays'], 0)
        self.assertEqual(second.data['matched_homestays'], 2)
        self.assertEqual(CustomField.objects.count(), 1)
        self.assertEqual(CustomField.objects.get().label, 'Has Solar Power')

    def test_apply_by_selection(self):
        response = self._apply(apply_to_all=False, filter={},
                               selected_homestay_ids=[self.kathmandu.homestay_id])
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['affected_homestays'], 1)

    def test_apply_without_criteria(self):
        response = self._apply(apply_to_all=False, filter={})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_apply_no_matches(self):
        response = self._apply(filter={'district': 'Ilam', 'province': 'Koshi'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(CustomField.objects.count(), 0)

    def test_select_needs_options(self):
        response = self._apply(field_definition={'label': 'Grade', 'field_type': 'select'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_definitions(self):
        self._apply()
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        applied = {item['homestay_id'] for item in response.data['field_definitions'][0]['applied_to']}
        self.assertEqual(applied, {self.kaski_1.homestay_id, self.kaski_2.homestay_id})

    def test_list_definitions_for_one_homestay(self):
        self._apply()
        response = self.client.get(f'{self.url}?homestay_id={self.kathmandu.homestay_id}')
        self.assertEqual(response.data['count'], 0)

    def test_remove_field(self):
        field_id = self._apply().data['field_id']
        response = self.client.delete(f'{self.url}?field_id={field_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['removed_from'], 2)
        self.assertFalse(CustomField.objects.filter(field_id=field_id).exists())

    def test_remove_field_for_one_tenant(self):
        field_id = self._apply(apply_to_all=False, filter={}, selected_homestay_ids=[
            self.kaski_1.homestay_id, self.kathmandu.homestay_id,
        ]).data['field_id']
        response = self.client.delete(f'{self.url}?field_id={field_id}&admin_username=kaski')
        self.assertEqual(response.data['removed_from'], 1)
        field = CustomField.objects.get(field_id=field_id)
        self.assertEqual(list(field.homestays.all()), [self.kathmandu])

    def test_remove_requires_field_id(self):
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_apply(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = client.post(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CustomFieldValueTests(TestCase):
    """Test value updates by tenant staff and the review workflow"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.officer = TestDataFactory.create_officer(self.admin)
        self.homestay = TestDataFactory.create_homestay('kaski')
        self.foreign = TestDataFactory.create_homestay('ilam')
        self.field = TestDataFactory.create_custom_field(
            label='Guests per year', field_type='number', homestays=[self.homestay, self.foreign],
        )
        self.unassigned = TestDataFactory.create_custom_field(label='Unused')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.officer)
        self.url = '/api/v1/custom-fields/values/'

    def test_set_value(self):
        response = self.client.patch(self.url, {
            'homestay_id': self.homestay.homestay_id,
            'field_id': self.field.field_id,
            'value': '340',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['value'], 340)
        review = CustomFieldReview.objects.get(homestay=self.homestay)
        self.assertFalse(review.reviewed)
        self.assertIsNotNone(review.last_updated)

    def test_invalid_value(self):
        response = self.client.patch(self.url, {
            'homestay_id': self.homestay.homestay_id,
            'field_id': self.field.field_id,
            'value': 'lots',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(CustomFieldValue.objects.exists())

    def test_field_not_applied(self):
        response = self.client.patch(self.url, {
            'homestay_id': self.homestay.homestay_id,
            'field_id': self.unassigned.field_id,
            'value': 'x',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_homestay(self):
        response = self.client.patch(self.url, {
            'homestay_id': self.foreign.homestay_id,
            'field_id': self.field.field_id,
            'value': 1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_get_values(self):
        self.client.patch(self.url, {
            'homestay_id': self.homestay.homestay_id, 'field_id': self.field.field_id, 'value': 12,
        }, format='json')
        response = self.client.get(f'{self.url}?homestay_id={self.homestay.homestay_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['values'], {self.field.field_id: 12})
        self.assertEqual(len(response.data['definitions']), 1)
        self.assertFalse(response.data['review']['reviewed'])

    def test_get_values_requires_homestay_id(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_reviewed(self):
        self.client.patch(self.url, {
            'homestay_id': self.homestay.homestay_id, 'field_id': self.field.field_id, 'value': 12,
        }, format='json')
        response = self.client.post(self.url, {'homestay_id': self.homestay.homestay_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'matched_count': 1, 'modified_count': 1})
        review = CustomFieldReview.objects.get(homestay=self.homestay)
        self.assertTrue(review.reviewed)
        self.assertEqual(review.reviewed_by, self.officer.username)


class NotificationTests(TestCase):
    """Test superadmin notifications of unreviewed updates"""

    def setUp(self):
        self.superadmin = TestDataFactory.create_superadmin()
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.homestay = TestDataFactory.create_homestay('kaski', name='Lake View')
        self.field = TestDataFactory.create_custom_field(homestays=[self.homestay])
        staff = AuthenticatedAPIClient().authenticate_user(self.admin)
        staff.patch('/api/v1/custom-fields/values/', {
            'homestay_id': self.homestay.homestay_id, 'field_id': self.field.field_id, 'value': 'Yes, 4 cars',
        }, format='json')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.superadmin)
        self.url = '/api/v1/superadmin/notifications/'

    def test_list_notifications(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['notifications'][0]['name'], 'Lake View')
        self.assertEqual(response.data['notifications'][0]['admin_username'], 'kaski')

    def test_mark_batch_reviewed(self):
        response = self.client.post(self.url, {
            'homestay_ids': [self.homestay.homestay_id, 'missing-000000'],
            'reviewer_username': 'auditor',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['matched_count'], 1)
        self.assertEqual(response.data['modified_count'], 1)
        self.assertEqual(self.client.get(self.url).data['count'], 0)

    def test_requires_homestay_ids(self):
        response = self.client.post(self.url, {'homestay_ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
