from rest_framework import serializers

from .models import CustomField


class FieldDefinitionSerializer(serializers.Serializer):
    field_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    label = serializers.CharField(max_length=200)
    field_type = serializers.ChoiceField(choices=CustomField.TYPE_CHOICES)
    options = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    required = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs['field_type'] == CustomField.TYPE_SELECT and not attrs.get('options'):
            raise serializers.ValidationError({'options': 'Select fields need at least one option'})
        if attrs['field_type'] != CustomField.TYPE_SELECT:
            attrs['options'] = []
        if not attrs.get('field_id'):
            attrs.pop('field_id', None)
        return attrs


class ApplyCustomFieldSerializer(serializers.Serializer):
    field_definition = FieldDefinitionSerializer()
    filter = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, default=dict)
    apply_to_all = serializers.BooleanField(required=False, default=False)
    selected_homestay_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class FieldValueSerializer(serializers.Serializer):
    homestay_id = serializers.CharField()
    field_id = serializers.CharField()
    value = serializers.JSONField(allow_null=True)


class MarkReviewedSerializer(serializers.Serializer):
    homestay_id = serializers.CharField()
    reviewed_by = serializers.CharField(required=False, allow_blank=True, default='')


class NotificationReviewSerializer(serializers.Serializer):
    homestay_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    reviewer_username = serializers.CharField(required=False, allow_blank=True, default='')
