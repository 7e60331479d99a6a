import uuid

from django.db import models

from registry.homestays.models import Homestay


def generate_field_id():
    return str(uuid.uuid4())


class CustomField(models.Model):
    """Superadmin-defined field attached to a subset of homestays"""
    TYPE_TEXT = 'text'
    TYPE_NUMBER = 'number'
    TYPE_DATE = 'date'
    TYPE_BOOLEAN = 'boolean'
    TYPE_SELECT = 'select'
    TYPE_CHOICES = [
        (TYPE_TEXT, 'Text'),
        (TYPE_NUMBER, 'Number'),
        (TYPE_DATE, 'Date'),
        (TYPE_BOOLEAN, 'Boolean'),
        (TYPE_SELECT, 'Select'),
    ]

    field_id = models.CharField(max_length=100, unique=True, default=generate_field_id)
    label = models.CharField(max_length=200)
    field_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    options = models.JSONField(default=list, blank=True)
    required = models.BooleanField(default=False)
    added_by = models.CharField(max_length=150, default='system')
    added_at = models.DateTimeField(auto_now_add=True)
    homestays = models.ManyToManyField(Homestay, through='CustomFieldAssignment', related_name='custom_fields')

    class Meta:
        db_table = 'custom_fields'
        ordering = ['added_at']

    def __str__(self):
        return f"{self.label} ({self.field_type})"


class CustomFieldAssignment(models.Model):
    field = models.ForeignKey(CustomField, on_delete=models.CASCADE, related_name='assignments')
    homestay = models.ForeignKey(Homestay, on_delete=models.CASCADE, related_name='custom_field_assignments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'custom_field_assignments'
        unique_together = [['field', 'homestay']]


class CustomFieldValue(models.Model):
    field = models.ForeignKey(CustomField, on_delete=models.CASCADE, related_name='values')
    homestay = models.ForeignKey(Homestay, on_delete=models.CASCADE, related_name='custom_field_values')
    value = models.JSONField(null=True, blank=True)
    updated_by = models.CharField(max_length=150, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'custom_field_values'
        unique_together = [['field', 'homestay']]


class CustomFieldReview(models.Model):
    """Per-homestay review state of its custom field values"""
    homestay = models.OneToOneField(Homestay, on_delete=models.CASCADE, related_name='custom_field_review')
    last_updated = models.DateTimeField(null=True, blank=True)
    reviewed = models.BooleanField(default=False)
    reviewed_by = models.CharField(max_length=150, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'custom_field_reviews'
