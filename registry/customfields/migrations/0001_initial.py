# Generated manually
import django.db.models.deletion
from django.db import migrations, models

import registry.customfields.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('homestays', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CustomField',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('field_id', models.CharField(default=registry.customfields.models.generate_field_id, max_length=100, unique=True)),
                ('label', models.CharField(max_length=200)),
                ('field_type', models.CharField(choices=[('text', 'Text'), ('number', 'Number'), ('date', 'Date'), ('boolean', 'Boolean'), ('select', 'Select')], max_length=20)),
                ('options', models.JSONField(blank=True, default=list)),
                ('required', models.BooleanField(default=False)),
                ('added_by', models.CharField(default='system', max_length=150)),
                ('added_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'custom_fields',
                'ordering': ['added_at'],
            },
        ),
        migrations.CreateModel(
            name='CustomFieldAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('field', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='customfields.customfield')),
                ('homestay', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='custom_field_assignments', to='homestays.homestay')),
            ],
            options={
                'db_table': 'custom_field_assignments',
                'unique_together': {('field', 'homestay')},
            },
        ),
        migrations.AddField(
            model_name='customfield',
            name='homestays',
            field=models.ManyToManyField(related_name='custom_fields', through='customfields.CustomFieldAssignment', to='homestays.homestay'),
        ),
        migrations.CreateModel(
            name='CustomFieldValue',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.JSONField(blank=True, null=True)),
                ('updated_by', models.CharField(blank=True, max_length=150)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('field', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='values', to='customfields.customfield')),
                ('homestay', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='custom_field_values', to='homestays.homestay')),
            ],
            options={
                'db_table': 'custom_field_values',
                'unique_together': {('field', 'homestay')},
            },
        ),
        migrations.CreateModel(
            name='CustomFieldReview',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last_updated', models.DateTimeField(blank=True, null=True)),
                ('reviewed', models.BooleanField(default=False)),
                ('reviewed_by', models.CharField(blank=True, max_length=150)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('homestay', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='custom_field_review', to='homestays.homestay')),
            ],
            options={
                'db_table': 'custom_field_reviews',
            },
        ),
    ]
