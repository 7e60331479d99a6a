# Generated manually
import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Homestay',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('homestay_id', models.CharField(db_index=True, max_length=50, unique=True)),
                ('password', models.CharField(blank=True, max_length=128)),
                ('dhsr_no', models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('village_name', models.CharField(blank=True, max_length=200)),
                ('home_count', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('room_count', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('bed_count', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('homestay_type', models.CharField(choices=[('community', 'Community'), ('private', 'Private')], default='community', max_length=20)),
                ('province_en', models.CharField(blank=True, db_index=True, max_length=100)),
                ('province_ne', models.CharField(blank=True, max_length=100)),
                ('district_en', models.CharField(blank=True, db_index=True, max_length=100)),
                ('district_ne', models.CharField(blank=True, max_length=100)),
                ('municipality_en', models.CharField(blank=True, db_index=True, max_length=150)),
                ('municipality_ne', models.CharField(blank=True, max_length=150)),
                ('ward_en', models.CharField(blank=True, max_length=20)),
                ('ward_ne', models.CharField(blank=True, max_length=20)),
                ('formatted_address_en', models.CharField(blank=True, max_length=500)),
                ('formatted_address_ne', models.CharField(blank=True, max_length=500)),
                ('city', models.CharField(blank=True, max_length=150)),
                ('tole', models.CharField(blank=True, max_length=150)),
                ('local_attractions', models.JSONField(blank=True, default=list)),
                ('tourism_services', models.JSONField(blank=True, default=list)),
                ('infrastructure', models.JSONField(blank=True, default=list)),
                ('documents', models.JSONField(blank=True, default=list)),
                ('profile_image', models.CharField(blank=True, max_length=500)),
                ('gallery_images', models.JSONField(blank=True, default=list)),
                ('description', models.TextField(blank=True)),
                ('directions', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('average_rating', models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(5)])),
                ('review_count', models.PositiveIntegerField(default=0)),
                ('feature_access', models.JSONField(blank=True, default=dict)),
                ('admin_username', models.CharField(db_index=True, max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'homestays',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Official',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('role', models.CharField(max_length=100)),
                ('contact_no', models.CharField(max_length=20)),
                ('gender', models.CharField(blank=True, choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other')], max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('homestay', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='officials', to='homestays.homestay')),
            ],
            options={
                'db_table': 'homestay_officials',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Contact',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('mobile', models.CharField(max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('facebook', models.CharField(blank=True, max_length=255)),
                ('youtube', models.CharField(blank=True, max_length=255)),
                ('instagram', models.CharField(blank=True, max_length=255)),
                ('tiktok', models.CharField(blank=True, max_length=255)),
                ('twitter', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('homestay', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contacts', to='homestays.homestay')),
            ],
            options={
                'db_table': 'homestay_contacts',
                'ordering': ['id'],
            },
        ),
    ]
