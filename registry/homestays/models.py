from django.contrib.auth.hashers import make_password, check_password
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

BILINGUAL_ADDRESS_PARTS = ('province', 'district', 'municipality', 'ward', 'formatted_address')
FEATURE_KEYS = ('local_attractions', 'tourism_services', 'infrastructure')
# Most specific first; the formatted address joins these per language
FORMATTED_ADDRESS_PARTS = ('tole', 'city', 'municipality', 'district', 'province')


def format_address(*parts):
    return ', '.join(str(p).strip() for p in parts if p and str(p).strip())


class Homestay(models.Model):
    """Registered homestay owned by an admin tenant"""
    TYPE_COMMUNITY = 'community'
    TYPE_PRIVATE = 'private'
    TYPE_CHOICES = [
        (TYPE_COMMUNITY, 'Community'),
        (TYPE_PRIVATE, 'Private'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    homestay_id = models.CharField(max_length=50, unique=True, db_index=True)
    password = models.CharField(max_length=128, blank=True)
    dhsr_no = models.CharField(max_length=100, unique=True, null=True, blank=True)
    name = models.CharField(max_length=200, db_index=True)
    village_name = models.CharField(max_length=200, blank=True)
    home_count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    room_count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    bed_count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    homestay_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_COMMUNITY)

    # Address: bilingual parts are stored as en/ne column pairs
    province_en = models.CharField(max_length=100, blank=True, db_index=True)
    province_ne = models.CharField(max_length=100, blank=True)
    district_en = models.CharField(max_length=100, blank=True, db_index=True)
    district_ne = models.CharField(max_length=100, blank=True)
    municipality_en = models.CharField(max_length=150, blank=True, db_index=True)
    municipality_ne = models.CharField(max_length=150, blank=True)
    ward_en = models.CharField(max_length=20, blank=True)
    ward_ne = models.CharField(max_length=20, blank=True)
    formatted_address_en = models.CharField(max_length=500, blank=True)
    formatted_address_ne = models.CharField(max_length=500, blank=True)
    city = models.CharField(max_length=150, blank=True)
    tole = models.CharField(max_length=150, blank=True)

    local_attractions = models.JSONField(default=list, blank=True)
    tourism_services = models.JSONField(default=list, blank=True)
    infrastructure = models.JSONField(default=list, blank=True)

    documents = models.JSONField(default=list, blank=True)
    profile_image = models.CharField(max_length=500, blank=True)
    gallery_images = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)
    directions = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    average_rating = models.FloatField(default=0, validators=[MinValueValidator(0), MaxValueValidator(5)])
    review_count = models.PositiveIntegerField(default=0)
    feature_access = models.JSONField(default=dict, blank=True)

    admin_username = models.CharField(max_length=150, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'homestays'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.homestay_id})"

    def save(self, *args, **kwargs):
        if not self.dhsr_no:
            self.dhsr_no = None
        if self.admin_username:
            self.admin_username = self.admin_username.strip().lower()
        self.fill_formatted_address()
        super().save(*args, **kwargs)

    def fill_formatted_address(self):
        """Derive empty formatted_address columns from the other address parts"""
        for lang in ('en', 'ne'):
            column = f'formatted_address_{lang}'
            if getattr(self, column):
                continue
            parts = [getattr(self, part) if part in ('tole', 'city') else getattr(self, f'{part}_{lang}')
                     for part in FORMATTED_ADDRESS_PARTS]
            setattr(self, column, format_address(*parts))

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return bool(self.password) and check_password(raw_password, self.password)

    @property
    def address(self):
        data = {part: {'en': getattr(self, f'{part}_en'), 'ne': getattr(self, f'{part}_ne')}
                for part in BILINGUAL_ADDRESS_PARTS}
        data['city'] = self.city
        data['tole'] = self.tole
        return data

    @property
    def features(self):
        return {key: list(getattr(self, key) or []) for key in FEATURE_KEYS}


class Official(models.Model):
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    homestay = models.ForeignKey(Homestay, on_delete=models.CASCADE, related_name='officials')
    name = models.CharField(max_length=200)
    role = models.CharField(max_length=100)
    contact_no = models.CharField(max_length=20)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'homestay_officials'
        ordering = ['id']

    def __str__(self):
        return f"{self.name} - {self.role}"


class Contact(models.Model):
    homestay = models.ForeignKey(Homestay, on_delete=models.CASCADE, related_name='contacts')
    name = models.CharField(max_length=200)
    mobile = models.CharField(max_length=20)
    email = models.EmailField(blank=True)
    facebook = models.CharField(max_length=255, blank=True)
    youtube = models.CharField(max_length=255, blank=True)
    instagram = models.CharField(max_length=255, blank=True)
    tiktok = models.CharField(max_length=255, blank=True)
    twitter = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'homestay_contacts'
        ordering = ['id']

    def __str__(self):
        return self.name
