from rest_framework import serializers

from registry.locations import lookup
from registry.locations.cascade import LocationSelection, InvalidLocation
from .models import Homestay, Official, Contact, FEATURE_KEYS

LOOKUP_LEVELS = ('province', 'district', 'municipality')


def bilingual_value(part, value):
    """{en, ne} for one address part given as a pair or as a single-language string"""
    if isinstance(value, dict):
        en = str(value.get('en') or value.get('ne') or '').strip()
        ne = str(value.get('ne') or value.get('en') or '').strip()
        return {'en': en, 'ne': ne}
    value = str(value or '').strip()
    if part in LOOKUP_LEVELS:
        return lookup.bilingual(value, part)
    if part == 'ward':
        return {'en': lookup.translate_ward(value), 'ne': value}
    return {'en': value, 'ne': value}


class AddressField(serializers.Field):
    """Nested bilingual address mapped onto the flat address columns"""

    def __init__(self, **kwargs):
        kwargs['source'] = '*'
        super().__init__(**kwargs)

    def to_representation(self, instance):
        return instance.address

    def to_internal_value(self, data):
        """
        Flat address columns for the parts present in `data`.

        Province, district and municipality go through the cascade starting
        from the stored address, so changing a level clears the levels below
        it and a value outside its parent is rejected. Without an explicit
        formatted_address it is blanked and derived again on save.
        """
        if not isinstance(data, dict):
            raise serializers.ValidationError('Address must be an object')
        columns = {}
        supplied = {level: bilingual_value(level, data[level]) for level in LOOKUP_LEVELS if level in data}

        instance = getattr(self.parent, 'instance', None)
        stored = LocationSelection(*(getattr(instance, f'{level}_en', '') for level in LOOKUP_LEVELS))
        selection = stored
        for level in LOOKUP_LEVELS:
            if level not in supplied or supplied[level]['en'] == getattr(selection, level):
                continue
            try:
                selection = selection.change(level, supplied[level]['en'])
            except InvalidLocation as e:
                raise serializers.ValidationError({level: str(e)})

        for level in LOOKUP_LEVELS:
            value = getattr(selection, level)
            if level not in supplied and value == getattr(stored, level):
                continue
            pair = {'en': '', 'ne': ''}
            if value:
                match = lookup.find(value, level)
                if match:
                    pair = {'en': match[0], 'ne': match[1]}
                else:
                    # free text municipality keeps the caller's Nepali form
                    pair = {'en': value, 'ne': supplied.get(level, {}).get('ne') or value}
            columns[f'{level}_en'] = pair['en']
            columns[f'{level}_ne'] = pair['ne']

        for part in ('ward', 'formatted_address'):
            if part in data:
                pair = bilingual_value(part, data[part])
                columns[f'{part}_en'] = pair['en']
                columns[f'{part}_ne'] = pair['ne']
        for part in ('city', 'tole'):
            if part in data:
                columns[part] = str(data[part] or '').strip()
        if columns and 'formatted_address' not in data:
            columns['formatted_address_en'] = ''
            columns['formatted_address_ne'] = ''
        return columns


class FeaturesField(serializers.Field):
    """`features` object mapped onto the three feature list columns"""

    def __init__(self, **kwargs):
        kwargs['source'] = '*'
        super().__init__(**kwargs)

    def to_representation(self, instance):
        return instance.features

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            raise serializers.ValidationError('Features must be an object')
        columns = {}
        for key in FEATURE_KEYS:
            if key not in data:
                continue
            items = data[key] or []
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                raise serializers.ValidationError({key: 'Must be a list of strings'})
            columns[key] = [i.strip() for i in items if i.strip()]
        return columns


class OfficialSerializer(serializers.ModelSerializer):
    class Meta:
        model = Official
        fields = ['id', 'name', 'role', 'contact_no', 'gender', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = Contact
        fields = ['id', 'name', 'mobile', 'email', 'facebook', 'youtube', 'instagram',
                  'tiktok', 'twitter', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class HomestaySerializer(serializers.ModelSerializer):
    address = AddressField(required=False)
    features = FeaturesField(required=False)

    class Meta:
        model = Homestay
        fields = [
            'id', 'homestay_id', 'dhsr_no', 'name', 'village_name', 'home_count', 'room_count',
            'bed_count', 'homestay_type', 'address', 'features', 'documents', 'profile_image',
            'gallery_images', 'description', 'directions', 'status', 'average_rating',
            'review_count', 'feature_access', 'admin_username', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'homestay_id', 'status', 'average_rating', 'review_count', 'feature_access',
            'admin_username', 'created_at', 'updated_at'
        ]

    def validate_dhsr_no(self, value):
        # blank is stored as NULL so it never collides on the unique index
        value = (value or '').strip()
        return value or None


class HomestayDetailSerializer(HomestaySerializer):
    officials = OfficialSerializer(many=True, read_only=True)
    contacts = ContactSerializer(many=True, read_only=True)

    class Meta(HomestaySerializer.Meta):
        fields = HomestaySerializer.Meta.fields + ['officials', 'contacts']


class HomestayOwnerSerializer(HomestayDetailSerializer):
    """What a signed-in owner may edit; registration identifiers stay fixed"""

    class Meta(HomestayDetailSerializer.Meta):
        read_only_fields = HomestaySerializer.Meta.read_only_fields + ['dhsr_no']


class HomestayLoginSerializer(serializers.Serializer):
    homestay_id = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


class HomestayListSerializer(serializers.ModelSerializer):
    """Public listing card"""
    address = AddressField(read_only=True)

    class Meta:
        model = Homestay
        fields = [
            'homestay_id', 'name', 'village_name', 'address', 'homestay_type',
            'average_rating', 'profile_image', 'status', 'admin_username'
        ]


class HomestayStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Homestay.STATUS_CHOICES)


class FeatureAccessSerializer(serializers.Serializer):
    feature_access = serializers.DictField(child=serializers.BooleanField())


class RegistrationOfficialSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, required=False, default='')
    role = serializers.CharField(allow_blank=True, required=False, default='')
    contact_no = serializers.CharField(allow_blank=True, required=False, default='')
    gender = serializers.ChoiceField(choices=Official.GENDER_CHOICES, required=False, allow_blank=True, default='')


class RegistrationContactSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, required=False, default='')
    mobile = serializers.CharField(allow_blank=True, required=False, default='')
    email = serializers.EmailField(allow_blank=True, required=False, default='')
    facebook = serializers.CharField(allow_blank=True, required=False, default='')
    youtube = serializers.CharField(allow_blank=True, required=False, default='')
    instagram = serializers.CharField(allow_blank=True, required=False, default='')
    tiktok = serializers.CharField(allow_blank=True, required=False, default='')
    twitter = serializers.CharField(allow_blank=True, required=False, default='')


class RegistrationSerializer(serializers.Serializer):
    """Public registration form; address values may be given in Nepali"""
    admin_username = serializers.CharField(max_length=150)
    name = serializers.CharField(max_length=200)
    village_name = serializers.CharField(max_length=200, allow_blank=True, required=False, default='')
    dhsr_no = serializers.CharField(max_length=100, allow_blank=True, required=False, default='')
    home_count = serializers.IntegerField(min_value=1)
    room_count = serializers.IntegerField(min_value=1)
    bed_count = serializers.IntegerField(min_value=1)
    homestay_type = serializers.ChoiceField(choices=Homestay.TYPE_CHOICES)
    province = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100)
    municipality = serializers.CharField(max_length=150)
    ward = serializers.CharField(max_length=20)
    city = serializers.CharField(max_length=150, allow_blank=True, required=False, default='')
    tole = serializers.CharField(max_length=150, allow_blank=True, required=False, default='')
    directions = serializers.CharField(allow_blank=True, required=False, default='')
    description = serializers.CharField(allow_blank=True, required=False, default='')
    local_attractions = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    tourism_services = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    infrastructure = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    officials = RegistrationOfficialSerializer(many=True, required=False, default=list)
    contacts = RegistrationContactSerializer(many=True, required=False, default=list)

    def validate_admin_username(self, value):
        return value.strip().lower()

    def validate_dhsr_no(self, value):
        value = value.strip()
        if value and Homestay.objects.filter(dhsr_no=value).exists():
            raise serializers.ValidationError('A homestay with this DHSR number already exists')
        return value
