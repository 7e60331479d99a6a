import django_filters
from django.db.models import Q

from registry.locations.cascade import LocationSelection, apply_location_filter
from .models import Homestay

TEXT_SEARCH_FIELDS = (
    'name', 'village_name', 'city', 'description',
    'province_en', 'province_ne', 'district_en', 'district_ne',
    'municipality_en', 'municipality_ne', 'formatted_address_en', 'formatted_address_ne',
)


class HomestayFilter(django_filters.FilterSet):
    """
    Filter for homestay listings.

    `province`, `district` and `municipality` go through the location cascade
    and accept either language; `lang` picks which address columns are
    matched. `'all'` and empty values are ignored everywhere.
    """
    search = django_filters.CharFilter(method='filter_search', label='Search')
    q = django_filters.CharFilter(method='filter_q', label='Text search')
    status = django_filters.CharFilter(method='filter_exact', label='Status')
    homestay_type = django_filters.CharFilter(method='filter_exact', label='Homestay type')
    admin_username = django_filters.CharFilter(method='filter_admin_username', label='Admin username')
    homestay_id = django_filters.CharFilter(method='filter_exact', label='Homestay ID')

    class Meta:
        model = Homestay
        fields = ['search', 'q', 'status', 'homestay_type', 'admin_username', 'homestay_id']

    def filter_exact(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        return queryset.filter(**{name: value})

    def filter_admin_username(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        return queryset.filter(admin_username=value.strip().lower())

    def filter_search(self, queryset, name, value):
        """Search across id, name, DHSR number and village"""
        if not value:
            return queryset
        value = value.strip()
        return queryset.filter(
            Q(homestay_id__icontains=value) |
            Q(name__icontains=value) |
            Q(dhsr_no__icontains=value) |
            Q(village_name__icontains=value)
        )

    def filter_q(self, queryset, name, value):
        """Public text search: a homestay matches when any word appears in one of TEXT_SEARCH_FIELDS"""
        words = value.split() if value else []
        if not words:
            return queryset
        query = Q()
        for word in words:
            for field in TEXT_SEARCH_FIELDS:
                query |= Q(**{f'{field}__icontains': word})
        return queryset.filter(query)

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        selection = LocationSelection.from_params(self.data)
        return apply_location_filter(queryset, selection, self.data.get('lang', 'en'))
