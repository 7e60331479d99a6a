"""
Cascading province -> district -> municipality selection.

A selection is immutable; ``change`` returns a new one with the children of
the changed level cleared. ``'all'`` and empty values are the reset state.
"""
from dataclasses import dataclass, replace

from . import lookup
from .lookup import PROVINCE, DISTRICT, MUNICIPALITY, LEVELS

RESET_VALUES = ('', 'all', None)


class InvalidLocation(ValueError):
    pass


def _normalize(value):
    if value in RESET_VALUES:
        return ''
    value = str(value).strip()
    return '' if value.lower() == 'all' else value


@dataclass(frozen=True)
class LocationSelection:
    province: str = ''
    district: str = ''
    municipality: str = ''

    def __post_init__(self):
        for level in LEVELS:
            object.__setattr__(self, level, _normalize(getattr(self, level)))

    @classmethod
    def from_params(cls, params, validate=False):
        selection = cls(
            province=params.get('province'),
            district=params.get('district'),
            municipality=params.get('municipality'),
        )
        return selection.validate() if validate else selection

    def validate(self):
        """Same selection rebuilt level by level; raises InvalidLocation on a broken hierarchy"""
        return (LocationSelection()
                .change(PROVINCE, self.province)
                .change(DISTRICT, self.district)
                .change(MUNICIPALITY, self.municipality))

    def change(self, level, value):
        """New selection with `level` set to `value` and its children cleared"""
        if level not in LEVELS:
            raise InvalidLocation(f'Unknown location level: {level}')
        value = _normalize(value)

        if level == PROVINCE:
            if value:
                value = self._pick(value, lookup.provinces(), level)
            return LocationSelection(province=value)

        if level == DISTRICT:
            if value:
                if not self.province:
                    raise InvalidLocation('Select a province before choosing a district')
                value = self._pick(value, lookup.districts_for(self.province), level)
            return replace(self, district=value, municipality='')

        if value:
            if not self.district:
                raise InvalidLocation('Select a district before choosing a municipality')
            options = lookup.municipalities_for(self.district)
            # Districts without bundled municipality data accept free text
            if options:
                value = self._pick(value, options, level)
        return replace(self, municipality=value)

    @staticmethod
    def _pick(value, options, level):
        for option in options:
            if value in (option['en'], option['ne']) or value.lower() == option['en'].lower():
                return option['en']
        raise InvalidLocation(f'"{value}" is not a valid {level} for the current selection')

    def options(self):
        return {
            'provinces': lookup.provinces(),
            'districts': lookup.districts_for(self.province) if self.province else [],
            'municipalities': lookup.municipalities_for(self.district) if self.district else [],
        }

    def as_dict(self):
        return {'province': self.province, 'district': self.district, 'municipality': self.municipality}

    def filter_kwargs(self, lang='en'):
        """ORM lookups on the homestay address columns for the chosen language"""
        lang = 'ne' if lang == 'ne' else 'en'
        kwargs = {}
        for level in LEVELS:
            value = getattr(self, level)
            if value:
                kwargs[f'{level}_{lang}'] = lookup.bilingual(value, level)[lang]
        return kwargs


def apply_location_filter(queryset, selection, lang='en'):
    if selection is None:
        return queryset
    kwargs = selection.filter_kwargs(lang)
    return queryset.filter(**kwargs) if kwargs else queryset
