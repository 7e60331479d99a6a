"""
Tenant branding helpers.

Branding lives on the admin's user row as a JSON document. Updates are merged
key by key; `contact_details` and `about_us` merge one level deeper so a client
can change a single contact line without resending the whole block.
"""
import copy

BRANDING_KEYS = (
    'brand_name', 'brand_description', 'logo_path', 'slider_images',
    'contact_details', 'about_us',
)
NESTED_KEYS = ('contact_details', 'about_us')

EMPTY_BRANDING = {
    'brand_name': '',
    'brand_description': '',
    'logo_path': '',
    'slider_images': [],
    'contact_details': {'address': '', 'email': '', 'phone': '', 'website': ''},
    'about_us': {'title': '', 'description': '', 'mission': '', 'vision': '', 'team_members': []},
}


class BrandingError(ValueError):
    pass


def normalize_branding(branding):
    """Fill every known branding key, keeping stored values"""
    result = copy.deepcopy(EMPTY_BRANDING)
    for key, value in (branding or {}).items():
        if key in NESTED_KEYS and isinstance(value, dict):
            result[key].update(value)
        elif key in BRANDING_KEYS:
            result[key] = value
    return result


def merge_branding(current, updates):
    if not isinstance(updates, dict):
        raise BrandingError('Branding data must be an object')
    merged = normalize_branding(current)
    for key, value in updates.items():
        if key not in BRANDING_KEYS:
            continue
        if key in NESTED_KEYS:
            if not isinstance(value, dict):
                raise BrandingError(f'{key} must be an object')
            merged[key].update(value)
        elif key == 'slider_images':
            if not isinstance(value, list):
                raise BrandingError('slider_images must be a list')
            merged[key] = list(value)
        else:
            merged[key] = value
    return merged


def delete_slider_image(branding, index):
    """Remove one slider image; the last remaining image is never removed"""
    branding = normalize_branding(branding)
    images = branding['slider_images']
    try:
        index = int(index)
    except (TypeError, ValueError):
        raise BrandingError('delete_slider_index must be an integer')
    if index < 0 or index >= len(images):
        raise BrandingError('Slider image index out of range')
    if len(images) <= 1:
        raise BrandingError('At least one slider image must remain')
    images.pop(index)
    return branding
