"""Default site copy used when a tenant's content is first read or reset"""

DEFAULT_ADMIN_USERNAME = 'main'

DEFAULT_WEB_CONTENT = {
    'site_info': {
        'site_name': 'Nepal StayLink',
        'tagline': 'Your Gateway to Authentic Homestays',
        'logo_path': '/Logo.png',
        'favicon_path': '/favicon.ico',
    },
    'navigation': {
        'links': [
            {'name': 'Home', 'path': '/', 'order': 1},
            {'name': 'Homestays', 'path': '/homestays', 'order': 2},
            {'name': 'About', 'path': '/about', 'order': 3},
            {'name': 'Contact', 'path': '/contact', 'order': 4},
        ],
    },
    'footer': {
        'description': 'Connecting travellers with authentic Nepali homestays.',
        'quick_links': [
            {'name': 'Homestays', 'path': '/homestays', 'order': 1},
            {'name': 'About Us', 'path': '/about', 'order': 2},
        ],
        'host_links': [
            {'name': 'Register Homestay', 'path': '/register', 'order': 1},
            {'name': 'Host Login', 'path': '/login', 'order': 2},
        ],
        'contact_info': {
            'address': 'Kathmandu, Nepal',
            'email': 'info@nepalstaylink.com',
            'phone': '',
            'working_hours': 'Sun-Fri, 10am-5pm',
        },
        'social_links': [],
        'copyright': 'Nepal StayLink. All rights reserved.',
        'policy_links': [],
    },
    'home_page': {
        'hero': {
            'title': 'Experience Authentic Nepal',
            'subtitle': "Connect with local homestays and immerse yourself in Nepal's rich culture and hospitality.",
            'background_image': '/images/home/hero-bg.jpg',
            'search_placeholder': 'Where would you like to stay?',
        },
        'stats': [
            {'value': '200+', 'label': 'Homestays'},
            {'value': '50+', 'label': 'Destinations'},
            {'value': '5000+', 'label': 'Travelers'},
        ],
        'how_it_works': {
            'title': 'How It Works',
            'subtitle': 'A simple process to connect you with authentic Nepali homestays',
            'steps': [
                {
                    'icon': 'Search',
                    'title': 'Find Your Stay',
                    'description': 'Browse our curated selection of authentic Nepali homestays across the country.',
                    'link_text': 'Explore Homestays',
                    'link_url': '/homestays',
                },
            ],
        },
        'cta': {
            'title': 'Ready to host travellers?',
            'subtitle': 'Register your homestay and reach guests from around the world.',
            'background_image': '',
            'primary_button': {'text': 'Register', 'link': '/register'},
            'secondary_button': {'text': 'Learn more', 'link': '/about'},
        },
    },
    'about_page': {
        'hero': {'title': 'About Us', 'subtitle': '', 'background_image': ''},
        'story': {'title': 'Our Story', 'content': '', 'image_path': ''},
        'mission': {'statement': ''},
        'team': {'title': 'Our Team', 'subtitle': '', 'members': []},
    },
    'contact_page': {
        'hero': {'title': 'Contact Us', 'subtitle': '', 'background_image': ''},
        'info': {
            'title': 'Get in touch',
            'location': {'title': 'Location', 'address': 'Kathmandu, Nepal'},
            'email': {'title': 'Email', 'general': 'info@nepalstaylink.com', 'support': ''},
            'phone': {'title': 'Phone', 'office': '', 'support': ''},
            'hours': {'title': 'Hours', 'schedule': 'Sun-Fri, 10am-5pm'},
        },
    },
    'testimonials': [],
}

SECTIONS = tuple(DEFAULT_WEB_CONTENT.keys())

DEFAULT_NAVIGATION = {
    'navbar': {
        'brand': {'name': 'Nepal StayLink', 'logo': '/Logo.png', 'tagline': ''},
        'nav_items': [
            {'name': 'Home', 'path': '/', 'order': 1, 'is_external': False},
            {'name': 'Homestays', 'path': '/homestays', 'order': 2, 'is_external': False},
            {'name': 'About', 'path': '/about', 'order': 3, 'is_external': False},
            {'name': 'Contact', 'path': '/contact', 'order': 4, 'is_external': False},
        ],
    },
    'footer': {
        'brand': {'name': 'Nepal StayLink', 'logo': '/Logo.png', 'tagline': ''},
        'description': 'Connecting travellers with authentic Nepali homestays.',
        'columns': [],
        'social_links': [],
        'contact_info': {'address': '', 'email': '', 'phone': ''},
        'newsletter_enabled': False,
        'bottom_links': [],
        'copyright': 'Nepal StayLink. All rights reserved.',
    },
}
