from django.urls import path
from .views import web_content, web_content_reset, navigation, public_branding

urlpatterns = [
    path('web-content/', web_content, name='web-content'),
    path('web-content/reset/', web_content_reset, name='web-content-reset'),
    path('navigation/<str:nav_type>/', navigation, name='navigation'),
    path('branding/<str:admin_username>/', public_branding, name='public-branding'),
]
