from django.urls import path
from .views import province_list, district_list, municipality_list, cascade_change

urlpatterns = [
    path('locations/provinces/', province_list, name='location-provinces'),
    path('locations/districts/', district_list, name='location-districts'),
    path('locations/municipalities/', municipality_list, name='location-municipalities'),
    path('locations/cascade/', cascade_change, name='location-cascade'),
]
