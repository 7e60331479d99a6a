from django.urls import path
from .views import report_detail, report_export

urlpatterns = [
    path('reports/<str:report_type>/', report_detail, name='report-detail'),
    path('reports/<str:report_type>/export/', report_export, name='report-export'),
]
