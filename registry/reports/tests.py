"""
Tests for report projection, exporters and the report endpoints
"""
import io
import os
from datetime import date

import reportlab
from django.test import TestCase, SimpleTestCase, override_settings
from openpyxl import load_workbook
from reportlab.pdfbase import pdfmetrics
from rest_framework import status

from registry.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from registry.reports import projection
from registry.reports.exporters import (
    FALLBACK_FONTS, ReportInfo, UnsupportedExportFormat, export_filename, find_report_font,
    report_fonts, report_info_from_branding, render_report, to_csv, to_excel, to_pdf,
)

BUNDLED_TTF = os.path.join(os.path.dirname(reportlab.__file__), 'fonts', 'Vera.ttf')


def make_record(name, district='Kaski', rating=0, attractions=None, formatted='Pokhara, Kaski', **extra):
    record = {
        'homestay_id': f'{name.lower()}-000001',
        'name': name,
        'dhsr_no': '',
        'homestay_type': 'community',
        'status': 'approved',
        'village_name': '',
        'home_count': 2,
        'room_count': 4,
        'bed_count': 8,
        'average_rating': rating,
        'review_count': 3,
        'admin_username': 'kaski',
        'address': {
            'province': {'en': 'Gandaki', 'ne': 'गण्डकी'},
            'district': {'en': district, 'ne': ''},
            'municipality': {'en': 'Pokhara Metropolitan City', 'ne': 'पोखरा महानगरपालिका'},
            'ward': {'en': '6', 'ne': '६'},
            'formatted_address': {'en': formatted, 'ne': ''},
            'city': '',
            'tole': 'Lakeside',
        },
        'features': {
            'local_attractions': attractions or [],
            'tourism_services': [],
            'infrastructure': [],
        },
    }
    record.update(extra)
    return record


class ProjectionHelperTests(SimpleTestCase):
    """Test value lookup and attraction formatting"""

    def test_get_value_resolves_english_side(self):
        record = make_record('Lakeside')
        self.assertEqual(projection.get_value(record, 'address.district'), 'Kaski')
        self.assertEqual(projection.get_value(record, 'address.tole'), 'Lakeside')

    def test_get_value_missing_path(self):
        record = make_record('Lakeside')
        self.assertEqual(projection.get_value(record, 'address.country.name'), '')
        self.assertEqual(projection.get_value(None, 'name'), '')

    def test_extract_bilingual_parts(self):
        self.assertEqual(
            projection.extract_bilingual_parts('natural:Phewa Lake/फेवा ताल'),
            {'en': 'Phewa Lake', 'ne': 'फेवा ताल'},
        )
        self.assertEqual(projection.extract_bilingual_parts('Sarangkot'), {'en': 'Sarangkot', 'ne': 'Sarangkot'})

    def test_format_attractions(self):
        attractions = ['natural:Phewa Lake/फेवा ताल', 'natural:Sarangkot', 'Gurung Museum']
        self.assertEqual(projection.format_attractions(attractions), '3 attractions (2 natural, 1 cultural)')
        self.assertEqual(projection.format_attractions(['products:Tea']), '1 attractions (1 product)')
        self.assertEqual(projection.format_attractions([]), 'None')

    def test_keyword_categories(self):
        self.assertEqual(projection.format_attractions(['Chitwan National Park', 'Cave']),
                         '2 attractions (1 natural, 1 other)')

    def test_unknown_report_type(self):
        with self.assertRaises(projection.UnknownReportType):
            projection.get_report_type('revenue')


class SortAndFilterTests(SimpleTestCase):
    """Test record sorting and checkbox filters"""

    def test_sort_case_insensitive(self):
        records = [make_record('banana'), make_record('Apple'), make_record('cherry')]
        names = [r['name'] for r in projection.sort_records(records, 'name')]
        self.assertEqual(names, ['Apple', 'banana', 'cherry'])

    def test_sort_descending_numbers(self):
        records = [make_record('A', rating=3.5), make_record('B', rating=4.8), make_record('C', rating=1)]
        names = [r['name'] for r in projection.sort_records(records, 'average_rating', 'desc')]
        self.assertEqual(names, ['B', 'A', 'C'])

    def test_sort_is_stable(self):
        records = [make_record('First', district='Kaski'), make_record('Second', district='Kaski'),
                   make_record('Third', district='Chitwan')]
        names = [r['name'] for r in projection.sort_records(records, 'address.district')]
        self.assertEqual(names, ['Third', 'First', 'Second'])

    def test_sort_by_attraction_count(self):
        records = [make_record('Two', attractions=['a', 'b']), make_record('None'),
                   make_record('One', attractions=['a'])]
        names = [r['name'] for r in projection.sort_records(records, 'features.local_attractions')]
        self.assertEqual(names, ['None', 'One', 'Two'])

    def test_no_sort_key_keeps_order(self):
        records = [make_record('b'), make_record('a')]
        self.assertEqual(projection.sort_records(records, None), records)

    def test_filter_requires_every_selected_item(self):
        both = make_record('Both', attractions=['natural:Phewa Lake/फेवा ताल', 'Gurung Museum'])
        one = make_record('One', attractions=['Gurung Museum'])
        result = projection.filter_by_features(
            [both, one], {'selected_attractions': ['Phewa Lake', 'Gurung Museum']})
        self.assertEqual(result, [both])

    def test_empty_selection_keeps_everything(self):
        records = [make_record('A'), make_record('B')]
        self.assertEqual(projection.filter_by_features(records, {'selected_services': []}), records)

    def test_filter_options(self):
        records = [make_record('A'), make_record('B', district='Lamjung')]
        options = projection.filter_options(records, province='Gandaki', district='Kaski')
        self.assertEqual(options['provinces'], ['Gandaki'])
        self.assertEqual(options['districts'], ['Kaski', 'Lamjung'])
        self.assertEqual(options['municipalities'], ['Pokhara Metropolitan City'])

    def test_feature_items(self):
        records = [make_record('A', attractions=['natural:Phewa Lake/फेवा ताल', 'Sarangkot'])]
        items = projection.feature_items(records)
        self.assertEqual(items['local_attractions'], ['Phewa Lake', 'Sarangkot'])
        self.assertEqual(items['infrastructure'], [])


class ProjectTests(SimpleTestCase):
    """Test report tables"""

    def test_geographical_columns(self):
        headers, rows = projection.project([make_record('Lakeside')], projection.GEOGRAPHICAL)
        self.assertEqual(len(headers), 16)
        row = dict(zip(headers, rows[0]))
        self.assertEqual(row['S.N.'], 1)
        self.assertEqual(row['DHSR No'], 'N/A')
        self.assertEqual(row['Type'], 'Community')
        self.assertEqual(row['Status'], 'Approved')
        self.assertEqual(row['City'], 'N/A')
        self.assertEqual(row['Tole'], 'Lakeside')
        self.assertEqual(row['Beds'], 8)

    def test_service_ratings(self):
        record = make_record('Lakeside', rating=4.26, attractions=['Gurung Museum'])
        headers, rows = projection.project([record], projection.SERVICE_RATINGS)
        row = dict(zip(headers, rows[0]))
        self.assertEqual(row['Average Rating'], 4.3)
        self.assertEqual(row['Attractions'], '1 attractions (1 cultural)')
        self.assertEqual(row['Reviews'], 3)

    def test_feature_report_one_row_per_item(self):
        records = [
            make_record('Lakeside', attractions=['natural:Phewa Lake/फेवा ताल', 'Sarangkot']),
            make_record('Hilltop'),
            make_record('Nowhere', formatted=''),
        ]
        headers, rows = projection.project(records, projection.TOURISM_ATTRACTIONS)
        self.assertIn('Local Attraction', headers)
        column = headers.index('Local Attraction')
        self.assertEqual([row[column] for row in rows], ['Phewa Lake', 'Sarangkot', 'None'])
        self.assertEqual([row[0] for row in rows], [1, 1, 2])

    def test_infrastructure_label(self):
        headers, _ = projection.project([], projection.INFRASTRUCTURE)
        self.assertIn('Infrastructure Item', headers)


class ExporterTests(SimpleTestCase):
    """Test CSV, Excel and PDF output"""

    def setUp(self):
        self.headers = ['S.N.', 'Homestay Name', 'District']
        self.rows = [[1, 'फेवा होमस्टे', 'Kaski'], [2, 'Hilltop & Co', 'Lamjung']]
        self.info = ReportInfo(title='Geographical Classification', generated_on=date(2024, 5, 1))

    def test_export_filename(self):
        self.assertEqual(
            export_filename('tourism-attractions', 'excel', today=date(2024, 5, 1)),
            'Homestay_Tourism_attractions_Report_2024-05-01.xlsx',
        )
        self.assertEqual(
            export_filename('infrastructure', 'pdf', today=date(2024, 5, 1)),
            'Homestay_Infrastructure_Report_2024-05-01.pdf',
        )
        with self.assertRaises(UnsupportedExportFormat):
            export_filename('infrastructure', 'docx')

    def test_report_info_defaults(self):
        self.assertEqual(self.info.brand_name, 'Department of Tourism')
        self.assertTrue(self.info.ref_no.startswith('HMS/2024/'))
        self.assertEqual(self.info.generated_label, 'May 01, 2024')

    def test_report_info_from_branding(self):
        info = report_info_from_branding(
            {'brand_name': 'Kaski Homestays', 'contact_details': {'phone': '061-123', 'email': 'k@np.com'}},
            'Infrastructure',
        )
        self.assertEqual(info.brand_name, 'Kaski Homestays')
        self.assertEqual(info.contact_line, '061-123 | k@np.com')

    def test_csv(self):
        content = to_csv(self.headers, self.rows)
        self.assertTrue(content.startswith(b'\xef\xbb\xbf'))
        text = content.decode('utf-8-sig')
        self.assertTrue(text.startswith('S.N.,Homestay Name,District'))
        self.assertIn('फेवा होमस्टे', text)

    def test_excel(self):
        workbook = load_workbook(io.BytesIO(to_excel(self.headers, self.rows, self.info)))
        self.assertEqual(workbook.sheetnames, ['Report Info', 'Homestays'])
        self.assertEqual(workbook['Report Info']['A1'].value, 'Department of Tourism')
        sheet = workbook['Homestays']
        self.assertEqual([cell.value for cell in sheet[1]], self.headers)
        self.assertEqual(sheet['B2'].value, 'फेवा होमस्टे')
        self.assertEqual(sheet.max_row, 3)

    def test_pdf(self):
        self.assertTrue(to_pdf(self.headers, self.rows, self.info).startswith(b'%PDF'))

    def test_pdf_without_rows(self):
        self.assertTrue(to_pdf(self.headers, [], self.info).startswith(b'%PDF'))

    def test_configured_font_used_for_pdf_text(self):
        with override_settings(REPORT_PDF_FONT=BUNDLED_TTF):
            self.assertEqual(find_report_font(), BUNDLED_TTF)
            self.assertEqual(report_fonts(), ('Vera', 'Vera'))
            self.assertTrue(to_pdf(self.headers, self.rows, self.info).startswith(b'%PDF'))
        self.assertIn('Vera', pdfmetrics.getRegisteredFontNames())

    def test_unreadable_font_falls_back_to_helvetica(self):
        self.assertEqual(report_fonts(__file__), FALLBACK_FONTS)

    def test_render_report(self):
        content, content_type = render_report(self.headers, self.rows, 'csv', self.info)
        self.assertEqual(content_type, 'text/csv')
        with self.assertRaises(UnsupportedExportFormat):
            render_report(self.headers, self.rows, 'xml', self.info)


class ReportAPITests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='kaski')
        self.other_admin = TestDataFactory.create_admin(username='chitwan')
        self.lakeside = TestDataFactory.create_homestay(
            'kaski', name='Lakeside Homestay',
            province=('Gandaki', 'गण्डकी'), district=('Kaski', 'कास्की'),
            municipality=('Pokhara Metropolitan City', 'पोखरा महानगरपालिका'),
            local_attractions=['natural:Phewa Lake/फेवा ताल', 'Gurung Museum'],
            infrastructure=['Parking'],
        )
        self.hilltop = TestDataFactory.create_homestay(
            'kaski', name='Hilltop Homestay',
            province=('Gandaki', 'गण्डकी'), district=('Kaski', 'कास्की'),
            municipality=('Annapurna Rural Municipality', 'अन्नपूर्ण गाउँपालिका'),
            local_attractions=['Gurung Museum'],
        )
        self.other = TestDataFactory.create_homestay('chitwan', name='Jungle Homestay')
        self.client = AuthenticatedAPIClient()

    def test_requires_authentication(self):
        response = self.client.get('/api/v1/reports/geographical-classification/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_report_scoped_to_tenant(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/geographical-classification/?sort=name')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual([row[1] for row in response.data['rows']], ['Hilltop Homestay', 'Lakeside Homestay'])
        self.assertEqual(response.data['filters']['provinces'], ['Gandaki'])

    def test_officer_sees_parent_tenant(self):
        officer = TestDataFactory.create_officer(self.admin)
        self.client.authenticate_user(officer)
        response = self.client.get('/api/v1/reports/service-ratings/')
        self.assertEqual(response.data['count'], 2)

    def test_officer_without_dashboard_access_forbidden(self):
        officer = TestDataFactory.create_officer(self.admin, permissions={'admin_dashboard_access': False})
        self.client.authenticate_user(officer)
        response = self.client.get('/api/v1/reports/service-ratings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_superadmin_sees_all(self):
        self.client.authenticate_user(TestDataFactory.create_superadmin())
        response = self.client.get('/api/v1/reports/geographical-classification/')
        self.assertEqual(response.data['count'], 3)

    def test_location_filter_keeps_options(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/geographical-classification/', {
            'province': 'Gandaki', 'district': 'कास्की', 'municipality': 'Pokhara Metropolitan City',
        })
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['filters']['municipalities'],
                         ['Annapurna Rural Municipality', 'Pokhara Metropolitan City'])

    def test_feature_checkbox_filter(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/tourism-attractions/',
                                   {'selected_attractions': 'Phewa Lake,Gurung Museum'})
        self.assertEqual({row[1] for row in response.data['rows']}, {'Lakeside Homestay'})
        self.assertEqual(response.data['filters']['local_attractions'], ['Gurung Museum', 'Phewa Lake'])

    def test_api_created_homestay_appears_in_attraction_report(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/admin/homestays/', {
            'name': 'Sauraha Stay',
            'home_count': 1, 'room_count': 2, 'bed_count': 4,
            'homestay_type': 'community',
            'address': {'province': 'Bagmati', 'district': 'Chitwan', 'municipality': 'Kalika Municipality'},
            'features': {'local_attractions': ['Chitwan National Park']},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['address']['formatted_address']['en'],
                         'Kalika Municipality, Chitwan, Bagmati')

        response = self.client.get('/api/v1/reports/tourism-attractions/')
        rows = [row for row in response.data['rows'] if row[1] == 'Sauraha Stay']
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0][4], 'Kalika Municipality, Chitwan, Bagmati')
        self.assertEqual(rows[0][5], 'Chitwan National Park')

    def test_unknown_report_type(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/revenue/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_export_csv(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/infrastructure/export/?export_format=csv')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="Homestay_Infrastructure_Report_', response['Content-Disposition'])
        self.assertIn('Parking', response.content.decode('utf-8-sig'))
        self.assertNotIn('Jungle Homestay', response.content.decode('utf-8-sig'))

    def test_export_excel(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/service-ratings/export/?export_format=excel')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        workbook = load_workbook(io.BytesIO(response.content))
        self.assertEqual(workbook['Report Info']['A1'].value, 'Kaski Homestays')

    def test_export_defaults_to_pdf(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/geographical-classification/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_export_unsupported_format(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/infrastructure/export/?export_format=docx')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_export_unknown_type(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/revenue/export/?export_format=csv')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
