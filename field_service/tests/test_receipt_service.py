from datetime import datetime

from conftest import make_schedule, make_user
from field_service.models import ScheduleStatus, UserRole
from field_service.services import (
    format_currency,
    format_phone,
    maps_url,
    render_appointment_receipt,
    render_service_order,
)

NOW = datetime(2024, 3, 12, 18, 5, 0)


def test_format_phone():
    assert format_phone('11987654321') == '(11) 98765-4321'
    assert format_phone('1133334444') == '(11) 3333-4444'
    assert format_phone('+55 11 98765-4321') == '+55 11 98765-4321'
    assert format_phone('') == ''


def test_format_currency():
    assert format_currency(1234.5) == '1.234,50'
    assert format_currency(0) == '0,00'
    assert format_currency(None) == '0,00'


def test_maps_url_encodes_address():
    url = maps_url('Rua das Flores', '120')
    assert url == 'https://www.google.com/maps/search/?api=1&query=Rua%20das%20Flores%2C%20120'


def test_service_order():
    schedule = make_schedule(
        'abcdef1234567890', 'tec-1', ScheduleStatus.CONCLUDED,
        work_done_description='Placa trocada', final_value=1500,
        completion_date='12/03/2024',
    )
    technician = make_user('tec-1', 'Carlos Técnico', UserRole.TECHNICIAN)
    html = render_service_order(schedule, technician, now=NOW)

    assert 'Ordem de Serviço #abcdef12' in html
    assert 'Maria Souza' in html
    assert '(11) 98765-4321' in html
    assert 'Rua das Flores, 120' in html
    assert 'Carlos Técnico' in html
    assert 'Placa trocada' in html
    assert 'R$ 1.500,00' in html
    assert 'TERMO DE GARANTIA' in html
    assert '12/03/2024' in html
    assert '18:05:00' in html


def test_service_order_without_technician_or_report():
    schedule = make_schedule('os-1', 'removido', ScheduleStatus.CONCLUDED, client_number=None)
    html = render_service_order(schedule, None, now=NOW)

    assert 'Não atribuído' in html
    assert 'Serviço concluído.' in html
    assert 'Rua das Flores, S/N' in html
    assert 'R$ 0,00' in html


def test_appointment_receipt():
    schedule = make_schedule('abcdef1234567890', 'tec-1')
    technician = make_user('tec-1', 'Carlos Técnico', UserRole.TECHNICIAN)
    html = render_appointment_receipt(schedule, technician, now=NOW)

    assert '#ABCDEF12' in html
    assert '2024-03-10' in html
    assert '09:00' in html
    assert 'Carlos Técnico' in html
    assert 'Notebook não liga' in html
    assert 'query=Rua%20das%20Flores%2C%20120' in html

    assert 'A definir' in render_appointment_receipt(schedule, None, now=NOW)


def test_receipt_escapes_client_text():
    schedule = make_schedule('os-1', 'tec-1', client_name='<script>x</script>')
    html = render_appointment_receipt(schedule, None, now=NOW)
    assert '<script>x</script>' not in html
    assert '&lt;script&gt;' in html
