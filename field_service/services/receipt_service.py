# ==============================================================================
# SERVICIO DE COMPROBANTES - OS finalizada y comprobante de agendamiento
# ==============================================================================
# Proyección de solo lectura: recibe una OS y su técnico (puede faltar) y
# retorna un documento HTML imprimible. No toca el estado.
# ==============================================================================

import re
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from jinja2 import Environment, PackageLoader, select_autoescape

from field_service import config
from field_service.models.entities import DATE_FORMAT, TIME_FORMAT, Schedule, User
from field_service.performance_logger import profile_function

_env = Environment(
    loader=PackageLoader('field_service', 'templates'),
    autoescape=select_autoescape(['html']),
)


def format_phone(phone: str) -> str:
    """
    Formatea teléfonos locales:
    - 11 dígitos → (XX) XXXXX-XXXX
    - 10 dígitos → (XX) XXXX-XXXX
    - cualquier otro → sin cambios
    """
    if not phone:
        return phone or ''
    digits = re.sub(r'\D', '', phone)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return phone


def format_currency(amount) -> str:
    """Formatea valores al estilo pt-BR: 1.234,56"""
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    text = f"{value:,.2f}"
    return text.replace(',', '_').replace('.', ',').replace('_', '.')


def maps_url(address: str, number: str = None) -> str:
    """Link de búsqueda en Google Maps para la dirección del cliente."""
    query = quote(f"{address or ''}, {number or ''}", safe='')
    return f"https://www.google.com/maps/search/?api=1&query={query}"


def _company():
    return {
        'name': config.COMPANY_NAME,
        'address': config.COMPANY_ADDRESS,
        'address_2': config.COMPANY_ADDRESS_2,
        'phones': config.COMPANY_PHONES,
        'warranty': config.WARRANTY_TEXT,
    }


def _context(schedule: Schedule, technician: Optional[User], now: Optional[datetime]):
    now = now or datetime.now()
    return {
        'company': _company(),
        'schedule': schedule,
        'technician': technician,
        'client_phone': format_phone(schedule.client_phone),
        'client_address': f"{schedule.client_address}, {schedule.client_number or 'S/N'}",
        'maps_url': maps_url(schedule.client_address, schedule.client_number),
        'generated_date': now.strftime(DATE_FORMAT),
        'generated_time': now.strftime(TIME_FORMAT),
    }


@profile_function(name='Gerar ordem de serviço')
def render_service_order(schedule: Schedule, technician: Optional[User],
                         now: Optional[datetime] = None) -> str:
    """
    Ordem de Serviço finalizada: cliente, atendimento, relatório técnico,
    valor total, termo de garantia y firmas.
    """
    context = _context(schedule, technician, now)
    context['total'] = format_currency(schedule.final_value)
    return _env.get_template('service_order.html').render(**context)


@profile_function(name='Gerar comprovante de agendamento')
def render_appointment_receipt(schedule: Schedule, technician: Optional[User],
                               now: Optional[datetime] = None) -> str:
    """Comprovante de agendamento (200x200mm) entregado al cliente."""
    context = _context(schedule, technician, now)
    return _env.get_template('appointment_receipt.html').render(**context)
