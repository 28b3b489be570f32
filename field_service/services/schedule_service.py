# ==============================================================================
# SERVICIO DE ORDENS DE SERVIÇO
# ==============================================================================
# Ciclo de vida de la OS como operaciones puras:
#   (estado, entrada) -> nuevo estado
# La legalidad de cada cambio de estado se consulta en models.transitions.
# ==============================================================================

import logging
import math
import re
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional

from field_service.errors import InvalidAmount, MissingSelection, NotSignedIn, PermissionDenied
from field_service.models.entities import (
    DATE_FORMAT,
    TIME_FORMAT,
    AppState,
    Schedule,
    ScheduleStatus,
    TransferHistory,
    UserRole,
    new_id,
)
from field_service.models.permissions import Permission, has_permission
from field_service.models.transitions import ScheduleAction, next_status

logger = logging.getLogger(__name__)


# =========================================================================
# UTILIDADES
# =========================================================================

# Solo dígitos con separador decimal opcional: "150", "150.5", "150,50"
_AMOUNT_RE = re.compile(r'^\d+([.,]\d+)?$')


def parse_amount(value) -> float:
    """
    Interpreta el valor final de una OS.
    Acepta números o texto con punto o coma decimal ("150,50").

    Raises:
        InvalidAmount: vacío, no numérico, infinito/NaN o negativo
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount()
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip()
        if not _AMOUNT_RE.match(text):
            raise InvalidAmount()
        amount = float(text.replace(',', '.'))
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        raise InvalidAmount()
    return amount


def _get_schedule(state: AppState, schedule_id: str, actor_id: str = None) -> Schedule:
    """
    Busca la OS. Con actor_id, exige además que esté atribuida a ese técnico.
    """
    schedule = state.find_schedule(schedule_id) if schedule_id else None
    if schedule is None:
        raise MissingSelection('Nenhuma OS selecionada.')
    if actor_id is not None and schedule.technician_id != actor_id:
        raise PermissionDenied('Esta OS não está atribuída a você.')
    return schedule


def _replace_schedule(state: AppState, updated: Schedule) -> AppState:
    return replace(state, schedules=[
        updated if s.id == updated.id else s for s in state.schedules
    ])


def _get_technician(state: AppState, technician_id: str):
    user = state.find_user(technician_id) if technician_id else None
    if user is None or user.role != UserRole.TECHNICIAN:
        raise MissingSelection('Selecione um técnico válido.')
    return user


# =========================================================================
# CREACIÓN
# =========================================================================

def create_appointment(
    state: AppState,
    client_name: str,
    client_phone: str,
    client_address: str,
    appointment_date: str,
    appointment_time: str,
    technician_id: str,
    description: str,
    client_number: str = None,
    schedule_id: str = None,
) -> AppState:
    """
    Agenda una nueva OS en estado PENDING, atribuida al usuario con sesión.

    Raises:
        NotSignedIn: sin sesión
        MissingSelection: técnico inexistente o que no es técnico
    """
    attendant = state.current_user
    if attendant is None:
        raise NotSignedIn()
    _get_technician(state, technician_id)

    schedule = Schedule(
        id=schedule_id or new_id(),
        client_name=client_name or '',
        client_phone=client_phone or '',
        client_address=client_address or '',
        client_number=client_number or None,
        appointment_date=appointment_date or '',
        appointment_time=appointment_time or '',
        technician_id=technician_id,
        attendant_id=attendant.id,
        attendant_name=attendant.name,
        description=description or '',
        status=ScheduleStatus.PENDING,
        transfers=[],
    )
    logger.info("OS %s agendada por %s para técnico %s", schedule.protocol, attendant.email, technician_id)
    return replace(state, schedules=state.schedules + [schedule])


# =========================================================================
# TRANSICIONES DE ESTADO
# =========================================================================

def accept_appointment(state: AppState, schedule_id: str, actor_id: str = None) -> AppState:
    """PENDING/RESCHEDULED → ACCEPTED."""
    schedule = _get_schedule(state, schedule_id, actor_id)
    status = next_status(schedule.status, ScheduleAction.ACCEPT)
    logger.info("OS %s aceita", schedule.protocol)
    return _replace_schedule(state, replace(schedule, status=status))


def conclude_appointment(
    state: AppState,
    schedule_id: str,
    work_done: str,
    final_value,
    today: Optional[date] = None,
    actor_id: str = None,
) -> AppState:
    """
    ACCEPTED → CONCLUDED, registrando relato, valor final y fecha de conclusión.

    Raises:
        MissingSelection: OS inexistente
        PermissionDenied: la OS no está atribuida a actor_id
        InvalidTransition: la OS no está ACCEPTED
        InvalidAmount: valor final inválido
    """
    schedule = _get_schedule(state, schedule_id, actor_id)
    status = next_status(schedule.status, ScheduleAction.CONCLUDE)
    amount = parse_amount(final_value)
    today = today or date.today()

    updated = replace(
        schedule,
        status=status,
        work_done_description=work_done or '',
        final_value=amount,
        completion_date=today.strftime(DATE_FORMAT),
    )
    logger.info("OS %s concluída - valor %.2f", schedule.protocol, amount)
    return _replace_schedule(state, updated)


def reschedule_appointment(
    state: AppState,
    schedule_id: str,
    appointment_date: str,
    appointment_time: str,
    actor_id: str = None,
) -> AppState:
    """ACCEPTED → RESCHEDULED, sobrescribiendo fecha y hora."""
    schedule = _get_schedule(state, schedule_id, actor_id)
    status = next_status(schedule.status, ScheduleAction.RESCHEDULE)
    updated = replace(
        schedule,
        status=status,
        appointment_date=appointment_date or '',
        appointment_time=appointment_time or '',
    )
    logger.info("OS %s reagendada para %s %s", schedule.protocol, appointment_date, appointment_time)
    return _replace_schedule(state, updated)


def transfer_appointment(
    state: AppState,
    schedule_id: str,
    target_technician_id: str,
    reason: str,
    now: Optional[datetime] = None,
    actor_id: str = None,
) -> AppState:
    """
    Transfiere una OS PENDING a otro técnico.
    Agrega un TransferHistory al final del historial (nunca altera los previos)
    y la OS queda PENDING para que el nuevo técnico la acepte.

    Raises:
        MissingSelection: OS inexistente, destino inválido o igual al actual
        PermissionDenied: la OS no está atribuida a actor_id
        InvalidTransition: la OS no está PENDING
    """
    schedule = _get_schedule(state, schedule_id, actor_id)
    status = next_status(schedule.status, ScheduleAction.TRANSFER)
    target = _get_technician(state, target_technician_id)
    if target.id == schedule.technician_id:
        raise MissingSelection('Selecione um técnico diferente do atual.')

    now = now or datetime.now()
    current = state.find_user(schedule.technician_id)
    entry = TransferHistory(
        from_id=schedule.technician_id,
        from_name=current.name if current else '',
        to_id=target.id,
        to_name=target.name,
        reason=reason or '',
        date=now.strftime(DATE_FORMAT),
        time=now.strftime(TIME_FORMAT),
    )
    updated = replace(
        schedule,
        technician_id=target.id,
        status=status,
        transfers=list(schedule.transfers) + [entry],
    )
    logger.info("OS %s transferida: %s → %s", schedule.protocol, entry.from_name, entry.to_name)
    return _replace_schedule(state, updated)


# =========================================================================
# CONSULTAS
# =========================================================================

def list_schedules(state: AppState, status_filter=None) -> List[Schedule]:
    """
    Agenda visible para el usuario con sesión, más reciente primero.

    - Sin VIEW_ALL_SCHEDULES (técnico): solo sus propias OS
    - Con FILTER_SCHEDULES (admin): filtro opcional por estado
    """
    user = state.current_user
    if user is None:
        raise NotSignedIn()

    schedules = state.schedules
    if not has_permission(user.role, Permission.VIEW_ALL_SCHEDULES):
        schedules = [s for s in schedules if s.technician_id == user.id]
    if status_filter and status_filter != 'ALL' and has_permission(user.role, Permission.FILTER_SCHEDULES):
        try:
            wanted = ScheduleStatus(status_filter)
        except ValueError:
            raise MissingSelection(f'Status desconhecido: {status_filter}') from None
        schedules = [s for s in schedules if s.status == wanted]
    return list(reversed(schedules))
