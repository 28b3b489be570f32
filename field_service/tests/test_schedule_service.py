from dataclasses import replace
from datetime import date, datetime

import pytest
from freezegun import freeze_time

from conftest import make_schedule
from field_service.errors import (
    InvalidAmount,
    InvalidTransition,
    MissingSelection,
    NotSignedIn,
    PermissionDenied,
)
from field_service.models import ScheduleStatus
from field_service.services import schedule_service


def _with_schedules(state, *schedules):
    return replace(state, schedules=list(schedules))


# ---------------------------------------------------------------------------
# Creación
# ---------------------------------------------------------------------------

def test_create_appointment_starts_pending(team_state):
    state = replace(team_state, current_user_id='att-1')
    new_state = schedule_service.create_appointment(
        state,
        client_name='João',
        client_phone='1133334444',
        client_address='Av. Paulista',
        client_number='1000',
        appointment_date='2024-05-01',
        appointment_time='14:00',
        technician_id='tec-1',
        description='Troca de tela',
        schedule_id='os-1',
    )
    schedule = new_state.find_schedule('os-1')
    assert schedule.status == ScheduleStatus.PENDING
    assert schedule.attendant_id == 'att-1'
    assert schedule.attendant_name == 'Ana Atendente'
    assert schedule.transfers == []
    assert state.schedules == []


def test_create_requires_valid_technician(team_state):
    with pytest.raises(MissingSelection):
        schedule_service.create_appointment(
            team_state, 'C', '1', 'R', '2024-05-01', '10:00', 'att-1', 'x')
    with pytest.raises(MissingSelection):
        schedule_service.create_appointment(
            team_state, 'C', '1', 'R', '2024-05-01', '10:00', '', 'x')


def test_create_requires_session(team_state):
    state = replace(team_state, current_user_id=None)
    with pytest.raises(NotSignedIn):
        schedule_service.create_appointment(
            state, 'C', '1', 'R', '2024-05-01', '10:00', 'tec-1', 'x')


# ---------------------------------------------------------------------------
# Ciclo de vida
# ---------------------------------------------------------------------------

def test_full_lifecycle(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1'))

    state = schedule_service.accept_appointment(state, 'os-1')
    assert state.find_schedule('os-1').status == ScheduleStatus.ACCEPTED

    state = schedule_service.reschedule_appointment(state, 'os-1', '2024-03-12', '15:30')
    schedule = state.find_schedule('os-1')
    assert schedule.status == ScheduleStatus.RESCHEDULED
    assert (schedule.appointment_date, schedule.appointment_time) == ('2024-03-12', '15:30')

    state = schedule_service.accept_appointment(state, 'os-1')
    state = schedule_service.conclude_appointment(
        state, 'os-1', 'Placa trocada', '150,50', today=date(2024, 3, 12))
    schedule = state.find_schedule('os-1')
    assert schedule.status == ScheduleStatus.CONCLUDED
    assert schedule.final_value == 150.5
    assert schedule.work_done_description == 'Placa trocada'
    assert schedule.completion_date == '12/03/2024'


@freeze_time('2024-07-05 10:00:00')
def test_conclude_uses_today_by_default(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1', ScheduleStatus.ACCEPTED))
    state = schedule_service.conclude_appointment(state, 'os-1', '', 80)
    assert state.find_schedule('os-1').completion_date == '05/07/2024'


@pytest.mark.parametrize('value', [
    '', '   ', 'abc', '-10', None, 'nan', 'inf', True,
    '1_000', '1e3', '0x10', '1.000,50', '+5',
])
def test_conclude_rejects_invalid_amount(team_state, value):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1', ScheduleStatus.ACCEPTED))
    with pytest.raises(InvalidAmount):
        schedule_service.conclude_appointment(state, 'os-1', 'feito', value)
    assert state.find_schedule('os-1').status == ScheduleStatus.ACCEPTED


def test_conclude_accepts_zero(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1', ScheduleStatus.ACCEPTED))
    state = schedule_service.conclude_appointment(state, 'os-1', 'garantia', '0', today=date(2024, 1, 1))
    assert state.find_schedule('os-1').final_value == 0.0


def test_concluded_schedule_is_terminal(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1', ScheduleStatus.CONCLUDED))
    with pytest.raises(InvalidTransition):
        schedule_service.accept_appointment(state, 'os-1')
    with pytest.raises(InvalidTransition):
        schedule_service.conclude_appointment(state, 'os-1', 'de novo', 10)
    with pytest.raises(InvalidTransition):
        schedule_service.transfer_appointment(state, 'os-1', 'tec-2', 'x')


def test_reschedule_only_from_accepted(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1'))
    with pytest.raises(InvalidTransition):
        schedule_service.reschedule_appointment(state, 'os-1', '2024-04-01', '10:00')


def test_unknown_schedule(team_state):
    with pytest.raises(MissingSelection):
        schedule_service.accept_appointment(team_state, 'nao-existe')


# ---------------------------------------------------------------------------
# Transferencia
# ---------------------------------------------------------------------------

def test_transfer_appends_history(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1'))
    now = datetime(2024, 3, 9, 16, 45, 10)

    state = schedule_service.transfer_appointment(state, 'os-1', 'tec-2', 'Folga', now=now)
    schedule = state.find_schedule('os-1')
    assert schedule.technician_id == 'tec-2'
    assert schedule.status == ScheduleStatus.PENDING
    assert len(schedule.transfers) == 1
    entry = schedule.transfers[0]
    assert (entry.from_id, entry.from_name) == ('tec-1', 'Carlos Técnico')
    assert (entry.to_id, entry.to_name) == ('tec-2', 'Bruno Técnico')
    assert (entry.reason, entry.date, entry.time) == ('Folga', '09/03/2024', '16:45:10')

    state = schedule_service.transfer_appointment(state, 'os-1', 'tec-1', 'Volta', now=now)
    transfers = state.find_schedule('os-1').transfers
    assert len(transfers) == 2
    assert transfers[0] == entry
    assert transfers[1].from_id == 'tec-2'


def test_transfer_rejects_same_or_invalid_target(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1'))
    with pytest.raises(MissingSelection):
        schedule_service.transfer_appointment(state, 'os-1', 'tec-1', 'x')
    with pytest.raises(MissingSelection):
        schedule_service.transfer_appointment(state, 'os-1', 'att-1', 'x')


def test_transfer_requires_pending(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1', ScheduleStatus.ACCEPTED))
    with pytest.raises(InvalidTransition):
        schedule_service.transfer_appointment(state, 'os-1', 'tec-2', 'x')


# ---------------------------------------------------------------------------
# Listado
# ---------------------------------------------------------------------------

def test_list_schedules_by_role(team_state):
    state = _with_schedules(
        team_state,
        make_schedule('os-1', 'tec-1'),
        make_schedule('os-2', 'tec-2', ScheduleStatus.ACCEPTED),
        make_schedule('os-3', 'tec-1', ScheduleStatus.CONCLUDED),
    )
    assert [s.id for s in schedule_service.list_schedules(state)] == ['os-3', 'os-2', 'os-1']
    assert [s.id for s in schedule_service.list_schedules(state, 'ACCEPTED')] == ['os-2']

    tech = replace(state, current_user_id='tec-1')
    assert [s.id for s in schedule_service.list_schedules(tech)] == ['os-3', 'os-1']

    # el filtro solo aplica para quien puede filtrar
    attendant = replace(state, current_user_id='att-1')
    assert len(schedule_service.list_schedules(attendant, 'ACCEPTED')) == 3


def test_list_schedules_bad_filter(team_state):
    with pytest.raises(MissingSelection):
        schedule_service.list_schedules(team_state, 'QUALQUER')


def test_parse_amount():
    assert schedule_service.parse_amount('1234,5') == 1234.5
    assert schedule_service.parse_amount(' 99.90 ') == 99.9
    assert schedule_service.parse_amount(7) == 7.0


# ---------------------------------------------------------------------------
# Atribución al técnico
# ---------------------------------------------------------------------------

def test_actor_must_own_the_schedule(team_state):
    state = _with_schedules(
        team_state,
        make_schedule('os-1', 'tec-1'),
        make_schedule('os-2', 'tec-1', ScheduleStatus.ACCEPTED),
    )
    with pytest.raises(PermissionDenied):
        schedule_service.accept_appointment(state, 'os-1', actor_id='tec-2')
    with pytest.raises(PermissionDenied):
        schedule_service.transfer_appointment(state, 'os-1', 'tec-2', 'x', actor_id='tec-2')
    with pytest.raises(PermissionDenied):
        schedule_service.conclude_appointment(state, 'os-2', 'feito', '10', actor_id='tec-2')
    with pytest.raises(PermissionDenied):
        schedule_service.reschedule_appointment(state, 'os-2', '2024-04-01', '10:00', actor_id='tec-2')

    state = schedule_service.accept_appointment(state, 'os-1', actor_id='tec-1')
    assert state.find_schedule('os-1').status == ScheduleStatus.ACCEPTED


def test_ownership_follows_the_transfer(team_state):
    state = _with_schedules(team_state, make_schedule('os-1', 'tec-1'))
    state = schedule_service.transfer_appointment(state, 'os-1', 'tec-2', 'Folga', actor_id='tec-1')

    with pytest.raises(PermissionDenied):
        schedule_service.accept_appointment(state, 'os-1', actor_id='tec-1')
    state = schedule_service.accept_appointment(state, 'os-1', actor_id='tec-2')
    assert state.find_schedule('os-1').status == ScheduleStatus.ACCEPTED
