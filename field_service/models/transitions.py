# ==============================================================================
# MÁQUINA DE ESTADOS DE LA OS
# ==============================================================================
# ÚNICO lugar donde se decide si una acción es legal desde un estado.
#
#   PENDING     --accept-->     ACCEPTED
#   PENDING     --transfer-->   PENDING (nuevo técnico)
#   ACCEPTED    --conclude-->   CONCLUDED (terminal)
#   ACCEPTED    --reschedule--> RESCHEDULED
#   RESCHEDULED --accept-->     ACCEPTED
#
# CANCELLED existe en el modelo pero ninguna acción llega a él.
# ==============================================================================

from enum import Enum
from typing import Dict, List, Tuple

from field_service.errors import InvalidTransition
from field_service.models.entities import ScheduleStatus


class ScheduleAction(str, Enum):
    """Acciones que cambian el estado de una OS."""
    ACCEPT = 'accept'
    CONCLUDE = 'conclude'
    RESCHEDULE = 'reschedule'
    TRANSFER = 'transfer'


TRANSITIONS: Dict[Tuple[ScheduleStatus, ScheduleAction], ScheduleStatus] = {
    (ScheduleStatus.PENDING, ScheduleAction.ACCEPT): ScheduleStatus.ACCEPTED,
    (ScheduleStatus.RESCHEDULED, ScheduleAction.ACCEPT): ScheduleStatus.ACCEPTED,
    (ScheduleStatus.PENDING, ScheduleAction.TRANSFER): ScheduleStatus.PENDING,
    (ScheduleStatus.ACCEPTED, ScheduleAction.CONCLUDE): ScheduleStatus.CONCLUDED,
    (ScheduleStatus.ACCEPTED, ScheduleAction.RESCHEDULE): ScheduleStatus.RESCHEDULED,
}

TERMINAL_STATUSES = frozenset([ScheduleStatus.CONCLUDED, ScheduleStatus.CANCELLED])


def next_status(current: ScheduleStatus, action: ScheduleAction) -> ScheduleStatus:
    """
    Retorna el estado resultante de aplicar `action` sobre `current`.

    Raises:
        InvalidTransition: si la combinación no está en la tabla
    """
    try:
        return TRANSITIONS[(ScheduleStatus(current), ScheduleAction(action))]
    except (KeyError, ValueError):
        raise InvalidTransition(current, action) from None


def can_apply(current: ScheduleStatus, action: ScheduleAction) -> bool:
    try:
        return (ScheduleStatus(current), ScheduleAction(action)) in TRANSITIONS
    except ValueError:
        return False


def allowed_actions(current: ScheduleStatus) -> List[ScheduleAction]:
    """Acciones disponibles para una OS (para habilitar botones en la UI)."""
    return [action for action in ScheduleAction if can_apply(current, action)]


def is_terminal(status: ScheduleStatus) -> bool:
    return status in TERMINAL_STATUSES
