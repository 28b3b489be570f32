# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades (dataclasses), máquina de estados de la OS y permisos por rol.
# Independiente del mecanismo de persistencia.
# ==============================================================================

from .entities import (
    # Usuarios
    User,
    UserRole,
    ROLE_LABELS,

    # Ordens de serviço
    Schedule,
    ScheduleStatus,
    STATUS_LABELS,
    TransferHistory,
    ChatMessage,
    ReminderType,

    # Financeiro / avisos
    Sale,
    Expense,
    ExpenseCategory,
    CommissionPayment,
    CommissionPaymentType,
    Notification,
    NotificationType,

    # Agregado
    AppState,

    # Utilidades
    DATE_FORMAT,
    TIME_FORMAT,
    new_id,
)
from .transitions import (
    ScheduleAction,
    TRANSITIONS,
    TERMINAL_STATUSES,
    next_status,
    allowed_actions,
    is_terminal,
)
from .permissions import (
    Permission,
    ROLE_PERMISSIONS,
    has_permission,
    require_permission,
)

__all__ = [
    'User',
    'UserRole',
    'ROLE_LABELS',
    'Schedule',
    'ScheduleStatus',
    'STATUS_LABELS',
    'TransferHistory',
    'ChatMessage',
    'ReminderType',
    'Sale',
    'Expense',
    'ExpenseCategory',
    'CommissionPayment',
    'CommissionPaymentType',
    'Notification',
    'NotificationType',
    'AppState',
    'DATE_FORMAT',
    'TIME_FORMAT',
    'new_id',
    'ScheduleAction',
    'TRANSITIONS',
    'TERMINAL_STATUSES',
    'next_status',
    'allowed_actions',
    'is_terminal',
    'Permission',
    'ROLE_PERMISSIONS',
    'has_permission',
    'require_permission',
]
