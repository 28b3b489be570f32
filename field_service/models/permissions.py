# ==============================================================================
# PERMISOS POR ROL
# ==============================================================================
# Mapeo cerrado rol → permisos. Si se agrega un rol a UserRole sin declarar
# sus permisos aquí, el import de este módulo falla.
# ==============================================================================

from enum import Enum
from typing import Dict, FrozenSet, Optional

from field_service.errors import NotSignedIn, PermissionDenied
from field_service.models.entities import User, UserRole


class Permission(str, Enum):
    VIEW_TEAM_COUNTS = 'view_team_counts'      # Totales de OS y técnicos
    VIEW_EARNINGS = 'view_earnings'            # Ganancias y comisión propias
    MANAGE_STAFF = 'manage_staff'              # Alta/baja de miembros
    CREATE_SCHEDULE = 'create_schedule'        # Nueva OS
    FILTER_SCHEDULES = 'filter_schedules'      # Filtro por estado en la agenda
    VIEW_ALL_SCHEDULES = 'view_all_schedules'  # Ver OS de todos los técnicos
    HANDLE_SCHEDULE = 'handle_schedule'        # Aceptar, concluir, reagendar, transferir
    VIEW_RECEIPTS = 'view_receipts'


ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.ADMIN: frozenset([
        Permission.VIEW_TEAM_COUNTS,
        Permission.MANAGE_STAFF,
        Permission.CREATE_SCHEDULE,
        Permission.FILTER_SCHEDULES,
        Permission.VIEW_ALL_SCHEDULES,
        Permission.VIEW_RECEIPTS,
    ]),
    UserRole.ATTENDANT: frozenset([
        Permission.VIEW_TEAM_COUNTS,
        Permission.CREATE_SCHEDULE,
        Permission.VIEW_ALL_SCHEDULES,
        Permission.VIEW_RECEIPTS,
    ]),
    UserRole.TECHNICIAN: frozenset([
        Permission.VIEW_EARNINGS,
        Permission.HANDLE_SCHEDULE,
        Permission.VIEW_RECEIPTS,
    ]),
}

_missing_roles = set(UserRole) - set(ROLE_PERMISSIONS)
if _missing_roles:
    raise RuntimeError(
        f"Roles sin permisos declarados: {sorted(r.value for r in _missing_roles)}"
    )


def has_permission(role: UserRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS[UserRole(role)]


def require_permission(user: Optional[User], permission: Permission) -> User:
    """
    Verifica que haya sesión y que el rol tenga el permiso.

    Returns:
        El usuario verificado

    Raises:
        NotSignedIn: sin sesión
        PermissionDenied: el rol no tiene el permiso
    """
    if user is None:
        raise NotSignedIn()
    if not has_permission(user.role, permission):
        raise PermissionDenied()
    return user
