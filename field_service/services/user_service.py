# ==============================================================================
# SERVICIO DE USUARIOS
# ==============================================================================
# Operaciones puras sobre el snapshot: (estado, entrada) -> nuevo estado.
# Nunca modifican el estado recibido; si fallan lanzan OperationError.
#
# REGLA CRÍTICA - ADMIN SEMBRADO:
# La cuenta creada en el primer arranque (config.SEED_ADMIN_ID) NO puede
# eliminarse. Tampoco se puede eliminar la cuenta con la sesión abierta.
# ==============================================================================

import logging
from dataclasses import replace

from field_service import config
from field_service.errors import (
    EmailAlreadyUsed,
    InvalidCredentials,
    MissingSelection,
    ProtectedUser,
)
from field_service.models.entities import AppState, User, UserRole, new_id
from field_service.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_role(role) -> UserRole:
    """
    Normaliza el rol recibido de un formulario.
    Acepta distintas grafías y sinónimos; lo desconocido cae en TECHNICIAN.
    """
    if isinstance(role, UserRole):
        return role
    if not role:
        return UserRole.TECHNICIAN
    low = str(role).strip().lower()
    if low in ('admin', 'administrador', 'administrator'):
        return UserRole.ADMIN
    if low in ('attendant', 'atendente', 'atendimento'):
        return UserRole.ATTENDANT
    return UserRole.TECHNICIAN


def is_protected_user(user_id: str) -> bool:
    return user_id == config.SEED_ADMIN_ID


# =========================================================================
# AUTENTICACIÓN
# =========================================================================

def login(state: AppState, email: str, password: str) -> AppState:
    """
    Abre sesión con email + contraseña.

    Raises:
        InvalidCredentials: si no hay usuario con ese email/contraseña
    """
    email = (email or '').strip()
    user = state.find_user_by_email(email)
    if user is None or not verify_password(user.password, password or ''):
        raise InvalidCredentials()
    logger.info("Login de %s (%s)", user.email, user.role.value)
    return replace(state, current_user_id=user.id)


def logout(state: AppState) -> AppState:
    return replace(state, current_user_id=None)


# =========================================================================
# ALTA Y BAJA DE USUARIOS
# =========================================================================

def _build_user(state: AppState, name, email, password, role, user_id=None, phone=None,
                specialty=None) -> User:
    name = (name or '').strip()
    email = (email or '').strip()
    if not name or not email or not (password or '').strip():
        raise MissingSelection('Preencha nome, e-mail e senha.')
    if state.find_user_by_email(email) is not None:
        raise EmailAlreadyUsed()
    return User(
        id=user_id or new_id(),
        name=name,
        email=email,
        password=hash_password(password or ''),
        role=normalize_role(role),
        phone=phone or None,
        specialty=specialty or None,
        rating_count=0,
        rating_sum=0,
    )


def register(state: AppState, name: str, email: str, password: str, role=UserRole.TECHNICIAN,
             user_id: str = None, phone: str = None, specialty: str = None) -> AppState:
    """
    Crea una cuenta y abre sesión con ella.

    Raises:
        MissingSelection: nombre, email o contraseña en blanco
        EmailAlreadyUsed: si el email ya está registrado
    """
    user = _build_user(state, name, email, password, role, user_id, phone, specialty)
    logger.info("Cuenta registrada: %s (%s)", user.email, user.role.value)
    return replace(state, users=state.users + [user], current_user_id=user.id)


def add_user(state: AppState, name: str, email: str, password: str, role=UserRole.TECHNICIAN,
             user_id: str = None, phone: str = None, specialty: str = None) -> AppState:
    """
    Alta de un miembro del equipo por un administrador.
    A diferencia de register(), la sesión actual no cambia.
    """
    user = _build_user(state, name, email, password, role, user_id, phone, specialty)
    logger.info("Miembro agregado: %s (%s)", user.email, user.role.value)
    return replace(state, users=state.users + [user])


def delete_user(state: AppState, user_id: str) -> AppState:
    """
    Elimina un usuario de la colección.

    Raises:
        MissingSelection: usuario inexistente
        ProtectedUser: admin sembrado o cuenta con la sesión abierta
    """
    user = state.find_user(user_id)
    if user is None:
        raise MissingSelection('Usuário não encontrado.')
    if is_protected_user(user.id):
        raise ProtectedUser('O administrador principal não pode ser removido.')
    if user.id == state.current_user_id:
        raise ProtectedUser('Você não pode remover a sua própria conta.')
    logger.info("Miembro eliminado: %s", user.email)
    return replace(state, users=[u for u in state.users if u.id != user_id])
