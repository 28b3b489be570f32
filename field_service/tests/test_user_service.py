from dataclasses import replace

import pytest

from field_service.errors import EmailAlreadyUsed, InvalidCredentials, MissingSelection, ProtectedUser
from field_service.models import AppState, User, UserRole
from field_service.repositories import seed_state
from field_service.security import is_password_hash, verify_password
from field_service.services import user_service


# ---------------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------------

def test_login_with_seed_admin():
    state = seed_state()
    new_state = user_service.login(state, 'admin@click.com', '123')
    assert new_state.current_user.id == 'admin-1'
    assert new_state.current_user.role == UserRole.ADMIN
    # el estado recibido no cambia
    assert state.current_user_id is None


@pytest.mark.parametrize('email, password', [
    ('admin@click.com', 'errada'),
    ('ninguem@click.com', '123'),
    ('', ''),
])
def test_login_rejects_bad_credentials(email, password):
    state = seed_state()
    with pytest.raises(InvalidCredentials) as exc:
        user_service.login(state, email, password)
    assert str(exc.value) == 'E-mail ou senha incorretos.'
    assert state.current_user_id is None


def test_login_is_idempotent():
    first = user_service.login(seed_state(), 'admin@click.com', '123')
    second = user_service.login(first, 'admin@click.com', '123')
    assert second == first
    assert second.current_user_id == 'admin-1'


def test_login_accepts_legacy_plaintext_password():
    legacy = User(id='u1', name='Antigo', email='old@click.com', password='abc', role=UserRole.ATTENDANT)
    state = AppState(users=[legacy])
    assert user_service.login(state, 'old@click.com', 'abc').current_user_id == 'u1'
    with pytest.raises(InvalidCredentials):
        user_service.login(state, 'old@click.com', 'ABC')


def test_logout_clears_session(team_state):
    assert user_service.logout(team_state).current_user is None


# ---------------------------------------------------------------------------
# Registro / alta
# ---------------------------------------------------------------------------

def test_register_signs_in_new_user():
    state = user_service.register(seed_state(), 'Joana', 'joana@click.com', 'segredo',
                                  UserRole.TECHNICIAN, user_id='tec-9')
    user = state.current_user
    assert user.id == 'tec-9'
    assert user.role == UserRole.TECHNICIAN
    assert user.rating_count == 0 and user.rating_sum == 0
    assert is_password_hash(user.password)
    assert verify_password(user.password, 'segredo')
    assert len(state.users) == 2


def test_register_duplicate_email_fails():
    state = seed_state()
    with pytest.raises(EmailAlreadyUsed):
        user_service.register(state, 'Outro', 'admin@click.com', 'x')
    assert len(state.users) == 1


@pytest.mark.parametrize('name, email, password', [
    ('', '', ''),
    ('   ', 'x@click.com', '1'),
    ('Joana', '  ', '1'),
    ('Joana', 'joana@click.com', '  '),
    (None, None, None),
])
def test_blank_fields_are_rejected(name, email, password):
    state = seed_state()
    with pytest.raises(MissingSelection) as exc:
        user_service.register(state, name, email, password)
    assert str(exc.value) == 'Preencha nome, e-mail e senha.'
    with pytest.raises(MissingSelection):
        user_service.add_user(state, name, email, password)
    assert len(state.users) == 1


def test_blank_credentials_never_sign_in():
    state = seed_state()
    with pytest.raises(MissingSelection):
        state = user_service.register(state, '', '', '')
    with pytest.raises(InvalidCredentials):
        user_service.login(state, '', '')


def test_add_user_keeps_session(team_state):
    state = user_service.add_user(team_state, 'Nova', 'nova@click.com', '1', 'atendente', user_id='att-2')
    assert state.current_user_id == 'admin-1'
    assert state.find_user('att-2').role == UserRole.ATTENDANT


@pytest.mark.parametrize('raw, expected', [
    ('ADMIN', UserRole.ADMIN),
    ('Administrador', UserRole.ADMIN),
    ('attendant', UserRole.ATTENDANT),
    ('TECHNICIAN', UserRole.TECHNICIAN),
    ('qualquer', UserRole.TECHNICIAN),
    (None, UserRole.TECHNICIAN),
])
def test_normalize_role(raw, expected):
    assert user_service.normalize_role(raw) == expected


# ---------------------------------------------------------------------------
# Baja
# ---------------------------------------------------------------------------

def test_delete_user(team_state):
    state = user_service.delete_user(team_state, 'tec-2')
    assert state.find_user('tec-2') is None
    assert team_state.find_user('tec-2') is not None


def test_seed_admin_cannot_be_deleted(team_state):
    state = replace(team_state, current_user_id='att-1')
    with pytest.raises(ProtectedUser):
        user_service.delete_user(state, 'admin-1')


def test_current_user_cannot_delete_self(team_state):
    state = user_service.add_user(team_state, 'Chefe', 'chefe@click.com', '1', UserRole.ADMIN, user_id='adm-2')
    state = replace(state, current_user_id='adm-2')
    with pytest.raises(ProtectedUser):
        user_service.delete_user(state, 'adm-2')


def test_delete_unknown_user(team_state):
    with pytest.raises(MissingSelection):
        user_service.delete_user(team_state, 'nao-existe')
