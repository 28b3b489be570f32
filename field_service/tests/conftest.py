import pytest

from field_service.app_container import AppContainer
from field_service.main import create_app
from field_service.models import Schedule, ScheduleStatus, User, UserRole
from field_service.repositories import seed_state
from field_service.security import hash_password


@pytest.fixture(autouse=True)
def fresh_container():
    AppContainer.reset_instance()
    yield
    AppContainer.reset_instance()


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / 'data')


@pytest.fixture
def app(data_dir, tmp_path):
    return create_app(base_path=data_dir, enable_profiling=False, logs_dir=str(tmp_path / 'logs'))


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def make_user(user_id, name, role, password='1234'):
    return User(
        id=user_id,
        name=name,
        email=f'{user_id}@click.com',
        password=hash_password(password),
        role=role,
    )


def make_schedule(schedule_id, technician_id, status=ScheduleStatus.PENDING, **extra):
    values = dict(
        id=schedule_id,
        client_name='Maria Souza',
        client_phone='11987654321',
        client_address='Rua das Flores',
        client_number='120',
        appointment_date='2024-03-10',
        appointment_time='09:00',
        technician_id=technician_id,
        attendant_name='Ana',
        description='Notebook não liga',
        status=status,
    )
    values.update(extra)
    return Schedule(**values)


@pytest.fixture
def team_state():
    """Admin sembrado + atendente + dos técnicos, sesión del admin."""
    state = seed_state()
    state.users.extend([
        make_user('att-1', 'Ana Atendente', UserRole.ATTENDANT),
        make_user('tec-1', 'Carlos Técnico', UserRole.TECHNICIAN),
        make_user('tec-2', 'Bruno Técnico', UserRole.TECHNICIAN),
    ])
    state.current_user_id = 'admin-1'
    return state


