# ==============================================================================
# APLICACIÓN FLASK - API JSON + comprobantes HTML
# ==============================================================================
# Las rutas solo orquestan: request → store.dispatch(operación) → response.
# Toda validación de negocio vive en services/; los permisos por rol en
# models/permissions.py. La atribución de la OS al técnico se verifica dentro
# de la operación despachada (actor_id), bajo el lock del store.
#
# Errores: cualquier OperationError se responde como
#   {"ok": false, "error": "<mensaje>", "code": "<NombreDelError>"}
# ==============================================================================

import logging
from functools import wraps

from flask import Blueprint, Flask, current_app, g, jsonify, request

from field_service.app_container import AppContainer, get_container
from field_service.errors import (
    InvalidCredentials,
    MissingSelection,
    NotSignedIn,
    OperationError,
    PermissionDenied,
    StorageError,
)
from field_service.models import (
    AppState,
    Permission,
    Schedule,
    UserRole,
    allowed_actions,
    new_id,
    require_permission,
)
from field_service.performance_logger import init_profiling
from field_service.services import (
    maps_url,
    render_appointment_receipt,
    render_service_order,
    schedule_service,
    user_service,
)

logger = logging.getLogger(__name__)

api = Blueprint('field_service', __name__)


# ═══════════════════════════════════════════════════════════════════════════
# UTILIDADES
# ═══════════════════════════════════════════════════════════════════════════

def _container() -> AppContainer:
    return current_app.extensions['field_service']


def _store():
    return _container().store


def _payload():
    return request.get_json(silent=True) or request.form.to_dict()


def _ok(status=200, **data):
    body = {'ok': True}
    body.update(data)
    return jsonify(body), status


def _schedule_json(schedule: Schedule, state: AppState):
    data = schedule.to_dict()
    technician = state.find_user(schedule.technician_id)
    data['technicianName'] = technician.name if technician else None
    data['statusLabel'] = schedule.status_label
    data['allowedActions'] = [a.value for a in allowed_actions(schedule.status)]
    data['mapsUrl'] = maps_url(schedule.client_address, schedule.client_number)
    return data


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        user = _store().state.current_user
        if user is None:
            raise NotSignedIn()
        g.user_email = user.email
        return f(*args, **kwargs)
    return wrapper


def permission_required(permission: Permission):
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            user = require_permission(_store().state.current_user, permission)
            g.user_id = user.id
            g.user_email = user.email
            return f(*args, **kwargs)
        return wrapper
    return deco


# ═══════════════════════════════════════════════════════════════════════════
# SESIÓN
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/api/login', methods=['POST'])
def login():
    data = _payload()
    state = _store().dispatch(user_service.login, data.get('email'), data.get('password'))
    return _ok(user=state.current_user.to_public_dict())


@api.route('/api/register', methods=['POST'])
def register():
    data = _payload()
    state = _store().dispatch(
        user_service.register,
        data.get('name'),
        data.get('email'),
        data.get('password'),
        user_service.normalize_role(data.get('role')),
        phone=data.get('phone'),
        specialty=data.get('specialty'),
    )
    return _ok(201, user=state.current_user.to_public_dict())


@api.route('/api/logout', methods=['POST'])
@login_required
def logout():
    _store().dispatch(user_service.logout)
    return _ok()


@api.route('/api/session', methods=['GET'])
def session_info():
    user = _store().state.current_user
    return _ok(user=user.to_public_dict() if user else None)


# ═══════════════════════════════════════════════════════════════════════════
# EQUIPE
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/api/users', methods=['GET'])
@permission_required(Permission.MANAGE_STAFF)
def list_users():
    return _ok(users=[u.to_public_dict() for u in _store().state.users])


@api.route('/api/users', methods=['POST'])
@permission_required(Permission.MANAGE_STAFF)
def add_user():
    data = _payload()
    user_id = new_id()
    state = _store().dispatch(
        user_service.add_user,
        data.get('name'),
        data.get('email'),
        data.get('password'),
        user_service.normalize_role(data.get('role')),
        user_id=user_id,
        phone=data.get('phone'),
        specialty=data.get('specialty'),
    )
    return _ok(201, user=state.find_user(user_id).to_public_dict())


@api.route('/api/users/<user_id>', methods=['DELETE'])
@permission_required(Permission.MANAGE_STAFF)
def delete_user(user_id):
    _store().dispatch(user_service.delete_user, user_id)
    return _ok()


@api.route('/api/technicians', methods=['GET'])
@login_required
def list_technicians():
    technicians = _store().state.users_with_role(UserRole.TECHNICIAN)
    return _ok(technicians=[{'id': t.id, 'name': t.name} for t in technicians])


# ═══════════════════════════════════════════════════════════════════════════
# AGENDA (OS)
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/api/schedules', methods=['GET'])
@login_required
def list_schedules():
    state = _store().state
    schedules = schedule_service.list_schedules(state, request.args.get('status'))
    return _ok(schedules=[_schedule_json(s, state) for s in schedules])


@api.route('/api/schedules', methods=['POST'])
@permission_required(Permission.CREATE_SCHEDULE)
def create_schedule():
    data = _payload()
    schedule_id = new_id()
    state = _store().dispatch(
        schedule_service.create_appointment,
        client_name=data.get('clientName'),
        client_phone=data.get('clientPhone'),
        client_address=data.get('clientAddress'),
        client_number=data.get('clientNumber'),
        appointment_date=data.get('date'),
        appointment_time=data.get('time'),
        technician_id=data.get('technicianId'),
        description=data.get('description'),
        schedule_id=schedule_id,
    )
    schedule = state.find_schedule(schedule_id)
    return _ok(
        201,
        schedule=_schedule_json(schedule, state),
        receiptUrl=f'/schedules/{schedule_id}/receipt',
    )


@api.route('/api/schedules/<schedule_id>/accept', methods=['POST'])
@permission_required(Permission.HANDLE_SCHEDULE)
def accept_schedule(schedule_id):
    state = _store().dispatch(
        schedule_service.accept_appointment, schedule_id, actor_id=g.user_id
    )
    return _ok(schedule=_schedule_json(state.find_schedule(schedule_id), state))


@api.route('/api/schedules/<schedule_id>/conclude', methods=['POST'])
@permission_required(Permission.HANDLE_SCHEDULE)
def conclude_schedule(schedule_id):
    data = _payload()
    state = _store().dispatch(
        schedule_service.conclude_appointment,
        schedule_id,
        data.get('workDone'),
        data.get('finalValue'),
        actor_id=g.user_id,
    )
    return _ok(
        schedule=_schedule_json(state.find_schedule(schedule_id), state),
        serviceOrderUrl=f'/schedules/{schedule_id}/os',
    )


@api.route('/api/schedules/<schedule_id>/reschedule', methods=['POST'])
@permission_required(Permission.HANDLE_SCHEDULE)
def reschedule_schedule(schedule_id):
    data = _payload()
    state = _store().dispatch(
        schedule_service.reschedule_appointment,
        schedule_id,
        data.get('date'),
        data.get('time'),
        actor_id=g.user_id,
    )
    return _ok(schedule=_schedule_json(state.find_schedule(schedule_id), state))


@api.route('/api/schedules/<schedule_id>/transfer', methods=['POST'])
@permission_required(Permission.HANDLE_SCHEDULE)
def transfer_schedule(schedule_id):
    data = _payload()
    state = _store().dispatch(
        schedule_service.transfer_appointment,
        schedule_id,
        data.get('technicianId'),
        data.get('reason'),
        actor_id=g.user_id,
    )
    return _ok(schedule=_schedule_json(state.find_schedule(schedule_id), state))


# ═══════════════════════════════════════════════════════════════════════════
# PAINEL
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/api/dashboard', methods=['GET'])
@login_required
def dashboard():
    return _ok(**_container().stats_service.dashboard(_store().state))


# ═══════════════════════════════════════════════════════════════════════════
# COMPROVANTES (HTML)
# ═══════════════════════════════════════════════════════════════════════════

def _receipt_target(schedule_id):
    state = _store().state
    schedule = state.find_schedule(schedule_id)
    if schedule is None:
        raise MissingSelection('Nenhuma OS selecionada.')
    return schedule, state.find_user(schedule.technician_id)


@api.route('/schedules/<schedule_id>/receipt', methods=['GET'])
@permission_required(Permission.VIEW_RECEIPTS)
def appointment_receipt(schedule_id):
    schedule, technician = _receipt_target(schedule_id)
    html = render_appointment_receipt(schedule, technician)
    return html, 200, {'Content-Type': 'text/html; charset=utf-8'}


@api.route('/schedules/<schedule_id>/os', methods=['GET'])
@permission_required(Permission.VIEW_RECEIPTS)
def service_order(schedule_id):
    schedule, technician = _receipt_target(schedule_id)
    html = render_service_order(schedule, technician)
    return html, 200, {'Content-Type': 'text/html; charset=utf-8'}


# ═══════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════

_HTTP_STATUS = (
    (InvalidCredentials, 401),
    (NotSignedIn, 401),
    (PermissionDenied, 403),
)


def _handle_operation_error(error: OperationError):
    status = 400
    for error_cls, code in _HTTP_STATUS:
        if isinstance(error, error_cls):
            status = code
            break
    return jsonify({'ok': False, 'error': error.message, 'code': error.code}), status


def _handle_storage_error(error: StorageError):
    logger.error("Error de almacenamiento en %s %s: %s", request.method, request.path, error)
    return jsonify({'ok': False, 'error': str(error), 'code': 'StorageError'}), 500


# ═══════════════════════════════════════════════════════════════════════════
# FÁBRICA
# ═══════════════════════════════════════════════════════════════════════════

def create_app(base_path: str = None, storage_key: str = None,
               enable_profiling: bool = None, logs_dir: str = None) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        base_path: Directorio del snapshot (default: config.DATA_DIR)
        storage_key: Nombre del snapshot (default: config.STORAGE_KEY)
        enable_profiling: Activa los logs de rendimiento (default: config)
        logs_dir: Directorio de logs (default: config.LOGS_DIR)
    """
    app = Flask(__name__)
    app.json.ensure_ascii = False

    container = get_container(base_path, storage_key)
    app.extensions['field_service'] = container

    init_profiling(app, logs_dir=logs_dir, enabled=enable_profiling)
    app.register_blueprint(api)
    app.register_error_handler(OperationError, _handle_operation_error)
    app.register_error_handler(StorageError, _handle_storage_error)

    logger.info("Aplicación iniciada con datos en %s", container.base_path)
    return app
