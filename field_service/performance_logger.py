# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide el rendimiento de rutas y operaciones sin afectar al usuario.
# Logs legibles en <LOGS_DIR>/performance.log y <LOGS_DIR>/slow_routes.log
#
# ACTIVAR/DESACTIVAR: variable de entorno FIELD_SERVICE_PROFILING
# ==============================================================================

import logging
import os
import threading
import time
from collections import defaultdict
from functools import wraps

from field_service import config

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

perf_logger = logging.getLogger('field_service.performance')
slow_logger = logging.getLogger('field_service.performance.slow')

# Mapeo de rutas a nombres legibles
ROUTE_NAMES = {
    'POST /api/login': 'Entrar',
    'POST /api/register': 'Cadastrar conta',
    'POST /api/logout': 'Sair',
    'GET /api/session': 'Ver sessão',
    'GET /api/users': 'Ver equipe',
    'POST /api/users': 'Adicionar membro',
    'DELETE /api/users/<user_id>': 'Remover membro',
    'GET /api/technicians': 'Listar técnicos',
    'GET /api/schedules': 'Ver agenda',
    'POST /api/schedules': 'Nova OS',
    'POST /api/schedules/<schedule_id>/accept': 'Aceitar OS',
    'POST /api/schedules/<schedule_id>/conclude': 'Concluir OS',
    'POST /api/schedules/<schedule_id>/reschedule': 'Reagendar OS',
    'POST /api/schedules/<schedule_id>/transfer': 'Transferir OS',
    'GET /api/dashboard': 'Ver painel',
    'GET /schedules/<schedule_id>/receipt': 'Comprovante de agendamento',
    'GET /schedules/<schedule_id>/os': 'Ordem de serviço',
}

_handlers_lock = threading.Lock()
_configured_dirs = set()


# ═══════════════════════════════════════════════════════════════════════════
# INICIALIZACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def configure_logging(logs_dir: str = None) -> str:
    """
    Asocia los handlers de archivo a los loggers de performance.
    Idempotente por directorio.

    Returns:
        Directorio de logs usado
    """
    logs_dir = logs_dir or config.LOGS_DIR
    with _handlers_lock:
        if logs_dir in _configured_dirs:
            return logs_dir
        os.makedirs(logs_dir, exist_ok=True)
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')

        for lg in (perf_logger, slow_logger):
            for handler in list(lg.handlers):
                lg.removeHandler(handler)
                handler.close()

        perf_handler = logging.FileHandler(
            os.path.join(logs_dir, 'performance.log'), encoding='utf-8'
        )
        perf_handler.setFormatter(formatter)
        perf_logger.addHandler(perf_handler)
        perf_logger.setLevel(logging.INFO)

        slow_handler = logging.FileHandler(
            os.path.join(logs_dir, 'slow_routes.log'), encoding='utf-8'
        )
        slow_handler.setFormatter(formatter)
        slow_logger.addHandler(slow_handler)
        slow_logger.setLevel(logging.WARNING)
        # slow_routes.log no debe duplicarse en performance.log
        slow_logger.propagate = False

        _configured_dirs.clear()
        _configured_dirs.add(logs_dir)
    return logs_dir


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# Estructura: {nombre_funcion: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def get_function_stats():
    """Copia de las estadísticas acumuladas por función."""
    with _stats_lock:
        return {name: dict(stats) for name, stats in _function_stats.items()}


def reset_function_stats() -> None:
    with _stats_lock:
        _function_stats.clear()


def _get_route_name(method, path, rule=None):
    """Nombre legible de una ruta; si no está mapeada, la ruta cruda."""
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PROFILING DE RUTAS (hooks Flask)
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    action_name = _get_route_name(method, path, rule)
    perf_logger.info(
        "%s | usuário=%s | %s %s | %.0f ms",
        action_name, user or 'anônimo', method, path, time_ms
    )


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    action_name = _get_route_name(method, path, rule)
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL
    slow_logger.log(
        logging.CRITICAL if level == 'CRITICAL' else logging.WARNING,
        "Rota lenta: %s | usuário=%s | %s %s | %.0f ms (limite %d ms)",
        action_name, user or 'anônimo', method, path, time_ms, threshold
    )


def init_profiling(app, logs_dir: str = None, enabled: bool = None):
    """
    Inicializa el profiling en una app Flask.
    Registra hooks before_request y after_request.
    """
    enabled = config.ENABLE_PROFILING if enabled is None else enabled
    if not enabled:
        return
    configure_logging(logs_dir)

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request

        if not hasattr(g, 'start_time'):
            return response
        elapsed = (time.perf_counter() - g.start_time) * 1000

        if request.path.startswith('/static'):
            return response

        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path
        user = getattr(g, 'user_email', None)

        log_route_performance(method, path, rule, elapsed, user)
        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, user, 'WARNING')
        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion(): ...

        @profile_function(name="Aplicar operação")
        def dispatch(): ...
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = (time.perf_counter() - start) * 1000
                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed
                    stats['max_time'] = max(stats['max_time'], elapsed)
                if elapsed >= THRESHOLD_WARNING:
                    slow_logger.warning("Função lenta: %s | %.0f ms", func_name, elapsed)
        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
