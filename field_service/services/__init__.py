# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Las operaciones del ciclo de vida son funciones puras (estado → estado)
# 2. El StateStore es el único que persiste y confirma estados
# 3. Las rutas (main.py) solo orquestan request → store.dispatch → response
#
# ESTRUCTURA:
# ├── user_service.py     → Login, registro, alta/baja de miembros
# ├── schedule_service.py → Ciclo de vida de la OS
# ├── stats_service.py    → Ganancias y comisión por ventanas de días
# ├── receipt_service.py  → OS y comprobante en HTML
# └── state_store.py      → Snapshot en memoria + persistencia completa
# ==============================================================================

from field_service.services import schedule_service, user_service
from field_service.services.receipt_service import (
    format_currency,
    format_phone,
    maps_url,
    render_appointment_receipt,
    render_service_order,
)
from field_service.services.state_store import StateStore
from field_service.services.stats_service import StatsService, get_stats_service

__all__ = [
    'schedule_service',
    'user_service',
    'format_currency',
    'format_phone',
    'maps_url',
    'render_appointment_receipt',
    'render_service_order',
    'StateStore',
    'StatsService',
    'get_stats_service',
]
