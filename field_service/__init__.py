# ==============================================================================
# FIELD SERVICE - Gestión de órdenes de servicio (OS) para asistencia técnica
# ==============================================================================
# Paquete principal. Estructura:
# ├── config.py            → Configuración por variables de entorno
# ├── models/              → Entidades, tabla de transiciones, permisos por rol
# ├── repositories/        → Persistencia del snapshot completo (JSON)
# ├── services/            → Operaciones del ciclo de vida, estadísticas, recibos
# ├── main.py              → Superficie Flask (API JSON + recibos HTML)
# └── performance_logger.py → Profiling de rutas
# ==============================================================================

__version__ = '1.0.0'
