# ==============================================================================
# CONFIGURACIÓN - Variables de entorno y constantes del negocio
# ==============================================================================
# Todo valor configurable se lee de variables de entorno con un default sano.
# Ejemplo:
#   export FIELD_SERVICE_DATA_DIR="/var/lib/field_service"
#   export FIELD_SERVICE_COMMISSION_RATE="0.07"
# ==============================================================================

import logging
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

logger = logging.getLogger(__name__)


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw.replace(',', '.'))
    except ValueError:
        logger.warning("%s=%r no es numérico, usando %s", name, raw, default)
        return default


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


# ═══════════════════════════════════════════════════════════════════════════
# PERSISTENCIA
# ═══════════════════════════════════════════════════════════════════════════
# El estado completo vive en un único archivo <DATA_DIR>/<STORAGE_KEY>.json
DATA_DIR = os.environ.get('FIELD_SERVICE_DATA_DIR', os.path.join(BASE_DIR, 'data'))
STORAGE_KEY = os.environ.get('FIELD_SERVICE_STORAGE_KEY', 'click_geomaqui_v28')

# Cuenta administradora sembrada en el primer arranque (protegida)
SEED_ADMIN_ID = 'admin-1'
SEED_ADMIN_NAME = 'Administrador Principal'
SEED_ADMIN_EMAIL = 'admin@click.com'
SEED_ADMIN_PASSWORD = '123'

# ═══════════════════════════════════════════════════════════════════════════
# FINANZAS
# ═══════════════════════════════════════════════════════════════════════════
COMMISSION_RATE = _env_float('FIELD_SERVICE_COMMISSION_RATE', 0.07)

# ═══════════════════════════════════════════════════════════════════════════
# LOGS Y PROFILING
# ═══════════════════════════════════════════════════════════════════════════
ENABLE_PROFILING = _env_bool('FIELD_SERVICE_PROFILING', True)
LOGS_DIR = os.environ.get('FIELD_SERVICE_LOGS_DIR', os.path.join(BASE_DIR, 'logs'))

# ═══════════════════════════════════════════════════════════════════════════
# DATOS DE LA EMPRESA (cabecera de recibos)
# ═══════════════════════════════════════════════════════════════════════════
COMPANY_NAME = os.environ.get('FIELD_SERVICE_COMPANY_NAME', 'Click Geomaqui')
COMPANY_ADDRESS = os.environ.get('FIELD_SERVICE_COMPANY_ADDRESS', '')
COMPANY_ADDRESS_2 = os.environ.get('FIELD_SERVICE_COMPANY_ADDRESS_2', '')
COMPANY_PHONES = os.environ.get('FIELD_SERVICE_COMPANY_PHONES', '')
WARRANTY_TEXT = os.environ.get(
    'FIELD_SERVICE_WARRANTY_TEXT',
    'Garantia de 90 dias para o serviço executado, contados a partir da data de conclusão. '
    'A garantia não cobre mau uso, quedas ou intervenção de terceiros.'
)
