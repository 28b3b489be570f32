# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# ESTRUCTURA:
# ├── interfaces.py       → Protocolo IStateRepository
# ├── base.py             → Lectura/escritura atómica de archivos JSON
# └── state_repository.py → Snapshot completo de la aplicación
# ==============================================================================

from .interfaces import IStateRepository
from .base import BaseRepository
from .state_repository import StateRepository, seed_state

__all__ = [
    'IStateRepository',
    'BaseRepository',
    'StateRepository',
    'seed_state',
]
