# ==============================================================================
# REPOSITORIO DEL ESTADO
# ==============================================================================
# Guarda el snapshot COMPLETO (AppState) en un único archivo:
#   <base_path>/<storage_key>.json
# Se lee una vez al arrancar y se reescribe entero en cada cambio.
# ==============================================================================

import logging
import os

from field_service import config
from field_service.models.entities import AppState, User, UserRole
from field_service.repositories.base import BaseRepository
from field_service.security import hash_password

logger = logging.getLogger(__name__)


def seed_state() -> AppState:
    """Estado inicial: exactamente un administrador (protegido)."""
    admin = User(
        id=config.SEED_ADMIN_ID,
        name=config.SEED_ADMIN_NAME,
        email=config.SEED_ADMIN_EMAIL,
        password=hash_password(config.SEED_ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    return AppState(users=[admin])


class StateRepository(BaseRepository):
    """
    Repositorio del snapshot de la aplicación.

    Formato del archivo:
    {
        "users": [...], "schedules": [...], "sales": [...],
        "expenses": [...], "commissionPayments": [...],
        "notifications": [...], "currentUser": {...} | null
    }
    """

    def __init__(self, base_path: str, storage_key: str = None):
        """
        Args:
            base_path: Directorio de datos
            storage_key: Nombre del blob (default: config.STORAGE_KEY)
        """
        self.storage_key = storage_key or config.STORAGE_KEY
        file_path = os.path.join(base_path, f'{self.storage_key}.json')
        super().__init__(file_path)

    def _empty_data(self):
        return seed_state().to_dict()

    def load(self) -> AppState:
        """
        Carga el snapshot. Si el archivo falta o no se puede interpretar,
        retorna el estado sembrado (sin sobrescribir el archivo).
        """
        raw = self._read_raw()
        try:
            state = AppState.from_dict(raw)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            logger.warning("Snapshot %s inválido (%s), usando estado inicial", self.file_path, e)
            return seed_state()
        logger.info(
            "Snapshot cargado: %d usuarios, %d OS", len(state.users), len(state.schedules)
        )
        return state

    def save(self, state: AppState) -> None:
        """
        Reemplaza el snapshot persistido.

        Raises:
            StorageError: si falla la escritura
        """
        self._write_raw(state.to_dict())
