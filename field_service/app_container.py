# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Punto central para obtener el repositorio, el store y los servicios.
# Facilita:
#   - Testing (cada test crea su contenedor sobre un directorio temporal)
#   - Cambiar el almacenamiento sin tocar servicios ni rutas
# ==============================================================================

import logging
from typing import Optional

from field_service import config
from field_service.repositories import StateRepository
from field_service.services import StateStore, StatsService

logger = logging.getLogger(__name__)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    del store (un único snapshot en memoria por proceso).

    Uso:
        container = AppContainer(base_path='/path/to/data')
        container.store.dispatch(...)
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: str = None, storage_key: str = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: str = None, storage_key: str = None):
        """
        Args:
            base_path: Directorio donde vive el snapshot JSON
            storage_key: Nombre del snapshot (default: config.STORAGE_KEY)
        """
        if self._initialized:
            return

        self._base_path = base_path or config.DATA_DIR
        self._storage_key = storage_key or config.STORAGE_KEY

        # Inicialización perezosa
        self._state_repo: Optional[StateRepository] = None
        self._store: Optional[StateStore] = None
        self._stats_service: Optional[StatsService] = None

        self._initialized = True

    @property
    def base_path(self) -> str:
        return self._base_path

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def state_repo(self) -> StateRepository:
        """Repositorio del snapshot (singleton)."""
        if self._state_repo is None:
            self._state_repo = StateRepository(self._base_path, self._storage_key)
        return self._state_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def store(self) -> StateStore:
        """Store del estado (singleton). Carga el snapshot en el primer acceso."""
        if self._store is None:
            self._store = StateStore(self.state_repo)
        return self._store

    @property
    def stats_service(self) -> StatsService:
        """Servicio de estadísticas (singleton)."""
        if self._stats_service is None:
            self._stats_service = StatsService(config.COMMISSION_RATE)
        return self._stats_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Reinicia todas las instancias (recarga datos en el próximo acceso)."""
        self._state_repo = None
        self._store = None
        self._stats_service = None

    @classmethod
    def get_instance(cls, base_path: str = None, storage_key: str = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.
        base_path/storage_key solo se usan en la primera llamada; si luego
        llegan valores distintos se registra una advertencia.
        """
        if cls._instance is None:
            return cls(base_path, storage_key)
        instance = cls._instance
        if (base_path and base_path != instance._base_path) or \
                (storage_key and storage_key != instance._storage_key):
            logger.warning(
                "Contenedor ya inicializado con %s/%s; se ignora %s/%s",
                instance._base_path, instance._storage_key, base_path, storage_key,
            )
        return instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(base_path: str = None, storage_key: str = None) -> AppContainer:
    """Obtiene el contenedor de dependencias global."""
    return AppContainer.get_instance(base_path, storage_key)
