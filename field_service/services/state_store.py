# ==============================================================================
# STORE DEL ESTADO - Snapshot en memoria + persistencia completa
# ==============================================================================
# Cada acción del usuario se ejecuta así:
#   1. la operación pura calcula el nuevo estado (o lanza OperationError)
#   2. el snapshot completo se guarda en el repositorio
#   3. recién entonces se reemplaza el estado en memoria
# Si 1 o 2 fallan, el estado queda exactamente como estaba.
# ==============================================================================

import logging
import threading
from typing import Callable

from field_service.errors import OperationError, StorageError
from field_service.models.entities import AppState
from field_service.performance_logger import profile_function
from field_service.repositories.interfaces import IStateRepository

logger = logging.getLogger(__name__)


class StateStore:
    """
    Contenedor explícito del AppState.

    Uso:
        store = StateStore(StateRepository(base_path))
        store.dispatch(user_service.login, 'admin@click.com', '123')
        store.state.current_user
    """

    def __init__(self, repository: IStateRepository):
        self._repository = repository
        self._lock = threading.RLock()
        self._state = repository.load()

    @property
    def state(self) -> AppState:
        return self._state

    @profile_function(name='Aplicar operação')
    def dispatch(self, operation: Callable[..., AppState], *args, **kwargs) -> AppState:
        """
        Aplica una operación del ciclo de vida y persiste el resultado.

        Returns:
            El nuevo estado confirmado

        Raises:
            OperationError: validación fallida (estado sin cambios)
            StorageError: no se pudo guardar (estado sin cambios)
        """
        name = getattr(operation, '__name__', repr(operation))
        with self._lock:
            try:
                new_state = operation(self._state, *args, **kwargs)
            except OperationError as e:
                logger.warning("Operación %s rechazada: %s", name, e)
                raise
            try:
                self._repository.save(new_state)
            except StorageError:
                logger.error("Operación %s no confirmada: falla al persistir", name)
                raise
            self._state = new_state
            logger.info("Operación %s confirmada", name)
            return new_state

    def reload(self) -> AppState:
        """Descarta el estado en memoria y vuelve a leer el persistido."""
        with self._lock:
            self._repository.reload()
            self._state = self._repository.load()
            return self._state
