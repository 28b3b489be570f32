# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
# El StateStore depende de este protocolo, no del archivo JSON. Permite usar
# un repositorio en memoria en tests o cambiar el almacenamiento sin tocar
# los servicios.
# ==============================================================================

from typing import Protocol, runtime_checkable

from field_service.models.entities import AppState


@runtime_checkable
class IStateRepository(Protocol):
    """Carga y guarda el snapshot completo de la aplicación."""

    def load(self) -> AppState:
        """Retorna el snapshot persistido (o el sembrado)."""
        ...

    def save(self, state: AppState) -> None:
        """Reemplaza el snapshot persistido. Lanza StorageError si falla."""
        ...

    def reload(self) -> None:
        """Recarga datos desde el almacenamiento."""
        ...
