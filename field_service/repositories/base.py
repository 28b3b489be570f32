# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para acceso a archivos JSON
# ==============================================================================

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Any

from field_service.errors import StorageError

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """
    Clase base abstracta para repositorios respaldados por un archivo JSON.

    - Lectura tolerante: archivo ausente o corrupto → datos vacíos
    - Escritura atómica: archivo temporal + os.replace
    - Los errores de escritura se propagan como StorageError
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        self.file_path = file_path
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con los datos vacíos si no existe."""
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Retorna la estructura inicial para este repositorio.
        Debe ser implementado por cada repositorio concreto.
        """
        pass

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados, o los datos vacíos si el archivo no existe
            o tiene JSON inválido
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except FileNotFoundError:
                return self._empty_data()
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Archivo %s ilegible (%s), usando datos iniciales", self.file_path, e)
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON de forma atómica.

        Raises:
            StorageError: si no se pudo escribir (disco lleno, permisos, ...)
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                directory = os.path.dirname(self.file_path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except OSError as e:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                logger.error("No se pudo escribir %s: %s", self.file_path, e)
                raise StorageError(f'Falha ao gravar os dados: {e}') from e

    def reload(self) -> None:
        """Las subclases con caché pueden sobrescribir para invalidarla."""
        pass
