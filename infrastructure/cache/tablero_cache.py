import logging
import threading
from uuid import UUID

from core.domain.models.snapshot import TableroSnapshot
from core.domain.ports.revalidador import CacheTableros

logger = logging.getLogger(__name__)


class CacheEnMemoria(CacheTableros):
    """
    Caché de lecturas de tablero completo, invalidada tras cada commit.

    Cada invalidación sube la generación del tablero; `put` descarta un
    snapshot leído antes de la última invalidación.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshots: dict[UUID, TableroSnapshot] = {}
        self._generaciones: dict[UUID, int] = {}

    def generacion(self, tablero_id: UUID) -> int:
        with self._lock:
            return self._generaciones.get(tablero_id, 0)

    def get(self, tablero_id: UUID) -> TableroSnapshot | None:
        with self._lock:
            return self._snapshots.get(tablero_id)

    def put(self, snapshot: TableroSnapshot, generacion: int = 0) -> None:
        tablero_id = snapshot.tablero.id
        with self._lock:
            if self._generaciones.get(tablero_id, 0) != generacion:
                return
            self._snapshots[tablero_id] = snapshot

    def invalidar(self, tablero_id: UUID) -> None:
        with self._lock:
            self._snapshots.pop(tablero_id, None)
            self._generaciones[tablero_id] = self._generaciones.get(tablero_id, 0) + 1
        logger.debug(f"Tablero {tablero_id} invalidado en caché")

    def limpiar(self) -> None:
        with self._lock:
            self._snapshots.clear()
            self._generaciones.clear()
