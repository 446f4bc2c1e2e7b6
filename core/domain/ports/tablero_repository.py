from abc import ABC, abstractmethod
from datetime import date
from uuid import UUID

from core.domain.models.columna import Columna
from core.domain.models.snapshot import TableroSnapshot
from core.domain.models.tablero import Tablero
from core.domain.models.tarea import Prioridad, Tarea


class TableroRepository(ABC):
    """
    Almacén de posiciones de tableros, columnas y tareas.

    Es el único punto del sistema que escribe posiciones: toda reordenación
    pasa por `reordenar_tarea` o `mover_tarea`, que mantienen el orden
    denso 0..N-1 de forma atómica.
    """

    @abstractmethod
    def crear_tablero(self, tablero: Tablero, columnas: list[Columna]) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_tablero(self, tablero_id: UUID) -> Tablero | None:
        raise NotImplementedError

    @abstractmethod
    def list_tableros(self) -> list[Tablero]:
        raise NotImplementedError

    @abstractmethod
    def get_tablero_completo(self, tablero_id: UUID) -> TableroSnapshot | None:
        raise NotImplementedError

    @abstractmethod
    def get_columna(self, columna_id: UUID) -> Columna | None:
        raise NotImplementedError

    @abstractmethod
    def get_tarea(self, tarea_id: UUID) -> Tarea | None:
        raise NotImplementedError

    @abstractmethod
    def agregar_columna(self, tablero_id: UUID, titulo: str, color: str) -> Columna:
        raise NotImplementedError

    @abstractmethod
    def agregar_tarea(
        self,
        columna_id: UUID,
        titulo: str,
        prioridad: Prioridad = Prioridad.MEDIA,
        fecha_limite: date | None = None,
        descripcion: str | None = None,
    ) -> Tarea:
        raise NotImplementedError

    @abstractmethod
    def reordenar_tarea(self, tarea_id: UUID, nuevo_indice: int, columna_id: UUID) -> None:
        raise NotImplementedError

    @abstractmethod
    def mover_tarea(
        self,
        tarea_id: UUID,
        columna_origen_id: UUID,
        columna_destino_id: UUID,
        nuevo_indice: int,
    ) -> None:
        raise NotImplementedError
