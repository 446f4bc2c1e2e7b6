"""
Vistas inmutables de un tablero completo.

Cada mutación de la proyección produce un snapshot nuevo; nunca se
modifica uno existente.
"""

from dataclasses import dataclass
from uuid import UUID

from core.domain.models.columna import Columna
from core.domain.models.tablero import Tablero
from core.domain.models.tarea import Tarea


@dataclass(frozen=True, slots=True)
class ColumnaSnapshot:
    columna: Columna
    tareas: tuple[Tarea, ...] = ()

    @property
    def id(self) -> UUID:
        return self.columna.id

    def indice_de(self, tarea_id: UUID) -> int | None:
        for indice, tarea in enumerate(self.tareas):
            if tarea.id == tarea_id:
                return indice
        return None


@dataclass(frozen=True, slots=True)
class TableroSnapshot:
    tablero: Tablero
    columnas: tuple[ColumnaSnapshot, ...] = ()
    version: int = 0

    def columna(self, columna_id: UUID) -> ColumnaSnapshot | None:
        for columna in self.columnas:
            if columna.id == columna_id:
                return columna
        return None

    def columna_de_tarea(self, tarea_id: UUID) -> ColumnaSnapshot | None:
        for columna in self.columnas:
            if columna.indice_de(tarea_id) is not None:
                return columna
        return None
