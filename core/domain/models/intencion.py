from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ReordenarEnColumna:
    tarea_id: UUID
    columna_id: UUID
    nuevo_indice: int


@dataclass(frozen=True, slots=True)
class MoverEntreColumnas:
    tarea_id: UUID
    columna_origen_id: UUID
    columna_destino_id: UUID
    nuevo_indice: int


Intencion = ReordenarEnColumna | MoverEntreColumnas
