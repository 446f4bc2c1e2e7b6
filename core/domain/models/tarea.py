from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID


class Prioridad(Enum):
    BAJA = "LOW"
    MEDIA = "MEDIUM"
    ALTA = "HIGH"
    URGENTE = "URGENT"


@dataclass(slots=True)
class Tarea:
    id: UUID
    columna_id: UUID
    titulo: str
    descripcion: str | None = None
    prioridad: Prioridad = Prioridad.MEDIA
    fecha_limite: date | None = None
    posicion: int = 0
