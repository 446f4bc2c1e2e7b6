from dataclasses import dataclass
from uuid import UUID

COLOR_POR_DEFECTO = "#6b7280"


@dataclass(slots=True)
class Columna:
    id: UUID
    tablero_id: UUID
    titulo: str
    color: str = COLOR_POR_DEFECTO
    posicion: int = 0


# Columnas con las que nace todo tablero: (titulo, color).
COLUMNAS_INICIALES: tuple[tuple[str, str], ...] = (
    ("To Do", "#ef4444"),
    ("In Progress", "#f59e0b"),
    ("Done", "#10b981"),
)
