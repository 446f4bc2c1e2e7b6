from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID


@dataclass(slots=True)
class Tablero:
    id: UUID
    titulo: str
    descripcion: str | None = None
    creado_en: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
