from dataclasses import dataclass
from datetime import date
from uuid import UUID

from core.application.validacion import requerir_titulo, texto_opcional
from core.domain.errors import NoEncontrado
from core.domain.models.tarea import Prioridad, Tarea
from core.domain.ports.revalidador import Revalidador
from core.domain.ports.tablero_repository import TableroRepository


@dataclass(slots=True)
class CrearTareaCommand:
    titulo: str
    prioridad: Prioridad = Prioridad.MEDIA
    fecha_limite: date | None = None
    descripcion: str | None = None


class CrearTareaUseCase:
    def __init__(
        self, repository: TableroRepository, revalidador: Revalidador
    ) -> None:
        self._repository = repository
        self._revalidador = revalidador

    def execute(self, columna_id: UUID, cmd: CrearTareaCommand) -> Tarea:
        titulo = requerir_titulo(cmd.titulo, "tarea")
        columna = self._repository.get_columna(columna_id)
        if columna is None:
            raise NoEncontrado(f"Columna con id {columna_id} no encontrada")

        tarea = self._repository.agregar_tarea(
            columna_id,
            titulo,
            prioridad=cmd.prioridad,
            fecha_limite=cmd.fecha_limite,
            descripcion=texto_opcional(cmd.descripcion),
        )
        self._revalidador.invalidar(columna.tablero_id)
        return tarea
