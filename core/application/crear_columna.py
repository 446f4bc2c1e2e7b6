from dataclasses import dataclass
from uuid import UUID

from core.application.validacion import requerir_titulo
from core.domain.models.columna import COLOR_POR_DEFECTO, Columna
from core.domain.ports.revalidador import Revalidador
from core.domain.ports.tablero_repository import TableroRepository


@dataclass(slots=True)
class CrearColumnaCommand:
    titulo: str
    color: str = COLOR_POR_DEFECTO


class CrearColumnaUseCase:
    def __init__(
        self, repository: TableroRepository, revalidador: Revalidador
    ) -> None:
        self._repository = repository
        self._revalidador = revalidador

    def execute(self, tablero_id: UUID, cmd: CrearColumnaCommand) -> Columna:
        titulo = requerir_titulo(cmd.titulo, "columna")
        columna = self._repository.agregar_columna(
            tablero_id, titulo, cmd.color or COLOR_POR_DEFECTO
        )
        self._revalidador.invalidar(tablero_id)
        return columna
