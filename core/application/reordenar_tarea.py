from dataclasses import dataclass
from uuid import UUID

from core.domain.errors import NoEncontrado
from core.domain.ports.revalidador import Revalidador
from core.domain.ports.tablero_repository import TableroRepository


@dataclass(slots=True)
class ReordenarTareaCommand:
    columna_id: UUID
    nuevo_indice: int


class ReordenarTareaUseCase:
    def __init__(
        self, repository: TableroRepository, revalidador: Revalidador
    ) -> None:
        self._repository = repository
        self._revalidador = revalidador

    def execute(self, tarea_id: UUID, cmd: ReordenarTareaCommand) -> None:
        columna = self._repository.get_columna(cmd.columna_id)
        if columna is None:
            raise NoEncontrado(f"Columna con id {cmd.columna_id} no encontrada")

        self._repository.reordenar_tarea(tarea_id, cmd.nuevo_indice, cmd.columna_id)
        self._revalidador.invalidar(columna.tablero_id)
