from dataclasses import dataclass
from uuid import UUID

from core.domain.errors import NoEncontrado
from core.domain.ports.revalidador import Revalidador
from core.domain.ports.tablero_repository import TableroRepository


@dataclass(slots=True)
class MoverTareaCommand:
    columna_origen_id: UUID
    columna_destino_id: UUID
    nuevo_indice: int


class MoverTareaUseCase:
    def __init__(
        self, repository: TableroRepository, revalidador: Revalidador
    ) -> None:
        self._repository = repository
        self._revalidador = revalidador

    def execute(self, tarea_id: UUID, cmd: MoverTareaCommand) -> None:
        destino = self._repository.get_columna(cmd.columna_destino_id)
        if destino is None:
            raise NoEncontrado(
                f"Columna con id {cmd.columna_destino_id} no encontrada"
            )

        self._repository.mover_tarea(
            tarea_id, cmd.columna_origen_id, cmd.columna_destino_id, cmd.nuevo_indice
        )
        self._revalidador.invalidar(destino.tablero_id)
