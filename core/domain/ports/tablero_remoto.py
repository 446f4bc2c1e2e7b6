from abc import ABC, abstractmethod
from uuid import UUID

from core.domain.models.snapshot import TableroSnapshot


class TableroRemoto(ABC):
    """
    Lado servidor visto desde el cliente que arrastra tareas.

    Las implementaciones pueden tardar (red, locks); el controlador de
    arrastre las invoca fuera del hilo de eventos.
    """

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

    @abstractmethod
    def obtener_tablero(self, tablero_id: UUID) -> TableroSnapshot:
        raise NotImplementedError
