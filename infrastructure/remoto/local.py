import os
from uuid import UUID

from core.application.mover_tarea import MoverTareaCommand, MoverTareaUseCase
from core.application.obtener_tablero import ObtenerTableroUseCase
from core.application.reordenar_tarea import ReordenarTareaCommand, ReordenarTareaUseCase
from core.domain.models.snapshot import TableroSnapshot
from core.domain.ports.tablero_remoto import TableroRemoto
from infrastructure.resiliencia.retry import retry_with_backoff

_RETRY_MAX_RETRIES = int(os.getenv("COMMIT_MAX_RETRIES", "2"))
_RETRY_BASE_DELAY = float(os.getenv("COMMIT_RETRY_DELAY", "0.2"))


class LocalTableroRemoto(TableroRemoto):
    """Ejecuta los commits en el mismo proceso, a través de los casos de uso."""

    def __init__(
        self,
        reordenar: ReordenarTareaUseCase,
        mover: MoverTareaUseCase,
        obtener: ObtenerTableroUseCase,
        max_retries: int = _RETRY_MAX_RETRIES,
        base_delay: float = _RETRY_BASE_DELAY,
    ) -> None:
        self._reordenar = reordenar
        self._mover = mover
        self._obtener = obtener
        self._max_retries = max_retries
        self._base_delay = base_delay

    def reordenar_tarea(self, tarea_id: UUID, nuevo_indice: int, columna_id: UUID) -> None:
        cmd = ReordenarTareaCommand(columna_id=columna_id, nuevo_indice=nuevo_indice)
        retry_with_backoff(
            lambda: self._reordenar.execute(tarea_id, cmd),
            max_retries=self._max_retries,
            base_delay=self._base_delay,
            operacion=f"reordenar_tarea {tarea_id}",
        )

    def mover_tarea(
        self,
        tarea_id: UUID,
        columna_origen_id: UUID,
        columna_destino_id: UUID,
        nuevo_indice: int,
    ) -> None:
        cmd = MoverTareaCommand(
            columna_origen_id=columna_origen_id,
            columna_destino_id=columna_destino_id,
            nuevo_indice=nuevo_indice,
        )
        retry_with_backoff(
            lambda: self._mover.execute(tarea_id, cmd),
            max_retries=self._max_retries,
            base_delay=self._base_delay,
            operacion=f"mover_tarea {tarea_id}",
        )

    def obtener_tablero(self, tablero_id: UUID) -> TableroSnapshot:
        return self._obtener.execute(tablero_id)
