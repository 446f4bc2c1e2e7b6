import logging
import threading
from collections import deque
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Mapping
from uuid import UUID

from core.application import arrastre
from core.application.arrastre import DestinoArrastre, EstadoArrastre, Gesto
from core.application.proyeccion import ProyeccionOptimista, aplicar_intencion
from core.domain.models.intencion import Intencion, MoverEntreColumnas, ReordenarEnColumna
from core.domain.models.snapshot import TableroSnapshot
from core.domain.ports.tablero_remoto import TableroRemoto

logger = logging.getLogger(__name__)

# Pool compartido para los commits: el hilo de eventos nunca espera a la red.
executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="Arrastre")

AVISO_FALLO_COMMIT = "No se pudo guardar el cambio; el tablero volvió a su último estado guardado."


class ControladorArrastre:
    """
    Traduce eventos de puntero en intenciones y las confirma en el servidor.

    Secuencia al soltar con una intención válida:
        1. La proyección aplica la intención (síncrono, antes de cualquier I/O).
        2. El commit se envía al pool; el gesto siguiente puede empezar ya.
           Los commits de un mismo controlador van de uno en uno, en el
           orden en que se especularon.
        3. Éxito → se relee el tablero y se confirma.
           Fallo → la proyección vuelve al último confirmado y se avisa.

    Los eventos de puntero deben llegar desde un único hilo.
    """

    def __init__(
        self,
        remoto: TableroRemoto,
        proyeccion: ProyeccionOptimista,
        executor: Executor = executor,
        al_avisar: Callable[[str], None] | None = None,
    ) -> None:
        self._remoto = remoto
        self._proyeccion = proyeccion
        self._executor = executor
        self._al_avisar = al_avisar
        self._gesto: Gesto | None = None
        self._lock = threading.Lock()
        self._cola: deque[tuple[Intencion, UUID, Future]] = deque()
        self._en_curso = False

    @property
    def proyeccion(self) -> ProyeccionOptimista:
        return self._proyeccion

    @property
    def gesto(self) -> Gesto | None:
        return self._gesto

    @property
    def estado(self) -> EstadoArrastre:
        return self._gesto.estado if self._gesto else EstadoArrastre.INACTIVO

    @property
    def vista_previa(self) -> TableroSnapshot:
        """Lo visible con la intención candidata aplicada; nunca se guarda."""
        visible = self._proyeccion.visible
        if self._gesto is None or self._gesto.candidata is None:
            return visible
        return aplicar_intencion(visible, self._gesto.candidata)

    # ── Eventos de puntero ────────────────────────────────────────────────────

    def presionar(self, tarea_id: UUID, x: float, y: float) -> None:
        self._gesto = arrastre.presionar(self._proyeccion.visible, tarea_id, x, y)

    def mover_puntero(self, x: float, y: float) -> EstadoArrastre:
        if self._gesto is not None:
            self._gesto = arrastre.mover_puntero(self._gesto, x, y)
        return self.estado

    def sobrevolar(self, payload: Mapping[str, Any] | None) -> EstadoArrastre:
        if self._gesto is not None:
            self._gesto = arrastre.sobrevolar(
                self._gesto,
                DestinoArrastre.desde_payload(payload),
                self._proyeccion.visible,
            )
        return self.estado

    def cancelar(self) -> None:
        self._gesto = None

    def soltar(self, payload: Mapping[str, Any] | None) -> Future | None:
        """
        Termina el gesto. Devuelve el Future del commit, o None si no hubo cambio.
        """
        gesto, self._gesto = self._gesto, None
        intencion = arrastre.soltar(
            gesto, DestinoArrastre.desde_payload(payload), self._proyeccion.visible
        )
        if intencion is None:
            return None
        return self.ejecutar(intencion)

    # ── Confirmación ──────────────────────────────────────────────────────────

    def ejecutar(self, intencion: Intencion) -> Future:
        """
        Especula `intencion` y encola su commit detrás de los anteriores.

        Cada índice se calculó sobre lo visible con las intenciones previas
        aplicadas, así que los commits salen en el mismo orden.
        """
        ticket = self._proyeccion.especular(intencion)
        tablero_id = self._proyeccion.confirmado.tablero.id
        resultado: Future = Future()
        resultado.add_done_callback(
            lambda f: self._al_terminar(ticket, intencion, f)
        )
        with self._lock:
            self._cola.append((intencion, tablero_id, resultado))
            if self._en_curso:
                return resultado
            self._en_curso = True
        self._enviar_siguiente()
        return resultado

    def _enviar_siguiente(self) -> None:
        with self._lock:
            if not self._cola:
                self._en_curso = False
                return
            intencion, tablero_id, resultado = self._cola.popleft()

        if not resultado.set_running_or_notify_cancel():
            # Cancelado mientras esperaba turno; ya se revirtió.
            self._enviar_siguiente()
            return
        try:
            future = self._executor.submit(
                self._confirmar_en_servidor, intencion, tablero_id
            )
        except RuntimeError as e:
            # Pool cerrado: el commit falla sin llegar al servidor.
            resultado.set_exception(e)
            self._enviar_siguiente()
            return
        future.add_done_callback(lambda f: self._trasladar(f, resultado))

    def _trasladar(self, future: Future, resultado: Future) -> None:
        if future.cancelled():
            resultado.set_exception(CancelledError())
        elif future.exception() is not None:
            resultado.set_exception(future.exception())
        else:
            resultado.set_result(future.result())
        self._enviar_siguiente()

    def _confirmar_en_servidor(
        self, intencion: Intencion, tablero_id: UUID
    ) -> tuple[TableroSnapshot | None, int]:
        if isinstance(intencion, ReordenarEnColumna):
            self._remoto.reordenar_tarea(
                intencion.tarea_id, intencion.nuevo_indice, intencion.columna_id
            )
        elif isinstance(intencion, MoverEntreColumnas):
            self._remoto.mover_tarea(
                intencion.tarea_id,
                intencion.columna_origen_id,
                intencion.columna_destino_id,
                intencion.nuevo_indice,
            )
        else:
            raise TypeError(f"Intención desconocida: {intencion!r}")

        marca = self._proyeccion.marca_lectura()
        try:
            return self._remoto.obtener_tablero(tablero_id), marca
        except Exception as e:
            # El commit ya es durable; la intención se consolida localmente.
            logger.warning(f"⚠️ No se pudo releer el tablero {tablero_id}: {e}")
            return None, marca

    def _al_terminar(self, ticket: int, intencion: Intencion, future: Future) -> None:
        error = CancelledError() if future.cancelled() else future.exception()
        if error is not None:
            self._proyeccion.revertir(ticket)
            logger.error(f"❌ Falló el commit de {intencion}: {error}")
            if self._al_avisar is not None:
                self._al_avisar(AVISO_FALLO_COMMIT)
            return

        snapshot, marca = future.result()
        self._proyeccion.confirmar(ticket, snapshot, marca)
