"""
Proyección optimista del tablero.

Las funciones `aplicar_*` son puras: reciben un snapshot y una intención y
devuelven un snapshot nuevo, o el mismo objeto si la intención no aplica
(columna o tarea inexistente, índice sin cambio). No son la fuente de
verdad; solo adelantan en pantalla lo que el almacén confirmará después.

`ProyeccionOptimista` guarda el último snapshot confirmado por el servidor
y las intenciones aún en vuelo. Lo visible es siempre el confirmado con las
intenciones pendientes aplicadas encima, de modo que revertir una intención
fallida devuelve la vista al estado confirmado sin tocar nada más.
"""

import itertools
import logging
import threading
from dataclasses import replace
from typing import Iterable
from uuid import UUID

from core.domain.models.intencion import Intencion, MoverEntreColumnas, ReordenarEnColumna
from core.domain.models.snapshot import ColumnaSnapshot, TableroSnapshot
from core.domain.models.tarea import Tarea
from core.domain.ordenamiento import mover_elemento

logger = logging.getLogger(__name__)


def _renumerar(tareas: Iterable[Tarea], columna_id: UUID) -> tuple[Tarea, ...]:
    return tuple(
        tarea
        if tarea.posicion == posicion and tarea.columna_id == columna_id
        else replace(tarea, posicion=posicion, columna_id=columna_id)
        for posicion, tarea in enumerate(tareas)
    )


def _con_columnas(
    snapshot: TableroSnapshot, nuevas: dict[UUID, ColumnaSnapshot]
) -> TableroSnapshot:
    return replace(
        snapshot,
        columnas=tuple(nuevas.get(c.id, c) for c in snapshot.columnas),
    )


def _acotar(indice: int, maximo: int) -> int:
    return max(0, min(indice, maximo))


def aplicar_reordenamiento(
    snapshot: TableroSnapshot, columna_id: UUID, tarea_id: UUID, nuevo_indice: int
) -> TableroSnapshot:
    columna = snapshot.columna(columna_id)
    if columna is None:
        return snapshot
    actual = columna.indice_de(tarea_id)
    if actual is None:
        return snapshot

    destino = _acotar(nuevo_indice, len(columna.tareas) - 1)
    if destino == actual:
        return snapshot

    tareas = _renumerar(mover_elemento(columna.tareas, actual, destino), columna_id)
    return _con_columnas(snapshot, {columna_id: replace(columna, tareas=tareas)})


def aplicar_movimiento(
    snapshot: TableroSnapshot,
    columna_origen_id: UUID,
    columna_destino_id: UUID,
    tarea_id: UUID,
    nuevo_indice: int,
) -> TableroSnapshot:
    if columna_origen_id == columna_destino_id:
        return aplicar_reordenamiento(snapshot, columna_origen_id, tarea_id, nuevo_indice)

    origen = snapshot.columna(columna_origen_id)
    destino = snapshot.columna(columna_destino_id)
    if origen is None or destino is None:
        return snapshot
    indice = origen.indice_de(tarea_id)
    if indice is None:
        return snapshot

    movida = origen.tareas[indice]
    tareas_origen = [t for t in origen.tareas if t.id != tarea_id]
    tareas_destino = list(destino.tareas)
    tareas_destino.insert(_acotar(nuevo_indice, len(tareas_destino)), movida)

    return _con_columnas(
        snapshot,
        {
            columna_origen_id: replace(
                origen, tareas=_renumerar(tareas_origen, columna_origen_id)
            ),
            columna_destino_id: replace(
                destino, tareas=_renumerar(tareas_destino, columna_destino_id)
            ),
        },
    )


def aplicar_intencion(snapshot: TableroSnapshot, intencion: Intencion) -> TableroSnapshot:
    if isinstance(intencion, ReordenarEnColumna):
        return aplicar_reordenamiento(
            snapshot, intencion.columna_id, intencion.tarea_id, intencion.nuevo_indice
        )
    if isinstance(intencion, MoverEntreColumnas):
        return aplicar_movimiento(
            snapshot,
            intencion.columna_origen_id,
            intencion.columna_destino_id,
            intencion.tarea_id,
            intencion.nuevo_indice,
        )
    raise TypeError(f"Intención desconocida: {intencion!r}")


def filtrar_tareas(snapshot: TableroSnapshot, texto: str) -> TableroSnapshot:
    """Deja solo las tareas cuyo título contiene `texto` (sin distinguir mayúsculas)."""
    buscado = texto.strip().lower()
    if not buscado:
        return snapshot
    return replace(
        snapshot,
        columnas=tuple(
            replace(
                columna,
                tareas=tuple(t for t in columna.tareas if buscado in t.titulo.lower()),
            )
            for columna in snapshot.columnas
        ),
    )


class ProyeccionOptimista:
    """
    Vista especulativa de un tablero con procedencia explícita.

    - `confirmado`: último snapshot leído del servidor; su `version` crece
      con cada confirmación aceptada.
    - intenciones pendientes: se identifican con un ticket entregado por
      `especular` y se resuelven con `confirmar` o `revertir`.

    Thread-safe: los commits terminan en hilos del pool del controlador.
    """

    def __init__(self, confirmado: TableroSnapshot) -> None:
        self._lock = threading.Lock()
        self._confirmado = confirmado
        self._pendientes: dict[int, Intencion] = {}
        self._tickets = itertools.count(1)
        self._marcas = itertools.count(1)
        self._ultima_marca = 0
        self._visible = confirmado

    @property
    def confirmado(self) -> TableroSnapshot:
        with self._lock:
            return self._confirmado

    @property
    def visible(self) -> TableroSnapshot:
        with self._lock:
            return self._visible

    @property
    def version(self) -> int:
        with self._lock:
            return self._confirmado.version

    @property
    def pendientes(self) -> int:
        with self._lock:
            return len(self._pendientes)

    def _recalcular(self) -> None:
        visible = self._confirmado
        for intencion in self._pendientes.values():
            visible = aplicar_intencion(visible, intencion)
        self._visible = visible

    def _aceptar(self, snapshot: TableroSnapshot) -> None:
        self._confirmado = replace(snapshot, version=self._confirmado.version + 1)

    def especular(self, intencion: Intencion) -> int:
        """Aplica `intencion` a lo visible de inmediato y devuelve su ticket."""
        with self._lock:
            ticket = next(self._tickets)
            self._pendientes[ticket] = intencion
            self._visible = aplicar_intencion(self._visible, intencion)
            return ticket

    def marca_lectura(self) -> int:
        """Marca a pedir antes de leer el servidor; ordena las confirmaciones."""
        with self._lock:
            return next(self._marcas)

    def confirmar(
        self, ticket: int, snapshot: TableroSnapshot | None = None, marca: int = 0
    ) -> bool:
        """
        Da por confirmada la intención `ticket` con el snapshot leído tras el commit.

        Si ya se aceptó una lectura posterior (`marca` menor), el snapshot
        se descarta para no retroceder a un estado más viejo. Sin snapshot
        (la relectura falló) la intención se consolida sobre el confirmado.

        Returns:
            True si el confirmado cambió.
        """
        with self._lock:
            intencion = self._pendientes.pop(ticket, None)
            if snapshot is None:
                aceptado = intencion is not None
                if aceptado:
                    self._aceptar(aplicar_intencion(self._confirmado, intencion))
            else:
                aceptado = marca > self._ultima_marca
                if aceptado:
                    self._ultima_marca = marca
                    self._aceptar(snapshot)
            self._recalcular()
            return aceptado

    def revertir(self, ticket: int) -> None:
        """Descarta la intención `ticket`; lo visible vuelve a partir del confirmado."""
        with self._lock:
            intencion = self._pendientes.pop(ticket, None)
            self._recalcular()
        if intencion is not None:
            logger.warning(
                f"↩️ Proyección revertida a la versión {self.version}: {intencion}"
            )

    def reemplazar(self, snapshot: TableroSnapshot, marca: int | None = None) -> bool:
        """Refresco completo desde el servidor (conserva las intenciones pendientes)."""
        with self._lock:
            if marca is not None:
                if marca <= self._ultima_marca:
                    return False
                self._ultima_marca = marca
            self._aceptar(snapshot)
            self._recalcular()
            return True
