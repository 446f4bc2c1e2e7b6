"""
Máquina de estados de un gesto de arrastre.

    INACTIVO ──(puntero > 3px)──▶ ARRASTRANDO ──▶ SOBRE_TAREA / SOBRE_COLUMNA
        ▲                                                     │
        └────────────────────(soltar / cancelar)──────────────┘

Todas las transiciones son funciones puras sobre `Gesto` y el snapshot
visible del tablero; no dependen de ningún framework de interfaz.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from core.domain.models.intencion import Intencion, MoverEntreColumnas, ReordenarEnColumna
from core.domain.models.snapshot import TableroSnapshot

# Distancia mínima (px independientes del dispositivo) que separa un arrastre de un clic.
UMBRAL_ACTIVACION_PX = 3.0

TIPO_TAREA = "task"
TIPO_COLUMNA = "column"


class EstadoArrastre(Enum):
    INACTIVO = "idle"
    ARRASTRANDO = "dragging"
    SOBRE_TAREA = "hovering-task"
    SOBRE_COLUMNA = "hovering-column"


def _id_de(entidad: Any) -> UUID | None:
    if entidad is None:
        return None
    valor = entidad.get("id") if isinstance(entidad, Mapping) else getattr(entidad, "id", None)
    if valor is None or isinstance(valor, UUID):
        return valor
    return UUID(str(valor))


@dataclass(frozen=True, slots=True)
class DestinoArrastre:
    tipo: str
    tarea_id: UUID | None = None
    columna_id: UUID | None = None

    @classmethod
    def desde_payload(cls, payload: Mapping[str, Any] | None) -> "DestinoArrastre | None":
        """
        Convierte el payload de la capa de presentación
        `{"type": "task"|"column", "task"?: ..., "column"?: ...}`.

        `task` y `column` pueden ser entidades del dominio o diccionarios con `id`.
        """
        if not payload:
            return None
        tipo = payload.get("type")
        if tipo == TIPO_TAREA:
            tarea_id = _id_de(payload.get("task"))
            return cls(TIPO_TAREA, tarea_id=tarea_id) if tarea_id else None
        if tipo == TIPO_COLUMNA:
            columna_id = _id_de(payload.get("column"))
            return cls(TIPO_COLUMNA, columna_id=columna_id) if columna_id else None
        return None


@dataclass(frozen=True, slots=True)
class Gesto:
    tarea_id: UUID
    columna_origen_id: UUID
    indice_origen: int
    inicio: tuple[float, float]
    estado: EstadoArrastre = EstadoArrastre.INACTIVO
    destino: DestinoArrastre | None = None
    candidata: Intencion | None = None

    @property
    def activo(self) -> bool:
        return self.estado is not EstadoArrastre.INACTIVO


def clasificar(
    gesto: Gesto, destino: DestinoArrastre | None, snapshot: TableroSnapshot
) -> Intencion | None:
    """Intención que produciría soltar `gesto` sobre `destino`, o None."""
    if destino is None:
        return None

    if destino.tipo == TIPO_TAREA:
        columna = snapshot.columna_de_tarea(destino.tarea_id)
        if columna is None or columna.id != gesto.columna_origen_id:
            return None
        indice_destino = columna.indice_de(destino.tarea_id)
        indice_actual = columna.indice_de(gesto.tarea_id)
        if indice_actual is None or indice_destino == indice_actual:
            return None
        return ReordenarEnColumna(gesto.tarea_id, columna.id, indice_destino)

    if destino.tipo == TIPO_COLUMNA:
        columna = snapshot.columna(destino.columna_id)
        if columna is None or columna.id == gesto.columna_origen_id:
            return None
        # Mientras se sobrevuela se propone el final de la columna.
        return MoverEntreColumnas(
            gesto.tarea_id, gesto.columna_origen_id, columna.id, len(columna.tareas)
        )

    return None


def presionar(
    snapshot: TableroSnapshot, tarea_id: UUID, x: float, y: float
) -> Gesto | None:
    columna = snapshot.columna_de_tarea(tarea_id)
    if columna is None:
        return None
    return Gesto(
        tarea_id=tarea_id,
        columna_origen_id=columna.id,
        indice_origen=columna.indice_de(tarea_id),
        inicio=(x, y),
    )


def mover_puntero(gesto: Gesto, x: float, y: float) -> Gesto:
    if gesto.activo:
        return gesto
    distancia = math.hypot(x - gesto.inicio[0], y - gesto.inicio[1])
    if distancia > UMBRAL_ACTIVACION_PX:
        return replace(gesto, estado=EstadoArrastre.ARRASTRANDO)
    return gesto


def sobrevolar(
    gesto: Gesto, destino: DestinoArrastre | None, snapshot: TableroSnapshot
) -> Gesto:
    if not gesto.activo:
        return gesto
    if destino is None:
        return replace(
            gesto, estado=EstadoArrastre.ARRASTRANDO, destino=None, candidata=None
        )
    estado = (
        EstadoArrastre.SOBRE_TAREA
        if destino.tipo == TIPO_TAREA
        else EstadoArrastre.SOBRE_COLUMNA
    )
    return replace(
        gesto,
        estado=estado,
        destino=destino,
        candidata=clasificar(gesto, destino, snapshot),
    )


def soltar(
    gesto: Gesto | None, destino: DestinoArrastre | None, snapshot: TableroSnapshot
) -> Intencion | None:
    """Intención a confirmar al soltar; None si fue un clic, no hay destino o vuelve al origen."""
    if gesto is None or not gesto.activo:
        return None
    return clasificar(gesto, destino, snapshot)
