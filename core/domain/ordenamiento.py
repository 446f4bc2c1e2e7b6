"""
Cálculo del orden denso de tareas dentro de una columna.

Las posiciones de una columna forman siempre la secuencia 0..N-1 y la base
de datos impone unicidad sobre (columna_id, posicion). Reescribir varias
posiciones con UPDATEs secuenciales puede chocar con esa restricción (p. ej.
al intercambiar dos tareas), por eso toda reescritura se hace en dos fases:

    1. Cada fila afectada recibe una posición temporal negativa y única.
    2. Cada fila afectada recibe su posición (y columna) final.

Las posiciones temporales se asignan por índice dentro del lote, nunca por
hash, así que son distintas entre sí y nunca caen en el rango 0..N-1.
"""

from dataclasses import dataclass
from typing import Sequence, TypeVar
from uuid import UUID

from core.domain.errors import ArgumentoInvalido

T = TypeVar("T")

POSICION_TEMPORAL_BASE = -1_000_000


@dataclass(frozen=True, slots=True)
class Asignacion:
    tarea_id: UUID
    columna_id: UUID
    posicion: int


def mover_elemento(items: Sequence[T], desde: int, hasta: int) -> list[T]:
    """Quita el elemento en `desde` y lo reinserta en `hasta`."""
    resultado = list(items)
    elemento = resultado.pop(desde)
    resultado.insert(hasta, elemento)
    return resultado


def validar_indice_reorden(nuevo_indice: int, total: int) -> None:
    if not 0 <= nuevo_indice < total:
        raise ArgumentoInvalido(
            f"Índice {nuevo_indice} fuera de rango (0..{total - 1})"
        )


def validar_indice_insercion(nuevo_indice: int, total: int) -> None:
    if not 0 <= nuevo_indice <= total:
        raise ArgumentoInvalido(
            f"Índice {nuevo_indice} fuera de rango (0..{total})"
        )


def orden_tras_reordenar(
    ids: Sequence[UUID], tarea_id: UUID, nuevo_indice: int
) -> list[UUID]:
    """
    Orden final de una columna tras llevar `tarea_id` a `nuevo_indice`.

    Raises:
        ArgumentoInvalido: si el índice no está en 0..N-1.
        ValueError: si la tarea no pertenece a `ids`.
    """
    validar_indice_reorden(nuevo_indice, len(ids))
    return mover_elemento(ids, list(ids).index(tarea_id), nuevo_indice)


def orden_tras_mover(
    origen: Sequence[UUID],
    destino: Sequence[UUID],
    tarea_id: UUID,
    nuevo_indice: int,
) -> tuple[list[UUID], list[UUID]]:
    """Órdenes finales de origen (sin la tarea) y destino (con la tarea)."""
    validar_indice_insercion(nuevo_indice, len(destino))
    nuevo_origen = [t for t in origen if t != tarea_id]
    nuevo_destino = list(destino)
    nuevo_destino.insert(nuevo_indice, tarea_id)
    return nuevo_origen, nuevo_destino


def plan_de_escritura(
    actuales: dict[UUID, tuple[UUID, int]],
    finales: dict[UUID, tuple[UUID, int]],
) -> tuple[list[Asignacion], list[Asignacion]]:
    """
    Construye las dos fases de escritura para pasar de `actuales` a `finales`.

    Ambos diccionarios mapean tarea_id -> (columna_id, posicion). Solo se
    incluyen las tareas cuya ubicación cambia; las demás ya ocupan su
    posición final y no pueden chocar con ninguna asignación de la fase 2.

    Returns:
        (fase_temporal, fase_final)
    """
    afectadas = [
        tarea_id
        for tarea_id, destino in finales.items()
        if actuales.get(tarea_id) != destino
    ]
    temporal = [
        Asignacion(tarea_id, actuales[tarea_id][0], POSICION_TEMPORAL_BASE - i)
        for i, tarea_id in enumerate(afectadas)
    ]
    final = [Asignacion(tarea_id, *finales[tarea_id]) for tarea_id in afectadas]
    return temporal, final


def posiciones(columna_id: UUID, orden: Sequence[UUID]) -> dict[UUID, tuple[UUID, int]]:
    return {tarea_id: (columna_id, i) for i, tarea_id in enumerate(orden)}
