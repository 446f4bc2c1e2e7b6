import logging
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, timezone
from typing import Iterable, List
from uuid import UUID, uuid4

from peewee import PeeweeException, fn

from core.domain.errors import ArgumentoInvalido, FalloTransaccion, NoEncontrado
from core.domain.models.columna import Columna
from core.domain.models.snapshot import ColumnaSnapshot, TableroSnapshot
from core.domain.models.tablero import Tablero
from core.domain.models.tarea import Prioridad, Tarea
from core.domain.ordenamiento import (
    orden_tras_mover,
    orden_tras_reordenar,
    plan_de_escritura,
    posiciones,
    validar_indice_insercion,
)
from core.domain.ports.tablero_repository import TableroRepository
from infrastructure.peewee.model.models import MODELOS, ColumnaModel, TableroModel, TareaModel
from infrastructure.peewee.session.db import bloquear, transaccion

logger = logging.getLogger(__name__)


@contextmanager
def _errores_de_persistencia(operacion: str):
    try:
        yield
    except PeeweeException as e:
        logger.error(f"✗ Peewee falló en {operacion}: {e}")
        raise FalloTransaccion(f"{operacion}: {e}") from e


def _a_tablero(m: TableroModel) -> Tablero:
    # Se guarda en UTC sin zona; se devuelve con zona.
    return Tablero(
        id=m.id,
        titulo=m.titulo,
        descripcion=m.descripcion,
        creado_en=m.creado_en.replace(tzinfo=timezone.utc),
    )


def _a_columna(m: ColumnaModel) -> Columna:
    return Columna(
        id=m.id,
        tablero_id=m.tablero_id,
        titulo=m.titulo,
        color=m.color,
        posicion=m.posicion,
    )


def _a_tarea(m: TareaModel) -> Tarea:
    return Tarea(
        id=m.id,
        columna_id=m.columna_id,
        titulo=m.titulo,
        descripcion=m.descripcion,
        prioridad=Prioridad(m.prioridad),
        fecha_limite=m.fecha_limite,
        posicion=m.posicion,
    )


class PeeweeTableroRepository(TableroRepository):
    def __init__(self):
        # Base a la que están ligados los modelos (la de `DATABASE_URL` salvo bind).
        self._db = TableroModel._meta.database
        # Ensure tables exist. In a real production app, this might be handled by migrations.
        self._db.connect(reuse_if_open=True)
        self._db.create_tables(MODELOS, safe=True)

    # ── Lecturas ──────────────────────────────────────────────────────────────

    def get_tablero(self, tablero_id: UUID) -> Tablero | None:
        tablero_model = TableroModel.get_or_none(TableroModel.id == tablero_id)
        return _a_tablero(tablero_model) if tablero_model else None

    def list_tableros(self) -> List[Tablero]:
        return [
            _a_tablero(t)
            for t in TableroModel.select().order_by(TableroModel.creado_en.desc())
        ]

    def get_columna(self, columna_id: UUID) -> Columna | None:
        columna_model = ColumnaModel.get_or_none(ColumnaModel.id == columna_id)
        return _a_columna(columna_model) if columna_model else None

    def get_tarea(self, tarea_id: UUID) -> Tarea | None:
        tarea_model = TareaModel.get_or_none(TareaModel.id == tarea_id)
        return _a_tarea(tarea_model) if tarea_model else None

    def get_tablero_completo(self, tablero_id: UUID) -> TableroSnapshot | None:
        with self._db.atomic():
            tablero_model = TableroModel.get_or_none(TableroModel.id == tablero_id)
            if tablero_model is None:
                return None
            columnas = list(
                ColumnaModel.select()
                .where(ColumnaModel.tablero == tablero_id)
                .order_by(ColumnaModel.posicion)
            )
            tareas = (
                TareaModel.select()
                .join(ColumnaModel)
                .where(ColumnaModel.tablero == tablero_id)
                .order_by(TareaModel.posicion)
            )
            por_columna: dict[UUID, list[Tarea]] = defaultdict(list)
            for t in tareas:
                por_columna[t.columna_id].append(_a_tarea(t))

        return TableroSnapshot(
            tablero=_a_tablero(tablero_model),
            columnas=tuple(
                ColumnaSnapshot(_a_columna(c), tuple(por_columna[c.id]))
                for c in columnas
            ),
        )

    # ── Altas ─────────────────────────────────────────────────────────────────

    def crear_tablero(self, tablero: Tablero, columnas: list[Columna]) -> None:
        with _errores_de_persistencia("crear_tablero"), transaccion(self._db):
            TableroModel.create(
                id=tablero.id,
                titulo=tablero.titulo,
                descripcion=tablero.descripcion,
                creado_en=tablero.creado_en.astimezone(timezone.utc).replace(tzinfo=None),
            )
            for columna in columnas:
                ColumnaModel.create(
                    id=columna.id,
                    tablero=tablero.id,
                    titulo=columna.titulo,
                    color=columna.color,
                    posicion=columna.posicion,
                )

    def agregar_columna(self, tablero_id: UUID, titulo: str, color: str) -> Columna:
        with _errores_de_persistencia("agregar_columna"), transaccion(self._db):
            tablero = bloquear(
                TableroModel.select().where(TableroModel.id == tablero_id)
            ).first()
            if tablero is None:
                raise NoEncontrado(f"Tablero con id {tablero_id} no encontrado")

            ultima = (
                ColumnaModel.select(fn.COALESCE(fn.MAX(ColumnaModel.posicion), -1))
                .where(ColumnaModel.tablero == tablero_id)
                .scalar()
            )
            columna_model = ColumnaModel.create(
                id=uuid4(),
                tablero=tablero_id,
                titulo=titulo,
                color=color,
                posicion=ultima + 1,
            )
        return _a_columna(columna_model)

    def agregar_tarea(
        self,
        columna_id: UUID,
        titulo: str,
        prioridad: Prioridad = Prioridad.MEDIA,
        fecha_limite: date | None = None,
        descripcion: str | None = None,
    ) -> Tarea:
        with _errores_de_persistencia("agregar_tarea"), transaccion(self._db):
            self._bloquear_columnas([columna_id])
            ultima = (
                TareaModel.select(fn.COALESCE(fn.MAX(TareaModel.posicion), -1))
                .where(TareaModel.columna == columna_id)
                .scalar()
            )
            tarea_model = TareaModel.create(
                id=uuid4(),
                columna=columna_id,
                titulo=titulo,
                descripcion=descripcion,
                prioridad=prioridad.value,
                fecha_limite=fecha_limite,
                posicion=ultima + 1,
            )
        return _a_tarea(tarea_model)

    # ── Reordenación ──────────────────────────────────────────────────────────

    def reordenar_tarea(self, tarea_id: UUID, nuevo_indice: int, columna_id: UUID) -> None:
        with _errores_de_persistencia("reordenar_tarea"), transaccion(self._db):
            self._bloquear_columnas([columna_id])
            actuales = self._ubicaciones(columna_id)
            ids = list(actuales)
            if tarea_id not in actuales:
                raise NoEncontrado(
                    f"Tarea con id {tarea_id} no encontrada en la columna {columna_id}"
                )

            orden = orden_tras_reordenar(ids, tarea_id, nuevo_indice)
            self._escribir(actuales, posiciones(columna_id, orden))

    def mover_tarea(
        self,
        tarea_id: UUID,
        columna_origen_id: UUID,
        columna_destino_id: UUID,
        nuevo_indice: int,
    ) -> None:
        with _errores_de_persistencia("mover_tarea"), transaccion(self._db):
            columnas = self._bloquear_columnas([columna_origen_id, columna_destino_id])
            if columnas[columna_origen_id].tablero_id != columnas[columna_destino_id].tablero_id:
                raise ArgumentoInvalido("Las columnas pertenecen a tableros distintos")

            actuales = self._ubicaciones(columna_origen_id)
            origen = list(actuales)
            if tarea_id not in actuales:
                raise NoEncontrado(
                    f"Tarea con id {tarea_id} no encontrada en la columna {columna_origen_id}"
                )

            if columna_origen_id == columna_destino_id:
                validar_indice_insercion(nuevo_indice, len(origen))
                # Insertar "al final" equivale a la última posición de la misma columna.
                orden = orden_tras_reordenar(
                    origen, tarea_id, min(nuevo_indice, len(origen) - 1)
                )
                self._escribir(actuales, posiciones(columna_origen_id, orden))
                return

            actuales_destino = self._ubicaciones(columna_destino_id)
            nuevo_origen, nuevo_destino = orden_tras_mover(
                origen, list(actuales_destino), tarea_id, nuevo_indice
            )
            self._escribir(
                {**actuales, **actuales_destino},
                {
                    **posiciones(columna_origen_id, nuevo_origen),
                    **posiciones(columna_destino_id, nuevo_destino),
                },
            )

    # ── Auxiliares (siempre dentro de una transacción) ────────────────────────

    def _bloquear_columnas(self, columna_ids: Iterable[UUID]) -> dict[UUID, ColumnaModel]:
        # Orden estable de locks para no crear deadlocks entre movimientos cruzados.
        ids = sorted(set(columna_ids), key=str)
        filas = bloquear(
            ColumnaModel.select()
            .where(ColumnaModel.id.in_(ids))
            .order_by(ColumnaModel.id)
        )
        columnas = {c.id: c for c in filas}
        for columna_id in ids:
            if columna_id not in columnas:
                raise NoEncontrado(f"Columna con id {columna_id} no encontrada")
        return columnas

    def _ubicaciones(self, columna_id: UUID) -> dict[UUID, tuple[UUID, int]]:
        consulta = (
            TareaModel.select(TareaModel.id, TareaModel.posicion)
            .where(TareaModel.columna == columna_id)
            .order_by(TareaModel.posicion)
        )
        return {t.id: (columna_id, t.posicion) for t in consulta}

    def _escribir(
        self,
        actuales: dict[UUID, tuple[UUID, int]],
        finales: dict[UUID, tuple[UUID, int]],
    ) -> None:
        temporal, final = plan_de_escritura(actuales, finales)
        for fase in (temporal, final):
            for asignacion in fase:
                TareaModel.update(
                    columna=asignacion.columna_id, posicion=asignacion.posicion
                ).where(TareaModel.id == asignacion.tarea_id).execute()
        logger.debug(f"Posiciones reescritas en dos fases: {len(final)} tareas")
