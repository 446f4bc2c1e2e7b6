import logging
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, timezone
from typing import Iterable, Iterator
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

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
from infrastructure.sqlalchemy.model.models import ColumnaModel, TableroModel, TareaModel
from infrastructure.sqlalchemy.session.db import get_session, init_db

logger = logging.getLogger(__name__)


def _a_tablero(m: TableroModel) -> Tablero:
    return Tablero(
        id=UUID(m.id),
        titulo=m.titulo,
        descripcion=m.descripcion,
        creado_en=m.creado_en.replace(tzinfo=timezone.utc),
    )


def _a_columna(m: ColumnaModel) -> Columna:
    return Columna(
        id=UUID(m.id),
        tablero_id=UUID(m.tablero_id),
        titulo=m.titulo,
        color=m.color,
        posicion=m.posicion,
    )


def _a_tarea(m: TareaModel) -> Tarea:
    return Tarea(
        id=UUID(m.id),
        columna_id=UUID(m.columna_id),
        titulo=m.titulo,
        descripcion=m.descripcion,
        prioridad=Prioridad(m.prioridad),
        fecha_limite=m.fecha_limite,
        posicion=m.posicion,
    )


class SqlAlchemyTableroRepository(TableroRepository):
    def __init__(self) -> None:
        init_db()

    @contextmanager
    def _transaccion(self, operacion: str) -> Iterator[Session]:
        session = get_session()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error(f"✗ SQLAlchemy falló en {operacion}: {e}")
            raise FalloTransaccion(f"{operacion}: {e}") from e
        finally:
            session.close()

    # ── Lecturas ──────────────────────────────────────────────────────────────

    def get_tablero(self, tablero_id: UUID) -> Tablero | None:
        with self._transaccion("get_tablero") as session:
            tablero_model = session.get(TableroModel, str(tablero_id))
            return _a_tablero(tablero_model) if tablero_model else None

    def list_tableros(self) -> list[Tablero]:
        with self._transaccion("list_tableros") as session:
            tableros = session.scalars(
                select(TableroModel).order_by(TableroModel.creado_en.desc())
            )
            return [_a_tablero(t) for t in tableros]

    def get_columna(self, columna_id: UUID) -> Columna | None:
        with self._transaccion("get_columna") as session:
            columna_model = session.get(ColumnaModel, str(columna_id))
            return _a_columna(columna_model) if columna_model else None

    def get_tarea(self, tarea_id: UUID) -> Tarea | None:
        with self._transaccion("get_tarea") as session:
            tarea_model = session.get(TareaModel, str(tarea_id))
            return _a_tarea(tarea_model) if tarea_model else None

    def get_tablero_completo(self, tablero_id: UUID) -> TableroSnapshot | None:
        with self._transaccion("get_tablero_completo") as session:
            tablero_model = session.get(TableroModel, str(tablero_id))
            if tablero_model is None:
                return None
            columnas = session.scalars(
                select(ColumnaModel)
                .where(ColumnaModel.tablero_id == str(tablero_id))
                .order_by(ColumnaModel.posicion)
            ).all()
            tareas = session.scalars(
                select(TareaModel)
                .join(ColumnaModel, TareaModel.columna_id == ColumnaModel.id)
                .where(ColumnaModel.tablero_id == str(tablero_id))
                .order_by(TareaModel.posicion)
            )
            por_columna: dict[str, list[Tarea]] = defaultdict(list)
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
        with self._transaccion("crear_tablero") as session:
            session.add(
                TableroModel(
                    id=str(tablero.id),
                    titulo=tablero.titulo,
                    descripcion=tablero.descripcion,
                    creado_en=tablero.creado_en.astimezone(timezone.utc).replace(tzinfo=None),
                )
            )
            session.flush()
            session.add_all(
                ColumnaModel(
                    id=str(columna.id),
                    tablero_id=str(tablero.id),
                    titulo=columna.titulo,
                    color=columna.color,
                    posicion=columna.posicion,
                )
                for columna in columnas
            )

    def agregar_columna(self, tablero_id: UUID, titulo: str, color: str) -> Columna:
        with self._transaccion("agregar_columna") as session:
            tablero = session.scalar(
                select(TableroModel)
                .where(TableroModel.id == str(tablero_id))
                .with_for_update()
            )
            if tablero is None:
                raise NoEncontrado(f"Tablero con id {tablero_id} no encontrado")

            ultima = session.scalar(
                select(func.coalesce(func.max(ColumnaModel.posicion), -1)).where(
                    ColumnaModel.tablero_id == str(tablero_id)
                )
            )
            columna_model = ColumnaModel(
                id=str(uuid4()),
                tablero_id=str(tablero_id),
                titulo=titulo,
                color=color,
                posicion=ultima + 1,
            )
            session.add(columna_model)
            session.flush()
            return _a_columna(columna_model)

    def agregar_tarea(
        self,
        columna_id: UUID,
        titulo: str,
        prioridad: Prioridad = Prioridad.MEDIA,
        fecha_limite: date | None = None,
        descripcion: str | None = None,
    ) -> Tarea:
        with self._transaccion("agregar_tarea") as session:
            self._bloquear_columnas(session, [columna_id])
            ultima = session.scalar(
                select(func.coalesce(func.max(TareaModel.posicion), -1)).where(
                    TareaModel.columna_id == str(columna_id)
                )
            )
            tarea_model = TareaModel(
                id=str(uuid4()),
                columna_id=str(columna_id),
                titulo=titulo,
                descripcion=descripcion,
                prioridad=prioridad.value,
                fecha_limite=fecha_limite,
                posicion=ultima + 1,
            )
            session.add(tarea_model)
            session.flush()
            return _a_tarea(tarea_model)

    # ── Reordenación ──────────────────────────────────────────────────────────

    def reordenar_tarea(self, tarea_id: UUID, nuevo_indice: int, columna_id: UUID) -> None:
        with self._transaccion("reordenar_tarea") as session:
            self._bloquear_columnas(session, [columna_id])
            actuales = self._ubicaciones(session, columna_id)
            if tarea_id not in actuales:
                raise NoEncontrado(
                    f"Tarea con id {tarea_id} no encontrada en la columna {columna_id}"
                )

            orden = orden_tras_reordenar(list(actuales), tarea_id, nuevo_indice)
            self._escribir(session, actuales, posiciones(columna_id, orden))

    def mover_tarea(
        self,
        tarea_id: UUID,
        columna_origen_id: UUID,
        columna_destino_id: UUID,
        nuevo_indice: int,
    ) -> None:
        with self._transaccion("mover_tarea") as session:
            columnas = self._bloquear_columnas(
                session, [columna_origen_id, columna_destino_id]
            )
            if columnas[columna_origen_id].tablero_id != columnas[columna_destino_id].tablero_id:
                raise ArgumentoInvalido("Las columnas pertenecen a tableros distintos")

            actuales = self._ubicaciones(session, columna_origen_id)
            origen = list(actuales)
            if tarea_id not in actuales:
                raise NoEncontrado(
                    f"Tarea con id {tarea_id} no encontrada en la columna {columna_origen_id}"
                )

            if columna_origen_id == columna_destino_id:
                validar_indice_insercion(nuevo_indice, len(origen))
                orden = orden_tras_reordenar(
                    origen, tarea_id, min(nuevo_indice, len(origen) - 1)
                )
                self._escribir(session, actuales, posiciones(columna_origen_id, orden))
                return

            actuales_destino = self._ubicaciones(session, columna_destino_id)
            nuevo_origen, nuevo_destino = orden_tras_mover(
                origen, list(actuales_destino), tarea_id, nuevo_indice
            )
            self._escribir(
                session,
                {**actuales, **actuales_destino},
                {
                    **posiciones(columna_origen_id, nuevo_origen),
                    **posiciones(columna_destino_id, nuevo_destino),
                },
            )

    # ── Auxiliares ────────────────────────────────────────────────────────────

    def _bloquear_columnas(
        self, session: Session, columna_ids: Iterable[UUID]
    ) -> dict[UUID, ColumnaModel]:
        ids = sorted({str(c) for c in columna_ids})
        filas = session.scalars(
            select(ColumnaModel)
            .where(ColumnaModel.id.in_(ids))
            .order_by(ColumnaModel.id)
            .with_for_update()
        )
        columnas = {UUID(c.id): c for c in filas}
        for columna_id in ids:
            if UUID(columna_id) not in columnas:
                raise NoEncontrado(f"Columna con id {columna_id} no encontrada")
        return columnas

    def _ubicaciones(
        self, session: Session, columna_id: UUID
    ) -> dict[UUID, tuple[UUID, int]]:
        filas = session.execute(
            select(TareaModel.id, TareaModel.posicion)
            .where(TareaModel.columna_id == str(columna_id))
            .order_by(TareaModel.posicion)
        )
        return {UUID(tarea_id): (columna_id, posicion) for tarea_id, posicion in filas}

    def _escribir(
        self,
        session: Session,
        actuales: dict[UUID, tuple[UUID, int]],
        finales: dict[UUID, tuple[UUID, int]],
    ) -> None:
        temporal, final = plan_de_escritura(actuales, finales)
        for fase in (temporal, final):
            for asignacion in fase:
                session.execute(
                    update(TareaModel)
                    .where(TareaModel.id == str(asignacion.tarea_id))
                    .values(
                        columna_id=str(asignacion.columna_id),
                        posicion=asignacion.posicion,
                    )
                    .execution_options(synchronize_session=False)
                )
        logger.debug(f"Posiciones reescritas en dos fases: {len(final)} tareas")
