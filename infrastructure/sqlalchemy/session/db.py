import os

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///kanban.db")


def _opciones(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    opciones: dict = {"connect_args": {"check_same_thread": False, "timeout": 30}}
    if ":memory:" in url:
        opciones["poolclass"] = StaticPool
    return opciones


def _configurar_sqlite(dbapi_connection, connection_record) -> None:
    # pysqlite abre transacciones por su cuenta; se desactiva para emitir BEGIN nosotros.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_inmediato(conn) -> None:
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def crear_engine(url: str) -> Engine:
    """Engine para `url`; en SQLite cada transacción toma el lock de escritura al empezar."""
    nuevo = create_engine(url, **_opciones(url))
    if nuevo.dialect.name == "sqlite":
        event.listen(nuevo, "connect", _configurar_sqlite)
        event.listen(nuevo, "begin", _begin_inmediato)
    return nuevo


engine = crear_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
Base = declarative_base()


def get_session() -> Session:
    return SessionLocal()


def init_db() -> None:
    from infrastructure.sqlalchemy.model import models  # noqa: F401

    Base.metadata.create_all(bind=SessionLocal.kw["bind"])
