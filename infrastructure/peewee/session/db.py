import os

from peewee import SqliteDatabase
from playhouse.db_url import connect

# Default to SQLite
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///kanban.db")


def _opciones(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    opciones: dict = {"pragmas": {"foreign_keys": 1}}
    if ":memory:" in url:
        # Una base en memoria solo vive en su conexión: se comparte entre hilos.
        opciones.update(thread_safe=False, check_same_thread=False)
    return opciones


# Initialize the database connection
db = connect(DATABASE_URL, **_opciones(DATABASE_URL))


def get_db():
    return db


def transaccion(database=None):
    """
    Transacción de escritura serializada sobre `database` (por defecto `db`).

    SQLite toma el lock de escritura al empezar (BEGIN IMMEDIATE); el resto
    de motores serializa con SELECT ... FOR UPDATE vía `bloquear`.
    """
    if database is None:
        database = db
    if isinstance(database, SqliteDatabase):
        return database.atomic("IMMEDIATE")
    return database.atomic()


def bloquear(query):
    if isinstance(query.model._meta.database, SqliteDatabase):
        return query
    return query.for_update()
