import os

from core.application.crear_columna import CrearColumnaUseCase
from core.application.crear_tablero import CrearTableroUseCase
from core.application.crear_tarea import CrearTareaUseCase
from core.application.listar_tableros import ListarTablerosUseCase
from core.application.mover_tarea import MoverTareaUseCase
from core.application.obtener_tablero import ObtenerTableroUseCase
from core.application.reordenar_tarea import ReordenarTareaUseCase
from core.domain.ports.revalidador import CacheTableros
from core.domain.ports.tablero_remoto import TableroRemoto
from core.domain.ports.tablero_repository import TableroRepository
from infrastructure.cache.tablero_cache import CacheEnMemoria
from infrastructure.peewee.repository.tablero_repository import (
    PeeweeTableroRepository,
)
from infrastructure.remoto.local import LocalTableroRemoto
from infrastructure.sqlalchemy.repository.tablero_repository import (
    SqlAlchemyTableroRepository,
)

# Única caché del proceso: las mutaciones la invalidan, las lecturas la llenan.
_cache = CacheEnMemoria()


def get_tablero_repository() -> TableroRepository:
    orm = os.getenv("ORM", "peewee").lower()

    if orm == "sqlalchemy":
        return SqlAlchemyTableroRepository()
    # Default to Peewee
    return PeeweeTableroRepository()


def get_cache() -> CacheTableros:
    return _cache


def get_crear_tablero_use_case() -> CrearTableroUseCase:
    return CrearTableroUseCase(repository=get_tablero_repository())


def get_listar_tableros_use_case() -> ListarTablerosUseCase:
    return ListarTablerosUseCase(repository=get_tablero_repository())


def get_obtener_tablero_use_case() -> ObtenerTableroUseCase:
    return ObtenerTableroUseCase(repository=get_tablero_repository(), cache=_cache)


def get_crear_columna_use_case() -> CrearColumnaUseCase:
    return CrearColumnaUseCase(repository=get_tablero_repository(), revalidador=_cache)


def get_crear_tarea_use_case() -> CrearTareaUseCase:
    return CrearTareaUseCase(repository=get_tablero_repository(), revalidador=_cache)


def get_reordenar_tarea_use_case() -> ReordenarTareaUseCase:
    return ReordenarTareaUseCase(repository=get_tablero_repository(), revalidador=_cache)


def get_mover_tarea_use_case() -> MoverTareaUseCase:
    return MoverTareaUseCase(repository=get_tablero_repository(), revalidador=_cache)


def get_tablero_remoto() -> TableroRemoto:
    return LocalTableroRemoto(
        reordenar=get_reordenar_tarea_use_case(),
        mover=get_mover_tarea_use_case(),
        obtener=get_obtener_tablero_use_case(),
    )
