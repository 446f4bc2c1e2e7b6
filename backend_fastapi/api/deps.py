from core.application.crear_columna import CrearColumnaUseCase
from core.application.crear_tablero import CrearTableroUseCase
from core.application.crear_tarea import CrearTareaUseCase
from core.application.listar_tableros import ListarTablerosUseCase
from core.application.mover_tarea import MoverTareaUseCase
from core.application.obtener_tablero import ObtenerTableroUseCase
from core.application.reordenar_tarea import ReordenarTareaUseCase
from infrastructure.container import (
    get_crear_columna_use_case,
    get_crear_tablero_use_case,
    get_crear_tarea_use_case,
    get_listar_tableros_use_case,
    get_mover_tarea_use_case,
    get_obtener_tablero_use_case,
    get_reordenar_tarea_use_case,
)


def crear_tablero_use_case() -> CrearTableroUseCase:
    return get_crear_tablero_use_case()


def listar_tableros_use_case() -> ListarTablerosUseCase:
    return get_listar_tableros_use_case()


def obtener_tablero_use_case() -> ObtenerTableroUseCase:
    return get_obtener_tablero_use_case()


def crear_columna_use_case() -> CrearColumnaUseCase:
    return get_crear_columna_use_case()


def crear_tarea_use_case() -> CrearTareaUseCase:
    return get_crear_tarea_use_case()


def reordenar_tarea_use_case() -> ReordenarTareaUseCase:
    return get_reordenar_tarea_use_case()


def mover_tarea_use_case() -> MoverTareaUseCase:
    return get_mover_tarea_use_case()
