from uuid import UUID

from fastapi import APIRouter, Depends, status

from backend_fastapi.api.deps import (
    crear_columna_use_case,
    crear_tablero_use_case,
    listar_tableros_use_case,
    obtener_tablero_use_case,
)
from backend_fastapi.api.errores import a_http
from core.application.crear_columna import CrearColumnaCommand, CrearColumnaUseCase
from core.application.crear_tablero import CrearTableroCommand, CrearTableroUseCase
from core.application.listar_tableros import ListarTablerosUseCase
from core.application.obtener_tablero import ObtenerTableroUseCase
from core.domain.errors import KanbanError
from core.domain.models.columna import Columna
from core.domain.models.snapshot import TableroSnapshot
from core.domain.models.tablero import Tablero

router = APIRouter(prefix="/tableros", tags=["tableros"])


@router.post(
    "",
    response_model=Tablero,
    status_code=status.HTTP_201_CREATED,
    summary="Crear un tablero",
)
def crear_tablero(
    cmd: CrearTableroCommand,
    use_case: CrearTableroUseCase = Depends(crear_tablero_use_case),
) -> Tablero:
    """
    Crea un tablero con sus tres columnas iniciales
    ("To Do", "In Progress", "Done").

    - **titulo**: Título del tablero (obligatorio).
    - **descripcion**: Descripción opcional.
    """
    try:
        return use_case.execute(cmd)
    except KanbanError as e:
        raise a_http(e) from e


@router.get(
    "",
    response_model=list[Tablero],
    summary="Listar tableros",
)
def listar_tableros(
    use_case: ListarTablerosUseCase = Depends(listar_tableros_use_case),
) -> list[Tablero]:
    """
    Obtiene todos los tableros, del más reciente al más antiguo.
    """
    return use_case.execute()


@router.get(
    "/{tablero_id}",
    response_model=TableroSnapshot,
    summary="Obtener un tablero con sus columnas y tareas",
)
def obtener_tablero(
    tablero_id: UUID,
    q: str | None = None,
    use_case: ObtenerTableroUseCase = Depends(obtener_tablero_use_case),
) -> TableroSnapshot:
    """
    Devuelve el tablero con columnas y tareas ordenadas por posición.

    - **q**: Filtra las tareas cuyo título contiene el texto (sin distinguir mayúsculas).
    """
    try:
        return use_case.execute(tablero_id, q)
    except KanbanError as e:
        raise a_http(e) from e


@router.post(
    "/{tablero_id}/columnas",
    response_model=Columna,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar una columna al final del tablero",
)
def crear_columna(
    tablero_id: UUID,
    cmd: CrearColumnaCommand,
    use_case: CrearColumnaUseCase = Depends(crear_columna_use_case),
) -> Columna:
    """
    - **titulo**: Título de la columna (obligatorio).
    - **color**: Color de presentación.
    """
    try:
        return use_case.execute(tablero_id, cmd)
    except KanbanError as e:
        raise a_http(e) from e
