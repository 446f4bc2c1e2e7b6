from uuid import UUID

from fastapi import APIRouter, Depends, status

from backend_fastapi.api.deps import crear_tarea_use_case
from backend_fastapi.api.errores import a_http
from core.application.crear_tarea import CrearTareaCommand, CrearTareaUseCase
from core.domain.errors import KanbanError
from core.domain.models.tarea import Tarea

router = APIRouter(prefix="/columnas", tags=["columnas"])


@router.post(
    "/{columna_id}/tareas",
    response_model=Tarea,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar una tarea al final de la columna",
)
def crear_tarea(
    columna_id: UUID,
    cmd: CrearTareaCommand,
    use_case: CrearTareaUseCase = Depends(crear_tarea_use_case),
) -> Tarea:
    """
    - **titulo**: Título de la tarea (obligatorio).
    - **prioridad**: LOW, MEDIUM (por defecto), HIGH o URGENT.
    - **fecha_limite**: Fecha límite opcional.
    - **descripcion**: Descripción opcional.
    """
    try:
        return use_case.execute(columna_id, cmd)
    except KanbanError as e:
        raise a_http(e) from e
