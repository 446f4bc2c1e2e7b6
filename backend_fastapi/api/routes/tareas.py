from uuid import UUID

from fastapi import APIRouter, Depends, status

from backend_fastapi.api.deps import mover_tarea_use_case, reordenar_tarea_use_case
from backend_fastapi.api.errores import a_http
from core.application.mover_tarea import MoverTareaCommand, MoverTareaUseCase
from core.application.reordenar_tarea import ReordenarTareaCommand, ReordenarTareaUseCase
from core.domain.errors import KanbanError

router = APIRouter(prefix="/tareas", tags=["tareas"])


@router.put(
    "/{tarea_id}/posicion",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reordenar una tarea dentro de su columna",
)
def reordenar_tarea(
    tarea_id: UUID,
    cmd: ReordenarTareaCommand,
    use_case: ReordenarTareaUseCase = Depends(reordenar_tarea_use_case),
) -> None:
    """
    - **columna_id**: Columna actual de la tarea.
    - **nuevo_indice**: Índice destino, entre 0 y el número de tareas - 1.
    """
    try:
        use_case.execute(tarea_id, cmd)
    except KanbanError as e:
        raise a_http(e) from e


@router.put(
    "/{tarea_id}/columna",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mover una tarea a otra columna",
)
def mover_tarea(
    tarea_id: UUID,
    cmd: MoverTareaCommand,
    use_case: MoverTareaUseCase = Depends(mover_tarea_use_case),
) -> None:
    """
    - **columna_origen_id**: Columna actual de la tarea.
    - **columna_destino_id**: Columna destino.
    - **nuevo_indice**: Índice en la columna destino, entre 0 y su número de tareas.
    """
    try:
        use_case.execute(tarea_id, cmd)
    except KanbanError as e:
        raise a_http(e) from e
