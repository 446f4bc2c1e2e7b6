from fastapi import HTTPException

from core.domain.errors import ArgumentoInvalido, KanbanError, NoEncontrado


def a_http(error: KanbanError) -> HTTPException:
    if isinstance(error, NoEncontrado):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ArgumentoInvalido):
        return HTTPException(status_code=422, detail=str(error))
    # FalloTransaccion: conflicto con otra escritura concurrente o timeout.
    return HTTPException(status_code=409, detail=str(error))
