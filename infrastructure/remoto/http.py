import os
from uuid import UUID

import httpx
from pydantic import TypeAdapter

from core.domain.errors import ArgumentoInvalido, FalloTransaccion, NoEncontrado
from core.domain.models.snapshot import TableroSnapshot
from core.domain.ports.tablero_remoto import TableroRemoto
from infrastructure.resiliencia.retry import retry_with_backoff

_API_URL = os.getenv("KANBAN_API_URL", "http://127.0.0.1:8000")
_COMMIT_TIMEOUT = float(os.getenv("COMMIT_TIMEOUT", "10"))
_RETRY_MAX_RETRIES = int(os.getenv("COMMIT_MAX_RETRIES", "2"))
_RETRY_BASE_DELAY = float(os.getenv("COMMIT_RETRY_DELAY", "0.2"))

_SNAPSHOT = TypeAdapter(TableroSnapshot)

_ERRORES_POR_ESTADO = {
    404: NoEncontrado,
    409: FalloTransaccion,
    422: ArgumentoInvalido,
}


def _detalle(respuesta: httpx.Response) -> str:
    # Un proxy puede responder con HTML; el cuerpo crudo sirve de detalle.
    try:
        cuerpo = respuesta.json()
    except ValueError:
        return respuesta.text
    if isinstance(cuerpo, dict) and "detail" in cuerpo:
        return str(cuerpo["detail"])
    return respuesta.text


def _verificar(respuesta: httpx.Response) -> None:
    error = _ERRORES_POR_ESTADO.get(respuesta.status_code)
    if error is not None:
        raise error(_detalle(respuesta))
    respuesta.raise_for_status()


class HttpTableroRemoto(TableroRemoto):
    """
    Cliente de la API HTTP del tablero.

    Los errores de la API se traducen a los del dominio (404 → NoEncontrado,
    409 → FalloTransaccion, 422 → ArgumentoInvalido). Los commits se
    reintentan ante fallos de red o de transacción y luego se propaga el error.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        max_retries: int = _RETRY_MAX_RETRIES,
        base_delay: float = _RETRY_BASE_DELAY,
    ) -> None:
        self._client = client or httpx.Client(base_url=_API_URL, timeout=_COMMIT_TIMEOUT)
        self._max_retries = max_retries
        self._base_delay = base_delay

    def _put(self, url: str, cuerpo: dict) -> None:
        retry_with_backoff(
            lambda: _verificar(self._client.put(url, json=cuerpo)),
            max_retries=self._max_retries,
            base_delay=self._base_delay,
            operacion=f"PUT {url}",
        )

    def reordenar_tarea(self, tarea_id: UUID, nuevo_indice: int, columna_id: UUID) -> None:
        self._put(
            f"/tareas/{tarea_id}/posicion",
            {"columna_id": str(columna_id), "nuevo_indice": nuevo_indice},
        )

    def mover_tarea(
        self,
        tarea_id: UUID,
        columna_origen_id: UUID,
        columna_destino_id: UUID,
        nuevo_indice: int,
    ) -> None:
        self._put(
            f"/tareas/{tarea_id}/columna",
            {
                "columna_origen_id": str(columna_origen_id),
                "columna_destino_id": str(columna_destino_id),
                "nuevo_indice": nuevo_indice,
            },
        )

    def obtener_tablero(self, tablero_id: UUID) -> TableroSnapshot:
        respuesta = self._client.get(f"/tableros/{tablero_id}")
        _verificar(respuesta)
        return _SNAPSHOT.validate_python(respuesta.json())
