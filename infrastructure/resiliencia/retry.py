"""
Reintentos con backoff exponencial para los commits de posiciones.

Solo se reintentan errores TRANSITORIOS (red, conexión, locks de la BDD);
un índice fuera de rango o una tarea inexistente fallan a la primera.
"""

import time
import logging
from typing import Any, Callable

import httpx

from core.domain.errors import FalloTransaccion

logger = logging.getLogger(__name__)

# ── Excepciones transitorias que justifican un retry ──────────────────────────
RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    OSError,
    FalloTransaccion,
    httpx.TransportError,
)


def retry_with_backoff(
    func: Callable[[], Any],
    max_retries: int = 2,
    base_delay: float = 0.5,
    retryable_exceptions: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
    operacion: str = "commit",
) -> Any:
    """
    Ejecuta `func()` hasta `max_retries` veces más si falla de forma transitoria.

    La espera antes del reintento n es `base_delay * 2**(n-1)`. `operacion`
    identifica el commit en los logs (p. ej. "reordenar_tarea 3f2a...").

    Raises:
        La excepción original si no es transitoria, o la última si se
        agotan los reintentos.
    """
    intentos = max_retries + 1
    for intento in range(1, intentos + 1):
        try:
            return func()
        except retryable_exceptions as e:
            if intento == intentos:
                logger.error(
                    f"❌ {operacion}: agotados {max_retries} reintentos. Último error: {e}"
                )
                raise
            delay = base_delay * (2 ** (intento - 1))
            logger.warning(
                f"🔁 {operacion}: reintento {intento}/{max_retries} tras {type(e).__name__}: {e}. "
                f"Esperando {delay:.1f}s..."
            )
            time.sleep(delay)
