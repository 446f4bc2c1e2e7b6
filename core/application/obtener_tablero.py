from uuid import UUID

from core.application.proyeccion import filtrar_tareas
from core.domain.errors import NoEncontrado
from core.domain.models.snapshot import TableroSnapshot
from core.domain.ports.revalidador import CacheTableros
from core.domain.ports.tablero_repository import TableroRepository


class ObtenerTableroUseCase:
    """Lee un tablero completo pasando por la caché que invalidan las mutaciones."""

    def __init__(
        self, repository: TableroRepository, cache: CacheTableros | None = None
    ) -> None:
        self._repository = repository
        self._cache = cache

    def execute(self, tablero_id: UUID, filtro: str | None = None) -> TableroSnapshot:
        snapshot = self._cache.get(tablero_id) if self._cache else None
        if snapshot is None:
            generacion = self._cache.generacion(tablero_id) if self._cache else 0
            snapshot = self._repository.get_tablero_completo(tablero_id)
            if snapshot is None:
                raise NoEncontrado(f"Tablero con id {tablero_id} no encontrado")
            if self._cache:
                self._cache.put(snapshot, generacion)
        return filtrar_tareas(snapshot, filtro or "")
