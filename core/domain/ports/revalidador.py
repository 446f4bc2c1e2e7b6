from abc import ABC, abstractmethod
from uuid import UUID

from core.domain.models.snapshot import TableroSnapshot


class Revalidador(ABC):
    """Avisa a las lecturas cacheadas de que un tablero cambió."""

    @abstractmethod
    def invalidar(self, tablero_id: UUID) -> None:
        raise NotImplementedError


class CacheTableros(Revalidador):
    @abstractmethod
    def generacion(self, tablero_id: UUID) -> int:
        raise NotImplementedError

    @abstractmethod
    def get(self, tablero_id: UUID) -> TableroSnapshot | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, snapshot: TableroSnapshot, generacion: int = 0) -> None:
        raise NotImplementedError
