from core.domain.models.tablero import Tablero


class ListarTablerosUseCase:
    def __init__(self, repository) -> None:
        self._repository = repository

    def execute(self) -> list[Tablero]:
        return self._repository.list_tableros()
