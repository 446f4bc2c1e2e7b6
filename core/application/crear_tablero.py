import logging
from dataclasses import dataclass
from uuid import uuid4

from core.application.validacion import requerir_titulo, texto_opcional
from core.domain.models.columna import COLUMNAS_INICIALES, Columna
from core.domain.models.tablero import Tablero
from core.domain.ports.tablero_repository import TableroRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CrearTableroCommand:
    titulo: str
    descripcion: str | None = None


class CrearTableroUseCase:
    def __init__(self, repository: TableroRepository) -> None:
        self._repository = repository

    def execute(self, cmd: CrearTableroCommand) -> Tablero:
        tablero = Tablero(
            id=uuid4(),
            titulo=requerir_titulo(cmd.titulo, "tablero"),
            descripcion=texto_opcional(cmd.descripcion),
        )
        columnas = [
            Columna(
                id=uuid4(),
                tablero_id=tablero.id,
                titulo=titulo,
                color=color,
                posicion=posicion,
            )
            for posicion, (titulo, color) in enumerate(COLUMNAS_INICIALES)
        ]
        self._repository.crear_tablero(tablero, columnas)
        logger.info(f"Tablero creado: {tablero.id} ({tablero.titulo!r})")
        return tablero
