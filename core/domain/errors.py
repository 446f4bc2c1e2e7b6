class KanbanError(Exception):
    """Error base del dominio Kanban."""


class ArgumentoInvalido(KanbanError, ValueError):
    """Título vacío, índice fuera de rango u otro dato no aceptable."""


class NoEncontrado(KanbanError, LookupError):
    """El tablero, columna o tarea referenciado no existe."""


class FalloTransaccion(KanbanError):
    """Conflicto o timeout de la capa de persistencia."""
