from core.domain.errors import ArgumentoInvalido


def requerir_titulo(titulo: str | None, entidad: str) -> str:
    limpio = (titulo or "").strip()
    if not limpio:
        raise ArgumentoInvalido(f"El título de la {entidad} es obligatorio")
    return limpio


def texto_opcional(texto: str | None) -> str | None:
    return (texto or "").strip() or None
