"""Resultado del motor de autorización."""
from dataclasses import dataclass
from enum import Enum


class Motivo(str, Enum):
    """Clasificación de una denegación."""

    PROHIBIDO = "prohibido"
    NO_ENCONTRADO = "no_encontrado"
    CONFLICTO = "conflicto"
    ESTADO_INVALIDO = "estado_invalido"


@dataclass(frozen=True)
class Decision:
    permitido: bool
    motivo: Motivo | None = None
    mensaje: str = ""

    @classmethod
    def denegar(cls, motivo: Motivo, mensaje: str) -> "Decision":
        return cls(permitido=False, motivo=motivo, mensaje=mensaje)

    @classmethod
    def prohibido(cls, mensaje: str) -> "Decision":
        return cls.denegar(Motivo.PROHIBIDO, mensaje)

    @classmethod
    def no_encontrado(cls, mensaje: str) -> "Decision":
        return cls.denegar(Motivo.NO_ENCONTRADO, mensaje)

    @classmethod
    def conflicto(cls, mensaje: str) -> "Decision":
        return cls.denegar(Motivo.CONFLICTO, mensaje)

    @classmethod
    def estado_invalido(cls, mensaje: str) -> "Decision":
        return cls.denegar(Motivo.ESTADO_INVALIDO, mensaje)


PERMITIR = Decision(permitido=True)
