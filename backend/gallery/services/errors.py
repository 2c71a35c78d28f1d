"""
Errores del flujo de analisis de imagen con IA.

En vez de una excepcion generica con un mensaje, cada fallo lleva un
`kind` (AiErrorKind). Asi el caller puede decidir segun el TIPO de fallo
(ej: mostrar "intenta mas tarde" si se agoto la cuota) sin comparar
strings de mensajes.
"""

from enum import Enum


class AiErrorKind(str, Enum):
    """Tipos de fallo posibles al consultar la IA."""

    # No se pudo consultar el almacen del rate limiter (Redis caido, etc.)
    RATE_LIMIT_BACKEND = "rate_limit_backend"
    # La cuota global por hora esta agotada
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    # El proveedor rechazo la llamada o devolvio datos que no cumplen el schema
    PROVIDER = "provider"
    # El payload no es una imagen base64 valida o permitida
    INVALID_IMAGE = "invalid_image"


class AiQueryError(Exception):
    """
    Fallo de una consulta de IA.

    Atributos:
        kind (AiErrorKind): Tipo de fallo.
        message (str): Mensaje legible (tambien es str(error)).
    """

    def __init__(self, kind: AiErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
