"""
Modulo de preparacion y validacion del payload de imagen.

La UI envia la imagen como texto base64, a veces con un prefijo data-URI:

    "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQ..."
     |___________________| |_____________________|
          prefijo               base64 real

Antes de enviarla al proveedor de IA:
1. Quitamos el prefijo (remove_base64_prefix). No confiamos en el tipo que
   declara, porque el cliente puede poner lo que quiera.
2. Decodificamos el base64 y verificamos el tamano.
3. Detectamos el tipo MIME REAL con python-magic (magic bytes) y lo
   comparamos contra la lista blanca de la configuracion.

Patron de diseno: Resultado como dataclass
------------------------------------------
validate_image_payload no lanza excepciones; retorna un PayloadValidation
con is_valid, mime_type y error. El caller decide que hacer.
"""

import base64
import binascii
import re
from dataclasses import dataclass

# python-magic detecta el tipo real leyendo los primeros bytes del archivo
# (la misma base de datos que usa el comando `file` de Linux).
import magic

from gallery.config import settings

# re.DOTALL para que (.+) incluya saltos de linea si el base64 viene partido.
_DATA_URI_PREFIX = re.compile(r"^data:image/[a-z0-9.+-]+;base64,(.+)$", re.IGNORECASE | re.DOTALL)


@dataclass
class PayloadValidation:
    """
    Resultado de validar un payload de imagen.

    Atributos:
        is_valid (bool): True si se puede enviar al proveedor.
        mime_type (str): Tipo MIME detectado por magic bytes ("" si no se
            pudo decodificar).
        error (str): Motivo del rechazo ("" si es valido).
    """
    is_valid: bool
    mime_type: str = ""
    error: str = ""


def remove_base64_prefix(image_base64: str) -> str:
    """
    Quita el prefijo data-URI si existe; si no, retorna el texto tal cual.

    Ejemplos:
        >>> remove_base64_prefix("data:image/png;base64,iVBORw0KGgo=")
        'iVBORw0KGgo='
        >>> remove_base64_prefix("iVBORw0KGgo=")
        'iVBORw0KGgo='
    """
    match = _DATA_URI_PREFIX.match(image_base64)
    return match.group(1) if match else image_base64


def validate_image_payload(image_base64: str) -> PayloadValidation:
    """
    Valida un base64 SIN prefijo: que decodifique, su tamano y su tipo real.

    Las validaciones van de la mas barata a la mas cara:
    1. Decodificacion base64 (falla rapido con texto basura)
    2. Tamano decodificado vs MAX_IMAGE_PAYLOAD_SIZE
    3. Tipo MIME por magic bytes vs ALLOWED_IMAGE_MIME_TYPES
    """
    # Algunos clientes parten el base64 en lineas de 76 caracteres.
    compact = "".join(image_base64.split())
    try:
        data = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        return PayloadValidation(is_valid=False, error="Image payload is not valid base64")

    if not data:
        return PayloadValidation(is_valid=False, error="Image payload is empty")

    if len(data) > settings.MAX_IMAGE_PAYLOAD_SIZE:
        return PayloadValidation(
            is_valid=False,
            error=f"Image exceeds {settings.MAX_IMAGE_PAYLOAD_SIZE // (1024 * 1024)}MB limit",
        )

    try:
        mime_type = magic.from_buffer(data, mime=True)
    except magic.MagicException as exc:
        return PayloadValidation(is_valid=False, error=f"Could not detect image type: {exc}")
    if mime_type not in settings.ALLOWED_IMAGE_MIME_TYPES:
        return PayloadValidation(
            is_valid=False,
            mime_type=mime_type,
            error=f"Image type '{mime_type}' is not allowed",
        )

    return PayloadValidation(is_valid=True, mime_type=mime_type)
