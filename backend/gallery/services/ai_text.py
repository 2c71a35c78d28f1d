"""Limpieza del texto crudo que devuelve el modelo generativo."""

import re

# Comillas dobles (rectas o tipograficas) que envuelven todo el texto, solo
# si no hay otras comillas adentro: '"a" and "b"' se deja tal cual.
_WRAPPING_QUOTES = re.compile(r'^["“”]+([^"“”]*)["“”]+$')


def clean_up_ai_text_response(text: str | None) -> str | None:
    """
    Normaliza un campo de texto generado por la IA.

    Pasos:
    1. Quita espacios al inicio y al final.
    2. Quita comillas dobles que envuelven todo el texto.
    3. Quita UN punto final (los titulos y captions no lo llevan).

    Ejemplos:
        >>> clean_up_ai_text_response('  "Golden Hour."  ')
        'Golden Hour'
        >>> clean_up_ai_text_response(None) is None
        True
    """
    if text is None:
        return None
    cleaned = text.strip()
    match = _WRAPPING_QUOTES.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    if cleaned.endswith(".") and not cleaned.endswith(".."):
        cleaned = cleaned[:-1]
    return cleaned.strip()
