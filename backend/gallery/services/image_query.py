"""
Helper que la UI usa para pedir metadata sugerida por la IA.

Nunca lanza excepciones por fallos de IA: un fallo (cuota agotada, Redis
caido, error del proveedor) se convierte en un resultado "degradado" con
`error` y `error_kind`, y los campos de contenido quedan en None. La UI
simplemente no muestra sugerencias.
"""

import logging

from gallery.models.schemas import ImageQueryResult
from gallery.services.errors import AiErrorKind, AiQueryError
from gallery.services.image_analysis import ImageAnalysisService

logger = logging.getLogger(__name__)


async def generate_ai_image_query(
    service: ImageAnalysisService,
    image_base64: str | None = None,
) -> ImageQueryResult:
    """
    Analiza una imagen opcional y retorna el resultado aplanado.

    Parametros:
        service (ImageAnalysisService): Servicio de analisis (inyectado).
        image_base64 (str | None): Imagen en base64, con o sin prefijo
            data-URI. Sin imagen no se hace ninguna llamada remota.

    Retorna:
        ImageQueryResult: tags viene como un solo string unido con ", ".
    """
    if not image_base64:
        return ImageQueryResult()

    try:
        analysis = await service.analyze_image(image_base64)
    except AiQueryError as exc:
        logger.warning("Error generating AI image text (%s): %s", exc.kind.value, exc)
        return ImageQueryResult(error=str(exc), error_kind=exc.kind.value)
    except Exception as exc:
        # Cualquier otro fallo inesperado tambien degrada el resultado; la
        # UI nunca recibe una excepcion por culpa de la IA.
        logger.exception("Unexpected error generating AI image text")
        return ImageQueryResult(error=str(exc), error_kind=AiErrorKind.PROVIDER.value)

    return ImageQueryResult(
        title=analysis.title,
        caption=analysis.caption,
        tags=", ".join(analysis.tags),
        semantic_description=analysis.semantic_description,
    )
