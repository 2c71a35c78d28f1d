"""
Servicio de analisis de imagen con IA.

Orquesta los dos colaboradores externos en orden estricto:

    1. Rate limiter (cuota global)  -> siempre PRIMERO
    2. Estrategia de generacion     -> solo si hay cuota

y limpia cada campo de texto que devuelve el modelo.

Patron de diseno: Inyeccion de dependencias
-------------------------------------------
El servicio NO crea su cliente de IA ni su limiter: los recibe en el
constructor. En produccion los construye el lifespan de la app (main.py);
en tests se pasan fakes sin tocar ningun estado global del proceso.
"""

import logging

from gallery.models.schemas import ImageAnalysis
from gallery.services.ai_text import clean_up_ai_text_response
from gallery.services.rate_limit import AiRateLimiter
from gallery.services.text_generator import CONNECTION_TEST_PROMPT, TextGenerator

logger = logging.getLogger(__name__)


class ImageAnalysisService:
    """
    Analisis de imagen y test de conexion con el proveedor de IA.

    Atributos:
        generator (TextGenerator): Estrategia (real o desactivada).
        rate_limiter (AiRateLimiter): Cuota global por hora.
    """

    def __init__(self, generator: TextGenerator, rate_limiter: AiRateLimiter):
        self.generator = generator
        self.rate_limiter = rate_limiter

    @property
    def enabled(self) -> bool:
        return self.generator.enabled

    async def analyze_image(self, image_base64: str) -> ImageAnalysis:
        """
        Obtiene titulo, caption, tags y descripcion semantica de una imagen.

        Raises:
            AiQueryError: Fallo del limiter, cuota agotada, payload invalido
                o fallo del proveedor. El `kind` indica cual.
        """
        await self.rate_limiter.check()
        logger.debug("Generating AI image analysis (enabled=%s)", self.generator.enabled)
        analysis = await self.generator.analyze_image(image_base64)
        return clean_up_analysis(analysis)

    async def test_connection(self) -> str | None:
        """
        Misma puerta de rate limiting y luego una ida y vuelta de solo texto.

        Retorna el texto del modelo, o None si la IA esta desactivada.
        """
        await self.rate_limiter.check()
        return await self.generator.generate_text(CONNECTION_TEST_PROMPT)

    async def aclose(self) -> None:
        await self.generator.aclose()


def clean_up_analysis(analysis: ImageAnalysis) -> ImageAnalysis:
    """Aplica clean_up_ai_text_response a cada campo y a cada tag; descarta tags vacios."""
    return ImageAnalysis(
        title=clean_up_ai_text_response(analysis.title),
        caption=clean_up_ai_text_response(analysis.caption),
        tags=[tag for tag in (clean_up_ai_text_response(t) for t in analysis.tags) if tag],
        semantic_description=clean_up_ai_text_response(analysis.semantic_description),
    )
