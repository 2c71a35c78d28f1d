"""
Estrategias de generacion de texto con IA.

Patron de diseno: Strategy
--------------------------
El servicio de analisis no sabe (ni le importa) si la IA esta activa.
Recibe una estrategia que implementa TextGenerator:

    - OpenAiTextGenerator: llama al proveedor real (Gemini por defecto,
      via su endpoint compatible con OpenAI).
    - DisabledTextGenerator: IA apagada por configuracion. Devuelve un
      resultado vacio pero bien formado y NUNCA llama al proveedor.

build_text_generator() elige la estrategia segun la configuracion. Asi el
camino "IA desactivada" es explicito y se puede testear por separado.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from openai import AsyncOpenAI
from pydantic import ValidationError

from gallery.config import Settings
from gallery.models.schemas import ImageAnalysis
from gallery.services.errors import AiErrorKind, AiQueryError
from gallery.services.image_payload import remove_base64_prefix, validate_image_payload

logger = logging.getLogger(__name__)

AI_IMAGE_PROMPT = (
    "Analyze this image and provide the following details in JSON format:\n"
    "- A concise title in 3 words or less\n"
    "- A brief caption in 6 words or less without punctuation\n"
    "- Up to 3 keywords describing key elements, avoiding adjectives and adverbs\n"
    "- A brief semantic description without introductory phrases"
)

CONNECTION_TEST_PROMPT = "Test connection"

# JSON schema que restringe la salida del modelo. Los limites son los
# mismos que valida ImageAnalysis al recibir la respuesta.
IMAGE_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "maxLength": 30,
            "description": "A concise title for the image in 3 words or less",
        },
        "caption": {
            "type": "string",
            "maxLength": 60,
            "description": "A brief caption for the image in 6 words or less, without punctuation",
        },
        "tags": {
            "type": "array",
            "items": {"type": "string"},
            "maxItems": 3,
            "description": "Up to 3 keywords describing the image, avoiding adjectives and adverbs",
        },
        "semanticDescription": {
            "type": "string",
            "description": "A brief description of the image without introductory phrases",
        },
    },
    "required": ["title", "caption", "tags", "semanticDescription"],
    "additionalProperties": False,
}

RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "image_analysis",
        "schema": IMAGE_ANALYSIS_SCHEMA,
        "strict": True,
    },
}


class TextGenerator(ABC):
    """Base abstracta de las estrategias de generacion."""

    enabled: bool = True

    @abstractmethod
    async def analyze_image(self, image_base64: str) -> ImageAnalysis:
        """Genera titulo, caption, tags y descripcion para una imagen."""
        ...

    @abstractmethod
    async def generate_text(self, prompt: str) -> str | None:
        """Ida y vuelta minima de solo texto (para health checks)."""
        ...

    async def aclose(self) -> None:
        """Libera recursos (conexiones HTTP). Por defecto no hay nada."""


class DisabledTextGenerator(TextGenerator):
    """IA desactivada: resultado vacio, cero llamadas al proveedor."""

    enabled = False

    async def analyze_image(self, image_base64: str) -> ImageAnalysis:
        return ImageAnalysis.empty()

    async def generate_text(self, prompt: str) -> str | None:
        return None


class OpenAiTextGenerator(TextGenerator):
    """
    Generacion estructurada con el SDK de OpenAI.

    Parametros:
        client (AsyncOpenAI): Cliente ya construido (inyectado). En tests
            se reemplaza client.chat.completions.create con un AsyncMock.
        model (str): Identificador del modelo, ej: "gemini-1.5-flash".
    """

    def __init__(self, client: AsyncOpenAI, model: str):
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def analyze_image(self, image_base64: str) -> ImageAnalysis:
        """
        Envia UNA peticion: prompt fijo + imagen, con salida en JSON schema.

        Raises:
            AiQueryError(INVALID_IMAGE): El payload no es una imagen valida.
            AiQueryError(PROVIDER): El proveedor fallo o la respuesta no
                cumple el schema.
        """
        payload = remove_base64_prefix(image_base64)
        validation = validate_image_payload(payload)
        if not validation.is_valid:
            raise AiQueryError(AiErrorKind.INVALID_IMAGE, validation.error)

        # El protocolo de OpenAI exige la imagen como data URL. Lo
        # reconstruimos con el tipo DETECTADO, no con el que envio el cliente.
        image_url = f"data:{validation.mime_type};base64,{payload}"
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": AI_IMAGE_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format=RESPONSE_FORMAT,
            )
        except Exception as exc:
            logger.error("Error during AI image analysis call: %s", exc)
            raise AiQueryError(AiErrorKind.PROVIDER, f"AI image analysis failed: {exc}") from exc

        content = first_message_content(response, "AI image analysis")
        if not content:
            raise AiQueryError(AiErrorKind.PROVIDER, "AI image analysis returned no content")

        try:
            return ImageAnalysis.model_validate_json(content)
        except ValidationError as exc:
            logger.error("AI image analysis does not match schema: %s", exc)
            raise AiQueryError(
                AiErrorKind.PROVIDER,
                "AI image analysis returned invalid structured data",
            ) from exc

    async def generate_text(self, prompt: str) -> str | None:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": [{"type": "text", "text": prompt}]}],
            )
        except Exception as exc:
            logger.error("Error during AI connection test: %s", exc)
            raise AiQueryError(AiErrorKind.PROVIDER, f"AI connection test failed: {exc}") from exc
        return first_message_content(response, "AI connection test")

    async def aclose(self) -> None:
        await self.client.close()


def first_message_content(response: Any, operation: str) -> str | None:
    """
    Contenido del primer `choice` de una respuesta de chat completions.

    Raises:
        AiQueryError(PROVIDER): La respuesta no trae ningun choice o no
            tiene la forma esperada.
    """
    choices = getattr(response, "choices", None)
    if not choices:
        logger.error("%s returned no choices", operation)
        raise AiQueryError(AiErrorKind.PROVIDER, f"{operation} returned no choices")
    try:
        return choices[0].message.content
    except AttributeError as exc:
        raise AiQueryError(AiErrorKind.PROVIDER, f"{operation} returned a malformed reply") from exc


def build_text_generator(settings: Settings) -> TextGenerator:
    """
    Elige la estrategia segun la configuracion.

    Sin la bandera AI_TEXT_GENERATION o sin API key -> DisabledTextGenerator.
    """
    if not settings.AI_TEXT_GENERATION_ENABLED:
        logger.info("AI text generation disabled")
        return DisabledTextGenerator()

    # max_retries=0: un intento fallido da un resultado degradado, sin
    # reintentos.
    client = AsyncOpenAI(
        api_key=settings.GEMINI_SECRET_KEY,
        base_url=settings.AI_BASE_URL,
        max_retries=0,
    )
    logger.info("AI text generation enabled with model %s", settings.OPENAI_MODEL)
    return OpenAiTextGenerator(client, settings.OPENAI_MODEL)
