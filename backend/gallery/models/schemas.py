"""
Modulo de esquemas (schemas) de datos de la API.

Este archivo define la ESTRUCTURA EXACTA de los datos que entran y salen
de nuestra API usando Pydantic. Es el "contrato" entre el frontend de la
galeria y el backend.

Hay tres grupos de schemas:
1. Galeria: Camera, Photo y el enlace de miniatura (PhotoLink).
2. Analisis de imagen con IA: ImageAnalysis (lo que devuelve el modelo)
   e ImageQueryResult (lo que recibe la UI, "aplanado").
3. Respuestas auxiliares: health check, test de conexion, errores.

Convencion de nombres:
----------------------
En Python usamos snake_case (semantic_description), pero el frontend
espera camelCase (semanticDescription). Los campos con `alias` se
serializan con el alias, y populate_by_name=True permite construirlos
desde Python con el nombre snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field


# ---------- Galeria ----------


class Camera(BaseModel):
    """Camara con la que se tomo una foto (usada como filtro de navegacion)."""
    make: str
    model: str


class Photo(BaseModel):
    """
    Registro de una foto. Lo define el resto de la galeria; aqui solo se lee.

    Atributos:
        id (str): Identificador de la foto (aparece en la URL).
        url (str): URL de la imagen original.
        aspect_ratio (float): Ancho / alto, para reservar el espacio del
            thumbnail antes de que cargue la imagen.
        blur_data (str | None): Placeholder borroso (data URI) opcional.
        title (str | None): Titulo para mostrar. Puede faltar.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str
    aspect_ratio: float = Field(alias="aspectRatio", gt=0)
    blur_data: str | None = Field(default=None, alias="blurData")
    title: str | None = None


class PhotoLinkRequest(BaseModel):
    """Peticion para POST /api/photos/thumbnail-link."""
    photo: Photo
    tag: str | None = None
    camera: Camera | None = None
    selected: bool = False


class ThumbnailImage(BaseModel):
    """Propiedades de la imagen pequena dentro del enlace."""
    model_config = ConfigDict(populate_by_name=True)

    src: str
    aspect_ratio: float = Field(alias="aspectRatio")
    blur_data: str | None = Field(default=None, alias="blurData")
    class_name: str = Field(alias="className")
    alt: str


class PhotoLink(BaseModel):
    """
    Enlace navegable de una miniatura.

    Atributos:
        href (str): Ruta destino; codifica la foto y el filtro (tag/camara).
        class_name (str): Clases CSS. Se oscurece al presionar y cuando
            la foto esta seleccionada.
        image (ThumbnailImage): La imagen a renderizar dentro del enlace.
    """
    model_config = ConfigDict(populate_by_name=True)

    href: str
    class_name: str = Field(alias="className")
    image: ThumbnailImage


# ---------- Analisis de imagen con IA ----------


class ImageAnalysis(BaseModel):
    """
    Resultado estructurado del modelo generativo.

    Los limites (max_length) coinciden con el JSON schema que enviamos al
    proveedor. Si el modelo devuelve algo fuera de esos limites, Pydantic
    rechaza la respuesta y el servicio lo reporta como fallo del proveedor.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(
        max_length=30,
        description="A concise title for the image in 3 words or less",
    )
    caption: str = Field(
        max_length=60,
        description="A brief caption for the image in 6 words or less, without punctuation",
    )
    tags: list[str] = Field(
        max_length=3,
        description="Up to 3 keywords describing the image, avoiding adjectives and adverbs",
    )
    semantic_description: str = Field(
        alias="semanticDescription",
        description="A brief description of the image without introductory phrases",
    )

    @classmethod
    def empty(cls) -> "ImageAnalysis":
        """Resultado vacio pero bien formado (IA desactivada)."""
        return cls(title="", caption="", tags=[], semantic_description="")


class ImageQueryRequest(BaseModel):
    """
    Peticion para POST /api/ai/image-query.

    image_base64 es OPCIONAL: sin imagen, la respuesta viene vacia y sin
    error. Acepta base64 "crudo" o con prefijo data-URI
    (ej: "data:image/jpeg;base64,/9j/4AAQ...").
    """
    model_config = ConfigDict(populate_by_name=True)

    image_base64: str | None = Field(default=None, alias="imageBase64")


class ImageQueryResult(BaseModel):
    """
    Resultado "aplanado" que recibe la UI.

    Todos los campos son opcionales porque la generacion puede fallar.
    Un fallo NO es una excepcion para el caller: llega como `error` (mensaje)
    y `error_kind` (tipo, para poder decidir sin comparar strings), y los
    campos de contenido quedan en None.

    Atributos:
        tags (str | None): Las etiquetas unidas con ", ".
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    caption: str | None = None
    tags: str | None = None
    semantic_description: str | None = Field(default=None, alias="semanticDescription")
    error: str | None = None
    error_kind: str | None = Field(default=None, alias="errorKind")


# ---------- Respuestas auxiliares ----------


class ConnectionTestResponse(BaseModel):
    """
    Respuesta de GET /api/ai/test-connection.

    Atributos:
        enabled (bool): False si la generacion de IA esta desactivada; en
            ese caso no se llama al proveedor y `response` es None.
        response (str | None): Texto devuelto por el modelo.
    """
    enabled: bool
    response: str | None = None


class HealthResponse(BaseModel):
    status: str
    ai_text_generation_enabled: bool
    rate_limit_enabled: bool


class ErrorResponse(BaseModel):
    """
    Schema estandar para respuestas de error.

    Atributos:
        detail (str): Mensaje de error legible.
            Ejemplos:
                "AI text generation rate limit exceeded"
                "Failed to rate limit AI text generation"
    """
    detail: str
