"""
Modulo de rutas de fotos.

    POST /api/photos/thumbnail-link  -> Enlace navegable de una miniatura

El frontend envia el registro de la foto y el contexto de navegacion
(tag o camara que se esta viendo, y si la foto esta seleccionada) y
recibe a donde debe apuntar el enlace y con que clases se dibuja.
"""

from fastapi import APIRouter

from gallery.models.schemas import PhotoLink, PhotoLinkRequest
from gallery.services.thumbnails import photo_small

router = APIRouter()


@router.post("/api/photos/thumbnail-link", response_model=PhotoLink)
async def thumbnail_link(req: PhotoLinkRequest):
    """Mapeo puro; no tiene casos de error (fuera de la validacion del body)."""
    return photo_small(req.photo, tag=req.tag, camera=req.camera, selected=req.selected)
