"""
Dependencias de FastAPI compartidas por las rutas.

El servicio de analisis vive en app.state (lo crea el lifespan en main.py).
Las rutas lo reciben con Depends(get_image_analysis_service), y los tests
lo reemplazan con app.dependency_overrides sin tocar estado global.
"""

from fastapi import HTTPException
from starlette.requests import Request

from gallery.services.image_analysis import ImageAnalysisService


def get_image_analysis_service(request: Request) -> ImageAnalysisService:
    service = getattr(request.app.state, "image_analysis_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="AI service is not initialized")
    return service
