"""
Modulo de rutas de IA.

    POST /api/ai/image-query       -> Sugerencias de titulo/caption/tags
    GET  /api/ai/test-connection   -> Health check del proveedor de IA

Las dos rutas tienen dos capas de rate limiting:
1. SlowAPI por IP (ROUTE_RATE_LIMIT): frena a un cliente abusivo.
2. Cuota global de IA (dentro del servicio): protege el presupuesto.

Diferencia importante en el manejo de errores:
- image-query NUNCA responde con error HTTP por fallos de IA. Responde 200
  con `error` y `errorKind`; la UI simplemente no muestra sugerencias.
- test-connection SI propaga el fallo como HTTP, porque su proposito es
  justamente detectar problemas.
"""

from fastapi import APIRouter, Depends, HTTPException
from starlette.requests import Request

from gallery.config import settings
from gallery.dependencies import get_image_analysis_service
from gallery.limiter import limiter
from gallery.models.schemas import (
    ConnectionTestResponse,
    ImageQueryRequest,
    ImageQueryResult,
)
from gallery.services.errors import AiErrorKind, AiQueryError
from gallery.services.image_analysis import ImageAnalysisService
from gallery.services.image_query import generate_ai_image_query

router = APIRouter()

# Codigo HTTP para cada tipo de fallo en test-connection.
ERROR_STATUS_CODES = {
    AiErrorKind.RATE_LIMIT_EXCEEDED: 429,
    AiErrorKind.RATE_LIMIT_BACKEND: 503,
    AiErrorKind.PROVIDER: 502,
    AiErrorKind.INVALID_IMAGE: 400,
}


@router.post("/api/ai/image-query", response_model=ImageQueryResult)
@limiter.limit(settings.ROUTE_RATE_LIMIT)
async def image_query(
    request: Request,
    req: ImageQueryRequest,
    service: ImageAnalysisService = Depends(get_image_analysis_service),
):
    """
    Sugerencias de metadata para una imagen.

    Parametros:
        request (Request): Requerido por SlowAPI para extraer la IP.
        req (ImageQueryRequest): Body JSON con imageBase64 (opcional).

    Retorna:
        ImageQueryResult: Siempre 200. Sin imagen, todos los campos vienen
            en null. Si la IA falla, `error` y `errorKind` lo explican.
    """
    return await generate_ai_image_query(service, req.image_base64)


@router.get("/api/ai/test-connection", response_model=ConnectionTestResponse)
@limiter.limit(settings.ROUTE_RATE_LIMIT)
async def connection_test(
    request: Request,
    service: ImageAnalysisService = Depends(get_image_analysis_service),
):
    """
    Verifica que el proveedor de IA responde.

    Raises:
        HTTPException(429): Cuota global agotada.
        HTTPException(503): El almacen del rate limiter no responde.
        HTTPException(502): El proveedor fallo.
    """
    try:
        text = await service.test_connection()
    except AiQueryError as exc:
        raise HTTPException(status_code=ERROR_STATUS_CODES[exc.kind], detail=str(exc))
    return ConnectionTestResponse(enabled=service.enabled, response=text)
