"""
Punto de entrada principal de la aplicacion FastAPI.

Aqui se:
1. Construyen los servicios de IA al arrancar (lifespan) y se cierran al
   apagar.
2. Configuran los middlewares (CORS, rate limiting por IP).
3. Registran las rutas (ai, photos).
4. Define el endpoint de health check.

Arquitectura de la aplicacion:
------------------------------
    main.py (punto de entrada + lifespan)
        |
        +-- routes/         (Controladores: reciben HTTP requests)
        |    +-- ai.py
        |    +-- photos.py
        |
        +-- services/       (Logica de negocio)
        |    +-- image_query.py      (helper: nunca lanza por fallos de IA)
        |    +-- image_analysis.py   (rate limit -> generacion -> limpieza)
        |    +-- text_generator.py   (estrategias: OpenAI / desactivada)
        |    +-- rate_limit.py       (cuota global con ventana deslizante)
        |    +-- image_payload.py    (prefijo data-URI, validacion)
        |    +-- ai_text.py          (limpieza del texto del modelo)
        |    +-- thumbnails.py       (enlace de miniatura)
        |    +-- errors.py
        |
        +-- models/schemas.py
        +-- dependencies.py
        +-- config.py
        +-- limiter.py      (SlowAPI por IP)
        +-- logging_config.py

El flujo de una peticion de IA es:
    Cliente -> CORS -> SlowAPI (por IP) -> Router -> Cuota global -> Proveedor
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from gallery.config import Settings, settings as default_settings
from gallery.limiter import limiter
from gallery.logging_config import setup_logging
from gallery.models.schemas import HealthResponse
from gallery.routes.ai import router as ai_router
from gallery.routes.photos import router as photos_router
from gallery.services.image_analysis import ImageAnalysisService
from gallery.services.rate_limit import build_rate_limiter
from gallery.services.text_generator import build_text_generator

logger = logging.getLogger(__name__)


def build_image_analysis_service(settings: Settings) -> ImageAnalysisService:
    """Construye el servicio con la estrategia y el limiter que indique la configuracion."""
    return ImageAnalysisService(
        generator=build_text_generator(settings),
        rate_limiter=build_rate_limiter(settings),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Crea y configura la aplicacion.

    Parametros:
        settings (Settings | None): Configuracion a usar. Por defecto la
            instancia global leida del entorno. Los tests pasan la suya.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Inicializa el servicio de IA (cliente del proveedor + limiter) y lo
        adjunta a app.state. Al apagar, cierra el cliente HTTP del proveedor.
        """
        setup_logging(settings.LOG_LEVEL)
        service = build_image_analysis_service(settings)
        app.state.image_analysis_service = service
        logger.info(
            "AI services ready (generation=%s, rate_limit=%s)",
            service.enabled, service.rate_limiter.enabled,
        )
        try:
            yield
        finally:
            await service.aclose()
            app.state.image_analysis_service = None

    app = FastAPI(title="Photo Gallery", lifespan=lifespan)
    app.state.settings = settings

    # ---------- Rate limiting por IP (SlowAPI) ----------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # ---------- CORS ----------
    # SEGURIDAD: NUNCA uses allow_origins=["*"] en produccion.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Estado del servidor y de las capacidades de IA configuradas."""
        cfg: Settings = request.app.state.settings
        return HealthResponse(
            status="ok",
            ai_text_generation_enabled=cfg.AI_TEXT_GENERATION_ENABLED,
            rate_limit_enabled=cfg.HAS_KV_STORE,
        )

    app.include_router(ai_router)
    app.include_router(photos_router)

    return app


app = create_app()
