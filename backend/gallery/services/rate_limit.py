"""
Cuota GLOBAL de consultas de IA con ventana deslizante.

A diferencia de gallery/limiter.py (SlowAPI, un contador por IP), este
limiter cuenta TODAS las consultas de IA del servicio bajo un unico
identificador ("openai-image-query"): 100 por hora, compartidas por todos
los clientes. Protege el presupuesto del proveedor de IA, no al servidor.

Como funciona?
--------------
Usamos la libreria "limits" (la misma sobre la que esta construido
SlowAPI) en su version async:
    - MovingWindowRateLimiter: ventana deslizante. Cuenta los eventos de
      la ultima hora en todo momento, no en bloques fijos de reloj.
    - Storage async de Redis: el conteo vive en el almacen clave-valor
      remoto, que garantiza incrementos atomicos. Nosotros no hacemos
      ningun locking propio.

Si no hay almacen configurado (KV_URL vacio), no se aplica la cuota.
"""

import logging

from limits import parse
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string

from gallery.config import Settings
from gallery.services.errors import AiErrorKind, AiQueryError

logger = logging.getLogger(__name__)


class AiRateLimiter:
    """
    Puerta de rate limiting que se consulta ANTES de cada llamada a la IA.

    Parametros:
        storage: Storage async de `limits` (Redis en produccion, memoria en
            tests). None desactiva la cuota.
        identifier (str): Clave del contador. Constante global.
        limit (str): Cuota en notacion de `limits`, ej: "100/hour".
    """

    def __init__(self, storage=None, identifier: str = Settings.RATE_LIMIT_IDENTIFIER,
                 limit: str = f"{Settings.RATE_LIMIT_MAX_QUERIES_PER_HOUR}/hour"):
        self.storage = storage
        self.identifier = identifier
        self.item = parse(limit)
        self.strategy = MovingWindowRateLimiter(storage) if storage is not None else None

    @property
    def enabled(self) -> bool:
        return self.strategy is not None

    async def check(self) -> None:
        """
        Registra una consulta y falla si no se puede o si no hay cuota.

        Raises:
            AiQueryError(RATE_LIMIT_BACKEND): El almacen no respondio.
            AiQueryError(RATE_LIMIT_EXCEEDED): Cuota agotada.
        """
        if self.strategy is None:
            return

        try:
            success = await self.strategy.hit(self.item, self.identifier)
        except Exception as exc:
            logger.error("Failed to rate limit AI text generation: %s", exc)
            raise AiQueryError(
                AiErrorKind.RATE_LIMIT_BACKEND,
                "Failed to rate limit AI text generation",
            ) from exc

        if not success:
            logger.warning("AI text generation rate limit exceeded (%s)", self.item)
            raise AiQueryError(
                AiErrorKind.RATE_LIMIT_EXCEEDED,
                "AI text generation rate limit exceeded",
            )


def async_storage_uri(kv_url: str) -> str:
    """
    Convierte un URL de Redis al esquema async de `limits`.

        "redis://host:6379"      -> "async+redis://host:6379"
        "rediss://host:6379"     -> "async+rediss://host:6379"
        "async+redis://host"     -> sin cambios
    """
    if kv_url.startswith("async+"):
        return kv_url
    return f"async+{kv_url}"


def build_rate_limiter(settings: Settings) -> AiRateLimiter:
    """Crea el limiter segun la configuracion (sin KV store no hay cuota)."""
    if not settings.HAS_KV_STORE:
        logger.info("No KV store configured; AI rate limiting disabled")
        return AiRateLimiter(storage=None, identifier=settings.RATE_LIMIT_IDENTIFIER)

    storage = storage_from_string(async_storage_uri(settings.KV_URL))
    return AiRateLimiter(
        storage=storage,
        identifier=settings.RATE_LIMIT_IDENTIFIER,
        limit=settings.RATE_LIMIT,
    )
