"""
Modulo de limitacion de tasa de peticiones HTTP por cliente (SlowAPI).

Este limiter restringe cuantas peticiones puede hacer un mismo cliente
(identificado por su IP) a las rutas de IA. Es la primera barrera: corta
a un cliente abusivo ANTES de que consuma la cuota global de IA (ver
services/rate_limit.py), que es compartida por todos los usuarios.

SlowAPI es un wrapper de la libreria "limits" para FastAPI. Si el cliente
excede el limite, responde HTTP 429 (Too Many Requests) sin ejecutar el
endpoint.

Cuando hay un almacen Redis configurado (KV_URL), los contadores viven ahi
para que varias instancias del servidor compartan el conteo. Sin Redis se
usa memoria local del proceso.

Importante: este limiter se crea UNA vez al importar el modulo y los
decoradores de las rutas quedan atados a el. Por eso el almacen y el
limite por IP (ROUTE_RATE_LIMIT) salen del entorno del proceso (la
instancia global `settings`), NO de los Settings que se pasen a
create_app(). La cuota global de IA si sigue a esos Settings.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from gallery.config import settings


def sync_storage_uri(kv_url: str) -> str:
    """
    URI de almacen para SlowAPI, que usa la API sincrona de `limits`.

        ""                        -> "memory://"
        "redis://host:6379"       -> sin cambios
        "async+redis://host:6379" -> "redis://host:6379"
    """
    if not kv_url:
        return "memory://"
    return kv_url.removeprefix("async+")


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=sync_storage_uri(settings.KV_URL),
)
