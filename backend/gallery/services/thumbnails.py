"""
Enlace de miniatura de una foto.

Convierte un registro Photo (mas un filtro opcional de tag o camara) en la
descripcion de un enlace navegable: a donde apunta y como se ve. No tiene
casos de error; es un mapeo puro.

Estructura de rutas de la galeria:
    /p/{photo_id}                       -> foto sin filtro
    /tag/{tag}/{photo_id}               -> foto dentro de un tag
    /shot-on/{make-model}/{photo_id}    -> foto dentro de una camara
"""

import re

from gallery.models.schemas import Camera, Photo, PhotoLink, ThumbnailImage

PREFIX_PHOTO = "/p"
PREFIX_TAG = "/tag"
PREFIX_CAMERA = "/shot-on"

UNTITLED = "Untitled"


def cc(*class_names: str | bool | None) -> str:
    """Une las clases CSS "verdaderas" con un espacio (ignora None/False/"")."""
    return " ".join(name for name in class_names if name)


def camera_key(camera: Camera) -> str:
    """
    Clave de URL de una camara: "make-model" en minusculas.

    Ejemplo:
        Camera(make="FUJIFILM", model="X-T5") -> "fujifilm-x-t5"
    """
    raw = f"{camera.make}-{camera.model}".lower()
    return re.sub(r"[^a-z0-9]+", "-", raw).strip("-")


def path_for_tag(tag: str) -> str:
    return f"{PREFIX_TAG}/{tag}"


def path_for_camera(camera: Camera) -> str:
    return f"{PREFIX_CAMERA}/{camera_key(camera)}"


def path_for_photo(photo: Photo, tag: str | None = None, camera: Camera | None = None) -> str:
    """El tag tiene prioridad sobre la camara si llegan los dos."""
    if tag:
        return f"{path_for_tag(tag)}/{photo.id}"
    if camera:
        return f"{path_for_camera(camera)}/{photo.id}"
    return f"{PREFIX_PHOTO}/{photo.id}"


def title_for_photo(photo: Photo) -> str:
    return photo.title or UNTITLED


def photo_small(
    photo: Photo,
    tag: str | None = None,
    camera: Camera | None = None,
    selected: bool = False,
) -> PhotoLink:
    """
    Enlace de miniatura de una foto.

    La miniatura se oscurece al presionarla (active:brightness-75) y queda
    oscurecida mientras esta seleccionada (brightness-50).
    """
    return PhotoLink(
        href=path_for_photo(photo, tag, camera),
        class_name=cc("active:brightness-75", selected and "brightness-50"),
        image=ThumbnailImage(
            src=photo.url,
            aspect_ratio=photo.aspect_ratio,
            blur_data=photo.blur_data,
            class_name="w-full",
            alt=title_for_photo(photo),
        ),
    )
