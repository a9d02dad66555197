"""
Servicios de lectura de imágenes

Frontera de entrada de ficheros: recibe la imagen elegida por el usuario y la
convierte en el dato en línea (base64 + tipo MIME) que se envía al modelo y se
muestra como vista previa.

Características:
- Validación del tipo MIME y del tamaño de la subida
- Comprobación con Pillow de que los bytes son una imagen decodificable
- Conversión desde data URLs como las que produce un FileReader del navegador
"""

import base64
import binascii
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from character_generator.config import ALLOWED_MIME_TYPES, MAX_UPLOAD_BYTES
from character_generator.state import InlineImage

logger = logging.getLogger(__name__)

READ_ERROR_MESSAGE = "Failed to read the file."


class ImageReadError(Exception):
    """The selected file could not be decoded as an image."""


class UnsupportedImageTypeError(Exception):
    pass


class ImageTooLargeError(Exception):
    pass


def check_mime_type(mime_type: str) -> None:
    if mime_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedImageTypeError(
            f"Unsupported image type {mime_type!r}; expected one of "
            f"{', '.join(ALLOWED_MIME_TYPES)}"
        )


def verify_image_bytes(img_bytes: bytes) -> None:
    """Raise `ImageReadError` unless Pillow can identify and verify the bytes."""
    if not img_bytes:
        raise ImageReadError(READ_ERROR_MESSAGE)
    try:
        with Image.open(BytesIO(img_bytes)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageReadError(READ_ERROR_MESSAGE) from e


def read_uploaded_image(img_bytes: bytes, mime_type: str) -> InlineImage:
    check_mime_type(mime_type)
    if len(img_bytes) > MAX_UPLOAD_BYTES:
        raise ImageTooLargeError(
            f"Image is {len(img_bytes)} bytes; the limit is {MAX_UPLOAD_BYTES}"
        )
    verify_image_bytes(img_bytes)
    logger.info("Accepted %s upload (%d bytes)", mime_type, len(img_bytes))
    return InlineImage(
        data=base64.b64encode(img_bytes).decode("ascii"), mime_type=mime_type
    )


def split_data_url(data_url: str) -> tuple[str, str]:
    """
    Split `data:{mime};base64,{payload}` into (mime, payload).

    Whitespace inside the payload is dropped and missing padding restored.
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ImageReadError(READ_ERROR_MESSAGE)
    mime_type = header[len("data:") : -len(";base64")]
    payload = "".join(payload.split())
    padding = len(payload) % 4
    if padding:
        payload += "=" * (4 - padding)
    return mime_type, payload


def read_data_url(data_url: str) -> InlineImage:
    mime_type, payload = split_data_url(data_url)
    try:
        img_bytes = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ImageReadError(READ_ERROR_MESSAGE) from e
    return read_uploaded_image(img_bytes, mime_type)
