"""
Servicios de generación de imágenes

Implementa el ciclo de vida de una petición de generación, actuando como capa
intermedia entre los endpoints de la API y el cliente de Gemini.

Responsabilidades:
- Validar que hay una imagen antes de llamar al modelo
- Construir el prompt a partir de los parámetros de la sesión
- Garantizar que solo hay una petición en curso por sesión
- Interpretar la respuesta y dejar el resultado como éxito o error
"""

import asyncio
import base64
import logging
from typing import Any, Callable, Optional

from character_generator.prompts import build_prompt
from character_generator.services.images import READ_ERROR_MESSAGE
from character_generator.state import (
    Failed,
    Idle,
    InlineImage,
    InputStateHolder,
    Loading,
    RequestState,
    Succeeded,
)

logger = logging.getLogger(__name__)

IMAGE_REQUIRED_MESSAGE = "Please upload a character image first."
NO_IMAGE_MESSAGE = (
    "The AI didn't return an image. Please try a different prompt or image."
)
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class ImageRequiredError(Exception):
    """Generation was triggered before any image was uploaded."""


def first_inline_image(response: Any) -> Optional[InlineImage]:
    """
    Return the first part of the first candidate that carries inline data.

    Later image parts are ignored.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        inline_data = part.inline_data
        if inline_data is None or not inline_data.data:
            continue
        data = inline_data.data
        if isinstance(data, bytes):
            data = base64.b64encode(data).decode("ascii")
        return InlineImage(data=data, mime_type=inline_data.mime_type or "image/png")
    return None


def error_message(error: BaseException) -> str:
    """Prefer the error's own `message` field, then its text, then a fixed fallback."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message.strip():
        return message
    return str(error) or GENERIC_ERROR_MESSAGE


class GenerationOrchestrator:
    """Owns the request state of one session and the single call to the model."""

    def __init__(
        self,
        holder: InputStateHolder,
        client,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.holder = holder
        self.client = client
        self.state: RequestState = Idle()
        self._on_change = on_change

    def _transition(self, state: RequestState) -> None:
        self.state = state
        if self._on_change is not None:
            self._on_change()

    @property
    def is_loading(self) -> bool:
        return isinstance(self.state, Loading)

    def clear_error(self) -> None:
        if isinstance(self.state, Failed):
            self._transition(Idle())

    def record_read_failure(self, message: str = READ_ERROR_MESSAGE) -> bool:
        """Surface an unreadable upload. Returns False while a request is in flight."""
        if self.is_loading:
            return False
        self._transition(Failed(message))
        return True

    def build_prompt(self) -> str:
        holder = self.holder
        return build_prompt(
            environment=holder.environment,
            style=holder.style,
            outfit_mode=holder.outfit_mode,
            predefined_outfit=holder.predefined_outfit,
            custom_outfit=holder.custom_outfit,
            pose=holder.pose,
        )

    async def generate(self) -> RequestState:
        if self.is_loading:
            logger.info("Generation already in progress; trigger ignored")
            return self.state

        image = self.holder.image
        if image is None:
            raise ImageRequiredError(IMAGE_REQUIRED_MESSAGE)

        prompt = self.build_prompt()
        logger.info(
            "Starting generation (style=%s, environment=%s)",
            self.holder.style,
            self.holder.environment,
        )
        # Clears any previous result or error before the call.
        self._transition(Loading())

        try:
            response = await self.client.generate_content(image, prompt)
        except asyncio.CancelledError:
            self._transition(Failed(GENERIC_ERROR_MESSAGE))
            raise
        except Exception as e:
            logger.exception("Error during Gemini generation: %s", e)
            self._transition(Failed(error_message(e)))
            return self.state

        result = first_inline_image(response)
        if result is None:
            logger.warning("Gemini response contained no inline image")
            self._transition(Failed(NO_IMAGE_MESSAGE))
        else:
            self._transition(Succeeded(result))
        return self.state
