"""
Cliente para la interacción con Gemini.

Este módulo contiene toda la comunicación con el modelo de generación de
imágenes: una petición con la foto subida y el prompt, una respuesta con sus
partes de contenido.

Responsabilidades:
- Crear el cliente del SDK con la credencial configurada
- Empaquetar la imagen como dato en línea junto al texto del prompt
- Pedir que la respuesta pueda incluir imagen y texto
"""

import base64
import logging
from typing import Optional

from google import genai
from google.genai import types

from character_generator.state import InlineImage

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]


class GeminiClient:

    def __init__(self, api_key: Optional[str], model: str):
        self.model = model
        self._api_key = api_key
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        # Built on first use so the app can start without a key.
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate_content(
        self, image: InlineImage, prompt: str
    ) -> types.GenerateContentResponse:
        """Send the photo and prompt as a single user turn."""
        contents = types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(
                    data=base64.b64decode(image.data), mime_type=image.mime_type
                ),
                types.Part.from_text(text=prompt),
            ],
        )
        logger.debug("Calling %s with a %s image", self.model, image.mime_type)
        return await self._get_client().aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=RESPONSE_MODALITIES
            ),
        )
