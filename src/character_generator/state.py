"""
Estado de la sesión

Define los datos que el usuario edita (imagen subida y parámetros de
generación) y las variantes del estado de la petición de generación.

Responsabilidades:
- Guardar la imagen subida como una unidad (bytes en base64 + tipo MIME)
- Guardar entorno, estilo, atuendo y pose sin validarlos
- Avisar a los suscriptores tras cada cambio para que la vista se actualice
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from character_generator.options import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_OUTFIT,
    DEFAULT_POSE,
    DEFAULT_STYLE,
    OutfitMode,
)


@dataclass(frozen=True)
class InlineImage:
    """Base64 payload tagged with its MIME type.

    Used both for the photo the user uploads and for the image the model
    returns; the two fields are always replaced together.
    """

    data: str
    mime_type: str

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


# Request lifecycle variants. Exactly one is active per session.
@dataclass(frozen=True)
class Idle:
    status = "idle"


@dataclass(frozen=True)
class Loading:
    status = "loading"


@dataclass(frozen=True)
class Succeeded:
    image: InlineImage
    status = "succeeded"


@dataclass(frozen=True)
class Failed:
    message: str
    status = "failed"


RequestState = Union[Idle, Loading, Succeeded, Failed]


class InputStateHolder:
    """Current values of everything the user can edit.

    Setters are plain assignments and never fail. The holder keeps the last
    predefined outfit and the last custom text separately, so switching the
    outfit mode back and forth does not lose either value.
    """

    def __init__(self) -> None:
        self.image: Optional[InlineImage] = None
        self.environment: str = DEFAULT_ENVIRONMENT
        self.style: str = DEFAULT_STYLE
        self.outfit_mode: OutfitMode = OutfitMode.PREDEFINED
        self.predefined_outfit: str = DEFAULT_OUTFIT
        self.custom_outfit: str = ""
        self.pose: str = DEFAULT_POSE
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener()

    def set_image(self, image: InlineImage) -> None:
        self.image = image
        self._changed()

    def set_environment(self, value: str) -> None:
        self.environment = value
        self._changed()

    def set_style(self, value: str) -> None:
        self.style = value
        self._changed()

    def set_pose(self, value: str) -> None:
        self.pose = value
        self._changed()

    def set_outfit_mode(self, mode: OutfitMode | str) -> None:
        self.outfit_mode = OutfitMode(mode)
        self._changed()

    def set_outfit_value(self, value: str, mode: OutfitMode | str | None = None) -> None:
        """Store the outfit value for `mode` (defaults to the active mode)."""
        target = OutfitMode(mode) if mode is not None else self.outfit_mode
        if target == OutfitMode.CUSTOM:
            self.custom_outfit = value
        else:
            self.predefined_outfit = value
        self._changed()

    def outfit_value(self) -> str:
        if self.outfit_mode == OutfitMode.CUSTOM:
            return self.custom_outfit
        return self.predefined_outfit
