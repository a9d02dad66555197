"""
Modelos de datos y validación

Define los esquemas Pydantic utilizados para:
- Validar los datos de entrada en los endpoints
- Dar forma a la instantánea de sesión que consume el navegador
- Documentar automáticamente la API con OpenAPI
"""

from typing import Literal, Optional

from pydantic import BaseModel

from character_generator.options import OutfitMode


class ParametersUpdate(BaseModel):
    environment: Optional[str] = None
    style: Optional[str] = None
    pose: Optional[str] = None
    outfit_mode: Optional[OutfitMode] = None
    predefined_outfit: Optional[str] = None
    custom_outfit: Optional[str] = None


class DataUrlUpload(BaseModel):
    data_url: str


class Parameters(BaseModel):
    environment: str
    style: str
    outfit_mode: OutfitMode
    predefined_outfit: str
    custom_outfit: str
    pose: str


class SessionSnapshot(BaseModel):
    session_id: str
    status: Literal["idle", "loading", "succeeded", "failed"]
    error: Optional[str] = None
    generated_image: Optional[str] = None
    uploaded_image: Optional[str] = None
    parameters: Parameters
    can_generate: bool


class Option(BaseModel):
    value: str
    label: str


class OptionsResponse(BaseModel):
    environments: list[Option]
    styles: list[Option]
    outfits: list[Option]
    outfit_modes: list[OutfitMode]
