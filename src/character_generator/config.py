"""
Configuración de la aplicación.

Los valores que dependen del despliegue se leen de variables de entorno (se
carga antes un fichero `.env` local); el resto son constantes.
"""

import os

from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image-preview")

SESSION_COOKIE: str = "session_id"
SESSION_TIMEOUT: int = int(os.getenv("SESSION_TIMEOUT", "1800"))  # seconds
CHECK_INTERVAL: int = 5  # seconds

ALLOWED_MIME_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp")
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
