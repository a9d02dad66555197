"""
Proporciona instancias compartidas de servicios y clientes que pueden ser
inyectados en cualquier punto de la aplicación

Gestiona:
- Cliente Gemini
- Almacén de sesiones del navegador
- Expulsión de sesiones inactivas

Este módulo mantiene un solo punto para las dependencias compartidas y evita
la inicialización repetida
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, Request, Response

from character_generator.config import (
    CHECK_INTERVAL,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    SESSION_COOKIE,
    SESSION_TIMEOUT,
)
from character_generator.gemini import GeminiClient
from character_generator.sessions import Session, SessionStore

logger = logging.getLogger(__name__)


class InactivityMonitor:
    """
    Periodically drops sessions that have not been used for `timeout` seconds
    """

    def __init__(self, store: SessionStore, timeout=1800, check_interval=5):
        self.timeout = timeout
        self.check_interval = check_interval
        self.store = store

    def sweep(self) -> list[str]:
        return self.store.evict_idle(self.timeout)

    async def inactivity_monitor(self):
        while True:
            await asyncio.sleep(self.check_interval)
            self.sweep()


gemini_client = GeminiClient(GEMINI_API_KEY, GEMINI_MODEL)

session_store = SessionStore(gemini_client)

inactivity_monitor = InactivityMonitor(
    session_store,
    timeout=SESSION_TIMEOUT,
    check_interval=CHECK_INTERVAL,
)


def get_session_store() -> SessionStore:
    return session_store


def get_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Session:
    """Resolve the caller's session from its cookie, creating one if needed."""
    session = store.get_or_create(request.cookies.get(SESSION_COOKIE))
    request.state.session = session
    request.state.session_store = store
    return session


def attach_session_cookie(request: Request, response: Response) -> None:
    """
    Send the session cookie when the request created or switched sessions.

    Runs after the endpoint, so error responses carry the cookie too.
    """
    session = getattr(request.state, "session", None)
    if session is None or request.state.session_store.get(session.id) is not session:
        return
    if request.cookies.get(SESSION_COOKIE) != session.id:
        response.set_cookie(SESSION_COOKIE, session.id, httponly=True, samesite="lax")


@asynccontextmanager
async def lifespan(app):

    task = asyncio.create_task(inactivity_monitor.inactivity_monitor())
    yield

    task.cancel()
    logger.info("Inactivity monitor shutting down.")
