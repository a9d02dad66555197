"""
Sesiones del navegador

Cada navegador tiene su propio registro en memoria: los parámetros que edita
y el estado de su última petición. Nada se persiste.

Responsabilidades:
- Crear, recuperar y descartar sesiones por identificador
- Construir la instantánea que se envía al navegador
- Notificar a los suscriptores (websocket) en cada cambio
- Expulsar sesiones inactivas
"""

import asyncio
import logging
import time
import uuid
from typing import Optional

from character_generator.schemas import Parameters, SessionSnapshot
from character_generator.services.generation import GenerationOrchestrator
from character_generator.state import Failed, InlineImage, InputStateHolder, Succeeded

logger = logging.getLogger(__name__)

# Order in which a partial parameter update is applied.
PARAMETER_SETTERS = (
    ("environment", "set_environment"),
    ("style", "set_style"),
    ("pose", "set_pose"),
    ("outfit_mode", "set_outfit_mode"),
)


class Session:

    def __init__(self, session_id: str, client):
        self.id = session_id
        self.holder = InputStateHolder()
        self.orchestrator = GenerationOrchestrator(
            self.holder, client, on_change=self._broadcast
        )
        self.holder.subscribe(self._broadcast)
        self.last_activity_time = time.time()
        self._subscribers: set[asyncio.Queue] = set()

    def touch(self) -> None:
        self.last_activity_time = time.time()

    def set_image(self, image: InlineImage) -> None:
        """A new upload replaces the previous one and clears a pending error."""
        self.holder.set_image(image)
        self.orchestrator.clear_error()

    def update_parameters(self, **fields) -> None:
        for name, setter in PARAMETER_SETTERS:
            if fields.get(name) is not None:
                getattr(self.holder, setter)(fields[name])
        if fields.get("predefined_outfit") is not None:
            self.holder.set_outfit_value(fields["predefined_outfit"], mode="predefined")
        if fields.get("custom_outfit") is not None:
            self.holder.set_outfit_value(fields["custom_outfit"], mode="custom")

    def snapshot(self) -> SessionSnapshot:
        holder = self.holder
        state = self.orchestrator.state
        return SessionSnapshot(
            session_id=self.id,
            status=state.status,
            error=state.message if isinstance(state, Failed) else None,
            generated_image=(
                state.image.to_data_url() if isinstance(state, Succeeded) else None
            ),
            uploaded_image=holder.image.to_data_url() if holder.image else None,
            parameters=Parameters(
                environment=holder.environment,
                style=holder.style,
                outfit_mode=holder.outfit_mode,
                predefined_outfit=holder.predefined_outfit,
                custom_outfit=holder.custom_outfit,
                pose=holder.pose,
            ),
            can_generate=holder.image is not None and not self.orchestrator.is_loading,
        )

    @property
    def has_subscribers(self) -> bool:
        return bool(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        # Holds only the latest snapshot; a slow reader skips stale ones.
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    def _broadcast(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for queue in self._subscribers:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(snapshot)


class SessionStore:

    def __init__(self, client):
        self.client = client
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def create(self) -> Session:
        session = Session(uuid.uuid4().hex, self.client)
        self._sessions[session.id] = session
        logger.info("Created session %s", session.id)
        return session

    def get_or_create(self, session_id: Optional[str]) -> Session:
        session = self.get(session_id)
        if session is None:
            session = self.create()
        session.touch()
        return session

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Discarded session %s", session_id)

    def evict_idle(self, timeout: float) -> list[str]:
        """
        Drop sessions idle longer than `timeout` seconds.

        Sessions mid-request or with an open page (websocket subscriber) are kept.
        """
        now = time.time()
        expired = [
            session.id
            for session in self._sessions.values()
            if now - session.last_activity_time > timeout
            and not session.orchestrator.is_loading
            and not session.has_subscribers
        ]
        for session_id in expired:
            del self._sessions[session_id]
            logger.info("Evicted idle session %s", session_id)
        return expired
