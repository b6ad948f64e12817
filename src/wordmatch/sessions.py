import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional

from .config import settings
from .game import GameController
from .provider import WordPairProvider
from .vocabulary import VocabularyManager

logger = logging.getLogger("wordmatch")


class GameSession:
    """A browser session: one game controller plus bookkeeping for expiry."""

    def __init__(self, session_id: str, controller: GameController):
        self.session_id = session_id
        self.controller = controller
        self.created_at = datetime.now()
        self.last_seen = self.created_at

    def is_expired(self, now: datetime) -> bool:
        return now - self.last_seen > timedelta(
            minutes=settings.SESSION_TIMEOUT_MINUTES
        )


sessions: Dict[str, GameSession] = {}


def sweep_expired(now: Optional[datetime] = None) -> int:
    """Drops every idle session, cancelling its timers. Returns how many went."""
    now = now or datetime.now()
    expired = [sid for sid, session in list(sessions.items()) if session.is_expired(now)]
    for session_id in expired:
        logger.info(f"Session expired: {session_id}")
        drop_session(session_id)
    return len(expired)


def create_session(
    provider: WordPairProvider, vocabulary: VocabularyManager
) -> GameSession:
    sweep_expired()
    new_id = str(uuid.uuid4())
    session = GameSession(new_id, GameController(provider, vocabulary))
    sessions[new_id] = session
    logger.info(f"New session: {new_id}")
    return session


def get_active_session(session_id: Optional[str]) -> Optional[GameSession]:
    now = datetime.now()
    sweep_expired(now)
    if not session_id or session_id not in sessions:
        return None
    session = sessions[session_id]
    session.last_seen = now
    return session


def drop_session(session_id: Optional[str]):
    session = sessions.pop(session_id, None) if session_id else None
    if session is not None:
        session.controller.shutdown()


def shutdown_all():
    for session_id in list(sessions):
        drop_session(session_id)
