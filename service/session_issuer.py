# service/session_issuer.py
import logging
from typing import Optional
from config.settings import settings
from model.api import SessionGrant
from repository.namespaces import session_key
from repository.token_store import TokenStore
from util.functions import new_token_id, short_id

logger = logging.getLogger(__name__)


class SessionIssuer:
    """
    Mints long-lived sessions bound to a consumed credential.

    A plain write is enough here: the session id is fresh per call, so
    there is nothing to race against.
    """

    def __init__(
        self, store: TokenStore, ttl_seconds: int = settings.SESSION_TTL_SECONDS
    ) -> None:
        self._store = store
        self._ttl = int(ttl_seconds)

    async def mint(self, credential: str) -> SessionGrant:
        session_id = new_token_id()
        await self._store.set_with_ttl(session_key(session_id), credential, self._ttl)
        logger.info("session.mint.ok session=%s ttl=%d", short_id(session_id), self._ttl)
        return SessionGrant(sessionId=session_id, expiresIn=self._ttl)

    async def resolve(self, session_id: str) -> Optional[str]:
        if not session_id:
            return None
        return await self._store.get(session_key(session_id))

    async def discard(self, session_id: str) -> None:
        """Drop a session minted for an exchange that lost its race."""
        await self._store.delete(session_key(session_id))
