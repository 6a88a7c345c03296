# repository/namespaces.py
from typing import Final
from util.enums import FlowType

# Relative namespaces; the token store applies settings.REDIS_PREFIX on top.
SESSIONS: Final[str] = "session"


def flow_key(flow: FlowType, token_id: str) -> str:
    return f"{flow.value}:{token_id}"


def session_key(session_id: str) -> str:
    return f"{SESSIONS}:{session_id}"
