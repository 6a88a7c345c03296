# util/functions.py
import re
from uuid import uuid4
from util.constants import (
    CONSUMED_SENTINEL,
    MAX_CREDENTIAL_LENGTH,
    MAX_TOKEN_ID_LENGTH,
    PENDING_SENTINEL,
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def new_token_id() -> str:
    return str(uuid4())


def short_id(token_id: str) -> str:
    """Log-safe prefix of an opaque id."""
    return (token_id or "")[:8]


def is_valid_email(email: str | None) -> bool:
    return bool(email) and _EMAIL_RE.match(email.strip()) is not None


def is_valid_token_id(token_id: str | None) -> bool:
    """
    - Non-blank, bounded, and free of ':' so it cannot reach into
      another namespace when joined into a store key.
    """
    if not token_id or not token_id.strip():
        return False
    return len(token_id) <= MAX_TOKEN_ID_LENGTH and ":" not in token_id


def is_valid_credential(credential: str | None) -> bool:
    if not credential or not credential.strip():
        return False
    if len(credential) > MAX_CREDENTIAL_LENGTH:
        return False
    # A credential equal to a sentinel would be read back as Pending or consumed.
    return credential not in (PENDING_SENTINEL, CONSUMED_SENTINEL)
