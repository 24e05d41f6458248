# ABOUTME: Anti-forgery tokens bound to an operator session and a form action.
# ABOUTME: HMAC-SHA256 over a time tick, valid for the current and the previous tick.

import hashlib
import hmac
import math
import time
from collections.abc import Callable

DEFAULT_LIFETIME = 24 * 60 * 60  # seconds

_TOKEN_LENGTH = 10


class NonceManager:
    """Creates and verifies short-lived form tokens.

    Time is split into ticks of half the lifetime. A token minted in one
    tick still verifies during the next, so it lives between half and one
    full lifetime.
    """

    def __init__(
        self,
        secret: str | bytes,
        *,
        lifetime: int = DEFAULT_LIFETIME,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("nonce secret must not be empty")
        self._secret = secret.encode() if isinstance(secret, str) else secret
        self._lifetime = lifetime
        self._clock = clock

    def _tick(self) -> int:
        return math.ceil(self._clock() / (self._lifetime / 2))

    def _token(self, tick: int, action: str, session_id: str) -> str:
        message = f"{tick}|{action}|{session_id}".encode()
        digest = hmac.new(self._secret, message, hashlib.sha256).hexdigest()
        return digest[-12 : -12 + _TOKEN_LENGTH]

    def create(self, action: str, session_id: str) -> str:
        """Mint a token for an action within a session."""
        return self._token(self._tick(), action, session_id)

    def verify(self, token: str | None, action: str, session_id: str) -> bool:
        """Check a submitted token against the current and previous tick."""
        if not token:
            return False
        submitted = token.encode()
        tick = self._tick()
        return any(
            hmac.compare_digest(submitted, self._token(t, action, session_id).encode())
            for t in (tick, tick - 1)
        )
