# ABOUTME: Unit tests for the anti-forgery token manager.
# ABOUTME: Validates binding to session and action, tick expiry, and malformed input.

import pytest

from bookstall.core.nonces import DEFAULT_LIFETIME, NonceManager


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestNonceManager:
    """Tests for NonceManager."""

    def test_round_trip(self) -> None:
        nonces = NonceManager("secret")
        token = nonces.create("upload_epub_nonce", "s1")
        assert len(token) == 10
        assert nonces.verify(token, "upload_epub_nonce", "s1")

    def test_other_session_rejected(self) -> None:
        nonces = NonceManager("secret")
        token = nonces.create("upload_epub_nonce", "s1")
        assert not nonces.verify(token, "upload_epub_nonce", "s2")

    def test_other_action_rejected(self) -> None:
        nonces = NonceManager("secret")
        token = nonces.create("upload_epub_nonce", "s1")
        assert not nonces.verify(token, "delete_product", "s1")

    def test_other_secret_rejected(self) -> None:
        token = NonceManager("secret").create("upload_epub_nonce", "s1")
        assert not NonceManager("other").verify(token, "upload_epub_nonce", "s1")

    @pytest.mark.parametrize("token", [None, "", "0000000000", "ünïcödé"])
    def test_bad_tokens_rejected(self, token: str | None) -> None:
        assert not NonceManager("secret").verify(token, "upload_epub_nonce", "s1")

    def test_valid_during_next_tick(self) -> None:
        clock = FakeClock()
        nonces = NonceManager("secret", clock=clock)
        token = nonces.create("a", "s1")
        clock.now += DEFAULT_LIFETIME / 2
        assert nonces.verify(token, "a", "s1")

    def test_expires_after_two_ticks(self) -> None:
        clock = FakeClock()
        nonces = NonceManager("secret", clock=clock)
        token = nonces.create("a", "s1")
        clock.now += DEFAULT_LIFETIME + 1
        assert not nonces.verify(token, "a", "s1")

    def test_empty_secret_refused(self) -> None:
        with pytest.raises(ValueError):
            NonceManager("")
