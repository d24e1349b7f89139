import time

import pytest

from paycor_sync.services.token_cipher import TokenCipherService


def test_session_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    session_id = "session-abc"

    sealed = cipher.encrypt(session_id)
    assert sealed != session_id

    assert cipher.decrypt(sealed) == session_id


def test_session_cipher_rejects_bad_ciphertext() -> None:
    cipher = TokenCipherService(secret="another-secret")

    with pytest.raises(ValueError):
        cipher.decrypt("not-valid")


def test_session_cipher_rejects_value_sealed_with_other_secret() -> None:
    sealed = TokenCipherService(secret="first").encrypt("session-abc")

    with pytest.raises(ValueError):
        TokenCipherService(secret="second").decrypt(sealed)


def test_session_cipher_enforces_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    cipher = TokenCipherService(secret="ttl-secret")
    sealed = cipher.encrypt("session-abc")

    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() + 120)

    with pytest.raises(ValueError):
        cipher.decrypt(sealed, ttl=60)


def test_session_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")
