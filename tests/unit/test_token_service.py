"""
Unit tests for bearer token issuing and verification.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from src.api.error_handlers import APIError
from src.api.security import Principal
from src.api.services.token_service import TokenService

SECRET = "unit-test-secret-that-is-long-enough-for-hs512-signing-too-0123456789"
ALICE = Principal(id=42, username="alice")


def _service(**overrides: object) -> TokenService:
    values: dict[str, object] = {"secret": SECRET, "algorithm": "HS256", "ttl_seconds": 3600}
    values.update(overrides)
    return TokenService(**values)  # type: ignore[arg-type]


def _claims(**overrides: object) -> dict[str, object]:
    now = datetime.now(tz=UTC)
    claims: dict[str, object] = {
        "sub": "42",
        "username": "alice",
        "iat": now,
        "exp": now + timedelta(hours=1),
    }
    claims.update(overrides)
    return claims


def _assert_unauthorized(service: TokenService, token: str, message: str = "invalid") -> None:
    with pytest.raises(APIError) as exc_info:
        service.verify(token)
    assert exc_info.value.status_code == 401
    assert exc_info.value.error_code == "UNAUTHORIZED"
    assert message in exc_info.value.message


def test_issue_then_verify_returns_principal() -> None:
    service = _service()
    token = service.issue(ALICE)

    assert service.verify(token) == ALICE
    claims = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert claims["sub"] == "42"
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_is_rejected() -> None:
    past = datetime.now(tz=UTC) - timedelta(days=2)
    issuer = _service(clock=lambda: past)
    token = issuer.issue(ALICE)

    _assert_unauthorized(_service(), token, message="expired")


def test_token_signed_with_other_secret_is_rejected() -> None:
    forged = jwt.encode(_claims(), "some-other-secret-that-is-also-long-enough", algorithm="HS256")
    _assert_unauthorized(_service(), forged)


def test_token_signed_with_other_algorithm_is_rejected() -> None:
    other_alg = jwt.encode(_claims(), SECRET, algorithm="HS512")
    _assert_unauthorized(_service(algorithm="HS256"), other_alg)


def test_unsigned_token_is_rejected() -> None:
    unsigned = jwt.encode(_claims(), None, algorithm="none")
    _assert_unauthorized(_service(), unsigned)


@pytest.mark.parametrize("subject", ["0", "-1", "abc", "12a", "01"])
def test_malformed_subject_is_rejected(subject: str) -> None:
    token = jwt.encode(_claims(sub=subject), SECRET, algorithm="HS256")
    _assert_unauthorized(_service(), token, message="invalid user ID")


def test_missing_username_is_rejected() -> None:
    claims = _claims()
    claims.pop("username")
    token = jwt.encode(claims, SECRET, algorithm="HS256")
    _assert_unauthorized(_service(), token, message="invalid claims")


def test_missing_expiry_is_rejected() -> None:
    claims = _claims()
    claims.pop("exp")
    token = jwt.encode(claims, SECRET, algorithm="HS256")
    _assert_unauthorized(_service(), token)


def test_garbage_token_is_rejected() -> None:
    _assert_unauthorized(_service(), "not-a-jwt")


def test_blank_secret_fails_fast() -> None:
    with pytest.raises(RuntimeError, match="secret"):
        TokenService(secret="")
