import time

import pytest

from careportal.jwt_utils import (
    JWTError,
    decode,
    encode,
    generate_refresh_token,
    issue_access_token,
    select_signing_secret,
)

CLAIMS = {"sub": "u1", "userId": "u1", "email": "a@b.c", "firstName": "A", "lastName": "B", "role": "Staff"}


def _issue(secret="s1", ttl=60):
    token, _ = issue_access_token(CLAIMS, secret=secret, ttl=ttl, issuer="CarePortal", audience="CarePortal")
    return token


def test_roundtrip_claims():
    claims = decode(_issue(), secrets_list=["s1"], issuer="CarePortal", audience="CarePortal")
    assert claims["sub"] == "u1"
    assert claims["role"] == "Staff"
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 60


def test_rotation_accepts_previous_secret():
    token = _issue(secret="old")
    assert decode(token, secrets_list=["new", "old"])["sub"] == "u1"
    with pytest.raises(JWTError, match="bad signature"):
        decode(token, secrets_list=["new"])


def test_expired_token_rejected():
    now = int(time.time())
    payload = dict(CLAIMS, jti="j", type="access", iss="CarePortal", iat=now - 600, exp=now - 300)
    token = encode(payload, secret="s1", ttl=60)
    with pytest.raises(JWTError, match="expired"):
        decode(token, secrets_list=["s1"], leeway=10)


def test_wrong_audience_and_issuer():
    token = _issue()
    with pytest.raises(JWTError, match="aud"):
        decode(token, secrets_list=["s1"], audience="Other")
    with pytest.raises(JWTError, match="iss"):
        decode(token, secrets_list=["s1"], issuer="Other")


def test_malformed_and_wrong_type():
    with pytest.raises(JWTError, match="malformed"):
        decode("abc", secrets_list=["s1"])
    now = int(time.time())
    token = encode(dict(CLAIMS, jti="j", type="refresh", iss="x", iat=now, exp=now + 60), secret="s1", ttl=60)
    with pytest.raises(JWTError, match="unknown token type"):
        decode(token, secrets_list=["s1"])


def test_revocation_hook():
    with pytest.raises(JWTError, match="revoked"):
        decode(_issue(), secrets_list=["s1"], is_revoked=lambda jti: True)


def test_refresh_tokens_are_opaque_and_unique():
    a, b = generate_refresh_token(), generate_refresh_token()
    assert a != b
    assert a.count(".") == 0
    assert len(a) == 88


def test_select_signing_secret():
    assert select_signing_secret("p", ["c"]) == "p"
    assert select_signing_secret(None, ["", "c"]) == "c"
    with pytest.raises(JWTError):
        select_signing_secret(None, [])
