"""JWT utilities.

HS256 access tokens with:
 - Claim enforcement: iss, aud, iat, exp, nbf with configurable leeway.
 - Future iat guard (> leeway) rejected.
 - jti revocation hook: is_revoked(jti) -> bool (default no-op).
 - Rotation: several shared secrets accepted for verification; the first signs.

Refresh tokens are opaque random strings, not JWTs.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from collections.abc import Callable
from typing import Any, Literal, TypedDict


class JWTError(Exception):
    pass


# Optional OpenTelemetry metrics (best-effort; no hard dependency)
try:  # pragma: no cover
    from opentelemetry import metrics  # type: ignore

    _jwt_meter = metrics.get_meter("careportal.security")  # type: ignore
    _jwt_rejected_counter = _jwt_meter.create_counter(
        name="security.jwt_rejected_total",
        description="Count of rejected JWTs by reason",
        unit="1",
    )
except Exception:  # pragma: no cover
    _jwt_rejected_counter = None  # type: ignore


def _inc_jwt_rejected(reason: str):  # pragma: no cover - simple helper
    if _jwt_rejected_counter:
        try:
            _jwt_rejected_counter.add(1, {"reason": reason})  # type: ignore
        except Exception:
            pass


DEFAULT_ACCESS_TTL = 3600  # 60 min
SKEW_SECS = 30
REFRESH_TOKEN_BYTES = 64

ALG_HS256 = "HS256"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + pad)


def _sign(msg: bytes, secret: str) -> str:
    sig = hmac.new(secret.encode(), msg, hashlib.sha256).digest()
    return _b64url(sig)


def _kid_for(secret: str) -> str:
    return hashlib.sha256(secret.encode()).hexdigest()[:8]


def generate_jti() -> str:
    return secrets.token_hex(16)


def generate_refresh_token() -> str:
    """Opaque refresh token: 64 random bytes, standard base64."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def encode(payload: dict[str, Any], *, secret: str, ttl: int, kid: str | None = None, alg: str = ALG_HS256) -> str:
    if alg != ALG_HS256:
        raise JWTError("unsupported signing alg (only HS256 local issuance)")
    now = int(time.time())
    header = {"alg": alg, "typ": "JWT"}
    if kid:
        header["kid"] = kid
    pl = payload.copy()
    pl.setdefault("iat", now)
    pl.setdefault("exp", now + ttl)
    header_b = _b64url(json.dumps(header, separators=(",", ":")).encode())
    payload_b = _b64url(json.dumps(pl, separators=(",", ":")).encode())
    msg = f"{header_b}.{payload_b}".encode()
    sig = _sign(msg, secret)
    return f"{header_b}.{payload_b}.{sig}"


class AccessTokenPayload(TypedDict):
    sub: str
    userId: str
    email: str
    firstName: str
    lastName: str
    role: str
    jti: str
    iat: int
    exp: int
    iss: str
    type: Literal["access"]


def decode(
    token: str,
    *,
    secrets_list: list[str],
    verify_exp: bool = True,
    issuer: str | None = None,
    audience: str | None = None,
    leeway: int = SKEW_SECS,
    max_age: int | None = None,
    is_revoked: Callable[[str], bool] | None = None,
) -> AccessTokenPayload:
    try:
        header_b, payload_b, sig = token.split(".")
    except ValueError as e:
        _inc_jwt_rejected("malformed")
        raise JWTError("malformed token") from e
    msg = f"{header_b}.{payload_b}".encode()
    try:
        header_raw = json.loads(_b64url_decode(header_b))
    except Exception as e:
        _inc_jwt_rejected("bad_header")
        raise JWTError("bad header") from e
    if not isinstance(header_raw, dict):
        _inc_jwt_rejected("bad_header")
        raise JWTError("bad header type")
    if header_raw.get("alg") != ALG_HS256:
        _inc_jwt_rejected("alg")
        raise JWTError("alg")
    # Try the secret named by kid first, then every configured secret
    candidates = [s for s in secrets_list if s]
    kid = header_raw.get("kid")
    if kid:
        candidates.sort(key=lambda s: _kid_for(s) != kid)
    if not candidates:
        _inc_jwt_rejected("bad_signature")
        raise JWTError("bad signature")
    for sec in candidates:
        if hmac.compare_digest(_sign(msg, sec), sig):
            break
    else:
        _inc_jwt_rejected("bad_signature")
        raise JWTError("bad signature")
    try:
        raw = json.loads(_b64url_decode(payload_b))
    except Exception as e:
        _inc_jwt_rejected("bad_payload")
        raise JWTError("bad payload") from e
    if not isinstance(raw, dict):
        _inc_jwt_rejected("bad_payload")
        raise JWTError("bad payload type")
    if raw.get("type") != "access":
        _inc_jwt_rejected("type")
        raise JWTError("unknown token type")

    def _req(key: str, t: type) -> Any:
        if key not in raw:
            _inc_jwt_rejected(key)
            raise JWTError(f"missing claim {key}")
        val = raw[key]
        if not isinstance(val, t):
            _inc_jwt_rejected(key)
            raise JWTError(f"bad claim type {key}")
        return val

    sub = _req("sub", str)
    role = _req("role", str)
    jti = _req("jti", str)
    iat = _req("iat", int)
    exp = _req("exp", int)
    iss_val = _req("iss", str)
    nbf_val = raw.get("nbf")
    if nbf_val is not None and not isinstance(nbf_val, int):
        _inc_jwt_rejected("nbf")
        raise JWTError("nbf")
    aud_val = raw.get("aud")
    now = int(time.time())
    if verify_exp:
        if now > exp + leeway:
            _inc_jwt_rejected("exp")
            raise JWTError("token expired")
        if nbf_val is not None and now + leeway < nbf_val:
            _inc_jwt_rejected("nbf")
            raise JWTError("token not yet valid")
        if iat > now + leeway:
            _inc_jwt_rejected("iat_future")
            raise JWTError("iat_future")
        if max_age is not None and (now - iat) > max_age + leeway:
            _inc_jwt_rejected("max_age")
            raise JWTError("max_age")
    if issuer and iss_val != issuer:
        _inc_jwt_rejected("iss")
        raise JWTError("iss")
    if audience:
        if isinstance(aud_val, str):
            ok = aud_val == audience
        elif isinstance(aud_val, list):
            ok = audience in aud_val
        else:
            ok = False
        if not ok:
            _inc_jwt_rejected("aud")
            raise JWTError("aud")
    if is_revoked and is_revoked(jti):
        _inc_jwt_rejected("revoked")
        raise JWTError("revoked")
    return AccessTokenPayload(
        sub=sub,
        userId=str(raw.get("userId") or sub),
        email=str(raw.get("email") or ""),
        firstName=str(raw.get("firstName") or ""),
        lastName=str(raw.get("lastName") or ""),
        role=role,
        jti=jti,
        iat=iat,
        exp=exp,
        iss=iss_val,
        type="access",
    )


def issue_access_token(
    claims: dict[str, Any],
    *,
    secret: str,
    ttl: int = DEFAULT_ACCESS_TTL,
    issuer: str,
    audience: str,
) -> tuple[str, str]:
    """Sign an access token carrying ``claims``; returns (token, jti)."""
    jti = generate_jti()
    now = int(time.time())
    payload: dict[str, Any] = dict(claims)
    payload.update({"jti": jti, "type": "access", "iss": issuer, "aud": audience, "iat": now, "exp": now + ttl})
    return encode(payload, secret=secret, ttl=ttl, kid=_kid_for(secret)), jti


def select_signing_secret(primary: str | None, candidates: list[str] | None) -> str:
    """Return primary secret if provided else first candidate; raise if none.

    Supports rotation via JWT_SECRETS env (first used for signing while
    still accepting previous secrets for verification).
    """
    if primary:
        return primary
    if candidates:
        for c in candidates:
            if c:
                return c
    raise JWTError("no signing secret available")


__all__ = [
    "JWTError",
    "AccessTokenPayload",
    "encode",
    "decode",
    "issue_access_token",
    "generate_jti",
    "generate_refresh_token",
    "select_signing_secret",
    "DEFAULT_ACCESS_TTL",
]
