import secrets
from dataclasses import dataclass
import jwt
from ..core.config import settings

GUEST_SESSION_HEADER = "X-Guest-Session-Id"

_jwks_client: jwt.PyJWKClient | None = None


@dataclass(frozen=True)
class IdentityClaims:
    subject: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None


def _signing_key(token: str):
    # provider keys (e.g. Firebase) when a JWKS url is configured, shared secret otherwise
    global _jwks_client
    if settings.IDENTITY_JWKS_URL:
        if _jwks_client is None:
            _jwks_client = jwt.PyJWKClient(settings.IDENTITY_JWKS_URL)
        return _jwks_client.get_signing_key_from_jwt(token).key
    return settings.IDENTITY_SECRET


def verify_id_token(token: str) -> IdentityClaims:
    """Verify an identity token issued by the external provider.

    Raises ``jwt.PyJWTError`` for anything that does not verify.
    """
    payload = jwt.decode(
        token,
        _signing_key(token),
        algorithms=settings.IDENTITY_ALGORITHMS,
        audience=settings.IDENTITY_AUDIENCE,
        issuer=settings.IDENTITY_ISSUER,
    )
    subject = payload.get("sub") or payload.get("user_id") or payload.get("uid")
    if not subject:
        raise jwt.InvalidTokenError("Token has no subject")
    return IdentityClaims(
        subject=str(subject),
        email=payload.get("email"),
        name=payload.get("name"),
        picture=payload.get("picture"),
    )


def new_guest_session_id() -> str:
    return secrets.token_hex(16)


def new_share_token() -> str:
    return secrets.token_urlsafe(18)
