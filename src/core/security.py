"""Password hashing and bearer token signing for family logins."""

import base64
import hashlib
import logging
import secrets

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from src.core.config import constants, settings
from src.core.errors import AuthenticationError


logger = logging.getLogger(__name__)

_HASH_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, *, iterations: int | None = None) -> str:
    """Hash a password as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""
    rounds = iterations or settings.password_hash_iterations
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), rounds)
    encoded = base64.b64encode(digest).decode("ascii")
    return f"{_HASH_ALGORITHM}${rounds}${salt}${encoded}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash using constant-time comparison."""
    try:
        algorithm, rounds, salt, expected = password_hash.split("$", 3)
        iterations = int(rounds)
    except ValueError:
        logger.warning("password_hash_malformed")
        return False

    if algorithm != _HASH_ALGORITHM:
        logger.warning("password_hash_unknown_algorithm", extra={"algorithm": algorithm})
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return secrets.compare_digest(base64.b64encode(digest).decode("ascii"), expected)


def _serializer() -> URLSafeTimedSerializer:
    secret = settings.require_credential("secret_key", "Secret key for token signing")
    return URLSafeTimedSerializer(secret, salt=constants.TOKEN_SALT)


def issue_token(*, family_id: str, code: str) -> str:
    """Sign a bearer token identifying the family."""
    return _serializer().dumps({"family_id": family_id, "code": code})


def resolve_token(token: str) -> str:
    """Return the family id carried by a bearer token.

    Raises:
        AuthenticationError: If the token is tampered with, malformed or expired
    """
    try:
        payload = _serializer().loads(token, max_age=settings.token_max_age_seconds)
    except (BadSignature, SignatureExpired) as err:
        raise AuthenticationError("Invalid or expired token") from err

    family_id = payload.get("family_id") if isinstance(payload, dict) else None
    if not family_id:
        raise AuthenticationError("Invalid or expired token")
    return str(family_id)
