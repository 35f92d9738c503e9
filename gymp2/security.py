import hashlib
import hmac
import secrets
import time
from typing import Optional, Tuple

PBKDF2_ITERATIONS = 10_000
PBKDF2_KEY_LENGTH = 64
SALT_BYTES = 16
TOKEN_BYTES = 32

# 24h fixas, sem renovação
SESSION_MAX_AGE_MS = 24 * 60 * 60 * 1000


def _derive(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha512",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    ).hex()


def hash_password(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """Gera (hash, salt) em hex. Sem salt informado, cria um aleatório de 16 bytes."""
    if not salt:
        salt = secrets.token_hex(SALT_BYTES)
    return _derive(password, salt), salt


def verify_password(password: str, password_hash: Optional[str], salt: Optional[str]) -> bool:
    if not password or not password_hash or not salt:
        return False
    try:
        candidate = _derive(password, salt)
    except (TypeError, ValueError):
        return False
    return hmac.compare_digest(candidate, str(password_hash))


def issue_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def now_millis() -> int:
    return int(time.time() * 1000)


def is_expired(issued_at_ms, now_ms: Optional[int] = None) -> bool:
    if now_ms is None:
        now_ms = now_millis()
    try:
        issued = int(issued_at_ms)
    except (TypeError, ValueError):
        return True
    return now_ms - issued > SESSION_MAX_AGE_MS
