import secrets
import string

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from thesync.auth.constants import (
    GENERATED_PASSWORD_LENGTH,
    IDENTIFIER_LENGTH,
    OTP_LENGTH,
    PASSWORD_SYMBOLS,
)

context = CryptContext(schemes=["argon2"], deprecated="auto")

_rng = secrets.SystemRandom()


def hash_password(password: str) -> str:
    return context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return context.verify(plain, hashed)
    except (UnknownHashError, ValueError):
        return False


def _generate(length: int, pools: list[str]) -> str:
    """Random string of ``length`` drawing at least one character from every pool."""
    if length < len(pools):
        raise ValueError(f"length must be at least {len(pools)}")
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(length - len(pools))]
    _rng.shuffle(chars)
    return "".join(chars)


def generate_identifier() -> str:
    """Nonce embedded in a token and mirrored in the session cache."""
    return _generate(
        IDENTIFIER_LENGTH,
        [string.ascii_uppercase, string.ascii_lowercase, string.digits],
    )


def generate_strong_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    return _generate(
        length,
        [string.ascii_uppercase, string.ascii_lowercase, string.digits, PASSWORD_SYMBOLS],
    )


def generate_otp() -> str:
    return "".join(secrets.choice(string.digits) for _ in range(OTP_LENGTH))
