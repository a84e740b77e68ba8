import enum

# ── Cache lifetimes ───────────────────────────────────────────────────────────
SESSION_TTL_SECONDS: int = 7 * 24 * 60 * 60  # 7 days, reset on every login/refresh
OTP_TTL_SECONDS: int = 10 * 60               # 10 minutes

# ── Cache key prefixes ────────────────────────────────────────────────────────
# Admins and users share one session namespace: principal ids are UUIDs drawn
# from separate tables, so keys cannot collide.
SESSION_CACHE_PREFIX: str = "cache:auth"
OTP_CACHE_PREFIX: str = "cache:otp"

# ── Generated secrets ─────────────────────────────────────────────────────────
IDENTIFIER_LENGTH: int = 16
OTP_LENGTH: int = 8
GENERATED_PASSWORD_LENGTH: int = 12

# ── Password policy ───────────────────────────────────────────────────────────
PASSWORD_MIN_LENGTH: int = 12
PASSWORD_SYMBOLS: str = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"


class LoginFailure(str, enum.Enum):
    """Why a login was refused.  Logged and kept for tests, never sent to clients."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    WRONG_PASSWORD = "wrong_password"
    ROLE_NOT_FOUND = "role_not_found"


class RefreshFailure(str, enum.Enum):
    """Why a refresh was refused.  Logged and kept for tests, never sent to clients."""

    INVALID_TOKEN = "invalid_token"
    WRONG_VARIANT = "wrong_variant"
    EXPIRED = "expired"
    NO_SESSION = "no_session"
    IDENTIFIER_MISMATCH = "identifier_mismatch"
    PRINCIPAL_GONE = "principal_gone"
    ROLE_NOT_FOUND = "role_not_found"
