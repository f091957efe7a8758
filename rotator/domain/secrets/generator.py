"""Password generation for remote CLI accounts."""
import secrets

from rotator.domain.errors import ValidationFailure
from rotator.domain.models import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH

# Excludes :()";'<>,`\*&| which the device CLI rejects or which would need
# escaping inside the SEMP request.
PASSWORD_CHARSET = (
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    "!@#$%^-_=+.~"
)


def generate_password(length: int) -> str:
    """Return ``length`` characters drawn uniformly from PASSWORD_CHARSET."""
    if isinstance(length, bool) or not isinstance(length, int):
        raise ValidationFailure(f"password length must be an integer, got {length!r}")
    if length < MIN_PASSWORD_LENGTH or length > MAX_PASSWORD_LENGTH:
        raise ValidationFailure(
            f"password length must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH}, got {length}"
        )
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))
