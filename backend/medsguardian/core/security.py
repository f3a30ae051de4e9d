"""Module: security."""

import hashlib
import hmac


# Credentials are a bare SHA-256 hex digest so that rows written by the
# existing web client still verify.
def digest(plaintext: str) -> str:
    """
    Return the hex SHA-256 digest of ``plaintext``.

    An empty input maps to an empty output; callers must reject empty
    passwords before they get here.
    """
    if not plaintext:
        return ""
    return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()


def verify_password(password: str, stored: str) -> bool:
    """Check a submitted password against the stored digest."""
    if not password or not stored:
        return False
    return hmac.compare_digest(digest(password), stored)
