"""Display-safe redaction of credential secrets."""

MASK_PREFIX_LENGTH = 4
MASK_SUFFIX_LENGTH = 4


def mask_secret(secret: str) -> str:
    """Return ``secret`` with everything but a short prefix and suffix elided.

    Secrets too short to show both ends keep only the prefix, so a short
    secret is never displayed in full.
    """
    prefix = secret[:MASK_PREFIX_LENGTH]
    if len(secret) <= MASK_PREFIX_LENGTH + MASK_SUFFIX_LENGTH:
        return f"{prefix}..."
    return f"{prefix}...{secret[-MASK_SUFFIX_LENGTH:]}"
