"""Job identifier generation."""

import secrets

# 10 random bytes -> 20 lowercase hex characters
JOB_ID_BYTES = 10


def new_job_id() -> str:
    """Return a new cryptographically random job identifier."""
    return secrets.token_hex(JOB_ID_BYTES)
