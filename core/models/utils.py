"""ID generation utility."""

import secrets


def gen_id(prefix: str = "") -> str:
    """Generate IDs such as msg_xxx, call_xxx, sch_xxx."""
    return f"{prefix}{secrets.token_urlsafe(12)}"
