"""Content fingerprint for pact bodies.

SHA-1 is a deduplication key here, not a security boundary.
"""

import hashlib


def content_sha(content: str | bytes) -> str:
    """Return the SHA-1 hex digest of the raw pact content.

    Text is encoded as UTF-8 before hashing, so the same JSON string always
    maps to the same digest regardless of how it arrived.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha1(content).hexdigest()
