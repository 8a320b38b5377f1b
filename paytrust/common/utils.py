"""
Utility functions for PayTrust.
"""

import base64
import hashlib


def sha256_hex(data: bytes) -> str:
    """
    Compute SHA-256 hash and return as hex string.

    Args:
        data: Data to hash

    Returns:
        Hex-encoded SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def md5_hex(data: bytes) -> str:
    """
    Compute MD5 hash and return as lowercase hex string.

    Args:
        data: Data to hash

    Returns:
        Hex-encoded MD5 hash
    """
    return hashlib.md5(data).hexdigest()


def b64encode(data: bytes) -> str:
    """
    Base64 encode bytes to string.

    Args:
        data: Bytes to encode

    Returns:
        Base64-encoded string
    """
    return base64.b64encode(data).decode('ascii')


def b64decode(data: str) -> bytes:
    """
    Base64 decode string to bytes.

    Args:
        data: Base64-encoded string

    Returns:
        Decoded bytes
    """
    return base64.b64decode(data)


def to_bytes(data) -> bytes:
    """Encode ``str`` as UTF-8; pass ``bytes`` through."""
    if isinstance(data, bytes):
        return data
    return str(data).encode('utf-8')


def wrap64(body: str) -> str:
    """Hard-wrap ``body`` at 64 columns."""
    return "\n".join(body[i:i + 64] for i in range(0, len(body), 64))


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First bytes object
        b: Second bytes object

    Returns:
        True if equal, False otherwise
    """
    if len(a) != len(b):
        return False

    result = 0
    for x, y in zip(a, b):
        result |= x ^ y

    return result == 0
