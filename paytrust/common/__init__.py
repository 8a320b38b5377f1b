"""
Common utilities, wire models and exceptions for PayTrust.
"""

from .protocol import *
from .utils import sha256_hex, md5_hex, b64encode, b64decode
from .exceptions import *

__all__ = [
    'sha256_hex',
    'md5_hex',
    'b64encode',
    'b64decode',
]
