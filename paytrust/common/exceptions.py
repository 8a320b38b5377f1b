"""
Custom exceptions for PayTrust.

Every error carries a short machine-readable ``code`` and an optional
``extra`` payload holding the offending inputs for diagnostics.
"""

from typing import Any, Optional


# Error codes
UNKNOWN_ERROR = "UNKNOWN_ERROR"
CONTAINER_ERROR = "CONTAINER_ERROR"
SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
INVALID_DIRECTION = "INVALID_DIRECTION"
ALIPAY_CONFIG_ERROR = "ALIPAY_CONFIG_ERROR"
WECHAT_CONFIG_ERROR = "WECHAT_CONFIG_ERROR"
UNIPAY_CONFIG_ERROR = "UNIPAY_CONFIG_ERROR"
INVALID_RESPONSE_SIGN = "INVALID_RESPONSE_SIGN"
INVALID_CIPHERTEXT_PARAMS = "INVALID_CIPHERTEXT_PARAMS"
INVALID_REQUEST_ENCRYPTED_METHOD = "INVALID_REQUEST_ENCRYPTED_METHOD"
INVALID_REQUEST_ENCRYPTED_DATA = "INVALID_REQUEST_ENCRYPTED_DATA"
DECRYPT_RESOURCE_FAILED = "DECRYPT_RESOURCE_FAILED"


class PayTrustException(Exception):
    """Base exception for PayTrust errors."""

    default_code = UNKNOWN_ERROR

    def __init__(self, message: str = "", code: Optional[str] = None, extra: Any = None):
        self.code = code or self.default_code
        self.message = message or self.code
        self.extra = extra
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class InvalidConfigError(PayTrustException):
    """A required credential, certificate or secret is missing or malformed."""
    pass


class InvalidParamsError(PayTrustException):
    """Input passed to a core call has the wrong shape."""
    pass


class InvalidResponseError(PayTrustException):
    """Received data failed a cryptographic or structural check."""

    default_code = INVALID_RESPONSE_SIGN


class ContainerError(PayTrustException):
    """A service could not be built by the container."""

    default_code = CONTAINER_ERROR


class ServiceNotFoundError(PayTrustException):
    """No service is registered under the requested name."""

    default_code = SERVICE_NOT_FOUND
