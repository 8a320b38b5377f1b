"""
Wire models using Pydantic.

Shapes of the data exchanged with providers: encrypted resources, signed
webhook/response messages and Wechat's platform-certificate listing.
"""

from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


AEAD_AES_256_GCM = "AEAD_AES_256_GCM"
CERTIFICATE_ASSOCIATED_DATA = "certificate"

WECHAT_SERIAL_HEADER = "Wechatpay-Serial"
WECHAT_TIMESTAMP_HEADER = "Wechatpay-Timestamp"
WECHAT_NONCE_HEADER = "Wechatpay-Nonce"
WECHAT_SIGNATURE_HEADER = "Wechatpay-Signature"


class EncryptedResource(BaseModel):
    """AEAD-encrypted resource as delivered by Wechat (webhooks, certificates)."""
    model_config = ConfigDict(extra="allow")

    algorithm: str = Field(default="", description="Encryption algorithm tag")
    ciphertext: str = Field(default="", description="Base64 ciphertext with 16-byte tag appended")
    nonce: str = Field(default="", description="GCM nonce")
    associated_data: str = Field(default="", description="GCM associated data")

    @field_validator("algorithm", "ciphertext", "nonce", "associated_data", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value


class CertificateItem(BaseModel):
    """One entry of the Wechat platform-certificate listing."""
    model_config = ConfigDict(extra="allow")

    serial_no: str
    effective_time: Optional[str] = None
    expire_time: Optional[str] = None
    encrypt_certificate: EncryptedResource


class CertificateListing(BaseModel):
    """Response body of the certificate-listing call."""
    model_config = ConfigDict(extra="allow")

    data: List[CertificateItem] = Field(default_factory=list)


class SignedMessage(BaseModel):
    """
    An HTTP message carrying a Wechat v3 signature in its headers.

    ``inbound`` marks a server request (webhook delivered to us) as opposed
    to a response to one of our own calls.
    """
    headers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    body: str = ""
    host: Optional[str] = None
    inbound: bool = False

    def header(self, name: str) -> str:
        """Case-insensitive header lookup; repeated values are comma-joined."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                if isinstance(value, list):
                    return ", ".join(value)
                return value
        return ""

    def signing_string(self) -> str:
        """Build ``timestamp\\nnonce\\nbody\\n``."""
        return (
            f"{self.header(WECHAT_TIMESTAMP_HEADER)}\n"
            f"{self.header(WECHAT_NONCE_HEADER)}\n"
            f"{self.body}\n"
        )


class SignedEnvelope(BaseModel):
    """Payload tied to the signature produced for it."""
    payload: str
    signature: str
    algorithm: str
