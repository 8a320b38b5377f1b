"""
Cryptographic primitives for PayTrust.

This package provides:
- Key and certificate material loading (paths, inline PEM, bare base64)
- Per-provider signers (Alipay, Unipay, Wechat v3, legacy Wechat v2)
- AEAD_AES_256_GCM decryption of Wechat resources
"""

from .aead import decrypt_aes_256_gcm, decrypt_wechat_resource
from .keys import get_private_cert, get_public_cert, load_private_key, load_public_key
from .sign import (
    AlipaySigner,
    Provider,
    Signer,
    UnipaySigner,
    WechatSigner,
    WechatV2Signer,
    get_signer,
)

__all__ = [
    'decrypt_aes_256_gcm',
    'decrypt_wechat_resource',
    'get_private_cert',
    'get_public_cert',
    'load_private_key',
    'load_public_key',
    'AlipaySigner',
    'Provider',
    'Signer',
    'UnipaySigner',
    'WechatSigner',
    'WechatV2Signer',
    'get_signer',
]
