"""
AEAD_AES_256_GCM Resource Decryption

Wechat encrypts webhook resources and platform certificates with AES-256-GCM
under the merchant's 32-byte APIv3 key. The base64 ciphertext carries the
16-byte authentication tag appended at the end.
"""

import binascii
import json
import logging
from typing import Any, Dict, Mapping, Optional, Union
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import ValidationError

from paytrust.common.exceptions import (
    DECRYPT_RESOURCE_FAILED,
    INVALID_CIPHERTEXT_PARAMS,
    INVALID_REQUEST_ENCRYPTED_DATA,
    INVALID_REQUEST_ENCRYPTED_METHOD,
    WECHAT_CONFIG_ERROR,
    InvalidConfigError,
    InvalidParamsError,
    InvalidResponseError,
)
from paytrust.common.protocol import AEAD_AES_256_GCM, CERTIFICATE_ASSOCIATED_DATA, EncryptedResource
from paytrust.common.utils import b64decode, to_bytes

logger = logging.getLogger(__name__)

AUTH_TAG_LENGTH_BYTE = 16
MCH_SECRET_KEY_LENGTH_BYTE = 32


def decrypt_aes_256_gcm(
    ciphertext: bytes,
    secret: bytes,
    nonce: str,
    associated_data: str
) -> Union[bytes, Dict[str, Any]]:
    """
    Decrypt an AES-256-GCM payload.

    Args:
        ciphertext: Raw ciphertext with the 16-byte tag appended
        secret: 32-byte key
        nonce: GCM nonce
        associated_data: GCM associated data

    Returns:
        Raw bytes when ``associated_data`` is ``"certificate"``, otherwise the
        plaintext decoded as a JSON object

    Raises:
        InvalidParamsError: If the nonce is unusable
        InvalidResponseError: If the tag does not match or the plaintext is
            not a JSON object
    """
    try:
        decrypted = AESGCM(secret).decrypt(
            to_bytes(nonce),
            ciphertext,
            to_bytes(associated_data),
        )
    except InvalidTag as e:
        raise InvalidResponseError("Decrypt Wechat Resource Failed", DECRYPT_RESOURCE_FAILED) from e
    except ValueError as e:
        raise InvalidParamsError(f"Invalid AES-256-GCM parameters: {e}", INVALID_CIPHERTEXT_PARAMS) from e

    if associated_data == CERTIFICATE_ASSOCIATED_DATA:
        return decrypted

    try:
        data = json.loads(decrypted)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidResponseError("Decrypted Wechat Resource Is Not JSON", INVALID_REQUEST_ENCRYPTED_DATA) from e

    if not isinstance(data, dict):
        raise InvalidResponseError("Decrypted Wechat Resource Is Not A JSON Object", INVALID_REQUEST_ENCRYPTED_DATA)

    return data


def decrypt_wechat_resource(
    resource: Union[EncryptedResource, Mapping[str, Any]],
    secret: Optional[Union[str, bytes]]
) -> Dict[str, Any]:
    """
    Decrypt a Wechat encrypted resource.

    Args:
        resource: Resource as delivered (``ciphertext``, ``nonce``,
            ``associated_data``, ``algorithm`` plus any extra fields)
        secret: The tenant's ``mch_secret_key``

    Returns:
        Copy of the resource with ``ciphertext`` replaced by the plaintext

    Raises:
        InvalidParamsError: If the ciphertext is not longer than the tag
        InvalidConfigError: If the secret is missing or not 32 bytes
        InvalidResponseError: On a malformed resource, unknown algorithm, tag
            mismatch or malformed plaintext
    """
    if not isinstance(resource, EncryptedResource):
        try:
            resource = EncryptedResource.model_validate(dict(resource))
        except ValidationError as e:
            raise InvalidResponseError(
                "Invalid Wechat Encrypted Resource",
                INVALID_REQUEST_ENCRYPTED_DATA,
                {"resource": dict(resource)},
            ) from e

    try:
        ciphertext = b64decode(resource.ciphertext)
    except binascii.Error:
        ciphertext = b""

    if len(ciphertext) <= AUTH_TAG_LENGTH_BYTE:
        raise InvalidParamsError("Ciphertext Is Not Longer Than Auth Tag", INVALID_CIPHERTEXT_PARAMS)

    if secret is None or len(to_bytes(secret)) != MCH_SECRET_KEY_LENGTH_BYTE:
        raise InvalidConfigError("Missing Wechat Config -- [mch_secret_key]", WECHAT_CONFIG_ERROR)

    if resource.algorithm != AEAD_AES_256_GCM:
        raise InvalidResponseError(
            f"Unsupported Encryption Algorithm -- [{resource.algorithm}]",
            INVALID_REQUEST_ENCRYPTED_METHOD,
        )

    logger.debug("Decrypting Wechat resource (associated_data=%s)", resource.associated_data)

    decrypted = resource.model_dump()
    decrypted['ciphertext'] = decrypt_aes_256_gcm(
        ciphertext,
        to_bytes(secret),
        resource.nonce,
        resource.associated_data,
    )

    return decrypted
