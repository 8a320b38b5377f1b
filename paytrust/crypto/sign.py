"""
Provider Signatures

One ``Signer`` per provider scheme:

- Alipay: RSA-SHA256 (PKCS#1 v1.5) over the raw contents
- Unipay: RSA-SHA256 over the lowercase SHA-256 hex digest of the contents
- Wechat v3: RSA-SHA256 over the contents; responses and webhooks are
  verified against the platform certificate named by ``Wechatpay-Serial``
- Wechat v2: keyed MD5 over the sorted ``k=v&`` string

Signatures travel base64-encoded except Wechat v2, which is a hex digest.
"""

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from paytrust.common.exceptions import (
    ALIPAY_CONFIG_ERROR,
    INVALID_RESPONSE_SIGN,
    UNIPAY_CONFIG_ERROR,
    WECHAT_CONFIG_ERROR,
    InvalidConfigError,
    InvalidParamsError,
    InvalidResponseError,
)
from paytrust.common.protocol import (
    WECHAT_SERIAL_HEADER,
    WECHAT_SIGNATURE_HEADER,
    SignedEnvelope,
    SignedMessage,
)
from paytrust.common.utils import b64decode, b64encode, constant_time_compare, md5_hex, sha256_hex, to_bytes
from paytrust.config import ConfigStore, TrustSettings
from paytrust.crypto.keys import (
    PKCS12_SUFFIXES,
    load_certificate,
    load_pkcs12,
    load_private_key,
    load_public_key,
)
from paytrust.storage.cert_store import CertificateStore
from paytrust.tenant import get_alipay_config, get_tenant, get_unipay_config, get_wechat_config

logger = logging.getLogger(__name__)

Contents = Union[str, bytes]


class Provider(str, Enum):
    ALIPAY = "alipay"
    UNIPAY = "unipay"
    WECHAT = "wechat"
    WECHAT_V2 = "wechat_v2"


def rsa_sign_sha256(private_key, data: bytes) -> str:
    """
    Sign data with RSA-SHA256 and PKCS#1 v1.5 padding.

    Args:
        data: Data to sign (hashed by the primitive)
        private_key: RSA private key object

    Returns:
        Base64-encoded signature
    """
    signature = private_key.sign(
        data,
        padding.PKCS1v15(),
        hashes.SHA256()
    )

    return b64encode(signature)


def rsa_verify_sha256(public_key, data: bytes, signature_b64: str) -> bool:
    """
    Verify an RSA-SHA256 signature.

    Args:
        public_key: RSA public key object
        data: Data that was signed
        signature_b64: Base64-encoded signature

    Returns:
        True if signature is valid, False otherwise
    """
    try:
        signature = b64decode(signature_b64)

        public_key.verify(
            signature,
            data,
            padding.PKCS1v15(),
            hashes.SHA256()
        )

        return True

    except (InvalidSignature, ValueError):
        return False


class Signer:
    """Sign/verify capability for one provider scheme."""

    provider: Provider
    algorithm: str = "SHA256withRSA"

    def __init__(self, config: ConfigStore):
        self.config = config

    def sign(self, params: Mapping[str, Any], contents) -> str:
        raise NotImplementedError

    def verify(self, params: Mapping[str, Any], contents, signature: str, serial: Optional[str] = None) -> None:
        raise NotImplementedError

    def envelope(self, params: Mapping[str, Any], contents: Contents) -> SignedEnvelope:
        """Sign ``contents`` and bundle it with its signature."""
        payload = contents.decode('utf-8') if isinstance(contents, bytes) else contents
        return SignedEnvelope(
            payload=payload,
            signature=self.sign(params, contents),
            algorithm=self.algorithm,
        )


class AlipaySigner(Signer):
    provider = Provider.ALIPAY

    def sign(self, params: Mapping[str, Any], contents: Contents) -> str:
        secret = get_alipay_config(self.config, params).get('app_secret_cert')

        if not secret:
            raise InvalidConfigError("Missing Alipay Config -- [app_secret_cert]", ALIPAY_CONFIG_ERROR)

        logger.debug("Signing Alipay payload for tenant '%s'", get_tenant(params))

        return rsa_sign_sha256(load_private_key(secret, ALIPAY_CONFIG_ERROR), to_bytes(contents))

    def verify(self, params: Mapping[str, Any], contents: Contents, signature: str, serial: Optional[str] = None) -> None:
        public = get_alipay_config(self.config, params).get('alipay_public_cert_path')

        if not public:
            raise InvalidConfigError("Missing Alipay Config -- [alipay_public_cert_path]", ALIPAY_CONFIG_ERROR)

        public_key = load_public_key(public, ALIPAY_CONFIG_ERROR)

        if not rsa_verify_sha256(public_key, to_bytes(contents), signature):
            raise InvalidResponseError(
                "Verify Alipay Response Sign Failed",
                INVALID_RESPONSE_SIGN,
                {"params": dict(params), "contents": contents, "sign": signature},
            )


class UnipaySigner(Signer):
    """
    Unipay signs the SHA-256 hex digest of the contents, which the RSA
    primitive then hashes again with SHA-256.
    """

    provider = Provider.UNIPAY

    def _private_key(self, params: Mapping[str, Any]):
        config = get_unipay_config(self.config, params)
        cert_path = config.get('mch_cert_path')

        if cert_path and cert_path.endswith(PKCS12_SUFFIXES):
            key, _ = load_pkcs12(cert_path, config.get('mch_cert_password'), UNIPAY_CONFIG_ERROR)
            return key

        if config.get('mch_secret_cert'):
            return load_private_key(config['mch_secret_cert'], UNIPAY_CONFIG_ERROR)

        raise InvalidConfigError("Missing Unipay Config -- [mch_cert_path]", UNIPAY_CONFIG_ERROR)

    def get_cert_id(self, params: Mapping[str, Any]) -> str:
        """Decimal serial of the merchant certificate, sent as ``certId``."""
        config = get_unipay_config(self.config, params)
        cert_path = config.get('mch_cert_path')

        if cert_path and cert_path.endswith(PKCS12_SUFFIXES):
            _, cert = load_pkcs12(cert_path, config.get('mch_cert_password'), UNIPAY_CONFIG_ERROR)
        elif config.get('mch_public_cert_path'):
            cert = load_certificate(config['mch_public_cert_path'], UNIPAY_CONFIG_ERROR)
        else:
            raise InvalidConfigError("Missing Unipay Config -- [mch_cert_path]", UNIPAY_CONFIG_ERROR)

        return str(cert.serial_number)

    def sign(self, params: Mapping[str, Any], contents: Contents) -> str:
        digest = sha256_hex(to_bytes(contents)).encode('ascii')

        logger.debug("Signing Unipay payload for tenant '%s'", get_tenant(params))

        return rsa_sign_sha256(self._private_key(params), digest)

    def verify(self, params: Mapping[str, Any], contents: Contents, signature: str, serial: Optional[str] = None) -> None:
        public = params.get('signPubKeyCert') or get_unipay_config(self.config, params).get('unipay_public_cert_path')

        if not public:
            raise InvalidConfigError("Missing Unipay Config -- [unipay_public_cert_path]", UNIPAY_CONFIG_ERROR)

        digest = sha256_hex(to_bytes(contents)).encode('ascii')

        if not rsa_verify_sha256(load_public_key(public, UNIPAY_CONFIG_ERROR), digest, signature):
            raise InvalidResponseError(
                "Verify Unipay Response Sign Failed",
                INVALID_RESPONSE_SIGN,
                {"params": dict(params), "contents": contents, "sign": signature},
            )


class WechatSigner(Signer):
    """
    Wechat Pay APIv3.

    Verification keys come from the certificate store; an unknown serial
    triggers one rotation through ``rotator`` before giving up.
    """

    provider = Provider.WECHAT

    def __init__(
        self,
        config: ConfigStore,
        rotator=None,
        settings: Optional[TrustSettings] = None,
        certificates: Optional[CertificateStore] = None,
    ):
        super().__init__(config)
        self.rotator = rotator
        self.settings = settings or TrustSettings()
        if certificates is None:
            certificates = rotator.certificates if rotator is not None else CertificateStore(config)
        self.certificates = certificates

    def sign(self, params: Mapping[str, Any], contents: Contents) -> str:
        secret = get_wechat_config(self.config, params).get('mch_secret_cert')

        if not secret:
            raise InvalidConfigError("Missing Wechat Config -- [mch_secret_cert]", WECHAT_CONFIG_ERROR)

        logger.debug("Signing Wechat payload for tenant '%s'", get_tenant(params))

        return rsa_sign_sha256(load_private_key(secret, WECHAT_CONFIG_ERROR), to_bytes(contents))

    def public_cert(self, params: Mapping[str, Any], serial: str) -> str:
        """
        Certificate for ``serial``, rotating once on a cache miss.

        Raises:
            InvalidConfigError: If the serial is unknown and cannot be fetched
        """
        held = self.certificates.get(get_tenant(params), serial)
        if held:
            return held

        if self.rotator is None:
            raise InvalidConfigError(
                f"Missing Wechat Config -- [wechat_public_cert_path.{serial}]",
                WECHAT_CONFIG_ERROR,
            )

        return self.rotator.reload(params, serial)

    def verify(self, params: Mapping[str, Any], contents: Contents, signature: str, serial: Optional[str] = None) -> None:
        if not serial:
            raise InvalidParamsError("Wechat verification requires a certificate serial")

        public_key = load_public_key(self.public_cert(params, serial), WECHAT_CONFIG_ERROR)

        if not rsa_verify_sha256(public_key, to_bytes(contents), signature):
            raise InvalidResponseError(
                "Verify Wechat Response Sign Failed",
                INVALID_RESPONSE_SIGN,
                {"params": dict(params), "contents": contents, "sign": signature, "serial": serial},
            )

    def verify_message(self, message: SignedMessage, params: Mapping[str, Any]) -> None:
        """
        Verify a signed Wechat response or webhook.

        Inbound requests from a host listed in
        ``settings.trusted_webhook_hosts`` are accepted unverified.

        Raises:
            InvalidResponseError: If the signature is missing or invalid
            InvalidConfigError: If the certificate serial cannot be resolved
        """
        if message.inbound and message.host and message.host in self.settings.trusted_webhook_hosts:
            logger.warning("Skipping Wechat signature check for trusted host '%s'", message.host)
            return

        signature = message.header(WECHAT_SIGNATURE_HEADER)

        if not signature:
            raise InvalidResponseError(
                "Missing Wechat Response Sign",
                INVALID_RESPONSE_SIGN,
                {"headers": message.headers, "body": message.body},
            )

        serial = message.header(WECHAT_SERIAL_HEADER)
        public_key = load_public_key(self.public_cert(params, serial), WECHAT_CONFIG_ERROR)

        if not rsa_verify_sha256(public_key, message.signing_string().encode('utf-8'), signature):
            raise InvalidResponseError(
                "Verify Wechat Response Sign Failed",
                INVALID_RESPONSE_SIGN,
                {"headers": message.headers, "body": message.body},
            )

    def encrypt_contents(self, contents: Contents, public: str) -> str:
        """
        Encrypt a sensitive field with the platform public key.

        Wechat expects RSA-OAEP with SHA-1; the result is base64.
        """
        public_key = load_public_key(public, WECHAT_CONFIG_ERROR)
        encrypted = public_key.encrypt(
            to_bytes(contents),
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA1()),
                algorithm=hashes.SHA1(),
                label=None,
            ),
        )
        return b64encode(encrypted)


def _v2_value(value: Any) -> str:
    """Stringify a v2 value the way PHP concatenation does."""
    if value is True:
        return "1"
    if value is None or value is False:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_v2_pairs(payload: Mapping[str, Any]) -> str:
    """
    Concatenate ``k=v&`` for every signable entry, keys ascending.

    The ``sign`` key, empty values and list/dict values are skipped.
    """
    buff = ""
    for key in sorted(payload, key=str):
        value = payload[key]
        if key == "sign" or isinstance(value, (list, tuple, dict)):
            continue
        value = _v2_value(value)
        if value == "":
            continue
        buff += f"{key}={value}&"

    return buff


def build_v2_signing_string(payload: Mapping[str, Any], secret: str) -> str:
    """Build the legacy Wechat string-to-sign, terminated by ``key=<secret>``."""
    return f"{build_v2_pairs(payload)}key={secret}"


class WechatV2Signer(Signer):
    """Legacy Wechat Pay v2 keyed-MD5 signatures."""

    provider = Provider.WECHAT_V2
    algorithm = "MD5"

    def _secret(self, params: Mapping[str, Any]) -> str:
        secret = get_wechat_config(self.config, params).get('mch_secret_key_v2')

        if not secret:
            raise InvalidConfigError("Missing Wechat Config -- [mch_secret_key_v2]", WECHAT_CONFIG_ERROR)

        return secret

    def sign(self, params: Mapping[str, Any], contents: Mapping[str, Any], upper: bool = True) -> str:
        sign = md5_hex(build_v2_signing_string(contents, self._secret(params)).encode('utf-8'))

        return sign.upper() if upper else sign

    def verify(self, params: Mapping[str, Any], contents: Mapping[str, Any], signature: str, serial: Optional[str] = None) -> None:
        expected = self.sign(params, contents)

        if not constant_time_compare(expected.encode('ascii'), (signature or "").upper().encode('utf-8')):
            raise InvalidResponseError(
                "Verify Wechat V2 Sign Failed",
                INVALID_RESPONSE_SIGN,
                {"params": dict(params), "contents": dict(contents), "sign": signature},
            )

    def envelope(self, params: Mapping[str, Any], contents: Mapping[str, Any]) -> SignedEnvelope:
        return SignedEnvelope(
            payload=build_v2_pairs(contents),
            signature=self.sign(params, contents),
            algorithm=self.algorithm,
        )


SIGNERS: Dict[Provider, type] = {
    Provider.ALIPAY: AlipaySigner,
    Provider.UNIPAY: UnipaySigner,
    Provider.WECHAT: WechatSigner,
    Provider.WECHAT_V2: WechatV2Signer,
}


def get_signer(
    provider: Union[Provider, str],
    config: ConfigStore,
    rotator=None,
    settings: Optional[TrustSettings] = None,
    certificates: Optional[CertificateStore] = None,
) -> Signer:
    """
    Build the signer for ``provider``.

    Raises:
        InvalidParamsError: If the provider is unknown
    """
    try:
        provider = Provider(provider)
    except ValueError as e:
        raise InvalidParamsError(f"Unknown provider -- [{provider}]") from e

    if provider is Provider.WECHAT:
        return WechatSigner(config, rotator=rotator, settings=settings, certificates=certificates)

    return SIGNERS[provider](config)
