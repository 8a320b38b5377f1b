"""Shared fixtures: RSA keys, self-signed certificates and Wechat resources."""

import base64
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.x509.oid import NameOID

from paytrust.config import InMemoryConfigStore

WECHAT_SECRET = "0123456789abcdef0123456789abcdef"


def _generate_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _self_signed(private_key, common_name: str = "test.local") -> x509.Certificate:
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )


def cert_pem(cert: x509.Certificate) -> str:
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


def private_pem(private_key) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def bare_private_key(private_key, pkcs8: bool = False) -> str:
    fmt = serialization.PrivateFormat.PKCS8 if pkcs8 else serialization.PrivateFormat.TraditionalOpenSSL
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=fmt,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return base64.b64encode(der).decode("ascii")


@pytest.fixture(scope="session")
def pem():
    """Serialization helpers: ``cert``, ``private``, ``bare`` and ``self_signed``."""
    return SimpleNamespace(
        cert=cert_pem,
        private=private_pem,
        bare=bare_private_key,
        self_signed=_self_signed,
    )


@pytest.fixture(scope="session")
def merchant_key():
    """Key pair the merchant signs requests with."""
    return _generate_key()


@pytest.fixture(scope="session")
def merchant_cert(merchant_key):
    return _self_signed(merchant_key, "merchant.local")


@pytest.fixture(scope="session")
def other_key():
    """Unrelated key pair, for negative verification cases."""
    return _generate_key()


@pytest.fixture(scope="session")
def other_cert(other_key):
    return _self_signed(other_key, "other.local")


@pytest.fixture(scope="session")
def platform_key():
    """Key pair standing in for the provider's platform certificate."""
    return _generate_key()


@pytest.fixture(scope="session")
def platform_cert(platform_key):
    return _self_signed(platform_key, "platform.local")


@pytest.fixture
def store(merchant_key, merchant_cert):
    """Config store with a ``default`` tenant for every provider."""
    return InMemoryConfigStore({
        "alipay": {
            "default": {
                "app_secret_cert": bare_private_key(merchant_key),
                "alipay_public_cert_path": cert_pem(merchant_cert),
            },
        },
        "wechat": {
            "default": {
                "mch_secret_cert": bare_private_key(merchant_key),
                "mch_secret_key": WECHAT_SECRET,
                "mch_secret_key_v2": "K",
            },
        },
        "unipay": {
            "default": {
                "mch_secret_cert": private_pem(merchant_key),
                "unipay_public_cert_path": cert_pem(merchant_cert),
            },
        },
    })


@pytest.fixture
def encrypt_resource():
    """Build a Wechat AEAD_AES_256_GCM resource from plaintext bytes."""

    def _encrypt(plaintext: bytes, associated_data: str = "certificate", nonce: str = "4aa5c41e8b7c", secret: str = WECHAT_SECRET) -> dict:
        sealed = AESGCM(secret.encode()).encrypt(nonce.encode(), plaintext, associated_data.encode())
        return {
            "algorithm": "AEAD_AES_256_GCM",
            "ciphertext": base64.b64encode(sealed).decode("ascii"),
            "nonce": nonce,
            "associated_data": associated_data,
        }

    return _encrypt


class FakeFetcher:
    """Stands in for the host's request pipeline; records every call."""

    def __init__(self, encrypt, certs=None):
        self.encrypt = encrypt
        self.certs = dict(certs or {})
        self.calls = []

    def __call__(self, method, params):
        self.calls.append((method, params))
        return {
            "data": [
                {
                    "serial_no": serial,
                    "effective_time": "2024-01-01T00:00:00+08:00",
                    "expire_time": "2029-01-01T00:00:00+08:00",
                    "encrypt_certificate": self.encrypt(pem.encode("ascii")),
                }
                for serial, pem in self.certs.items()
            ]
        }


@pytest.fixture
def make_fetcher(encrypt_resource):
    def _make(certs=None):
        return FakeFetcher(encrypt_resource, certs)

    return _make
