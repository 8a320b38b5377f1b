#!/usr/bin/env python3
"""
Generate Sandbox Merchant Keys

Creates an RSA key pair and a self-signed certificate for exercising the
signers against a sandbox, and prints the bare base64 private key body in
the form merchant consoles hand out (usable as ``app_secret_cert`` or
``mch_secret_cert``).

Usage:
    python scripts/gen_test_keys.py --cn merchant.local --out certs/merchant
"""

import argparse
import os
from datetime import datetime, timedelta, timezone
from cryptography import x509
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from paytrust.common.utils import b64encode
from paytrust.crypto.keys import get_certificate_serial


def issue_self_signed(common_name: str, organization: str = "PayTrust Sandbox", validity_days: int = 365):
    """
    Generate a key pair and a self-signed certificate for it.

    Returns:
        Tuple of (private_key, certificate)
    """
    print(f"[*] Generating RSA private key for '{common_name}'...")
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )

    subject = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])

    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=validity_days))
        .add_extension(
            x509.BasicConstraints(ca=False, path_length=None),
            critical=True,
        )
        .sign(private_key, hashes.SHA256())
    )

    print(f"[+] Certificate issued for '{common_name}'")
    print(f"    Serial (hex): {get_certificate_serial(cert)}")
    print(f"    Serial (dec): {cert.serial_number}")

    return private_key, cert


def save_key_and_certificate(private_key, cert, output_prefix: str):
    """Write ``<prefix>_key.pem`` and ``<prefix>_cert.pem``."""
    output_dir = os.path.dirname(output_prefix)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    key_path = f"{output_prefix}_key.pem"
    with open(key_path, "wb") as f:
        f.write(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
    print(f"[+] Private key saved to: {key_path}")

    cert_path = f"{output_prefix}_cert.pem"
    with open(cert_path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))
    print(f"[+] Certificate saved to: {cert_path}")


def bare_private_key(private_key) -> str:
    """Base64 PKCS#8 DER body without PEM armour."""
    return b64encode(
        private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )


def main():
    parser = argparse.ArgumentParser(
        description="Generate a sandbox merchant key pair and self-signed certificate"
    )
    parser.add_argument(
        "--cn",
        required=True,
        help="Common Name (CN) for the certificate (e.g., merchant.local)"
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output prefix for key and certificate files (e.g., certs/merchant)"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=365,
        help="Validity period in days (default: 365)"
    )

    args = parser.parse_args()

    private_key, cert = issue_self_signed(args.cn, validity_days=args.days)
    save_key_and_certificate(private_key, cert, args.out)

    print("\n[*] Bare private key (for app_secret_cert / mch_secret_cert):")
    print(bare_private_key(private_key))

    print("\n[✓] Sandbox keys generated successfully!")


if __name__ == "__main__":
    main()
