#!/usr/bin/env python3
"""
Offline Wechat Platform Certificate Export

Decrypts a saved response of the certificate-listing call with the tenant's
APIv3 key, merges the certificates into the configured set and writes each
one to ``<out>/<serial>.crt``.

Usage:
    python scripts/export_wechat_certs.py --listing certificates.json --config paytrust.json --out certs/wechat
"""

import argparse
import json
import sys

from paytrust.common.exceptions import PayTrustException
from paytrust.config import load_config_store
from paytrust.rotation import CertificateRotator
from paytrust.tenant import DEFAULT_TENANT, TENANT_PARAM


def load_listing(listing_path: str) -> dict:
    """Load a saved certificate-listing response body."""
    with open(listing_path, 'r') as f:
        return json.load(f)


def main():
    parser = argparse.ArgumentParser(
        description="Decrypt and export Wechat platform certificates"
    )
    parser.add_argument(
        "--listing",
        required=True,
        help="Saved JSON body of the certificate-listing call"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Provider config JSON (default: PAYTRUST_CONFIG_PATH or paytrust.json)"
    )
    parser.add_argument(
        "--tenant",
        default=DEFAULT_TENANT,
        help="Tenant whose mch_secret_key decrypts the listing (default: default)"
    )
    parser.add_argument(
        "--out",
        default=None,
        help="Directory to write <serial>.crt files into; omit to only list serials"
    )

    args = parser.parse_args()

    print(f"[*] Loading listing: {args.listing}")
    listing = load_listing(args.listing)

    config = load_config_store(args.config)
    rotator = CertificateRotator(config, lambda method, params: listing)

    try:
        certs = rotator.ensure_public_certs({TENANT_PARAM: args.tenant}, args.out)
    except PayTrustException as e:
        print(f"[!] Export failed ({e.code}): {e.message}")
        sys.exit(1)

    print(f"\n[*] Certificates held for tenant '{args.tenant}':")
    for serial in certs:
        print(f"    {serial}")

    if args.out:
        print(f"\n[✓] Exported {len(certs)} certificate(s) to {args.out}")


if __name__ == "__main__":
    main()
