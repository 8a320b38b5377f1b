"""Tests for the Alipay and Unipay signers."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from paytrust.common.exceptions import InvalidConfigError, InvalidParamsError, InvalidResponseError
from paytrust.common.utils import sha256_hex
from paytrust.crypto.sign import (
    AlipaySigner,
    Provider,
    UnipaySigner,
    WechatSigner,
    WechatV2Signer,
    get_signer,
    rsa_sign_sha256,
)


def test_get_signer_by_provider(store):
    assert isinstance(get_signer(Provider.ALIPAY, store), AlipaySigner)
    assert isinstance(get_signer("unipay", store), UnipaySigner)
    assert isinstance(get_signer("wechat", store), WechatSigner)
    assert isinstance(get_signer("wechat_v2", store), WechatV2Signer)

    with pytest.raises(InvalidParamsError):
        get_signer("paypal", store)


def test_alipay_sign_then_verify(store):
    signer = AlipaySigner(store)
    signature = signer.sign({}, "biz_content=1")

    signer.verify({}, "biz_content=1", signature)


def test_alipay_verify_rejects_tampered_contents(store):
    signer = AlipaySigner(store)
    signature = signer.sign({}, "biz_content=1")

    with pytest.raises(InvalidResponseError) as exc:
        signer.verify({}, "biz_content=2", signature)

    assert exc.value.code == "INVALID_RESPONSE_SIGN"
    assert exc.value.extra["contents"] == "biz_content=2"
    assert exc.value.extra["sign"] == signature


def test_alipay_verify_rejects_malformed_signature(store):
    with pytest.raises(InvalidResponseError):
        AlipaySigner(store).verify({}, "biz_content=1", "%%%not base64%%%")


def test_alipay_missing_public_cert_is_config_error(store):
    store.set("alipay.default.alipay_public_cert_path", "")

    with pytest.raises(InvalidConfigError) as exc:
        AlipaySigner(store).verify({}, "biz_content=1", "c2ln")

    assert exc.value.code == "ALIPAY_CONFIG_ERROR"
    assert "alipay_public_cert_path" in exc.value.message


def test_alipay_unreadable_public_cert_path_is_config_error(store):
    store.set("alipay.default.alipay_public_cert_path", "/nonexistent/alipay_public.crt")

    with pytest.raises(InvalidConfigError) as exc:
        AlipaySigner(store).verify({}, "biz_content=1", "c2ln")

    assert exc.value.code == "ALIPAY_CONFIG_ERROR"
    assert "/nonexistent/alipay_public.crt" in exc.value.message


def test_unipay_missing_pkcs12_bundle_is_config_error(store):
    store.set("unipay.default.mch_cert_path", "/nonexistent/merchant.pfx")

    with pytest.raises(InvalidConfigError) as exc:
        UnipaySigner(store).sign({}, "contents")

    assert exc.value.code == "UNIPAY_CONFIG_ERROR"


def test_alipay_missing_private_key_is_config_error(store):
    with pytest.raises(InvalidConfigError) as exc:
        AlipaySigner(store).sign({"_config": "unknown"}, "biz_content=1")

    assert "app_secret_cert" in exc.value.message


def test_alipay_tenants_use_their_own_keys(store, pem, other_key, other_cert):
    store.set("alipay.b", {
        "app_secret_cert": pem.private(other_key),
        "alipay_public_cert_path": pem.cert(other_cert),
    })
    signer = AlipaySigner(store)

    signature = signer.sign({"_config": "b"}, "biz_content=1")
    signer.verify({"_config": "b"}, "biz_content=1", signature)

    with pytest.raises(InvalidResponseError):
        signer.verify({}, "biz_content=1", signature)


def test_alipay_public_cert_from_file(store, tmp_path, pem, merchant_cert):
    path = tmp_path / "alipay_public.crt"
    path.write_text(pem.cert(merchant_cert))
    store.set("alipay.default.alipay_public_cert_path", str(path))
    signer = AlipaySigner(store)

    signer.verify({}, "biz_content=1", signer.sign({}, "biz_content=1"))


def test_unipay_sign_then_verify(store):
    signer = UnipaySigner(store)
    contents = "accessType=0&bizType=000201&txnAmt=100"

    signer.verify({}, contents, signer.sign({}, contents))


def test_unipay_verifies_over_hex_digest(store, merchant_key):
    signer = UnipaySigner(store)
    contents = "accessType=0&bizType=000201"

    over_digest = rsa_sign_sha256(merchant_key, sha256_hex(contents.encode()).encode())
    signer.verify({}, contents, over_digest)

    over_raw = rsa_sign_sha256(merchant_key, contents.encode())
    with pytest.raises(InvalidResponseError) as exc:
        signer.verify({}, contents, over_raw)

    assert exc.value.message == "Verify Unipay Response Sign Failed"


def test_unipay_inline_cert_overrides_config(store, pem, merchant_cert, other_cert):
    store.set("unipay.default.unipay_public_cert_path", pem.cert(other_cert))
    signer = UnipaySigner(store)
    signature = signer.sign({}, "txnAmt=1")

    with pytest.raises(InvalidResponseError):
        signer.verify({}, "txnAmt=1", signature)

    signer.verify({"signPubKeyCert": pem.cert(merchant_cert)}, "txnAmt=1", signature)


def test_unipay_inline_cert_alone_is_enough(store, pem, merchant_cert):
    signer = UnipaySigner(store)
    signature = signer.sign({}, "txnAmt=1")
    store.set("unipay.default.unipay_public_cert_path", None)

    signer.verify({"signPubKeyCert": pem.cert(merchant_cert)}, "txnAmt=1", signature)

    with pytest.raises(InvalidConfigError) as exc:
        signer.verify({}, "txnAmt=1", signature)

    assert exc.value.code == "UNIPAY_CONFIG_ERROR"


def test_unipay_pkcs12_sign_and_cert_id(store, tmp_path, merchant_key, merchant_cert):
    bundle = pkcs12.serialize_key_and_certificates(
        b"merchant",
        merchant_key,
        merchant_cert,
        None,
        serialization.BestAvailableEncryption(b"000000"),
    )
    path = tmp_path / "merchant.pfx"
    path.write_bytes(bundle)
    store.set("unipay.default", {
        "mch_cert_path": str(path),
        "mch_cert_password": "000000",
        "unipay_public_cert_path": store.get("unipay.default.unipay_public_cert_path"),
    })
    signer = UnipaySigner(store)

    signer.verify({}, "txnAmt=1", signer.sign({}, "txnAmt=1"))
    assert signer.get_cert_id({}) == str(merchant_cert.serial_number)


def test_unipay_without_signing_key_is_config_error(store):
    store.set("unipay.default.mch_secret_cert", None)

    with pytest.raises(InvalidConfigError):
        UnipaySigner(store).sign({}, "txnAmt=1")

    with pytest.raises(InvalidConfigError):
        UnipaySigner(store).get_cert_id({})


def test_envelope_carries_payload_and_algorithm(store):
    envelope = AlipaySigner(store).envelope({}, b"biz_content=1")

    assert envelope.payload == "biz_content=1"
    assert envelope.algorithm == "SHA256withRSA"
    AlipaySigner(store).verify({}, envelope.payload, envelope.signature)
