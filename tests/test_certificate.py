"""Tests for the certificate codec."""

import hashlib

import pytest
from cryptography.hazmat.primitives import serialization

from cert_store.certificate import (
    CertificateCodec,
    is_pem,
    pem_to_der,
    split_pem_certificates,
)
from cert_store.exceptions import CertificateParseError


@pytest.fixture
def codec():
    return CertificateCodec()


def test_is_pem(cert_pem):
    assert is_pem(cert_pem)
    assert is_pem(cert_pem.encode())
    assert not is_pem("/tmp/my-ca.crt")


def test_pem_to_der_matches_certificate_bytes(cert, cert_pem):
    """Stripping markers and whitespace yields the DER encoding."""
    assert pem_to_der(cert_pem) == cert.public_bytes(serialization.Encoding.DER)
    assert pem_to_der(cert_pem.replace("\n", "\r\n")) == cert.public_bytes(serialization.Encoding.DER)


def test_pem_to_der_invalid_body():
    with pytest.raises(CertificateParseError):
        pem_to_der("-----BEGIN CERTIFICATE-----\n!!!\n-----END CERTIFICATE-----")


def test_load_pem_and_der(codec, cert, cert_pem):
    der = cert.public_bytes(serialization.Encoding.DER)
    assert codec.load(cert_pem) == cert
    assert codec.load(cert_pem.encode()) == cert
    assert codec.load(der) == cert


def test_load_garbage(codec):
    with pytest.raises(CertificateParseError):
        codec.load(b"\x00\x01\x02 not a certificate")
    with pytest.raises(CertificateParseError):
        codec.parse("-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n")


def test_to_pem_round_trip(codec, cert, cert_pem):
    assert codec.to_pem(cert) == cert_pem


def test_serial_number_hex(codec, make_cert):
    assert codec.serial_number(make_cert(serial=0x17BA58A02D747D3D9E)) == "17ba58a02d747d3d9e"


def test_serial_number_keeps_sign_octet(codec, make_cert):
    """A serial with the high bit set is prefixed with 00 as in DER."""
    assert codec.serial_number(make_cert(serial=0x80)) == "0080"
    assert codec.serial_number(make_cert(serial=0x7F)) == "7f"


def test_common_name_falls_back_to_organization(codec, make_cert):
    assert codec.common_name(make_cert(common_name="Example CA", organization="Org")) == "Example CA"
    assert codec.common_name(make_cert(common_name=None, organization="Acme Corp")) == "Acme Corp"
    assert codec.common_name(make_cert(common_name=None, organization=None)) is None


def test_fingerprint_is_sha1(codec, cert):
    der = cert.public_bytes(serialization.Encoding.DER)
    assert codec.fingerprint(der) == hashlib.sha1(der).hexdigest().upper()


def test_split_pem_certificates(codec, make_cert, cert_pem):
    other_pem = codec.to_pem(make_cert(common_name="Other CA"))
    blocks = split_pem_certificates("header text\n" + cert_pem + other_pem)
    assert blocks == [cert_pem, other_pem]
    assert split_pem_certificates("no certificates here") == []
