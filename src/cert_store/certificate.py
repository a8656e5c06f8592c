"""Certificate decoding and fingerprinting."""

import base64
import binascii
import hashlib
import logging
import re
import warnings
from typing import List, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

from cert_store.exceptions import CertificateParseError

logger = logging.getLogger(__name__)

PEM_BEGIN = "-----BEGIN CERTIFICATE-----"
PEM_END = "-----END CERTIFICATE-----"

_PEM_BLOCK = re.compile(re.escape(PEM_BEGIN) + r"(.*?)" + re.escape(PEM_END), re.DOTALL)


def is_pem(data: Union[str, bytes]) -> bool:
    """Return True if ``data`` carries a PEM certificate begin-marker."""
    if isinstance(data, (bytes, bytearray)):
        return PEM_BEGIN.encode() in data
    return PEM_BEGIN in data


def pem_to_der(pem: Union[str, bytes]) -> bytes:
    """
    Decode the first PEM block without going through an X.509 parser.

    The begin/end markers and all whitespace are stripped and the remaining
    base64 body is decoded.

    Raises:
        CertificateParseError: If the body is not valid base64
    """
    if isinstance(pem, (bytes, bytearray)):
        pem = bytes(pem).decode("ascii", errors="replace")
    start = pem.find(PEM_BEGIN)
    if start != -1:
        pem = pem[start + len(PEM_BEGIN):]
    end = pem.find(PEM_END)
    if end != -1:
        pem = pem[:end]
    body = re.sub(r"\s+", "", pem)
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CertificateParseError(f"Invalid PEM body: {e}") from e


def split_pem_certificates(text: str) -> List[str]:
    """Split PEM text into individual certificate blocks."""
    return [PEM_BEGIN + body + PEM_END + "\n" for body in _PEM_BLOCK.findall(text)]


def serial_to_hex(serial: int) -> str:
    """
    Serial number as lower-case hex of the DER INTEGER content.

    A leading ``00`` octet is kept when the high bit would otherwise be
    set, so the value matches what certutil and forge-based tooling print.
    """
    length = serial.bit_length() // 8 + 1
    return serial.to_bytes(length, "big", signed=True).hex()


class CertificateCodec:
    """Parses certificates and derives the identity keys backends match on."""

    def load(self, data: Union[str, bytes]) -> x509.Certificate:
        """
        Load a certificate from PEM or DER data.

        Args:
            data: PEM text/bytes, or DER bytes

        Returns:
            Parsed certificate

        Raises:
            CertificateParseError: If the data is not a certificate
        """
        if isinstance(data, str):
            return self.parse(data)
        if is_pem(data):
            return self.parse(bytes(data).decode("ascii", errors="replace"))
        logger.debug("No PEM marker found, loading certificate as DER")
        try:
            # Negative serial numbers trigger a CryptographyDeprecationWarning
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                return x509.load_der_x509_certificate(bytes(data))
        except ValueError as e:
            raise CertificateParseError(f"Could not parse DER certificate: {e}") from e

    def parse(self, pem: str) -> x509.Certificate:
        """Parse PEM text into a certificate."""
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                return x509.load_pem_x509_certificate(pem.strip().encode("ascii", errors="replace"))
        except ValueError as e:
            raise CertificateParseError(f"Could not parse PEM certificate: {e}") from e

    def to_pem(self, certificate: x509.Certificate) -> str:
        return certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")

    def serial_number(self, certificate: x509.Certificate) -> str:
        return serial_to_hex(certificate.serial_number)

    def subject_attribute(self, certificate: x509.Certificate, oid: x509.ObjectIdentifier) -> Optional[str]:
        attributes = certificate.subject.get_attributes_for_oid(oid)
        if not attributes:
            return None
        value = attributes[0].value
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        return value

    def common_name(self, certificate: x509.Certificate) -> Optional[str]:
        """Subject CN, falling back to O."""
        return (
            self.subject_attribute(certificate, NameOID.COMMON_NAME)
            or self.subject_attribute(certificate, NameOID.ORGANIZATION_NAME)
        )

    def fingerprint(self, der: bytes) -> str:
        """SHA-1 thumbprint of DER bytes as upper-case hex."""
        return hashlib.sha1(der).hexdigest().upper()
