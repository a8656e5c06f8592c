"""Normalization of caller input into a CertificateIdentity."""

import dataclasses
import logging
import os
import re
from collections.abc import Mapping
from typing import Any, Optional

from cryptography import x509

from cert_store.certificate import CertificateCodec, is_pem, serial_to_hex
from cert_store.exceptions import CertificateIOError, InputValidationError
from cert_store.models import (
    CertificateIdentity,
    CertificateInput,
    Descriptor,
    ParsedCertificate,
    PathInput,
    PemInput,
)

logger = logging.getLogger(__name__)

CERT_EXTENSIONS = (".crt", ".cer", ".pem")

_PEM_KEYS = ("pem", "cert", "data")

_SERIAL_SEPARATORS = re.compile(r"[\s:]+")
_HEX_DIGITS = re.compile(r"[0-9a-f]+")


def coerce_input(arg: Any) -> CertificateInput:
    """
    Classify a loosely typed argument into one of the input variants.

    Strings and bytes holding the PEM begin-marker are PEM text, other
    strings are paths. Bytes that are not UTF-8 are taken as DER.

    Raises:
        InputValidationError: If the argument shape is not recognized
    """
    if isinstance(arg, (PathInput, PemInput, Descriptor, ParsedCertificate)):
        return arg
    if isinstance(arg, x509.Certificate):
        return ParsedCertificate(arg)
    if isinstance(arg, (bytes, bytearray)):
        try:
            arg = bytes(arg).decode("utf-8")
        except UnicodeDecodeError:
            try:
                return ParsedCertificate(x509.load_der_x509_certificate(bytes(arg)))
            except ValueError as e:
                raise InputValidationError(f"Bytes are neither text nor a DER certificate: {e}") from e
    if isinstance(arg, os.PathLike):
        return PathInput(os.fspath(arg))
    if isinstance(arg, str):
        if is_pem(arg):
            return PemInput(arg)
        return PathInput(arg)
    if isinstance(arg, Mapping):
        pem = None
        for key in _PEM_KEYS:
            if arg.get(key):
                pem = arg[key]
                break
        if isinstance(pem, x509.Certificate):
            return ParsedCertificate(pem)
        if isinstance(pem, (bytes, bytearray)):
            pem = bytes(pem).decode("utf-8", errors="replace")
        path = arg.get("path")
        if path is not None:
            path = os.fspath(path)
        serial = arg.get("serial_number")
        if serial is None:
            serial = arg.get("serialNumber")
        return Descriptor(path=path or None, pem=pem or None, serial_number=serial)
    raise InputValidationError(f"Unsupported certificate input type: {type(arg).__name__}")


def normalize_serial_number(value: Any) -> Optional[str]:
    """
    Canonical lower-case hex form of a caller supplied serial number.

    Integers are encoded like certificate serials; strings lose ``:`` and
    whitespace separators and an ``0x`` prefix.

    Raises:
        InputValidationError: If the value is not an integer or hex string
    """
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return serial_to_hex(value)
    if not isinstance(value, str):
        raise InputValidationError(f"Unsupported serial number type: {type(value).__name__}")
    serial = _SERIAL_SEPARATORS.sub("", value).lower()
    if serial.startswith("0x"):
        serial = serial[2:]
    if not serial:
        return None
    if not _HEX_DIGITS.fullmatch(serial):
        raise InputValidationError(f"Serial number is not hexadecimal: {value!r}")
    return serial


def from_input(cert_input: CertificateInput, codec: CertificateCodec) -> CertificateIdentity:
    """
    Build an unresolved identity. Performs no filesystem access.

    Raises:
        InputValidationError: If a supplied serial number is malformed
    """
    if isinstance(cert_input, PathInput):
        return CertificateIdentity(path=cert_input.path)
    if isinstance(cert_input, PemInput):
        return CertificateIdentity(pem=cert_input.pem)
    if isinstance(cert_input, ParsedCertificate):
        return CertificateIdentity(
            pem=codec.to_pem(cert_input.certificate),
            certificate=cert_input.certificate,
        )
    return CertificateIdentity(
        path=cert_input.path,
        pem=cert_input.pem,
        serial_number=normalize_serial_number(cert_input.serial_number),
    )


def require_source(identity: CertificateIdentity) -> None:
    if not identity.has_source:
        raise InputValidationError("path to or contents of the certificate has to be defined.")


def require_name(identity: CertificateIdentity) -> str:
    if not identity.name:
        raise InputValidationError("Could not derive a file name for the certificate.")
    return identity.name


def require_serial_number(identity: CertificateIdentity) -> str:
    if not identity.serial_number:
        raise InputValidationError("Could not determine the certificate serial number.")
    return identity.serial_number


def ensure_loaded(identity: CertificateIdentity, codec: CertificateCodec) -> CertificateIdentity:
    """
    Read the certificate file if only a path is known.

    DER files are converted to PEM so every backend can work on text.

    Raises:
        CertificateIOError: If the file is missing or unreadable
    """
    if identity.pem or not identity.path:
        return identity
    try:
        with open(identity.path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise CertificateIOError(f"Could not read certificate file {identity.path}: {e}", path=identity.path) from e
    if is_pem(data):
        pem = data.decode("ascii", errors="replace")
        return dataclasses.replace(identity, pem=pem)
    certificate = codec.load(data)
    logger.debug(f"Converted DER certificate {identity.path} to PEM")
    return dataclasses.replace(identity, pem=codec.to_pem(certificate), certificate=certificate)


def name_from_path(path: str) -> str:
    """File name with exactly one recognized certificate extension removed."""
    name = os.path.basename(path)
    for extension in CERT_EXTENSIONS:
        if name.lower().endswith(extension) and len(name) > len(extension):
            return name[: -len(extension)]
    return name


def slugify(value: str) -> str:
    return re.sub(r"\W+", "-", value.lower())


def resolve(identity: CertificateIdentity, codec: CertificateCodec) -> CertificateIdentity:
    """
    Load the certificate and derive ``name`` and ``serial_number`` once.

    The certificate is parsed at most once, and only when a derived field
    cannot be obtained otherwise. Returns a new identity; resolving an
    already resolved identity returns it unchanged.
    """
    if identity.resolved:
        return identity
    identity = ensure_loaded(identity, codec)
    certificate = identity.certificate
    name: Optional[str] = name_from_path(identity.path) if identity.path else None
    serial_number = identity.serial_number

    if (name is None or serial_number is None) and certificate is None and identity.pem:
        certificate = codec.parse(identity.pem)

    if certificate is not None:
        if serial_number is None:
            serial_number = codec.serial_number(certificate)
        if name is None:
            common_name = codec.common_name(certificate)
            if common_name:
                name = slugify(common_name)

    logger.debug(f"Resolved certificate name={name} serial={serial_number}")
    return dataclasses.replace(
        identity,
        name=name,
        serial_number=serial_number,
        certificate=certificate,
        resolved=True,
    )
