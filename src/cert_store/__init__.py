"""Install, query and remove root certificates in the host trust store."""

from cert_store.config import TrustStoreConfig, detect_platform
from cert_store.exceptions import (
    CertificateIOError,
    CertificateParseError,
    CertStoreError,
    CommandError,
    InputValidationError,
    TrustStoreOperationError,
    UnsupportedPlatformError,
)
from cert_store.models import Descriptor, ParsedCertificate, PathInput, PemInput, Platform
from cert_store.store import TrustStore, delete, install, is_installed

__all__ = [
    "TrustStore",
    "TrustStoreConfig",
    "Platform",
    "PathInput",
    "PemInput",
    "Descriptor",
    "ParsedCertificate",
    "detect_platform",
    "install",
    "delete",
    "is_installed",
    "CertStoreError",
    "InputValidationError",
    "CertificateParseError",
    "CertificateIOError",
    "CommandError",
    "UnsupportedPlatformError",
    "TrustStoreOperationError",
]
