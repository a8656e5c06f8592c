"""Data models for trust store operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from cryptography import x509


class Platform(str, Enum):
    """Trust store families, keyed by ``sys.platform`` value."""

    WINDOWS = "win32"
    MACOS = "darwin"
    LINUX = "linux"


@dataclass(frozen=True)
class PathInput:
    """Certificate given as a file on disk."""

    path: str


@dataclass(frozen=True)
class PemInput:
    """Certificate given as PEM text."""

    pem: str


@dataclass(frozen=True)
class Descriptor:
    """Certificate given as explicit fields. Any of them may be missing."""

    path: Optional[str] = None
    pem: Optional[str] = None
    # Hex string or integer, normalized when the identity is built
    serial_number: Optional[Union[str, int]] = None


@dataclass(frozen=True)
class ParsedCertificate:
    """Certificate given as an already parsed object."""

    certificate: x509.Certificate


CertificateInput = Union[PathInput, PemInput, Descriptor, ParsedCertificate]


@dataclass
class CommandResult:
    """Outcome of a trust store utility invocation."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class CertificateIdentity:
    """One certificate, whichever way it was supplied.

    Derived fields (``name``, ``serial_number``, ``certificate``) are filled by
    :func:`cert_store.identity.resolve`, which returns a new instance with
    ``resolved`` set. ``temp_path`` is only set by the facade while a backend
    call that needs a file is in flight.
    """

    path: Optional[str] = None
    pem: Optional[str] = None
    serial_number: Optional[str] = None
    name: Optional[str] = None
    certificate: Optional[x509.Certificate] = field(default=None, compare=False, repr=False)
    temp_path: Optional[str] = None
    resolved: bool = False

    @property
    def file_path(self) -> Optional[str]:
        """Path a backend should hand to a command line tool."""
        return self.path or self.temp_path

    @property
    def has_source(self) -> bool:
        return bool(self.path or self.pem)
