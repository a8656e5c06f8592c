"""Shared fixtures for trust store tests."""

from datetime import datetime, timedelta
from typing import List, Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from cert_store.config import TrustStoreConfig
from cert_store.exceptions import CommandError
from cert_store.models import CommandResult, Platform


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def make_cert(private_key):
    """Build a self-signed CA certificate."""

    def _make(common_name: Optional[str] = "Example CA", organization: Optional[str] = None, serial: Optional[int] = None):
        attributes = []
        if common_name:
            attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
        if organization:
            attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
        if not attributes:
            attributes.append(x509.NameAttribute(NameOID.COUNTRY_NAME, "US"))
        name = x509.Name(attributes)
        return (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(serial or x509.random_serial_number())
            .not_valid_before(datetime.utcnow() - timedelta(days=1))
            .not_valid_after(datetime.utcnow() + timedelta(days=365))
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .sign(private_key, hashes.SHA256())
        )

    return _make


@pytest.fixture
def cert(make_cert):
    return make_cert()


@pytest.fixture
def cert_pem(cert) -> str:
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture
def cert_file(tmp_path, cert_pem) -> str:
    path = tmp_path / "src" / "my-ca.crt"
    path.parent.mkdir()
    path.write_text(cert_pem)
    return str(path)


class FakeRunner:
    """Records commands instead of running them.

    ``fail`` maps a command name or a (name, subcommand) prefix to an exit
    code; ``outputs`` maps the same keys to stdout.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail = {}
        self.outputs = {}

    def _lookup(self, table, args):
        for key in (tuple(args[:2]), args[0]):
            if key in table:
                return table[key]
        return None

    def run(self, args, elevated=False):
        args = list(args)
        self.calls.append((args, elevated))
        code = self._lookup(self.fail, args)
        stdout = self._lookup(self.outputs, args) or ""
        if code:
            raise CommandError(args, code, stdout, "error")
        return CommandResult(args=args, returncode=0, stdout=stdout)

    @property
    def commands(self) -> List[List[str]]:
        return [args for args, _ in self.calls]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_config(tmp_path):
    def _make(platform: Platform) -> TrustStoreConfig:
        temp_dir = tmp_path / "scratch"
        temp_dir.mkdir(exist_ok=True)
        return TrustStoreConfig(
            platform=platform,
            linux_cert_dir=str(tmp_path / "extra"),
            keychain_path="/Library/Keychains/System.keychain",
            temp_dir=str(temp_dir),
        )

    return _make
