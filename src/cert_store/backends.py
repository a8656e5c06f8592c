"""Platform specific trust store backends."""

import logging
import os
from typing import Dict, FrozenSet, Iterator, List, Protocol, Set, Tuple, Type

from cert_store.certificate import CertificateCodec, pem_to_der, split_pem_certificates
from cert_store.config import TrustStoreConfig
from cert_store.exceptions import CertificateParseError, CommandError, UnsupportedPlatformError
from cert_store.identity import require_name, require_serial_number
from cert_store.models import CertificateIdentity, Platform
from cert_store.runner import CommandRunner

logger = logging.getLogger(__name__)

INSTALL = "install"
DELETE = "delete"
IS_INSTALLED = "is_installed"


class TrustStoreBackend(Protocol):
    """Install, delete and look up certificates in one trust anchor location."""

    platform: Platform
    # Operations that need the certificate as a file on disk
    path_operations: FrozenSet[str]

    def install(self, identity: CertificateIdentity) -> None: ...

    def delete(self, identity: CertificateIdentity) -> None: ...

    def is_installed(self, identity: CertificateIdentity) -> bool: ...


class DirectoryTrustStore:
    """
    Trust anchors as individual ``.crt`` files in an extra-certificates directory.

    Used on Linux (Debian/Ubuntu layout) and any other host that is neither
    Windows nor macOS. Lookups scan every file and match by serial number;
    delete removes every matching file.
    """

    platform = Platform.LINUX
    path_operations: FrozenSet[str] = frozenset()
    update_command = ["update-ca-certificates"]

    def __init__(self, codec: CertificateCodec, runner: CommandRunner, config: TrustStoreConfig):
        self.codec = codec
        self.runner = runner
        self.cert_dir = config.linux_cert_dir

    def install(self, identity: CertificateIdentity) -> None:
        name = require_name(identity)
        os.makedirs(self.cert_dir, exist_ok=True)
        target_path = os.path.join(self.cert_dir, f"{name}.crt")
        with open(target_path, "w", encoding="utf-8", newline="") as f:
            f.write(identity.pem)
        logger.debug(f"Wrote {target_path}")
        self.runner.run(self.update_command)

    def delete(self, identity: CertificateIdentity) -> None:
        target_paths = self._find(identity)
        if not target_paths:
            logger.debug(f"No certificate with serial {identity.serial_number} in {self.cert_dir}")
            return
        for target_path in target_paths:
            os.remove(target_path)
            logger.debug(f"Removed {target_path}")
        self.runner.run(self.update_command)

    def is_installed(self, identity: CertificateIdentity) -> bool:
        return bool(self._find(identity))

    def _scan(self) -> Iterator[Tuple[str, str]]:
        """Yield (path, serial number) for each parsable file in the directory."""
        try:
            file_names = sorted(os.listdir(self.cert_dir))
        except FileNotFoundError:
            logger.debug(f"Certificate directory {self.cert_dir} does not exist")
            return
        for file_name in file_names:
            file_path = os.path.join(self.cert_dir, file_name)
            if not os.path.isfile(file_path):
                continue
            try:
                with open(file_path, "rb") as f:
                    data = f.read()
            except OSError as e:
                logger.debug(f"Skipping unreadable {file_path}: {e}")
                continue
            try:
                certificate = self.codec.load(data)
            except ValueError as e:
                logger.debug(f"Skipping {file_path}: {e}")
                continue
            yield file_path, self.codec.serial_number(certificate)

    def _find(self, identity: CertificateIdentity) -> List[str]:
        """Paths of every file holding a certificate with the identity's serial number."""
        serial_number = require_serial_number(identity)
        return [file_path for file_path, file_serial in self._scan() if file_serial == serial_number]


class WindowsTrustStore:
    """The current user's root store, managed through ``certutil`` by serial number."""

    platform = Platform.WINDOWS
    path_operations: FrozenSet[str] = frozenset({INSTALL})

    def __init__(self, codec: CertificateCodec, runner: CommandRunner, config: TrustStoreConfig):
        self.codec = codec
        self.runner = runner

    def install(self, identity: CertificateIdentity) -> None:
        self.runner.run(["certutil", "-addstore", "-user", "-f", "root", identity.file_path])

    def delete(self, identity: CertificateIdentity) -> None:
        serial_number = require_serial_number(identity)
        if not self.is_installed(identity):
            logger.debug(f"Certificate {serial_number} not in root store, nothing to delete")
            return
        # certutil succeeds for a known serial number, so any failure is real
        self.runner.run(["certutil", "-delstore", "-user", "root", serial_number])

    def is_installed(self, identity: CertificateIdentity) -> bool:
        serial_number = require_serial_number(identity)
        try:
            self.runner.run(["certutil", "-verifystore", "-user", "root", serial_number])
        except CommandError:
            # certutil always fails if the serial number is not found
            return False
        return True


class KeychainTrustStore:
    """
    The macOS system keychain, managed through ``security``.

    Deletion is by SHA-1 fingerprint, matched against the fingerprints of a
    dump of every certificate in the keychain search list. Membership is a
    substring test of the PEM against the same dump.
    """

    platform = Platform.MACOS
    path_operations: FrozenSet[str] = frozenset({INSTALL})

    def __init__(self, codec: CertificateCodec, runner: CommandRunner, config: TrustStoreConfig):
        self.codec = codec
        self.runner = runner
        self.keychain_path = config.keychain_path

    def install(self, identity: CertificateIdentity) -> None:
        self.runner.run(
            ["security", "add-trusted-cert", "-d", "-r", "trustRoot", "-k", self.keychain_path, identity.file_path],
            elevated=True,
        )

    def delete(self, identity: CertificateIdentity) -> None:
        fingerprint = self.codec.fingerprint(pem_to_der(identity.pem))
        if fingerprint not in self._fingerprints():
            logger.debug(f"Certificate {fingerprint} not in keychain, nothing to delete")
            return
        self.runner.run(
            ["security", "delete-certificate", "-Z", fingerprint, self.keychain_path],
            elevated=True,
        )

    def is_installed(self, identity: CertificateIdentity) -> bool:
        result = self.runner.run(["security", "find-certificate", "-a", "-p"])
        pem = identity.pem.replace("\r", "").strip()
        return pem in result.stdout.replace("\r", "")

    def _fingerprints(self) -> Set[str]:
        """SHA-1 fingerprints of every certificate in the keychain search list."""
        result = self.runner.run(["security", "find-certificate", "-a", "-p"])
        fingerprints = set()
        for block in split_pem_certificates(result.stdout):
            try:
                fingerprints.add(self.codec.fingerprint(pem_to_der(block)))
            except CertificateParseError as e:
                logger.debug(f"Skipping keychain entry: {e}")
        return fingerprints


BACKENDS: Dict[Platform, Type[TrustStoreBackend]] = {
    Platform.LINUX: DirectoryTrustStore,
    Platform.WINDOWS: WindowsTrustStore,
    Platform.MACOS: KeychainTrustStore,
}


def get_backend(
    platform: Platform,
    codec: CertificateCodec,
    runner: CommandRunner,
    config: TrustStoreConfig,
) -> TrustStoreBackend:
    """
    Create the backend for ``platform``.

    Raises:
        UnsupportedPlatformError: If no backend exists for the platform
    """
    try:
        backend_class = BACKENDS[platform]
    except KeyError:
        raise UnsupportedPlatformError(f"No trust store backend for platform {platform!r}") from None
    return backend_class(codec, runner, config)
