"""Platform independent facade over the trust store backends."""

import dataclasses
import logging
import os
import secrets
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from cert_store.backends import DELETE, INSTALL, IS_INSTALLED, TrustStoreBackend, get_backend
from cert_store.certificate import CertificateCodec
from cert_store.config import TrustStoreConfig
from cert_store.exceptions import CertificateIOError, CertStoreError, TrustStoreOperationError
from cert_store.identity import coerce_input, from_input, require_source, resolve
from cert_store.models import CertificateIdentity
from cert_store.runner import CommandRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_MESSAGES = {
    INSTALL: "Couldn't install certificate.",
    DELETE: "Couldn't delete certificate.",
    IS_INSTALLED: "Couldn't find if certificate is installed.",
}


class TrustStore:
    """
    Install, delete and look up root certificates in the host trust store.

    Every operation accepts a path, PEM text (str or bytes), a mapping with
    ``path``/``pem``/``serial_number`` keys, a parsed
    ``cryptography.x509.Certificate`` or one of the input models.

    Args:
        config: Store settings; defaults to the detected host platform
        backend: Backend to use instead of the one for ``config.platform``
        codec: Certificate codec
        runner: Command runner handed to the default backend
    """

    def __init__(
        self,
        config: Optional[TrustStoreConfig] = None,
        backend: Optional[TrustStoreBackend] = None,
        codec: Optional[CertificateCodec] = None,
        runner: Optional[CommandRunner] = None,
    ):
        self.config = config or TrustStoreConfig()
        self.codec = codec or CertificateCodec()
        self.runner = runner or CommandRunner()
        self.backend = backend or get_backend(self.config.platform, self.codec, self.runner, self.config)

    def install(self, cert: Any) -> None:
        self._call(INSTALL, cert, self.backend.install)
        logger.info("Certificate installed")

    def delete(self, cert: Any) -> None:
        self._call(DELETE, cert, self.backend.delete)
        logger.info("Certificate deleted")

    def is_installed(self, cert: Any) -> bool:
        return self._call(IS_INSTALLED, cert, self.backend.is_installed)

    def _call(self, operation: str, cert: Any, func: Callable[[CertificateIdentity], T]) -> T:
        identity = from_input(coerce_input(cert), self.codec)
        require_source(identity)
        try:
            identity = resolve(identity, self.codec)
            with self._temporary_file(operation, identity) as identity:
                return func(identity)
        except (CertStoreError, OSError) as e:
            logger.debug(f"{operation} failed on {self.backend.platform.name}: {e}")
            raise TrustStoreOperationError(operation, ERROR_MESSAGES[operation], e) from e

    @contextmanager
    def _temporary_file(self, operation: str, identity: CertificateIdentity) -> Iterator[CertificateIdentity]:
        """
        Materialize PEM-only input as a file for backends that need a path.

        The file is removed when the block exits, whatever the outcome.
        """
        if operation not in self.backend.path_operations or identity.path:
            yield identity
            return

        temp_path = os.path.join(
            self.config.temp_dir,
            f"cert-store-{time.time_ns()}-{secrets.token_hex(8)}.crt",
        )
        try:
            with open(temp_path, "x", encoding="utf-8", newline="") as f:
                f.write(identity.pem)
        except OSError as e:
            raise CertificateIOError(f"Could not write temporary certificate file {temp_path}: {e}", path=temp_path) from e
        logger.debug(f"Created temporary certificate file {temp_path}")
        try:
            yield dataclasses.replace(identity, temp_path=temp_path)
        finally:
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.warning(f"Could not remove temporary certificate file {temp_path}: {e}")


_default_store: Optional[TrustStore] = None


def default_store() -> TrustStore:
    """Shared TrustStore for the host platform, created on first use."""
    global _default_store
    if _default_store is None:
        _default_store = TrustStore()
    return _default_store


def install(cert: Any) -> None:
    default_store().install(cert)


def delete(cert: Any) -> None:
    default_store().delete(cert)


def is_installed(cert: Any) -> bool:
    return default_store().is_installed(cert)
