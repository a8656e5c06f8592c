"""Exceptions raised by cert_store."""

from typing import Optional, Sequence


class CertStoreError(Exception):
    """Base class for all trust store errors."""


class InputValidationError(CertStoreError, ValueError):
    """The caller input does not describe a usable certificate."""


class CertificateParseError(CertStoreError, ValueError):
    """Certificate data could not be decoded."""


class CertificateIOError(CertStoreError):
    """Reading or writing a certificate file failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class CommandError(CertStoreError):
    """A trust store utility exited nonzero or could not be launched."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if returncode is None:
            message = f"Command not found: {self.command[0]}"
        else:
            message = f"Command {' '.join(self.command)} failed with exit code {returncode}"
        detail = (stderr or stdout).strip()
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class UnsupportedPlatformError(CertStoreError, NotImplementedError):
    """The requested operation has no implementation on this platform."""


class TrustStoreOperationError(CertStoreError):
    """An install, delete or lookup failed; the underlying error is chained."""

    def __init__(self, operation: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{message}\n{cause}" if cause else message)
        self.operation = operation
        self.cause = cause
