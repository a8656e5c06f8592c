"""CLI entry point using Typer."""

import logging
from pathlib import Path
from typing import Optional

import typer

from cert_store.config import LINUX_CERT_DIR, MAC_KEYCHAIN, TrustStoreConfig, detect_platform, parse_platform
from cert_store.exceptions import CertStoreError
from cert_store.store import TrustStore

app = typer.Typer(help="Install and remove root certificates in the system trust store")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)


def build_store(
    platform: Optional[str],
    cert_dir: Optional[Path],
    keychain: Optional[str],
    verbose: bool,
) -> TrustStore:
    """Create a TrustStore from command line options."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("cert_store").setLevel(logging.DEBUG)

    config = TrustStoreConfig(
        platform=parse_platform(platform) if platform else detect_platform(),
        linux_cert_dir=str(cert_dir) if cert_dir else LINUX_CERT_DIR,
        keychain_path=keychain or MAC_KEYCHAIN,
    )
    return TrustStore(config)


def _fail(error: CertStoreError) -> None:
    typer.echo(str(error), err=True)
    raise typer.Exit(code=2)


PlatformOption = typer.Option(None, "--platform", help="Trust store family (linux, windows, macos). Detected if not specified.")
CertDirOption = typer.Option(None, "--cert-dir", help=f"Certificate directory on Linux (default: {LINUX_CERT_DIR})")
KeychainOption = typer.Option(None, "--keychain", help=f"Keychain on macOS (default: {MAC_KEYCHAIN})")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Debug logging")


@app.command()
def install(
    cert: str = typer.Argument(..., help="Certificate file (PEM or DER)"),
    platform: Optional[str] = PlatformOption,
    cert_dir: Optional[Path] = CertDirOption,
    keychain: Optional[str] = KeychainOption,
    verbose: bool = VerboseOption,
):
    """
    Add a certificate to the trusted root store.
    """
    try:
        build_store(platform, cert_dir, keychain, verbose).install(cert)
    except CertStoreError as e:
        _fail(e)
    typer.echo(f"Installed {cert}")


@app.command()
def delete(
    cert: str = typer.Argument(..., help="Certificate file (PEM or DER)"),
    platform: Optional[str] = PlatformOption,
    cert_dir: Optional[Path] = CertDirOption,
    keychain: Optional[str] = KeychainOption,
    verbose: bool = VerboseOption,
):
    """
    Remove a certificate from the trusted root store.
    """
    try:
        build_store(platform, cert_dir, keychain, verbose).delete(cert)
    except CertStoreError as e:
        _fail(e)
    typer.echo(f"Deleted {cert}")


@app.command()
def status(
    cert: str = typer.Argument(..., help="Certificate file (PEM or DER)"),
    platform: Optional[str] = PlatformOption,
    cert_dir: Optional[Path] = CertDirOption,
    keychain: Optional[str] = KeychainOption,
    verbose: bool = VerboseOption,
):
    """
    Check whether a certificate is in the trusted root store. Exits 1 if not.
    """
    try:
        installed = build_store(platform, cert_dir, keychain, verbose).is_installed(cert)
    except CertStoreError as e:
        _fail(e)
    typer.echo("installed" if installed else "not installed")
    raise typer.Exit(code=0 if installed else 1)


if __name__ == "__main__":
    app()
