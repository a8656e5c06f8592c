"""Tests for the command line interface."""

import os
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from cert_store.cli import app


@pytest.fixture
def cli():
    return CliRunner()


@pytest.fixture
def fake_runner(runner):
    with patch("cert_store.store.CommandRunner", return_value=runner):
        yield runner


def test_install_and_status(cli, fake_runner, cert_file, tmp_path):
    cert_dir = str(tmp_path / "extra")

    result = cli.invoke(app, ["install", cert_file, "--platform", "linux", "--cert-dir", cert_dir])
    assert result.exit_code == 0, result.output
    assert os.listdir(cert_dir) == ["my-ca.crt"]
    assert fake_runner.commands == [["update-ca-certificates"]]

    result = cli.invoke(app, ["status", cert_file, "--platform", "linux", "--cert-dir", cert_dir])
    assert result.exit_code == 0
    assert "installed" in result.output

    result = cli.invoke(app, ["delete", cert_file, "--platform", "linux", "--cert-dir", cert_dir])
    assert result.exit_code == 0
    assert os.listdir(cert_dir) == []

    result = cli.invoke(app, ["status", cert_file, "--platform", "linux", "--cert-dir", cert_dir])
    assert result.exit_code == 1
    assert "not installed" in result.output


def test_windows_status(cli, fake_runner, cert_file):
    fake_runner.fail[("certutil", "-verifystore")] = 1
    result = cli.invoke(app, ["status", cert_file, "--platform", "windows"])
    assert result.exit_code == 1
    assert fake_runner.commands[0][:4] == ["certutil", "-verifystore", "-user", "root"]


def test_install_failure(cli, fake_runner, cert_file):
    fake_runner.fail["certutil"] = 1
    result = cli.invoke(app, ["install", cert_file, "--platform", "windows"])
    assert result.exit_code == 2


def test_missing_file(cli, fake_runner, tmp_path):
    result = cli.invoke(app, ["install", str(tmp_path / "missing.crt"), "--platform", "linux", "--cert-dir", str(tmp_path)])
    assert result.exit_code == 2
    assert fake_runner.calls == []


def test_unknown_platform(cli, fake_runner, cert_file):
    result = cli.invoke(app, ["status", cert_file, "--platform", "beos"])
    assert result.exit_code == 2
