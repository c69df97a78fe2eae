"""Tests for the code CLI host adapter."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from vsixinstall.errors import HostQueryError, InstallError, Phase, describe_failure
from vsixinstall.host import CodeCliHost


@pytest.fixture
def run_command(monkeypatch):
    mock = AsyncMock(return_value=("", 0))
    monkeypatch.setattr("vsixinstall.host.run_command_async", mock)
    return mock


def test_list_installed_parses_lines(run_command):
    run_command.return_value = ("ms-python.python\n\nesbenp.prettier-vscode\n", 0)

    installed = asyncio.run(CodeCliHost().list_installed())

    assert installed == ["ms-python.python", "esbenp.prettier-vscode"]
    assert run_command.call_args.args[0] == "code --list-extensions"


def test_is_installed_ignores_case(run_command):
    run_command.return_value = ("MS-Python.Python", 0)
    host = CodeCliHost()

    assert asyncio.run(host.is_installed("ms-python.python")) is True
    assert asyncio.run(host.is_installed("ms-python.pylance")) is False


def test_list_failure_raises(run_command):
    run_command.return_value = ("code: command not found", 127)

    with pytest.raises(HostQueryError, match="command not found") as exc_info:
        asyncio.run(CodeCliHost().list_installed())
    assert exc_info.value.phase is Phase.HOST_QUERY


def test_installed_check_failure_names_identifier(run_command):
    run_command.return_value = ("code: command not found", 127)

    with pytest.raises(HostQueryError) as exc_info:
        asyncio.run(CodeCliHost().is_installed("pub.a"))

    assert exc_info.value.identifier == "pub.a"
    message = describe_failure(exc_info.value)
    assert message.startswith("Error: pub.a failed during host query:")


def test_install_quotes_path(run_command):
    host = CodeCliHost(code_command="code-insiders", install_timeout=42)

    asyncio.run(host.install_artifact(Path("/tmp/my plugins/pub.a-1.0.0.vsix")))

    command = run_command.call_args.args[0]
    assert command == "code-insiders --install-extension '/tmp/my plugins/pub.a-1.0.0.vsix'"
    assert run_command.call_args.kwargs["timeout"] == 42


def test_install_failure_carries_output(run_command):
    run_command.return_value = ("Corrupt ZIP: end of central directory record signature not found", 1)

    with pytest.raises(InstallError, match="Corrupt ZIP"):
        asyncio.run(CodeCliHost().install_artifact(Path("/tmp/a.vsix")))


def test_install_failure_without_output(run_command):
    run_command.return_value = ("", 2)

    with pytest.raises(InstallError, match="exited with 2"):
        asyncio.run(CodeCliHost().install_artifact(Path("/tmp/a.vsix")))
