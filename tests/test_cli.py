"""
tests/test_cli.py -- The backoffice-secrets command.

Covers:
  - Prints ADMIN_PASSWORD_HASH that verifies against the typed password
  - Never prints the plaintext password
  - --with-keys adds 64-char hex JWT_SECRET / FORM_HMAC_SECRET usable by Settings
  - Short or mismatched passwords exit 1 with nothing on stdout
"""

from __future__ import annotations

import pytest

from auth import cli
from auth.tokens import is_bcrypt_hash, verify_password
from conftest import make_settings

PASSWORD = "correct-horse-battery-staple"


def _typed(monkeypatch, *answers: str) -> None:
    replies = iter(answers)
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt="": next(replies))


def _env_lines(text: str) -> dict[str, str]:
    return dict(line.split("=", 1) for line in text.splitlines() if "=" in line)


def test_prints_verifiable_hash(monkeypatch, capsys) -> None:
    _typed(monkeypatch, PASSWORD, PASSWORD)
    assert cli.main(["--rounds", "4"]) == 0

    out = capsys.readouterr().out
    env = _env_lines(out)
    assert set(env) == {"ADMIN_PASSWORD_HASH"}
    assert is_bcrypt_hash(env["ADMIN_PASSWORD_HASH"])
    assert verify_password(PASSWORD, env["ADMIN_PASSWORD_HASH"])
    assert PASSWORD not in out


def test_with_keys_prints_usable_secrets(monkeypatch, capsys) -> None:
    _typed(monkeypatch, PASSWORD, PASSWORD)
    assert cli.main(["--rounds", "4", "--with-keys"]) == 0

    env = _env_lines(capsys.readouterr().out)
    assert len(env["JWT_SECRET"]) == 64
    assert env["JWT_SECRET"] != env["FORM_HMAC_SECRET"]
    settings = make_settings(
        admin_password_hash=env["ADMIN_PASSWORD_HASH"],
        jwt_secret=env["JWT_SECRET"],
        form_hmac_secret=env["FORM_HMAC_SECRET"],
    )
    assert settings.jwt_secret == env["JWT_SECRET"]


def test_short_password_rejected(monkeypatch, capsys) -> None:
    _typed(monkeypatch, "short")
    assert cli.main(["--rounds", "4"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "at least 8 characters" in captured.err


def test_mismatched_confirmation_rejected(monkeypatch, capsys) -> None:
    _typed(monkeypatch, PASSWORD, PASSWORD + "x")
    assert cli.main(["--rounds", "4"]) == 1
    assert capsys.readouterr().out == ""


def test_rounds_out_of_range(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--rounds", "2"])
