"""Tests for the command-line entry point."""

import io
import json
from urllib.parse import urlencode

import pytest

from initdata_verify.cli import check_payload, main
from initdata_verify.config import Config
from initdata_verify.web_auth import build_data_check_string, compute_signature


BOT_TOKEN = "123456:ABC-DEF1234ghIkl-zyx57W2v1u123ew11"


def _make_init_data(auth_date: int = 1700000000) -> str:
    params = {"user": json.dumps({"id": 7, "first_name": "Cli"}), "auth_date": str(auth_date)}
    params["hash"] = compute_signature(BOT_TOKEN, build_data_check_string(params))
    return urlencode(params)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(f"[TELEGRAM]\nbot_token = {BOT_TOKEN}\nexpires_in = 60\n")
    return path


class TestCheckPayload:
    def test_valid(self, capsys):
        code = check_payload(Config(bot_token=BOT_TOKEN), _make_init_data(), None)
        assert code == 0
        out = json.loads(capsys.readouterr().out)
        assert out["user"]["id"] == 7
        assert out["auth_date"] == 1700000000

    def test_trailing_newline_ignored(self, capsys):
        code = check_payload(Config(bot_token=BOT_TOKEN), _make_init_data() + "\n", None)
        assert code == 0

    def test_invalid(self, capsys):
        code = check_payload(Config(bot_token="other:token"), _make_init_data(), None)
        assert code == 1
        assert capsys.readouterr().out.startswith("[Auth] hash_mismatch:")


class TestMain:
    def test_check_uses_configured_expiry(self, config_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-c", str(config_file), "--check", _make_init_data()])
        assert exc.value.code == 1
        assert "[Auth] expired:" in capsys.readouterr().out

    def test_expires_in_override(self, config_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-c", str(config_file), "--check", _make_init_data(),
                  "--expires-in", str(10 ** 12)])
        assert exc.value.code == 0

    def test_check_from_stdin(self, config_file, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(_make_init_data() + "\n"))
        with pytest.raises(SystemExit) as exc:
            main(["-c", str(config_file), "--check", "-", "--expires-in", str(10 ** 12)])
        assert exc.value.code == 0
        assert json.loads(capsys.readouterr().out)["user"]["first_name"] == "Cli"

    def test_missing_config(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["-c", str(tmp_path / "nope.ini"), "--check", "x"])
        assert exc.value.code == 2
