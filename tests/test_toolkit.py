"""
toolkit のテスト（設定まわりの壊れやすいところだけ）。
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest

import toolkit


def test_parse_bool_truthy_and_falsey() -> None:
    assert toolkit.parse_bool("1") is True
    assert toolkit.parse_bool("YES") is True
    assert toolkit.parse_bool("on") is True

    assert toolkit.parse_bool("0") is False
    assert toolkit.parse_bool("No") is False
    assert toolkit.parse_bool("off") is False

    assert toolkit.parse_bool("maybe") is False
    assert toolkit.parse_bool("maybe", default=True) is True


def test_parse_provided_options_handles_equals_form() -> None:
    assert toolkit.parse_provided_options(["x.txt", "--out=y.txt", "--json"]) == {"--out", "--json"}
    assert toolkit.parse_provided_options(None) == set()
    assert toolkit.parse_provided_options(["--json", "--", "--out.txt"]) == {"--json"}


def test_load_env_file_parses_key_value_and_ignores_comments(tmp_path: Path) -> None:
    # テスト意図：よくある .env の書き方で、壊れずに値が取れることを確認する
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# comment",
                "",
                "export PALSORT_JSON=true",
                'PALSORT_OUT="out.txt"',
                "NO_EQUAL_SIGN",
            ]
        ),
        encoding="utf-8",
    )

    env = toolkit.load_env_file(env_path, toolkit.setup_logger("test", False))

    assert env["PALSORT_JSON"] == "true"
    assert env["PALSORT_OUT"] == "out.txt"
    assert "NO_EQUAL_SIGN" not in env


def test_get_env_prefers_env_file_over_os_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PALSORT_OUT", "from_os.txt")

    assert toolkit.get_env("PALSORT_OUT", {"PALSORT_OUT": "from_file.txt"}) == "from_file.txt"
    assert toolkit.get_env("PALSORT_OUT", {}) == "from_os.txt"


def test_load_json_config_rejects_non_object(tmp_path: Path) -> None:
    logger = toolkit.setup_logger("test", False)
    cfg_path = tmp_path / "cfg.json"

    cfg_path.write_text("[1, 2]", encoding="utf-8")
    assert toolkit.load_json_config(cfg_path, logger) == {}

    cfg_path.write_text("{not json", encoding="utf-8")
    assert toolkit.load_json_config(cfg_path, logger) == {}

    assert toolkit.load_json_config(tmp_path / "missing.json", logger) == {}


def test_write_lines_file_reports_failure(tmp_path: Path) -> None:
    logger = toolkit.setup_logger("test", False)

    assert toolkit.write_lines_file(tmp_path / "ok.txt", ["a", "b"], logger) is True
    assert (tmp_path / "ok.txt").read_text(encoding="utf-8") == "a\nb\n"

    assert toolkit.write_lines_file(tmp_path / "no_such_dir" / "x.txt", ["a"], logger) is False


def test_setup_logger_keeps_single_handler_and_respects_verbose() -> None:
    # テスト意図：作り直しても出力が二重にならず、verbose=False なら INFO は出ない
    buf = io.StringIO()
    toolkit.setup_logger("palsort-test", True, stream=buf)
    logger = toolkit.setup_logger("palsort-test", False, stream=buf)

    logger.info("hidden")
    logger.warning("shown")

    assert len(logger.handlers) == 1
    assert buf.getvalue() == "[WARNING] shown\n"
