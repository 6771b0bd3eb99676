"""
palsort 用の「I/Oまわり」共通部品（toolkit）

ここに置くもの：
- logger構成、.env読み取り、bool変換、JSON設定の読み込み、行ファイルの保存
- どのツールから呼んでも同じ意味になるものだけ

ツール固有の引数名・環境変数名・出力形式は palsort 側で持つ。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Iterable, Iterator, TextIO

LOG_FORMAT = "[%(levelname)s] %(message)s"

_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})
_QUOTES = ('"', "'")


def parse_provided_options(argv: list[str] | None) -> set[str]:
    """
    CLI で明示された --option の集合を返す。

    - `--out=x` は `--out` として数える
    - 単独の `--` より後ろは位置引数なので見ない（`-- --weird-name.txt` のようなパス）
    """
    provided: set[str] = set()
    for token in argv or []:
        if token == "--":
            break
        if token.startswith("--"):
            name, _, _ = token.partition("=")
            provided.add(name)
    return provided


def parse_bool(value: str, default: bool = False) -> bool:
    """env 文字列を bool にする。どちらとも読めない値は default。"""
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return default


def _iter_env_pairs(text: str) -> Iterator[tuple[str, str]]:
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").lstrip()
        key, sep, val = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        val = val.strip()
        if len(val) >= 2 and val[0] == val[-1] and val[0] in _QUOTES:
            val = val[1:-1]
        yield key, val


def load_env_file(path: Path, logger: logging.Logger) -> dict[str, str]:
    """
    .env 形式（KEY=VALUE）を読む。

    - 空行/コメント(#...)は無視
    - `export KEY=VALUE` を許容
    - 値の前後のクォート（' "）は剥がす
    - `=` を含まない行、キーが空の行は無視（壊れた行で落とさない）
    - 同じキーが複数回あれば後勝ち
    """
    try:
        text = path.read_text(encoding="utf-8")
    except Exception as exc:
        logger.error("env file load failed: %s (%s)", path, exc)
        return {}

    env = dict(_iter_env_pairs(text))
    logger.info("env file loaded: %s (%d keys)", path, len(env))
    return env


def get_env(name: str, env_file: dict[str, str]) -> str | None:
    """環境変数取得。.env（--env-file）> OS環境変数。空文字は未設定扱い。"""
    for source in (env_file, os.environ):
        v = source.get(name)
        if v:
            return v
    return None


def load_json_config(path: Path, logger: logging.Logger) -> dict[str, Any]:
    """
    JSON設定ファイルを読む。

    読めない・壊れている・オブジェクトでない場合は空dictを返す
    （設定は最下位の優先度なので、無くても処理は続けられる）。
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:
        logger.error("config load failed: %s (%s)", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.error("config must be a JSON object: %s", path)
        return {}
    return data


def setup_logger(name: str, verbose: bool, stream: TextIO | None = None) -> logging.Logger:
    """
    stderr（または stream）に出す logger を構成する。

    stdout は結果（並べ替えたレコード / JSON）専用にしておく。
    何度呼んでもハンドラは1つ（verbose を決め直すたびに作り直すため）。
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    logger.propagate = False

    for old in list(logger.handlers):
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def write_lines_file(path: Path, lines: Iterable[str], logger: logging.Logger) -> bool:
    """
    行の列を改行付きでファイルに書く。

    失敗したら logger.error を出して False（終了コードは呼び出し側で決める）。
    """
    try:
        out_path = path.expanduser().resolve()
        out_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        logger.info("output written to %s", out_path)
        return True
    except Exception as exc:
        logger.error("failed to write output to %s: %s", path, exc)
        return False
