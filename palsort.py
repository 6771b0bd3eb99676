"""
palsort: `;` 区切りのパリンドローム記録を left 昇順に並べ替えるツール

このツールがやること：
- ファイルを1行ずつ読み、`left;right;size;rate` の4つの整数に分解する
- left（先頭フィールド）だけをキーに昇順ソートする
- 同じ `;` 区切りの形で stdout に書き戻す

整数の解釈は「ゆるい」：
- 数字で始まらないフィールドは 0 になる（例: `5;x;1;1` -> `5;0;1;1`）
- 数字の後ろのゴミは無視する（例: `12abc` -> 12）
- フィールドが4つに満たない行も落とさず、足りない分は 0 で埋める
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator

import toolkit

LOGGER_NAME = "palsort"

FIELD_SEPARATOR = ";"
FIELD_COUNT = 4


# -------------------------
# データモデル（DTO）
# -------------------------


@dataclass(frozen=True)
class Record:
    """1行ぶんのパリンドローム記録。フィールドに意味の制約はなく、並び順だけが決まり。"""

    left: int
    right: int
    size: int
    rate: int


@dataclass(frozen=True)
class SortReport:
    """
    並べ替え結果DTO。

    - path: 表示用の入力パス
    - records: left 昇順に並んだ Record
    """

    path: str
    records: list[Record]


# -------------------------
# 行の解釈（副作用なし）
# -------------------------

# 先頭の空白・符号・数字列（`1_000` のような区切りも許容）だけを拾う。全角数字は数字扱いしない
_LEADING_INT_RE = re.compile(r"^\s*(?P<num>[+-]?\d+(?:_\d+)*)", re.ASCII)


def lenient_int(token: str) -> int:
    """
    トークンを整数にする。数字で始まらなければ 0（例外は出さない）。

    >>> lenient_int("42")
    42
    >>> lenient_int("12abc")
    12
    >>> lenient_int("abc")
    0
    """
    m = _LEADING_INT_RE.match(token)
    if not m:
        return 0
    return int(m.group("num"))


def parse_line(line: str) -> Record:
    """
    1行を Record にする。

    - `;` で分割して先頭4つだけ使う（5つ目以降は無視）
    - 足りないフィールドは 0
    - 空行も (0, 0, 0, 0) として1件に数える（入力行数 = 出力行数）
    """
    tokens = line.rstrip("\r\n").split(FIELD_SEPARATOR)[:FIELD_COUNT]
    values = [lenient_int(t) for t in tokens]
    values += [0] * (FIELD_COUNT - len(values))
    return Record(*values)


def iter_records(lines: Iterable[str]) -> Iterator[Record]:
    """行の列から Record を入力順に yield する。"""
    for line in lines:
        yield parse_line(line)


def sort_records(records: Iterable[Record]) -> list[Record]:
    """left だけをキーに昇順ソートする。left が同じものどうしの順序は問わない。"""
    return sorted(records, key=lambda r: r.left)


def format_record(record: Record) -> str:
    return FIELD_SEPARATOR.join(str(v) for v in (record.left, record.right, record.size, record.rate))


def build_json_payload(report: SortReport) -> dict[str, Any]:
    return {
        "path": report.path,
        "count": len(report.records),
        "records": [asdict(r) for r in report.records],
    }


# -------------------------
# 入力（I/O境界）
# -------------------------


def load_records(path: Path, logger: logging.Logger) -> list[Record]:
    """
    ファイルを開いて全行を Record にする。

    開けない・読めない場合の OSError はそのまま上に投げる
    （何も出力せずに終了させるのは main の責務）。
    """
    logger.info("read start: path=%s", path)
    with path.open("r", encoding="utf-8", errors="replace", newline="\n") as fp:
        records = list(iter_records(fp))
    logger.info("read done: records=%d", len(records))
    return records


# -------------------------
# CLI / 設定
# -------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sort semicolon-delimited palindrome records (left;right;size;rate) by the first field."
    )
    parser.add_argument("path", type=Path, help="入力ファイルのパス（1行1レコード、`;` 区切り）")
    parser.add_argument("--json", action="store_true", help="並べ替え結果をJSON形式で出力する")
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="並べ替えた `;` 区切りの行をファイルにも保存する（stdoutはそのまま）",
    )
    parser.add_argument("--verbose", action="store_true", help="処理中の詳細ログをstderrに表示する")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file path (e.g., palsort.json). CLI args override config.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from a .env file before processing (e.g., .env).",
    )
    return parser.parse_args(argv)


def apply_config(args: argparse.Namespace, cfg: dict[str, Any], provided: set[str], logger: logging.Logger) -> None:
    """
    config の値を args に反映する。CLI で明示された項目は上書きしない。

    入力パスは CLI 専用なので config からは受け取らない。
    """
    if "--out" not in provided and "out" in cfg:
        args.out = Path(str(cfg["out"]))
    if "--json" not in provided and "json" in cfg:
        args.json = bool(cfg["json"])
    if "--verbose" not in provided and "verbose" in cfg:
        args.verbose = bool(cfg["verbose"])

    logger.info("config applied (CLI overrides config)")


def apply_env(args: argparse.Namespace, env_file: dict[str, str], provided: set[str], logger: logging.Logger) -> None:
    """
    env の値を args に反映する（CLI > env > config）。

    対応する環境変数：PALSORT_OUT, PALSORT_JSON, PALSORT_VERBOSE
    （PALSORT_CONFIG は config を読む前に resolve_effective_args で見る）
    """
    if "--out" not in provided:
        v = toolkit.get_env("PALSORT_OUT", env_file)
        if v:
            args.out = Path(v)
    if "--json" not in provided:
        v = toolkit.get_env("PALSORT_JSON", env_file)
        if v is not None:
            args.json = toolkit.parse_bool(v)
    if "--verbose" not in provided:
        v = toolkit.get_env("PALSORT_VERBOSE", env_file)
        if v is not None:
            args.verbose = toolkit.parse_bool(v)

    logger.info("env applied (CLI overrides env)")


def resolve_effective_args(argv: list[str] | None) -> tuple[argparse.Namespace, logging.Logger]:
    """CLI/env/config を統合して、最終的に使う args と logger を返す。"""
    args = parse_args(argv)
    provided = toolkit.parse_provided_options(argv)

    # verbose は env/config で変わりうるので、暫定 logger を後で作り直す
    logger = toolkit.setup_logger(LOGGER_NAME, args.verbose)

    env_file: dict[str, str] = {}
    if args.env_file is not None:
        env_file = toolkit.load_env_file(args.env_file, logger)

    if args.config is None and "--config" not in provided:
        v = toolkit.get_env("PALSORT_CONFIG", env_file)
        if v:
            args.config = Path(v)

    if args.config is not None:
        cfg = toolkit.load_json_config(args.config, logger)
        apply_config(args, cfg, provided, logger)

    apply_env(args, env_file, provided, logger)

    logger = toolkit.setup_logger(LOGGER_NAME, args.verbose)
    return args, logger


def validate_args(args: argparse.Namespace) -> int:
    """入力検証。失敗したら終了コード 2 を返す。"""
    p: Path = args.path.expanduser()
    if not p.exists():
        print(f"Error: 指定されたパスが存在しません: {p}", file=sys.stderr)
        return 2
    if not p.is_file():
        print(f"Error: 指定されたパスはファイルではありません: {p}", file=sys.stderr)
        return 2
    return 0


@contextmanager
def unlimited_int_digits() -> Iterator[None]:
    """
    整数 <-> 文字列変換の桁数上限（3.11+ の既定は 4300 桁）を一時的に外す。

    巨大な数字列のフィールドでも読み書きで落ちないようにする。抜けたら元の上限に戻す。
    """
    if not hasattr(sys, "set_int_max_str_digits"):
        yield
        return
    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(0)
    try:
        yield
    finally:
        sys.set_int_max_str_digits(previous)


def main(argv: list[str] | None = None) -> int:
    """
    実行入口（テストからも呼べる形）。

    1) resolve_effective_args / validate_args（入力）
    2) load_records → sort_records（実処理）
    3) stdout / --out（副作用）

    読み込みに失敗したら stdout には何も書かずに 1 を返す。
    """
    args, logger = resolve_effective_args(argv)

    rc = validate_args(args)
    if rc != 0:
        return rc

    path: Path = args.path.expanduser()
    with unlimited_int_digits():
        try:
            records = load_records(path, logger)
        except OSError as exc:
            logger.error("failed to read input: %s (%s)", path, exc)
            return 1

        report = SortReport(path=str(path), records=sort_records(records))
        lines = [format_record(r) for r in report.records]

        if args.json:
            print(json.dumps(build_json_payload(report), ensure_ascii=False, indent=2))
        else:
            for line in lines:
                print(line)

    if args.out is not None:
        ok = toolkit.write_lines_file(args.out, lines, logger)
        if not ok:
            return 1

    return 0
