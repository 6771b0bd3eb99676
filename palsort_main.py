"""
palsort のエントリーポイント（薄いラッパー）

実装本体は `palsort.py`。テストはそちらを直接 import する。
"""

from __future__ import annotations

import sys


def run() -> None:
    from palsort import main

    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
