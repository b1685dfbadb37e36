#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path


def main() -> int:
    root = Path(__file__).resolve().parent
    src_dir = root / "src"
    sys.path.insert(0, str(src_dir))

    # `app` imports controllers/models/services as top-level packages from src/
    import app as gui_app  # type: ignore

    return gui_app.main()


if __name__ == "__main__":
    raise SystemExit(main())
