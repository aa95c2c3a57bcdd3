from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    Running ``python math_smash/__main__.py`` directly leaves the package
    undiscoverable; inserting its parent directory fixes the imports below.
    """
    repo_root_str = str(Path(__file__).resolve().parent.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m math_smash
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    _ensure_repo_root_on_path()
    from math_smash.app import run  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for running the quiz from the command line."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
