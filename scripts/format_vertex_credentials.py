"""Format a service-account JSON file for GOOGLE_VERTEX_AI_CREDENTIALS.

Validates the file the same way the app does at startup and prints a single
line suitable for a .env file.

Usage:
  uv run scripts/format_vertex_credentials.py path/to/service-account.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path so `app` package imports resolve
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.modules.ai.credentials import load_service_account_credentials
from app.modules.ai.errors import ConfigurationError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", help="Path to the service-account JSON file")
    args = parser.parse_args(argv)

    path = Path(args.path).resolve()
    try:
        info = load_service_account_credentials(str(path))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    formatted = json.dumps(info.model_dump(), separators=(",", ":"))
    print("Copy this into your .env file:\n")
    print(f"GOOGLE_VERTEX_AI_CREDENTIALS='{formatted}'\n")
    print("Keep the single quotes so the JSON double quotes survive.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
