"""Lightweight .env loader for script entrypoints."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ageing_recon.paths import BASE_DIR, RECON_ROOT


def _candidate_paths(env_file: str) -> list[Path]:
    return [
        RECON_ROOT / env_file,
        BASE_DIR / env_file,
    ]


def load_env_file(env_file: str = ".env", search: Optional[list[Path]] = None) -> Optional[Path]:
    """
    Load RECON_* (and any other) variables from `.env` without overriding the process environment.

    Search order:
    1) `ageing_recon/.env`
    2) repo-root `.env`

    Returns the file that was loaded, or None.
    """
    candidates = search if search is not None else _candidate_paths(env_file)
    env_path = next((path for path in candidates if path.exists()), None)
    if env_path is None:
        return None

    try:
        with open(env_path, "r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()
                if value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                elif value.startswith("'") and value.endswith("'"):
                    value = value[1:-1]

                if key and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        # Non-fatal: scripts still read the process environment.
        return None
    return env_path
