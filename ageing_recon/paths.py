from __future__ import annotations

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
RECON_ROOT = BASE_DIR / "ageing_recon"
RECON_REPORTS_DIR = RECON_ROOT / "reports"
