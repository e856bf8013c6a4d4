"""Env/CLI config parsing and defaults for reconciliation runs."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional

from ageing_recon.load_env import load_env_file
from ageing_recon.paths import RECON_REPORTS_DIR
from ageing_recon.reconciliation.matcher import AMOUNT_TOLERANCE, DATE_TOLERANCE_DAYS
from ageing_recon.reconciliation.normalize import parse_iso_date

DATE_CONVENTION_DMY = "DMY"
DATE_CONVENTION_MDY = "MDY"
DEFAULT_LOG_LEVEL = "INFO"

_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ReconciliationConfig:
    """Configuration for one ageing/ledger reconciliation run."""

    report_date: date  # ages are measured from this date, never "today"
    day_first: bool = True  # DD/MM/YYYY (False: MM/DD/YYYY)
    strict_dates: bool = False  # reject dates where day and month could swap
    amount_tolerance: float = AMOUNT_TOLERANCE
    date_tolerance_days: int = DATE_TOLERANCE_DAYS
    out_dir: Path = RECON_REPORTS_DIR
    sheet_name: Optional[str] = None

    @property
    def date_convention(self) -> str:
        return DATE_CONVENTION_DMY if self.day_first else DATE_CONVENTION_MDY

    def output_dir_for(self, run_label: str) -> Path:
        """Output folder for this run: out_dir / <run_label> / <report_date>."""
        return Path(self.out_dir) / run_label / self.report_date.isoformat()


def _read_float_env(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    return value


def _read_int_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    return value


def _read_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def parse_date_convention(value: Optional[str]) -> bool:
    """'DMY' -> day_first True, 'MDY' -> False. Anything else is an error."""
    text = (value or DATE_CONVENTION_DMY).strip().upper()
    if text == DATE_CONVENTION_DMY:
        return True
    if text == DATE_CONVENTION_MDY:
        return False
    raise ValueError(f"Invalid date convention: {value!r} (expected DMY or MDY)")


def parse_report_date(value: Any) -> date:
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(
            "A report date is required (YYYY-MM-DD). Pass --report-date or set RECON_REPORT_DATE."
        )
    return parsed


def load_reconciliation_config(
    report_date: Optional[str] = None,
    date_convention: Optional[str] = None,
    strict_dates: Optional[bool] = None,
    amount_tolerance: Optional[float] = None,
    date_tolerance_days: Optional[int] = None,
    out_dir: Optional[Path] = None,
    sheet_name: Optional[str] = None,
) -> ReconciliationConfig:
    """
    Build config from `.env` + RECON_* environment variables; explicit arguments win.
    """
    load_env_file()
    return ReconciliationConfig(
        report_date=parse_report_date(report_date or os.getenv("RECON_REPORT_DATE")),
        day_first=parse_date_convention(date_convention or os.getenv("RECON_DATE_CONVENTION")),
        strict_dates=(
            strict_dates if strict_dates is not None else _read_bool_env("RECON_STRICT_DATES", False)
        ),
        amount_tolerance=(
            float(amount_tolerance)
            if amount_tolerance is not None
            else _read_float_env("RECON_AMOUNT_TOLERANCE", AMOUNT_TOLERANCE)
        ),
        date_tolerance_days=(
            int(date_tolerance_days)
            if date_tolerance_days is not None
            else _read_int_env("RECON_DATE_TOLERANCE_DAYS", DATE_TOLERANCE_DAYS)
        ),
        out_dir=(
            Path(out_dir).resolve()
            if out_dir is not None
            else Path(os.getenv("RECON_OUT_DIR") or RECON_REPORTS_DIR).resolve()
        ),
        sheet_name=sheet_name,
    )


def _normalize_log_level(raw_level: Optional[str]) -> str:
    level = (raw_level or DEFAULT_LOG_LEVEL).strip().upper()
    if level in _VALID_LOG_LEVELS:
        return level
    return DEFAULT_LOG_LEVEL


def resolve_logging_level(name: Optional[str] = None) -> int:
    if name is None:
        name = os.getenv("RECON_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    return getattr(logging, _normalize_log_level(name), logging.INFO)


def configure_logging(level_name: Optional[str] = None) -> None:
    logging.basicConfig(
        level=resolve_logging_level(level_name),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
