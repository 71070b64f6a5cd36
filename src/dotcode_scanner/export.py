"""Report export: one CSV row per scanned code, stamped with session metadata."""

from __future__ import annotations

from collections.abc import Sequence
import csv
import dataclasses
import datetime
import logging
from pathlib import Path
import re

import pandas as pd

from dotcode_scanner.core.exceptions import ExportError
from dotcode_scanner.core.types import AnalysisResult, ScannedItem

logger = logging.getLogger(__name__)

COLUMNS = (
    "Item Index",
    "Session Date",
    "City",
    "Supervisor Code",
    "Supervisor Name",
    "Variant Name",
    "DotCode",
    "MFD",
    "Price",
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[\\/]")


def _today() -> str:
    return datetime.date.today().isoformat()


@dataclasses.dataclass(frozen=True, slots=True)
class SessionInfo:
    """Who scanned what, where and when."""

    date: str = dataclasses.field(default_factory=_today)
    city: str = ""
    supervisor_code: str = ""
    supervisor_name: str = ""
    variant_name: str = ""


def build_report_frame(
    items: Sequence[ScannedItem], session: SessionInfo
) -> pd.DataFrame:
    """Build the report table, one row per item, indexed from 1."""
    rows = [
        {
            "Item Index": index,
            "Session Date": session.date,
            "City": session.city,
            "Supervisor Code": session.supervisor_code,
            "Supervisor Name": session.supervisor_name,
            "Variant Name": session.variant_name,
            "DotCode": item.dot_code,
            "MFD": item.manufacturing_date or "",
            "Price": item.price or "",
        }
        for index, item in enumerate(items, start=1)
    ]
    frame = pd.DataFrame(rows, columns=list(COLUMNS))
    text_columns = list(COLUMNS[1:])
    frame[text_columns] = frame[text_columns].fillna("").astype(str)
    return frame


def report_filename(session: SessionInfo) -> str:
    """Return ``{supervisor}_{variant}_{date}.csv`` with path separators removed."""
    name = f"{session.supervisor_name}_{session.variant_name}_{session.date}.csv"
    return _UNSAFE_FILENAME_CHARS.sub("-", name)


def render_csv(items: Sequence[ScannedItem], session: SessionInfo) -> str:
    """Render the report as CSV text.

    The header row is plain, text cells are always quoted (embedded quotes
    doubled), the item index is left bare and rows are joined with ``\\n``.
    """
    frame = build_report_frame(items, session)
    body = frame.to_csv(
        index=False,
        header=False,
        quoting=csv.QUOTE_NONNUMERIC,
        lineterminator="\n",
    )
    return "\n".join([",".join(COLUMNS), body.rstrip("\n")])


def export_report(
    result: AnalysisResult, session: SessionInfo, directory: str | Path
) -> Path:
    """Write the report for ``result`` into ``directory``.

    Returns:
        Path of the written file.

    Raises:
        ExportError: When there is nothing to export or the write fails.
    """
    if not result.items:
        raise ExportError("No items to export")

    target = Path(directory) / report_filename(session)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_csv(result.items, session), encoding="utf-8")
    except OSError as e:
        logger.error("Export error: %s", e)
        raise ExportError(f"An error occurred during export: {e}") from e

    logger.info("Exported %d items to %s", len(result.items), target)
    return target
