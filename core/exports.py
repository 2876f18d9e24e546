"""Excel / PDF exports and the Excel catalog import."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from io import BytesIO
from typing import List, Optional

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table as XlTable, TableStyleInfo as XlTableStyleInfo
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core import services
from core.constants import CATEGORIES
from core.errors import StaleStock
from core.models import Variety
from core.services import DBConnection
from core.stock import set_stock

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ["Name", "Category", "Stock", "Cost", "Selling Price"]

# Header aliases accepted on import (lower-cased)
_IMPORT_ALIASES = {
    "name": "name",
    "variety": "name",
    "category": "category",
    "stock": "stock",
    "cost": "cost",
    "price": "selling_price",
    "selling price": "selling_price",
    "selling_price": "selling_price",
}


def catalog_frame(varieties: pd.DataFrame) -> pd.DataFrame:
    """Catalog DataFrame with friendly column names, ready for export."""
    cols = ["name", "category", "stock", "cost", "selling_price"]
    out = varieties.copy()
    for c in cols:
        if c not in out.columns:
            out[c] = ""
    return out[cols].rename(columns=dict(zip(cols, CATALOG_COLUMNS)))


def to_excel_bytes(df: pd.DataFrame, sheet_name: str = "varieties", table_name: str = "VarietiesExport") -> bytes:
    """Write ``df`` to an .xlsx with a styled table over the data range."""
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        ws = writer.sheets[sheet_name]
        max_col = len(df.columns)
        max_row = max(len(df), 1) + 1
        if max_col:
            last_col = get_column_letter(max_col)
            table = XlTable(displayName=table_name, ref=f"A1:{last_col}{max_row}")
            table.tableStyleInfo = XlTableStyleInfo(
                name="TableStyleMedium9",
                showFirstColumn=False,
                showLastColumn=False,
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(table)
            for idx, col_name in enumerate(df.columns, start=1):
                ws.column_dimensions[get_column_letter(idx)].width = max(12, len(str(col_name)) + 2)
    return buf.getvalue()


def to_pdf_bytes(df: pd.DataFrame, title: Optional[str] = None) -> bytes:
    """Render ``df`` as a single landscape PDF table."""
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(letter))
    story = []
    if title:
        story.append(Paragraph(title, getSampleStyleSheet()["Heading2"]))
        story.append(Spacer(1, 12))
    data = [list(map(str, df.columns))] + df.fillna("").astype(str).values.tolist()
    table = Table(data)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    story.append(table)
    doc.build(story)
    return buf.getvalue()


def parse_catalog_upload(df: pd.DataFrame) -> tuple[List[Variety], List[str]]:
    """Turn an uploaded sheet into varieties.

    Returns ``(varieties, errors)``; rows with problems are skipped and
    described in ``errors`` (1-based sheet row numbers, header is row 1).
    """
    renamed = df.rename(columns={c: _IMPORT_ALIASES.get(str(c).strip().lower(), str(c)) for c in df.columns})
    missing = [c for c in ("name", "category") if c not in renamed.columns]
    if missing:
        return [], [f"Missing required column(s): {', '.join(missing)}"]

    varieties: List[Variety] = []
    errors: List[str] = []
    for idx, row in enumerate(renamed.to_dict("records"), start=2):
        name = str(row.get("name") or "").strip()
        if not name or name.lower() == "nan":
            continue
        category = str(row.get("category") or "").strip().upper()
        if category not in CATEGORIES:
            errors.append(f"Row {idx}: unknown category '{row.get('category')}'")
            continue
        try:
            varieties.append(
                Variety(
                    id=None,
                    name=name,
                    category=category,
                    stock=int(_number(row.get("stock"))),
                    cost=float(_number(row.get("cost"))),
                    selling_price=float(_number(row.get("selling_price"))),
                )
            )
        except ValueError as e:
            errors.append(f"Row {idx}: {e}")
    return varieties, errors


def _number(value) -> float:
    if value is None or (isinstance(value, float) and pd.isna(value)) or str(value).strip() == "":
        return 0
    return float(value)


@dataclass
class ImportResult:
    added: int = 0
    updated: int = 0
    stale: List[str] = field(default_factory=list)
    error: Optional[str] = None


def import_catalog(conn: DBConnection, varieties: List[Variety]) -> ImportResult:
    """Add new names and update existing ones, row by row.

    Stock of an existing variety is only overwritten if it has not changed
    since it was read here; otherwise the name lands in ``stale``. The first
    unexpected failure stops the import and is reported in ``error``.
    """
    result = ImportResult()
    for variety in varieties:
        try:
            existing = services.find_variety_by_name(conn, variety.name)
            if existing is None:
                services.add_variety(conn, variety)
                result.added += 1
                continue
            services.update_variety(conn, replace(variety, id=existing.id))
            result.updated += 1
            set_stock(conn, replace(existing, name=variety.name), variety.stock, "import")
        except StaleStock:
            result.stale.append(variety.name)
        except Exception as e:
            logger.exception("Import stopped at %s", variety.name)
            result.error = f"{variety.name}: {e}"
            break
    logger.info("Catalog import: %s added, %s updated", result.added, result.updated)
    return result
