# =============================================================================
# publi_core/data/sales_import.py
# Royalty Report Import (KDP monthly exports pasted as text)
# =============================================================================
"""
Turns pasted royalty lines into SaleRecords.

Expected cell order per line (tab- or comma-separated):

    Title  Month  Year  Units  KENP  Royalties  Currency  ASIN

Unknown titles become new catalogue entries, each audited in the history
log. The caller persists the returned snapshot with a single save.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import pandas as pd

from publi_core.data.models import AppData, Book, SaleRecord
from publi_core.logging import get_logger, LogContext
from publi_core.offline.document_store import log_action

logger = get_logger(__name__)

SALES_COLUMNS = ["title", "month", "year", "units", "kenpc", "revenue", "currency", "asin"]
HEADER_MARKERS = {"título", "title", "asin", "libro"}
DEFAULT_CURRENCY = "EUR"
DEFAULT_PLATFORM = "KDP"

# Leading number of a cell, so "12 uds" reads as 12 and "10.50 €" as 10.5
INT_PREFIX = r"^\s*([-+]?\d+)"
FLOAT_PREFIX = r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))"

# History action label used for books created by an import
ACTION_CREATED = "Creación"


@dataclass
class ImportSummary:
    """Result of applying a report to a snapshot."""
    data: AppData
    books_created: int = 0
    sales_added: int = 0
    rows_processed: int = 0

    @property
    def duplicates_skipped(self) -> int:
        return self.rows_processed - self.sales_added


def _split_lines(raw_text: str) -> List[List[str]]:
    delimiter = "\t" if "\t" in raw_text else ","
    rows = []
    for line in raw_text.strip().splitlines():
        cells = [cell.strip() for cell in line.split(delimiter)]
        if cells and cells[0].lower() in HEADER_MARKERS:
            continue
        if len(cells) < 3:
            continue
        rows.append((cells + [""] * len(SALES_COLUMNS))[:len(SALES_COLUMNS)])
    return rows


def _leading_number(series: pd.Series, pattern: str) -> pd.Series:
    """Numeric value of each cell's leading number ('12 uds' -> 12); 0 when absent."""
    found = series.astype(str).str.extract(pattern, expand=False)
    return pd.to_numeric(found, errors="coerce").fillna(0)


def _to_int(series: pd.Series) -> pd.Series:
    return _leading_number(series, INT_PREFIX).astype(int)


def parse_sales_report(raw_text: str, now: Optional[datetime] = None) -> pd.DataFrame:
    """
    Parse pasted royalty text.

    Header lines and lines with fewer than three cells are skipped.
    Subtitles (anything after the first ':') are dropped from titles.

    Args:
        raw_text: Text copied from a spreadsheet or CSV file
        now: Reference date for missing month/year

    Returns:
        DataFrame with SALES_COLUMNS plus ``platform``
    """
    now = now or datetime.now()
    rows = _split_lines(raw_text or "")
    if not rows:
        return pd.DataFrame(columns=SALES_COLUMNS + ["platform"])

    df = pd.DataFrame(rows, columns=SALES_COLUMNS)

    df["title"] = df["title"].replace("", "Untitled").str.split(":", n=1).str[0].str.strip()

    month = _to_int(df["month"])
    df["month"] = month.where(month != 0, now.month)
    year = _to_int(df["year"])
    df["year"] = year.where(year != 0, now.year)

    df["units"] = _to_int(df["units"])
    df["kenpc"] = _to_int(df["kenpc"])
    df["revenue"] = _leading_number(
        df["revenue"].str.replace(",", ".", n=1, regex=False), FLOAT_PREFIX
    ).astype(float)

    df["currency"] = df["currency"].replace("", DEFAULT_CURRENCY)
    df["platform"] = DEFAULT_PLATFORM

    logger.debug(f"Parsed {len(df)} royalty rows")
    return df


def _find_book(doc: AppData, title: str, asin: str) -> Optional[Book]:
    wanted = title.strip().lower()
    for book in doc.books:
        if asin and book.asin == asin:
            return book
        if book.title.strip().lower() == wanted:
            return book
    return None


def _is_duplicate(doc: AppData, book_id: str, row) -> bool:
    return any(
        sale.book_id == book_id
        and sale.month == row.month
        and sale.year == row.year
        and sale.platform == row.platform
        and sale.currency == row.currency
        and sale.revenue == row.revenue
        for sale in doc.sales
    )


def apply_sales_import(
    doc: AppData,
    rows: pd.DataFrame,
    now: Optional[datetime] = None,
) -> ImportSummary:
    """
    Merge parsed royalty rows into a copy of ``doc``.

    Books are matched by ASIN, then by case-insensitive title. Missing books
    are created (and logged as ``Creación``); a matched book without an ASIN
    receives the report's. Sales identical to an existing record are skipped.
    """
    now = now or datetime.now()
    stamp = int(now.timestamp() * 1000)
    current = doc.copy()
    summary = ImportSummary(data=current, rows_processed=len(rows))

    with LogContext(logger, f"Importing {len(rows)} royalty rows"):
        for i, row in enumerate(rows.itertuples(index=False)):
            asin = (row.asin or "").strip()
            book = _find_book(current, row.title, asin)

            if book is None:
                book = Book(
                    id=f"b-imp-{stamp}-{i}-{uuid.uuid4().hex[:4]}",
                    title=row.title,
                    asin=asin,
                    pseudonym_id=current.pseudonyms[0].id if current.pseudonyms else "p1",
                    imprint_id=current.imprints[0].id if current.imprints else "1",
                    description="Imported from a royalty report (subtitle removed).",
                    platforms=[DEFAULT_PLATFORM],
                    formats=["Ebook"],
                    price=0,
                    release_date=now.isoformat(),
                    status="Published",
                    kindle_unlimited=bool(row.kenpc > 0),
                )
                current.books.append(book)
                summary.books_created += 1
                current = log_action(
                    book.id,
                    book.title,
                    ACTION_CREATED,
                    "Book created automatically during a royalty import.",
                    current,
                )
                book = current.books[-1]
            elif asin and not book.asin:
                book.asin = asin

            if _is_duplicate(current, book.id, row):
                continue

            current.sales.append(
                SaleRecord(
                    id=f"sale-imp-{stamp}-{i}",
                    book_id=book.id,
                    year=int(row.year),
                    month=int(row.month),
                    units=int(row.units),
                    kenpc=int(row.kenpc),
                    revenue=float(row.revenue),
                    platform=row.platform,
                    currency=row.currency,
                )
            )
            summary.sales_added += 1

    summary.data = current
    logger.info(
        f"Royalty import: {summary.books_created} books created, "
        f"{summary.sales_added} sales added, {summary.duplicates_skipped} skipped"
    )
    return summary
