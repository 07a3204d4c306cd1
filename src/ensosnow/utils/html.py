"""HTML table extraction helpers.

Tables are located by what their header row says rather than by their
position on the page, so a page layout change raises
SourceSchemaChangedError instead of silently reading the wrong table.
"""

import re
from typing import Callable

from bs4 import BeautifulSoup, Tag

from ensosnow.exceptions import SourceSchemaChangedError

# A row predicate receives the row's cell texts
RowPredicate = Callable[[list[str]], bool]


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "lxml")


def clean_text(text: str) -> str:
    """Collapse internal whitespace (including non-breaking spaces)."""
    return re.sub(r"\s+", " ", text.replace("\xa0", " ")).strip()


def table_rows(table: Tag) -> list[list[str]]:
    """Extract a table's rows as lists of cell texts.

    Cells spanning several columns are repeated once per column. Rows of
    tables nested inside this one are skipped.
    """
    rows = []
    for tr in table.find_all("tr"):
        if tr.find_parent("table") is not table:
            continue

        cells = []
        for cell in tr.find_all(["td", "th"]):
            if cell.find_parent("tr") is not tr:
                continue
            text = clean_text(cell.get_text(" "))
            try:
                span = int(cell.get("colspan", 1))
            except (TypeError, ValueError):
                span = 1
            cells.extend([text] * max(span, 1))
        if cells:
            rows.append(cells)
    return rows


def find_table(
    soup: BeautifulSoup,
    is_header: RowPredicate,
    description: str,
) -> tuple[list[str], list[list[str]]]:
    """Find the first table containing a row that matches is_header.

    Args:
        soup: Parsed page
        is_header: Predicate identifying the header row
        description: Human-readable table name for the error message

    Returns:
        Tuple of (header cells, rows following the header)

    Raises:
        SourceSchemaChangedError: If no table has a matching header row
    """
    for table in soup.find_all("table"):
        rows = table_rows(table)
        for i, row in enumerate(rows):
            if is_header(row):
                return row, rows[i + 1:]

    raise SourceSchemaChangedError(
        f"Could not find the {description} table "
        f"(searched {len(soup.find_all('table'))} tables)"
    )
