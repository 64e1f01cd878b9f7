"""
Table Materializer
Turns a run of pipe-delimited lines (Markdown-style pseudo-tables written by
the model) into rows of cell text.
"""

import re
from typing import List, Sequence

from acordao_drafter.models import TableBlock


# |---|:--:| and friends, whitespace allowed around each cell
SEPARATOR_ROW = re.compile(r'^\|(\s*:?-+:?\s*\|)+$')


def is_table_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith('|') and stripped.endswith('|')


def is_separator_row(line: str) -> bool:
    return bool(SEPARATOR_ROW.match(line.strip()))


def split_row(line: str) -> List[str]:
    """Strip one outer pipe on each side and split the rest into trimmed cells."""
    row = line.strip()
    if row.startswith('|'):
        row = row[1:]
    if row.endswith('|'):
        row = row[:-1]
    return [cell.strip() for cell in row.split('|')]


def materialize(lines: Sequence[str]) -> TableBlock:
    # Rows keep their own width; a model-written table is often jagged
    rows = [split_row(line) for line in lines if not is_separator_row(line)]
    return TableBlock(rows=rows)
