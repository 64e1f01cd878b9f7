"""
Content Segmenter

Splits a block of extracted text into paragraphs and tables:
- hard-wrapped lines are joined back into one sentence/paragraph
- a blank line always closes the current paragraph
- numbered, lettered and bulleted lines start their own paragraph
- runs of |...| lines become tables (see table_materializer)
"""

import re
from typing import List

from acordao_drafter.models import BlockElement, Paragraph
from acordao_drafter.utils.table_materializer import is_table_line, materialize


LIST_ITEM = re.compile(r'^(\d+[.)]|[A-Za-z][.)]|[-*•])\s')
LINE_BREAK = re.compile(r'\r?\n')


def is_list_item(line: str) -> bool:
    return bool(LIST_ITEM.match(line.strip()))


class ContentSegmenter:
    """Single-pass segmenter; one instance per text."""

    def __init__(self):
        self.blocks: List[BlockElement] = []
        self._text_lines: List[str] = []
        self._table_lines: List[str] = []

    def feed(self, line: str):
        if is_table_line(line):
            self._flush_text()
            self._table_lines.append(line)
            return

        self._flush_table()
        stripped = line.strip()

        if not stripped:
            self._flush_text()
            return

        if is_list_item(stripped) and self._text_lines:
            self._flush_text()
        self._text_lines.append(stripped)

    def close(self) -> List[BlockElement]:
        self._flush_table()
        self._flush_text()
        if not self.blocks:
            self.blocks.append(Paragraph(text=''))
        return self.blocks

    def _flush_text(self):
        if not self._text_lines:
            return
        self.blocks.append(Paragraph(
            text=' '.join(self._text_lines),
            is_list_item=is_list_item(self._text_lines[0]),
        ))
        self._text_lines = []

    def _flush_table(self):
        if not self._table_lines:
            return
        table = materialize(self._table_lines)
        # a run of separator rows only still takes its place in the text
        self.blocks.append(table if table.rows else Paragraph(text=''))
        self._table_lines = []


def segment(text: str) -> List[BlockElement]:
    """Split text into an ordered list of Paragraph / TableBlock, never empty."""
    segmenter = ContentSegmenter()
    for line in LINE_BREAK.split(text or ''):
        segmenter.feed(line)
    return segmenter.close()
