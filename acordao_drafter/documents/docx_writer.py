"""
DOCX Writer
Renders composed blocks into a Word document
"""

from pathlib import Path
from typing import Iterable, Union

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Cm, Pt, RGBColor

from acordao_drafter.models import (
    ALIGN_CENTER, ALIGN_JUSTIFY, BlockStyle, StyledBlock, TableBlock,
)


DOWNLOAD_NAME = 'Projeto_Acordao.docx'
DOCX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

ALIGNMENTS = {
    ALIGN_CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    ALIGN_JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def apply_paragraph_style(p, style: BlockStyle):
    p.alignment = ALIGNMENTS.get(style.alignment, WD_ALIGN_PARAGRAPH.LEFT)
    fmt = p.paragraph_format
    fmt.space_before = Pt(style.space_before_pt)
    fmt.space_after = Pt(style.space_after_pt)
    if style.left_indent_cm:
        fmt.left_indent = Cm(style.left_indent_cm)
    if style.line_spacing:
        fmt.line_spacing = style.line_spacing
    if style.keep_with_next:
        fmt.keep_with_next = True


def add_paragraph(doc, text: str, style: BlockStyle):
    if style.heading_level is not None:
        p = doc.add_heading(text, level=style.heading_level)
    else:
        p = doc.add_paragraph()
        run = p.add_run(text)
        run.bold = style.bold or None
        run.italic = style.italic or None
        if style.color:
            run.font.color.rgb = RGBColor.from_string(style.color)
    apply_paragraph_style(p, style)
    return p


def add_table(doc, block: TableBlock):
    """Table as wide as its widest row; shorter rows leave their tail cells empty."""
    if not block.rows:
        return None
    cols = max(len(row) for row in block.rows)
    table = doc.add_table(rows=len(block.rows), cols=cols)
    table.style = 'Table Grid'
    for i, row in enumerate(block.rows):
        for j, text in enumerate(row):
            table.cell(i, j).text = text

    # First row of a Markdown table is its header
    if len(block.rows) > 1:
        for cell in table.rows[0].cells:
            for paragraph in cell.paragraphs:
                for run in paragraph.runs:
                    run.bold = True
    return table


def build_document(blocks: Iterable[StyledBlock]):
    doc = Document()

    style = doc.styles['Normal']
    style.font.name = 'Times New Roman'
    style.font.size = Pt(12)

    for styled in blocks:
        if styled.is_table:
            add_table(doc, styled.block)
        else:
            add_paragraph(doc, styled.block.text, styled.style)
    return doc


def write_document(blocks: Iterable[StyledBlock], output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    build_document(blocks).save(str(output_path))
    return output_path
