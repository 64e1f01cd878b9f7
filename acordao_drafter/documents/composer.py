"""
Acórdão Composer

Lays the reviewed CaseData out as the draft ruling: a fixed skeleton of
headings and lead-in sentences, with each field's text segmented into
paragraphs and tables. Output is a list of StyledBlock; rendering to .docx is
done by docx_writer.
"""

from typing import List

from acordao_drafter.models import (
    ALIGN_CENTER, ALIGN_JUSTIFY, BlockStyle, CaseData, Paragraph, StyledBlock, RECURSO,
)
from acordao_drafter.utils.content_segmenter import segment


TITLE = "PROJETO DE ACÓRDÃO"
HEADING_REPORT = "I - RELATÓRIO"
HEADING_FACTS = "II - FUNDAMENTAÇÃO DE FACTO"
HEADING_LAW = "III - FUNDAMENTAÇÃO DE DIREITO"
HEADING_DECISION = "IV - DECISÃO"
APPEAL_HEADING = "Recurso {n}"

DECISION_LEAD_IN = "A decisão recorrida tem o seguinte teor:"
CONCLUSIONS_LEAD_IN = "As conclusões das alegações de recurso são as seguintes:"
PROVEN_FACTS_LEAD_IN = "A 1ª instância considerou provados os seguintes factos:"
UNPROVEN_FACTS_LABEL = "Factos não provados:"
LAW_PLACEHOLDER = "[Inserir fundamentação jurídica aqui]"
DECISION_PLACEHOLDER = "Pelo exposto, acordam os juízes desta secção em..."

GREY = "808080"

# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------

TITLE_STYLE = BlockStyle(heading_level=1, alignment=ALIGN_CENTER, space_after_pt=20)
SECTION_STYLE = BlockStyle(heading_level=2, space_before_pt=20, space_after_pt=10)
APPEAL_STYLE = BlockStyle(heading_level=3, space_before_pt=20, space_after_pt=5, keep_with_next=True)
SOURCE_STYLE = BlockStyle(bold=True, space_before_pt=10, keep_with_next=True)
LEAD_IN_STYLE = BlockStyle(space_before_pt=10, space_after_pt=10, alignment=ALIGN_JUSTIFY)
CONCLUSIONS_LEAD_IN_STYLE = BlockStyle(italic=True, space_before_pt=10, space_after_pt=5)
LABEL_STYLE = BlockStyle(bold=True, space_before_pt=10, space_after_pt=5)
LAW_PLACEHOLDER_STYLE = BlockStyle(italic=True, color=GREY)
DECISION_PLACEHOLDER_STYLE = BlockStyle(italic=True)

BODY_STYLE = BlockStyle(alignment=ALIGN_JUSTIFY, line_spacing=1.5, space_after_pt=6)
EMPTY_BODY_STYLE = BlockStyle(alignment=ALIGN_JUSTIFY, line_spacing=1.5)
LIST_ITEM_STYLE = BlockStyle(alignment=ALIGN_JUSTIFY, line_spacing=1.5, space_after_pt=6,
                             left_indent_cm=0.75)
TABLE_STYLE = BlockStyle(space_after_pt=6)


def body_style(block) -> BlockStyle:
    if not isinstance(block, Paragraph):
        return TABLE_STYLE
    if block.is_list_item:
        return LIST_ITEM_STYLE
    return BODY_STYLE if block.text else EMPTY_BODY_STYLE


def text_blocks(text: str) -> List[StyledBlock]:
    return [StyledBlock(block, body_style(block)) for block in segment(text)]


def fixed(text: str, style: BlockStyle) -> StyledBlock:
    return StyledBlock(Paragraph(text=text), style)


def compose(data: CaseData) -> List[StyledBlock]:
    """Build the full acórdão block sequence from (already defaulted) case data."""
    blocks = [
        fixed(TITLE, TITLE_STYLE),
        fixed(HEADING_REPORT, SECTION_STYLE),
        *text_blocks(data.report),
        fixed(DECISION_LEAD_IN, LEAD_IN_STYLE),
        *text_blocks(data.decision_first_instance),
        fixed(CONCLUSIONS_LEAD_IN, CONCLUSIONS_LEAD_IN_STYLE),
    ]

    # A response sits under the number of the appeal before it
    appeal_counter = 0
    for item in data.appeal_conclusions:
        if item.type == RECURSO:
            appeal_counter += 1
            blocks.append(fixed(APPEAL_HEADING.format(n=appeal_counter), APPEAL_STYLE))
        blocks.append(fixed(item.source, SOURCE_STYLE))
        blocks.extend(text_blocks(item.content))

    blocks.extend([
        fixed(HEADING_FACTS, SECTION_STYLE),
        fixed(PROVEN_FACTS_LEAD_IN, LEAD_IN_STYLE),
        *text_blocks(data.proven_facts),
        fixed(UNPROVEN_FACTS_LABEL, LABEL_STYLE),
        *text_blocks(data.unproven_facts),
        fixed(HEADING_LAW, SECTION_STYLE),
        fixed(LAW_PLACEHOLDER, LAW_PLACEHOLDER_STYLE),
        fixed(HEADING_DECISION, SECTION_STYLE),
        fixed(DECISION_PLACEHOLDER, DECISION_PLACEHOLDER_STYLE),
    ])
    return blocks
