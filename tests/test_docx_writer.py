"""Tests for the DOCX Writer"""

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH

from acordao_drafter.documents.composer import compose
from acordao_drafter.documents.docx_writer import build_document, write_document
from acordao_drafter.models import (
    BlockStyle, CaseData, ConclusionItem, Paragraph, StyledBlock, TableBlock,
)


def sample_case():
    return CaseData(
        report="A autora intentou ação.\n\nA ré contestou.",
        proven_facts="1. Facto um.\n| Ano | Valor |\n|---|---|\n| 2019 | 5 |\n| 2020 |",
        unproven_facts="Nada a consignar.",
        decision_first_instance="Julgo procedente.",
        appeal_conclusions=[
            ConclusionItem("RECURSO", "Recorrente: Ré", "1. Revogar."),
            ConclusionItem("RESPOSTA", "Recorrida: Autora", "1. Manter."),
        ],
    )


class TestBuildDocument:

    def test_paragraph_text_and_headings(self):
        doc = build_document(compose(sample_case()))
        texts = [p.text for p in doc.paragraphs]
        assert texts[0] == "PROJETO DE ACÓRDÃO"
        assert "Recurso 1" in texts
        assert "Recurso 2" not in texts
        assert "A ré contestou." in texts
        headings = [p.text for p in doc.paragraphs if p.style.name.startswith('Heading')]
        assert headings[:2] == ["PROJETO DE ACÓRDÃO", "I - RELATÓRIO"]

    def test_jagged_table(self):
        doc = build_document(compose(sample_case()))
        assert len(doc.tables) == 1
        table = doc.tables[0]
        assert len(table.rows) == 3
        assert len(table.columns) == 2
        assert [c.text for c in table.rows[1].cells] == ["2019", "5"]
        assert [c.text for c in table.rows[2].cells] == ["2020", ""]

    def test_styles_are_applied(self):
        blocks = [
            StyledBlock(Paragraph("centrado"), BlockStyle(alignment='center')),
            StyledBlock(Paragraph("negrito"), BlockStyle(bold=True, italic=True, color="808080")),
            StyledBlock(Paragraph("1. item", is_list_item=True),
                        BlockStyle(alignment='justify', left_indent_cm=0.75, line_spacing=1.5)),
        ]
        doc = build_document(blocks)
        centered, bold, item = doc.paragraphs
        assert centered.alignment == WD_ALIGN_PARAGRAPH.CENTER
        assert bold.runs[0].bold and bold.runs[0].italic
        assert str(bold.runs[0].font.color.rgb) == "808080"
        assert item.alignment == WD_ALIGN_PARAGRAPH.JUSTIFY
        assert item.paragraph_format.left_indent is not None
        assert item.paragraph_format.line_spacing == 1.5

    def test_empty_table_is_skipped(self):
        doc = build_document([StyledBlock(TableBlock(rows=[]))])
        assert doc.tables == []


class TestWriteDocument:

    def test_write_and_reopen(self, tmp_path):
        path = write_document(compose(sample_case()), tmp_path / "Projeto_Acordao.docx")
        assert path.exists()
        reopened = Document(str(path))
        assert any(p.text == "II - FUNDAMENTAÇÃO DE FACTO" for p in reopened.paragraphs)
