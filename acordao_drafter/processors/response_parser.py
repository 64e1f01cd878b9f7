"""
Tagged Response Parser

The model is asked for tagged plain text rather than JSON (JSON gets truncated
or badly escaped on long legal texts). This module reads that text back:

    <<<RELATORIO>>>
    ...
    <<<CONCLUSOES_RECURSOS>>>
    TIPO: RECURSO
    FONTE: Recorrente: Autor
    CONTEUDO: 1. ...
    ---SEPARADOR_ITEM---

Parsing is lenient: a missing section is an empty string, a malformed
conclusion block still becomes an item with defaults.
"""

import re
from dataclasses import dataclass, field
from typing import List

from acordao_drafter.models import ConclusionItem, RECURSO, CONCLUSION_TYPES


TAG_REPORT = '<<<RELATORIO>>>'
TAG_PROVEN_FACTS = '<<<FACTOS_PROVADOS>>>'
TAG_UNPROVEN_FACTS = '<<<FACTOS_NAO_PROVADOS>>>'
TAG_DECISION = '<<<DECISAO_PRIMEIRA_INSTANCIA>>>'
TAG_CONCLUSIONS = '<<<CONCLUSOES_RECURSOS>>>'

SECTION_TAGS = (TAG_REPORT, TAG_PROVEN_FACTS, TAG_UNPROVEN_FACTS, TAG_DECISION, TAG_CONCLUSIONS)

TAG_OPENER = '<<<'
ITEM_SEPARATOR = '---SEPARADOR_ITEM---'

UNIDENTIFIED_SOURCE = "Parte não identificada"

TYPE_LINE = re.compile(r'TIPO:(.*)')
SOURCE_LINE = re.compile(r'FONTE:(.*)')
TYPE_LINE_FULL = re.compile(r'TIPO:.*(\n|$)')
SOURCE_LINE_FULL = re.compile(r'FONTE:.*(\n|$)')
CONTENT_MARKER = re.compile(r'^CONTEUDO:\s*', re.IGNORECASE)


@dataclass
class ParsedResponse:
    report: str = ''
    proven_facts: str = ''
    unproven_facts: str = ''
    decision_first_instance: str = ''
    conclusions: List[ConclusionItem] = field(default_factory=list)

    @property
    def is_usable(self) -> bool:
        # Only a response missing both the report and the proven facts is rejected
        return bool(self.report or self.proven_facts)


def extract_section(raw: str, tag: str) -> str:
    """Text after the first `tag` up to the next '<<<' (or the end), trimmed."""
    start = raw.find(tag)
    if start < 0:
        return ''
    body = raw[start + len(tag):]
    end = body.find(TAG_OPENER)
    if end >= 0:
        body = body[:end]
    return body.strip()


def parse_conclusion_block(block: str) -> ConclusionItem:
    type_match = TYPE_LINE.search(block)
    source_match = SOURCE_LINE.search(block)

    item_type = type_match.group(1).strip().upper() if type_match else RECURSO
    if item_type not in CONCLUSION_TYPES:
        item_type = RECURSO

    source = source_match.group(1).strip() if source_match else ''
    if not source:
        source = UNIDENTIFIED_SOURCE

    content = TYPE_LINE_FULL.sub('', block, count=1)
    content = SOURCE_LINE_FULL.sub('', content, count=1)
    content = CONTENT_MARKER.sub('', content.strip(), count=1).strip()

    return ConclusionItem(type=item_type, source=source, content=content)


def parse_conclusions(section: str) -> List[ConclusionItem]:
    items = []
    for block in section.split(ITEM_SEPARATOR):
        block = block.strip()
        if not block:
            continue
        items.append(parse_conclusion_block(block))
    return items


def parse(raw: str) -> ParsedResponse:
    raw = raw or ''
    return ParsedResponse(
        report=extract_section(raw, TAG_REPORT),
        proven_facts=extract_section(raw, TAG_PROVEN_FACTS),
        unproven_facts=extract_section(raw, TAG_UNPROVEN_FACTS),
        decision_first_instance=extract_section(raw, TAG_DECISION),
        conclusions=parse_conclusions(extract_section(raw, TAG_CONCLUSIONS)),
    )
