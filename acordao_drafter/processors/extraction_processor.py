"""
Case Extraction Processor

Sends the first-instance judgment and every appeal/response to the model in a
single request and reads back a tagged-text draft:

Load:    Every uploaded file is read concurrently into a request part. A file
         that cannot be read fails the extraction before any network call.
Request: Parts are ordered sentence, then appeal/response per pair, each
         followed by a short label telling the model what it just read.
Parse:   The tagged answer is split into sections (see response_parser);
         missing sections get placeholders, a missing report AND proven facts
         means the model ignored the format and the extraction fails.
"""

import asyncio
import base64
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

import anthropic
from anthropic import AsyncAnthropic

from acordao_drafter.config import resolve_model
from acordao_drafter.errors import (
    MalformedResponseError, MissingInputError, ServiceFailureError, UnreadableDocumentError,
)
from acordao_drafter.models import (
    AppealPair, CaseData, ConclusionItem, DocumentPart, UploadedDocument, RECURSO,
)
from acordao_drafter.processors import response_parser
from acordao_drafter.utils.file_parser import load_document_part


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Placeholders for sections the model left out
# ---------------------------------------------------------------------------

DEFAULT_REPORT = "Não foi possível extrair o relatório."
DEFAULT_PROVEN_FACTS = "Não foi possível extrair os factos provados."
DEFAULT_UNPROVEN_FACTS = "Nada a consignar."
DEFAULT_DECISION = "Não foi possível extrair a decisão."
DEFAULT_CONCLUSION = ConclusionItem(
    type=RECURSO,
    source="Sistema",
    content="Não foram encontradas conclusões explícitas.",
)

SENTENCE_LABEL = "O documento acima é a Sentença de Primeira Instância. Identifique-a como tal."
APPEAL_LABEL = "O documento acima é o Recurso n.º {n} (Alegações). Extraia as Conclusões."
RESPONSE_LABEL = "O documento acima é uma Resposta ao Recurso n.º {n} (Contra-alegações)."

AUTH_WORDING = re.compile(r'api[ _-]?key|x-api-key|credential|unauthori[sz]ed|permission', re.IGNORECASE)
AUTH_STATUS_CODES = (401, 403)


# ---------------------------------------------------------------------------
# Model client
# ---------------------------------------------------------------------------

class ModelClient(ABC):
    """Text-in/text-out model seam: content blocks + system prompt -> raw text."""

    @abstractmethod
    async def generate(self, content: List[Dict], system: str, max_tokens: int) -> str:
        ...


class AnthropicModelClient(ModelClient):

    def __init__(self, api_key: Optional[str], model: str = 'sonnet'):
        if not api_key:
            raise ServiceFailureError("ANTHROPIC_API_KEY not set", is_auth_error=True)
        # No retries: a failed call goes straight back to the user
        self.client = AsyncAnthropic(api_key=api_key, max_retries=0)
        self.model = resolve_model(model)

    async def generate(self, content: List[Dict], system: str, max_tokens: int) -> str:
        # Streaming transport for long outputs; the text is only used once complete
        async with self.client.messages.stream(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": content}],
        ) as stream:
            return await stream.get_final_text()


def service_failure_from(exc: Exception) -> ServiceFailureError:
    """Map an SDK exception, telling credential problems apart from the rest."""
    status_code = getattr(exc, 'status_code', None)
    is_auth_error = status_code in AUTH_STATUS_CODES or bool(AUTH_WORDING.search(str(exc)))
    return ServiceFailureError(
        f"Model call failed ({status_code or type(exc).__name__}): {exc}",
        is_auth_error=is_auth_error,
        status_code=status_code,
    )


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------

def to_content_block(part: DocumentPart) -> Dict:
    if part.is_binary:
        source = {
            "type": "base64",
            "media_type": part.mime_type,
            "data": base64.standard_b64encode(part.data).decode('ascii'),
        }
    else:
        source = {"type": "text", "media_type": "text/plain", "data": part.text or ''}
    return {"type": "document", "source": source, "title": part.filename}


def build_content(labelled_parts: Sequence[Tuple[DocumentPart, str]]) -> List[Dict]:
    """Each document block is immediately followed by its label."""
    content = []
    for part, label in labelled_parts:
        content.append(to_content_block(part))
        content.append({"type": "text", "text": label})
    return content


def validate_inputs(sentence: Optional[UploadedDocument], appeal_pairs: Sequence[AppealPair]):
    if sentence is None:
        raise MissingInputError("First-instance judgment missing",
                                "A Sentença de 1ª Instância é obrigatória.")
    if not any(pair.appeal is not None for pair in appeal_pairs):
        raise MissingInputError("No appeal document uploaded",
                                "É necessário carregar pelo menos um Recurso.")


class ExtractionProcessor:
    """Extracts CaseData from a sentence and its appeals using one model call."""

    SYSTEM_INSTRUCTION = """Você é um Assistente Jurídico de alto nível em um Tribunal Superior.
Sua tarefa é analisar os documentos fornecidos (Sentença, Recursos e Respostas) e estruturar um projeto de Acórdão.

IMPORTANTE:
Não responda em JSON. Responda em TEXTO ESTRUTURADO usando EXATAMENTE as tags abaixo como separadores.
Copie os textos com fidelidade total.

ESTRUTURA DA RESPOSTA:

<<<RELATORIO>>>
(Sintetize o histórico do processo. Separe os parágrafos claramente com quebras de linha duplas.)

<<<FACTOS_PROVADOS>>>
(Copie integralmente os factos provados da sentença. Mantenha a numeração original.)
(SE HOUVER TABELAS: Converta-as para tabelas Markdown visualmente alinhadas. Ex: | Col1 | Col2 |)

<<<FACTOS_NAO_PROVADOS>>>
(Copie integralmente os factos não provados, se houver.)

<<<DECISAO_PRIMEIRA_INSTANCIA>>>
(O segmento decisório/dispositivo da sentença da primeira instância.)

<<<CONCLUSOES_RECURSOS>>>
(Liste as conclusões. Mantenha a ordem cronológica dos recursos.)
(IMPORTANTE: Para cada recurso identificado, extraia PRIMEIRO as conclusões do recurso e, IMEDIATAMENTE DEPOIS, as conclusões da resposta/contra-alegações correspondente, se houver.)

(Utilize este formato exato para CADA item:)
TIPO: (Escreva apenas "RECURSO" ou "RESPOSTA")
FONTE: (Ex: "Recorrente: Autor João" ou "Recorrido: Réu Empresa X")
CONTEUDO: (Copie as conclusões numeradas)
---SEPARADOR_ITEM---"""

    def __init__(self, api_key: Optional[str] = None, model: str = 'sonnet',
                 client: Optional[ModelClient] = None, max_output_tokens: int = 64000,
                 pdf_mode: str = 'document'):
        self.client = client or AnthropicModelClient(api_key, model)
        self.max_output_tokens = max_output_tokens
        self.pdf_mode = pdf_mode

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    async def extract(self, sentence: Optional[UploadedDocument],
                      appeal_pairs: Sequence[AppealPair]) -> CaseData:
        """
        Full pipeline: load -> request -> parse -> defaults.

        Raises:
            MissingInputError: no sentence, or no appeal in any pair.
            ServiceFailureError: the model call failed.
            MalformedResponseError: the answer has neither report nor proven facts.
        """
        validate_inputs(sentence, appeal_pairs)

        labelled = await self._load_parts(sentence, appeal_pairs)
        content = build_content(labelled)
        logger.info("Requesting extraction: %d documents, %d appeal pairs",
                    len(labelled), len(appeal_pairs))

        try:
            raw = await self.client.generate(content, self.SYSTEM_INSTRUCTION, self.max_output_tokens)
        except anthropic.APIError as e:
            failure = service_failure_from(e)
            logger.error("Model call failed (auth=%s): %s", failure.is_auth_error, e)
            raise failure from e

        logger.info("Model response received: %d chars", len(raw or ''))
        return self.to_case_data(raw)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load_parts(self, sentence: UploadedDocument,
                          appeal_pairs: Sequence[AppealPair]) -> List[Tuple[DocumentPart, str]]:
        """Read every file concurrently; order of the request is fixed here, not by completion."""
        plan = [(sentence, SENTENCE_LABEL)]
        for n, pair in enumerate(appeal_pairs, 1):
            if pair.appeal:
                plan.append((pair.appeal, APPEAL_LABEL.format(n=n)))
            if pair.response:
                plan.append((pair.response, RESPONSE_LABEL.format(n=n)))

        try:
            parts = await asyncio.gather(*(
                asyncio.to_thread(load_document_part, doc.path, doc.mime_type, self.pdf_mode, doc.filename)
                for doc, _ in plan
            ))
        except UnreadableDocumentError as e:
            logger.error("Could not read %s: %s", e.filename, e.__cause__ or e)
            raise
        return [(part, label) for part, (_, label) in zip(parts, plan)]

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def to_case_data(raw: str) -> CaseData:
        parsed = response_parser.parse(raw)

        if not parsed.is_usable:
            logger.error("Delimiter tags not found in model response. Full text received:\n%s", raw)
            raise MalformedResponseError("Report and proven facts sections are both missing",
                                         raw_response=raw or '')

        logger.debug("Sections: report=%d proven=%d unproven=%d decision=%d conclusions=%d",
                     len(parsed.report), len(parsed.proven_facts), len(parsed.unproven_facts),
                     len(parsed.decision_first_instance), len(parsed.conclusions))

        conclusions = parsed.conclusions or [ConclusionItem(
            type=DEFAULT_CONCLUSION.type,
            source=DEFAULT_CONCLUSION.source,
            content=DEFAULT_CONCLUSION.content,
        )]

        return CaseData(
            report=parsed.report or DEFAULT_REPORT,
            proven_facts=parsed.proven_facts or DEFAULT_PROVEN_FACTS,
            unproven_facts=parsed.unproven_facts or DEFAULT_UNPROVEN_FACTS,
            decision_first_instance=parsed.decision_first_instance or DEFAULT_DECISION,
            appeal_conclusions=conclusions,
        )
