"""Shared fixtures: a canned tagged model response and a fake model client."""

import pytest

from acordao_drafter.models import AppealPair, UploadedDocument
from acordao_drafter.processors.extraction_processor import ModelClient


SAMPLE_RESPONSE = """<<<RELATORIO>>>
A autora intentou ação contra a ré,
pedindo a condenação no pagamento de 10.000 euros.

A ré contestou.

<<<FACTOS_PROVADOS>>>
1. A autora é proprietária do prédio.
2. A ré ocupou o prédio em 2019.

| Ano | Valor |
|-----|:-----:|
| 2019 | 5.000 |
| 2020 | 5.000 |

<<<FACTOS_NAO_PROVADOS>>>
a) Que a ré tenha pago qualquer renda.

<<<DECISAO_PRIMEIRA_INSTANCIA>>>
Julgo a ação procedente e condeno a ré a pagar 10.000 euros.

<<<CONCLUSOES_RECURSOS>>>
TIPO: RECURSO
FONTE: Recorrente: Ré Empresa X
CONTEUDO: 1. A sentença errou na apreciação da prova.
2. Deve ser revogada.
---SEPARADOR_ITEM---
TIPO: RESPOSTA
FONTE: Recorrida: Autora Maria
CONTEUDO: 1. A sentença deve ser mantida.
---SEPARADOR_ITEM---
"""


class FakeModelClient(ModelClient):
    """Returns a fixed answer (or raises) and records what it was sent."""

    def __init__(self, response: str = SAMPLE_RESPONSE, error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, content, system, max_tokens):
        self.calls.append({'content': content, 'system': system, 'max_tokens': max_tokens})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def sample_response():
    return SAMPLE_RESPONSE


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def documents(tmp_path):
    """A sentence and one appeal/response pair written as text files."""
    def write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return UploadedDocument(path=str(path), filename=name)

    sentence = write('sentenca.txt', 'SENTENÇA\nJulgo a ação procedente.')
    appeal = write('recurso.txt', 'ALEGAÇÕES\nConclusões: 1. Revogar.')
    response = write('resposta.txt', 'CONTRA-ALEGAÇÕES\n1. Manter.')
    return sentence, [AppealPair(id='1', appeal=appeal, response=response)]
