"""
Extraction errors

Every failure of the extraction flow is an ExtractionError carrying a kind
and a short user-facing message.
"""

from typing import Optional


MISSING_INPUT = 'MissingInput'
SERVICE_FAILURE = 'ServiceFailure'
MALFORMED_RESPONSE = 'MalformedResponse'
UNREADABLE_DOCUMENT = 'UnreadableDocument'


class ExtractionError(Exception):
    kind = 'ExtractionError'
    user_message = "Ocorreu um erro ao processar. Tente novamente."

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message:
            self.user_message = user_message

    def to_dict(self) -> dict:
        return {
            'error': self.user_message,
            'kind': self.kind,
            'message': str(self),
        }


class MissingInputError(ExtractionError):
    """Required documents were not supplied; raised before any network call."""
    kind = MISSING_INPUT


class ServiceFailureError(ExtractionError):
    """The model service could not be reached or refused the request."""
    kind = SERVICE_FAILURE

    def __init__(self, message: str, is_auth_error: bool = False,
                 status_code: Optional[int] = None):
        if is_auth_error:
            user_message = "Chave de API inválida ou sem permissões. Verifique a configuração."
        else:
            user_message = "Falha na comunicação com o serviço de IA. Tente novamente."
        super().__init__(message, user_message)
        self.is_auth_error = is_auth_error
        self.status_code = status_code

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['auth_error'] = self.is_auth_error
        return data


class MalformedResponseError(ExtractionError):
    """The model answered, but the delimiter tags could not be found."""
    kind = MALFORMED_RESPONSE
    user_message = ("O modelo gerou uma resposta, mas não foi possível identificar "
                    "as seções esperadas.")

    def __init__(self, message: str, raw_response: str = ''):
        super().__init__(message)
        self.raw_response = raw_response


class UnreadableDocumentError(ExtractionError):
    """An uploaded file could not be read or converted; raised before any network call."""
    kind = UNREADABLE_DOCUMENT

    def __init__(self, message: str, filename: str = ''):
        super().__init__(
            message,
            f"Não foi possível ler o documento «{filename}». Verifique o ficheiro e carregue-o novamente.",
        )
        self.filename = filename
