"""
File Parser Utility
Turns uploaded PDF, DOCX and TXT files into model request parts
"""

import logging
import zipfile
from pathlib import Path
from typing import Callable, Optional

import pdfplumber
from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError

from acordao_drafter.errors import UnreadableDocumentError
from acordao_drafter.models import DocumentPart


logger = logging.getLogger(__name__)

PDF_MIME = 'application/pdf'
DOCX_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
TEXT_MIME = 'text/plain'

MIME_BY_EXTENSION = {
    'pdf': PDF_MIME,
    'docx': DOCX_MIME,
    'txt': TEXT_MIME,
}

ALLOWED_EXTENSIONS = set(MIME_BY_EXTENSION)

PAGE_MARKER = "[Página {number}]"

READ_ERRORS = (OSError, UnicodeDecodeError, ValueError, KeyError,
               zipfile.BadZipFile, PackageNotFoundError)


def allowed_file(filename: str) -> bool:
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def infer_mime_type(filename: str, declared: Optional[str] = None) -> str:
    """Declared type wins if we can handle it; otherwise guess from the extension, falling back to PDF."""
    if declared in MIME_BY_EXTENSION.values():
        return declared
    ext = filename.rsplit('.', 1)[1].lower() if '.' in filename else ''
    return MIME_BY_EXTENSION.get(ext, PDF_MIME)


def parse_pdf(file_path: str) -> str:
    """Text of a PDF, each non-blank page introduced by a page marker"""
    pages = []
    with pdfplumber.open(file_path) as pdf:
        for number, page in enumerate(pdf.pages, 1):
            page_text = (page.extract_text() or "").strip()
            if page_text:
                pages.append(PAGE_MARKER.format(number=number) + "\n" + page_text)
    return "\n\n".join(pages)


def parse_docx(file_path: str) -> str:
    """Paragraph text of a Word file, blank paragraphs dropped"""
    doc = DocxDocument(file_path)
    return "\n\n".join(p.text for p in doc.paragraphs if p.text.strip())


def parse_txt(file_path: str) -> str:
    # utf-8-sig drops the BOM Windows editors put in front of exported filings
    return Path(file_path).read_bytes().decode('utf-8-sig')


def _read_text(reader: Callable[[str], str], path: Path, name: str,
               errors: tuple = READ_ERRORS) -> str:
    try:
        return reader(str(path))
    except errors as e:
        raise UnreadableDocumentError(f"Cannot read {name}: {e}", filename=name) from e


def load_document_part(file_path: str, declared_mime: Optional[str] = None,
                       pdf_mode: str = 'document', filename: Optional[str] = None) -> DocumentPart:
    """
    Read one uploaded file into a DocumentPart.

    PDFs travel as binary unless pdf_mode is 'text'. Word files are always
    converted to text, since the model API takes PDF and plain text only.
    A file that cannot be read or decoded raises UnreadableDocumentError.
    """
    path = Path(file_path)
    name = filename or path.name
    mime_type = infer_mime_type(name, declared_mime)

    if mime_type == PDF_MIME and pdf_mode != 'text':
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UnreadableDocumentError(f"Cannot read {name}: {e}", filename=name) from e
        part = DocumentPart(filename=name, mime_type=PDF_MIME, data=data)
    elif mime_type == PDF_MIME:
        # pdfminer raises its own exception types for damaged PDFs
        text = _read_text(parse_pdf, path, name, errors=(Exception,))
        part = DocumentPart(filename=name, mime_type=TEXT_MIME, text=text)
    elif mime_type == DOCX_MIME:
        part = DocumentPart(filename=name, mime_type=TEXT_MIME, text=_read_text(parse_docx, path, name))
    elif mime_type.startswith('text/'):
        part = DocumentPart(filename=name, mime_type=TEXT_MIME, text=_read_text(parse_txt, path, name))
    else:
        raise UnreadableDocumentError(f"Unsupported file type: {mime_type}", filename=name)

    size = len(part.data) if part.is_binary else len(part.text or '')
    logger.debug("Loaded %s as %s (%d %s)", name, part.mime_type, size,
                 'bytes' if part.is_binary else 'chars')
    return part
