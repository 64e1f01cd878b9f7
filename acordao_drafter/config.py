"""
Configuration loaded from the environment (.env supported)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent

MODELS = {
    'sonnet': 'claude-sonnet-4-20250514',
    'opus': 'claude-opus-4-20250514',
}

PDF_MODES = ('document', 'text')


@dataclass
class Settings:
    api_key: Optional[str] = None
    model: str = MODELS['sonnet']
    max_output_tokens: int = 64000
    pdf_mode: str = 'document'
    cases_dir: Path = BASE_DIR / 'cases'
    log_level: str = 'INFO'


def resolve_model(name: str) -> str:
    """Map a short alias ('sonnet', 'opus') to a model id; pass full ids through."""
    return MODELS.get(name.strip().lower(), name.strip()) if name else MODELS['sonnet']


def load_settings() -> Settings:
    load_dotenv()

    pdf_mode = os.getenv('PDF_MODE', 'document').strip().lower()
    if pdf_mode not in PDF_MODES:
        raise ValueError(f"PDF_MODE must be one of {PDF_MODES}, got {pdf_mode!r}")

    max_tokens = os.getenv('MAX_OUTPUT_TOKENS', '64000')
    try:
        max_output_tokens = int(max_tokens)
    except ValueError:
        raise ValueError(f"MAX_OUTPUT_TOKENS must be an integer, got {max_tokens!r}")

    return Settings(
        api_key=os.getenv('ANTHROPIC_API_KEY') or None,
        model=resolve_model(os.getenv('MODEL', 'sonnet')),
        max_output_tokens=max_output_tokens,
        pdf_mode=pdf_mode,
        cases_dir=Path(os.getenv('CASES_DIR', str(BASE_DIR / 'cases'))),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    )
