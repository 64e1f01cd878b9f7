"""Acórdão Drafter: extraction and recomposition of appellate ruling drafts."""

__version__ = "0.1.0"
