"""
PDF text extraction.
"""

from .text_extractor import PDFTextExtractor

__all__ = ['PDFTextExtractor']
