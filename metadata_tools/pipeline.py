#!/usr/bin/env python3
"""
Single-document metadata pipeline.

PDF -> text -> parser (GROBID when available, then Unstructured, else
heuristics with CrossRef) -> LLM ensemble -> fusion.
"""

import logging
from pathlib import Path
from typing import Optional

from metadata_tools.ai.llm_ensemble import LLMEnsemble
from metadata_tools.ai.ollama_client import OllamaClient
from metadata_tools.api.crossref_client import CrossRefClient
from metadata_tools.api.grobid_client import GrobidClient
from metadata_tools.api.unstructured_client import UnstructuredClient
from metadata_tools.config.manager import ConfigManager
from metadata_tools.metadata.document_type import guess_document_type
from metadata_tools.metadata.fusion import FusionEngine
from metadata_tools.metadata.heuristic_parser import HeuristicPaperParser
from metadata_tools.models.document import FusedMetadata, ParsedDocument
from metadata_tools.pdf.text_extractor import PDFTextExtractor
from metadata_tools.resolvers.authority import AuthorityResolver


class PaperMetadataPipeline:
    """Extract fused metadata for one PDF."""

    def __init__(self, parser: HeuristicPaperParser, fusion: FusionEngine,
                 text_extractor: Optional[PDFTextExtractor] = None,
                 grobid_client: Optional[GrobidClient] = None,
                 llm_ensemble: Optional[LLMEnsemble] = None,
                 unstructured_client: Optional[UnstructuredClient] = None):
        """Initialize pipeline.

        Args:
            parser: Heuristic parser (with or without an authority resolver)
            fusion: Fusion engine
            text_extractor: PDF text extractor
            grobid_client: Optional GROBID client, tried first
            llm_ensemble: Optional LLM ensemble; without it fusion sees no LLM candidate
            unstructured_client: Optional Unstructured client, tried after GROBID
        """
        self.parser = parser
        self.fusion = fusion
        self.text_extractor = text_extractor or PDFTextExtractor()
        self.grobid_client = grobid_client
        self.unstructured_client = unstructured_client
        self.llm_ensemble = llm_ensemble
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: ConfigManager, model: Optional[str] = None,
                    grobid_url: Optional[str] = None, use_llm: bool = True,
                    unstructured_url: Optional[str] = None) -> 'PaperMetadataPipeline':
        """Wire the collaborators from configuration.

        Args:
            config: Loaded configuration
            model: Ollama model override
            grobid_url: GROBID URL override (enables GROBID)
            use_llm: Set False to skip the LLM ensemble
            unstructured_url: Unstructured endpoint override (enables Unstructured)
        """
        crossref = CrossRefClient(
            email=config.get('APIS', 'crossref_email') or None,
            timeout=config.get_int('APIS', 'crossref_timeout', 6),
        )
        parser = HeuristicPaperParser(
            authority_resolver=AuthorityResolver(crossref.get_metadata),
            header_chars=config.get_int('EXTRACTION', 'header_chars', 12000),
        )
        fusion = FusionEngine(
            preprint_threshold=config.get_int('EXTRACTION', 'preprint_cue_threshold', 2),
            summary_max_chars=config.get_int('EXTRACTION', 'summary_max_chars', 1200),
        )

        grobid_client = None
        if grobid_url or config.get_bool('GROBID', 'enabled', False):
            grobid_client = GrobidClient(
                base_url=grobid_url or config.get('GROBID', 'url', 'http://localhost:8070'),
                timeout=config.get_int('GROBID', 'timeout', 60),
            )

        unstructured_client = None
        if unstructured_url or config.get_bool('UNSTRUCTURED', 'enabled', False):
            unstructured_client = UnstructuredClient(
                url=unstructured_url or config.get('UNSTRUCTURED', 'url', 'http://localhost:8000/general/v0/general'),
                timeout=config.get_int('UNSTRUCTURED', 'timeout', 120),
            )

        llm_ensemble = None
        if use_llm and config.get_bool('OLLAMA', 'enabled', True):
            llm_ensemble = LLMEnsemble(
                OllamaClient.from_config(config, model_name=model),
                max_workers=config.get_int('EXTRACTION', 'llm_max_workers', 2),
            )

        return cls(parser, fusion, grobid_client=grobid_client, llm_ensemble=llm_ensemble,
                   unstructured_client=unstructured_client)

    def parse(self, pdf_path: Path) -> ParsedDocument:
        """Parse with GROBID if reachable, then Unstructured, else with heuristics."""
        text, creation_date = self.text_extractor.extract(pdf_path)

        if self.grobid_client and self.grobid_client.is_available(verbose=True):
            parsed = self.grobid_client.parse(pdf_path, text, creation_date)
            if parsed:
                self.logger.debug("Parsed via GROBID")
                return parsed
            self.logger.info("GROBID failed, trying the next parser")

        if self.unstructured_client:
            parsed = self.unstructured_client.parse(pdf_path, text, creation_date)
            if parsed:
                self.logger.debug("Parsed via Unstructured")
                return parsed
            self.logger.info("Unstructured failed, falling back to heuristic parser")

        parsed = self.parser.parse(text, creation_date)
        self.logger.debug(f"Parsed via {parsed.method} heuristics")
        return parsed

    def run(self, pdf_path) -> FusedMetadata:
        """Extract fused metadata for one PDF.

        Args:
            pdf_path: Path to PDF file

        Returns:
            FusedMetadata

        Raises:
            FileNotFoundError: If the PDF does not exist
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.is_file():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        parsed = self.parse(pdf_path)

        llm = {}
        if self.llm_ensemble:
            hints = {
                'authors': parsed.candidates.authors,
                'document_date': parsed.candidates.document_date,
                'document_type': guess_document_type(parsed.sections, self.fusion.preprint_threshold),
            }
            try:
                llm = self.llm_ensemble.run(parsed.sections, hints)
            except Exception as e:
                self.logger.warning(f"LLM ensemble failed, continuing without it: {e}")
                llm = {}

        return self.fusion.fuse(parsed, llm)
