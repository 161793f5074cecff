#!/usr/bin/env python3
"""
Extract fused bibliographic metadata from one PDF and print it as JSON.

Usage:
    python scripts/extract_metadata.py --pdf paper.pdf
    python scripts/extract_metadata.py --pdf paper.pdf --out paper.json --no-llm
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from metadata_tools.config.manager import ConfigManager
from metadata_tools.pipeline import PaperMetadataPipeline


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract bibliographic metadata from a scientific PDF.")
    parser.add_argument("--pdf", type=Path, required=True, help="Path to the PDF file")
    parser.add_argument("--out", type=Path, help="Write JSON here instead of stdout")
    parser.add_argument("--config", help="Path to config.conf (default: repository root)")
    parser.add_argument("--model", help="Ollama model name (overrides config)")
    parser.add_argument("--grobid-url", help="GROBID server URL (enables GROBID)")
    parser.add_argument("--unstructured-url", help="Unstructured partition endpoint (tried after GROBID)")
    parser.add_argument("--no-llm", action="store_true", help="Skip the LLM ensemble")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = ConfigManager(args.config)

    level = logging.DEBUG if args.debug else getattr(
        logging, str(config.get('LOGGING', 'level', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    pipeline = PaperMetadataPipeline.from_config(
        config, model=args.model, grobid_url=args.grobid_url, use_llm=not args.no_llm,
        unstructured_url=args.unstructured_url)

    try:
        metadata = pipeline.run(args.pdf)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False)
    if args.out:
        args.out.write_text(output + "\n", encoding="utf-8")
        print(f"Wrote {args.out}")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
