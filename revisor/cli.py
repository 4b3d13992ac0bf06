"""Command-line interface for the proofreader.

Proofreads a PDF page by page against optional reference PDFs (listed in
priority order) and writes the findings to a spreadsheet.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from types import FrameType

from revisor.config import ProofreaderConfiguration
from revisor.export import export_session, write_spreadsheet
from revisor.extraction import ExtractionError, PdfTextExtractor
from revisor.llm.provider import LLMProviderError
from revisor.llm.provider_registry import create_provider_chain
from revisor.llm.service import LLMService
from revisor.proofreader import (
    Cancelled,
    CancellationToken,
    FatalPipelineFailure,
    ProofreadingDriver,
    build_page_request,
    build_reference_corpus,
    run_proofreading,
)
from revisor.proofreader.request_builder import get_system_prompt_text

GENERIC_FAILURE_MESSAGE = (
    "Ocorreu um erro durante a revisão. Verifique os arquivos e tente novamente."
)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="revisor",
        description="Proofread a PDF with an LLM against prioritized reference documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Proofread against the norma culta only
  python -m revisor relatorio.pdf

  # Reference documents in priority order (first one wins conflicts)
  python -m revisor relatorio.pdf --references manual-interno.pdf acordo-ortografico.pdf

  # Write a CSV instead of an xlsx workbook
  python -m revisor relatorio.pdf --output revisao.csv

  # Write the rendered prompts without calling the model
  python -m revisor relatorio.pdf --emit-prompts

Environment Variables:
  GEMINI_API_KEY                 API key for Gemini
  GEMINI_MODEL                   Gemini model name (default: gemini-2.5-flash)
  GEMINI_MIN_REQUEST_INTERVAL    Min seconds between Gemini requests (default: 0)
  MISTRAL_API_KEY                API key for Mistral (only if used)
  LLM_PRIMARY                    Primary LLM provider (default: gemini)
  LLM_FALLBACK                   Fallback providers on quota exhaustion (comma-separated)
  REVISOR_OUTPUT_DIR             Directory for reports (default: current directory)
  REVISOR_LOG_LEVEL              Logging level (default: INFO)
        """,
    )

    parser.add_argument("document", type=Path, help="PDF to proofread")
    parser.add_argument(
        "--references",
        nargs="+",
        type=Path,
        default=[],
        help="Reference PDFs in priority order (highest priority first)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for the report (default: REVISOR_OUTPUT_DIR or .)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Explicit report path; .csv writes CSV, anything else xlsx",
    )
    parser.add_argument(
        "--provider",
        help="Primary LLM provider (default: gemini or LLM_PRIMARY)",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        help="Path to .env file for API keys",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: REVISOR_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--emit-prompts",
        action="store_true",
        help=(
            "Write plain-text prompts (system + user) for every page under "
            "<output-dir>/prompt_payloads/ and exit without calling the model"
        ),
    )

    return parser.parse_args(args)


def _print_progress(page_number: int, total_pages: int) -> None:
    print(f"  Página {page_number} de {total_pages}...")


def _install_interrupt_handler(token: CancellationToken):
    """First Ctrl+C requests cancellation; a second one aborts immediately."""

    def _handler(signum: int, frame: FrameType | None) -> None:
        if token.cancelled:
            raise KeyboardInterrupt
        print(
            "\nCancelando após a página atual (Ctrl+C novamente para abortar)...",
            file=sys.stderr,
        )
        token.cancel()

    return signal.signal(signal.SIGINT, _handler)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 success, 1 failure, 130 cancelled)
    """
    args = parse_args(argv)
    config = ProofreaderConfiguration.from_env(
        dotenv_path=args.dotenv,
        output_dir=args.output_dir,
        provider=args.provider,
        log_level=args.log_level,
    )
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if args.emit_prompts:
        return emit_prompts(args, config)

    try:
        provider_chain = create_provider_chain(
            system_prompt=get_system_prompt_text(),
            filter_json=True,
            dotenv_path=config.dotenv_path,
            primary=config.provider,
        )
    except (LLMProviderError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Using LLM provider(s): {[p.name for p in provider_chain]}")
    driver = ProofreadingDriver(LLMService(provider_chain))

    token = CancellationToken()
    previous_handler = _install_interrupt_handler(token)

    print(f"Revisando {args.document.name}...")
    try:
        session = run_proofreading(
            args.document,
            args.references,
            _print_progress,
            token,
            driver=driver,
        )
    except Cancelled:
        print("Revisão cancelada pelo usuário.", file=sys.stderr)
        return 130
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except FatalPipelineFailure as e:
        logging.getLogger(__name__).error("Fatal pipeline failure: %s", e)
        print(GENERIC_FAILURE_MESSAGE, file=sys.stderr)
        return 1
    except Exception:
        logging.getLogger(__name__).exception("Unexpected error during proofreading")
        print(GENERIC_FAILURE_MESSAGE, file=sys.stderr)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    table = export_session(session)
    output_path = args.output or config.get_output_path(table.file_name)
    write_spreadsheet(table, output_path)

    stats = driver.last_stats
    print("\n" + "=" * 60)
    print("Summary:")
    print(f"  File: {session.file_name}")
    print(f"  Duration: {session.duration}")
    print(f"  Pages: {stats.pages_processed}")
    print(f"  Failed pages: {stats.pages_failed}")
    if stats.failed_pages:
        print(f"    ({', '.join(str(p) for p in stats.failed_pages)})")
    print(f"  Corrections: {session.error_count}")
    print(f"  Report: {output_path}")
    print("=" * 60)
    return 0


def emit_prompts(args: argparse.Namespace, config: ProofreaderConfiguration) -> int:
    """Write each page's prompts as plain-text files for manual testing.

    For each page this writes a system file and a user file.
    """
    print("Emitting prompts (plain text)...")

    extractor = PdfTextExtractor()
    try:
        reference_text = build_reference_corpus(args.references, extractor)
        pages = extractor.extract(args.document)
    except ExtractionError as e:
        print(f"Error loading documents: {e}", file=sys.stderr)
        return 1

    output_dir = config.output_dir / "prompt_payloads"
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = args.document.stem.replace("/", "-")
    file_count = 0
    for page in pages:
        request = build_page_request(reference_text, page)
        for role, text in (
            ("system", request.system_prompt),
            ("user", request.user_prompt),
        ):
            path = output_dir / f"{stem}_page{page.page_number}_{role}.txt"
            path.write_text(text, encoding="utf-8")
            print(f"  Wrote {path}")
            file_count += 1

    print(f"\nEmitted {file_count} prompt file(s) to {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
