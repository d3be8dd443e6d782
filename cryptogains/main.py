# cryptogains/main.py
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cryptogains.config as config
from cryptogains.cli import parse_arguments
from cryptogains.domain.errors import LedgerError, MalformedInputError
from cryptogains.pipeline_runner import ProcessingOutput, run_core_processing_pipeline
from cryptogains.reporting.console_reporter import generate_console_tax_report
from cryptogains.reporting.diagnostic_reports import print_open_lots_diagnostic
from cryptogains.reporting.pdf_generator import PdfReportGenerator

logger = logging.getLogger(__name__)


def configure_logging(level_name: str):
    logging.basicConfig(level=getattr(logging, level_name, logging.WARNING), format=config.LOG_FORMAT, force=True)


def main_application(argv: Optional[List[str]] = None) -> int:
    """
    Main application entry point.
    Parses arguments, replays the transaction log, and prints the reports.
    Returns the process exit status.
    """
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    logger.info(f"Starting cryptogains on {args.transactions_file}...")

    try:
        processing_results: ProcessingOutput = run_core_processing_pipeline(
            transactions_file_path=args.transactions_file,
            known_currencies=args.known_currencies,
        )
    except FileNotFoundError as e:
        logger.critical(f"Transaction log not found: {e}. Exiting.")
        return 1
    except (LedgerError, MalformedInputError) as e:
        notes = "; ".join(getattr(e, "__notes__", []))
        logger.critical(f"Processing failed: {e}{f' ({notes})' if notes else ''}. Exiting.")
        return 1

    generate_console_tax_report(processing_results.tax_event_summaries, processing_results.balances)

    if args.show_lots:
        print_open_lots_diagnostic(processing_results.ledger)

    if args.pdf_output_file:
        pdf_generator = PdfReportGenerator(
            tax_event_summaries=processing_results.tax_event_summaries,
            balances=processing_results.balances,
            source_file_name=Path(args.transactions_file).name,
        )
        pdf_generator.generate_report(args.pdf_output_file)

    logger.info("Processing finished.")
    return 0


def main():
    sys.exit(main_application())


if __name__ == "__main__":
    main()
