"""Command-line interface for parsing and scanning insurance cards.

Subcommands parse saved OCR text, scan card images, batch-process a
folder into CSV, and benchmark the parser against labeled samples.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

from cardscan.benchmark.evaluator import (
    Evaluator,
    card_to_prediction,
    load_ground_truth,
)
from cardscan.ocr.card_scanner import CardScanner, ScanError
from cardscan.parsing.card_parser import ParsedInsuranceCard, parse_card_text
from cardscan.parsing.form_mapping import to_insurance_form
from cardscan.review.field_review import FieldReviewer
from cardscan.utils.config import AppConfig, load_config
from cardscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_TEXT_EXTENSIONS = (".txt",)
_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tiff", ".tif", ".webp", ".pdf")
_META_COLUMNS = [
    "filename",
    "status",
    "source",
    "provider_confidence",
    "needs_review",
    "error",
]


def _find_inputs(input_dir: Path) -> list[Path]:
    """OCR text dumps and card images in a directory, sorted by name."""
    suffixes = _TEXT_EXTENSIONS + _IMAGE_EXTENSIONS
    return sorted(
        p for p in input_dir.iterdir() if p.is_file() and p.suffix.lower() in suffixes
    )


def _card_output(
    card: ParsedInsuranceCard, reviewer: FieldReviewer
) -> dict[str, object]:
    report = reviewer.review(card)
    return {
        "card": card.to_dict(),
        "form": to_insurance_form(card),
        "needs_review": report.needs_review,
    }


def _emit(result: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(result, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def parse_text_file(source: Path | None, config: AppConfig) -> dict[str, object]:
    """Parse OCR text from a file, or from stdin when ``source`` is None."""
    text = sys.stdin.read() if source is None else source.read_text()
    reviewer = FieldReviewer(rules_path=Path(config.review.rules_path))
    return _card_output(parse_card_text(text), reviewer)


def scan_images(
    front: Path,
    back: Path | None,
    config: AppConfig,
    verbose: bool = False,
) -> dict[str, object]:
    """Scan card images and return the parsed output as a dict."""
    scanner = CardScanner(config)
    reviewer = FieldReviewer(rules_path=Path(config.review.rules_path))

    def show_progress(percent: int) -> None:
        print(f"\rScanning... {percent:3d}%", end="", file=sys.stderr)
        if percent >= 100:
            print(file=sys.stderr)

    result = scanner.scan(front, back, show_progress if verbose else None)
    output = _card_output(result.card, reviewer)
    output["ocr_confidence"] = {
        "front": round(result.front.ocr_result.confidence, 3),
        "back": round(result.back.ocr_result.confidence, 3) if result.back else None,
    }
    return output


def process_folder(
    input_dir: Path,
    output_csv: Path,
    config: AppConfig,
    verbose: bool = False,
) -> dict[str, int]:
    """Parse every text dump and scan every card image in a folder.

    Each image (or PDF) is treated as a whole card: PDFs may carry the
    back on page 2, single images are fronts only.

    Returns:
        Summary dict with total, successful and failed counts.
    """
    files = _find_inputs(input_dir)
    if not files:
        logger.warning("No card files found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d card files to process", len(files))
    reviewer = FieldReviewer(rules_path=Path(config.review.rules_path))
    scanner: CardScanner | None = None

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {path.name}")

        try:
            if path.suffix.lower() in _TEXT_EXTENSIONS:
                card = parse_card_text(path.read_text())
                source = "text"
            else:
                scanner = scanner or CardScanner(config)
                card = scanner.scan_document(path).card
                source = "image"
        except (ScanError, OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to process %s: %s", path.name, exc)
            rows.append({"filename": path.name, "status": "failed", "error": str(exc)})
            failed += 1
            continue

        report = reviewer.review(card)
        row: dict[str, object] = {
            "filename": path.name,
            "status": "success",
            "source": source,
            "provider_confidence": card.provider.confidence.value,
            "needs_review": ";".join(report.needs_review),
            "error": None,
        }
        row.update(card_to_prediction(card))
        rows.append(row)
        successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    if not rows:
        return

    all_keys: set[str] = set()
    for r in rows:
        all_keys.update(r.keys())

    field_columns = sorted(all_keys - set(_META_COLUMNS))
    columns = [c for c in _META_COLUMNS if c in all_keys] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def run_benchmark(
    samples_dir: Path, ground_truth_path: Path, output: Path | None = None
) -> str:
    """Parse labeled OCR text dumps and report per-field accuracy.

    Samples are keyed by file name, matching the ground truth keys.
    """
    ground_truth = load_ground_truth(ground_truth_path)
    predictions = {
        path.name: card_to_prediction(parse_card_text(path.read_text()))
        for path in sorted(samples_dir.glob("*.txt"))
    }
    evaluator = Evaluator()
    result = evaluator.evaluate(predictions, ground_truth)
    return evaluator.generate_report(result, output)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the selected command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        prog="cardscan",
        description="Insurance card parser and scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Config file (default: configs/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse saved OCR text")
    parse_parser.add_argument(
        "file", type=Path, nargs="?", help="OCR text file (default: stdin)"
    )
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    scan_parser = subparsers.add_parser("scan", help="Scan card images")
    scan_parser.add_argument("front", type=Path, help="Image of the card front")
    scan_parser.add_argument("-b", "--back", type=Path, help="Image of the card back")
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    scan_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show scan progress"
    )

    batch_parser = subparsers.add_parser("batch", help="Process a folder of cards")
    batch_parser.add_argument("input_dir", type=Path, help="Folder of cards")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("cards.csv"),
        help="Output CSV file (default: cards.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    bench_parser = subparsers.add_parser(
        "benchmark", help="Score the parser against labeled OCR text"
    )
    bench_parser.add_argument("samples_dir", type=Path, help="Folder of .txt samples")
    bench_parser.add_argument(
        "ground_truth", type=Path, help="Expected fields (.json or .csv)"
    )
    bench_parser.add_argument("-o", "--output", type=Path, help="Report file")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "parse":
        if args.file is not None and not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        _emit(parse_text_file(args.file, config), args.output)
    elif args.command == "scan":
        for path in (args.front, args.back):
            if path is not None and not path.exists():
                print(f"Error: {path} does not exist", file=sys.stderr)
                sys.exit(1)
        try:
            result = scan_images(args.front, args.back, config, args.verbose)
        except ScanError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, config, args.verbose)
    elif args.command == "benchmark":
        if not args.samples_dir.is_dir():
            print(f"Error: {args.samples_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        if not args.ground_truth.exists():
            print(f"Error: {args.ground_truth} does not exist", file=sys.stderr)
            sys.exit(1)
        print(run_benchmark(args.samples_dir, args.ground_truth, args.output))
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
