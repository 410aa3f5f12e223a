"""Parser accuracy benchmark against labeled card texts.

Ground truth maps a sample name (usually the OCR text file name) to the
expected field values. Comparisons ignore case and the punctuation OCR
tends to garble in IDs and phone numbers.
"""

import csv
import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from cardscan.parsing.card_parser import ParsedInsuranceCard
from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

_IGNORED_CHARS = re.compile(r"[\s\-().]")


@dataclass
class FieldMetrics:
    """Match counts and derived scores for one card field."""

    field_name: str
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    exact_matches: int = 0
    total: int = 0

    @property
    def precision(self) -> float:
        denom = self.true_positives + self.false_positives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def recall(self) -> float:
        denom = self.true_positives + self.false_negatives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def f1(self) -> float:
        if self.precision + self.recall == 0:
            return 0.0
        return 2 * (self.precision * self.recall) / (self.precision + self.recall)

    @property
    def accuracy(self) -> float:
        """Fraction of samples where the value matched exactly."""
        if self.total == 0:
            return 0.0
        return self.exact_matches / self.total


@dataclass
class BenchmarkResult:
    """Aggregate scores over all labeled samples."""

    total_samples: int
    evaluated_samples: int
    overall_accuracy: float
    overall_f1: float
    field_metrics: dict[str, FieldMetrics]
    errors: list[str] = field(default_factory=list)


def card_to_prediction(card: ParsedInsuranceCard) -> dict[str, str]:
    """Flatten a parsed card into comparable field strings.

    Empty fields are omitted so they count as misses, not wrong answers.
    """
    values = {
        "provider": card.provider.name,
        "member_id": card.member_id,
        "group_number": card.group_number,
        "plan_name": card.plan_name,
        "subscriber_name": card.subscriber_name,
        "phone_numbers": "; ".join(card.phone_numbers),
        "rx_bin": card.rx_bin,
        "rx_pcn": card.rx_pcn,
        "rx_group": card.rx_group,
    }
    return {name: value for name, value in values.items() if value}


class Evaluator:
    """Scores parser output against expected card fields."""

    def evaluate(
        self,
        predictions: dict[str, dict[str, str]],
        ground_truth: dict[str, dict[str, str]],
    ) -> BenchmarkResult:
        """Compare predicted fields with the labels.

        Args:
            predictions: Sample name to predicted field values.
            ground_truth: Sample name to expected field values.

        Returns:
            Per-field and overall scores.
        """
        field_metrics: dict[str, FieldMetrics] = {}
        errors: list[str] = []
        missing = 0

        for sample, expected in ground_truth.items():
            predicted = predictions.get(sample)
            if predicted is None:
                errors.append(f"Missing prediction for {sample}")
                missing += 1

            for field_name, expected_value in expected.items():
                metrics = field_metrics.setdefault(field_name, FieldMetrics(field_name))
                metrics.total += 1

                if not predicted or field_name not in predicted:
                    metrics.false_negatives += 1
                    continue

                pred_value = str(predicted[field_name]).strip().lower()
                exp_value = str(expected_value).strip().lower()
                if pred_value == exp_value:
                    metrics.true_positives += 1
                    metrics.exact_matches += 1
                elif self._fuzzy_match(pred_value, exp_value):
                    metrics.true_positives += 1
                else:
                    metrics.false_positives += 1

        scored = [m for m in field_metrics.values() if m.total > 0]
        logger.info(
            "Evaluated %d samples across %d fields",
            len(ground_truth) - missing,
            len(scored),
        )
        return BenchmarkResult(
            total_samples=len(ground_truth),
            evaluated_samples=len(ground_truth) - missing,
            overall_accuracy=(
                sum(m.accuracy for m in scored) / len(scored) if scored else 0.0
            ),
            overall_f1=sum(m.f1 for m in scored) / len(scored) if scored else 0.0,
            field_metrics=field_metrics,
            errors=errors,
        )

    def _fuzzy_match(self, pred: str, expected: str) -> bool:
        """Equal once spaces, dashes, dots and parentheses are removed."""
        return _IGNORED_CHARS.sub("", pred) == _IGNORED_CHARS.sub("", expected)

    def generate_report(
        self, result: BenchmarkResult, output_path: Path | None = None
    ) -> str:
        """Render the benchmark as a text table, optionally writing it out."""
        lines = [
            "=" * 60,
            "CARD PARSER BENCHMARK",
            "=" * 60,
            f"Samples:              {result.total_samples}",
            f"Evaluated:            {result.evaluated_samples}",
            f"Overall Accuracy:     {result.overall_accuracy:.2%}",
            f"Overall F1 Score:     {result.overall_f1:.3f}",
            "",
            "Field-Level Metrics:",
            "-" * 60,
            f"{'Field':<20} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Accuracy':>10}",
            "-" * 60,
        ]

        for name, metrics in sorted(result.field_metrics.items()):
            lines.append(
                f"{name:<20} {metrics.precision:>10.2%} {metrics.recall:>10.2%} "
                f"{metrics.f1:>10.3f} {metrics.accuracy:>10.2%}"
            )
        lines.append("=" * 60)

        if result.errors:
            lines.append("")
            lines.append("Errors:")
            lines.extend(f"  - {error}" for error in result.errors)

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report)
            logger.info("Report written to %s", output_path)

        return report


def load_ground_truth(path: Path) -> dict[str, dict[str, str]]:
    """Load labels from JSON or CSV.

    JSON: ``{"sample": {"field": "value", ...}, ...}``.
    CSV: a ``sample`` column plus one column per field; blank cells are
    treated as unlabeled.

    Raises:
        ValueError: If the file extension is not ``.json`` or ``.csv``.
    """
    if path.suffix == ".json":
        with open(path) as f:
            return json.load(f)

    if path.suffix == ".csv":
        gt: dict[str, dict[str, str]] = {}
        with open(path, newline="") as f:
            for row in csv.DictReader(f):
                sample = row.pop("sample")
                gt[sample] = {k: v for k, v in row.items() if v}
        return gt

    raise ValueError(f"Unsupported ground truth format: {path.suffix}")
