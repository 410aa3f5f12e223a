"""Field review for parsed insurance cards.

Card parsing is best effort, so before a user saves a scanned card the
fields that are missing or look malformed are flagged for manual
correction. Rules are loaded per field from YAML.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cardscan.parsing.card_parser import Confidence, ParsedInsuranceCard
from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

_CONFIDENCE_RANK = {Confidence.NONE: 0, Confidence.LOW: 1, Confidence.HIGH: 2}
_PHONE_FORMAT = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$")


@dataclass
class ReviewResult:
    """Outcome of one rule applied to one field."""

    field_name: str
    passed: bool
    message: str
    rule_name: str


@dataclass
class ReviewReport:
    """All review results for a card."""

    results: list[ReviewResult]
    warnings: list[str] = field(default_factory=list)

    @property
    def needs_review(self) -> list[str]:
        """Fields with at least one failed check, in rule order."""
        flagged: list[str] = []
        for result in self.results:
            if not result.passed and result.field_name not in flagged:
                flagged.append(result.field_name)
        return flagged

    @property
    def all_clear(self) -> bool:
        return not self.needs_review


def _field_value(card: ParsedInsuranceCard, field_name: str) -> Any:
    if field_name == "provider":
        return card.provider.name
    return getattr(card, field_name, None)


class FieldReviewer:
    """Applies per-field review rules to parsed cards.

    Args:
        rules_path: YAML file mapping field names to rule lists. Built-in
            defaults are used when the file is missing or empty.
    """

    def __init__(
        self, rules_path: Path = Path("configs/review_rules.yaml")
    ) -> None:
        self.rules = self._load_rules(rules_path)
        self._checks: dict[str, Callable[..., ReviewResult]] = {
            "required": self._check_required,
            "regex": self._check_regex,
            "min_length": self._check_min_length,
            "provider_confidence": self._check_provider_confidence,
            "phone": self._check_phone,
        }

    def _load_rules(self, path: Path) -> dict[str, list[dict[str, Any]]]:
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
            if data:
                logger.info("Loaded review rules from %s", path)
                return data
        logger.debug("Using default review rules")
        return self._default_rules()

    def _default_rules(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "provider": [
                {"type": "required"},
                {"type": "provider_confidence", "min": "high"},
            ],
            "member_id": [
                {"type": "required"},
                {"type": "regex", "pattern": r"^[A-Z0-9][A-Z0-9\-]{5,}$"},
            ],
            "group_number": [{"type": "min_length", "min": 4}],
            "subscriber_name": [{"type": "required"}],
            "phone_numbers": [{"type": "phone"}],
            "rx_bin": [{"type": "regex", "pattern": r"^\d{6}$"}],
        }

    def review(self, card: ParsedInsuranceCard) -> ReviewReport:
        """Check a parsed card against the configured rules.

        Never raises; unknown rule types are reported as warnings.
        """
        results: list[ReviewResult] = []
        warnings: list[str] = []

        for field_name, rules in self.rules.items():
            value = _field_value(card, field_name)
            for rule in rules or []:
                rule_type = rule.get("type")
                check = self._checks.get(rule_type)
                if check is None:
                    warnings.append(f"Unknown rule type: {rule_type}")
                    continue
                results.append(check(field_name, value, rule, card))

        report = ReviewReport(results=results, warnings=warnings)
        logger.info(
            "Card review: %d checks, %d fields flagged",
            len(results),
            len(report.needs_review),
        )
        return report

    def _check_required(
        self, field_name: str, value: Any, rule: dict, card: ParsedInsuranceCard
    ) -> ReviewResult:
        if value:
            return ReviewResult(field_name, True, "Value present", "required")
        return ReviewResult(
            field_name, False, f"Not found on card: {field_name}", "required"
        )

    def _check_regex(
        self, field_name: str, value: Any, rule: dict, card: ParsedInsuranceCard
    ) -> ReviewResult:
        if not value:
            return ReviewResult(field_name, True, "No value to check", "regex")
        pattern = rule.get("pattern", "")
        if re.match(pattern, str(value)):
            return ReviewResult(field_name, True, "Matches expected format", "regex")
        return ReviewResult(
            field_name, False, f"Unexpected format for {field_name}", "regex"
        )

    def _check_min_length(
        self, field_name: str, value: Any, rule: dict, card: ParsedInsuranceCard
    ) -> ReviewResult:
        if not value:
            return ReviewResult(field_name, True, "No value to check", "min_length")
        minimum = int(rule.get("min", 1))
        if len(str(value)) >= minimum:
            return ReviewResult(field_name, True, "Long enough", "min_length")
        return ReviewResult(
            field_name,
            False,
            f"{field_name} shorter than {minimum} characters",
            "min_length",
        )

    def _check_provider_confidence(
        self, field_name: str, value: Any, rule: dict, card: ParsedInsuranceCard
    ) -> ReviewResult:
        try:
            minimum = Confidence(str(rule.get("min", Confidence.HIGH)).lower())
        except ValueError:
            minimum = Confidence.HIGH
        actual = card.provider.confidence
        if _CONFIDENCE_RANK[actual] >= _CONFIDENCE_RANK[minimum]:
            return ReviewResult(
                field_name, True, f"Provider confidence {actual}", "provider_confidence"
            )
        return ReviewResult(
            field_name,
            False,
            f"Provider confidence {actual} is below {minimum}; please confirm",
            "provider_confidence",
        )

    def _check_phone(
        self, field_name: str, value: Any, rule: dict, card: ParsedInsuranceCard
    ) -> ReviewResult:
        numbers = value if isinstance(value, list) else [value] if value else []
        bad = [n for n in numbers if not _PHONE_FORMAT.match(str(n))]
        if bad:
            return ReviewResult(
                field_name, False, f"{len(bad)} malformed phone number(s)", "phone"
            )
        return ReviewResult(field_name, True, "Phone numbers well formed", "phone")
