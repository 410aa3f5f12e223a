"""Structured field extraction from insurance card OCR text.

The parser is a pure function over strings: it applies the ordered regex
tables in :mod:`cardscan.parsing.patterns` to the raw OCR output of a card
(front and back joined by a newline) and always returns a fully populated
:class:`ParsedInsuranceCard`. Fields that no pattern matches are left
empty; nothing here raises for any string input.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from cardscan.parsing import patterns
from cardscan.parsing.providers import INSURANCE_PROVIDERS
from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")
_NUMERIC_LINE = re.compile(r"[\d\s\-./()#+]+")
_HAS_DIGIT = re.compile(r"\d")

MIN_PROVIDER_LINE_LENGTH = 5
MIN_MEMBER_ID_LENGTH = 6
MIN_STANDALONE_ID_LENGTH = 9
MIN_GROUP_NUMBER_LENGTH = 4
MIN_PLAN_NAME_LENGTH = 3
MIN_SUBSCRIBER_NAME_LENGTH = 5


class Confidence(StrEnum):
    """How the provider name was determined."""

    HIGH = "high"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class ProviderMatch:
    """Insurance carrier guess with its confidence."""

    name: str = ""
    confidence: Confidence = Confidence.NONE


@dataclass
class ParsedInsuranceCard:
    """Fields extracted from one insurance card.

    Every field is always present. A field that could not be found holds
    an empty string (or an empty list for ``phone_numbers``).
    """

    provider: ProviderMatch = field(default_factory=ProviderMatch)
    member_id: str = ""
    group_number: str = ""
    plan_name: str = ""
    subscriber_name: str = ""
    phone_numbers: list[str] = field(default_factory=list)
    rx_bin: str = ""
    rx_pcn: str = ""
    rx_group: str = ""

    def to_dict(self) -> dict[str, object]:
        """Serialize with the camelCase keys used by the insurance form."""
        return {
            "provider": {
                "name": self.provider.name,
                "confidence": self.provider.confidence.value,
            },
            "memberId": self.member_id,
            "groupNumber": self.group_number,
            "planName": self.plan_name,
            "subscriberName": self.subscriber_name,
            "phoneNumbers": list(self.phone_numbers),
            "rxBin": self.rx_bin,
            "rxPcn": self.rx_pcn,
            "rxGroup": self.rx_group,
        }

    def found_fields(self) -> list[str]:
        """Names of the fields that hold a value."""
        found = ["provider"] if self.provider.name else []
        for name in (
            "member_id",
            "group_number",
            "plan_name",
            "subscriber_name",
            "phone_numbers",
            "rx_bin",
            "rx_pcn",
            "rx_group",
        ):
            if getattr(self, name):
                found.append(name)
        return found


def normalize_for_matching(text: str) -> str:
    """Lowercase text with ``|`` removed and whitespace runs collapsed."""
    return _WHITESPACE.sub(" ", text.replace("|", "")).strip().lower()


def split_lines(text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def format_phone(area: str, exchange: str, line: str) -> str:
    """Render a North American number as ``(NNN) NNN-NNNN``."""
    return f"({area}) {exchange}-{line}"


def _first_accepted(
    table: Iterable[tuple[str, re.Pattern[str]]],
    text: str,
    accept: Callable[[str], str | None],
) -> tuple[str, str] | None:
    """Return ``(label, value)`` for the first match ``accept`` keeps.

    Patterns are tried in table order; within one pattern, matches are
    tried left to right. ``accept`` returns the normalized value or
    ``None`` to reject the match.
    """
    for label, pattern in table:
        for match in pattern.finditer(text):
            value = accept(match.group(1))
            if value is not None:
                return label, value
    return None


class InsuranceCardParser:
    """Rule-based extractor for insurance card OCR text.

    Holds no state; one instance may be shared across threads.
    """

    def parse(self, ocr_text: str) -> ParsedInsuranceCard:
        """Extract every card field from raw OCR text.

        Args:
            ocr_text: OCR output for the card, front and back joined by a
                newline. May be empty or noisy.

        Returns:
            A fully populated card record.
        """
        ocr_text = ocr_text or ""
        cleaned = normalize_for_matching(ocr_text)
        lines = split_lines(ocr_text)
        original = "\n".join(lines)

        card = ParsedInsuranceCard(
            provider=self.extract_provider(cleaned, lines),
            member_id=self.extract_member_id(original),
            group_number=self.extract_group_number(original),
            plan_name=self.extract_plan_name(original),
            subscriber_name=self.extract_subscriber_name(original),
            phone_numbers=self.extract_phone_numbers(original),
            rx_bin=self.extract_rx_bin(original),
            rx_pcn=self.extract_rx_pcn(original),
            rx_group=self.extract_rx_group(original),
        )

        logger.debug(
            "Parsed card text (%d lines): found %s, provider confidence %s",
            len(lines),
            ", ".join(card.found_fields()) or "nothing",
            card.provider.confidence.value,
        )
        return card

    def extract_provider(self, cleaned: str, lines: list[str]) -> ProviderMatch:
        """Match a known carrier, else guess from the first plausible line."""
        for name, needles in INSURANCE_PROVIDERS:
            if any(needle in cleaned for needle in needles):
                return ProviderMatch(name, Confidence.HIGH)

        for line in lines:
            if len(line) > MIN_PROVIDER_LINE_LENGTH and not _NUMERIC_LINE.fullmatch(
                line
            ):
                return ProviderMatch(line, Confidence.LOW)

        return ProviderMatch()

    def extract_member_id(self, text: str) -> str:
        """Labeled member ID, falling back to ID-shaped tokens."""

        def labeled(value: str) -> str | None:
            value = value.strip().upper()
            if len(value) >= MIN_MEMBER_ID_LENGTH and _HAS_DIGIT.search(value):
                return value
            return None

        def standalone(value: str) -> str | None:
            value = _WHITESPACE.sub("", value).upper()
            if len(value) >= MIN_STANDALONE_ID_LENGTH and _HAS_DIGIT.search(value):
                return value
            return None

        found = _first_accepted(patterns.MEMBER_ID_LABELED, text, labeled)
        if found is None:
            found = _first_accepted(patterns.MEMBER_ID_STANDALONE, text, standalone)
        if found is None:
            return ""

        logger.debug("Member ID matched by %s pattern", found[0])
        return found[1]

    def extract_group_number(self, text: str) -> str:
        def accept(value: str) -> str | None:
            value = value.strip().upper()
            return value if len(value) >= MIN_GROUP_NUMBER_LENGTH else None

        found = _first_accepted(patterns.GROUP_NUMBER, text, accept)
        return found[1] if found else ""

    def extract_plan_name(self, text: str) -> str:
        def accept(value: str) -> str | None:
            value = value.strip()
            if len(value) < MIN_PLAN_NAME_LENGTH:
                return None
            if value.lower() in patterns.PLAN_STOPWORDS:
                return None
            return value

        found = _first_accepted(patterns.PLAN_NAME, text, accept)
        if found is None:
            return ""
        label, value = found
        # Network types are acronyms; OCR case is not meaningful.
        return value.upper() if label == "network" else value

    def extract_subscriber_name(self, text: str) -> str:
        def accept(value: str) -> str | None:
            value = value.strip()
            if len(value) < MIN_SUBSCRIBER_NAME_LENGTH or " " not in value:
                return None
            if _HAS_DIGIT.search(value):
                return None
            if value.lower().startswith(patterns.NAME_REJECT_PREFIXES):
                return None
            return value

        found = _first_accepted(patterns.SUBSCRIBER_NAME, text, accept)
        return found[1] if found else ""

    def extract_phone_numbers(self, text: str) -> list[str]:
        """All phone numbers in first-seen order, without duplicates."""
        phones: list[str] = []
        for match in patterns.PHONE_NUMBER.finditer(text):
            phone = format_phone(*match.groups())
            if phone not in phones:
                phones.append(phone)
        return phones

    def extract_rx_bin(self, text: str) -> str:
        match = patterns.RX_BIN.search(text)
        return match.group(1) if match else ""

    def extract_rx_pcn(self, text: str) -> str:
        match = patterns.RX_PCN.search(text)
        return match.group(1).upper() if match else ""

    def extract_rx_group(self, text: str) -> str:
        match = patterns.RX_GROUP.search(text)
        return match.group(1).upper() if match else ""


_default_parser = InsuranceCardParser()


def parse_card_text(ocr_text: str) -> ParsedInsuranceCard:
    """Parse insurance card OCR text with the default parser."""
    return _default_parser.parse(ocr_text)
