"""Tests for the field review engine."""

from pathlib import Path

import yaml

from cardscan.parsing.card_parser import (
    Confidence,
    ParsedInsuranceCard,
    ProviderMatch,
    parse_card_text,
)
from cardscan.review.field_review import FieldReviewer, ReviewReport, ReviewResult


class TestFieldReviewer:
    """Tests for FieldReviewer with the built-in rules."""

    def setup_method(self) -> None:
        self.reviewer = FieldReviewer(rules_path=Path("/nonexistent/rules.yaml"))

    def test_default_rules_loaded(self) -> None:
        assert "member_id" in self.reviewer.rules
        assert "provider" in self.reviewer.rules

    def test_complete_card_all_clear(self, bcbs_card_text: str) -> None:
        report = self.reviewer.review(parse_card_text(bcbs_card_text))
        assert report.all_clear
        assert report.needs_review == []
        assert report.warnings == []

    def test_empty_card_flags_required_fields(self) -> None:
        report = self.reviewer.review(ParsedInsuranceCard())
        assert report.needs_review == ["provider", "member_id", "subscriber_name"]
        assert not report.all_clear

    def test_low_confidence_provider_flagged(self) -> None:
        card = ParsedInsuranceCard(provider=ProviderMatch("Acme Health", Confidence.LOW))
        report = self.reviewer.review(card)
        assert "provider" in report.needs_review
        failed = [
            r for r in report.results if r.field_name == "provider" and not r.passed
        ]
        assert [r.rule_name for r in failed] == ["provider_confidence"]

    def test_empty_optional_fields_pass_format_checks(self) -> None:
        report = self.reviewer.review(ParsedInsuranceCard())
        assert "group_number" not in report.needs_review
        assert "rx_bin" not in report.needs_review
        assert "phone_numbers" not in report.needs_review

    def test_malformed_phone_flagged(self) -> None:
        card = ParsedInsuranceCard(phone_numbers=["(800) 555-1234", "555-1234"])
        assert "phone_numbers" in self.reviewer.review(card).needs_review

    def test_short_group_number_flagged(self) -> None:
        card = ParsedInsuranceCard(group_number="12")
        assert "group_number" in self.reviewer.review(card).needs_review

    def test_bad_rx_bin_flagged(self) -> None:
        card = ParsedInsuranceCard(rx_bin="12A456")
        assert "rx_bin" in self.reviewer.review(card).needs_review


class TestRulesFromYaml:
    """Tests for rules loaded from a YAML file."""

    def test_project_rules_file(self, project_root: Path) -> None:
        reviewer = FieldReviewer(project_root / "configs" / "review_rules.yaml")
        assert reviewer.rules == reviewer._default_rules()

    def test_custom_rules(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            yaml.dump({"member_id": [{"type": "min_length", "min": 20}]})
        )
        reviewer = FieldReviewer(path)
        report = reviewer.review(ParsedInsuranceCard(member_id="ABC123456"))
        assert report.needs_review == ["member_id"]
        assert len(report.results) == 1

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("")
        assert FieldReviewer(path).rules == FieldReviewer(path)._default_rules()

    def test_unknown_rule_type_warns(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            yaml.dump(
                {"member_id": [{"type": "checksum"}, {"type": "required"}]}
            )
        )
        report = FieldReviewer(path).review(ParsedInsuranceCard(member_id="A1234567"))
        assert report.warnings == ["Unknown rule type: checksum"]
        assert report.all_clear

    def test_invalid_confidence_minimum_means_high(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            yaml.dump({"provider": [{"type": "provider_confidence", "min": "bogus"}]})
        )
        card = ParsedInsuranceCard(provider=ProviderMatch("Acme Health", Confidence.LOW))
        assert FieldReviewer(path).review(card).needs_review == ["provider"]


class TestReviewReport:
    """Tests for ReviewReport aggregation."""

    def test_needs_review_deduplicated_in_order(self) -> None:
        report = ReviewReport(
            results=[
                ReviewResult("provider", False, "missing", "required"),
                ReviewResult("member_id", False, "missing", "required"),
                ReviewResult("provider", False, "low", "provider_confidence"),
                ReviewResult("rx_bin", True, "ok", "regex"),
            ]
        )
        assert report.needs_review == ["provider", "member_id"]

    def test_all_clear_when_empty(self) -> None:
        assert ReviewReport(results=[]).all_clear
