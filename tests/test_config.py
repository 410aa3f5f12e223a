"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cardscan.utils.config import (
    AppConfig,
    OCRConfig,
    PreprocessingConfig,
    load_config,
)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self) -> None:
        config = load_config(Path("/nonexistent/config.yaml"))
        assert config == AppConfig()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == AppConfig()

    def test_project_config(self, project_root: Path) -> None:
        config = load_config(project_root / "configs" / "config.yaml")
        assert config.ocr.default_lang == "eng"
        assert config.scanner.preprocess is True
        assert config.review.rules_path == "configs/review_rules.yaml"

    def test_partial_override(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("ocr:\n  psm: 6\nlog_level: DEBUG\n")
        config = load_config(path)
        assert config.ocr.psm == 6
        assert config.ocr.default_lang == "eng"
        assert config.log_level == "DEBUG"
        assert config.preprocessing.min_width == 1000

    def test_invalid_method_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("preprocessing:\n  denoise_method: median\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestConfigDefaults:
    """Tests for the config model defaults."""

    def test_preprocessing_defaults(self) -> None:
        config = PreprocessingConfig()
        assert config.denoise_method == "bilateral"
        assert config.binarize_enabled is False

    def test_ocr_defaults(self) -> None:
        config = OCRConfig()
        assert config.tesseract_cmd is None
        assert config.pdf_dpi == 300
