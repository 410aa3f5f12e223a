"""Configuration for the card scanner.

Settings come from ``configs/config.yaml`` when present; every section
has defaults so the parser and API run without any file.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class PreprocessingConfig(BaseModel):
    """Which image filters run before OCR and how."""

    upscale_enabled: bool = True
    min_width: int = 1000
    deskew_enabled: bool = True
    denoise_enabled: bool = True
    denoise_method: Literal["gaussian", "bilateral"] = "bilateral"
    contrast_enabled: bool = True
    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8
    binarize_enabled: bool = False
    binarize_method: Literal["adaptive", "otsu"] = "adaptive"


class OCRConfig(BaseModel):
    """Tesseract settings."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    pdf_dpi: int = 300


class ScannerConfig(BaseModel):
    """Card scanning options."""

    preprocess: bool = True
    max_upload_mb: int = 10


class ReviewConfig(BaseModel):
    """Location of the field review rules."""

    rules_path: str = "configs/review_rules.yaml"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load and validate configuration from YAML.

    Args:
        path: Config file location. Defaults to ``configs/config.yaml``.

    Returns:
        The validated configuration, or defaults when the file is missing
        or empty.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
