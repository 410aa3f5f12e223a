"""Configurable preprocessing applied to each card side before OCR."""

from dataclasses import dataclass

import numpy as np

from cardscan.preprocessing import filters
from cardscan.utils.config import PreprocessingConfig
from cardscan.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Image quality before and after preprocessing."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


class PreprocessingPipeline:
    """Runs the enabled filters in a fixed order.

    Order: upscale, deskew, denoise, contrast, binarize.

    Args:
        config: Which steps to run and their parameters.
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def process(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Prepare an image for OCR.

        Args:
            image: Card photo (RGB or grayscale).

        Returns:
            Tuple of (processed_image, quality_metrics).
        """
        cfg = self.config
        sharpness_before = filters.sharpness(image)
        contrast_before = filters.contrast(image)

        result = image.copy()
        if cfg.upscale_enabled:
            result = filters.upscale(result, cfg.min_width)
        if cfg.deskew_enabled:
            result = filters.deskew(result)
        if cfg.denoise_enabled:
            result = filters.denoise(result, cfg.denoise_method)
        if cfg.contrast_enabled:
            result = filters.enhance_contrast(
                result, cfg.clahe_clip_limit, cfg.clahe_tile_size
            )
        if cfg.binarize_enabled:
            result = filters.binarize(result, cfg.binarize_method)

        metrics = QualityMetrics(
            sharpness_before=sharpness_before,
            sharpness_after=filters.sharpness(result),
            contrast_before=contrast_before,
            contrast_after=filters.contrast(result),
        )
        logger.info(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
