"""Tesseract OCR for insurance card images.

Wraps ``pytesseract`` to return the card text together with an average
word confidence, and reports coarse progress for callers that show it.
"""

import shutil
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]


class OCRError(RuntimeError):
    """Raised when Tesseract cannot read an image."""


@dataclass
class OCRResult:
    """Text read from one side of a card."""

    text: str
    language: str
    confidence: float
    word_count: int


class TesseractEngine:
    """Thin wrapper around Tesseract.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        default_psm: Default Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        default_psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.default_psm = default_psm

    def is_available(self) -> bool:
        """Whether a Tesseract binary can be found."""
        return shutil.which(self.tesseract_cmd or "tesseract") is not None

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> OCRResult:
        """Read the text from a card image.

        Args:
            image: Card image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Page segmentation mode. Defaults to the engine default.
            on_progress: Called with a percentage (0-100) as work completes.

        Returns:
            The recognized text with its average word confidence (0-1).

        Raises:
            OCRError: If Tesseract fails on the image.
        """
        lang = lang or self.default_lang
        config = f"--psm {psm if psm is not None else self.default_psm}"
        report_progress(on_progress, 0)

        try:
            pil_image = Image.fromarray(image)
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            report_progress(on_progress, 60)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            logger.error("OCR extraction failed: %s", exc)
            raise OCRError("Failed to extract text from image") from exc

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and str(word).strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
        report_progress(on_progress, 100)

        logger.info(
            "OCR read %d words with average confidence %.2f",
            len(confidences),
            avg_conf,
        )
        return OCRResult(
            text=text,
            language=lang,
            confidence=avg_conf,
            word_count=len(confidences),
        )


def report_progress(callback: ProgressCallback | None, percent: int) -> None:
    """Invoke a progress callback if one was given."""
    if callback is not None:
        callback(percent)
