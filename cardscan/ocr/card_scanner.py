"""Front-and-back card scanning pipeline.

Each side is preprocessed and read with Tesseract; the two texts are
joined with a newline and handed to the card parser. The back of the card
is optional.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from cardscan.ocr.image_loader import CardSource, PDFHandler, load_image, load_images
from cardscan.ocr.tesseract_engine import (
    OCRError,
    OCRResult,
    ProgressCallback,
    TesseractEngine,
    report_progress,
)
from cardscan.parsing.card_parser import InsuranceCardParser, ParsedInsuranceCard
from cardscan.parsing.form_mapping import to_insurance_form
from cardscan.preprocessing.pipeline import PreprocessingPipeline, QualityMetrics
from cardscan.utils.config import AppConfig
from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

SCAN_FAILED_MESSAGE = (
    "Failed to process card images. Please try again or enter manually."
)


class ScanError(RuntimeError):
    """Raised when a card side cannot be loaded or read."""


@dataclass
class SideResult:
    """OCR output for one side of the card."""

    ocr_result: OCRResult
    quality_metrics: QualityMetrics | None = None


@dataclass
class ScanResult:
    """Everything produced by scanning a card."""

    front: SideResult
    back: SideResult | None
    combined_text: str
    card: ParsedInsuranceCard

    @property
    def form(self) -> dict[str, object]:
        """The parsed card in insurance form shape."""
        return to_insurance_form(self.card)


def _scaled(
    callback: ProgressCallback | None, start: int, span: float
) -> ProgressCallback | None:
    """Map a side's 0-100 progress onto part of the overall scan."""
    if callback is None:
        return None
    return lambda percent: callback(round(start + percent * span))


class CardScanner:
    """Scans insurance card images into parsed card records.

    Args:
        config: Application configuration.
        engine: OCR engine; built from ``config.ocr`` when omitted.
        parser: Card text parser; a default parser when omitted.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        engine: TesseractEngine | None = None,
        parser: InsuranceCardParser | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.engine = engine or TesseractEngine(
            tesseract_cmd=self.config.ocr.tesseract_cmd,
            default_lang=self.config.ocr.default_lang,
            default_psm=self.config.ocr.psm,
        )
        self.parser = parser or InsuranceCardParser()
        self.preprocessing = PreprocessingPipeline(self.config.preprocessing)
        self.pdf_handler = PDFHandler(dpi=self.config.ocr.pdf_dpi)

    def scan(
        self,
        front: CardSource,
        back: CardSource | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ScanResult:
        """Read and parse a card.

        Progress runs 10 -> 50 while reading the front, 50 -> 90 while
        reading the back, then 100 once the text is parsed.

        Args:
            front: Front image (path, bytes or array; PDFs use page 1).
            back: Optional back image.
            on_progress: Called with overall percentages (0-100).

        Returns:
            The OCR output for each side and the parsed card.

        Raises:
            ScanError: If either side cannot be loaded, preprocessed or read.
        """
        try:
            report_progress(on_progress, 10)
            front_side = self._read_side(
                load_image(front, self.pdf_handler), _scaled(on_progress, 10, 0.4)
            )

            report_progress(on_progress, 50)
            back_side = None
            if back is not None:
                back_side = self._read_side(
                    load_image(back, self.pdf_handler), _scaled(on_progress, 50, 0.4)
                )
        except (
            OCRError,
            ValueError,
            RuntimeError,
            OSError,
            TypeError,
            cv2.error,
        ) as exc:
            logger.error("Card scan failed: %s", exc)
            raise ScanError(SCAN_FAILED_MESSAGE) from exc

        report_progress(on_progress, 90)
        back_text = back_side.ocr_result.text if back_side else ""
        combined_text = f"{front_side.ocr_result.text}\n{back_text}"
        card = self.parser.parse(combined_text)
        report_progress(on_progress, 100)

        logger.info(
            "Scanned card (%s): %d fields found",
            "front and back" if back_side else "front only",
            len(card.found_fields()),
        )
        return ScanResult(
            front=front_side,
            back=back_side,
            combined_text=combined_text,
            card=card,
        )

    def scan_document(
        self,
        source: CardSource,
        on_progress: ProgressCallback | None = None,
    ) -> ScanResult:
        """Scan a single upload holding the whole card.

        For a PDF the first page is the front and the second page, if
        present, the back. Any other source is treated as the front only.

        Raises:
            ScanError: If the document cannot be loaded or read.
        """
        try:
            pages = load_images(source, self.pdf_handler)
        except (ValueError, RuntimeError, OSError) as exc:
            logger.error("Could not load card document: %s", exc)
            raise ScanError(SCAN_FAILED_MESSAGE) from exc

        if not pages:
            raise ScanError(SCAN_FAILED_MESSAGE)
        back = pages[1] if len(pages) > 1 else None
        return self.scan(pages[0], back, on_progress)

    def _read_side(
        self, image: np.ndarray, on_progress: ProgressCallback | None
    ) -> SideResult:
        metrics = None
        if self.config.scanner.preprocess:
            image, metrics = self.preprocessing.process(image)
        ocr_result = self.engine.extract_text(image, on_progress=on_progress)
        return SideResult(ocr_result=ocr_result, quality_metrics=metrics)
