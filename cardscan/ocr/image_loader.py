"""Card image loading from files, uploads and PDFs.

Digital insurance cards are often issued as PDFs with the front on the
first page and the back on the second.
"""

import io
from pathlib import Path

import numpy as np
from pdf2image import convert_from_bytes, convert_from_path
from pdf2image.pdf2image import pdfinfo_from_path
from PIL import Image

from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

CardSource = Path | str | bytes | np.ndarray


class PDFHandler:
    """Renders PDF pages to images for OCR.

    Args:
        dpi: Rendering resolution. Card text is small, so keep this high.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def pdf_to_images(self, pdf_source: Path | bytes) -> list[np.ndarray]:
        """Render every page of a PDF.

        Args:
            pdf_source: Path to a PDF file or raw PDF bytes.

        Returns:
            Page images as RGB numpy arrays.

        Raises:
            FileNotFoundError: If a path is given and the file does not exist.
            RuntimeError: If PDF conversion fails.
        """
        try:
            if isinstance(pdf_source, str | Path):
                path = Path(pdf_source)
                if not path.exists():
                    raise FileNotFoundError(f"PDF file not found: {path}")
                pil_images = convert_from_path(str(path), dpi=self.dpi)
            else:
                pil_images = convert_from_bytes(pdf_source, dpi=self.dpi)

            images = [np.array(img.convert("RGB")) for img in pil_images]
            logger.info("Converted PDF to %d images at %d DPI", len(images), self.dpi)
            return images

        except FileNotFoundError:
            raise
        except Exception as exc:
            raise RuntimeError(f"PDF conversion failed: {exc}") from exc

    def get_page_count(self, pdf_path: Path) -> int:
        """Number of pages in a PDF, without rendering it."""
        info = pdfinfo_from_path(str(pdf_path))
        count = info["Pages"]
        logger.debug("PDF %s has %d pages", pdf_path, count)
        return count


def is_pdf(source: CardSource) -> bool:
    """Whether a path or byte string refers to a PDF."""
    if isinstance(source, bytes):
        return source[:4] == b"%PDF"
    if isinstance(source, str | Path):
        return Path(source).suffix.lower() == ".pdf"
    return False


def load_images(
    source: CardSource, pdf_handler: PDFHandler | None = None
) -> list[np.ndarray]:
    """Load a card source as a list of images.

    Images yield one entry; PDFs yield one entry per page.

    Args:
        source: File path, raw upload bytes, or an already decoded image.
        pdf_handler: Renderer for PDF sources. A 300 DPI one by default.

    Raises:
        FileNotFoundError: If a path does not exist.
        ValueError: If the bytes are not a readable image.
    """
    if isinstance(source, np.ndarray):
        return [source]

    if is_pdf(source):
        handler = pdf_handler or PDFHandler()
        pdf_source = source if isinstance(source, bytes) else Path(source)
        return handler.pdf_to_images(pdf_source)

    stream: io.BytesIO | Path
    if isinstance(source, bytes):
        stream = io.BytesIO(source)
    else:
        stream = Path(source)
        if not stream.exists():
            raise FileNotFoundError(f"Image file not found: {stream}")

    try:
        img = Image.open(stream)
        return [np.array(img.convert("RGB"))]
    except OSError as exc:
        raise ValueError(f"Unreadable image: {exc}") from exc


def load_image(
    source: CardSource, pdf_handler: PDFHandler | None = None
) -> np.ndarray:
    """Load a single card side; for a PDF this is its first page."""
    images = load_images(source, pdf_handler)
    if not images:
        raise ValueError("Document contains no pages")
    return images[0]
