"""Tests for loading card images and PDFs."""

import io
from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from PIL import Image

from cardscan.ocr.image_loader import (
    PDFHandler,
    is_pdf,
    load_image,
    load_images,
)


def _png_bytes(mode: str = "RGB") -> bytes:
    img = Image.new(mode, (120, 80), color=255 if mode == "L" else (255, 255, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _page(color: tuple[int, int, int]) -> Image.Image:
    return Image.new("RGB", (100, 60), color=color)


class TestPDFHandler:
    """Tests for PDFHandler."""

    def test_default_dpi(self) -> None:
        assert PDFHandler().dpi == 300

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            PDFHandler().pdf_to_images(Path("/nonexistent/card.pdf"))

    @patch("cardscan.ocr.image_loader.convert_from_path")
    def test_pdf_path_converted(self, mock_convert: MagicMock, tmp_path: Path) -> None:
        pdf = tmp_path / "card.pdf"
        pdf.write_bytes(b"%PDF-1.4 fake")
        mock_convert.return_value = [_page((255, 0, 0)), _page((0, 0, 255))]

        images = PDFHandler(dpi=200).pdf_to_images(pdf)

        assert len(images) == 2
        assert images[0].shape == (60, 100, 3)
        mock_convert.assert_called_once_with(str(pdf), dpi=200)

    @patch("cardscan.ocr.image_loader.convert_from_bytes")
    def test_pdf_bytes_converted(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = [_page((0, 255, 0))]
        images = PDFHandler().pdf_to_images(b"%PDF-1.4 fake")
        assert len(images) == 1

    @patch("cardscan.ocr.image_loader.convert_from_bytes")
    def test_conversion_failure(self, mock_convert: MagicMock) -> None:
        mock_convert.side_effect = Exception("poppler missing")
        with pytest.raises(RuntimeError, match="PDF conversion failed"):
            PDFHandler().pdf_to_images(b"%PDF-1.4 fake")

    @patch("cardscan.ocr.image_loader.pdfinfo_from_path")
    def test_page_count(self, mock_info: MagicMock) -> None:
        mock_info.return_value = {"Pages": 2}
        assert PDFHandler().get_page_count(Path("card.pdf")) == 2


class TestIsPdf:
    """Tests for PDF detection."""

    def test_pdf_bytes(self) -> None:
        assert is_pdf(b"%PDF-1.7\n...")

    def test_png_bytes(self) -> None:
        assert not is_pdf(_png_bytes())

    def test_pdf_path(self) -> None:
        assert is_pdf("scans/Card.PDF")
        assert not is_pdf(Path("scans/card.png"))

    def test_array(self) -> None:
        assert not is_pdf(np.zeros((2, 2), dtype=np.uint8))


class TestLoadImages:
    """Tests for load_images and load_image."""

    def test_array_passthrough(self, card_image: np.ndarray) -> None:
        images = load_images(card_image)
        assert len(images) == 1
        assert images[0] is card_image

    def test_png_bytes(self) -> None:
        image = load_image(_png_bytes())
        assert image.shape == (80, 120, 3)

    def test_grayscale_converted_to_rgb(self) -> None:
        image = load_image(_png_bytes("L"))
        assert image.ndim == 3

    def test_image_path(self, tmp_path: Path) -> None:
        path = tmp_path / "front.png"
        path.write_bytes(_png_bytes())
        assert load_image(path).shape == (80, 120, 3)
        assert load_image(str(path)).shape == (80, 120, 3)

    def test_missing_path(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_images(Path("/nonexistent/front.png"))

    def test_unreadable_bytes(self) -> None:
        with pytest.raises(ValueError, match="Unreadable image"):
            load_images(b"not an image at all")

    @patch("cardscan.ocr.image_loader.convert_from_bytes")
    def test_pdf_pages(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = [_page((255, 0, 0)), _page((0, 0, 255))]
        images = load_images(b"%PDF-1.4 fake")
        assert len(images) == 2
        assert tuple(images[1][0, 0]) == (0, 0, 255)

    @patch("cardscan.ocr.image_loader.convert_from_bytes")
    def test_load_image_takes_first_page(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = [_page((255, 0, 0)), _page((0, 0, 255))]
        assert tuple(load_image(b"%PDF-1.4 fake")[0, 0]) == (255, 0, 0)

    @patch("cardscan.ocr.image_loader.convert_from_bytes")
    def test_empty_pdf(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = []
        with pytest.raises(ValueError, match="no pages"):
            load_image(b"%PDF-1.4 fake")
