"""OpenCV filters for phone photos of insurance cards.

Card photos are small, unevenly lit and often slightly rotated; these
filters address each of those before OCR.
"""

import cv2
import numpy as np

from cardscan.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert to single-channel grayscale if the image has color."""
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def upscale(image: np.ndarray, min_width: int = 1000) -> np.ndarray:
    """Enlarge narrow images so small card print reaches OCR-readable size.

    Args:
        image: Input image.
        min_width: Target width in pixels. Wider images are returned as is.

    Returns:
        The resized image, aspect ratio preserved.
    """
    height, width = image.shape[:2]
    if width >= min_width or width == 0:
        return image

    scale = min_width / width
    result = cv2.resize(
        image,
        (min_width, max(1, round(height * scale))),
        interpolation=cv2.INTER_CUBIC,
    )
    logger.debug("Upscaled image by %.2fx to width %d", scale, min_width)
    return result


def detect_skew_angle(image: np.ndarray) -> float:
    """Estimate rotation from the median angle of long straight edges.

    Returns 0.0 when no lines are found.
    """
    edges = cv2.Canny(to_gray(image), 50, 150, apertureSize=3)
    lines = cv2.HoughLinesP(
        edges, 1, np.pi / 180, 100, minLineLength=100, maxLineGap=10
    )
    if lines is None:
        return 0.0

    # OpenCV 4 returns (N, 1, 4) and OpenCV 5 returns (N, 4).
    segments = lines.reshape(-1, 4)
    angles = [
        np.arctan2(y2 - y1, x2 - x1) * 180 / np.pi for x1, y1, x2, y2 in segments
    ]
    # Card edges and text baselines are near horizontal; ignore verticals.
    angles = [a for a in angles if abs(a) < 45]
    if not angles:
        return 0.0
    return float(np.median(angles))


def deskew(image: np.ndarray, angle_threshold: float = 0.5) -> np.ndarray:
    """Rotate the image so text baselines are horizontal.

    Args:
        image: Input image.
        angle_threshold: Rotations smaller than this (degrees) are skipped.
    """
    angle = detect_skew_angle(image)
    if abs(angle) < angle_threshold:
        return image

    h, w = image.shape[:2]
    rotation_matrix = cv2.getRotationMatrix2D((w // 2, h // 2), angle, 1.0)
    result = cv2.warpAffine(
        image,
        rotation_matrix,
        (w, h),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_REPLICATE,
    )
    logger.debug("Deskewed image by %.2f degrees", angle)
    return result


def denoise(image: np.ndarray, method: str = "bilateral") -> np.ndarray:
    """Reduce sensor noise.

    Args:
        image: Input image.
        method: ``"gaussian"`` or ``"bilateral"`` (edge preserving).

    Raises:
        ValueError: If the method is not supported.
    """
    if method == "gaussian":
        return cv2.GaussianBlur(image, (5, 5), 0)
    if method == "bilateral":
        return cv2.bilateralFilter(image, 9, 75, 75)
    raise ValueError(f"Unsupported denoise method: {method}")


def enhance_contrast(
    image: np.ndarray, clip_limit: float = 2.0, tile_size: int = 8
) -> np.ndarray:
    """Even out glare and shadows with CLAHE. Returns grayscale."""
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(to_gray(image))


def binarize(image: np.ndarray, method: str = "adaptive") -> np.ndarray:
    """Threshold to black and white.

    Args:
        image: Input image.
        method: ``"adaptive"`` (local Gaussian threshold, better on
            patterned card backgrounds) or ``"otsu"``.

    Raises:
        ValueError: If the method is not supported.
    """
    gray = to_gray(image)
    if method == "adaptive":
        return cv2.adaptiveThreshold(
            gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 31, 10
        )
    if method == "otsu":
        _, result = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        return result
    raise ValueError(f"Unsupported binarize method: {method}")


def sharpness(image: np.ndarray) -> float:
    """Laplacian variance; low values indicate a blurry photo."""
    return float(cv2.Laplacian(to_gray(image), cv2.CV_64F).var())


def contrast(image: np.ndarray) -> float:
    """Standard deviation of grayscale intensities."""
    return float(to_gray(image).std())
