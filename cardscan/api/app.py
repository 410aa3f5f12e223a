"""FastAPI application for insurance card parsing and scanning.

Provides endpoints to parse OCR text, scan card images (front and
optional back, or a single PDF), list recognized carriers, and report
health.
"""

import time
import uuid
from pathlib import Path
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from cardscan import __version__
from cardscan.api.schemas import (
    HealthResponse,
    ParsedCardResponse,
    ParseRequest,
    ParseResponse,
    ProviderResponse,
    ProvidersResponse,
    ReviewItemResponse,
    ScanResponse,
    SideResponse,
)
from cardscan.ocr.card_scanner import CardScanner, ScanError, ScanResult, SideResult
from cardscan.parsing.card_parser import ParsedInsuranceCard, parse_card_text
from cardscan.parsing.form_mapping import to_insurance_form
from cardscan.parsing.providers import provider_names
from cardscan.review.field_review import FieldReviewer
from cardscan.utils.config import AppConfig, load_config
from cardscan.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Insurance Card Scanner API",
    description="Extract member, group, plan and pharmacy fields from insurance cards",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/webp",
    "application/pdf",
    "application/octet-stream",
}


def _get_components() -> tuple[AppConfig, CardScanner, FieldReviewer]:
    """Build the configuration, scanner and reviewer for a request."""
    config = load_config()
    scanner = CardScanner(config)
    reviewer = FieldReviewer(rules_path=Path(config.review.rules_path))
    return config, scanner, reviewer


async def _read_upload(upload: UploadFile, config: AppConfig) -> bytes:
    """Read an upload after checking its type and size."""
    if upload.content_type and upload.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {upload.content_type}",
        )
    content = await upload.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload")
    if len(content) > config.scanner.max_upload_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail="Upload too large")
    return content


def _card_response(card: ParsedInsuranceCard) -> ParsedCardResponse:
    return ParsedCardResponse(
        provider=ProviderResponse(
            name=card.provider.name,
            confidence=card.provider.confidence.value,
        ),
        member_id=card.member_id,
        group_number=card.group_number,
        plan_name=card.plan_name,
        subscriber_name=card.subscriber_name,
        phone_numbers=list(card.phone_numbers),
        rx_bin=card.rx_bin,
        rx_pcn=card.rx_pcn,
        rx_group=card.rx_group,
    )


def _side_response(side: SideResult | None) -> SideResponse | None:
    if side is None:
        return None
    return SideResponse(
        text=side.ocr_result.text,
        confidence=side.ocr_result.confidence,
        word_count=side.ocr_result.word_count,
    )


def _scan_response(
    result: ScanResult, reviewer: FieldReviewer, start_time: float
) -> ScanResponse:
    report = reviewer.review(result.card)
    return ScanResponse(
        success=True,
        scan_id=str(uuid.uuid4()),
        card=_card_response(result.card),
        form=result.form,
        needs_review=report.needs_review,
        review=[ReviewItemResponse(**vars(r)) for r in report.results],
        front=_side_response(result.front),
        back=_side_response(result.back),
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service health and whether Tesseract is installed."""
    _, scanner, _ = _get_components()
    return HealthResponse(
        status="healthy",
        version=__version__,
        tesseract_available=scanner.engine.is_available(),
    )


@app.get("/providers", response_model=ProvidersResponse)
async def list_providers() -> ProvidersResponse:
    """List carriers the parser recognizes by name."""
    return ProvidersResponse(providers=provider_names())


@app.post("/parse", response_model=ParseResponse)
async def parse_text(request: ParseRequest) -> ParseResponse:
    """Parse OCR text that was produced elsewhere.

    Parsing never fails; missing fields come back empty and are listed in
    ``needs_review``.
    """
    _, _, reviewer = _get_components()
    card = parse_card_text(request.text)
    report = reviewer.review(card)
    return ParseResponse(
        success=True,
        card=_card_response(card),
        form=to_insurance_form(card),
        needs_review=report.needs_review,
        review=[ReviewItemResponse(**vars(r)) for r in report.results],
    )


@app.post("/scan", response_model=ScanResponse)
async def scan_card(
    front: Annotated[UploadFile, File(...)],
    back: Annotated[UploadFile | None, File()] = None,
) -> ScanResponse:
    """Scan the front and, optionally, the back of a card.

    Args:
        front: Photo of the card front.
        back: Photo of the card back. May be omitted.

    Returns:
        Parsed fields, the form payload, review flags and OCR details.
    """
    start_time = time.time()
    config, scanner, reviewer = _get_components()

    front_bytes = await _read_upload(front, config)
    back_bytes = await _read_upload(back, config) if back is not None else None

    try:
        result = scanner.scan(front_bytes, back_bytes)
    except ScanError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Card scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return _scan_response(result, reviewer, start_time)


@app.post("/scan/document", response_model=ScanResponse)
async def scan_document(
    file: Annotated[UploadFile, File(...)],
) -> ScanResponse:
    """Scan a single upload; a two-page PDF supplies front and back."""
    start_time = time.time()
    config, scanner, reviewer = _get_components()
    content = await _read_upload(file, config)

    try:
        result = scanner.scan_document(content)
    except ScanError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Card document scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return _scan_response(result, reviewer, start_time)
