"""Pydantic request/response schemas for the card scanning API."""

from typing import Any

from pydantic import BaseModel, Field


class ParseRequest(BaseModel):
    """OCR text to parse; front and back joined by a newline."""

    text: str = Field(default="", max_length=100_000)


class ProviderResponse(BaseModel):
    name: str
    confidence: str


class ParsedCardResponse(BaseModel):
    """Fields extracted from an insurance card."""

    provider: ProviderResponse
    member_id: str
    group_number: str
    plan_name: str
    subscriber_name: str
    phone_numbers: list[str]
    rx_bin: str
    rx_pcn: str
    rx_group: str


class ReviewItemResponse(BaseModel):
    """Result of one review rule."""

    field_name: str
    passed: bool
    message: str
    rule_name: str


class ParseResponse(BaseModel):
    """Response schema for parsing OCR text."""

    success: bool
    card: ParsedCardResponse
    form: dict[str, Any]
    needs_review: list[str]
    review: list[ReviewItemResponse]


class SideResponse(BaseModel):
    """OCR details for one side of the card."""

    text: str
    confidence: float
    word_count: int


class ScanResponse(ParseResponse):
    """Response schema for scanning card images."""

    scan_id: str
    front: SideResponse
    back: SideResponse | None = None
    processing_time_ms: float


class ProvidersResponse(BaseModel):
    """Carriers recognized with high confidence, in match order."""

    providers: list[str]


class HealthResponse(BaseModel):
    status: str
    version: str
    tesseract_available: bool
