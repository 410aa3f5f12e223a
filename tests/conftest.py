"""Shared fixtures for the card scanner test suite."""

from pathlib import Path

import numpy as np
import pytest

BCBS_CARD_TEXT = """BlueCross BlueShield of Texas
Member Name: John A. Smith
Member ID: XYZ123456789
Group No: 0012345
Plan: Blue Choice PPO

RxBIN 004336
RxPCN ADV
RxGrp RX1234
Customer Service: 1-800-521-2227
"""

AETNA_CARD_TEXT = """aetna
OPEN ACCESS MANAGED CHOICE
MEMBER JANE DOE
ID W123456789
GROUP 0285334-10-001
Rx BIN: 610502
Rx PCN: 9999
Rx GRP: RX8833
Member Services 1 (888) 555-0199
"""


@pytest.fixture
def bcbs_card_text() -> str:
    """OCR text of a Blue Cross card, front and back joined."""
    return BCBS_CARD_TEXT


@pytest.fixture
def aetna_card_text() -> str:
    """OCR text of an Aetna card printed in capitals."""
    return AETNA_CARD_TEXT


@pytest.fixture
def card_image() -> np.ndarray:
    """A blank synthetic RGB card-sized image."""
    image = np.full((540, 856, 3), 255, dtype=np.uint8)
    image[100:140, 60:500] = 0
    return image


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
