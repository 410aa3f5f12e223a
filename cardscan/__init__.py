"""Insurance card scanning and field extraction.

Turns OCR text (or photos and PDFs of a health-insurance card) into a
structured record of provider, member ID, group number, plan, subscriber
and pharmacy-benefit fields.
"""

__version__ = "1.0.0"
