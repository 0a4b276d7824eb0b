"""
Receipt OCR through Google Cloud Vision.

The result only pre-fills the payment form; an admin still validates every
payment, so parsing is best effort and never raises on odd text.
"""

import logging
import re
from decimal import Decimal
from typing import Optional

import requests
from django.conf import settings

from .exceptions import VisionNotConfiguredError, VisionServiceError

logger = logging.getLogger(__name__)

AMOUNT_PATTERN = re.compile(r'R\$\s*(\d{1,6}[.,]\d{2})', re.IGNORECASE)
DATE_PATTERN = re.compile(r'(\d{2}/\d{2}/\d{4})')
RAW_TEXT_LIMIT = 500


def parse_amount(text: str) -> Optional[Decimal]:
    """Largest ``R$ 12,34`` style value in the text, usually the total."""
    amounts = [
        Decimal(value.replace(',', '.'))
        for value in AMOUNT_PATTERN.findall(text)
    ]
    return max(amounts) if amounts else None


def parse_date(text: str) -> Optional[str]:
    """First DD/MM/YYYY in the text, as written."""
    match = DATE_PATTERN.search(text)
    return match.group(1) if match else None


def parse_receipt_text(text: str) -> dict:
    return {
        'amount': parse_amount(text),
        'date': parse_date(text),
        'raw_text': text[:RAW_TEXT_LIMIT],
    }


def _extract_full_text(data: dict) -> str:
    responses = data.get('responses') or [{}]
    annotations = responses[0].get('textAnnotations') or [{}]
    return annotations[0].get('description', '') or ''


def analyze_receipt(*, image_url: str) -> dict:
    """
    Run text detection on a receipt image and pull out amount and date.

    Args:
        image_url: Publicly reachable URL of the uploaded receipt

    Returns:
        dict with 'amount' (Decimal or None), 'date' (str or None) and
        'raw_text' (first 500 characters of the detected text)

    Raises:
        VisionNotConfiguredError: If GOOGLE_VISION_API_KEY is empty
        VisionServiceError: If the request fails or returns a non-2xx status
    """
    api_key = settings.GOOGLE_VISION_API_KEY
    if not api_key:
        raise VisionNotConfiguredError()

    body = {
        'requests': [
            {
                'image': {'source': {'imageUri': image_url}},
                'features': [{'type': 'TEXT_DETECTION', 'maxResults': 1}],
            }
        ]
    }

    try:
        response = requests.post(
            settings.VISION_API_URL,
            params={'key': api_key},
            json=body,
            timeout=settings.VISION_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Vision request failed: {e}")
        raise VisionServiceError()

    if response.status_code >= 400:
        logger.error(f"Vision API error {response.status_code}: {response.text[:200]}")
        raise VisionServiceError()

    try:
        data = response.json()
    except ValueError:
        logger.error("Vision API returned a non-JSON body")
        raise VisionServiceError()

    result = parse_receipt_text(_extract_full_text(data))
    logger.info(f"Receipt analyzed: amount={result['amount']} date={result['date']}")

    return result
