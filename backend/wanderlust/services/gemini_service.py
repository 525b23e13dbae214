"""
Generative AI service backed by the Gemini REST API.

Provides itinerary synthesis, destination insights (grounded with Google
Search), receipt field extraction and flight email extraction. Every call
either returns parsed data or raises AIServiceError; callers must not
persist anything before the call succeeds.
"""
import base64
import json
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
import httpx
from pydantic import ValidationError
from wanderlust.core.config import settings
from wanderlust.core.exceptions import AIServiceError
from wanderlust.schemas.expense import ReceiptScanPreview
from wanderlust.schemas.flight import FlightCreate
from wanderlust.schemas.trip import GeneratedItinerary, InsightSource, TripInsights

logger = logging.getLogger(__name__)

ITINERARY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "destination": {"type": "STRING"},
        "duration": {"type": "INTEGER"},
        "itinerary": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "day": {"type": "INTEGER"},
                    "theme": {"type": "STRING"},
                    "activities": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "time": {"type": "STRING"},
                                "activity": {"type": "STRING"},
                                "location": {"type": "STRING"},
                                "description": {"type": "STRING"},
                                "estimatedCost": {"type": "STRING"}
                            }
                        }
                    }
                }
            }
        }
    }
}

RECEIPT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "amount": {"type": "NUMBER"},
        "description": {"type": "STRING"},
        "date": {"type": "STRING"},
        "category": {"type": "STRING"}
    }
}

FLIGHT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "airline": {"type": "STRING"},
        "flightNumber": {"type": "STRING"},
        "departureTime": {"type": "STRING", "description": "ISO date string or HH:MM format"},
        "arrivalTime": {"type": "STRING", "description": "ISO date string or HH:MM format"},
        "departureAirport": {"type": "STRING", "description": "Airport code e.g. JFK"},
        "arrivalAirport": {"type": "STRING", "description": "Airport code e.g. LHR"},
        "price": {"type": "NUMBER"}
    }
}

INSIGHTS_PROMPT = """I am planning a trip to {destination} starting on {start_date}.
Using Google Search, provide a concise travel safety and weather report.

Structure the response with the following Markdown headers.
Under each header, give 3-5 short bullet points (no paragraphs).

## Weather
* Forecast or typical weather
* Clothing and packing

## Safety
* Key risks or scams
* Areas to avoid or safety rating

## Emergency
* Emergency numbers
* Nearest hospital advice

## Quick Tips
* Tipping
* SIM cards and internet
* Local customs
"""


def _get_client() -> httpx.AsyncClient:
    """Create the HTTP client used for Gemini calls."""
    return httpx.AsyncClient(timeout=settings.GEMINI_TIMEOUT)


async def _generate_content(model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST a generateContent request and return the decoded response body."""
    api_key = getattr(settings, "GEMINI_API_KEY", "")
    if not api_key:
        logger.warning("Gemini API key not configured.")
        raise AIServiceError("AI service is not configured")

    url = f"{settings.GEMINI_API_URL}/{model}:generateContent"
    try:
        async with _get_client() as client:
            response = await client.post(
                url,
                headers={
                    "x-goog-api-key": api_key,
                    "Content-Type": "application/json"
                },
                json=payload
            )
            response.raise_for_status()
            return response.json()
    except httpx.TimeoutException as e:
        logger.error(f"Gemini API request to {model} timed out")
        raise AIServiceError("AI service timed out") from e
    except httpx.HTTPStatusError as e:
        logger.error(f"Gemini API error {e.response.status_code}: {e.response.text}")
        raise AIServiceError(f"AI service returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error(f"Gemini API request failed: {e}", exc_info=True)
        raise AIServiceError("AI service is unreachable") from e
    except ValueError as e:
        logger.error(f"Gemini API returned a non-JSON body: {e}")
        raise AIServiceError("AI service returned an invalid response") from e


def _response_text(data: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        raise AIServiceError("AI service returned no candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


def _response_json(data: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the JSON document a structured-output call returned."""
    text = _response_text(data)
    try:
        parsed = json.loads(text or "{}")
    except json.JSONDecodeError as e:
        logger.error(f"Could not decode structured AI output: {text[:200]!r}")
        raise AIServiceError("AI service returned malformed JSON") from e
    if not isinstance(parsed, dict):
        raise AIServiceError("AI service returned an unexpected JSON document")
    return parsed


def _json_request(parts: List[Dict[str, Any]], schema: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "contents": [{"parts": parts}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": schema
        }
    }


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.debug(f"Ignoring non-numeric amount {value!r}")
        return None


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.debug(f"Ignoring unparseable date {value!r}")
        return None


async def generate_itinerary(
    destination: str,
    days: int,
    interests: str,
    budget: str,
    currency: Optional[str] = None,
    target_budget: Optional[Decimal] = None
) -> GeneratedItinerary:
    """Ask the model for a structured day-by-day itinerary."""
    currency = currency or settings.DEFAULT_CURRENCY
    budget_text = f"{budget} (Approx. {currency} {target_budget})" if target_budget else budget
    prompt = (
        f"Plan a {days}-day trip to {destination}.\n"
        f"Budget: {budget_text}.\n"
        f"Interests: {interests or 'general sightseeing'}. Currency: {currency}.\n"
        "Provide a structured itinerary with specific activities, locations, and timings. "
        f"Give estimated costs in {currency}."
    )
    logger.info(f"Generating {days}-day itinerary for {destination}")

    data = await _generate_content(
        settings.GEMINI_MODEL,
        _json_request([{"text": prompt}], ITINERARY_SCHEMA)
    )
    parsed = _response_json(data)

    raw_days = parsed.get("itinerary") or []
    if not isinstance(raw_days, list) or not all(isinstance(day, dict) for day in raw_days):
        logger.error(f"Itinerary has an unexpected shape: {str(raw_days)[:200]!r}")
        raise AIServiceError("Failed to generate itinerary. Please try again.")

    days_out = []
    for day in raw_days:
        raw_activities = day.get("activities") or []
        if not isinstance(raw_activities, list) or not all(isinstance(a, dict) for a in raw_activities):
            logger.error(f"Itinerary day has unexpected activities: {str(raw_activities)[:200]!r}")
            raise AIServiceError("Failed to generate itinerary. Please try again.")
        activities = [
            {
                "time": a.get("time") or "",
                "activity": a.get("activity") or "",
                "location": a.get("location") or "",
                "description": a.get("description") or "",
                "estimated_cost": a.get("estimatedCost")
            }
            for a in raw_activities
        ]
        days_out.append({"day": day.get("day") or len(days_out) + 1, "theme": day.get("theme") or "", "activities": activities})

    try:
        return GeneratedItinerary(
            destination=parsed.get("destination") or destination,
            duration=parsed.get("duration") or days,
            itinerary=days_out
        )
    except ValidationError as e:
        logger.error(f"Itinerary failed validation: {e}")
        raise AIServiceError("Failed to generate itinerary. Please try again.") from e


async def generate_trip_insights(destination: str, start_date: Optional[date]) -> TripInsights:
    """Fetch a weather, safety and tips report grounded on Google Search."""
    when = start_date.isoformat() if start_date else "soon"
    logger.info(f"Fetching travel insights for {destination} ({when})")

    data = await _generate_content(settings.GEMINI_MODEL, {
        "contents": [{"parts": [{"text": INSIGHTS_PROMPT.format(destination=destination, start_date=when)}]}],
        "tools": [{"googleSearch": {}}]
    })

    candidate = (data.get("candidates") or [{}])[0]
    chunks = (candidate.get("groundingMetadata") or {}).get("groundingChunks") or []
    sources = [
        InsightSource(title=c["web"].get("title") or "", uri=c["web"]["uri"])
        for c in chunks
        if c.get("web") and c["web"].get("uri")
    ]

    return TripInsights(
        content=_response_text(data) or "No insights generated.",
        sources=sources,
        last_fetched=datetime.utcnow()
    )


async def parse_receipt_image(image: bytes, mime_type: str = "image/jpeg") -> ReceiptScanPreview:
    """Extract amount, merchant, date and category from a receipt photo."""
    prompt = (
        "Extract expense details from this receipt. Return JSON with 'amount' (number), "
        "'description' (string, merchant name), 'date' (YYYY-MM-DD string), and 'category' "
        "(string: Food, Transport, Accommodation, Activity, or Other)."
    )
    parts = [
        {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(image).decode("ascii")}},
        {"text": prompt}
    ]

    data = await _generate_content(settings.GEMINI_VISION_MODEL, _json_request(parts, RECEIPT_SCHEMA))
    parsed = _response_json(data)
    logger.debug(f"Receipt extraction result: {parsed}")

    try:
        return ReceiptScanPreview(
            amount=_parse_decimal(parsed.get("amount")),
            description=parsed.get("description") or None,
            date=_parse_date(parsed.get("date")),
            category=parsed.get("category") or None
        )
    except ValidationError as e:
        logger.error(f"Receipt extraction failed validation: {e}")
        raise AIServiceError("Could not read the receipt. Please try again.") from e


async def parse_flight_email(email_text: str) -> FlightCreate:
    """Extract flight details from a confirmation email."""
    prompt = f'Extract flight details from this email confirmation text.\nText: "{email_text}"'

    data = await _generate_content(settings.GEMINI_MODEL, _json_request([{"text": prompt}], FLIGHT_SCHEMA))
    parsed = _response_json(data)

    if not parsed.get("flightNumber"):
        raise AIServiceError("Could not extract flight info. Please try again.")

    try:
        return FlightCreate(
            airline=parsed.get("airline"),
            flight_number=parsed["flightNumber"],
            departure_time=parsed.get("departureTime"),
            arrival_time=parsed.get("arrivalTime"),
            departure_airport=parsed.get("departureAirport"),
            arrival_airport=parsed.get("arrivalAirport"),
            price=_parse_decimal(parsed.get("price")),
            status="Scheduled"
        )
    except ValidationError as e:
        logger.error(f"Flight extraction failed validation: {e}")
        raise AIServiceError("Could not extract flight info. Please try again.") from e
