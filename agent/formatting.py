"""
Human-readable rendering of flight search results.

The flights MCP server answers searches with a structured offer list. The
model presents pre-formatted text far more reliably than it reformats raw
JSON, so those outputs are rewritten before the history reaches the model.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from core import Message, ToolPart

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "TRY": "₺",
}

_TIME_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})")
_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?")


def format_time(iso_string: str) -> str:
    """Format an ISO 8601 datetime as a 12-hour clock time ("9:05 PM")."""
    match = _TIME_RE.search(iso_string)
    if not match:
        return iso_string
    hour = int(match.group(4))
    minutes = match.group(5)
    period = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes} {period}"


def format_duration(iso_duration: str) -> str:
    """Format an ISO 8601 duration as "<H>h <M>m" ("PT2H30M" -> "2h 30m")."""
    match = _DURATION_RE.match(iso_duration)
    if not match or not any(match.groups()):
        return iso_duration
    hours = f"{match.group(1)}h" if match.group(1) else ""
    minutes = f"{match.group(2)}m" if match.group(2) else ""
    return f"{hours} {minutes}".strip()


def format_price(price: Mapping[str, Any]) -> str:
    """Render a price with the currency symbol, or the currency code if unknown."""
    currency = str(price.get("currency", ""))
    total = price["total"]
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{total}"
    return f"{currency} {total}".strip()


def _segment_time(value: str) -> str:
    # Segment times read "<airport> at <ISO datetime>"
    _, _, when = value.partition(" at ")
    return format_time(when or value)


def _format_offer(offer: Mapping[str, Any], carriers: Mapping[str, str]) -> list[str]:
    airlines = offer.get("airlines") or []
    airline_code = airlines[0] if airlines else "Unknown"
    airline_name = carriers.get(airline_code, airline_code)
    price = format_price(offer["price"])
    seats = offer.get("seatsAvailable")

    lines: list[str] = []
    for itinerary in offer.get("itineraries") or []:
        total_duration = format_duration(itinerary["duration"])
        segments = itinerary.get("segments") or []

        if len(segments) == 1:
            segment = segments[0]
            lines.append(f"• {airline_name} {segment['flightNumber']} - {price}")
            lines.append(
                f"  {_segment_time(segment['departure'])} → {_segment_time(segment['arrival'])}"
                f" ({total_duration}, nonstop)"
            )
        else:
            stops = len(segments) - 1
            lines.append(f"• {airline_name} - {price} ({stops} stop{'s' if stops != 1 else ''})")
            for segment in segments:
                lines.append(
                    f"  {segment['flightNumber']}: {_segment_time(segment['departure'])}"
                    f" → {_segment_time(segment['arrival'])}"
                    f" ({format_duration(segment['duration'])})"
                )
            lines.append(f"  Total duration: {total_duration}")
        lines.append(f"  Seats available: {seats}")
        lines.append("")
    return lines


def format_flight_results(data: Any) -> str:
    """
    Format a flight search result into human-readable text.

    The first line is the offer count, followed by one entry per itinerary.
    Offers missing required fields are rendered as raw JSON rather than
    failing the whole result.

    Args:
        data: Structured search result with ``offers`` and optional
            ``totalOffers`` and ``dictionaries.carriers``

    Returns:
        Multi-line text
    """
    if not isinstance(data, Mapping):
        return json.dumps(data, default=str)
    offers = data.get("offers")
    if not isinstance(offers, list):
        return json.dumps(data, default=str)

    dictionaries = data.get("dictionaries")
    carriers: Mapping[str, str] = {}
    if isinstance(dictionaries, Mapping) and isinstance(dictionaries.get("carriers"), Mapping):
        carriers = dictionaries["carriers"]

    lines = [f"Found {data.get('totalOffers') or len(offers)} flights:", ""]
    for offer in offers:
        try:
            lines.extend(_format_offer(offer, carriers))
        except (KeyError, TypeError, AttributeError, IndexError) as e:
            logger.debug("Malformed flight offer, rendering raw: %s", e)
            lines.append(json.dumps(offer, default=str))
            lines.append("")
    return "\n".join(lines)


def _is_flight_result(part: Any) -> bool:
    return (
        isinstance(part, ToolPart)
        and part.state == "output-available"
        and isinstance(part.output, Mapping)
        and "offers" in part.output
    )


def transform_flight_results(messages: list[Message]) -> list[Message]:
    """
    Replace structured flight search outputs with their formatted text.

    Only static tool parts holding a result with ``offers`` are rewritten;
    messages without such parts are returned as-is.
    """
    transformed: list[Message] = []
    for message in messages:
        if not any(_is_flight_result(part) for part in message.parts):
            transformed.append(message)
            continue
        parts = [
            part.model_copy(update={"output": format_flight_results(part.output)})
            if _is_flight_result(part)
            else part
            for part in message.parts
        ]
        transformed.append(message.model_copy(update={"parts": parts}))
    return transformed
