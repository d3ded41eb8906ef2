"""
Tests for flight result formatting.
"""

import json

from agent.formatting import (
    format_duration,
    format_flight_results,
    format_price,
    format_time,
    transform_flight_results,
)
from core import DynamicToolPart, Message, StepStartPart, ToolPart

from .conftest import user

NONSTOP_RESULT = {
    "totalOffers": 1,
    "offers": [
        {
            "price": {"total": "1234.56", "currency": "EUR"},
            "airlines": ["AF"],
            "seatsAvailable": 4,
            "itineraries": [
                {
                    "duration": "PT2H30M",
                    "segments": [
                        {
                            "flightNumber": "AF1234",
                            "departure": "CDG at 2025-06-01T09:05:00",
                            "arrival": "FCO at 2025-06-01T11:35:00",
                            "duration": "PT2H30M",
                        }
                    ],
                }
            ],
        }
    ],
    "dictionaries": {"carriers": {"AF": "AIR FRANCE"}},
}

CONNECTING_OFFER = {
    "price": {"total": "410.00", "currency": "USD"},
    "airlines": ["LH"],
    "seatsAvailable": 9,
    "itineraries": [
        {
            "duration": "PT9H15M",
            "segments": [
                {
                    "flightNumber": "LH401",
                    "departure": "JFK at 2025-06-01T17:00:00",
                    "arrival": "FRA at 2025-06-02T06:40:00",
                    "duration": "PT7H40M",
                },
                {
                    "flightNumber": "LH232",
                    "departure": "FRA at 2025-06-02T08:10:00",
                    "arrival": "FCO at 2025-06-02T09:45:00",
                    "duration": "PT1H35M",
                },
            ],
        }
    ],
}


class TestFieldFormatting:
    """Test formatting of individual values."""

    def test_format_time(self):
        assert format_time("2025-06-01T09:05:00") == "9:05 AM"
        assert format_time("2025-06-01T21:30:00") == "9:30 PM"
        assert format_time("2025-06-01T00:15:00") == "12:15 AM"
        assert format_time("2025-06-01T12:00:00") == "12:00 PM"

    def test_format_time_passes_through_unknown(self):
        assert format_time("tomorrow") == "tomorrow"

    def test_format_duration(self):
        assert format_duration("PT2H30M") == "2h 30m"
        assert format_duration("PT5H") == "5h"
        assert format_duration("PT45M") == "45m"

    def test_format_price_known_currency(self):
        assert format_price({"total": "99.00", "currency": "GBP"}) == "£99.00"

    def test_format_price_unknown_currency(self):
        assert format_price({"total": "100", "currency": "CHF"}) == "CHF 100"


class TestFormatFlightResults:
    """Test rendering of whole search results."""

    def test_nonstop_offer(self):
        text = format_flight_results(NONSTOP_RESULT)

        lines = text.splitlines()
        assert lines[0] == "Found 1 flights:"
        assert "• AIR FRANCE AF1234 - €1234.56" in lines
        assert "  9:05 AM → 11:35 AM (2h 30m, nonstop)" in lines
        assert "  Seats available: 4" in lines

    def test_connecting_offer(self):
        text = format_flight_results({"offers": [CONNECTING_OFFER]})

        assert text.startswith("Found 1 flights:")
        assert "• LH - $410.00 (1 stop)" in text
        assert "  LH401: 5:00 PM → 6:40 AM (7h 40m)" in text
        assert "  LH232: 8:10 AM → 9:45 AM (1h 35m)" in text
        assert "  Total duration: 9h 15m" in text

    def test_malformed_offer_degrades_to_json(self):
        broken = {"airlines": ["XX"]}

        text = format_flight_results({"offers": [broken, CONNECTING_OFFER]})

        assert json.dumps(broken) in text
        assert "• LH - $410.00 (1 stop)" in text

    def test_non_mapping_degrades_to_json(self):
        assert format_flight_results(["a", "b"]) == json.dumps(["a", "b"])

    def test_missing_offers_degrades_to_json(self):
        assert format_flight_results({"error": "x"}) == json.dumps({"error": "x"})


class TestTransformFlightResults:
    """Test rewriting flight outputs in a conversation."""

    def _message(self, part) -> Message:
        return Message(id="a1", role="assistant", parts=[StepStartPart(), part])

    def test_rewrites_structured_results(self):
        part = ToolPart(
            toolName="search_flights",
            toolCallId="f1",
            state="output-available",
            input={},
            output=NONSTOP_RESULT,
        )
        messages = [user("Flights to Rome?"), self._message(part)]

        transformed = transform_flight_results(messages)

        assert transformed[0] is messages[0]
        output = transformed[1].parts[1].output
        assert isinstance(output, str)
        assert output.startswith("Found 1 flights:")
        # the stored conversation keeps the structured result
        assert messages[1].parts[1].output == NONSTOP_RESULT

    def test_leaves_other_outputs_alone(self):
        text_part = ToolPart(
            toolName="book_flight",
            toolCallId="f2",
            state="output-available",
            output="Booked",
        )
        dynamic_part = DynamicToolPart(
            toolName="search_flights",
            toolCallId="f3",
            state="output-available",
            output=NONSTOP_RESULT,
        )
        messages = [self._message(text_part), self._message(dynamic_part)]

        assert transform_flight_results(messages) == messages
