"""
Weather lookup tool.

Weather lookups go to an external service, so the tool requires human
approval: the model only proposes the call and ``execute_weather`` runs it
once the user confirms.
"""

from typing import Any
from urllib.parse import quote

import httpx

from core import ToolExecutionContext

WEATHER_URL = "https://wttr.in/{city}?format=3"
DEFAULT_WEATHER_TIMEOUT = 10.0


async def fetch_weather(city: str, timeout: float = DEFAULT_WEATHER_TIMEOUT) -> str:
    """
    Fetch a one-line weather report for a city.

    Args:
        city: City name
        timeout: Request timeout in seconds

    Returns:
        Report such as ``"Paris: ⛅️ +12°C"``

    Raises:
        ValueError: If the city is empty or the service answers with an error
    """
    if not city or not city.strip():
        raise ValueError("City must be a non-empty string")

    url = WEATHER_URL.format(city=quote(city.strip()))
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ValueError(f"Weather request timed out after {timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ValueError(
                f"HTTP error {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.RequestError as e:
            raise ValueError(f"Weather request failed: {e}") from e
    return response.text.strip()


async def get_weather_information(city: str) -> str:
    """Show the weather in a given city to the user."""
    return await fetch_weather(city)


async def execute_weather(args: Any, context: ToolExecutionContext) -> str:
    """Run an approved weather lookup."""
    return await fetch_weather(args["city"])
