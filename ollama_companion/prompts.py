"""
System prompt assembly from user preferences.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ollama_companion.config import ChatSettings


@dataclass(frozen=True)
class Location:
    """An approximate user location supplied by a location collaborator."""
    latitude: float
    longitude: float
    name: Optional[str] = None

    def describe(self) -> str:
        coordinates = f"coordinates: {self.latitude}, {self.longitude}"
        if self.name:
            return f"{self.name} ({coordinates})"
        return coordinates


class LocationProvider(Protocol):
    """Anything that can report the current location, if known."""

    def current_location(self) -> Optional[Location]:
        ...


def format_local_time(now: datetime) -> str:
    return now.strftime("%A, %B %d, %Y %H:%M %Z").strip()


def build_system_prompt(
    settings: ChatSettings,
    now: Optional[datetime] = None,
    location: Optional[Location] = None,
) -> Optional[str]:
    """
    Build the system instruction for a chat request.

    Args:
        settings: Current chat settings.
        now: Local time to report; defaults to the current local time.
        location: Location to report when location sharing is enabled.

    Returns:
        The prompt text, or None when nothing is configured.
    """
    sections = []

    if settings.base_prompt.strip():
        sections.append(settings.base_prompt.strip())

    if settings.include_local_time:
        local_now = now or datetime.now().astimezone()
        sections.append(f"Current local time: {format_local_time(local_now)}")

    if settings.include_location and location is not None:
        sections.append(f"User location: {location.describe()}")

    if not sections:
        return None
    return "\n\n".join(sections)
