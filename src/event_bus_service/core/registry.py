"""
Static registry of downstream services that receive every event.

The registry is built once at startup from settings and handed to the
dispatcher. It is read-only afterwards.
"""
from dataclasses import dataclass
from typing import Tuple

from .config import Settings

# Delivery order of the fanout cycle
DESTINATION_ORDER: Tuple[Tuple[str, str], ...] = (
    ("messages", "MESSAGES_SERVICE_URL"),
    ("notifications", "NOTIFICATIONS_SERVICE_URL"),
    ("orders", "ORDERS_SERVICE_URL"),
    ("restaurants", "RESTAURANTS_SERVICE_URL"),
    ("users", "USERS_SERVICE_URL"),
)


@dataclass(frozen=True)
class Destination:
    """A downstream service exposing the `events(input: EventInput!)` mutation."""
    name: str
    url: str


@dataclass(frozen=True)
class ServiceRegistry:
    """Immutable endpoint configuration for the fanout dispatcher and the logging sink."""
    destinations: Tuple[Destination, ...]
    logger_url: str = ""
    logger_events_path: str = "/events"
    logger_fallback_path: str = "/api/logs"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceRegistry":
        """
        Resolve destination URLs from settings.

        Destinations whose URL is blank are left out, keeping the order of
        the remaining ones.
        """
        destinations = []
        for name, setting_name in DESTINATION_ORDER:
            url = (getattr(settings, setting_name) or "").strip()
            if url:
                destinations.append(Destination(name=name, url=url.rstrip("/")))

        return cls(
            destinations=tuple(destinations),
            logger_url=(settings.LOGGER_SERVICE_URL or "").strip().rstrip("/"),
            logger_events_path=_normalize_path(settings.LOGGER_EVENTS_PATH),
            logger_fallback_path=_normalize_path(settings.LOGGER_FALLBACK_PATH),
        )

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self.destinations)

    @property
    def logger_events_endpoint(self) -> str:
        return f"{self.logger_url}{self.logger_events_path}"

    @property
    def logger_fallback_endpoint(self) -> str:
        return f"{self.logger_url}{self.logger_fallback_path}"


def _normalize_path(path: str) -> str:
    path = (path or "").strip()
    if not path.startswith("/"):
        path = f"/{path}"
    return path
