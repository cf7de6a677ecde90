"""Business logic services layer.

Core services for quanires:
- scraper: Remote catalog client (search, chapter lists, stream links)
- history_service: Watched-episode tracking
- navigator: Interactive navigation state machine
"""

from services import history_service, navigator, scraper

__all__ = [
    "history_service",
    "navigator",
    "scraper",
]
