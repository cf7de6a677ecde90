"""Anime search, selection, and playback command handler.

This module wires the interactive session together:
- Checks that the player is installed
- Loads the watch history (or continues without it)
- Runs the navigation state machine
"""

from models.config import settings
from services.history_service import EpisodeTracker
from services.navigator import Navigator
from services.scraper import CatalogScraper
from ui.components import TerminalPrompt
from utils.exceptions import TrackerError
from utils.logging import get_logger
from utils.video_player import MpvPlayer, require_mpv

logger = get_logger(__name__)


def load_tracker(prompt: TerminalPrompt) -> EpisodeTracker | None:
    """Load the watch history, degrading to no history on failure."""
    if not settings.tracker.enabled:
        logger.info("History tracking disabled by settings")
        return None

    try:
        return EpisodeTracker.load()
    except TrackerError as e:
        logger.warning(f"Running without history: {e}")
        prompt.error(f"Error del tracker: {e}. Se continuara sin historial.")
        return None


def anime(args, prompt: TerminalPrompt) -> int:
    """Run an interactive session and return the process exit status.

    Raises:
        VideoPlaybackError: If mpv is not installed
        NavigationError: If the session cannot continue
        PromptError: If the terminal fails
    """
    require_mpv()

    tracker = load_tracker(prompt)
    player = MpvPlayer(verbose=args.debug)
    navigator = Navigator(
        scraper=CatalogScraper(),
        prompt=prompt,
        player=player,
        tracker=tracker,
        initial_query=args.query,
    )

    try:
        return navigator.run()
    finally:
        player.shutdown()
