"""Watch history management service.

Remembers which episodes of which titles were watched. The record lives in a
small text file, one line per title:

    https://monoschinos2.com/anime/naruto <> 1,2,5

Every change rewrites the whole file, so after watch()/unwatch() return the
file always matches the in-memory mapping.

Used by: services/navigator.py, commands/anime.py
"""

from pathlib import Path

from models.config import get_save_dir, settings
from models.models import EpisodeNumber, TitleURL, WatchRecord
from utils.exceptions import SaveFileError
from utils.logging import get_logger

logger = get_logger(__name__)

SEPARATOR = " <> "


def parse_record(content: str) -> WatchRecord:
    """Parse the history file format.

    Lines without the separator and episode tokens that are not integers are
    skipped. Titles left without any episode are dropped.
    """
    record: WatchRecord = {}
    for line in content.split("\n"):
        title_url, sep, episodes = line.strip().partition(SEPARATOR.strip())
        title_url = title_url.strip()
        if not sep or not title_url:
            continue

        for token in episodes.split(","):
            try:
                episode = int(token.strip())
            except ValueError:
                continue
            watched = record.setdefault(title_url, [])
            if episode not in watched:
                watched.append(episode)

    return record


def serialize_record(record: WatchRecord) -> str:
    """Render a record in the history file format."""
    return "\n".join(
        f"{title_url}{SEPARATOR}{','.join(str(ep) for ep in episodes)}"
        for title_url, episodes in record.items()
        if episodes
    )


class EpisodeTracker:
    """Persistent set of watched (title, episode) pairs."""

    def __init__(self, path: Path, record: WatchRecord | None = None) -> None:
        self.path = Path(path)
        self._record: WatchRecord = record if record is not None else {}

    @classmethod
    def load(cls, path: Path | None = None) -> "EpisodeTracker":
        """Load the history file, creating an empty one when it does not exist.

        Args:
            path: History file; defaults to the platform save directory

        Raises:
            SavePathError: If the save directory cannot be determined
            UnsupportedPlatformError: On unsupported operating systems
            SaveFileError: If the file cannot be created or read
        """
        if path is None:
            path = get_save_dir() / settings.tracker.file_name
        path = Path(path)

        try:
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch()
                logger.info(f"Created empty history file at {path}")
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SaveFileError(
                f"Hubo un error al crear o leer el archivo de guardado {path}: {e}"
            ) from e

        record = parse_record(content)
        logger.debug(f"Loaded history for {len(record)} titles from {path}")
        return cls(path, record)

    @property
    def records(self) -> WatchRecord:
        """Copy of the in-memory mapping."""
        return {title_url: list(episodes) for title_url, episodes in self._record.items()}

    def watched(self, title_url: TitleURL) -> list[EpisodeNumber]:
        return list(self._record.get(title_url, []))

    def is_seen(self, title_url: TitleURL, episode: EpisodeNumber) -> bool:
        return episode in self._record.get(title_url, ())

    def watch(self, title_url: TitleURL, episode: EpisodeNumber) -> None:
        """Mark an episode as watched. No-op if it already is.

        Raises:
            SaveFileError: If the file cannot be rewritten
        """
        if self.is_seen(title_url, episode):
            return

        self._record.setdefault(title_url, []).append(episode)
        self._save()
        logger.info(f"Marked {title_url} episode {episode} as watched")

    def unwatch(self, title_url: TitleURL, episode: EpisodeNumber) -> None:
        """Remove an episode from the history. No-op if it is not there.

        Raises:
            SaveFileError: If the file cannot be rewritten
        """
        if not self.is_seen(title_url, episode):
            return

        episodes = self._record[title_url]
        episodes.remove(episode)
        if not episodes:
            del self._record[title_url]
        self._save()
        logger.info(f"Unmarked {title_url} episode {episode}")

    def _save(self) -> None:
        try:
            self.path.write_text(serialize_record(self._record), encoding="utf-8")
        except OSError as e:
            raise SaveFileError(
                f"Hubo un error al escribir el archivo de guardado {self.path}: {e}"
            ) from e
