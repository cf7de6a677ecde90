"""mpv integration for episode playback.

Playback runs off the interactive thread: MpvPlayer.play() hands the blocking
mpv invocation to a single worker and returns a Future that resolves once,
with True if any candidate URL played and False otherwise.
"""

import shutil
import subprocess
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor

from models.config import settings
from utils.exceptions import VideoPlaybackError
from utils.logging import get_logger

logger = get_logger(__name__)

# Exit status reported by subprocess when mpv was killed with SIGKILL
KILLED_EXIT_CODE = -9


def check_mpv(binary: str | None = None) -> bool:
    """Return True if the player executable is on PATH."""
    return shutil.which(binary or settings.player.binary) is not None


def is_successful_exit(returncode: int) -> bool:
    """A clean exit, or the kill we send ourselves when leaving an episode."""
    return returncode == 0 or returncode == KILLED_EXIT_CODE


class MpvPlayer:
    """Launches mpv for one episode at a time."""

    def __init__(self, binary: str | None = None, verbose: bool = False) -> None:
        self.binary = binary or settings.player.binary
        self.verbose = verbose
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mpv")
        self._lock = threading.Lock()
        self._process: subprocess.Popen | None = None
        self._stopped = threading.Event()

    def _build_args(self, title: str, chapter: int, url: str) -> list[str]:
        args = [self.binary, f"--title={title} | Capitulo {chapter}"]
        if not self.verbose:
            args.append("--no-terminal")
        args.append(url)
        return args

    def play(self, title: str, chapter: int, urls: Iterable[str]) -> Future:
        """Start playback in the background.

        Args:
            title: Title name shown in the player window
            chapter: Episode number shown in the player window
            urls: Candidate URLs, tried in turn until one plays

        Returns:
            Future resolving to True if some candidate played
        """
        self._stopped.clear()
        return self._executor.submit(self._run, title, chapter, list(urls))

    def _run(self, title: str, chapter: int, urls: list[str]) -> bool:
        for url in urls:
            if self._stopped.is_set():
                return True

            args = self._build_args(title, chapter, url)
            logger.debug(f"Launching {args}")
            output = None if self.verbose else subprocess.DEVNULL
            try:
                process = subprocess.Popen(args, stdout=output, stderr=output)
            except OSError as e:
                logger.error(f"Could not launch {self.binary}: {e}")
                return False

            # stop() may have run while mpv was starting
            with self._lock:
                self._process = process
                stopped = self._stopped.is_set()
            if stopped:
                logger.debug(f"Stopping {self.binary} (pid {process.pid}) right after launch")
                process.kill()
            returncode = process.wait()
            with self._lock:
                self._process = None

            if is_successful_exit(returncode):
                logger.info(f"Played '{title}' episode {chapter} from {url}")
                return True
            logger.warning(f"{self.binary} exited with {returncode} for {url}")

        return False

    def stop(self) -> None:
        """Kill the running player, if any. The pending future resolves as played."""
        self._stopped.set()
        with self._lock:
            process = self._process
        if process is not None and process.poll() is None:
            logger.debug(f"Stopping {self.binary} (pid {process.pid})")
            process.kill()

    def shutdown(self) -> None:
        """Stop playback and release the worker thread."""
        self.stop()
        self._executor.shutdown(wait=True)


def require_mpv(binary: str | None = None) -> None:
    """Raise VideoPlaybackError when the player is not installed."""
    binary = binary or settings.player.binary
    if not check_mpv(binary):
        raise VideoPlaybackError(f"No se encontro {binary}. Instalalo antes de continuar.")
