"""Interactive navigation flow.

Drives the session as an explicit state machine:

    SEARCH -> TITLE_SELECTED -> CHAPTER_SELECTED -> ... -> TERMINATED

Each handler returns the next state, and run() loops until TERMINATED, so
going back and forth any number of times never grows the call stack.

Used by: commands/anime.py
"""

from concurrent.futures import Future
from enum import Enum

from models.models import CatalogEntry, ChapterInfo, ChapterSelection
from services.history_service import EpisodeTracker
from services.scraper import CatalogScraper
from ui.components import MenuOption, TerminalPrompt
from utils.exceptions import (
    EmptyResultError,
    NavigationError,
    NoChaptersError,
    RequestError,
    SaveFileError,
    ScraperError,
)
from utils.logging import get_logger
from utils.video_player import MpvPlayer

logger = get_logger(__name__)

WELCOME = "Bienvenido a quanires!"
FAREWELL = "Adios!"
FIRST_QUESTION = "Que deseas ver?"
RETRY_QUESTION = "Prueba a buscar otra cosa. Que deseas ver?"
WATCHED_HINT = "Visto"

OP_RETRY = "op_retry"
OP_QUIT = "op_quit"
OP_BACK = "op_back"
OP_PREVIOUS = "op_previous_episode"
OP_NEXT = "op_next_episode"
OP_UNWATCH = "op_unwatch"
OP_OTHER_TITLE = "op_watch_other_title"
OP_OTHER_EPISODE = "op_watch_other_episode"


class State(Enum):
    SEARCH = "search"
    TITLE_SELECTED = "title_selected"
    CHAPTER_SELECTED = "chapter_selected"
    TERMINATED = "terminated"


class Navigator:
    """Interactive session over the catalog.

    Args:
        scraper: Remote catalog client
        prompt: Terminal chrome (menus, notices, spinners)
        player: External player launcher
        tracker: Watch history, or None to run without remembering episodes
        initial_query: Text used for the first search instead of prompting
    """

    def __init__(
        self,
        scraper: CatalogScraper,
        prompt: TerminalPrompt,
        player: MpvPlayer,
        tracker: EpisodeTracker | None = None,
        initial_query: str | None = None,
    ) -> None:
        self.scraper = scraper
        self.prompt = prompt
        self.player = player
        self.tracker = tracker
        self._pending_query = initial_query

        self.entry: CatalogEntry | None = None
        self.chapters: list[ChapterInfo] = []
        self.selection: ChapterSelection | None = None
        self._playback: Future | None = None

        self._handlers = {
            State.SEARCH: self._search,
            State.TITLE_SELECTED: self._choose_chapter,
            State.CHAPTER_SELECTED: self._play,
        }

    def run(self) -> int:
        """Run the session until the user quits. Returns the exit status."""
        state = State.SEARCH
        while state is not State.TERMINATED:
            logger.debug(f"Entering state {state.name}")
            state = self._handlers[state]()
        return 0

    def _quit(self) -> State:
        self.player.stop()
        self.prompt.outro(FAREWELL)
        return State.TERMINATED

    # ---- SEARCH ------------------------------------------------------------

    def _search(self) -> State:
        self.prompt.intro(WELCOME)

        question = FIRST_QUESTION
        while True:
            query = self._pending_query or self.prompt.ask(question)
            self._pending_query = None
            try:
                with self.prompt.loading(f"Buscando '{query}'..."):
                    results = self.scraper.search_titles(query)
                break
            except EmptyResultError:
                self.prompt.error("No se encontraron resultados.")
                question = RETRY_QUESTION
            except RequestError as e:
                raise NavigationError(f"No se pudo realizar la busqueda: {e}") from e

        entries = sorted(results, key=lambda entry: (entry.name.lower(), entry.url))
        options = [MenuOption(entry.name, entry.url) for entry in entries]
        options += [
            MenuOption("Volver a buscar", OP_RETRY, "Realiza otra busqueda"),
            MenuOption("Salir", OP_QUIT, "Cerrar el programa"),
        ]

        choice = self.prompt.select("Tu busqueda obtuvo estos resultados.", options)
        if choice == OP_QUIT:
            return self._quit()
        if choice == OP_RETRY:
            return State.SEARCH

        self.entry = next(entry for entry in entries if entry.url == choice)
        logger.info(f"Selected title '{self.entry.name}' ({self.entry.url})")
        return State.TITLE_SELECTED

    # ---- TITLE_SELECTED ----------------------------------------------------

    def _choose_chapter(self) -> State:
        entry = self.entry
        self.prompt.intro(entry.name)

        try:
            with self.prompt.loading("Cargando capitulos..."):
                chapters = self.scraper.list_chapters(entry.url)
        except ScraperError as e:
            raise NavigationError(
                f"Hubo un error al seleccionar los capitulos de '{entry.name}': {e}"
            ) from e

        if not chapters:
            raise NoChaptersError(f"'{entry.name}' no tiene capitulos disponibles.")
        self.chapters = chapters

        options = [
            MenuOption("Atras", OP_BACK, "Realiza otra busqueda"),
            MenuOption("Salir", OP_QUIT, "Cerrar el programa"),
        ]
        for chapter in chapters:
            hint = WATCHED_HINT if self._is_seen(chapter.number) else None
            options.append(MenuOption(f"Capitulo {chapter.number}", chapter.url, hint))

        choice = self.prompt.select("Que capitulo deseas ver?", options)
        if choice == OP_QUIT:
            return self._quit()
        if choice == OP_BACK:
            return State.SEARCH

        current = next(chapter for chapter in chapters if chapter.url == choice)
        return self._enter_chapter(current)

    def _enter_chapter(self, chapter: ChapterInfo) -> State:
        self.selection = ChapterSelection.from_chapters(self.chapters, chapter)
        self._mark(chapter.number, watched=True)
        return State.CHAPTER_SELECTED

    # ---- CHAPTER_SELECTED --------------------------------------------------

    def _play(self) -> State:
        entry, selection = self.entry, self.selection
        current = selection.current
        self.prompt.intro(f"{entry.name} | Capitulo {current.number}")

        try:
            with self.prompt.loading("Buscando enlaces..."):
                links = self.scraper.resolve_stream_links(current.url)
        except ScraperError as e:
            logger.warning(f"No links for {current.url}: {e}")
            self.prompt.error(f"No se pudieron obtener los links: {e}")
        else:
            self._playback = self.player.play(entry.name, current.number, links)

        while True:
            choice = self.prompt.select("Que deseas hacer?", self._play_options())
            self._check_playback()

            match choice:
                case "op_unwatch":
                    self._mark(current.number, watched=False)
                    continue
                case "op_previous_episode":
                    self._leave_chapter()
                    return self._enter_chapter(selection.previous)
                case "op_next_episode":
                    self._leave_chapter()
                    return self._enter_chapter(selection.next)
                case "op_watch_other_title":
                    self._leave_chapter()
                    return State.SEARCH
                case "op_watch_other_episode":
                    self._leave_chapter()
                    return State.TITLE_SELECTED
                case _:
                    self._leave_chapter()
                    return self._quit()

    def _play_options(self) -> list[MenuOption]:
        selection = self.selection
        options = []
        if selection.previous is not None:
            options.append(MenuOption("Anterior episodio", OP_PREVIOUS))
        if selection.next is not None:
            options.append(MenuOption("Siguiente episodio", OP_NEXT))
        if self._is_seen(selection.current.number):
            options.append(MenuOption("Desmarcar como visto", OP_UNWATCH))
        options += [
            MenuOption("Ver otro anime", OP_OTHER_TITLE),
            MenuOption("Ver otro capitulo", OP_OTHER_EPISODE),
            MenuOption("Salir", OP_QUIT, "Cerrar el programa y el reproductor"),
        ]
        return options

    def _check_playback(self) -> None:
        """Report a playback that has finished without playing any link."""
        playback = self._playback
        if playback is None or not playback.done():
            return

        self._playback = None
        if playback.exception() is not None:
            logger.error(f"Player worker failed: {playback.exception()}")
            self.prompt.error("El reproductor fallo inesperadamente.")
        elif not playback.result():
            self.prompt.error("No se pudo reproducir ningun enlace de este capitulo.")

    def _leave_chapter(self) -> None:
        self.player.stop()
        playback, self._playback = self._playback, None
        if playback is None:
            return
        if playback.done() and playback.exception() is None:
            logger.debug(f"Left chapter, playback result: {playback.result()}")
        else:
            logger.debug("Left chapter while playback was still running")

    # ---- history -----------------------------------------------------------

    def _is_seen(self, episode: int) -> bool:
        return self.tracker is not None and self.tracker.is_seen(self.entry.url, episode)

    def _mark(self, episode: int, watched: bool) -> None:
        if self.tracker is None:
            return
        try:
            if watched:
                self.tracker.watch(self.entry.url, episode)
            else:
                self.tracker.unwatch(self.entry.url, episode)
        except SaveFileError as e:
            logger.error(f"History not saved: {e}")
            self.prompt.error(f"Error del historial: {e}")
