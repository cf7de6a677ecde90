"""
Shared test fixtures and configuration for quanires test suite.

This module provides:
- Fake HTTP sessions and HTML/JSON samples for the catalog scraper
- Temporary history files
- Scripted prompt and fake player for the navigator
"""

import base64
from concurrent.futures import Future
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from models.models import CatalogEntry, ChapterInfo
from services.history_service import EpisodeTracker
from services.scraper import CatalogScraper


# ========== HTTP Fakes ==========


def make_response(text: str = "", json_data=None, status_ok: bool = True) -> MagicMock:
    """Build a requests.Response look-alike."""
    response = MagicMock()
    response.text = text
    response.json.return_value = json_data
    if not status_ok:
        import requests

        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    return response


def make_session() -> MagicMock:
    """Mock requests.Session usable as a context manager."""
    session = MagicMock()
    session.headers = {}
    session.__enter__.return_value = session
    session.__exit__.return_value = False
    return session


@pytest.fixture
def session():
    return make_session()


@pytest.fixture
def scraper(session):
    """Scraper whose every call goes through the same mock session."""
    return CatalogScraper(
        base_url="https://monoschinos2.com",
        timeout=5,
        page_size=50,
        session_factory=lambda: session,
    )


def encode_link(url: str) -> str:
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")


def chapter_payload(start: int, count: int) -> dict:
    """JSON body of one chapter-list page with `count` chapters from `start`."""
    return {
        "caps": [
            {"episodio": n, "url": f"https://monoschinos2.com/ver/naruto-episodio-{n}"}
            for n in range(start, start + count)
        ]
    }


# ========== HTML Samples ==========


SEARCH_HTML = """
<html><body><ul>
  <li class="col mb-5 ficha_efecto">
    <article><a href="https://monoschinos2.com/anime/naruto"><h3>Naruto</h3></a></article>
  </li>
  <li class="col mb-5 ficha_efecto">
    <article><a href="https://monoschinos2.com/anime/naruto-shippuden"><h3>Naruto Shippuden</h3></a></article>
  </li>
  <li class="col mb-5 ficha_efecto">
    <article><a href="https://monoschinos2.com/anime/naruto"><h3>Naruto</h3></a></article>
  </li>
  <li class="col mb-5 ficha_efecto">
    <article><a href="https://monoschinos2.com/anime/sin-titulo"><span>Sin titulo</span></a></article>
  </li>
</ul></body></html>
"""

EMPTY_SEARCH_HTML = "<html><body><p>No hay resultados</p></body></html>"

TITLE_HTML = """
<html>
<head><meta name="csrf-token" content="tok+en/=="></head>
<body>
  <section class="caplist" data-ajax="https://monoschinos2.com/ajax_pagination/123"></section>
</body>
</html>
"""

TITLE_WITHOUT_LIST_HTML = """
<html><head><meta name="csrf-token" content="token"></head><body></body></html>
"""

TITLE_WITHOUT_TOKEN_HTML = """
<html><head></head><body>
  <section class="caplist" data-ajax="https://monoschinos2.com/ajax_pagination/123"></section>
</body></html>
"""


@pytest.fixture
def search_html():
    return SEARCH_HTML


@pytest.fixture
def title_html():
    return TITLE_HTML


# ========== History Fixtures ==========


@pytest.fixture
def history_file(tmp_path):
    """Path of a not-yet-existing history file."""
    return tmp_path / ".quanires.watched"


@pytest.fixture
def tracker(history_file):
    return EpisodeTracker.load(history_file)


# ========== Navigator Fakes ==========


class ScriptedPrompt:
    """Prompt that answers from pre-recorded scripts and records what it showed."""

    def __init__(self, answers=None, choices=None):
        self.answers = list(answers or [])
        self.choices = list(choices or [])
        self.questions = []
        self.menus = []
        self.errors = []
        self.intros = []
        self.outros = []

    def intro(self, title):
        self.intros.append(title)

    def ask(self, question):
        self.questions.append(question)
        return self.answers.pop(0)

    def select(self, message, options):
        self.menus.append((message, list(options)))
        choice = self.choices.pop(0)
        # Allow scripting by label for readability
        for option in options:
            if choice in (option.value, option.label):
                return option.value
        raise AssertionError(f"{choice!r} not offered in {options!r}")

    def error(self, message):
        self.errors.append(message)

    def outro(self, message):
        self.outros.append(message)

    @contextmanager
    def loading(self, msg=""):
        yield


def done_future(result: bool) -> Future:
    future = Future()
    future.set_result(result)
    return future


@pytest.fixture
def player():
    player = MagicMock()
    player.play.return_value = done_future(True)
    return player


@pytest.fixture
def naruto():
    return CatalogEntry(name="Naruto", url="/naruto")


@pytest.fixture
def naruto_chapters():
    return [ChapterInfo(number=n, url=f"/naruto/{n}") for n in (1, 2, 3)]
