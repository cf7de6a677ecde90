"""Remote catalog resolver for monoschinos2.

Performs every network call of the application and parses the HTML/JSON
responses into models:
- search_titles: catalog search page -> set of CatalogEntry
- list_chapters: title page + paginated ajax chapter list -> list of ChapterInfo
- resolve_stream_links: chapter page -> set of playable URLs

Each parse step binds to one fixed selector; when the markup does not match,
the call fails with a specific error instead of degrading.
"""

import base64
import binascii
from collections.abc import Callable
from urllib.parse import quote, urlparse

import requests
from pydantic import ValidationError
from selectolax.parser import HTMLParser

from models.config import settings
from models.models import CatalogEntry, ChapterInfo, ChapterPage, StreamLinks
from utils.exceptions import (
    EmptyResultError,
    MissingListUrlError,
    MissingTokenError,
    RequestError,
)
from utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_RESULT_SELECTOR = "li.col.mb-5.ficha_efecto > article > a"
CHAPTER_LIST_SELECTOR = "section.caplist"
CSRF_SELECTOR = "meta[name='csrf-token']"
PLAY_BUTTON_SELECTOR = "button.play-video"


class CatalogScraper:
    """Client for the catalog site.

    A fresh requests.Session is opened for every public call, so cookies
    obtained while listing one title are never reused for another.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.base_url = (base_url or settings.scraper.base_url).rstrip("/")
        self.timeout = timeout or settings.scraper.timeout
        self.page_size = page_size or settings.scraper.page_size
        self._session_factory = session_factory

    def _new_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": settings.scraper.user_agent})
        return session

    def _get_html(self, session: requests.Session, url: str) -> HTMLParser:
        try:
            response = session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RequestError(f"Hubo un error al hacer la solicitud a {url}: {e}") from e
        return HTMLParser(response.text)

    def search_titles(self, query: str) -> set[CatalogEntry]:
        """Search the catalog.

        Args:
            query: Free text typed by the user

        Returns:
            Set of matching titles (the site may repeat entries)

        Raises:
            RequestError: On transport or decoding failure
            EmptyResultError: If nothing matched
        """
        url = f"{self.base_url}/buscar?q={quote(query, safe='')}"
        logger.debug(f"Searching '{query}' at {url}")

        with self._new_session() as session:
            tree = self._get_html(session, url)

        results = set()
        for anchor in tree.css(SEARCH_RESULT_SELECTOR):
            heading = anchor.css_first("h3")
            href = anchor.attributes.get("href")
            if heading is None or not href:
                continue
            results.add(CatalogEntry(name=heading.text(strip=True), url=href))

        if not results:
            raise EmptyResultError("La busqueda no obtuvo resultados.")

        logger.info(f"Search '{query}' returned {len(results)} titles")
        return results

    def list_chapters(self, title_url: str) -> list[ChapterInfo]:
        """Fetch the full chapter list of a title.

        The title page provides the ajax endpoint and a CSRF token; the
        endpoint is then paged with POST requests sharing the page's cookies
        until a page comes back with fewer than page_size chapters.

        Raises:
            RequestError: If the title page or any chapter page fails
            MissingListUrlError: If the title page has no chapter-list endpoint
            MissingTokenError: If the title page has no CSRF token
        """
        with self._new_session() as session:
            tree = self._get_html(session, title_url)

            caplist = tree.css_first(CHAPTER_LIST_SELECTOR)
            ajax_url = caplist.attributes.get("data-ajax") if caplist is not None else None
            if not ajax_url:
                raise MissingListUrlError("No se pudo obtener la URL de la lista de episodios.")

            meta = tree.css_first(CSRF_SELECTOR)
            token = meta.attributes.get("content") if meta is not None else None
            if not token:
                raise MissingTokenError("No se pudo obtener el token CSRF para la solicitud.")

            endpoint = ajax_url.replace("ajax_pagination", "caplist")
            headers = self._chapter_list_headers(title_url)

            chapters: list[ChapterInfo] = []
            page = 0
            while True:
                caps = self._fetch_chapter_page(session, endpoint, headers, token, page)
                chapters.extend(caps)
                page += 1
                if len(caps) < self.page_size:
                    break

        logger.info(f"Loaded {len(chapters)} chapters for {title_url} in {page} pages")
        return chapters

    def _chapter_list_headers(self, referer: str) -> dict[str, str]:
        host = urlparse(self.base_url).netloc
        return {
            "Content-Type": "application/x-www-form-urlencoded; charset=UTF8",
            "Host": host,
            "Origin": self.base_url,
            "Pragma": "no-cache",
            "Referer": referer,
            "Accept": "application/json, text/javascript, */*; q=0.01",
        }

    def _fetch_chapter_page(
        self,
        session: requests.Session,
        endpoint: str,
        headers: dict[str, str],
        token: str,
        page: int,
    ) -> list[ChapterInfo]:
        body = f"_token={quote(token, safe='')}&p={page}"
        try:
            response = session.post(endpoint, data=body, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return ChapterPage.model_validate(response.json()).caps
        except requests.RequestException as e:
            raise RequestError(
                f"No se pudieron obtener los capitulos (pagina {page}): {e}"
            ) from e
        except (ValueError, ValidationError) as e:
            raise RequestError(f"Respuesta invalida de la lista de capitulos (pagina {page}): {e}") from e

    def resolve_stream_links(self, chapter_url: str) -> StreamLinks:
        """Decode the playable URLs hidden in a chapter page's play buttons.

        Buttons whose attribute is not valid base64url or UTF-8 are skipped.

        Raises:
            RequestError: On transport failure
            EmptyResultError: If no button decoded to a link
        """
        with self._new_session() as session:
            tree = self._get_html(session, chapter_url)

        links = set()
        for button in tree.css(PLAY_BUTTON_SELECTOR):
            encoded = button.attributes.get("data-player")
            if not encoded:
                continue
            link = decode_player_attribute(encoded)
            if link is not None:
                links.add(link)

        if not links:
            raise EmptyResultError("No se encontraron enlaces validos para este episodio.")

        logger.debug(f"Resolved {len(links)} links for {chapter_url}")
        return links


def decode_player_attribute(encoded: str) -> str | None:
    """Decode a base64url play-button attribute, or None when it is invalid."""
    try:
        return base64.b64decode(encoded.encode("ascii"), altchars=b"-_", validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        logger.debug(f"Skipping undecodable player attribute: {encoded!r}")
        return None
