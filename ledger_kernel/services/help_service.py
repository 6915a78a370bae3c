"""
HelpService -- per-route help text with language fallback and caching.

Responsibility:
    Returns the help content for a UI route in the user's language, falling
    back to en_US and finally to a fixed placeholder. Never raises for
    missing or unreachable content.

Architecture position:
    Kernel > Services. Collaborators (remote source, cache, preference
    lookup, clock) are injected so the fallback chain is testable without
    a network.

Resolution order for show(route, user_id):
    1. Unknown route          -> placeholder, error logged, nothing fetched.
    2. Language               -> user's ``language`` preference, else default.
    3. Cached (route, lang)   -> cached content.
    4. Fetch (route, lang)    -> on failure or empty content switch to en_US,
                                 check its cache, then fetch it.
    5. Non-empty content is cached under the language that produced it;
       otherwise the placeholder is returned and nothing is cached.
"""

import urllib.error
import urllib.request
from datetime import datetime, timedelta
from typing import Iterable, Protocol

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import HelpFetchError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.preference_service import PreferenceService

logger = get_logger("services.help")

PLACEHOLDER = "<p>There is no help for this route.</p>"
FALLBACK_LANGUAGE = "en_US"
LANGUAGE_PREFERENCE = "language"


class HelpSource(Protocol):
    def fetch(self, route: str, language: str) -> str:
        """Help content for ``route`` in ``language``; raises HelpFetchError."""


class HelpCache(Protocol):
    def has(self, route: str, language: str) -> bool: ...

    def get(self, route: str, language: str) -> str: ...

    def put(self, route: str, language: str, content: str) -> None: ...


class RemoteHelpSource:
    """
    Fetches ``{base_url}/{language}/{route}.md`` over HTTP(S).

    Any transport error, non-200 status or undecodable body raises
    HelpFetchError.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, user_agent: str = "ledger-kernel-help"):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent

    def url_for(self, route: str, language: str) -> str:
        return f"{self._base_url}/{language}/{route}.md"

    def fetch(self, route: str, language: str) -> str:
        url = self.url_for(route, language)
        request = urllib.request.Request(url, headers={"User-Agent": self._user_agent})
        logger.debug("help_fetch_started", extra={"url": url})
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                if response.status != 200:
                    raise HelpFetchError(route, language, f"HTTP {response.status}")
                body = response.read()
        except urllib.error.HTTPError as exc:
            raise HelpFetchError(route, language, f"HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise HelpFetchError(route, language, str(exc)) from exc

        try:
            return body.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise HelpFetchError(route, language, "response is not UTF-8") from exc


class MemoryHelpCache:
    """In-process cache; entries expire ``ttl`` after they were stored."""

    def __init__(self, clock: Clock | None = None, ttl: timedelta = timedelta(days=7)):
        self._clock = clock or SystemClock()
        self._ttl = ttl
        self._entries: dict[tuple[str, str], tuple[datetime, str]] = {}

    def has(self, route: str, language: str) -> bool:
        entry = self._entries.get((route, language))
        if entry is None:
            return False
        stored_at, _ = entry
        if self._clock.now() - stored_at >= self._ttl:
            del self._entries[(route, language)]
            return False
        return True

    def get(self, route: str, language: str) -> str:
        return self._entries[(route, language)][1]

    def put(self, route: str, language: str, content: str) -> None:
        self._entries[(route, language)] = (self._clock.now(), content)


class HelpService:
    """
    Help delivery for UI routes.

    Usage:
        help_service = HelpService(
            source=RemoteHelpSource("https://raw.example.org/help"),
            cache=MemoryHelpCache(),
            routes={"index", "accounts.index"},
            preferences=PreferenceService(session),
        )
        html = help_service.show("accounts.index", user_id=7)
    """

    def __init__(
        self,
        source: HelpSource,
        cache: HelpCache,
        routes: Iterable[str],
        preferences: PreferenceService | None = None,
        default_language: str = FALLBACK_LANGUAGE,
    ):
        self._source = source
        self._cache = cache
        self._routes = frozenset(routes)
        self._preferences = preferences
        self._default_language = default_language

    def has_route(self, route: str) -> bool:
        return route in self._routes

    def language_for(self, user_id: int | None) -> str:
        if user_id is None or self._preferences is None:
            return self._default_language
        language = self._preferences.get(user_id, LANGUAGE_PREFERENCE, self._default_language)
        return language if isinstance(language, str) and language else self._default_language

    def show(self, route: str, user_id: int | None = None) -> str:
        """Help content for ``route``; never raises for missing content."""
        with LogContext.bind(route=route):
            if not self.has_route(route):
                logger.error("help_route_unknown")
                return PLACEHOLDER

            language = self.language_for(user_id)
            if self._cache.has(route, language):
                logger.debug("help_cache_hit", extra={"language": language})
                return self._cache.get(route, language)

            content = self._fetch(route, language)
            if not content and language != FALLBACK_LANGUAGE:
                language = FALLBACK_LANGUAGE
                if self._cache.has(route, language):
                    logger.debug("help_cache_hit", extra={"language": language})
                    return self._cache.get(route, language)
                content = self._fetch(route, language)

            if content:
                self._cache.put(route, language, content)
                return content

            logger.warning("help_unavailable", extra={"language": language})
            return PLACEHOLDER

    def _fetch(self, route: str, language: str) -> str:
        try:
            content = self._source.fetch(route, language)
        except HelpFetchError as exc:
            logger.warning(
                "help_fetch_failed",
                extra={"language": language, "reason": exc.reason},
            )
            return ""
        return content or ""
