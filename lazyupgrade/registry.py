"""npm registry clients: version lists for analysis, metadata for the detail modal.

Both clients go through one ``requests.Session`` so connections are reused
across the concurrent version fetch. Failures never propagate per package:
version lookups degrade to ``("unknown", [])`` and metadata lookups to ``None``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from urllib.parse import quote

import requests

from .model import PackageMetadata
from .versions import PLAIN_VERSION_RE, highest_version

logger = logging.getLogger(__name__)

NPM_REGISTRY_URL = "https://registry.npmjs.org"
NPM_DOWNLOADS_URL = "https://api.npmjs.org/downloads/point/last-week"
ABBREVIATED_METADATA_ACCEPT = "application/vnd.npm.install-v1+json"
REQUEST_TIMEOUT_SECONDS = 10.0
CACHE_TTL_SECONDS = 5 * 60.0
MAX_CONCURRENT_REQUESTS = 16
UNKNOWN_VERSION = "unknown"

VersionData = tuple[str, list[str]]
ProgressCallback = Callable[[str, int, int], None]


def package_url(base: str, name: str) -> str:
    """Registry URL for ``name``; scoped names keep ``@`` and escape the slash."""
    return f"{base}/{quote(name, safe='@')}"


class RegistryClient:
    """Fetch plain ``X.Y.Z`` version lists with a short-lived in-memory cache."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        registry_url: str = NPM_REGISTRY_URL,
        cache_ttl: float = CACHE_TTL_SECONDS,
        max_workers: int = MAX_CONCURRENT_REQUESTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.registry_url = registry_url
        self.cache_ttl = cache_ttl
        self.max_workers = max(1, max_workers)
        self.clock = clock
        self._cache: dict[str, tuple[VersionData, float]] = {}
        self._lock = threading.Lock()

    def _cached(self, name: str) -> VersionData | None:
        with self._lock:
            entry = self._cache.get(name)
        if entry is None:
            return None
        data, stored_at = entry
        if self.clock() - stored_at >= self.cache_ttl:
            return None
        return data

    def fetch_versions(self, name: str) -> VersionData:
        """Return ``(latest, versions)`` for ``name``; ``("unknown", [])`` on any failure."""
        cached = self._cached(name)
        if cached is not None:
            return cached

        url = package_url(self.registry_url, name)
        try:
            response = self.session.get(
                url,
                headers={"Accept": ABBREVIATED_METADATA_ACCEPT},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            document = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.debug("version lookup for %s failed: %s", name, exc)
            return UNKNOWN_VERSION, []

        raw_versions = document.get("versions") if isinstance(document, dict) else None
        versions = [v for v in (raw_versions or {}) if PLAIN_VERSION_RE.match(v)]
        latest = highest_version(versions) or UNKNOWN_VERSION
        data = (latest, versions)
        with self._lock:
            self._cache[name] = (data, self.clock())
        return data

    def fetch_all(
        self,
        names: Iterable[str],
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, VersionData]:
        """Fetch every name concurrently; ``on_progress(name, done, total)`` fires per completion."""
        unique = list(dict.fromkeys(names))
        results: dict[str, VersionData] = {}
        if not unique:
            return results

        total = len(unique)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as pool:
            futures = {pool.submit(self.fetch_versions, name): name for name in unique}
            for completed, future in enumerate(as_completed(futures), start=1):
                name = futures[future]
                results[name] = future.result()
                if on_progress is not None:
                    on_progress(name, completed, total)
        return results


def normalize_repository_url(raw: str | None) -> str | None:
    """Turn a manifest ``repository.url`` into a browsable ``https://`` URL."""
    if not raw:
        return None
    url = raw.strip()
    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.endswith(".git"):
        url = url[: -len(".git")]
    if url.startswith("github:"):
        url = "https://github.com/" + url[len("github:"):]
    elif url.startswith("git@github.com:"):
        url = "https://github.com/" + url[len("git@github.com:"):]
    elif url.startswith("ssh://git@"):
        url = "https://" + url[len("ssh://git@"):]
    elif url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    if not url.startswith("http"):
        url = "https://github.com/" + url
    return url


def _person_name(value: object) -> str | None:
    if isinstance(value, dict):
        name = value.get("name")
        return name if isinstance(name, str) and name else None
    if isinstance(value, str) and value:
        return value
    return None


def _string_field(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _repository_field(value: object) -> str | None:
    if isinstance(value, dict):
        return _string_field(value.get("url"))
    return _string_field(value)


class MetadataFetcher:
    """Lazy detail lookups for the modal, remembering both hits and misses."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        registry_url: str = NPM_REGISTRY_URL,
        downloads_url: str = NPM_DOWNLOADS_URL,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.registry_url = registry_url
        self.downloads_url = downloads_url
        self._cache: dict[str, PackageMetadata] = {}
        self._failures: set[str] = set()
        self._lock = threading.Lock()

    def _get_json(self, url: str) -> dict | None:
        try:
            response = self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            if not response.ok:
                return None
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.debug("metadata request %s failed: %s", url, exc)
            return None
        return data if isinstance(data, dict) else None

    def _weekly_downloads(self, name: str) -> int | None:
        data = self._get_json(package_url(self.downloads_url, name))
        if data is None:
            return None
        downloads = data.get("downloads")
        if isinstance(downloads, bool) or not isinstance(downloads, int):
            return 0
        return downloads

    def fetch(self, name: str) -> PackageMetadata | None:
        """Return metadata for ``name`` or ``None`` when the registry has nothing usable."""
        with self._lock:
            if name in self._cache:
                return self._cache[name]
            if name in self._failures:
                return None

        document = self._get_json(package_url(self.registry_url, name))
        if document is None:
            with self._lock:
                self._failures.add(name)
            return None

        dist_tags = document.get("dist-tags")
        latest_tag = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
        versions = document.get("versions")
        latest_doc = versions.get(latest_tag) if isinstance(versions, dict) and latest_tag else None
        if not isinstance(latest_doc, dict):
            latest_doc = {}

        def pick(key: str) -> object:
            value = document.get(key)
            return value if value else latest_doc.get(key)

        repository_url = normalize_repository_url(_repository_field(pick("repository")))
        metadata = PackageMetadata(
            description=_string_field(document.get("description")) or "No description available",
            homepage=_string_field(pick("homepage")),
            license=_string_field(pick("license")),
            author=_person_name(pick("author")),
            weekly_downloads=self._weekly_downloads(name),
            release_notes_url=f"{repository_url}/releases" if repository_url else None,
        )
        with self._lock:
            self._cache[name] = metadata
        return metadata


__all__ = [
    "NPM_REGISTRY_URL",
    "NPM_DOWNLOADS_URL",
    "UNKNOWN_VERSION",
    "ProgressCallback",
    "RegistryClient",
    "MetadataFetcher",
    "normalize_repository_url",
    "package_url",
]
