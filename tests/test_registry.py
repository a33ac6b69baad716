"""Registry client tests against a canned session."""

from __future__ import annotations

import unittest

import requests

from lazyupgrade.model import PackageMetadata
from lazyupgrade.registry import (
    ABBREVIATED_METADATA_ACCEPT,
    UNKNOWN_VERSION,
    MetadataFetcher,
    RegistryClient,
    normalize_repository_url,
    package_url,
)


class _FakeResponse:
    def __init__(self, status: int, payload: object) -> None:
        self.status_code = status
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> object:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, routes: dict[str, object]) -> None:
        self.routes = routes
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, headers: dict | None = None, timeout: float | None = None) -> _FakeResponse:
        self.calls.append((url, headers or {}))
        route = self.routes.get(url)
        if route is None:
            return _FakeResponse(404, {})
        if isinstance(route, Exception):
            raise route
        return _FakeResponse(200, route)


REACT_DOC = {
    "versions": {"18.2.0": {}, "18.3.1": {}, "19.0.0-rc.1": {}, "19.0.0": {}},
    "dist-tags": {"latest": "19.0.0"},
}


class PackageUrlTests(unittest.TestCase):
    def test_scoped_names_escape_the_slash(self) -> None:
        self.assertEqual(package_url("https://r", "@types/node"), "https://r/@types%2Fnode")
        self.assertEqual(package_url("https://r", "react"), "https://r/react")


class RegistryClientTests(unittest.TestCase):
    def test_fetch_versions_keeps_plain_versions_and_highest_latest(self) -> None:
        session = _FakeSession({"https://registry.npmjs.org/react": REACT_DOC})
        latest, versions = RegistryClient(session).fetch_versions("react")
        self.assertEqual(latest, "19.0.0")
        self.assertEqual(versions, ["18.2.0", "18.3.1", "19.0.0"])
        self.assertEqual(session.calls[0][1]["Accept"], ABBREVIATED_METADATA_ACCEPT)

    def test_failures_degrade_to_unknown(self) -> None:
        session = _FakeSession({
            "https://registry.npmjs.org/boom": requests.ConnectionError("down"),
            "https://registry.npmjs.org/garbled": ValueError("bad json"),
        })
        client = RegistryClient(session)
        self.assertEqual(client.fetch_versions("missing"), (UNKNOWN_VERSION, []))
        self.assertEqual(client.fetch_versions("boom"), (UNKNOWN_VERSION, []))

    def test_results_are_cached_until_ttl(self) -> None:
        now = [0.0]
        session = _FakeSession({"https://registry.npmjs.org/react": REACT_DOC})
        client = RegistryClient(session, cache_ttl=300.0, clock=lambda: now[0])
        client.fetch_versions("react")
        now[0] = 299.0
        client.fetch_versions("react")
        self.assertEqual(len(session.calls), 1)
        now[0] = 300.0
        client.fetch_versions("react")
        self.assertEqual(len(session.calls), 2)

    def test_fetch_all_deduplicates_and_reports_progress(self) -> None:
        session = _FakeSession({"https://registry.npmjs.org/react": REACT_DOC})
        progress: list[tuple[str, int, int]] = []
        results = RegistryClient(session, max_workers=2).fetch_all(
            ["react", "ghost", "react"],
            on_progress=lambda name, done, total: progress.append((name, done, total)),
        )
        self.assertEqual(set(results), {"react", "ghost"})
        self.assertEqual(results["ghost"], (UNKNOWN_VERSION, []))
        self.assertEqual(sorted(done for _name, done, _total in progress), [1, 2])
        self.assertTrue(all(total == 2 for _name, _done, total in progress))


class RepositoryUrlTests(unittest.TestCase):
    def test_normalizes_common_forms(self) -> None:
        cases = {
            "git+https://github.com/iamkun/dayjs.git": "https://github.com/iamkun/dayjs",
            "github:iamkun/dayjs": "https://github.com/iamkun/dayjs",
            "git@github.com:iamkun/dayjs.git": "https://github.com/iamkun/dayjs",
            "git://github.com/iamkun/dayjs.git": "https://github.com/iamkun/dayjs",
            "ssh://git@github.com/iamkun/dayjs.git": "https://github.com/iamkun/dayjs",
            "iamkun/dayjs": "https://github.com/iamkun/dayjs",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(normalize_repository_url(raw), expected)
        self.assertIsNone(normalize_repository_url(None))


class MetadataFetcherTests(unittest.TestCase):
    def test_fetch_combines_registry_and_downloads(self) -> None:
        session = _FakeSession({
            "https://registry.npmjs.org/dayjs": {
                "description": "2kB date library",
                "dist-tags": {"latest": "1.11.10"},
                "versions": {
                    "1.11.10": {
                        "license": "MIT",
                        "author": {"name": "iamkun"},
                        "repository": {"url": "git+https://github.com/iamkun/dayjs.git"},
                    }
                },
                "homepage": "https://day.js.org",
            },
            "https://api.npmjs.org/downloads/point/last-week/dayjs": {"downloads": 21000000},
        })
        metadata = MetadataFetcher(session).fetch("dayjs")
        self.assertEqual(
            metadata,
            PackageMetadata(
                description="2kB date library",
                homepage="https://day.js.org",
                license="MIT",
                author="iamkun",
                weekly_downloads=21000000,
                release_notes_url="https://github.com/iamkun/dayjs/releases",
            ),
        )

    def test_missing_fields_use_defaults(self) -> None:
        session = _FakeSession({"https://registry.npmjs.org/bare": {"name": "bare"}})
        metadata = MetadataFetcher(session).fetch("bare")
        self.assertIsNotNone(metadata)
        self.assertEqual(metadata.description, "No description available")
        self.assertIsNone(metadata.author)
        self.assertIsNone(metadata.weekly_downloads)
        self.assertIsNone(metadata.release_notes_url)

    def test_hits_and_misses_are_remembered(self) -> None:
        session = _FakeSession({"https://registry.npmjs.org/bare": {"name": "bare"}})
        fetcher = MetadataFetcher(session)
        self.assertIsNone(fetcher.fetch("ghost"))
        self.assertIsNone(fetcher.fetch("ghost"))
        first = fetcher.fetch("bare")
        self.assertIs(fetcher.fetch("bare"), first)
        urls = [url for url, _headers in session.calls]
        self.assertEqual(urls.count("https://registry.npmjs.org/ghost"), 1)
        self.assertEqual(urls.count("https://registry.npmjs.org/bare"), 1)


if __name__ == "__main__":
    unittest.main()
