"""Fetch posts stored as files in a GitHub repository folder.

The contents API is rate limited hard for anonymous callers, so it is only
used once for the folder listing; the files themselves come from their
download URLs. Rate-limited and transient failures are retried with
exponential backoff.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

import requests

from ..errors import PostrankError
from .posts import Post, parse_post_filename, post_from_markdown

log = logging.getLogger(__name__)

# Constants
API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30
USER_AGENT = "postrank/0.1"
RETRY_STATUSES = frozenset({403, 429, 500, 502, 503, 504})


class FetchError(PostrankError):
    """A request failed for good (non-retryable, or retries exhausted)."""


@dataclass(frozen=True)
class PostEntry:
    """A post file found in the repository listing."""

    name: str
    download_url: str
    post_id: int
    published_at: datetime


class GitHubPostSource:
    """Client for one folder of post files in a GitHub repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        ref: str = "master",
        token: str | None = None,
        max_workers: int = 4,
        max_retries: int = 4,
        backoff: float = 1.0,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.owner = owner
        self.repo = repo
        self.path = path.strip("/")
        self.ref = ref
        self.max_workers = max_workers
        self.max_retries = max_retries
        self.backoff = backoff
        self._sleep = sleep

        self.session = session or requests.Session()
        # The API refuses requests without a User-Agent
        self.session.headers.update(
            {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def __enter__(self) -> "GitHubPostSource":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()

    @property
    def listing_url(self) -> str:
        return f"{API_URL}/repos/{self.owner}/{self.repo}/contents/{self.path}"

    def _retry_delay(self, attempt: int, response: requests.Response | None) -> float:
        if response is not None:
            retry_after = response.headers.get("Retry-After", "")
            if retry_after.isdigit():
                return float(retry_after)
        return self.backoff * (2**attempt)

    def _get(self, url: str, params: dict | None = None) -> requests.Response:
        """GET with retries on rate limiting and transient failures.

        Raises:
            FetchError: on a non-retryable status or once retries run out
        """
        attempt = 0
        while True:
            response = None
            try:
                response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
            except requests.RequestException as e:
                failure = f"GET {url} failed: {e}"
            else:
                if response.status_code not in RETRY_STATUSES:
                    try:
                        response.raise_for_status()
                    except requests.HTTPError as e:
                        raise FetchError(f"GET {url} failed: {e}") from e
                    return response
                failure = f"GET {url} returned {response.status_code}"

            if attempt >= self.max_retries:
                raise FetchError(f"{failure} (gave up after {attempt + 1} attempts)")

            delay = self._retry_delay(attempt, response)
            log.warning(f"{failure}; retrying in {delay:.1f}s")
            self._sleep(delay)
            attempt += 1

    def list_entries(self) -> list[PostEntry]:
        """Post files in the folder, skipping names that are not posts."""
        data = self._get(self.listing_url, params={"ref": self.ref}).json()
        if not isinstance(data, list):
            raise FetchError(f"Expected a folder listing at {self.listing_url}")

        entries: list[PostEntry] = []
        for item in data:
            name = item.get("name") or ""
            download_url = item.get("download_url")
            if item.get("type", "file") != "file" or not download_url:
                continue

            parsed = parse_post_filename(name)
            if parsed is None:
                log.debug(f"Skipping {name}: not a post file name")
                continue
            post_id, published_at = parsed
            entries.append(PostEntry(name, download_url, post_id, published_at))

        log.info(f"Found {len(entries)} posts in {self.owner}/{self.repo}/{self.path}")
        return entries

    def _download(self, entry: PostEntry) -> str:
        return self._get(entry.download_url).text

    def download_all(self, entries: list[PostEntry]) -> list[tuple[PostEntry, str]]:
        """Download entries with at most ``max_workers`` requests in flight."""
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            texts = list(pool.map(self._download, entries))
        return list(zip(entries, texts))

    def fetch_posts(self) -> list[Post]:
        """Download and parse every post in the folder."""
        posts: list[Post] = []
        for entry, markdown in self.download_all(self.list_entries()):
            try:
                posts.append(
                    post_from_markdown(
                        markdown,
                        post_id=entry.post_id,
                        published_at=entry.published_at,
                        source=entry.name,
                    )
                )
            except ValueError as e:
                log.warning(f"Skipping {entry.name}: {e}")
        return posts

    def fetch_to_directory(self, dest: Path | str) -> list[Path]:
        """Save each raw post file into ``dest`` under its original name."""
        dest = Path(dest)
        dest.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        for entry, markdown in self.download_all(self.list_entries()):
            target = dest / Path(entry.name).name
            target.write_text(markdown, encoding="utf-8")
            written.append(target)

        log.info(f"Wrote {len(written)} posts to {dest}")
        return written
