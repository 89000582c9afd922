import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx
from dotenv import load_dotenv

from errors import UpstreamNotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)


GITHUB_API_URL = "https://api.github.com"
REPO_PAGE_SIZE = 5


@dataclass(frozen=True)
class GithubSettings:
    client_id: str = ""
    client_secret: str = ""
    api_url: str = GITHUB_API_URL
    timeout_seconds: float = 10.0
    user_agent: str = "devprofile-service"


def load_github_settings() -> GithubSettings:
    load_dotenv()
    return GithubSettings(
        client_id=os.getenv("GITHUB_CLIENT_ID", ""),
        client_secret=os.getenv("GITHUB_CLIENT_SECRET", ""),
        api_url=os.getenv("GITHUB_API_URL", GITHUB_API_URL).rstrip("/"),
        timeout_seconds=float(os.getenv("GITHUB_TIMEOUT_SECONDS", "10")),
    )


class GithubRepoLookup:
    """Read-through lookup of a user's public repositories on GitHub.

    Returns the five most recently created repositories, oldest first.
    Failures are not retried.
    """

    def __init__(self, settings: GithubSettings, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport

    def _auth(self) -> tuple[str, str] | None:
        if self.settings.client_id and self.settings.client_secret:
            return (self.settings.client_id, self.settings.client_secret)
        return None

    def fetch_repos(self, username: str) -> list[dict[str, Any]]:
        url = f"{self.settings.api_url}/users/{username}/repos"
        params = {"per_page": REPO_PAGE_SIZE, "sort": "created", "direction": "desc"}

        logger.info("GitHub repos request username=%s", username)
        try:
            with httpx.Client(
                timeout=self.settings.timeout_seconds,
                transport=self._transport,
                headers={"User-Agent": self.settings.user_agent},
            ) as client:
                resp = client.get(url, params=params, auth=self._auth())
        except httpx.HTTPError as exc:
            logger.warning("GitHub request failed username=%s error=%s", username, exc)
            raise UpstreamUnavailable(f"GitHub request failed: {exc}") from exc

        logger.info("GitHub repos for username=%s returned status=%d", username, resp.status_code)
        if resp.status_code != 200:
            raise UpstreamNotFound()

        try:
            repos = resp.json()
        except ValueError as exc:
            raise UpstreamUnavailable("GitHub returned a malformed response") from exc
        # Newest page first from GitHub, handed back oldest first.
        return list(reversed(repos))
