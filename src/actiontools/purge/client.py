"""
This module provides a minimal asynchronous client for the GitHub Actions REST API.

Only the operations needed by the purge are implemented:
- Listing repository tags
- Listing workflow runs of a repository
- Listing artifacts of a workflow run
- Deleting an artifact

All listing operations are async generators transparently following the `Link: <...>; rel="next"` pagination
headers. A single client (and its underlying HTTP session) is meant to be shared by all concurrent tasks.

Example usage:
    async with GitHubClient(token) as client:
        async for run in client.list_workflow_runs(Repository.parse('octo/repo')):
            ...
"""

import asyncio
import logging
from typing import Optional, AsyncIterator, Dict, Any

import aiohttp

from actiontools.purge.config import DEFAULT_API_URL
from actiontools.purge.err import ApiError
from actiontools.purge.model import Repository

log = logging.getLogger(__name__)

API_VERSION = '2022-11-28'
USER_AGENT = 'actiontools-purge'
DEFAULT_TIMEOUT_SEC = 30


class GitHubClient:
    """
    The client implements the async context manager protocol; the HTTP session is created on enter
    unless an existing session is provided, in which case the caller remains responsible for closing it.
    """

    def __init__(self, token: Optional[str] = None, *, api_url: str = DEFAULT_API_URL, per_page: int = 100,
                 timeout: float = DEFAULT_TIMEOUT_SEC, session: Optional[aiohttp.ClientSession] = None):
        self._token = token
        self._api_url = api_url.rstrip('/')
        self._per_page = per_page
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config) -> 'GitHubClient':
        return cls(config.token, api_url=config.api_url, per_page=config.per_page)

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': API_VERSION,
            'User-Agent': USER_AGENT,
        }
        if self._token:
            headers['Authorization'] = f"Bearer {self._token}"
        return headers

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def open(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers=self.headers, timeout=aiohttp.ClientTimeout(total=self._timeout))

    async def close(self):
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _url(self, path: str) -> str:
        return self._api_url + path

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("Client is not open, use `async with` or call `open()` first")
        return self._session

    async def paginate(self, path: str, items_key: Optional[str] = None) -> AsyncIterator[Dict[str, Any]]:
        """
        Yield all items of a paginated collection in the order of retrieval.

        Args:
            path: API path of the collection
            items_key: Key of the item list in the response object; None when the response body is the list itself

        Raises:
            ApiError: On any failed page request
        """
        session = self._require_session()
        url = self._url(path)
        params = {'per_page': self._per_page}

        while url:
            try:
                async with session.get(url, params=params) as resp:
                    await _raise_for_status(resp)
                    body = await resp.json()
                    next_link = resp.links.get('next')
            except aiohttp.ClientError as e:
                raise ApiError(None, url, f"{type(e).__name__}: {e}") from e
            except asyncio.TimeoutError as e:
                raise ApiError(None, url, "Request timed out") from e

            items = body if items_key is None else body.get(items_key, [])
            for item in items:
                yield item

            url = str(next_link['url']) if next_link else None
            params = None  # The next link already carries the query

    async def delete(self, path: str) -> None:
        """
        Raises:
            ApiError: If the request fails or the server returns an error status
        """
        session = self._require_session()
        url = self._url(path)
        try:
            async with session.delete(url) as resp:
                await _raise_for_status(resp)
        except aiohttp.ClientError as e:
            raise ApiError(None, url, f"{type(e).__name__}: {e}") from e
        except asyncio.TimeoutError as e:
            raise ApiError(None, url, "Request timed out") from e

    def list_tags(self, repo: Repository) -> AsyncIterator[Dict[str, Any]]:
        return self.paginate(f"/repos/{repo.owner}/{repo.name}/tags")

    def list_workflow_runs(self, repo: Repository) -> AsyncIterator[Dict[str, Any]]:
        return self.paginate(f"/repos/{repo.owner}/{repo.name}/actions/runs", 'workflow_runs')

    def list_run_artifacts(self, repo: Repository, run_id) -> AsyncIterator[Dict[str, Any]]:
        return self.paginate(f"/repos/{repo.owner}/{repo.name}/actions/runs/{run_id}/artifacts", 'artifacts')

    async def delete_artifact(self, repo: Repository, artifact_id) -> None:
        await self.delete(f"/repos/{repo.owner}/{repo.name}/actions/artifacts/{artifact_id}")


async def _raise_for_status(resp: aiohttp.ClientResponse):
    if resp.status < 400:
        return

    try:
        body = await resp.json()
        message = body.get('message') if isinstance(body, dict) else None
    except (aiohttp.ContentTypeError, ValueError):
        message = None

    raise ApiError(resp.status, str(resp.url), message or resp.reason)
