# upstream.py
"""
Async client for the upstream anime services:
- the anime API (ongoing list, search, detail, episode streams)
- the JSON store used by the self-hosted deployment (read/write a collection)

Every call makes a single attempt. Transport errors, non-2xx responses and
malformed payloads are logged and turned into a Degraded result carrying an
empty value, so callers can always render something. Successful API
responses are cached; store reads are not.
"""
import logging
from typing import Any, Callable, List, Optional
from urllib.parse import quote

from httpx import AsyncClient, HTTPStatusError, RequestError
from pydantic import TypeAdapter, ValidationError

from cache import DETAIL, EPISODE, ONGOING, SEARCH, ResponseCache, cache_key
from config import UPSTREAM_BASE_URL, STORE_BASE_URL, STORE_COLLECTION
from episodes import find_server_option
from models import AnimeDetail, AnimeSummary, Degraded, EpisodeStream, FetchResult, Ok, ServerOption, StoredAnime

logger = logging.getLogger(__name__)

_summary_list = TypeAdapter(List[AnimeSummary])
_stored_list = TypeAdapter(List[StoredAnime])


# Dependency to provide HTTP client
async def get_http_client():
    client = AsyncClient(
        headers={
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
        },
        timeout=10.0,
        follow_redirects=True
    )
    try:
        yield client
    finally:
        await client.aclose()


async def get_json(url: str, client: AsyncClient) -> Any:
    response = await client.get(url)
    response.raise_for_status()
    return response.json()


def _describe_failure(url: str, e: Exception) -> str:
    if isinstance(e, HTTPStatusError):
        status_code = e.response.status_code if e.response is not None else 502
        logger.error(f"HTTP error {status_code} while fetching {url}: {e}")
        return f"HTTP error {status_code}"
    if isinstance(e, RequestError):
        logger.error(f"Network error while fetching {url}: {e}")
        return f"Network error: {e}"
    logger.error(f"Invalid payload from {url}: {e}")
    return f"Invalid payload: {e}"


async def _fetch(url: str, client: AsyncClient, parse: Callable[[Any], Any], empty: Callable[[], Any]) -> FetchResult:
    try:
        body = await get_json(url, client)
        return Ok(parse(body))
    except (HTTPStatusError, RequestError, ValueError, ValidationError) as e:
        return Degraded(empty(), _describe_failure(url, e))


async def _cached_fetch(
    kind: str,
    param: Any,
    url: str,
    client: AsyncClient,
    cache: ResponseCache,
    parse: Callable[[Any], Any],
    empty: Callable[[], Any],
) -> FetchResult:
    key = cache_key(kind, param)
    cached = cache.get(key)
    if cached is not None:
        return Ok(cached)

    logger.info(f"Fetching {url}")
    result = await _fetch(url, client, parse, empty)
    if isinstance(result, Ok):
        cache.set(key, result.data)
    return result


def _field(body: Any, name: str) -> Any:
    if not isinstance(body, dict):
        raise ValueError(f"Expected a JSON object, got {type(body).__name__}")
    return body.get(name) or []


def _parse_detail(body: Any) -> AnimeDetail:
    detail = AnimeDetail.model_validate(body or {})
    # Specials and movies share the detail payload; keep regular episodes only
    return detail.only_episodes()


# Function to fetch the ongoing anime list for a page
async def fetch_ongoing_anime(
    page: int, client: AsyncClient, cache: ResponseCache, base_url: str = UPSTREAM_BASE_URL
) -> FetchResult[List[AnimeSummary]]:
    url = f"{base_url}/api/v1/ongoing/{page}"
    return await _cached_fetch(
        ONGOING, page, url, client, cache,
        parse=lambda body: _summary_list.validate_python(_field(body, 'ongoing')),
        empty=list,
    )


# Function to search anime by title
async def search_anime(
    query: str, client: AsyncClient, cache: ResponseCache, base_url: str = UPSTREAM_BASE_URL
) -> FetchResult[List[AnimeSummary]]:
    url = f"{base_url}/api/v1/search/{quote(query, safe='')}"
    return await _cached_fetch(
        SEARCH, query, url, client, cache,
        parse=lambda body: _summary_list.validate_python(_field(body, 'search')),
        empty=list,
    )


# Function to fetch anime details and the episode list
async def fetch_anime_detail(
    endpoint: str, client: AsyncClient, cache: ResponseCache, base_url: str = UPSTREAM_BASE_URL
) -> FetchResult[AnimeDetail]:
    url = f"{base_url}/api/v1/detail/{endpoint}"
    return await _cached_fetch(
        DETAIL, endpoint, url, client, cache,
        parse=_parse_detail,
        empty=AnimeDetail,
    )


# Function to fetch the mirrors and default stream of an episode
async def fetch_episode_stream(
    endpoint: str, client: AsyncClient, cache: ResponseCache, base_url: str = UPSTREAM_BASE_URL
) -> FetchResult[EpisodeStream]:
    url = f"{base_url}/api/v1/episode/{endpoint}"
    return await _cached_fetch(
        EPISODE, endpoint, url, client, cache,
        parse=lambda body: EpisodeStream.model_validate(body or {}),
        empty=EpisodeStream,
    )


# Function to resolve a mirror link to its playable URL
async def resolve_stream_url(link: str, client: AsyncClient, base_url: str = UPSTREAM_BASE_URL) -> FetchResult[Optional[str]]:
    url = f"{base_url}{link}"
    logger.info(f"Resolving stream link {url}")

    def parse(body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            raise ValueError(f"Expected a JSON object, got {type(body).__name__}")
        return body.get('streaming_url') or None

    result = await _fetch(url, client, parse, empty=lambda: None)
    if isinstance(result, Ok) and result.data is None:
        return Degraded(None, "No streaming_url in response")
    return result


# Function to read every anime record from the JSON store
async def read_collection(
    client: AsyncClient, base_url: str = STORE_BASE_URL, collection: str = STORE_COLLECTION
) -> FetchResult[List[StoredAnime]]:
    url = f"{base_url}/read/{collection}"
    logger.info(f"Reading store collection {url}")
    return await _fetch(
        url, client,
        parse=lambda body: _stored_list.validate_python(body or []),
        empty=list,
    )


# Function to replace the whole collection in the JSON store
async def write_collection(
    records: List[StoredAnime], client: AsyncClient, base_url: str = STORE_BASE_URL, collection: str = STORE_COLLECTION
) -> bool:
    url = f"{base_url}/write/{collection}"
    payload = {'json': [record.model_dump() for record in records]}
    try:
        response = await client.post(url, json=payload)
        response.raise_for_status()
    except (HTTPStatusError, RequestError) as e:
        _describe_failure(url, e)
        return False
    logger.info(f"Wrote {len(records)} records to {url}")
    return True


async def select_stream_url(
    stream: EpisodeStream,
    options: List[ServerOption],
    server_name: Optional[str],
    client: AsyncClient,
    base_url: str = UPSTREAM_BASE_URL,
) -> Optional[str]:
    """
    Pick the URL for the player: the resolved link of the chosen server when it
    exists and resolves, otherwise the episode's default stream link.
    """
    option = find_server_option(options, server_name)
    if option is None:
        return stream.stream_link
    resolved = await resolve_stream_url(option.link, client, base_url)
    if isinstance(resolved, Degraded):
        logger.warning(f"Falling back to default stream for server '{server_name}': {resolved.reason}")
        return stream.stream_link
    return resolved.data
