#  app.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Form, HTTPException, Path, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from httpx import AsyncClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from cache import ResponseCache
from config import Settings, configure_logging
from episodes import EpisodeNotFoundError, flatten_server_options, navigate_episodes
from models import Degraded, StoredAnime, StoredEpisode
from pagination import get_pagination, paginate, parse_page, total_pages_for
from upstream import (
    fetch_anime_detail,
    fetch_episode_stream,
    fetch_ongoing_anime,
    get_http_client,
    read_collection,
    search_anime,
    select_stream_url,
    write_collection,
)
from views import (
    STORE_SITE_NAME,
    AdminPage,
    HomePage,
    build_anime_card,
    build_detail_page,
    build_store_card,
    build_store_stream_page,
    build_stream_page,
    page_links,
    render_admin,
    render_detail,
    render_home,
    render_store_stream,
    render_stream,
)

# Configure logging
logger = logging.getLogger(__name__)

TEXT_RESPONSES = {
    404: {"content": {"text/plain": {}}, "description": "Anime or episode not found"},
    500: {"content": {"text/plain": {}}, "description": "Internal server error"},
}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


catalog_router = APIRouter(tags=["Catalog"])
store_router = APIRouter(tags=["Store"])


# Listing of ongoing anime or search results
@catalog_router.get(
    "/",
    response_class=HTMLResponse,
    responses=TEXT_RESPONSES,
    summary="Anime listing",
    description="Ongoing anime, or search results when `search` is given, ten per page. Example: `/?page=2&search=naruto`"
)
async def home(
    page: Optional[str] = Query(None, description="Page number (defaults to 1)"),
    search: str = Query("", description="Search term"),
    client: AsyncClient = Depends(get_http_client),
    cache: ResponseCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    page_number = max(parse_page(page), 1)
    search = search.strip()
    if search:
        listing = await search_anime(search, client, cache, settings.upstream_base_url)
    else:
        listing = await fetch_ongoing_anime(page_number, client, cache, settings.upstream_base_url)

    summaries = listing.data
    visible = paginate(summaries, page_number, settings.page_size)
    # Fetch the details of every visible card concurrently; failures degrade single cards
    details = await asyncio.gather(*[
        fetch_anime_detail(summary.endpoint, client, cache, settings.upstream_base_url) for summary in visible
    ])
    cards = [
        build_anime_card(summary, result.data, degraded=isinstance(result, Degraded))
        for summary, result in zip(visible, details)
    ]

    total_pages = total_pages_for(len(summaries), settings.page_size)
    logger.info(f"Rendering listing page {page_number}/{total_pages} ({len(cards)} cards, search='{search}')")
    view = HomePage(
        search=search,
        page=page_number,
        cards=cards,
        pages=page_links(get_pagination(page_number, total_pages), page_number, search),
    )
    return HTMLResponse(render_home(view))


@catalog_router.get(
    "/anime/{anime_id}",
    response_class=HTMLResponse,
    responses=TEXT_RESPONSES,
    summary="Anime detail",
    description="Synopsis, details, genres and episode list of an anime. Example: `/anime/one-piece-sub-indo`"
)
async def anime_detail(
    anime_id: str = Path(..., description="Upstream endpoint of the anime"),
    client: AsyncClient = Depends(get_http_client),
    cache: ResponseCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    result = await fetch_anime_detail(anime_id, client, cache, settings.upstream_base_url)
    if result.data.is_empty:
        logger.warning(f"No detail available for anime: {anime_id}")
        raise HTTPException(status_code=404, detail="Anime not found")
    return HTMLResponse(render_detail(build_detail_page(anime_id, result.data)))


@catalog_router.get(
    "/anime/{anime_id}/{episode}",
    response_class=HTMLResponse,
    responses=TEXT_RESPONSES,
    summary="Stream an episode",
    description="Player page for episode `episode` (counted from the first aired). Optional `server` picks a mirror. Example: `/anime/one-piece-sub-indo/3?server=desu - 720p`"
)
async def stream_episode(
    anime_id: str = Path(..., description="Upstream endpoint of the anime"),
    episode: str = Path(..., description="Episode number, 1 is the oldest episode"),
    server: Optional[str] = Query(None, description="Server option name '<driver> - <quality>'"),
    client: AsyncClient = Depends(get_http_client),
    cache: ResponseCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    number = parse_page(episode)
    detail = (await fetch_anime_detail(anime_id, client, cache, settings.upstream_base_url)).data

    try:
        navigation = navigate_episodes(detail.episode_list, number)
    except EpisodeNotFoundError as e:
        logger.info(f"{anime_id}: {e}")
        raise HTTPException(status_code=404, detail="Episode not found")

    stream = (await fetch_episode_stream(navigation.episode.episode_endpoint, client, cache, settings.upstream_base_url)).data
    options = flatten_server_options(stream)
    player_url = await select_stream_url(stream, options, server, client, settings.upstream_base_url)

    view = build_stream_page(anime_id, detail, navigation, player_url, options, selected_server=server)
    return HTMLResponse(render_stream(view))


async def load_store(client: AsyncClient, settings: Settings) -> List[StoredAnime]:
    result = await read_collection(client, settings.store_base_url, settings.store_collection)
    return result.data


async def load_store_for_update(client: AsyncClient, settings: Settings) -> List[StoredAnime]:
    """Read the collection before a rewrite; a failed read must not replace the store with an empty list."""
    result = await read_collection(client, settings.store_base_url, settings.store_collection)
    if isinstance(result, Degraded):
        logger.error(f"Refusing to rewrite store collection after failed read: {result.reason}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
    return result.data


@store_router.get(
    "/",
    response_class=HTMLResponse,
    responses=TEXT_RESPONSES,
    summary="Stored anime listing",
    description="Anime from the JSON store, filtered by title or synopsis, ten per page. Example: `/?page=2&search=dragon`"
)
async def store_home(
    page: Optional[str] = Query(None, description="Page number (defaults to 1)"),
    search: str = Query("", description="Filter on title or synopsis"),
    client: AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    page_number = max(parse_page(page), 1)
    search = search.strip()
    records = await load_store(client, settings)
    filtered = [anime for anime in records if anime.matches(search)]

    total_pages = total_pages_for(len(filtered), settings.page_size)
    cards = [build_store_card(anime) for anime in paginate(filtered, page_number, settings.page_size)]
    logger.info(f"Rendering store listing page {page_number}/{total_pages} ({len(filtered)} matches, search='{search}')")
    view = HomePage(
        site_name=STORE_SITE_NAME,
        search=search,
        page=page_number,
        cards=cards,
        pages=page_links(get_pagination(page_number, total_pages), page_number, search),
    )
    return HTMLResponse(render_home(view))


@store_router.get(
    "/stream",
    response_class=HTMLResponse,
    responses=TEXT_RESPONSES,
    summary="Stream a stored episode",
    description="Video page for a stored anime episode. Example: `/stream?anime-id=dragon-ball&episode=2`"
)
async def store_stream(
    anime_id: str = Query(..., alias="anime-id", description="Store identifier of the anime"),
    episode: Optional[str] = Query(None, description="Episode number (defaults to 1)"),
    client: AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    records = await load_store(client, settings)
    anime = next((record for record in records if record.animeId == anime_id), None)
    if anime is None:
        raise HTTPException(status_code=404, detail="Anime not found")

    try:
        navigation = navigate_episodes(anime.episodes, parse_page(episode), newest_first=False)
    except EpisodeNotFoundError as e:
        logger.info(f"{anime_id}: {e}")
        raise HTTPException(status_code=404, detail="Episode not found")

    return HTMLResponse(render_store_stream(build_store_stream_page(anime, navigation)))


@store_router.get("/admin", response_class=HTMLResponse, summary="Admin forms")
async def admin():
    return HTMLResponse(render_admin(AdminPage()))


@store_router.post("/admin/add-anime", responses=TEXT_RESPONSES, summary="Add an anime to the store")
async def add_anime(
    title: str = Form(...),
    synopsis: str = Form(...),
    thumbnail: str = Form(...),
    genre: str = Form(...),
    animeId: str = Form(...),
    client: AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    records = await load_store_for_update(client, settings)
    records.append(StoredAnime(title=title, synopsis=synopsis, thumbnail=thumbnail, genre=genre, animeId=animeId))
    await write_collection(records, client, settings.store_base_url, settings.store_collection)
    logger.info(f"Added anime '{title}' ({animeId})")
    return RedirectResponse("/admin", status_code=303)


@store_router.post("/admin/add-episode", responses=TEXT_RESPONSES, summary="Add an episode to a stored anime")
async def add_episode(
    animeId: str = Form(...),
    episode: str = Form(...),
    link: str = Form(...),
    client: AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    records = await load_store_for_update(client, settings)
    anime = next((record for record in records if record.animeId == animeId), None)
    if anime is None:
        logger.error(f"Anime ID not found: {animeId}")
        raise HTTPException(status_code=404, detail="Anime not found")

    anime.episodes.append(StoredEpisode(episodeNumber=episode, link=link))
    await write_collection(records, client, settings.store_base_url, settings.store_collection)
    logger.info(f"Added episode {episode} to {animeId}")
    return RedirectResponse("/admin", status_code=303)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Error rendering {request.url.path}: {exc}")
    return PlainTextResponse("Internal Server Error", status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.cache = ResponseCache(ttl=settings.cache_ttl)
        logger.info(f"Serving '{settings.source}' catalog on port {settings.port}")
        yield
        app.state.cache.clear()

    app = FastAPI(
        title="PurNime",
        description="Server-rendered anime streaming catalog backed by an anime API or a JSON store.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(store_router if settings.source == 'store' else catalog_router)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    return app


app = create_app()


def main() -> None:
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
