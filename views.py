# views.py
"""
Page view models and renderers.

Handlers shape fetched data into the view models below; each render_* function
is a pure function from one view model to an HTML document.
"""
from typing import List, Optional, Sequence
from urllib.parse import quote, urlencode

from pydantic import BaseModel, Field

from episodes import EpisodeNavigation, episode_number_for
from models import AnimeDetail, AnimeInfo, AnimeSummary, EpisodeRef, ServerOption, StoredAnime
from pagination import ELLIPSIS, PaginationToken
from templates import environment

SITE_NAME = "PurNime"
STORE_SITE_NAME = "Anidong"


class PageLink(BaseModel):
    label: str
    href: str
    active: bool = False
    disabled: bool = False


class AnimeCard(BaseModel):
    title: str
    href: str
    thumb: Optional[str] = None
    lines: List[str] = Field(default_factory=list)
    degraded: bool = False


class HomePage(BaseModel):
    site_name: str = SITE_NAME
    search: str = ""
    page: int = 1
    cards: List[AnimeCard] = Field(default_factory=list)
    pages: List[PageLink] = Field(default_factory=list)


class EpisodeLink(BaseModel):
    title: str
    href: str
    date: str = ""
    active: bool = False


class DetailPage(BaseModel):
    site_name: str = SITE_NAME
    anime_id: str
    info: AnimeInfo
    episodes: List[EpisodeLink] = Field(default_factory=list)


class ServerChoice(BaseModel):
    name: str
    selected: bool = False


class NavLink(BaseModel):
    href: str
    disabled: bool = False


class StreamPage(BaseModel):
    site_name: str = SITE_NAME
    title: str
    number: int
    total: int
    player_url: Optional[str] = None
    detail_href: str = "/"
    sinopsis: str = ""
    servers: List[ServerChoice] = Field(default_factory=list)
    episodes: List[EpisodeLink] = Field(default_factory=list)
    previous: NavLink
    next: NavLink
    jump_href_prefix: str = ""


class AdminPage(BaseModel):
    site_name: str = STORE_SITE_NAME


def anime_href(anime_id: str, episode: Optional[int] = None) -> str:
    href = f"/anime/{quote(anime_id)}"
    return href if episode is None else f"{href}/{episode}"


def store_stream_href(anime_id: str, episode: int) -> str:
    return "/stream?" + urlencode({'anime-id': anime_id, 'episode': episode})


def page_links(tokens: Sequence[PaginationToken], current_page: int, search: str = "") -> List[PageLink]:
    links = []
    for token in tokens:
        # Ellipsis links point back at the current page
        target = current_page if token == ELLIPSIS else token
        href = "/?" + urlencode({'page': target, 'search': search})
        links.append(PageLink(
            label=str(token),
            href=href,
            active=token == current_page,
            disabled=token == ELLIPSIS,
        ))
    return links


def _item(values: Sequence[str], index: int) -> str:
    return values[index] if index < len(values) else ""


def build_anime_card(summary: AnimeSummary, detail: AnimeDetail, degraded: bool = False) -> AnimeCard:
    info = detail.anime_detail
    lines = []
    info_line = " - ".join(part for part in (_item(info.detail, 2), _item(info.detail, 6)) if part)
    if info_line:
        lines.append(info_line)
    latest = detail.episode_list[0].episode_date if detail.episode_list else summary.uploaded_on
    if latest:
        lines.append(latest)
    if _item(info.detail, 7):
        lines.append(_item(info.detail, 7))
    return AnimeCard(
        title=info.title or summary.title,
        href=anime_href(summary.endpoint),
        thumb=info.thumb or summary.thumb,
        lines=lines,
        degraded=degraded,
    )


def build_store_card(anime: StoredAnime) -> AnimeCard:
    return AnimeCard(
        title=anime.title,
        href=store_stream_href(anime.animeId, 1),
        thumb=anime.thumbnail or None,
        lines=[anime.synopsis] if anime.synopsis else [],
    )


def episode_links(anime_id: str, episodes: Sequence[EpisodeRef], active_index: Optional[int] = None) -> List[EpisodeLink]:
    total = len(episodes)
    return [
        EpisodeLink(
            title=episode.episode_title,
            href=anime_href(anime_id, episode_number_for(index, total)),
            date=episode.episode_date,
            active=index == active_index,
        )
        for index, episode in enumerate(episodes)
    ]


def build_detail_page(anime_id: str, detail: AnimeDetail) -> DetailPage:
    return DetailPage(anime_id=anime_id, info=detail.anime_detail, episodes=episode_links(anime_id, detail.episode_list))


def build_stream_page(
    anime_id: str,
    detail: AnimeDetail,
    navigation: EpisodeNavigation,
    player_url: Optional[str],
    options: Sequence[ServerOption],
    selected_server: Optional[str] = None,
) -> StreamPage:
    return StreamPage(
        title=detail.anime_detail.title,
        number=navigation.number,
        total=navigation.total,
        player_url=player_url,
        detail_href=anime_href(anime_id),
        sinopsis=detail.anime_detail.sinopsis,
        servers=[ServerChoice(name=option.name, selected=option.name == selected_server) for option in options],
        episodes=episode_links(anime_id, detail.episode_list, active_index=navigation.index),
        previous=NavLink(href=anime_href(anime_id, navigation.previous), disabled=not navigation.has_previous),
        next=NavLink(href=anime_href(anime_id, navigation.next), disabled=not navigation.has_next),
    )


def build_store_stream_page(anime: StoredAnime, navigation: EpisodeNavigation) -> StreamPage:
    return StreamPage(
        site_name=STORE_SITE_NAME,
        title=anime.title,
        number=navigation.number,
        total=navigation.total,
        player_url=navigation.episode.link or None,
        previous=NavLink(href=store_stream_href(anime.animeId, navigation.previous), disabled=not navigation.has_previous),
        next=NavLink(href=store_stream_href(anime.animeId, navigation.next), disabled=not navigation.has_next),
        jump_href_prefix="/stream?" + urlencode({'anime-id': anime.animeId}) + "&episode=",
    )


def _render(template_name: str, view: BaseModel) -> str:
    template = environment.get_template(template_name)
    return template.render(view=view, site_name=view.site_name)


def render_home(view: HomePage) -> str:
    return _render('home.html', view)


def render_detail(view: DetailPage) -> str:
    return _render('detail.html', view)


def render_stream(view: StreamPage) -> str:
    return _render('stream.html', view)


def render_store_stream(view: StreamPage) -> str:
    return _render('store_stream.html', view)


def render_admin(view: AdminPage) -> str:
    return _render('admin.html', view)
