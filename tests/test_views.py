"""Tests for view shaping and page rendering."""

from bs4 import BeautifulSoup

from episodes import flatten_server_options, navigate_episodes
from models import AnimeDetail, AnimeSummary, EpisodeStream, StoredAnime
from pagination import get_pagination
from views import (
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
from conftest import detail_payload, stored_anime, stream_payload, summary


def parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestPageLinks:
    def test_ellipsis_points_to_current_page_and_is_disabled(self) -> None:
        links = page_links(get_pagination(10, 20), 10, "naruto")

        ellipses = [link for link in links if link.label == "..."]
        assert len(ellipses) == 2
        assert all(link.disabled for link in ellipses)
        assert all(link.href == "/?page=10&search=naruto" for link in ellipses)
        assert [link.label for link in links if link.active] == ["10"]

    def test_search_is_url_encoded(self) -> None:
        links = page_links([1, 2], 1, "one piece")
        assert links[1].href == "/?page=2&search=one+piece"


class TestAnimeCard:
    def test_card_uses_detail_fields(self) -> None:
        detail = AnimeDetail.model_validate(detail_payload("Show", episode_count=3))
        card = build_anime_card(AnimeSummary.model_validate(summary(1)), detail)

        assert card.title == "Show"
        assert card.href == "/anime/anime-1-sub-indo"
        assert card.thumb == "https://img.test/poster.jpg"
        assert card.lines == ["Skor: 8.1 - Total Episode: 12", "3 Jan,24", "Durasi: 24 min"]
        assert not card.degraded

    def test_degraded_card_falls_back_to_summary(self) -> None:
        card = build_anime_card(AnimeSummary.model_validate(summary(4)), AnimeDetail(), degraded=True)

        assert card.title == "Anime 4"
        assert card.thumb == "https://img.test/4.jpg"
        assert card.lines == ["Senin"]
        assert card.degraded

    def test_store_card_links_to_first_episode(self) -> None:
        card = build_store_card(StoredAnime.model_validate(stored_anime(3)))
        assert card.href == "/stream?anime-id=stored-3&episode=1"
        assert card.lines == ["Story number 3"]


class TestRenderPages:
    def test_home_escapes_user_input(self) -> None:
        view = HomePage(search='<script>alert(1)</script>', pages=page_links([1], 1))
        soup = parse(render_home(view))

        assert soup.find("script", string="alert(1)") is None
        assert soup.find("input", attrs={"name": "search"})["value"] == '<script>alert(1)</script>'
        assert soup.find(class_="empty-listing") is not None

    def test_detail_page_links_use_episode_numbers(self) -> None:
        detail = AnimeDetail.model_validate(detail_payload("Show", episode_count=3))
        soup = parse(render_detail(build_detail_page("show-sub-indo", detail)))

        assert soup.title.string == "Show | PurNime"
        links = [(a.string, a["href"]) for a in soup.select(".episode-list a")]
        assert links == [
            ("Show Episode 3", "/anime/show-sub-indo/3"),
            ("Show Episode 2", "/anime/show-sub-indo/2"),
            ("Show Episode 1", "/anime/show-sub-indo/1"),
        ]
        assert [li.string for li in soup.select(".anime-genres li")] == ["Action", "Adventure"]

    def test_stream_page(self) -> None:
        detail = AnimeDetail.model_validate(detail_payload("Show", episode_count=3))
        navigation = navigate_episodes(detail.episode_list, 1)
        options = flatten_server_options(EpisodeStream.model_validate(stream_payload()))
        view = build_stream_page("show-sub-indo", detail, navigation, "https://cdn.test/x.mp4", options, "mega - 480p")
        soup = parse(render_stream(view))

        assert soup.find("iframe", id="player")["src"] == "https://cdn.test/x.mp4"
        assert "disabled" in soup.select_one(".prev-episode")["class"]
        assert "disabled" not in soup.select_one(".next-episode")["class"]
        assert soup.select_one(".next-episode")["href"] == "/anime/show-sub-indo/2"
        assert soup.find("option", selected=True)["value"] == "mega - 480p"
        active = soup.select(".episode-list a.active")
        assert [a.string for a in active] == ["Show Episode 1"]

    def test_store_stream_page(self) -> None:
        anime = StoredAnime.model_validate(stored_anime(1, episodes=2))
        navigation = navigate_episodes(anime.episodes, 2, newest_first=False)
        soup = parse(render_store_stream(build_store_stream_page(anime, navigation)))

        assert soup.find("video", id="player")["src"] == "https://video.test/s1-2.mp4"
        assert soup.select_one(".prev-episode")["href"] == "/stream?anime-id=stored-1&episode=1"
        assert "disabled" in soup.select_one(".next-episode")["class"]
        assert soup.find("input", id="goToEpisode")["max"] == "2"

    def test_admin_page_has_both_forms(self) -> None:
        soup = parse(render_admin(AdminPage()))
        actions = [form["action"] for form in soup.find_all("form")]
        assert actions == ["/admin/add-anime", "/admin/add-episode"]
        assert soup.find("textarea", attrs={"name": "synopsis"}) is not None
