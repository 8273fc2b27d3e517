"""Shared fixtures: a scripted fake upstream served through httpx.MockTransport."""

import json
from typing import Any, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings
from upstream import get_http_client

API_BASE = "http://upstream.test"
STORE_BASE = "http://store.test"


class FakeUpstream:
    """Answers GET/POST requests from a table of path -> (status, json body)."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, body: Any, status: int = 200, method: str = "GET") -> None:
        self.routes[(method, path)] = (status, body)

    def fail(self, path: str, status: int = 500, method: str = "GET") -> None:
        self.routes[(method, path)] = (status, {"message": "error"})

    def network_error(self, path: str, method: str = "GET") -> None:
        self.routes[(method, path)] = (0, httpx.ConnectError("connection refused"))

    def calls(self, path: str, method: str = "GET") -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    def posted_json(self, path: str) -> Any:
        for request in reversed(self.requests):
            if request.method == "POST" and request.url.path == path:
                return json.loads(request.content)
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get((request.method, request.url.path), (404, {"message": "not found"}))
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def summary(n: int) -> Dict[str, Any]:
    return {
        "title": f"Anime {n}",
        "thumb": f"https://img.test/{n}.jpg",
        "endpoint": f"anime-{n}-sub-indo",
        "episode": "Episode 3",
        "uploaded_on": "Senin",
    }


def detail_payload(title: str, episode_count: int = 3, extra: List[Dict[str, str]] = None) -> Dict[str, Any]:
    # Newest episode first, as upstream sends it
    episodes = [
        {
            "episode_title": f"{title} Episode {n}",
            "episode_endpoint": f"{title.lower().replace(' ', '-')}-episode-{n}",
            "episode_date": f"{n} Jan,24",
        }
        for n in range(episode_count, 0, -1)
    ]
    return {
        "anime_detail": {
            "title": title,
            "thumb": "https://img.test/poster.jpg",
            "sinopsis": f"Synopsis of {title}",
            "detail": ["Judul: x", "Japanese: y", "Skor: 8.1", "Produser: z", "Tipe: TV", "Status: Ongoing",
                       "Total Episode: 12", "Durasi: 24 min"],
            "genres": ["Action", "Adventure"],
        },
        "episode_list": episodes + (extra or []),
    }


def stream_payload(default: str = "https://video.test/default.mp4") -> Dict[str, Any]:
    return {
        "title": "Episode",
        "streamLink": default,
        "mirror_embed1": {
            "quality": "360p",
            "straming": [{"driver": " desu ", "link": "/api/v1/streaming/desu-360"}],
        },
        "mirror_embed2": {
            "quality": "480p",
            "straming": [
                {"driver": "odstream", "link": "/api/v1/streaming/od-480"},
                {"driver": "mega", "link": "/api/v1/streaming/mega-480"},
            ],
        },
        "mirror_embed3": {"quality": "720p", "straming": []},
    }


def stored_anime(n: int, episodes: int = 0) -> Dict[str, Any]:
    return {
        "title": f"Stored {n}",
        "synopsis": f"Story number {n}",
        "thumbnail": f"https://img.test/s{n}.jpg",
        "genre": "Action",
        "animeId": f"stored-{n}",
        "episodes": [{"episodeNumber": str(e), "link": f"https://video.test/s{n}-{e}.mp4"} for e in range(1, episodes + 1)],
    }


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


def build_test_client(upstream: FakeUpstream, source: str) -> TestClient:
    settings = Settings(source=source, upstream_base_url=API_BASE, store_base_url=STORE_BASE, store_collection="anime")
    app = create_app(settings)

    async def fake_http_client():
        client = upstream.client()
        try:
            yield client
        finally:
            await client.aclose()

    app.dependency_overrides[get_http_client] = fake_http_client
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def catalog_client(upstream: FakeUpstream):
    with build_test_client(upstream, "api") as client:
        yield client


@pytest.fixture
def store_client(upstream: FakeUpstream):
    with build_test_client(upstream, "store") as client:
        yield client
