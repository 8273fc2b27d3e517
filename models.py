# models.py
from dataclasses import dataclass
from typing import Annotated, Any, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator

# Marker that separates real episodes from specials or movies in a detail payload
EPISODE_MARKER = "episode-"

MIRROR_KEYS = ('mirror_embed1', 'mirror_embed2', 'mirror_embed3')

T = TypeVar('T')


def blank_if_none(value: Any) -> Any:
    return "" if value is None else value


# Upstream sends null for missing text; it renders blank
Text = Annotated[str, BeforeValidator(blank_if_none)]


class AnimeSummary(BaseModel):
    title: Text = Field("", description="Anime title")
    thumb: Optional[str] = Field(None, description="Thumbnail URL")
    endpoint: Text = Field("", description="Upstream endpoint identifier")
    episode: Optional[str] = Field(None, description="Latest episode label")
    uploaded_on: Optional[str] = Field(None, description="Upload date of the latest episode")
    day_updated: Optional[str] = Field(None, description="Weekday the anime is updated")
    status: Optional[str] = Field(None, description="Airing status")
    score: Optional[str] = Field(None, description="Rating score")

    class Config:
        from_attributes = True
        coerce_numbers_to_str = True


class AnimeInfo(BaseModel):
    title: Text = Field("", description="Anime title")
    thumb: Optional[str] = Field(None, description="Poster URL")
    sinopsis: Text = Field("", description="Synopsis")
    detail: List[Text] = Field(default_factory=list, description="Detail lines (studio, status, release date...)")
    genres: List[Text] = Field(default_factory=list, description="List of genres")

    class Config:
        from_attributes = True
        coerce_numbers_to_str = True

    @field_validator('detail', 'genres', mode='before')
    @classmethod
    def text_items(cls, value: Any) -> Any:
        if value is None:
            return []
        # Some API versions send genre objects instead of plain names
        if isinstance(value, list):
            return [item.get('genre_name', '') if isinstance(item, dict) else item for item in value]
        return value


class EpisodeRef(BaseModel):
    episode_title: Text = Field("", description="Episode title")
    episode_endpoint: Text = Field("", description="Upstream endpoint of the episode")
    episode_date: Text = Field("", description="Release date")

    class Config:
        from_attributes = True

    @property
    def is_episode(self) -> bool:
        return EPISODE_MARKER in self.episode_endpoint


class AnimeDetail(BaseModel):
    anime_detail: AnimeInfo = Field(default_factory=AnimeInfo, description="Anime information")
    episode_list: List[EpisodeRef] = Field(default_factory=list, description="Episodes, newest first")

    class Config:
        from_attributes = True

    @field_validator('anime_detail', mode='before')
    @classmethod
    def info_or_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator('episode_list', mode='before')
    @classmethod
    def episode_entries(cls, value: Any) -> Any:
        if value is None:
            return []
        # Entries that are not objects cannot be episodes
        if isinstance(value, list):
            return [entry for entry in value if isinstance(entry, (dict, EpisodeRef))]
        return value

    @property
    def is_empty(self) -> bool:
        return not self.anime_detail.title and not self.episode_list

    def only_episodes(self) -> "AnimeDetail":
        """Return a copy without entries that are not regular episodes."""
        episodes = [ep for ep in self.episode_list if ep.is_episode]
        return self.model_copy(update={'episode_list': episodes})


class StreamServer(BaseModel):
    driver: str = Field("", description="Hosting driver name")
    link: str = Field("", description="Upstream path that resolves the playable URL")

    class Config:
        from_attributes = True


class MirrorGroup(BaseModel):
    quality: str = Field("", description="Quality label (e.g., 480p, 720p)")
    servers: List[StreamServer] = Field(default_factory=list, alias='straming', description="Servers in this mirror")

    class Config:
        from_attributes = True
        populate_by_name = True


class EpisodeStream(BaseModel):
    title: Optional[str] = Field(None, description="Episode title")
    stream_link: Optional[str] = Field(None, alias='streamLink', description="Default stream URL")
    mirror_embed1: Optional[MirrorGroup] = None
    mirror_embed2: Optional[MirrorGroup] = None
    mirror_embed3: Optional[MirrorGroup] = None

    class Config:
        from_attributes = True
        populate_by_name = True

    @property
    def mirrors(self) -> List[MirrorGroup]:
        return [getattr(self, key) for key in MIRROR_KEYS if getattr(self, key) is not None]


class ServerOption(BaseModel):
    name: str = Field(..., description="Display name: '<driver> - <quality>'")
    link: str = Field(..., description="Upstream path that resolves the playable URL")


# Store records keep fields they do not model, since every write replaces the whole collection
class StoredEpisode(BaseModel):
    episodeNumber: Optional[str] = Field(None, description="Episode number as entered by the admin")
    link: Text = Field("", description="Direct video URL")

    class Config:
        from_attributes = True
        coerce_numbers_to_str = True
        extra = 'allow'


class StoredAnime(BaseModel):
    title: Text = Field("", description="Anime title")
    synopsis: Text = Field("", description="Synopsis")
    thumbnail: Text = Field("", description="Thumbnail URL")
    genre: Text = Field("", description="Genre")
    animeId: Text = Field("", description="Store identifier")
    episodes: List[StoredEpisode] = Field(default_factory=list, description="Episodes, oldest first")

    class Config:
        from_attributes = True
        coerce_numbers_to_str = True
        extra = 'allow'

    def matches(self, search: str) -> bool:
        needle = search.lower()
        return needle in self.title.lower() or needle in self.synopsis.lower()


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    """A fetch that failed; `data` holds the empty fallback value."""
    data: T
    reason: str

    @property
    def degraded(self) -> bool:
        return True


FetchResult = Union[Ok[T], Degraded[T]]
