# episodes.py
"""
Episode navigation and stream selection.

Upstream episode lists are ordered newest first, while users count episodes
from the oldest one. Episode number N of a list of length L therefore lives at
index L - N. Store-backed lists are kept oldest first and map N to index N - 1.
"""
import logging
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from models import EpisodeStream, ServerOption

logger = logging.getLogger(__name__)

T = TypeVar('T')


class EpisodeNotFoundError(LookupError):
    def __init__(self, number: int, total: int):
        super().__init__(f"Episode {number} not found ({total} episodes available)")
        self.number = number
        self.total = total


@dataclass(frozen=True)
class EpisodeNavigation(Generic[T]):
    number: int
    total: int
    index: int
    episode: T
    previous: int
    next: int

    @property
    def has_previous(self) -> bool:
        return self.previous >= 1

    @property
    def has_next(self) -> bool:
        return self.next <= self.total


def episode_index(number: int, total: int, newest_first: bool = True) -> int:
    if number < 1 or number > total:
        raise EpisodeNotFoundError(number, total)
    return total - number if newest_first else number - 1


def episode_number_for(index: int, total: int, newest_first: bool = True) -> int:
    """Inverse of episode_index: the user-facing number of the entry at `index`."""
    return total - index if newest_first else index + 1


def navigate_episodes(episodes: Sequence[T], number: int, newest_first: bool = True) -> EpisodeNavigation[T]:
    total = len(episodes)
    index = episode_index(number, total, newest_first)
    return EpisodeNavigation(
        number=number,
        total=total,
        index=index,
        episode=episodes[index],
        previous=number - 1,
        next=number + 1,
    )


def flatten_server_options(stream: EpisodeStream) -> List[ServerOption]:
    """Collect every (driver, quality) pair of the episode mirrors into one selectable list."""
    options = []
    for mirror in stream.mirrors:
        for server in mirror.servers:
            options.append(ServerOption(name=f"{server.driver.strip()} - {mirror.quality}", link=server.link))
    return options


def find_server_option(options: Sequence[ServerOption], name: Optional[str]) -> Optional[ServerOption]:
    if not name:
        return None
    for option in options:
        if option.name == name:
            return option
    logger.info(f"Requested server not available: {name}")
    return None
