"""Classification of places and paths into display states."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from src.learningmap.placestore import Path, PlaceStore

logger = logging.getLogger(__name__)


@dataclass
class PlaceState:
    """Display state of one place. ``visited`` and ``waygone`` may co-occur."""

    hidden: bool = False
    reachable: bool = False
    visited: bool = False
    waygone: bool = False


@dataclass
class PathState:
    """Display state of one path."""

    hidden: bool = False
    reachable: bool = False
    visited: bool = False
    waygone: bool = False


@dataclass
class Classification:
    """Result of ``classify``: states keyed by place id and path id."""

    places: dict[int, PlaceState] = field(default_factory=dict)
    paths: dict[int, PathState] = field(default_factory=dict)

    def ids_where(self, state: str) -> list[int]:
        """Return the ids of places with the given flag set, in graph order."""
        return [pid for pid, s in self.places.items() if getattr(s, state)]


def _build_neighbors(store: PlaceStore) -> dict[int, set[int]]:
    """Undirected adjacency between existing places."""
    known = {place.id for place in store.places}
    neighbors: dict[int, set[int]] = {pid: set() for pid in known}
    for path in store.paths:
        if path.fid not in known or path.sid not in known:
            continue
        neighbors[path.fid].add(path.sid)
        neighbors[path.sid].add(path.fid)
    return neighbors


def _visit_order(store: PlaceStore, visited: Iterable[int]) -> dict[int, int]:
    """Map each visited place to the position of its first visit."""
    known = {place.id for place in store.places}
    order: dict[int, int] = {}
    for place_id in visited:
        if place_id not in known:
            logger.debug(f"Ignoring visit of unknown place {place_id}")
            continue
        if place_id not in order:
            order[place_id] = len(order)
    return order


def _is_waygone(place_id: int, neighbors: set[int], order: dict[int, int]) -> bool:
    """
    A visited place is superseded once every neighbour has been visited and
    progress has moved past it through at least one of them.
    """
    if place_id not in order or not neighbors:
        return False
    if any(n not in order for n in neighbors):
        return False
    return any(order[n] > order[place_id] for n in neighbors)


def classify(store: PlaceStore, visited: Iterable[int]) -> Classification:
    """
    Classify every place and path of a map for a learner.

    Args:
        store: The map graph and display configuration
        visited: Ids of visited places in the order they were visited

    Returns:
        Classification with one state per place and per path
    """
    order = _visit_order(store, visited)
    neighbors = _build_neighbors(store)
    result = Classification()

    for place in store.places:
        state = PlaceState(visited=place.id in order)
        if not state.visited:
            state.reachable = store.is_starting_place(place.id) or any(
                n in order for n in neighbors[place.id]
            )
        if store.slicemode:
            state.waygone = _is_waygone(place.id, neighbors[place.id], order)
        state.hidden = not store.showall and (
            not (state.reachable or state.visited)
            or (state.waygone and not store.showwaygone)
        )
        result.places[place.id] = state

    for path in store.paths:
        result.paths[path.id] = _classify_path(store, path, result.places)

    logger.debug(
        f"Classified {len(result.places)} places ({len(order)} visited), "
        f"{len(result.paths)} paths"
    )
    return result


def _classify_path(store: PlaceStore, path: Path, places: dict[int, PlaceState]) -> PathState:
    first = places.get(path.fid)
    second = places.get(path.sid)
    if first is None or second is None:
        # Dangling path left behind by a removed place
        return PathState(hidden=True)

    state = PathState(
        visited=first.visited and second.visited,
        reachable=first.visited != second.visited,
        waygone=first.waygone or second.waygone,
    )
    if store.hidepaths or path.hidepath:
        state.hidden = True
    elif not store.showall:
        state.hidden = not (first.visited or second.visited) or (
            state.waygone and not store.showwaygone
        )
    return state
