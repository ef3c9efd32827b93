"""Apply a learner's progress to the SVG of a learning map."""

import logging
from typing import Any, Iterable

from src.learningmap.placestore import Path, Place, PlaceStore, path_element_id, place_element_id
from src.learningmap.progress import Classification, PathState, PlaceState, classify
from src.learningmap.svgmap import SvgMap

logger = logging.getLogger(__name__)


class MapWorker:
    """
    Renders one learning map for one learner.

    Builds the SVG document, classifies the map for the visited places and
    drives the document mutations. Running ``process_map_objects`` again on
    the same worker produces the same markup.
    """

    def __init__(
        self,
        svgcode: str,
        placestore: PlaceStore,
        visited: Iterable[int] = (),
        activity_urls: dict[Any, str] | None = None,
        names: dict[Any, str] | None = None,
        visited_title_suffix: str = "",
    ):
        """
        Args:
            svgcode: SVG markup of the map
            placestore: Graph and display configuration of the map
            visited: Ids of visited places in visiting order
            activity_urls: Link target per linked activity
            names: Label per linked activity, used when text display is on
            visited_title_suffix: Appended to the tooltip of visited places
        """
        self.placestore = placestore
        self.svgmap = SvgMap(svgcode, placestore)
        self.visited = list(visited)
        self.activity_urls = activity_urls or {}
        self.names = names or {}
        self.visited_title_suffix = visited_title_suffix
        self.classification: Classification | None = None

    def process_map_objects(self) -> Classification:
        """Classify the map and update every place and path element."""
        self.svgmap.fix_svg()
        classification = classify(self.placestore, self.visited)

        for place in self.placestore.places:
            self._process_place(place, classification.places[place.id])
        for path in self.placestore.paths:
            self._process_path(path, classification.paths[path.id])

        self.classification = classification
        logger.info(
            f"Processed map '{self.placestore.mapid}': "
            f"{len(classification.ids_where('visited'))} visited, "
            f"{len(classification.ids_where('reachable'))} reachable, "
            f"{len(classification.ids_where('hidden'))} hidden"
        )
        return classification

    def _process_place(self, place: Place, state: PlaceState) -> None:
        element_id = place_element_id(place.id)
        text_id = f"text{element_id}"
        svgmap = self.svgmap

        svgmap.clear_state(element_id)
        svgmap.clear_state(text_id)

        color = place.visitedcolor if state.visited and place.visitedcolor else place.placecolor
        if color:
            svgmap.set_attribute(element_id, "fill", color)

        if state.hidden:
            svgmap.set_hidden(element_id)
            svgmap.set_hidden(text_id)
        if state.reachable:
            svgmap.set_reachable(element_id)
        if state.visited:
            svgmap.set_visited(element_id)
        if state.waygone:
            svgmap.set_waygone(element_id)
            svgmap.set_waygone(text_id)

        if state.visited and self.placestore.usecheckmark:
            svgmap.add_checkmark(element_id)
        else:
            svgmap.remove_element(f"checkmark{element_id}")

        url = self.activity_urls.get(place.linkedActivity)
        if url and not state.hidden:
            svgmap.set_link(place.linkId, url)
        else:
            svgmap.remove_link(place.linkId)

        name = self.names.get(place.linkedActivity)
        if self.placestore.showtext and name:
            extra = self.visited_title_suffix if state.visited else ""
            svgmap.update_text_and_title(element_id, name, extra)

    def _process_path(self, path: Path, state: PathState) -> None:
        element_id = path_element_id(path)
        svgmap = self.svgmap

        svgmap.clear_state(element_id)
        if path.strokecolor:
            svgmap.set_attribute(element_id, "stroke", path.strokecolor)
        if path.strokedasharray:
            svgmap.set_attribute(element_id, "stroke-dasharray", path.strokedasharray)

        if state.hidden:
            svgmap.set_hidden(element_id)
        if state.reachable:
            svgmap.set_reachable(element_id)
        if state.visited:
            svgmap.set_visited(element_id)
        if state.waygone:
            svgmap.set_waygone(element_id)

    def get_svgcode(self) -> str:
        return self.svgmap.get_svgcode()


def render_map(
    svgcode: str,
    placestore: PlaceStore,
    visited: Iterable[int] = (),
    activity_urls: dict[Any, str] | None = None,
    names: dict[Any, str] | None = None,
) -> str:
    """Return the markup of a map with the learner's progress applied."""
    worker = MapWorker(svgcode, placestore, visited, activity_urls=activity_urls, names=names)
    worker.process_map_objects()
    return worker.get_svgcode()
