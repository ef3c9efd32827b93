"""In-memory graph of places and paths plus global map configuration."""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Current schema version written into every saved document
SCHEMA_VERSION = 2024072201

# Default colors (hex with alpha)
DEFAULT_PLACE_COLOR = "#c01c28ff"
DEFAULT_STROKE_COLOR = "#ffffffff"
DEFAULT_TEXT_COLOR = "#ffffffff"
DEFAULT_VISITED_COLOR = "#26a269ff"


@dataclass
class Place:
    """A node of the map, rendered as a shape wrapped in a link element."""

    id: int
    linkId: str
    linkedActivity: Any = None  # external activity reference (e.g. course module id)
    placecolor: str | None = None
    visitedcolor: str | None = None
    bbox: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Path:
    """An edge between two places."""

    id: int
    fid: int
    sid: int
    strokecolor: str | None = None
    strokedasharray: str | None = None
    hidepath: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def place_element_id(place_id: int) -> str:
    """SVG id of the shape representing a place (e.g. ``p3``)."""
    return f"p{place_id}"


def path_element_id(path: Path) -> str:
    """SVG id of the curve representing a path (e.g. ``p0_1``)."""
    return f"p{path.fid}_{path.sid}"


class PlaceStore:
    """
    Graph of places and paths for one learning map.

    Each instance owns its own state; create one per editing session or
    render request. Places keep insertion order. The id counter only grows,
    so ids are never reused after a removal.
    """

    def __init__(self, mapid: str = ""):
        self.version: int = SCHEMA_VERSION
        self.id: int = 0
        self.places: list[Place] = []
        self.paths: list[Path] = []
        self.startingplaces: list[int] = []
        self.targetplaces: list[int] = []
        self.placecolor: str = DEFAULT_PLACE_COLOR
        self.strokecolor: str = DEFAULT_STROKE_COLOR
        self.strokeopacity: float = 1
        self.textcolor: str = DEFAULT_TEXT_COLOR
        self.visitedcolor: str = DEFAULT_VISITED_COLOR
        self.height: int = 100
        self.width: int = 800
        self.hidepaths: bool = False
        self.mapid: str = mapid
        self.usecheckmark: bool = False
        self.editmode: bool = True
        self.pulse: bool = False
        self.hover: bool = False
        self.showall: bool = False
        self.showtext: bool = False
        self.slicemode: bool = False
        self.showwaygone: bool = False
        self.placesize: float = 10

    # Places

    def add_place(
        self,
        id: int,
        link_id: str,
        linked_activity: Any = None,
        bbox: dict[str, Any] | None = None,
    ) -> Place:
        """
        Append a place. The first place added becomes the starting place.

        Args:
            id: Fresh place id, usually ``get_id()``. Uniqueness is not checked.
            link_id: Id of the SVG link element wrapping the place
            linked_activity: Optional external activity reference
            bbox: Optional bounding box of the place including its text

        Returns:
            The new Place
        """
        place = Place(id=id, linkId=link_id, linkedActivity=linked_activity, bbox=bbox or {})
        self.places.append(place)
        if len(self.places) == 1:
            self.add_starting_place(id)
        self.id += 1
        return place

    def remove_place(self, id: int, strict: bool = False) -> None:
        """
        Remove a place and its starting/target registrations.

        Paths touching the place are kept unless ``strict`` is set.
        """
        self.remove_starting_place(id)
        self.remove_target_place(id)
        self.places = [p for p in self.places if p.id != id]
        if strict:
            for path in self.get_touching_paths(id):
                self.remove_path(path.id)
        elif self.get_touching_paths(id):
            logger.debug(f"Place {id} removed, touching paths left dangling")

    def get_place(self, id: int) -> Place | None:
        for place in self.places:
            if place.id == id:
                return place
        return None

    def get_places(self) -> list[Place]:
        return self.places

    def get_activity_id(self, id: int) -> Any:
        """Return the activity linked to a place, or None for unknown ids."""
        place = self.get_place(id)
        return place.linkedActivity if place else None

    def set_activity_id(self, id: int, linked_activity: Any) -> None:
        place = self.get_place(id)
        if place:
            place.linkedActivity = linked_activity

    def get_all_activities(self) -> list[Any]:
        """Return the activities of all places that have one linked."""
        return [p.linkedActivity for p in self.places if p.linkedActivity]

    def get_id(self) -> int:
        """Return the next place id (not the number of places)."""
        return self.id

    # Starting and target places

    def add_starting_place(self, id: int) -> None:
        self.startingplaces.append(id)

    def remove_starting_place(self, id: int) -> None:
        self.startingplaces = [e for e in self.startingplaces if e != id]

    def is_starting_place(self, id: int) -> bool:
        return id in self.startingplaces

    def add_target_place(self, id: int) -> None:
        self.targetplaces.append(id)

    def remove_target_place(self, id: int) -> None:
        self.targetplaces = [e for e in self.targetplaces if e != id]

    def is_target_place(self, id: int) -> bool:
        return id in self.targetplaces

    # Paths

    def add_path(self, pid: int, fid: int, sid: int) -> Path:
        path = Path(id=pid, fid=fid, sid=sid)
        self.paths.append(path)
        return path

    def remove_path(self, id: int) -> None:
        self.paths = [p for p in self.paths if p.id != id]

    def get_path(self, id: int) -> Path | None:
        for path in self.paths:
            if path.id == id:
                return path
        return None

    def get_touching_paths(self, id: int) -> list[Path]:
        """Return all paths with the place at either end."""
        return [p for p in self.paths if p.fid == id or p.sid == id]

    def get_paths_with_fid(self, id: int) -> list[Path]:
        return [p for p in self.paths if p.fid == id]

    def get_paths_with_sid(self, id: int) -> list[Path]:
        return [p for p in self.paths if p.sid == id]

    # Display configuration

    def set_background_dimensions(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def get_mapid(self) -> str:
        return self.mapid

    def set_mapid(self, mapid: str) -> None:
        self.mapid = mapid

    def get_place_color(self) -> str:
        return self.placecolor

    def set_place_color(self, color: str) -> None:
        self.placecolor = color

    def get_visited_color(self) -> str:
        return self.visitedcolor

    def set_visited_color(self, color: str) -> None:
        self.visitedcolor = color

    def get_stroke_color(self) -> str:
        return self.strokecolor

    def set_stroke_color(self, color: str) -> None:
        self.strokecolor = color

    def get_text_color(self) -> str:
        return self.textcolor

    def set_text_color(self, color: str) -> None:
        self.textcolor = color

    def get_stroke_opacity(self) -> float:
        return self.strokeopacity

    def set_stroke_opacity(self, value: float) -> None:
        self.strokeopacity = value

    def get_hide_stroke(self) -> bool:
        return self.strokeopacity < 1

    def set_hide_stroke(self, value: bool) -> None:
        self.strokeopacity = 0 if value else 1

    def get_hide_paths(self) -> bool:
        return self.hidepaths

    def set_hide_paths(self, value: bool) -> None:
        self.hidepaths = value

    def get_use_checkmark(self) -> bool:
        return self.usecheckmark

    def set_use_checkmark(self, value: bool) -> None:
        self.usecheckmark = value

    def get_edit_mode(self) -> bool:
        return self.editmode

    def set_edit_mode(self, value: bool) -> None:
        self.editmode = value

    def get_pulse(self) -> bool:
        return self.pulse

    def set_pulse(self, value: bool) -> None:
        self.pulse = value

    def get_hover(self) -> bool:
        return self.hover

    def set_hover(self, value: bool) -> None:
        self.hover = value

    def get_showall(self) -> bool:
        return self.showall

    def set_showall(self, value: bool) -> None:
        self.showall = value

    def get_show_text(self) -> bool:
        return self.showtext

    def set_show_text(self, value: bool) -> None:
        self.showtext = value

    def get_slice_mode(self) -> bool:
        return self.slicemode

    def set_slice_mode(self, value: bool) -> None:
        self.slicemode = value

    def get_show_waygone(self) -> bool:
        return self.showwaygone

    def set_show_waygone(self, value: bool) -> None:
        self.showwaygone = value

    def get_place_size(self) -> float:
        return self.placesize

    def set_place_size(self, value: float) -> None:
        """Set the place radius; non-positive values are ignored."""
        if value > 0:
            self.placesize = value

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Return every persisted field as a plain data document."""
        return {
            "id": self.id,
            "places": [p.to_dict() for p in self.places],
            "paths": [p.to_dict() for p in self.paths],
            "startingplaces": list(self.startingplaces),
            "targetplaces": list(self.targetplaces),
            "placecolor": self.placecolor,
            "strokecolor": self.strokecolor,
            "strokeopacity": self.strokeopacity,
            "textcolor": self.textcolor,
            "visitedcolor": self.visitedcolor,
            "height": self.height,
            "width": self.width,
            "hidepaths": self.hidepaths,
            "mapid": self.mapid,
            "usecheckmark": self.usecheckmark,
            "editmode": self.editmode,
            "version": self.version,
            "pulse": self.pulse,
            "hover": self.hover,
            "showall": self.showall,
            "showtext": self.showtext,
            "slicemode": self.slicemode,
            "showwaygone": self.showwaygone,
            "placesize": self.placesize,
        }

    def build_json(self) -> str:
        from src.learningmap.serializer import build_json

        return build_json(self)

    def load_json(self, text: str) -> bool:
        from src.learningmap.serializer import load_json

        return load_json(self, text)
