"""Learning Map - progress maps of places and paths rendered as SVG."""

from src.learningmap.mapworker import MapWorker, render_map
from src.learningmap.placestore import Path, Place, PlaceStore
from src.learningmap.progress import Classification, classify
from src.learningmap.serializer import build_json, decode_placestore, load_json
from src.learningmap.svgmap import SvgMap, escape_content

__all__ = [
    "MapWorker",
    "render_map",
    "Path",
    "Place",
    "PlaceStore",
    "Classification",
    "classify",
    "build_json",
    "decode_placestore",
    "load_json",
    "SvgMap",
    "escape_content",
]
