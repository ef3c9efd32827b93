"""Load learning maps (placestore document and SVG) from disk."""

import logging
import os
from dataclasses import dataclass

from src.learningmap.placestore import PlaceStore
from src.learningmap.serializer import decode_placestore

logger = logging.getLogger(__name__)


@dataclass
class MapData:
    """Container for a loaded learning map."""

    placestore: PlaceStore
    svgcode: str


def load_map(placestore_path: str, svg_path: str) -> MapData:
    """
    Load a learning map from disk.

    Args:
        placestore_path: Path to the JSON document written by ``build_json``
        svg_path: Path to the SVG markup of the map

    Returns:
        MapData with the decoded store and the raw SVG

    Raises:
        FileNotFoundError: If one of the files doesn't exist
        ValueError: If the placestore document is invalid
    """
    for path in (placestore_path, svg_path):
        if not os.path.exists(path):
            raise FileNotFoundError(f"File not found: {path}")

    with open(placestore_path, encoding="utf-8") as placestore_file:
        text = placestore_file.read()

    # Decode first so a broken document is reported instead of silently ignored
    result = decode_placestore(text)
    if not result.ok:
        raise ValueError(f"Failed to parse placestore {placestore_path}: {result.error}")

    placestore = PlaceStore()
    placestore.load_json(text)

    with open(svg_path, encoding="utf-8") as svg_file:
        svgcode = svg_file.read()

    logger.info(
        f"Loaded map '{placestore.mapid}': {len(placestore.places)} places, "
        f"{len(placestore.paths)} paths"
    )
    return MapData(placestore=placestore, svgcode=svgcode)
