"""Versioned JSON encoding of a PlaceStore."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from src.learningmap.placestore import SCHEMA_VERSION, Path, Place, PlaceStore

logger = logging.getLogger(__name__)

BOOL_FIELDS = (
    "hidepaths",
    "usecheckmark",
    "editmode",
    "pulse",
    "hover",
    "showall",
    "showtext",
    "slicemode",
    "showwaygone",
)
COLOR_FIELDS = ("placecolor", "strokecolor", "textcolor", "visitedcolor")
NUMBER_FIELDS = ("id", "strokeopacity", "height", "width", "placesize")
ID_LIST_FIELDS = ("startingplaces", "targetplaces")


class DecodeError(ValueError):
    """Raised when a persisted document does not match the schema."""


@dataclass
class DecodeResult:
    """Outcome of decoding a persisted document: either fields or an error."""

    fields: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    version: int | None = None  # schema version found in the document

    @property
    def ok(self) -> bool:
        return self.error is None


def build_json(store: PlaceStore) -> str:
    """Return the canonical JSON document for a store."""
    return json.dumps(store.to_dict())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _decode_place(raw: Any) -> Place:
    if not isinstance(raw, dict):
        raise DecodeError(f"Place must be an object, got {type(raw).__name__}")
    if not _is_number(raw.get("id")):
        raise DecodeError(f"Place without numeric id: {raw!r}")
    bbox = raw.get("bbox") or {}
    if not isinstance(bbox, dict):
        raise DecodeError(f"Place {raw['id']} has invalid bbox")
    return Place(
        id=raw["id"],
        linkId=raw.get("linkId", ""),
        linkedActivity=raw.get("linkedActivity"),
        placecolor=raw.get("placecolor"),
        visitedcolor=raw.get("visitedcolor"),
        bbox=bbox,
    )


def _decode_path(raw: Any) -> Path:
    if not isinstance(raw, dict):
        raise DecodeError(f"Path must be an object, got {type(raw).__name__}")
    for key in ("id", "fid", "sid"):
        if not _is_number(raw.get(key)):
            raise DecodeError(f"Path field '{key}' must be a number: {raw!r}")
    hidepath = raw.get("hidepath")
    if hidepath is not None and not isinstance(hidepath, bool):
        raise DecodeError(f"Path {raw['id']} has non-boolean hidepath")
    return Path(
        id=raw["id"],
        fid=raw["fid"],
        sid=raw["sid"],
        strokecolor=raw.get("strokecolor"),
        strokedasharray=raw.get("strokedasharray"),
        hidepath=hidepath,
    )


def _decode_list(name: str, value: Any, decode_item: Callable[[Any], Any]) -> list:
    if not isinstance(value, list):
        raise DecodeError(f"Field '{name}' must be a list")
    return [decode_item(item) for item in value]


def _decode_id(value: Any) -> Any:
    if not _is_number(value):
        raise DecodeError(f"Place id must be a number, got {value!r}")
    return value


def _fill_textcolor(document: dict[str, Any]) -> None:
    """Documents without a text color reuse the stroke color, whatever their version."""
    if document.get("textcolor") is None and document.get("strokecolor") is not None:
        document["textcolor"] = document["strokecolor"]


def decode_placestore(text: str) -> DecodeResult:
    """
    Decode a persisted document into validated store fields.

    Only fields present in the document are returned; unknown fields are
    ignored. A missing or null text color is taken from the stroke color.

    Args:
        text: JSON text as produced by ``build_json``

    Returns:
        DecodeResult with ``fields`` on success, ``error`` otherwise
    """
    try:
        document = json.loads(text)
    except (TypeError, ValueError) as e:
        return DecodeResult(error=f"Invalid JSON: {e}")
    if not isinstance(document, dict):
        return DecodeResult(error="Document must be a JSON object")

    version = document.get("version")
    if version is not None and not _is_number(version):
        return DecodeResult(error=f"Invalid version: {version!r}")
    _fill_textcolor(document)

    fields: dict[str, Any] = {}
    try:
        for name, value in document.items():
            if name == "places":
                fields[name] = _decode_list(name, value, _decode_place)
            elif name == "paths":
                fields[name] = _decode_list(name, value, _decode_path)
            elif name in ID_LIST_FIELDS:
                fields[name] = _decode_list(name, value, _decode_id)
            elif name in BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise DecodeError(f"Field '{name}' must be a boolean")
                fields[name] = value
            elif name in NUMBER_FIELDS:
                if not _is_number(value):
                    raise DecodeError(f"Field '{name}' must be a number")
                fields[name] = value
            elif name in COLOR_FIELDS:
                if value is None:
                    continue
                if not isinstance(value, str):
                    raise DecodeError(f"Field '{name}' must be a color string")
                fields[name] = value
            elif name == "mapid":
                if not isinstance(value, (str, int)) or isinstance(value, bool):
                    raise DecodeError("Field 'mapid' must be a string")
                fields[name] = str(value)
    except DecodeError as e:
        return DecodeResult(error=str(e), version=version)

    return DecodeResult(fields=fields, version=version)


def load_json(store: PlaceStore, text: str) -> bool:
    """
    Load a persisted document into an existing store.

    Fields present in the document replace the store's values; absent
    fields keep their current values. An invalid document leaves the store
    untouched. The version is always stamped to the current schema.

    Returns:
        True if the document was applied
    """
    result = decode_placestore(text)
    if result.ok:
        for name, value in result.fields.items():
            setattr(store, name, value)
    else:
        logger.warning(f"Ignoring invalid learning map document: {result.error}")
    store.version = SCHEMA_VERSION
    return result.ok
