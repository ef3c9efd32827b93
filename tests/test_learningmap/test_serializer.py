"""Tests for loading and saving placestore documents."""

import json

from src.learningmap.placestore import PlaceStore, SCHEMA_VERSION
from src.learningmap.serializer import build_json, decode_placestore, load_json


class TestBuildJson:
    def test_contains_all_fields(self, chain_store):
        document = json.loads(build_json(chain_store))
        for key in (
            "id", "places", "paths", "startingplaces", "targetplaces",
            "placecolor", "strokecolor", "strokeopacity", "textcolor",
            "visitedcolor", "height", "width", "hidepaths", "mapid",
            "usecheckmark", "editmode", "version", "pulse", "hover",
            "showall", "showtext", "slicemode", "showwaygone", "placesize",
        ):
            assert key in document

    def test_place_keys(self, chain_store):
        document = json.loads(chain_store.build_json())
        assert document["places"][0] == {
            "id": 0,
            "linkId": "a0",
            "linkedActivity": 11,
            "placecolor": None,
            "visitedcolor": None,
            "bbox": {},
        }
        assert document["id"] == 3


class TestRoundTrip:
    def test_load_of_build_is_identity(self, chain_store):
        """Loading a saved store into a fresh one reproduces it."""
        chain_store.add_target_place(2)
        chain_store.set_slice_mode(True)
        chain_store.paths[0].strokecolor = "#000000ff"

        restored = PlaceStore()
        assert restored.load_json(chain_store.build_json())

        assert restored.to_dict() == chain_store.to_dict()
        assert restored.places == chain_store.places
        assert restored.paths == chain_store.paths


class TestLoadJson:
    def test_textcolor_filled_from_strokecolor(self):
        """Documents without a text color take it from the stroke color."""
        store = PlaceStore()
        load_json(store, json.dumps({"strokecolor": "#123456ff"}))
        assert store.textcolor == "#123456ff"

    def test_textcolor_null_filled_from_strokecolor(self):
        store = PlaceStore()
        store.load_json(json.dumps({"strokecolor": "#123456ff", "textcolor": None, "version": 2023010100}))
        assert store.textcolor == "#123456ff"

    def test_textcolor_null_filled_in_current_version(self):
        store = PlaceStore()
        load_json(store, json.dumps({"version": SCHEMA_VERSION, "strokecolor": "#123456ff", "textcolor": None}))
        assert store.textcolor == "#123456ff"

    def test_textcolor_absent_filled_in_current_version(self):
        store = PlaceStore()
        load_json(store, json.dumps({"version": SCHEMA_VERSION, "strokecolor": "#123456ff"}))
        assert store.textcolor == "#123456ff"

    def test_existing_textcolor_is_kept(self):
        store = PlaceStore()
        store.load_json(json.dumps({"strokecolor": "#123456ff", "textcolor": "#abcdefff"}))
        assert store.textcolor == "#abcdefff"

    def test_missing_fields_keep_values(self, chain_store):
        chain_store.load_json(json.dumps({"showall": True}))
        assert chain_store.showall is True
        assert len(chain_store.places) == 3
        assert chain_store.mapid == "42"

    def test_fields_replace_not_merge(self, chain_store):
        chain_store.load_json(json.dumps({"places": []}))
        assert chain_store.places == []
        # Paths were not in the document
        assert len(chain_store.paths) == 2

    def test_unknown_fields_ignored(self, empty_store):
        assert empty_store.load_json(json.dumps({"colour": "red", "width": 640}))
        assert empty_store.width == 640
        assert not hasattr(empty_store, "colour")

    def test_invalid_json_leaves_state_unchanged(self, chain_store):
        before = chain_store.to_dict()
        assert chain_store.load_json("{not json") is False
        assert chain_store.to_dict() == before

    def test_version_is_stamped_on_failure(self, chain_store):
        chain_store.version = 1
        chain_store.load_json("garbage")
        assert chain_store.version == SCHEMA_VERSION

    def test_version_is_stamped_on_success(self, empty_store):
        empty_store.load_json(json.dumps({"version": 2022010100, "width": 300}))
        assert empty_store.version == SCHEMA_VERSION

    def test_wrong_field_type_rejects_document(self, chain_store):
        before = chain_store.to_dict()
        assert chain_store.load_json(json.dumps({"width": 640, "showall": "yes"})) is False
        assert chain_store.to_dict() == before

    def test_numeric_mapid_becomes_string(self, empty_store):
        empty_store.load_json(json.dumps({"mapid": 42}))
        assert empty_store.mapid == "42"


class TestDecodePlacestore:
    def test_non_object_document(self):
        result = decode_placestore("[1, 2, 3]")
        assert not result.ok
        assert "object" in result.error

    def test_only_present_fields_returned(self):
        result = decode_placestore(json.dumps({"hover": True, "version": SCHEMA_VERSION}))
        assert result.ok
        assert result.fields == {"hover": True}
        assert result.version == SCHEMA_VERSION

    def test_invalid_path_rejected(self):
        result = decode_placestore(json.dumps({"paths": [{"id": 0, "fid": "a", "sid": 1}]}))
        assert not result.ok
        assert "fid" in result.error

    def test_places_decoded(self):
        result = decode_placestore(json.dumps({"places": [{"id": 4, "linkId": "a4"}]}))
        place = result.fields["places"][0]
        assert place.id == 4
        assert place.linkId == "a4"
        assert place.bbox == {}
