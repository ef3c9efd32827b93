"""Tests for loading maps from disk."""

import pytest

from src.learningmap.loader import load_map


class TestLoadMap:
    def test_loads_store_and_svg(self, tmp_path, chain_store, sample_svg):
        store_path = tmp_path / "map.json"
        svg_path = tmp_path / "map.svg"
        store_path.write_text(chain_store.build_json(), encoding="utf-8")
        svg_path.write_text(sample_svg, encoding="utf-8")

        map_data = load_map(str(store_path), str(svg_path))

        assert map_data.placestore.to_dict() == chain_store.to_dict()
        assert map_data.svgcode == sample_svg

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_map(str(tmp_path / "missing.json"), str(tmp_path / "missing.svg"))

    def test_invalid_document(self, tmp_path, sample_svg):
        store_path = tmp_path / "map.json"
        svg_path = tmp_path / "map.svg"
        store_path.write_text("{broken", encoding="utf-8")
        svg_path.write_text(sample_svg, encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to parse placestore"):
            load_map(str(store_path), str(svg_path))
