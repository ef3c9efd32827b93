"""
Shared pytest fixtures for learningmap tests.

This module provides reusable fixtures that are automatically discovered
by pytest. Fixtures here are available to all test files.

Educational notes for new developers:
- Fixtures are functions that provide test data or set up test state
- @pytest.fixture decorator marks a function as a fixture
- Each test gets a fresh fixture value (function scope), so tests can
  mutate a PlaceStore without affecting each other
"""

import pytest

from src.learningmap.placestore import PlaceStore

SAMPLE_SVG = """<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="800" height="600">
<g id="backgroundGroup"><rect x="0" y="0" width="800" height="600" /></g>
<g id="pathsGroup">
<path id="p0_1" d="M 100 100 Q 150 50, 200 100" />
<path id="p1_2" d="M 200 100 Q 250 150, 300 100" />
</g>
<g id="placesGroup">
<a id="a0"><circle id="p0" class="learningmap-place" cx="100" cy="100" r="10"><title id="titlep0"></title></circle></a>
<a id="a1"><circle id="p1" class="learningmap-place" cx="200" cy="100" r="10"><title id="titlep1"></title></circle></a>
<a id="a2"><circle id="p2" class="learningmap-place" cx="300" cy="100" r="10"><title id="titlep2"></title></circle></a>
</g>
<g id="textGroup">
<text id="textp0" class="learningmap-text" x="100" y="80"></text>
<text id="textp1" class="learningmap-text" x="200" y="80"></text>
<text id="textp2" class="learningmap-text" x="300" y="80"></text>
</g>
</svg>"""


@pytest.fixture
def empty_store() -> PlaceStore:
    """A fresh store without places."""
    return PlaceStore(mapid="42")


@pytest.fixture
def chain_store() -> PlaceStore:
    """
    Three places in a row: p0 - p1 - p2.

    Place 0 is the starting place (first one added). Places are linked to
    activities 11, 12 and 13; paths have ids 0 (p0-p1) and 1 (p1-p2).
    """
    store = PlaceStore(mapid="42")
    for activity in (11, 12, 13):
        place_id = store.get_id()
        store.add_place(place_id, f"a{place_id}", linked_activity=activity)
    store.add_path(0, 0, 1)
    store.add_path(1, 1, 2)
    return store


@pytest.fixture
def sample_svg() -> str:
    """SVG matching chain_store, with groups still lacking the map id suffix."""
    return SAMPLE_SVG


@pytest.fixture
def activity_urls() -> dict[int, str]:
    return {activity: f"/mod/view.php?id={activity}" for activity in (11, 12, 13)}
