"""Tests for classifying places and paths (pure functions)."""

from src.learningmap.progress import classify


class TestPlaceStates:
    """Visited / reachable / hidden rules."""

    def test_no_visits_only_starting_place_reachable(self, chain_store):
        result = classify(chain_store, [])
        assert result.places[0].reachable
        assert not result.places[0].hidden
        assert result.places[1].hidden
        assert result.places[2].hidden

    def test_neighbour_of_visited_place_is_reachable(self, chain_store):
        result = classify(chain_store, [0])
        assert result.places[0].visited
        assert not result.places[0].reachable
        assert result.places[1].reachable
        assert not result.places[1].hidden

    def test_visited_starting_place_is_only_visited(self, chain_store):
        """Reachable means not yet visited, starting places included."""
        result = classify(chain_store, [0])
        assert chain_store.is_starting_place(0)
        assert result.places[0].visited
        assert not result.places[0].reachable
        assert not result.places[0].hidden

    def test_reachability_is_not_transitive(self, chain_store):
        """A place two steps away stays hidden."""
        result = classify(chain_store, [0])
        assert result.places[2].hidden
        assert not result.places[2].reachable

    def test_paths_are_undirected(self, chain_store):
        """Visiting the end of a path unlocks its start."""
        chain_store.add_starting_place(2)
        result = classify(chain_store, [2])
        assert result.places[1].reachable

    def test_showall_hides_nothing(self, chain_store):
        chain_store.set_showall(True)
        result = classify(chain_store, [])
        assert not any(state.hidden for state in result.places.values())
        assert not any(state.hidden for state in result.paths.values())

    def test_unknown_visited_ids_are_ignored(self, chain_store):
        result = classify(chain_store, [42, 0])
        assert result.places[0].visited
        assert 42 not in result.places

    def test_ids_where(self, chain_store):
        result = classify(chain_store, [0])
        assert result.ids_where("visited") == [0]
        assert result.ids_where("reachable") == [1]
        assert result.ids_where("hidden") == [2]

    def test_target_places_do_not_change_states(self, chain_store):
        plain = classify(chain_store, [0])
        chain_store.add_target_place(2)
        assert classify(chain_store, [0]) == plain


class TestPathStates:
    def test_path_from_visited_place_is_reachable(self, chain_store):
        result = classify(chain_store, [0])
        assert result.paths[0].reachable
        assert not result.paths[0].hidden
        assert result.paths[1].hidden

    def test_path_between_visited_places_is_visited(self, chain_store):
        result = classify(chain_store, [0, 1])
        assert result.paths[0].visited
        assert not result.paths[0].reachable
        assert result.paths[1].reachable

    def test_hidepaths_hides_all_paths(self, chain_store):
        chain_store.set_hide_paths(True)
        chain_store.set_showall(True)
        result = classify(chain_store, [0, 1, 2])
        assert all(state.hidden for state in result.paths.values())

    def test_single_path_override(self, chain_store):
        chain_store.paths[0].hidepath = True
        result = classify(chain_store, [0, 1])
        assert result.paths[0].hidden
        assert not result.paths[1].hidden

    def test_dangling_path_is_hidden(self, chain_store):
        chain_store.remove_place(2)
        result = classify(chain_store, [0, 1])
        assert result.paths[1].hidden


class TestSliceMode:
    """Waygone classification."""

    def test_no_waygone_without_slicemode(self, chain_store):
        result = classify(chain_store, [0, 1, 2])
        assert not any(state.waygone for state in result.places.values())

    def test_superseded_place_is_waygone_and_hidden(self, chain_store):
        chain_store.set_slice_mode(True)
        result = classify(chain_store, [0, 1])

        assert result.places[0].waygone
        assert result.places[0].visited
        assert result.places[0].hidden
        assert not result.places[1].waygone
        assert result.paths[0].waygone
        assert result.paths[0].hidden

    def test_showwaygone_keeps_waygone_visible(self, chain_store):
        chain_store.set_slice_mode(True)
        chain_store.set_show_waygone(True)
        result = classify(chain_store, [0, 1])

        assert result.places[0].waygone
        assert not result.places[0].hidden
        assert result.paths[0].waygone
        assert not result.paths[0].hidden

    def test_latest_place_is_not_waygone(self, chain_store):
        """The place progress arrived at last stays visible."""
        chain_store.set_slice_mode(True)
        result = classify(chain_store, [0, 1, 2])

        assert result.places[0].waygone
        assert result.places[1].waygone
        assert not result.places[2].waygone
        assert not result.places[2].hidden

    def test_place_with_open_neighbour_is_not_waygone(self, chain_store):
        chain_store.set_slice_mode(True)
        result = classify(chain_store, [1])
        assert not result.places[1].waygone

    def test_junction(self, empty_store):
        """A hub stays until all its branches have been visited."""
        for place_id in range(4):
            empty_store.add_place(place_id, f"a{place_id}")
        for path_id, leaf in enumerate((1, 2, 3)):
            empty_store.add_path(path_id, 0, leaf)
        empty_store.set_slice_mode(True)

        partial = classify(empty_store, [0, 1])
        assert not partial.places[0].waygone

        complete = classify(empty_store, [0, 1, 2, 3])
        assert complete.places[0].waygone
        assert not complete.places[3].waygone
