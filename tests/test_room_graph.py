"""Tests for the room adjacency graph."""

import pytest

from src.models.room import create_default_catalog
from src.services.room_graph import RoomGraph, build_room_graph


@pytest.fixture
def hotel_graph():
    return build_room_graph(create_default_catalog())


class TestRoomGraph:
    """Tests for RoomGraph."""

    def test_bfs_visits_in_breadth_order(self):
        graph = RoomGraph()
        graph.add_edge(1, 2)
        graph.add_edge(1, 3)
        graph.add_edge(2, 4)
        graph.add_edge(3, 4)

        assert graph.bfs(1) == [1, 2, 3, 4]

    def test_bfs_unknown_room(self):
        graph = RoomGraph()
        graph.add_edge(1, 2)
        assert graph.bfs(99) is None

    def test_edges_are_undirected(self):
        graph = RoomGraph()
        graph.add_edge(5, 6)
        assert graph.neighbors(5) == [6]
        assert graph.neighbors(6) == [5]
        assert graph.neighbors(7) == []

    def test_cycle_terminates(self):
        graph = RoomGraph()
        graph.add_edge(1, 2)
        graph.add_edge(2, 3)
        graph.add_edge(3, 1)
        assert sorted(graph.bfs(2)) == [1, 2, 3]


class TestHotelGraph:
    """Tests for the graph built from the default hotel."""

    def test_penthouse_pair(self, hotel_graph):
        assert hotel_graph.bfs(301) == [301, 302]

    def test_walk_stays_within_room_type(self, hotel_graph):
        order = hotel_graph.bfs(240)
        assert sorted(order) == list(range(236, 251))
        assert order[:3] == [240, 239, 241]

    def test_scenic_and_deluxe_are_not_linked(self, hotel_graph):
        assert 236 not in hotel_graph.bfs(235)

    def test_every_room_is_a_node(self, hotel_graph):
        for room_type in create_default_catalog():
            for number in room_type.room_numbers:
                assert number in hotel_graph

    def test_unknown_room(self, hotel_graph):
        assert hotel_graph.bfs(999) is None
