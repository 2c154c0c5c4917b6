"""Adjacency graph of hotel rooms."""

from collections import deque

from src.models.room import RoomTypeCatalog


class RoomGraph:
    """
    Undirected adjacency list over room numbers.

    The graph is structural: it describes the building, not the day's
    bookings, so it is never reset when the active date changes.
    """

    def __init__(self):
        self._adjacency: dict[int, list[int]] = {}

    def __contains__(self, room_number: int) -> bool:
        return room_number in self._adjacency

    def add_edge(self, room_a: int, room_b: int) -> None:
        self._adjacency.setdefault(room_a, []).append(room_b)
        self._adjacency.setdefault(room_b, []).append(room_a)

    def neighbors(self, room_number: int) -> list[int]:
        return list(self._adjacency.get(room_number, []))

    def bfs(self, start_room: int) -> list[int] | None:
        """
        Breadth-first walk from a room.

        Returns:
            Rooms in visit order, or None if the room is not in the graph
        """
        if start_room not in self._adjacency:
            return None

        visited = {start_room}
        order: list[int] = []
        queue = deque([start_room])

        while queue:
            room = queue.popleft()
            order.append(room)
            for neighbor in self._adjacency[room]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)

        return order


def build_room_graph(catalog: RoomTypeCatalog) -> RoomGraph:
    """Link consecutive room numbers within each room type."""
    graph = RoomGraph()
    for room_type in catalog:
        numbers = sorted(room_type.room_numbers)
        for a, b in zip(numbers, numbers[1:]):
            graph.add_edge(a, b)
    return graph
