"""Binary search tree over occupied room numbers."""

from collections.abc import Iterator


class _Node:
    __slots__ = ("room_number", "left", "right")

    def __init__(self, room_number: int):
        self.room_number = room_number
        self.left: "_Node | None" = None
        self.right: "_Node | None" = None


class OccupancyTree:
    """
    Unbalanced BST keyed by room number.

    Inserting a key that is already present and removing a key that is
    absent are both no-ops. In-order traversal yields ascending numbers.
    """

    def __init__(self):
        self._root: _Node | None = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __contains__(self, room_number: int) -> bool:
        node = self._root
        while node is not None:
            if room_number == node.room_number:
                return True
            node = node.left if room_number < node.room_number else node.right
        return False

    def __iter__(self) -> Iterator[int]:
        return iter(self.in_order())

    def insert(self, room_number: int) -> None:
        self._root = self._insert(self._root, room_number)

    def remove(self, room_number: int) -> None:
        self._root = self._remove(self._root, room_number)

    def in_order(self) -> list[int]:
        """Occupied room numbers in ascending order."""
        result: list[int] = []
        stack: list[_Node] = []
        node = self._root

        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            result.append(node.room_number)
            node = node.right

        return result

    def _insert(self, node: _Node | None, room_number: int) -> _Node:
        if node is None:
            self._size += 1
            return _Node(room_number)
        if room_number < node.room_number:
            node.left = self._insert(node.left, room_number)
        elif room_number > node.room_number:
            node.right = self._insert(node.right, room_number)
        return node

    def _remove(self, node: _Node | None, room_number: int) -> _Node | None:
        if node is None:
            return None

        if room_number < node.room_number:
            node.left = self._remove(node.left, room_number)
        elif room_number > node.room_number:
            node.right = self._remove(node.right, room_number)
        elif node.left is None:
            self._size -= 1
            return node.right
        elif node.right is None:
            self._size -= 1
            return node.left
        else:
            # Two children: promote the in-order successor
            successor = node.right
            while successor.left is not None:
                successor = successor.left
            node.room_number = successor.room_number
            node.right = self._remove(node.right, successor.room_number)

        return node
