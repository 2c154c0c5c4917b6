"""Guest name lookup and chronological guest history."""


class GuestIndex:
    """
    Maps guest names to the rooms they hold and records booking order.

    A guest may hold several rooms, and the same room may appear twice for
    a guest across separate bookings. Removal always takes the most recent
    occurrence so undo reverses exactly the booking it belongs to.
    """

    def __init__(self):
        self._rooms: dict[str, list[int]] = {}
        self._history: list[str] = []

    def record_booking(self, guest_name: str, room_number: int) -> None:
        self._rooms.setdefault(guest_name, []).append(room_number)
        self._history.append(guest_name)

    def remove_last_booking(self, guest_name: str, room_number: int) -> bool:
        """
        Remove the most recent (guest, room) booking.

        Returns:
            True if both the room entry and a history entry were removed
        """
        removed_room = False
        rooms = self._rooms.get(guest_name)
        if rooms:
            for i in range(len(rooms) - 1, -1, -1):
                if rooms[i] == room_number:
                    del rooms[i]
                    removed_room = True
                    break
            if not rooms:
                del self._rooms[guest_name]

        removed_history = False
        for i in range(len(self._history) - 1, -1, -1):
            if self._history[i] == guest_name:
                del self._history[i]
                removed_history = True
                break

        return removed_room and removed_history

    def lookup(self, guest_name: str) -> list[int]:
        """Rooms held by a guest, in booking order (empty if none)."""
        return list(self._rooms.get(guest_name, []))

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def guests(self) -> list[str]:
        return list(self._rooms)
