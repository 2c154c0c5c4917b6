"""Per room type free/occupied bookkeeping."""

from bisect import bisect_left, insort
from dataclasses import dataclass
from decimal import Decimal

from src.models.room import RoomType, RoomTypeCatalog
from src.utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class LedgerError(Exception):
    """Base exception for ledger operations."""

    pass


class RoomTypeNotFoundError(LedgerError):
    """Selector or room number matches no configured room type."""

    pass


class RoomsExhaustedError(LedgerError):
    """No free room left for the requested type."""

    def __init__(self, room_type: str):
        super().__init__(f"No available rooms for {room_type}")
        self.room_type = room_type


class RoomAlreadyOccupiedError(LedgerError):
    """Attempt to occupy a room that is not free."""

    def __init__(self, room_number: int, guest_name: str | None = None):
        super().__init__(f"Room {room_number} is already occupied")
        self.room_number = room_number
        self.guest_name = guest_name


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class TypeAvailability:
    """Availability snapshot for one room type."""

    name: str
    available: int
    occupied: int
    total: int
    price_per_night: Decimal
    room_range: str


# =============================================================================
# Availability Index
# =============================================================================


class AvailabilityIndex:
    """
    Free and occupied room numbers for every room type.

    Every room number of the catalog is in exactly one of the two sets.
    Free rooms are kept in ascending order and handed out from the front,
    so allocation is deterministic and a released room goes back to the
    slot it came from.
    """

    def __init__(self, catalog: RoomTypeCatalog):
        self.catalog = catalog
        self._free: dict[str, list[int]] = {
            rt.name: sorted(rt.room_numbers) for rt in catalog
        }
        self._occupied: dict[str, dict[int, str]] = {rt.name: {} for rt in catalog}

    def find_room_type(self, room_number: int) -> RoomType | None:
        """Return the room type owning a room number, or None."""
        return self.catalog.find_by_number(room_number)

    def allocate(self, room_type: RoomType) -> int:
        """
        Pick the next free room of a type without reserving it.

        Args:
            room_type: Room type to allocate from

        Returns:
            Lowest free room number

        Raises:
            RoomsExhaustedError: If the type has no free room
        """
        free = self._free[room_type.name]
        if not free:
            raise RoomsExhaustedError(room_type.name)
        return free[0]

    def is_available(self, room_number: int) -> bool:
        room_type = self.find_room_type(room_number)
        if room_type is None:
            return False
        return room_number not in self._occupied[room_type.name]

    def guest_in(self, room_number: int) -> str | None:
        """Return the guest currently in a room, if any."""
        room_type = self.find_room_type(room_number)
        if room_type is None:
            return None
        return self._occupied[room_type.name].get(room_number)

    def commit_occupy(self, room_number: int, guest_name: str) -> RoomType:
        """
        Move a room from free to occupied.

        Raises:
            RoomTypeNotFoundError: If the number belongs to no room type
            RoomAlreadyOccupiedError: If the room is not free
        """
        room_type = self._require_type(room_number)
        occupied = self._occupied[room_type.name]

        if room_number in occupied:
            raise RoomAlreadyOccupiedError(room_number, occupied[room_number])

        free = self._free[room_type.name]
        free.pop(bisect_left(free, room_number))
        occupied[room_number] = guest_name

        return room_type

    def commit_release(self, room_number: int) -> bool:
        """
        Move a room from occupied back to free.

        Returns:
            False if the room was already free (nothing changed)

        Raises:
            RoomTypeNotFoundError: If the number belongs to no room type
        """
        room_type = self._require_type(room_number)
        occupied = self._occupied[room_type.name]

        if room_number not in occupied:
            logger.debug("release_of_free_room", room=room_number)
            return False

        del occupied[room_number]
        insort(self._free[room_type.name], room_number)
        return True

    def available_count(self, name: str) -> int:
        return len(self._free[name])

    def occupied_count(self, name: str) -> int:
        return len(self._occupied[name])

    def free_rooms(self, name: str) -> list[int]:
        return list(self._free[name])

    def report(self) -> list[TypeAvailability]:
        """Availability for every room type, in menu order."""
        return [
            TypeAvailability(
                name=rt.name,
                available=len(self._free[rt.name]),
                occupied=len(self._occupied[rt.name]),
                total=rt.total_rooms,
                price_per_night=rt.price_per_night,
                room_range=rt.room_range,
            )
            for rt in self.catalog
        ]

    def _require_type(self, room_number: int) -> RoomType:
        room_type = self.find_room_type(room_number)
        if room_type is None:
            raise RoomTypeNotFoundError(f"Room {room_number} is not part of any room type")
        return room_type
