"""Pydantic models for room types and the hotel room catalog."""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class RoomType(BaseModel):
    """A category of rooms sharing one nightly price."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    price_per_night: Decimal = Field(ge=0)
    room_range: str  # Display label, e.g. "236 thru 250"
    room_numbers: tuple[int, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_unique_numbers(self) -> "RoomType":
        if len(set(self.room_numbers)) != len(self.room_numbers):
            raise ValueError(f"Room type {self.name!r} lists a room number twice")
        return self

    @property
    def total_rooms(self) -> int:
        return len(self.room_numbers)

    @classmethod
    def from_range(
        cls,
        name: str,
        price_per_night: Decimal | str,
        low: int,
        high: int,
    ) -> "RoomType":
        """Build a room type covering the inclusive range low..high."""
        return cls(
            name=name,
            price_per_night=Decimal(price_per_night),
            room_range=f"{low} thru {high}",
            room_numbers=tuple(range(low, high + 1)),
        )

    @classmethod
    def from_numbers(
        cls,
        name: str,
        price_per_night: Decimal | str,
        numbers: list[int],
    ) -> "RoomType":
        """Build a room type from an explicit list of room numbers."""
        if len(numbers) == 2:
            label = f"{numbers[0]} and {numbers[1]}"
        else:
            label = ", ".join(str(n) for n in numbers)
        return cls(
            name=name,
            price_per_night=Decimal(price_per_night),
            room_range=label,
            room_numbers=tuple(numbers),
        )


class RoomTypeCatalog:
    """
    Read-only set of room types for one hotel.

    Room numbers partition across types: a number that appears under two
    types is rejected when the catalog is built. Menu options are 1-based
    and follow the alphabetical order of type names.
    """

    def __init__(self, room_types: list[RoomType]):
        self._types: dict[str, RoomType] = {}
        self._by_number: dict[int, RoomType] = {}

        for room_type in sorted(room_types, key=lambda rt: rt.name):
            if room_type.name in self._types:
                raise ValueError(f"Duplicate room type: {room_type.name!r}")
            for number in room_type.room_numbers:
                owner = self._by_number.get(number)
                if owner is not None:
                    raise ValueError(
                        f"Room {number} belongs to both {owner.name!r} and {room_type.name!r}"
                    )
                self._by_number[number] = room_type
            self._types[room_type.name] = room_type

    def __iter__(self):
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    @property
    def names(self) -> list[str]:
        return list(self._types)

    @property
    def total_rooms(self) -> int:
        return len(self._by_number)

    def get(self, name: str) -> RoomType | None:
        return self._types.get(name)

    def find_by_number(self, room_number: int) -> RoomType | None:
        """Return the room type owning a room number, or None."""
        return self._by_number.get(room_number)

    def select(self, selector: str | int) -> RoomType | None:
        """
        Resolve a menu selection.

        Args:
            selector: Room type name, or 1-based menu option

        Returns:
            RoomType or None if the selector matches nothing
        """
        if isinstance(selector, bool):
            return None
        if isinstance(selector, int):
            if 1 <= selector <= len(self._types):
                return list(self._types.values())[selector - 1]
            return None
        return self._types.get(selector)


# =============================================================================
# Default Hotel
# =============================================================================


def hilton_room_types() -> list[RoomType]:
    """Room types of the Hilton property."""
    return [
        RoomType.from_range("Standard Rooms, Courtyard", "125.00", 101, 170),
        RoomType.from_range("Standard Room, Scenic", "145.00", 201, 235),
        RoomType.from_range("Deluxe Suite", "350.00", 236, 250),
        RoomType.from_numbers("Penthouse", "1135.00", [301, 302]),
    ]


def create_default_catalog() -> RoomTypeCatalog:
    """Create the catalog for the default hotel."""
    return RoomTypeCatalog(hilton_room_types())
