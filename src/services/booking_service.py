"""Booking service - Keeps every per-date index in step across bookings and undo."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from src.models.reservation import Reservation, UndoAction
from src.models.room import RoomTypeCatalog, create_default_catalog
from src.services.availability_index import (
    AvailabilityIndex,
    RoomAlreadyOccupiedError,
    RoomsExhaustedError,
    TypeAvailability,
)
from src.services.guest_index import GuestIndex
from src.services.occupancy_tree import OccupancyTree
from src.services.undo_ledger import UndoLedger
from src.utils.logger import bind_active_date, clear_active_date, get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")

# One reservation is one record line
LINE_BREAKS = ("\n", "\r")


# =============================================================================
# Data Models
# =============================================================================


class BookingOutcome(str, Enum):
    """Outcome of a booking or a replayed record."""

    RESERVED = "reserved"
    RESTORED = "restored"
    NO_SUCH_TYPE = "no_such_type"
    EXHAUSTED = "exhausted"
    INVALID_REQUEST = "invalid_request"
    INTEGRITY_VIOLATION = "integrity_violation"


class UndoOutcome(str, Enum):
    """Outcome of an undo request."""

    UNDONE = "undone"
    EMPTY = "empty"
    INTEGRITY_VIOLATION = "integrity_violation"


@dataclass
class BookingResult:
    """Result of reserving a room."""

    success: bool
    outcome: BookingOutcome
    reservation: Reservation | None = None
    error_message: str | None = None


@dataclass
class UndoResult:
    """Result of undoing the most recent booking."""

    success: bool
    outcome: UndoOutcome
    action: UndoAction | None = None
    error_message: str | None = None


@dataclass
class DayLedger:
    """All mutable state for the active date. Replaced wholesale on a date switch."""

    availability: AvailabilityIndex
    active_date: str | None = None
    occupancy: OccupancyTree = field(default_factory=OccupancyTree)
    guests: GuestIndex = field(default_factory=GuestIndex)
    undo: UndoLedger = field(default_factory=UndoLedger)
    reservations: list[Reservation] = field(default_factory=list)
    total_revenue: Decimal = ZERO

    @classmethod
    def fresh(cls, catalog: RoomTypeCatalog, active_date: str | None = None) -> "DayLedger":
        return cls(availability=AvailabilityIndex(catalog), active_date=active_date)

    @property
    def expected_revenue(self) -> Decimal:
        """Revenue recomputed from the reservation list."""
        return sum((r.total_cost for r in self.reservations), ZERO)

    def verify_revenue(self) -> bool:
        return self.total_revenue == self.expected_revenue


# =============================================================================
# Booking Engine
# =============================================================================


class BookingEngine:
    """
    Orchestrates bookings and reversals across the per-date indexes.

    A booking touches availability, the occupancy tree, the guest index,
    the reservation list, the undo stack and revenue. Validation and
    allocation happen first; once a room is secured the remaining updates
    cannot fail, so a booking is applied completely or not at all.
    """

    def __init__(self, catalog: RoomTypeCatalog, active_date: str | None = None):
        """
        Initialize booking engine.

        Args:
            catalog: Room types of the hotel
            active_date: Date label the ledger starts on
        """
        self.catalog = catalog
        self.ledger = DayLedger.fresh(catalog, active_date)

    @property
    def active_date(self) -> str | None:
        return self.ledger.active_date

    @property
    def total_revenue(self) -> Decimal:
        return self.ledger.total_revenue

    def reset_state_for_new_date(self, date_label: str | None = None) -> None:
        """Discard the current ledger and start an empty one."""
        previous = self.ledger.active_date
        self.ledger = DayLedger.fresh(self.catalog, date_label)

        if date_label:
            bind_active_date(date_label)
        else:
            clear_active_date()

        logger.info("ledger_reset", previous_date=previous, new_date=date_label)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def reserve(
        self,
        room_type_selector: str | int,
        guest_name: str,
        stay_date: str,
        nights: int = 1,
        check_in_hour: int = 15,
    ) -> BookingResult:
        """
        Book the next free room of a type.

        Args:
            room_type_selector: Room type name or 1-based menu option
            guest_name: Guest the room is booked for
            stay_date: Stay date label
            nights: Number of nights (at least 1)
            check_in_hour: Check-in hour, 0-23

        Returns:
            BookingResult with the new Reservation on success
        """
        problem = self._validate_request(guest_name, stay_date, nights, check_in_hour)
        if problem:
            logger.warning("reservation_rejected", guest=guest_name, reason=problem)
            return BookingResult(
                success=False,
                outcome=BookingOutcome.INVALID_REQUEST,
                error_message=problem,
            )

        room_type = self.catalog.select(room_type_selector)
        if room_type is None:
            logger.warning("room_type_not_found", selector=room_type_selector)
            return BookingResult(
                success=False,
                outcome=BookingOutcome.NO_SUCH_TYPE,
                error_message=f"Invalid room type option: {room_type_selector}",
            )

        try:
            room_number = self.ledger.availability.allocate(room_type)
        except RoomsExhaustedError as e:
            logger.warning("room_type_exhausted", room_type=room_type.name)
            return BookingResult(
                success=False,
                outcome=BookingOutcome.EXHAUSTED,
                error_message=str(e),
            )

        reservation = Reservation.create(
            guest_name=guest_name,
            room_number=room_number,
            room_type=room_type.name,
            stay_date=stay_date,
            nights=nights,
            check_in_hour=check_in_hour,
            price_per_night=room_type.price_per_night,
        )
        self._commit(reservation)

        logger.info(
            "reservation_created",
            guest=guest_name,
            room=room_number,
            room_type=room_type.name,
            stay_date=stay_date,
            total_cost=str(reservation.total_cost),
        )

        return BookingResult(
            success=True,
            outcome=BookingOutcome.RESERVED,
            reservation=reservation,
        )

    def restore(self, reservation: Reservation) -> BookingResult:
        """
        Replay a stored reservation onto its recorded room number.

        Type-level allocation order is bypassed because the room was chosen
        when the reservation was first made. The recorded room type is
        replaced by the catalog's type for that room.

        Args:
            reservation: Reservation read back from a record

        Returns:
            BookingResult; INTEGRITY_VIOLATION if the room is unknown or taken
        """
        room_type = self.ledger.availability.find_room_type(reservation.room_number)
        if room_type is None:
            message = f"Room {reservation.room_number} is not part of any room type"
            logger.warning(
                "record_unrestorable",
                guest=reservation.guest_name,
                room=reservation.room_number,
                reason="unknown_room",
            )
            return BookingResult(
                success=False,
                outcome=BookingOutcome.INTEGRITY_VIOLATION,
                reservation=reservation,
                error_message=message,
            )

        if reservation.room_type != room_type.name:
            if reservation.room_type:
                logger.warning(
                    "record_room_type_corrected",
                    room=reservation.room_number,
                    recorded=reservation.room_type,
                    catalog=room_type.name,
                )
            reservation = reservation.model_copy(update={"room_type": room_type.name})

        try:
            self._commit(reservation)
        except RoomAlreadyOccupiedError as e:
            logger.warning(
                "record_unrestorable",
                guest=reservation.guest_name,
                room=reservation.room_number,
                reason="already_occupied",
                occupant=e.guest_name,
            )
            return BookingResult(
                success=False,
                outcome=BookingOutcome.INTEGRITY_VIOLATION,
                reservation=reservation,
                error_message=f"Could not restore room {reservation.room_number} "
                f"for guest {reservation.guest_name}: {e}",
            )

        logger.debug(
            "reservation_restored",
            guest=reservation.guest_name,
            room=reservation.room_number,
        )

        return BookingResult(
            success=True,
            outcome=BookingOutcome.RESTORED,
            reservation=reservation,
        )

    def undo(self) -> UndoResult:
        """
        Reverse the most recent booking still on the undo stack.

        Returns:
            UndoResult carrying the reversed action
        """
        ledger = self.ledger
        action = ledger.undo.pop()

        if action is None:
            logger.info("undo_empty")
            return UndoResult(
                success=False,
                outcome=UndoOutcome.EMPTY,
                error_message="No bookings to undo",
            )

        room_type = ledger.availability.find_room_type(action.room_number)
        if room_type is None:
            logger.error(
                "undo_integrity_violation",
                guest=action.guest_name,
                room=action.room_number,
            )
            return UndoResult(
                success=False,
                outcome=UndoOutcome.INTEGRITY_VIOLATION,
                action=action,
                error_message=f"Could not find room type for room {action.room_number}",
            )

        ledger.total_revenue = max(ledger.total_revenue - action.total_cost, ZERO)

        ledger.availability.commit_release(action.room_number)
        ledger.occupancy.remove(action.room_number)
        ledger.guests.remove_last_booking(action.guest_name, action.room_number)

        if not self._remove_reservation(action):
            logger.warning(
                "undo_reservation_missing",
                guest=action.guest_name,
                room=action.room_number,
                stay_date=action.stay_date,
            )

        logger.info(
            "booking_undone",
            guest=action.guest_name,
            room=action.room_number,
            stay_date=action.stay_date,
        )

        return UndoResult(success=True, outcome=UndoOutcome.UNDONE, action=action)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def availability_report(self) -> list[TypeAvailability]:
        return self.ledger.availability.report()

    def occupied_rooms_in_order(self) -> list[int]:
        return self.ledger.occupancy.in_order()

    def guest_rooms(self, guest_name: str) -> list[int]:
        return self.ledger.guests.lookup(guest_name)

    def guest_history(self) -> list[str]:
        return self.ledger.guests.history

    def reservations_on_date(self, stay_date: str) -> list[Reservation]:
        """Active reservations filed under a stay date, ordered by room number."""
        return sorted(
            (r for r in self.ledger.reservations if r.stay_date == stay_date),
            key=lambda r: r.room_number,
        )

    def current_reservations(self) -> list[Reservation]:
        """All active reservations in booking order."""
        return list(self.ledger.reservations)

    def verify_revenue(self) -> bool:
        """Check revenue against a full re-scan of reservations."""
        ok = self.ledger.verify_revenue()
        if not ok:
            logger.error(
                "revenue_invariant_broken",
                tracked=str(self.ledger.total_revenue),
                expected=str(self.ledger.expected_revenue),
            )
        return ok

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, reservation: Reservation) -> None:
        """Apply a reservation to every index. Only commit_occupy can raise."""
        ledger = self.ledger

        ledger.availability.commit_occupy(reservation.room_number, reservation.guest_name)
        ledger.occupancy.insert(reservation.room_number)
        ledger.guests.record_booking(reservation.guest_name, reservation.room_number)
        ledger.reservations.append(reservation)
        ledger.undo.push(reservation.to_undo_action())
        ledger.total_revenue += reservation.total_cost

    def _remove_reservation(self, action: UndoAction) -> bool:
        reservations = self.ledger.reservations
        for i in range(len(reservations) - 1, -1, -1):
            r = reservations[i]
            if (
                r.guest_name == action.guest_name
                and r.room_number == action.room_number
                and r.stay_date == action.stay_date
            ):
                del reservations[i]
                return True
        return False

    @staticmethod
    def _validate_request(
        guest_name: str,
        stay_date: str,
        nights: int,
        check_in_hour: int,
    ) -> str | None:
        if not guest_name or not guest_name.strip():
            return "Guest name must not be empty"
        if any(ch in guest_name for ch in LINE_BREAKS):
            return "Guest name must not contain line breaks"
        if not stay_date or not stay_date.strip():
            return "Stay date must not be empty"
        if any(ch in stay_date for ch in LINE_BREAKS):
            return "Stay date must not contain line breaks"
        if nights < 1:
            return "Nights must be at least 1"
        if not 0 <= check_in_hour <= 23:
            return "Check-in hour must be between 0 and 23"
        return None


# =============================================================================
# Factory Functions
# =============================================================================


def create_booking_engine(
    catalog: RoomTypeCatalog | None = None,
    active_date: str | None = None,
) -> BookingEngine:
    """
    Create a BookingEngine for the default hotel.

    Args:
        catalog: Room catalog (default hotel if not provided)
        active_date: Date label to start on

    Returns:
        Configured BookingEngine
    """
    return BookingEngine(catalog or create_default_catalog(), active_date)
