"""Main entry point for the Room Ledger console."""

import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from src.config import get_settings
from src.models.room import create_default_catalog
from src.services.booking_service import BookingEngine, UndoOutcome
from src.services.persistence_service import (
    LoadOutcome,
    LoadResult,
    PersistenceCoordinator,
    SaveOutcome,
    create_persistence_coordinator,
)
from src.services.room_graph import RoomGraph, build_room_graph
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

DATE_FORMAT = "%m-%d-%Y"


def current_date_label() -> str:
    """Today's date as a record label (MM-DD-YYYY)."""
    return datetime.now().strftime(DATE_FORMAT)


# =============================================================================
# Console
# =============================================================================


class HotelConsole:
    """
    Menu-driven front end over the booking engine.

    Owns the active date: switching dates loads that date's record, which
    replaces the whole ledger.
    """

    MENU = [
        "Reserve a room",
        "Display total revenue and guests",
        "Display room availability",
        "Save information to file",
        "Show reservations for a specific date",
        "New Day (switch date)",
        "Exit",
        "Find guest by name",
        "Undo last booking",
        "Show reachable rooms from a room",
        "Show guest history",
    ]

    def __init__(
        self,
        records_dir: str | Path | None = None,
        input_fn: Callable[[str], str] = input,
    ):
        """
        Initialize console.

        Args:
            records_dir: Directory for record files (from config if not provided)
            input_fn: Prompt function, replaceable for scripted sessions
        """
        self.settings = get_settings()
        self.hotel_name = self.settings.hotel_name
        self.catalog = create_default_catalog()
        self.engine = BookingEngine(self.catalog)
        self.persistence: PersistenceCoordinator = create_persistence_coordinator(
            self.engine, records_dir
        )
        self.graph: RoomGraph = build_room_graph(self.catalog)
        self.current_date = ""
        self._input = input_fn

    def activate_date(self, date_label: str) -> LoadResult:
        """Load a date's record and make it the active date."""
        result = self.persistence.load(date_label)

        if result.outcome == LoadOutcome.INVALID_DATE:
            print(f"❌ {result.error_message}")
            return result

        self.current_date = date_label

        if result.outcome == LoadOutcome.NO_RECORD:
            print(f"No existing reservations file found for {date_label}. Starting fresh.")
        elif result.outcome == LoadOutcome.IO_FAILURE:
            print(f"❌ {result.error_message}. Starting fresh.")
        else:
            for error in result.errors:
                print(f"⚠️  Could not restore {error}")
            print(f"Reservations loaded from file for {date_label}.")
            print(f"Total revenue from file: ${result.recorded_revenue}")

        return result

    def run(self) -> None:
        """Run the interactive menu until the user exits."""
        logger.info("console_started", hotel=self.hotel_name)
        entered = self._ask(f"Enter today's date (MM-DD-YYYY) or '.' for {current_date_label()}: ")
        self.activate_date(current_date_label() if entered in ("", ".") else entered)

        while True:
            self.show_available_rooms()
            self.show_options()

            choice = self._ask_int(f"\nEnter your number of choice (1-{len(self.MENU)}): ")
            if choice == 7:
                print("Exiting program...")
                break

            self.dispatch(choice)

            again = self._ask("\nDo you want to perform another action? (y/n): ")
            if again.lower() != "y":
                break

        self.save(self.current_date)

    def dispatch(self, choice: int | None) -> None:
        handlers = {
            1: self.reserve,
            2: self.show_totals,
            3: self.show_availability,
            4: lambda: self.save(self._ask("Enter reservation date to save (MM-DD-YYYY): ")),
            5: self.show_date,
            6: self.new_day,
            8: self.find_guest,
            9: self.undo,
            10: self.show_reachable_rooms,
            11: self.show_history,
        }
        handler = handlers.get(choice)
        if handler is None:
            print("Invalid option. Please select a valid action option.")
            return
        handler()

    # -------------------------------------------------------------------------
    # Menu actions
    # -------------------------------------------------------------------------

    def show_available_rooms(self) -> None:
        print(f"\nWelcome to {self.hotel_name}!")
        print(f"Today's date: {self.current_date}")
        print("Choose a room type to reserve:")
        for option, entry in enumerate(self.engine.availability_report(), start=1):
            print(
                f"{option}. {entry.name} - {entry.available} available - "
                f"${entry.price_per_night} a night - Rooms {entry.room_range}"
            )

    def show_options(self) -> None:
        print("\nChoose an action:")
        for number, label in enumerate(self.MENU, start=1):
            print(f"{number}. {label}")

    def reserve(self) -> None:
        print("\n--- Reservation Details ---")
        entered = self._ask(
            f"Enter reservation start date (MM-DD-YYYY) or '.' to use today's date ({self.current_date}): "
        )
        stay_date = self.current_date if entered in ("", ".") else entered

        nights = self._ask_int("How many nights will you stay? ")
        while nights is None or nights <= 0:
            nights = self._ask_int("Nights must be at least 1. Enter again: ")

        hour = self._ask_int("Enter check-in time (0-23 hours): ")
        while hour is None or not 0 <= hour <= 23:
            hour = self._ask_int("Invalid time. Enter check-in hour between 0-23: ")

        option = self._ask_int(f"Enter room option (1-{len(self.catalog)}): ")
        if option is None or not 1 <= option <= len(self.catalog):
            print("Invalid room option.")
            return

        guest_name = self._ask("Enter your full name: ")
        result = self.engine.reserve(option, guest_name, stay_date, nights, hour)

        if not result.success:
            print(f"❌ {result.error_message}")
            return

        r = result.reservation
        print("\n--- Reservation Complete ---")
        print(f"Guest Name     : {r.guest_name}")
        print(f"Room Type      : {r.room_type}")
        print(f"Room Number    : {r.room_number}")
        print(f"Check-in Time  : {r.check_in_hour}:00")
        print(f"Nights         : {r.nights}")
        print(f"Price per Night: ${r.price_per_night}")
        print(f"Total Cost     : ${r.total_cost}")
        print("-----------------------------")

    def show_totals(self) -> None:
        print(f"\nHotel: {self.hotel_name}")
        print(f"Total Revenue (for current loaded date): ${self.engine.total_revenue}")

        reservations = self.engine.current_reservations()
        if reservations:
            print("Current reservations:")
            for r in reservations:
                print(f"  Guest Name: {r.guest_name} | Room Number: {r.room_number}")
        else:
            print("No reservations made yet for this date.")

        occupied = self.engine.occupied_rooms_in_order()
        if occupied:
            print("Occupied rooms (in order): " + " ".join(str(n) for n in occupied))
        else:
            print("No occupied rooms yet.")

    def show_availability(self) -> None:
        print("\nRoom Availability:")
        for entry in self.engine.availability_report():
            print(f"  {entry.name} - {entry.available} available")

    def save(self, date_label: str) -> None:
        result = self.persistence.save(date_label)
        if result.outcome == SaveOutcome.SAVED:
            print(f"✅ Data saved to file: {result.path}")
        else:
            print(result.error_message)

    def show_date(self) -> None:
        date_label = self._ask("Enter date to show reservations (MM-DD-YYYY): ")
        result = self.activate_date(date_label)
        if result.outcome != LoadOutcome.INVALID_DATE:
            self.print_reservations(date_label)

    def new_day(self) -> None:
        self.activate_date(self._ask("Enter new date (MM-DD-YYYY): "))

    def find_guest(self) -> None:
        guest_name = self._ask("Enter guest name to search: ")
        rooms = self.engine.guest_rooms(guest_name)
        if not rooms:
            print(f"No reservations found for {guest_name}.")
            return
        print(f"Rooms reserved for {guest_name}: " + ", ".join(str(n) for n in rooms))

    def undo(self) -> None:
        result = self.engine.undo()
        if result.outcome == UndoOutcome.UNDONE:
            a = result.action
            print(f"Booking for {a.guest_name} in room {a.room_number} on {a.stay_date} has been undone.")
        elif result.outcome == UndoOutcome.EMPTY:
            print("No bookings to undo.")
        else:
            print(f"❌ {result.error_message}. Undo failed.")

    def show_reachable_rooms(self) -> None:
        room = self._ask_int("Enter starting room number: ")
        if room is None:
            print("Invalid room number.")
            return
        order = self.graph.bfs(room)
        if order is None:
            print(f"Room {room} not found in hotel graph.")
            return
        print(f"Rooms reachable from {room}: " + " -> ".join(str(n) for n in order))

    def show_history(self) -> None:
        history = self.engine.guest_history()
        if not history:
            print("No guest history yet.")
            return
        print("Guest reservation history (in order):")
        for name in history:
            print(f"  {name}")

    def print_reservations(self, date_label: str) -> None:
        reservations = self.engine.reservations_on_date(date_label)
        if not reservations:
            print(f"No reservations found for {date_label}.")
            return
        print(f"Reservations for {date_label}:")
        for r in reservations:
            print(f"  Room {r.room_number}: {r.guest_name}")

    # -------------------------------------------------------------------------
    # Input helpers
    # -------------------------------------------------------------------------

    def _ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _ask_int(self, prompt: str) -> int | None:
        value = self._ask(prompt)
        try:
            return int(value)
        except ValueError:
            return None


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_menu() -> None:
    """Run the interactive menu."""
    console = HotelConsole()
    try:
        console.run()
    except (EOFError, KeyboardInterrupt):
        logger.warning("console_input_closed", active_date=console.current_date)
        print("\nInput closed, saving and exiting...")
        if console.current_date:
            console.save(console.current_date)


def cmd_show(date_label: str) -> None:
    """Print one date's stored reservations and revenue."""
    console = HotelConsole()
    result = console.activate_date(date_label)
    if result.outcome != LoadOutcome.INVALID_DATE:
        console.print_reservations(date_label)


def cmd_availability() -> None:
    """Print the room catalog with today's availability."""
    console = HotelConsole()
    console.activate_date(current_date_label())
    console.show_available_rooms()


def main() -> None:
    """Main entry point."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    command = sys.argv[1] if len(sys.argv) > 1 else "menu"

    if command == "menu":
        cmd_menu()
    elif command == "show" and len(sys.argv) > 2:
        cmd_show(sys.argv[2])
    elif command == "availability":
        cmd_availability()
    else:
        print(f"Unknown command: {command}")
        print("Usage: python -m src.main [menu|show <date>|availability]")
        sys.exit(1)


if __name__ == "__main__":
    main()
