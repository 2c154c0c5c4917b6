"""Tests for saving and loading per-date reservation records."""

import pytest
from collections import Counter
from decimal import Decimal

from src.models.room import create_default_catalog
from src.parsers.record_parser import RECORD_HEADER
from src.services.booking_service import BookingEngine, UndoOutcome
from src.services.persistence_service import (
    LoadOutcome,
    PersistenceCoordinator,
    SaveOutcome,
    create_persistence_coordinator,
    format_record_line,
    validate_date_label,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def engine():
    return BookingEngine(create_default_catalog(), active_date="07-01-2025")


@pytest.fixture
def coordinator(engine, tmp_path):
    return PersistenceCoordinator(engine, records_dir=tmp_path)


def write_record(tmp_path, date_label: str, text: str):
    path = tmp_path / f"{date_label}.txt"
    path.write_text(text, encoding="utf-8")
    return path


def assert_invariants(engine: BookingEngine):
    for entry in engine.availability_report():
        assert entry.available + entry.occupied == entry.total
    assert engine.verify_revenue()


# =============================================================================
# Save Tests
# =============================================================================


class TestSave:
    """Tests for PersistenceCoordinator.save."""

    def test_save_writes_revenue_header_and_records(self, engine, coordinator, tmp_path):
        engine.reserve("Deluxe Suite", "Alice", "07-01-2025", 2, 15)
        engine.reserve("Penthouse", "Bob", "07-01-2025", 1, 20)

        result = coordinator.save("07-01-2025")

        assert result.success is True
        assert result.outcome == SaveOutcome.SAVED
        assert result.total_saved == 2
        assert result.revenue == Decimal("1835.00")

        lines = (tmp_path / "07-01-2025.txt").read_text(encoding="utf-8").splitlines()
        assert lines[0] == "TOTAL_REVENUE=1835.00"
        assert lines[1] == RECORD_HEADER
        assert lines[2] == "Alice,236,Deluxe Suite,07-01-2025,2,15,350.00,700.00"
        assert lines[3] == "Bob,301,Penthouse,07-01-2025,1,20,1135.00,1135.00"

    def test_save_selects_only_requested_date(self, engine, coordinator, tmp_path):
        engine.reserve("Deluxe Suite", "Alice", "07-01-2025", 2, 15)
        engine.reserve("Deluxe Suite", "Carol", "07-02-2025", 1, 15)

        result = coordinator.save("07-02-2025")

        assert result.total_saved == 1
        assert result.revenue == Decimal("350.00")
        text = (tmp_path / "07-02-2025.txt").read_text(encoding="utf-8")
        assert "Carol" in text
        assert "Alice" not in text

    def test_nothing_to_save(self, coordinator, tmp_path):
        result = coordinator.save("07-01-2025")

        assert result.success is False
        assert result.outcome == SaveOutcome.NOTHING_TO_SAVE
        assert not (tmp_path / "07-01-2025.txt").exists()

    def test_io_failure(self, engine, tmp_path):
        coordinator = PersistenceCoordinator(engine, records_dir=tmp_path / "missing" / "dir")
        engine.reserve("Deluxe Suite", "Alice", "07-01-2025", 2, 15)

        result = coordinator.save("07-01-2025")

        assert result.success is False
        assert result.outcome == SaveOutcome.IO_FAILURE

    def test_invalid_date(self, engine, coordinator):
        engine.reserve("Deluxe Suite", "Alice", "../escape", 2, 15)
        result = coordinator.save("../escape")
        assert result.outcome == SaveOutcome.INVALID_DATE

    def test_guest_name_with_line_break_never_reaches_the_record(self, engine, coordinator, tmp_path):
        rejected = engine.reserve("Deluxe Suite", "Al\nice", "07-01-2025", 1, 15)
        engine.reserve("Deluxe Suite", "Bob", "07-01-2025", 1, 15)
        coordinator.save("07-01-2025")

        result = coordinator.load("07-01-2025")

        assert rejected.success is False
        assert result.total_restored == 1
        assert result.errors == []
        assert engine.guest_history() == ["Bob"]

    def test_format_record_line_does_not_escape(self, engine):
        reservation = engine.reserve("Standard Rooms, Courtyard", "Smith, Jr.", "07-01-2025", 1, 15).reservation
        assert format_record_line(reservation) == (
            "Smith, Jr.,101,Standard Rooms, Courtyard,07-01-2025,1,15,125.00,125.00"
        )


# =============================================================================
# Load Tests
# =============================================================================


class TestLoad:
    """Tests for PersistenceCoordinator.load."""

    def test_load_scenario(self, engine, coordinator, tmp_path):
        write_record(
            tmp_path,
            "07-01-2025",
            f"TOTAL_REVENUE=700\n{RECORD_HEADER}\nAlice,236,Deluxe Suite,07-01-2025,2,15,350,700\n",
        )

        result = coordinator.load("07-01-2025")

        assert result.success is True
        assert result.outcome == LoadOutcome.LOADED
        assert result.total_restored == 1
        assert result.recorded_revenue == Decimal("700")
        assert engine.total_revenue == Decimal("700.00")
        reservations = engine.current_reservations()
        assert len(reservations) == 1
        assert reservations[0].guest_name == "Alice"
        assert reservations[0].room_number == 236
        assert engine.occupied_rooms_in_order() == [236]
        assert_invariants(engine)

    def test_load_line_with_trailing_comma(self, engine, coordinator, tmp_path):
        write_record(
            tmp_path,
            "07-01-2025",
            "TOTAL_REVENUE=700\nAlice,236,Deluxe Suite,07-01-2025,2,15,350,700,\n",
        )

        result = coordinator.load("07-01-2025")

        assert result.total_restored == 1
        assert result.total_malformed == 0
        assert engine.guest_rooms("Alice") == [236]
        assert engine.total_revenue == Decimal("700")

    def test_load_resets_even_without_file(self, engine, coordinator):
        engine.reserve("Deluxe Suite", "Alice", "07-01-2025", 2, 15)

        result = coordinator.load("08-15-2025")

        assert result.success is True
        assert result.outcome == LoadOutcome.NO_RECORD
        assert engine.active_date == "08-15-2025"
        assert engine.current_reservations() == []
        assert engine.total_revenue == Decimal("0")

    def test_load_empty_file(self, engine, coordinator, tmp_path):
        write_record(tmp_path, "07-01-2025", "")

        result = coordinator.load("07-01-2025")

        assert result.outcome == LoadOutcome.LOADED
        assert result.total_processed == 0
        assert engine.current_reservations() == []

    def test_duplicate_room_second_record_skipped(self, engine, coordinator, tmp_path):
        write_record(
            tmp_path,
            "07-01-2025",
            "TOTAL_REVENUE=1050\n"
            f"{RECORD_HEADER}\n"
            "Alice,236,Deluxe Suite,07-01-2025,2,15,350,700\n"
            "Mallory,236,Deluxe Suite,07-01-2025,1,15,350,350\n",
        )

        result = coordinator.load("07-01-2025")

        assert result.total_restored == 1
        assert result.total_unrestorable == 1
        assert len(result.errors) == 1
        assert [r.guest_name for r in engine.current_reservations()] == ["Alice"]
        assert engine.ledger.availability.guest_in(236) == "Alice"
        assert engine.total_revenue == Decimal("700")
        assert_invariants(engine)

    def test_mixed_legacy_and_full_lines(self, engine, coordinator, tmp_path):
        write_record(
            tmp_path,
            "07-01-2025",
            "$1050\n"
            "Carol,237\n"
            "Alice,236,Deluxe Suite,07-01-2025,2,15,350,700\n"
            "broken line\n"
            "Dave,notanumber\n"
            "Bob,101,Standard Rooms, Courtyard,07-01-2025,1,10,125,125\n"
            "Eve,999\n",
        )

        result = coordinator.load("07-01-2025")

        assert result.total_processed == 6
        assert result.total_restored == 3
        assert result.total_malformed == 2
        assert result.total_unrestorable == 1
        assert engine.occupied_rooms_in_order() == [101, 236, 237]
        carol = next(r for r in engine.current_reservations() if r.guest_name == "Carol")
        assert carol.room_type == "Deluxe Suite"
        assert carol.nights == 1
        assert carol.check_in_hour == 15
        assert carol.total_cost == Decimal("0")
        assert_invariants(engine)

    def test_old_format_first_data_line_is_not_lost(self, engine, coordinator, tmp_path):
        write_record(tmp_path, "07-01-2025", "$0\nCarol,237\nDave,238\n")

        result = coordinator.load("07-01-2025")

        assert result.total_restored == 2
        assert engine.guest_history() == ["Carol", "Dave"]

    def test_loaded_records_are_undoable(self, engine, coordinator, tmp_path):
        write_record(
            tmp_path,
            "07-01-2025",
            "TOTAL_REVENUE=1835\n"
            "Alice,236,Deluxe Suite,07-01-2025,2,15,350,700\n"
            "Bob,301,Penthouse,07-01-2025,1,20,1135,1135\n",
        )
        coordinator.load("07-01-2025")

        result = engine.undo()

        assert result.outcome == UndoOutcome.UNDONE
        assert result.action.guest_name == "Bob"
        assert engine.total_revenue == Decimal("700")
        assert engine.occupied_rooms_in_order() == [236]

    def test_invalid_date_leaves_ledger_alone(self, engine, coordinator):
        engine.reserve("Deluxe Suite", "Alice", "07-01-2025", 2, 15)

        result = coordinator.load("a/b")

        assert result.outcome == LoadOutcome.INVALID_DATE
        assert len(engine.current_reservations()) == 1

    def test_unreadable_record_is_io_failure(self, engine, coordinator, tmp_path):
        (tmp_path / "07-01-2025.txt").mkdir()

        result = coordinator.load("07-01-2025")

        assert result.success is False
        assert result.outcome == LoadOutcome.IO_FAILURE
        assert engine.current_reservations() == []


# =============================================================================
# Round Trip Tests
# =============================================================================


class TestRoundTrip:
    """Save, reset, load reproduces the date's reservations."""

    def test_round_trip(self, engine, coordinator):
        engine.reserve("Deluxe Suite", "Alice", "07-01-2025", 2, 15)
        engine.reserve("Standard Rooms, Courtyard", "Smith, Jr.", "07-01-2025", 3, 9)
        engine.reserve("Standard Room, Scenic", "Bob", "07-01-2025", 1, 23)
        engine.reserve("Penthouse", "Alice", "07-01-2025", 4, 0)
        engine.reserve("Deluxe Suite", "Zed", "07-02-2025", 1, 15)

        expected = Counter(engine.reservations_on_date("07-01-2025"))
        saved = coordinator.save("07-01-2025")

        engine.reset_state_for_new_date("07-01-2025")
        result = coordinator.load("07-01-2025")

        assert result.total_restored == 4
        assert result.total_skipped == 0
        assert Counter(engine.current_reservations()) == expected
        assert engine.total_revenue == saved.revenue
        assert result.recorded_revenue == saved.revenue
        assert_invariants(engine)


# =============================================================================
# Helpers
# =============================================================================


@pytest.mark.parametrize("label", ["", "  ", ".", "..", "a/b", "a\\b"])
def test_validate_date_label_rejects(label):
    assert validate_date_label(label) is not None


def test_validate_date_label_accepts():
    assert validate_date_label("07-01-2025") is None


def test_create_persistence_coordinator(engine, tmp_path):
    coordinator = create_persistence_coordinator(engine, tmp_path)
    assert coordinator.record_path("07-01-2025") == tmp_path / "07-01-2025.txt"
