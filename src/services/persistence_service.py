"""Persistence service - Saves and restores a date's reservations as a text record."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path

from src.config import get_settings
from src.models.reservation import Reservation
from src.parsers.record_parser import (
    RECORD_HEADER,
    REVENUE_PREFIX,
    MalformedRecord,
    RecordParser,
)
from src.services.booking_service import BookingEngine
from src.utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Data Models
# =============================================================================


class SaveOutcome(str, Enum):
    """Outcome of saving a date."""

    SAVED = "saved"
    NOTHING_TO_SAVE = "nothing_to_save"
    INVALID_DATE = "invalid_date"
    IO_FAILURE = "io_failure"


class LoadOutcome(str, Enum):
    """Outcome of loading a date."""

    LOADED = "loaded"
    NO_RECORD = "no_record"
    INVALID_DATE = "invalid_date"
    IO_FAILURE = "io_failure"


@dataclass
class SaveResult:
    """Result of writing one date's record file."""

    success: bool
    outcome: SaveOutcome
    date: str
    path: Path | None = None
    revenue: Decimal = Decimal("0")
    total_saved: int = 0
    error_message: str | None = None


@dataclass
class LoadResult:
    """Result of rebuilding the ledger from one date's record file."""

    success: bool
    outcome: LoadOutcome
    date: str
    path: Path | None = None
    recorded_revenue: Decimal = Decimal("0")
    total_processed: int = 0
    total_restored: int = 0
    total_malformed: int = 0
    total_unrestorable: int = 0
    errors: list[str] = field(default_factory=list)
    error_message: str | None = None

    @property
    def total_skipped(self) -> int:
        return self.total_malformed + self.total_unrestorable


def validate_date_label(date_label: str) -> str | None:
    """
    Check that a date label can safely name a record file.

    Returns:
        Problem description, or None if the label is usable
    """
    if not date_label or not date_label.strip():
        return "Date must not be empty"
    if date_label in (".", ".."):
        return f"Invalid date: {date_label}"
    if any(ch in date_label for ch in ("/", "\\", "\x00")):
        return f"Date must not contain path separators: {date_label}"
    return None


# =============================================================================
# Persistence Coordinator
# =============================================================================


class PersistenceCoordinator:
    """
    Saves and loads one date's reservations.

    Loading makes the requested date authoritative: the engine's ledger is
    discarded first, then every readable record is replayed onto the room it
    names. Bad lines and unrestorable records are reported and skipped; the
    rest of the file still loads.
    """

    def __init__(
        self,
        engine: BookingEngine,
        records_dir: str | Path = ".",
        record_suffix: str = ".txt",
        parser: RecordParser | None = None,
    ):
        """
        Initialize persistence coordinator.

        Args:
            engine: Booking engine whose ledger is saved and rebuilt
            records_dir: Directory holding the per-date record files
            record_suffix: File name suffix after the date label
            parser: Record parser (built from the engine's catalog if not provided)
        """
        self.engine = engine
        self.records_dir = Path(records_dir)
        self.record_suffix = record_suffix
        self.parser = parser or RecordParser(known_room_types=engine.catalog.names)

    def record_path(self, date_label: str) -> Path:
        return self.records_dir / f"{date_label}{self.record_suffix}"

    def save(self, date_label: str) -> SaveResult:
        """
        Write every active reservation filed under a date.

        Args:
            date_label: Stay date to save

        Returns:
            SaveResult
        """
        problem = validate_date_label(date_label)
        if problem:
            logger.warning("save_rejected", date=date_label, reason=problem)
            return SaveResult(
                success=False,
                outcome=SaveOutcome.INVALID_DATE,
                date=date_label,
                error_message=problem,
            )

        to_save = [r for r in self.engine.current_reservations() if r.stay_date == date_label]
        revenue = sum((r.total_cost for r in to_save), Decimal("0"))

        if not to_save:
            logger.info("nothing_to_save", date=date_label)
            return SaveResult(
                success=False,
                outcome=SaveOutcome.NOTHING_TO_SAVE,
                date=date_label,
                error_message=f"No reservations to save for {date_label}",
            )

        path = self.record_path(date_label)

        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(f"{REVENUE_PREFIX}{revenue}\n")
                f.write(f"{RECORD_HEADER}\n")
                for reservation in to_save:
                    f.write(format_record_line(reservation) + "\n")

        except OSError as e:
            logger.error("ledger_save_failed", date=date_label, path=str(path), error=str(e))
            return SaveResult(
                success=False,
                outcome=SaveOutcome.IO_FAILURE,
                date=date_label,
                path=path,
                error_message=f"Unable to open file for saving: {e}",
            )

        logger.info(
            "ledger_saved",
            date=date_label,
            path=str(path),
            reservations=len(to_save),
            revenue=str(revenue),
        )

        return SaveResult(
            success=True,
            outcome=SaveOutcome.SAVED,
            date=date_label,
            path=path,
            revenue=revenue,
            total_saved=len(to_save),
        )

    def load(self, date_label: str) -> LoadResult:
        """
        Make a date authoritative and rebuild the ledger from its record.

        The ledger is reset even when no record exists, so a date without a
        file starts empty.

        Args:
            date_label: Date to activate

        Returns:
            LoadResult with restore statistics
        """
        problem = validate_date_label(date_label)
        if problem:
            logger.warning("load_rejected", date=date_label, reason=problem)
            return LoadResult(
                success=False,
                outcome=LoadOutcome.INVALID_DATE,
                date=date_label,
                error_message=problem,
            )

        self.engine.reset_state_for_new_date(date_label)
        path = self.record_path(date_label)

        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                document = self.parser.parse_document(f, file_date=date_label)

        except FileNotFoundError:
            logger.info("no_record_file", date=date_label, path=str(path))
            return LoadResult(
                success=True,
                outcome=LoadOutcome.NO_RECORD,
                date=date_label,
                path=path,
            )
        except OSError as e:
            logger.error("ledger_load_failed", date=date_label, path=str(path), error=str(e))
            return LoadResult(
                success=False,
                outcome=LoadOutcome.IO_FAILURE,
                date=date_label,
                path=path,
                error_message=f"Unable to open file for loading: {e}",
            )

        result = LoadResult(
            success=True,
            outcome=LoadOutcome.LOADED,
            date=date_label,
            path=path,
            recorded_revenue=document.recorded_revenue,
        )

        for record in document.records:
            result.total_processed += 1

            if isinstance(record, MalformedRecord):
                result.total_malformed += 1
                result.errors.append(f"line {record.line_no}: {record.reason}")
                logger.warning(
                    "record_line_skipped",
                    date=date_label,
                    line_no=record.line_no,
                    reason=record.reason,
                )
                continue

            booking = self.engine.restore(record.reservation)
            if booking.success:
                result.total_restored += 1
            else:
                result.total_unrestorable += 1
                result.errors.append(f"line {record.line_no}: {booking.error_message}")

        if document.revenue_parsed and document.recorded_revenue != self.engine.total_revenue:
            logger.warning(
                "recorded_revenue_mismatch",
                date=date_label,
                recorded=str(document.recorded_revenue),
                restored=str(self.engine.total_revenue),
            )

        logger.info(
            "ledger_loaded",
            date=date_label,
            path=str(path),
            restored=result.total_restored,
            skipped=result.total_skipped,
            revenue=str(self.engine.total_revenue),
        )

        return result


def format_record_line(reservation: Reservation) -> str:
    """Render a reservation as an eight-field record line (no escaping)."""
    return ",".join(
        [
            reservation.guest_name,
            str(reservation.room_number),
            reservation.room_type,
            reservation.stay_date,
            str(reservation.nights),
            str(reservation.check_in_hour),
            str(reservation.price_per_night),
            str(reservation.total_cost),
        ]
    )


# =============================================================================
# Factory Functions
# =============================================================================


def create_persistence_coordinator(
    engine: BookingEngine,
    records_dir: str | Path | None = None,
) -> PersistenceCoordinator:
    """
    Create a PersistenceCoordinator using configured paths.

    Args:
        engine: Booking engine to persist
        records_dir: Record directory (from config if not provided)

    Returns:
        Configured PersistenceCoordinator
    """
    settings = get_settings()

    parser = RecordParser(
        known_room_types=engine.catalog.names,
        legacy_nights=settings.ledger.legacy_nights,
        legacy_check_in_hour=settings.ledger.legacy_check_in_hour,
    )

    return PersistenceCoordinator(
        engine=engine,
        records_dir=records_dir or settings.records_dir,
        record_suffix=settings.record_suffix,
        parser=parser,
    )
