"""Parser for per-date reservation record files."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from src.models.reservation import Reservation
from src.utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Record Format
# =============================================================================

REVENUE_PREFIX = "TOTAL_REVENUE="
LEGACY_REVENUE_PREFIX = "$"

RECORD_FIELDS = [
    "GuestName",
    "RoomNumber",
    "RoomType",
    "StayDate",
    "Nights",
    "CheckInHour",
    "PricePerNight",
    "TotalCost",
]
RECORD_HEADER = ",".join(RECORD_FIELDS)

FULL_FIELD_COUNT = len(RECORD_FIELDS)
TAIL_FIELD_COUNT = 5  # StayDate .. TotalCost never contain commas
LEGACY_MIN_FIELDS = 2


# =============================================================================
# Parse Results
# =============================================================================


@dataclass
class FullRecord:
    """Eight-field record written by the current format."""

    reservation: Reservation
    line_no: int = 0


@dataclass
class LegacyRecord:
    """Old "guest,room" record; everything else is defaulted."""

    reservation: Reservation
    line_no: int = 0


@dataclass
class MalformedRecord:
    """Line that could not be turned into a reservation."""

    line: str
    reason: str
    line_no: int = 0


ParsedRecord = FullRecord | LegacyRecord | MalformedRecord


@dataclass
class ParsedDocument:
    """Everything read from one record file."""

    recorded_revenue: Decimal
    revenue_parsed: bool
    has_header: bool
    records: list[ParsedRecord] = field(default_factory=list)

    @property
    def valid_records(self) -> list[FullRecord | LegacyRecord]:
        return [r for r in self.records if not isinstance(r, MalformedRecord)]

    @property
    def malformed_records(self) -> list[MalformedRecord]:
        return [r for r in self.records if isinstance(r, MalformedRecord)]


# =============================================================================
# Record Parser
# =============================================================================


class RecordParser:
    """
    Parser for reservation record files.

    Line 1 is the revenue figure (``TOTAL_REVENUE=<v>``, ``$<v>`` or a bare
    number). Line 2 is an optional column header. Every further non-empty
    line is a reservation: eight or more comma-separated fields for the full
    format, two to seven for the legacy ``guest,room`` format.

    Fields are not escaped on write, so a full record may carry extra commas
    from a guest name or a room type name such as "Standard Rooms,
    Courtyard". Full records are read from both ends: the last five fields
    have a fixed shape, and the room type is matched against known type
    names to find where the guest name stops.
    """

    def __init__(
        self,
        known_room_types: Iterable[str] = (),
        legacy_nights: int = 1,
        legacy_check_in_hour: int = 15,
    ):
        """
        Initialize parser.

        Args:
            known_room_types: Room type names used to realign comma-split fields
            legacy_nights: Nights assigned to legacy records
            legacy_check_in_hour: Check-in hour assigned to legacy records
        """
        self.known_room_types = set(known_room_types)
        self.legacy_nights = legacy_nights
        self.legacy_check_in_hour = legacy_check_in_hour

    def parse_document(self, lines: Iterable[str], file_date: str) -> ParsedDocument:
        """
        Parse a whole record file.

        Args:
            lines: File lines (line endings are stripped here)
            file_date: Date label the file belongs to

        Returns:
            ParsedDocument; an empty input yields zero revenue and no records
        """
        lines = [line.rstrip("\r\n") for line in lines]

        if not lines:
            return ParsedDocument(
                recorded_revenue=Decimal("0"),
                revenue_parsed=False,
                has_header=False,
            )

        revenue = self.parse_revenue(lines[0])
        if revenue is None:
            logger.warning("revenue_line_unparseable", line=lines[0][:50], file_date=file_date)

        body_start = 1
        has_header = len(lines) > 1 and self.is_header(lines[1])
        if has_header:
            body_start = 2

        document = ParsedDocument(
            recorded_revenue=revenue if revenue is not None else Decimal("0"),
            revenue_parsed=revenue is not None,
            has_header=has_header,
        )

        for line_no, line in enumerate(lines[body_start:], start=body_start + 1):
            if not line.strip():
                continue
            document.records.append(self.parse_line(line, file_date, line_no))

        logger.debug(
            "record_document_parsed",
            file_date=file_date,
            has_header=has_header,
            records=len(document.records),
            malformed=len(document.malformed_records),
        )

        return document

    def parse_revenue(self, line: str) -> Decimal | None:
        """
        Parse the revenue line in any of its three encodings.

        Returns:
            Decimal or None if the value is not a finite number
        """
        value = line.strip()

        if value.startswith(REVENUE_PREFIX):
            value = value[len(REVENUE_PREFIX):]
        elif value.startswith(LEGACY_REVENUE_PREFIX):
            value = value[len(LEGACY_REVENUE_PREFIX):]

        return self._parse_decimal(value)

    def is_header(self, line: str) -> bool:
        return line.strip() == RECORD_HEADER

    def parse_line(self, line: str, file_date: str, line_no: int = 0) -> ParsedRecord:
        """
        Parse one reservation line.

        Args:
            line: Raw line without its line ending
            file_date: Stay date assigned to legacy records
            line_no: 1-based line number for reporting

        Returns:
            FullRecord, LegacyRecord or MalformedRecord
        """
        fields = line.split(",")

        if len(fields) >= FULL_FIELD_COUNT:
            return self._parse_full(fields, line, line_no)
        if len(fields) >= LEGACY_MIN_FIELDS:
            return self._parse_legacy(fields, line, file_date, line_no)

        return MalformedRecord(line=line, reason="too_few_fields", line_no=line_no)

    def _parse_full(self, fields: list[str], line: str, line_no: int) -> ParsedRecord:
        """
        Parse an eight-or-more field line.

        Commas inside the guest name or room type push the typed fields
        right, so the last five fields are read first, after dropping empty
        trailing fields. When that fails on a longer line (extra column) the
        first eight fields are read by position instead.
        """
        while len(fields) > FULL_FIELD_COUNT and not fields[-1].strip():
            fields = fields[:-1]

        head = self._split_head(fields[:-TAIL_FIELD_COUNT])
        record = self._build_full(*head, *fields[-TAIL_FIELD_COUNT:], line=line, line_no=line_no)

        if isinstance(record, MalformedRecord) and len(fields) > FULL_FIELD_COUNT:
            positional = self._build_full(*fields[:FULL_FIELD_COUNT], line=line, line_no=line_no)
            if not isinstance(positional, MalformedRecord):
                logger.debug("record_extra_fields_ignored", line_no=line_no, fields=len(fields))
                return positional

        return record

    def _build_full(
        self,
        guest_name: str,
        room_str: str,
        room_type: str,
        stay_date: str,
        nights_str: str,
        hour_str: str,
        price_str: str,
        cost_str: str,
        *,
        line: str,
        line_no: int,
    ) -> ParsedRecord:
        room_number = self._parse_int(room_str)
        nights = self._parse_int(nights_str)
        check_in_hour = self._parse_int(hour_str)
        price = self._parse_decimal(price_str)
        cost = self._parse_decimal(cost_str)

        if None in (room_number, nights, check_in_hour, price, cost):
            return MalformedRecord(line=line, reason="bad_numeric_field", line_no=line_no)

        try:
            reservation = Reservation(
                guest_name=guest_name,
                room_number=room_number,
                room_type=room_type,
                stay_date=stay_date.strip(),
                nights=nights,
                check_in_hour=check_in_hour,
                price_per_night=price,
                total_cost=cost,
            )
        except ValidationError as e:
            return MalformedRecord(
                line=line,
                reason=f"invalid_values: {e.error_count()} error(s)",
                line_no=line_no,
            )

        return FullRecord(reservation=reservation, line_no=line_no)

    def _parse_legacy(
        self,
        fields: list[str],
        line: str,
        file_date: str,
        line_no: int,
    ) -> ParsedRecord:
        room_number = self._parse_int(fields[1])
        if room_number is None:
            return MalformedRecord(line=line, reason="bad_room_number", line_no=line_no)

        try:
            reservation = Reservation(
                guest_name=fields[0],
                room_number=room_number,
                room_type="",  # resolved from the catalog on replay
                stay_date=file_date,
                nights=self.legacy_nights,
                check_in_hour=self.legacy_check_in_hour,
                price_per_night=Decimal("0"),
                total_cost=Decimal("0"),
            )
        except ValidationError as e:
            return MalformedRecord(
                line=line,
                reason=f"invalid_values: {e.error_count()} error(s)",
                line_no=line_no,
            )

        return LegacyRecord(reservation=reservation, line_no=line_no)

    def _split_head(self, head: list[str]) -> tuple[str, str, str]:
        """
        Split the leading fields into guest name, room number and room type.

        With exactly three fields the split is positional. With more, the
        first room-number-shaped field followed by a known room type name
        marks the boundary; failing that, extra fields go to the room type.
        """
        if len(head) > 3:
            for i in range(1, len(head) - 1):
                candidate_type = ",".join(head[i + 1:])
                if self._parse_int(head[i]) is not None and candidate_type in self.known_room_types:
                    return ",".join(head[:i]), head[i], candidate_type

        return head[0], head[1], ",".join(head[2:])

    @staticmethod
    def _parse_int(value: str) -> int | None:
        try:
            return int(value.strip())
        except ValueError:
            return None

    @staticmethod
    def _parse_decimal(value: str) -> Decimal | None:
        """Parse a decimal string, rejecting NaN and infinities."""
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
        if not number.is_finite():
            return None
        return number
