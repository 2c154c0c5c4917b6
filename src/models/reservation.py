"""Pydantic models for reservation data."""

from decimal import Decimal

from pydantic import BaseModel, Field


class Reservation(BaseModel):
    """One guest assigned to one room under a stay date."""

    model_config = {"frozen": True}

    guest_name: str = Field(..., min_length=1)
    room_number: int
    room_type: str
    stay_date: str = Field(..., min_length=1)  # Label only, e.g. "07-01-2025"
    nights: int = Field(ge=1)
    check_in_hour: int = Field(ge=0, le=23)

    # Pricing
    price_per_night: Decimal = Field(ge=0)
    total_cost: Decimal = Field(ge=0)

    @classmethod
    def create(
        cls,
        guest_name: str,
        room_number: int,
        room_type: str,
        stay_date: str,
        nights: int,
        check_in_hour: int,
        price_per_night: Decimal,
    ) -> "Reservation":
        """Build a reservation priced at price_per_night x nights."""
        return cls(
            guest_name=guest_name,
            room_number=room_number,
            room_type=room_type,
            stay_date=stay_date,
            nights=nights,
            check_in_hour=check_in_hour,
            price_per_night=price_per_night,
            total_cost=price_per_night * nights,
        )

    def to_undo_action(self) -> "UndoAction":
        return UndoAction(
            guest_name=self.guest_name,
            stay_date=self.stay_date,
            room_number=self.room_number,
            nights=self.nights,
            price_per_night=self.price_per_night,
            total_cost=self.total_cost,
        )


class UndoAction(BaseModel):
    """Everything needed to reverse one booking without consulting current state."""

    model_config = {"frozen": True}

    guest_name: str
    stay_date: str
    room_number: int
    nights: int
    price_per_night: Decimal
    total_cost: Decimal
