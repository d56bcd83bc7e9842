from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
from pydantic import BaseModel, Field, ConfigDict, field_validator


def _truncate_to_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class Member(BaseModel):
    mobile: str = Field(..., description="Identifying mobile number")
    name: str
    group_name: str
    premium: Decimal = Field(..., description="Base monthly premium")
    enrolled_at: date
    premium_months: Optional[int] = None
    address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, json_schema_extra={
        "example": {
            "mobile": "9876543210",
            "name": "Lakshmi Devi",
            "group_name": "GROUP-A",
            "premium": 5000.00,
            "enrolled_at": "2024-01-01",
            "premium_months": 20,
        }
    })

    @field_validator("enrolled_at", mode="before")
    @classmethod
    def _truncate_datetime(cls, value):
        return _truncate_to_date(value)


class Receipt(BaseModel):
    mobile: str
    customer_name: Optional[str] = None
    group_name: Optional[str] = None
    receipt_no: Optional[str] = None
    # Raw day-month-year text is kept as-is; the engine decides whether it is usable.
    collection_date: Optional[Union[date, str]] = None
    cash_amount: Decimal = Field(default=Decimal("0"), ge=0)
    online_amount: Decimal = Field(default=Decimal("0"), ge=0)
    collection_agent: Optional[str] = None
    received_to: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("collection_date", mode="before")
    @classmethod
    def _drop_time(cls, value):
        # Unparseable text stays raw so the engine can skip and count it.
        try:
            return _truncate_to_date(value)
        except ValueError:
            return value

    @field_validator("cash_amount", "online_amount", mode="before")
    @classmethod
    def _missing_amount_is_zero(cls, value):
        return Decimal("0") if value is None else value

    @property
    def total(self) -> Decimal:
        return self.cash_amount + self.online_amount


class AuctionEvent(BaseModel):
    group_name: str
    auction_date: date
    winner_name: str
    per_person_premium: Optional[Decimal] = Field(
        default=None, description="Premium every member owes for the auction month"
    )
    auction_amount: Optional[Decimal] = None
    winning_amount: Optional[Decimal] = None
    bonus_per_person: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("auction_date", mode="before")
    @classmethod
    def _truncate_datetime(cls, value):
        return _truncate_to_date(value)


class LedgerMonth(BaseModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    due: Decimal
    paid: Decimal = Decimal("0")
    auto_paid: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    running_due: Decimal = Decimal("0")
    is_winner: bool = False
    auction_applied: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")


class LedgerStatement(BaseModel):
    member: Member
    months: list[LedgerMonth]
    range_from: Optional[date] = None
    range_to: Optional[date] = None
    total_due: Decimal
    total_paid: Decimal
    total_auto_paid: Decimal
    closing_due: Decimal
    unallocated: Decimal = Decimal("0")
    skipped_receipts: int = 0
    generated_on: date


class ReceiptListResponse(BaseModel):
    mobile: str
    receipts: list[Receipt]
    total_count: int
    total_amount: Decimal


class AuctionListResponse(BaseModel):
    group_name: str
    auctions: list[AuctionEvent]
    total_count: int
