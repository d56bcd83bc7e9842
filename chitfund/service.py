import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

from .engine import build_statement
from .models import (
    AuctionEvent,
    LedgerStatement,
    Member,
    Receipt,
)

logger = logging.getLogger(__name__)


class ChitLedgerError(Exception):
    pass


class MemberNotFoundError(ChitLedgerError):
    pass


class InvalidDateRangeError(ChitLedgerError):
    pass


class InMemoryStorage:
    def __init__(self, seed: bool = True):
        self.members: dict[str, Member] = {}
        self.receipts: list[Receipt] = []
        self.auctions: list[AuctionEvent] = []
        if seed:
            self._seed_data()

    def _seed_data(self):
        self.add_member(Member(
            mobile="9876543210", name="Lakshmi Devi", group_name="GROUP-A",
            premium=Decimal("5000.00"), enrolled_at=date(2024, 1, 1), premium_months=20,
        ))
        self.add_member(Member(
            mobile="9123456780", name="Ravi Kumar", group_name="GROUP-A",
            premium=Decimal("5000.00"), enrolled_at=date(2024, 1, 1), premium_months=20,
        ))

        self.add_receipt(Receipt(
            mobile="9876543210", customer_name="Lakshmi Devi", group_name="GROUP-A",
            receipt_no="R-0001", collection_date="15-01-2024",
            cash_amount=Decimal("3000.00"), online_amount=Decimal("2000.00"),
            collection_agent="Suresh", received_to="Office",
        ))
        self.add_receipt(Receipt(
            mobile="9876543210", customer_name="Lakshmi Devi", group_name="GROUP-A",
            receipt_no="R-0002", collection_date="10-03-2024",
            cash_amount=Decimal("9600.00"),
            collection_agent="Suresh", received_to="Office",
        ))

        self.add_auction(AuctionEvent(
            group_name="GROUP-A", auction_date=date(2024, 2, 20), winner_name="Ravi Kumar",
            per_person_premium=Decimal("4600.00"), auction_amount=Decimal("8000.00"),
            winning_amount=Decimal("92000.00"), bonus_per_person=Decimal("400.00"),
        ))
        self.add_auction(AuctionEvent(
            group_name="GROUP-A", auction_date=date(2024, 3, 20), winner_name="Lakshmi Devi",
            per_person_premium=Decimal("4800.00"), auction_amount=Decimal("4000.00"),
            winning_amount=Decimal("96000.00"), bonus_per_person=Decimal("200.00"),
        ))

    def add_member(self, member: Member) -> Member:
        self.members[member.mobile] = member
        return member

    def add_receipt(self, receipt: Receipt) -> Receipt:
        if receipt.created_at is None:
            receipt = receipt.model_copy(update={"created_at": datetime.now(timezone.utc)})
        elif receipt.created_at.tzinfo is None:
            receipt = receipt.model_copy(
                update={"created_at": receipt.created_at.replace(tzinfo=timezone.utc)}
            )
        self.receipts.append(receipt)
        return receipt

    def add_auction(self, auction: AuctionEvent) -> AuctionEvent:
        self.auctions.append(auction)
        return auction

    def load_json(self, path: Union[str, Path]) -> None:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        for item in data.get("members", []):
            self.add_member(Member(**item))
        for item in data.get("receipts", []):
            self.add_receipt(Receipt(**item))
        for item in data.get("auctions", []):
            self.add_auction(AuctionEvent(**item))
        logger.info(
            "Loaded %d members, %d receipts, %d auctions from %s",
            len(data.get("members", [])), len(data.get("receipts", [])),
            len(data.get("auctions", [])), path,
        )


class LedgerService:
    def __init__(self, storage: Optional[InMemoryStorage] = None):
        self.storage = storage or InMemoryStorage()

    def get_member(self, mobile: str) -> Member:
        member = self.storage.members.get(mobile)
        if member is None:
            logger.info("No member registered for mobile %s", mobile)
            raise MemberNotFoundError(f"Member {mobile} not found")
        return member

    def list_receipts(self, mobile: str) -> list[Receipt]:
        receipts = [r for r in self.storage.receipts if r.mobile == mobile]
        receipts.sort(key=lambda r: r.created_at or datetime.min.replace(tzinfo=timezone.utc))
        return receipts

    def list_auctions(self, group_name: str) -> list[AuctionEvent]:
        auctions = [a for a in self.storage.auctions if a.group_name == group_name]
        auctions.sort(key=lambda a: a.auction_date)
        return auctions

    def get_statement(
        self,
        mobile: str,
        range_from: Optional[date] = None,
        range_to: Optional[date] = None,
        today: Optional[date] = None,
    ) -> LedgerStatement:
        if range_from and range_to and range_from > range_to:
            raise InvalidDateRangeError(
                f"Start date {range_from.isoformat()} is after end date {range_to.isoformat()}"
            )

        member = self.get_member(mobile)
        return build_statement(
            member,
            self.list_receipts(mobile),
            self.list_auctions(member.group_name),
            range_from=range_from,
            range_to=range_to,
            today=today,
        )
