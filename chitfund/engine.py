"""
Ledger reconciliation engine.

Turns a member, their receipts and their group's auction events into a
month-by-month schedule of premium due, amount paid and running balance.

Allocation policy is FIFO carry-forward: every usable receipt joins a single
pool that settles the oldest unpaid month first. Months won at auction are
auto-credited before the pool is applied.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from .models import AuctionEvent, LedgerMonth, LedgerStatement, Member, Receipt

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

MonthKey = tuple[int, int]

COLLECTION_DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%d.%m.%Y", "%Y-%m-%d")


def parse_collection_date(value: Union[date, str, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in COLLECTION_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def month_key(d: date) -> MonthKey:
    return (d.year, d.month)


def next_month(key: MonthKey) -> MonthKey:
    year, month = key
    return (year + 1, 1) if month == 12 else (year, month + 1)


def month_span(start: MonthKey, end: MonthKey) -> list[MonthKey]:
    months = []
    cursor = start
    while cursor <= end:
        months.append(cursor)
        cursor = next_month(cursor)
    return months


def _auction_map(auctions: Iterable[AuctionEvent]) -> dict[MonthKey, AuctionEvent]:
    # Stable sort keeps input order for same-day duplicates; the last one wins.
    by_month: dict[MonthKey, AuctionEvent] = {}
    for auction in sorted(auctions, key=lambda a: a.auction_date):
        by_month[month_key(auction.auction_date)] = auction
    return by_month


def _usable_receipts(receipts: Iterable[Receipt]) -> tuple[list[tuple[date, Decimal]], int]:
    usable, skipped = [], 0
    for receipt in receipts:
        collected_on = parse_collection_date(receipt.collection_date)
        if collected_on is None:
            skipped += 1
            logger.warning(
                "Skipping receipt %s for %s: unusable collection date %r",
                receipt.receipt_no, receipt.mobile, receipt.collection_date,
            )
            continue
        usable.append((collected_on, receipt.total))
    usable.sort(key=lambda r: r[0])
    return usable, skipped


def _reconcile(member: Member, receipts: Iterable[Receipt], auctions: Iterable[AuctionEvent],
               today: date) -> tuple[list[LedgerMonth], Decimal, int]:
    auction_by_month = _auction_map(auctions)
    payments, skipped = _usable_receipts(receipts)

    universe = set(month_span(month_key(member.enrolled_at), month_key(today)))
    universe.update(month_key(collected_on) for collected_on, _ in payments)
    universe.update(auction_by_month)

    winner = member.name.strip()
    rows: dict[MonthKey, dict] = {}
    for key in sorted(universe):
        auction = auction_by_month.get(key)
        due = member.premium
        if auction is not None and auction.per_person_premium:
            due = auction.per_person_premium
        if due < ZERO:
            logger.warning("Clamping negative premium %s to zero for %s in %d-%02d",
                           due, member.mobile, key[0], key[1])
            due = ZERO
        is_winner = auction is not None and auction.winner_name.strip() == winner
        rows[key] = {
            "year": key[0],
            "month": key[1],
            "due": due,
            "paid": ZERO,
            "auto_paid": due if is_winner else ZERO,
            "is_winner": is_winner,
            "auction_applied": auction is not None and bool(auction.per_person_premium),
        }

    pool = sum((amount for _, amount in payments), ZERO)
    for row in rows.values():
        if pool <= ZERO:
            break
        balance = row["due"] - row["paid"] - row["auto_paid"]
        if balance > ZERO:
            used = min(balance, pool)
            row["paid"] += used
            pool -= used

    months = []
    running_due = ZERO
    for row in rows.values():
        pending = max(row["due"] - (row["paid"] + row["auto_paid"]), ZERO)
        running_due += pending
        months.append(LedgerMonth(pending=pending, running_due=running_due, **row))

    logger.debug("Reconciled %s: %d months, running due %s, unallocated %s, skipped %d",
                 member.mobile, len(months), running_due, pool, skipped)
    return months, pool, skipped


def _in_range(row: LedgerMonth, range_from: Optional[date], range_to: Optional[date]) -> bool:
    if range_from is not None and row.key < month_key(range_from):
        return False
    if range_to is not None and row.key > month_key(range_to):
        return False
    return True


def compute_ledger(member: Member, receipts: Iterable[Receipt], auctions: Iterable[AuctionEvent],
                   range_from: Optional[date] = None, range_to: Optional[date] = None,
                   today: Optional[date] = None) -> list[LedgerMonth]:
    months, _, _ = _reconcile(member, receipts, auctions, today or date.today())
    return [row for row in months if _in_range(row, range_from, range_to)]


def build_statement(member: Member, receipts: Iterable[Receipt], auctions: Iterable[AuctionEvent],
                    range_from: Optional[date] = None, range_to: Optional[date] = None,
                    today: Optional[date] = None) -> LedgerStatement:
    today = today or date.today()
    months, unallocated, skipped = _reconcile(member, receipts, auctions, today)
    visible = [row for row in months if _in_range(row, range_from, range_to)]

    return LedgerStatement(
        member=member,
        months=visible,
        range_from=range_from,
        range_to=range_to,
        total_due=sum((m.due for m in visible), ZERO),
        total_paid=sum((m.paid for m in visible), ZERO),
        total_auto_paid=sum((m.auto_paid for m in visible), ZERO),
        closing_due=visible[-1].running_due if visible else ZERO,
        unallocated=unallocated,
        skipped_receipts=skipped,
        generated_on=today,
    )
