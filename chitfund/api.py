import logging
import sys
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .config import get_settings
from .models import (
    AuctionListResponse, LedgerStatement, Member, ReceiptListResponse,
)
from .render import render_pdf
from .service import (
    InMemoryStorage, InvalidDateRangeError, LedgerService, MemberNotFoundError,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Monthly premium ledger for chit fund members, reconciled against receipts and auctions",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

storage = InMemoryStorage(seed=settings.seed_demo_data)
if settings.data_file:
    storage.load_json(settings.data_file)

ledger_service = LedgerService(storage)


def _statement_or_error(mobile: str, range_from: Optional[date], range_to: Optional[date]) -> LedgerStatement:
    try:
        return ledger_service.get_statement(mobile, range_from, range_to)
    except MemberNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Member {mobile} not found")
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "chit-ledger"}


@app.get("/members/{mobile}", response_model=Member, tags=["Members"])
def get_member(mobile: str) -> Member:
    try:
        return ledger_service.get_member(mobile)
    except MemberNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Member {mobile} not found")


@app.get("/payments/{mobile}", response_model=ReceiptListResponse, tags=["Payments"])
def get_payments(mobile: str) -> ReceiptListResponse:
    receipts = ledger_service.list_receipts(mobile)
    return ReceiptListResponse(
        mobile=mobile,
        receipts=receipts,
        total_count=len(receipts),
        total_amount=sum((r.total for r in receipts), Decimal("0")),
    )


@app.get("/auctions/{group_name}", response_model=AuctionListResponse, tags=["Auctions"])
def get_auctions(group_name: str) -> AuctionListResponse:
    auctions = ledger_service.list_auctions(group_name)
    return AuctionListResponse(group_name=group_name, auctions=auctions, total_count=len(auctions))


@app.get("/ledger/{mobile}", response_model=LedgerStatement, tags=["Ledger"])
def get_ledger(
    mobile: str,
    range_from: Optional[date] = Query(None, alias="from"),
    range_to: Optional[date] = Query(None, alias="to"),
) -> LedgerStatement:
    return _statement_or_error(mobile, range_from, range_to)


@app.get("/ledger-pdf/{mobile}", tags=["Ledger"])
def get_ledger_pdf(
    mobile: str,
    range_from: Optional[date] = Query(None, alias="from"),
    range_to: Optional[date] = Query(None, alias="to"),
) -> Response:
    statement = _statement_or_error(mobile, range_from, range_to)
    pdf = render_pdf(statement, settings)
    logger.info("Rendered ledger PDF for %s: %d months, %d bytes", mobile, len(statement.months), len(pdf))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": "inline; filename=Ledger.pdf"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
