"""bb_ledger REST API: balance, transactions, admission checks and test mode."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bb_common.money import money_to_str
from src.bb_common.response import ApiResponse, success_response
from src.bb_gateway.dependencies import get_ledger
from src.bb_ledger.application.manager import FinancialSafetyManager
from src.bb_ledger.application.schemas import (
    AddTestFundsRequest,
    BalanceResponse,
    CanStartRequest,
    DashboardResponse,
    DepositRequest,
    EntryFeeRequest,
    FinancialCheckResponse,
    FundHealthResponse,
    InvariantReport,
    ModeStatusResponse,
    PayoutRequest,
    PayoutResponse,
    SetTestModeRequest,
    StatusUpdateRequest,
    TransactionItem,
    TransactionListResponse,
    WithdrawRequest,
    WithdrawResponse,
)
from src.bb_ledger.domain.models import GameAdmissionRequest

router = APIRouter(prefix="/ledger", tags=["ledger"])

Ledger = Annotated[FinancialSafetyManager, Depends(get_ledger)]


@router.get("/balance")
async def get_balance(ledger: Ledger, request: Request) -> ApiResponse:
    data = BalanceResponse.from_domain(ledger.get_financial_status())
    return success_response(data.model_dump(), request)


@router.get("/transactions")
async def list_transactions(
    ledger: Ledger,
    request: Request,
    limit: int = Query(100, ge=1, le=1000, description="Newest first"),
) -> ApiResponse:
    items = [TransactionItem.from_domain(t) for t in ledger.get_transaction_history(limit)]
    data = TransactionListResponse(items=items, count=len(items))
    return success_response(data.model_dump(), request)


@router.patch("/transactions/{transaction_id}")
async def update_transaction_status(
    transaction_id: str, body: StatusUpdateRequest, ledger: Ledger, request: Request
) -> ApiResponse:
    txn = await ledger.update_transaction_status(transaction_id, body.status)
    return success_response(TransactionItem.from_domain(txn).model_dump(), request)


@router.post("/deposit")
async def deposit(body: DepositRequest, ledger: Ledger, request: Request) -> ApiResponse:
    txn = await ledger.process_deposit(body.user_id, body.amount, body.method)
    return success_response(TransactionItem.from_domain(txn).model_dump(), request)


@router.post("/withdraw")
async def withdraw(body: WithdrawRequest, ledger: Ledger, request: Request) -> ApiResponse:
    txn = await ledger.process_withdrawal(body.user_id, body.amount, body.method)
    data = WithdrawResponse(
        withdrawn=txn is not None,
        transaction=TransactionItem.from_domain(txn) if txn else None,
        available_balance=money_to_str(ledger.get_financial_status().available_balance),
    )
    return success_response(data.model_dump(), request)


@router.post("/entry-fee")
async def entry_fee(body: EntryFeeRequest, ledger: Ledger, request: Request) -> ApiResponse:
    txn = await ledger.process_entry_fee(body.user_id, body.game_id, body.amount)
    return success_response(TransactionItem.from_domain(txn).model_dump(), request)


@router.post("/payout")
async def payout(body: PayoutRequest, ledger: Ledger, request: Request) -> ApiResponse:
    txn = await ledger.process_prize_payout(body.user_id, body.game_id, body.amount)
    data = PayoutResponse(
        paid=txn is not None,
        transaction=TransactionItem.from_domain(txn) if txn else None,
        available_balance=money_to_str(ledger.get_financial_status().available_balance),
    )
    return success_response(data.model_dump(), request)


@router.post("/can-start")
async def can_start(body: CanStartRequest, ledger: Ledger, request: Request) -> ApiResponse:
    check = ledger.can_start_game(
        GameAdmissionRequest(
            entry_fee=body.entry_fee,
            min_players=body.min_players,
            max_players=body.max_players,
            estimated_players=body.estimated_players,
        )
    )
    return success_response(FinancialCheckResponse.from_domain(check).model_dump(), request)


@router.get("/health")
async def fund_health(ledger: Ledger, request: Request) -> ApiResponse:
    data = FundHealthResponse.from_domain(ledger.emergency_fund_check())
    return success_response(data.model_dump(), request)


@router.get("/dashboard")
async def dashboard(ledger: Ledger, request: Request) -> ApiResponse:
    data = DashboardResponse.from_domain(ledger.get_dashboard_data())
    return success_response(data.model_dump(), request)


@router.post("/test-mode")
async def set_test_mode(body: SetTestModeRequest, ledger: Ledger, request: Request) -> ApiResponse:
    if body.enabled:
        ledger.enable_test_mode()
    else:
        ledger.disable_test_mode()
    return success_response(ModeStatusResponse(test_mode=ledger.is_test_mode).model_dump(), request)


@router.post("/test-funds")
async def add_test_funds(
    body: AddTestFundsRequest, ledger: Ledger, request: Request
) -> ApiResponse:
    txn = await ledger.add_test_funds(body.amount)
    return success_response(TransactionItem.from_domain(txn).model_dump(), request)


@router.get("/invariants")
async def invariants(ledger: Ledger, request: Request) -> ApiResponse:
    violations = ledger.verify_ledger_invariants()
    data = InvariantReport(ok=not violations, violations=violations)
    return success_response(data.model_dump(), request)
