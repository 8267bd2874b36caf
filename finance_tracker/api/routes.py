"""
Ledger HTTP Routes

Thin adapters from HTTP to LedgerService. Request bodies are taken as raw
JSON objects and validated by the service, so the HTTP server and the
offline mirror report exactly the same validation errors.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from finance_tracker.ledger import LedgerService
from finance_tracker.models.ledger import (
    Budget,
    Category,
    Goal,
    Transaction,
    TransactionFilters,
    TransactionType,
)
from finance_tracker.models.views import (
    BudgetOverview,
    DashboardSummary,
    GoalProgress,
    StatisticsSummary,
)


router = APIRouter(prefix="/api")


def get_service(request: Request) -> LedgerService:
    return request.app.state.service


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/categories", response_model=list[Category])
async def list_categories(service: LedgerService = Depends(get_service)):
    return await service.list_categories()


@router.post("/categories", response_model=Category)
async def create_category(
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_service),
):
    return await service.create_category(payload)


@router.delete("/categories/{category_id}")
async def delete_category(category_id: str, service: LedgerService = Depends(get_service)):
    await service.delete_category(category_id)
    return {"message": "Category deleted successfully"}


# =============================================================================
# TRANSACTIONS
# =============================================================================

@router.get("/transactions", response_model=list[Transaction])
async def list_transactions(
    type: Optional[TransactionType] = Query(None),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    service: LedgerService = Depends(get_service),
):
    filters = TransactionFilters(
        type=type,
        category_id=category_id or None,
        month=month,
        year=year,
    )
    return await service.list_transactions(filters)


@router.post("/transactions", response_model=Transaction)
async def create_transaction(
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_service),
):
    return await service.create_transaction(payload)


@router.put("/transactions/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_service),
):
    return await service.update_transaction(transaction_id, payload)


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(transaction_id: str, service: LedgerService = Depends(get_service)):
    await service.delete_transaction(transaction_id)
    return {"success": True}


# =============================================================================
# BUDGETS
# =============================================================================

@router.get("/budgets", response_model=list[Budget])
async def list_budgets(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    service: LedgerService = Depends(get_service),
):
    return await service.list_budgets(month=month, year=year)


@router.get("/budgets/overview", response_model=BudgetOverview)
async def budget_overview(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    service: LedgerService = Depends(get_service),
):
    return await service.budget_overview(month=month, year=year)


@router.post("/budgets", response_model=Budget)
async def create_budget(
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_service),
):
    return await service.create_budget(payload)


@router.delete("/budgets/{budget_id}")
async def delete_budget(budget_id: str, service: LedgerService = Depends(get_service)):
    await service.delete_budget(budget_id)
    return {"message": "Budget deleted successfully"}


# =============================================================================
# GOALS
# =============================================================================

@router.get("/goals", response_model=list[Goal])
async def list_goals(service: LedgerService = Depends(get_service)):
    return await service.list_goals()


@router.post("/goals", response_model=Goal)
async def create_goal(
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_service),
):
    return await service.create_goal(payload)


@router.patch("/goals/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_service),
):
    return await service.update_goal(goal_id, payload)


@router.get("/goals/{goal_id}/progress", response_model=GoalProgress)
async def goal_progress(goal_id: str, service: LedgerService = Depends(get_service)):
    return await service.goal_progress(goal_id)


@router.delete("/goals/{goal_id}")
async def delete_goal(goal_id: str, service: LedgerService = Depends(get_service)):
    await service.delete_goal(goal_id)
    return {"success": True}


# =============================================================================
# VIEWS
# =============================================================================

@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(service: LedgerService = Depends(get_service)):
    return await service.dashboard()


@router.get("/statistics", response_model=StatisticsSummary)
async def statistics(service: LedgerService = Depends(get_service)):
    return await service.statistics()
