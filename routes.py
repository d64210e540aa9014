"""API Routes for transactions, budgets, goals and AI features"""
from datetime import date, datetime
from fastapi import APIRouter, UploadFile, File, HTTPException, Body, Depends, Request, Query, Response
from typing import List, Annotated, Optional
import logging
import uuid

from pydantic import BaseModel, Field

from models.budget import Budget, BudgetLimit, BudgetProgress
from models.goal import GoalProgress, SavingGoal, SavingGoalInput
from models.insight import Insight
from models.profile import AppNotification, UserProfile
from models.transaction import Category, Transaction, TransactionInput
from services import assistant_service, csv_service, transactions_service
from services.budgets_service import budget_progress, list_budget_progress
from services.dashboard_service import build_dashboard
from services.goals_service import goal_progress
from services.store import FinanceStore, NotFoundError
from utils.rate_limit import AI_RATE_LIMIT, limiter


class CategorizeInput(BaseModel):
    description: str = Field(..., min_length=1)
    amount: float = Field(0.0, allow_inf_nan=False)


class ChatInput(BaseModel):
    query: str = Field(..., min_length=1)


router = APIRouter()
logger = logging.getLogger(__name__)

# --- Dependency Functions ---
def get_store(request: Request) -> FinanceStore:
    """Dependency to get the in-memory store from the request state."""
    store = getattr(request.state, "store", None)
    if store is None:
        logger.error("Store not found in application state. Was the app started through its lifespan?")
        raise HTTPException(status_code=503, detail="Data store not available.")
    return store

StoreDep = Annotated[FinanceStore, Depends(get_store)]


def get_classifier(request: Request):
    return request.state.classifier


def get_summarizer(request: Request):
    return request.state.summarizer


# --- Health ---

@router.get("/health", summary="Health Check")
async def health(request: Request):
    return {"status": "ok", "ai_enabled": bool(getattr(request.state, "ai_enabled", False))}


# --- Transactions ---

@router.get("/transactions", response_model=List[Transaction], summary="List Transactions", description="Returns transactions most recent first, optionally filtered.")
async def get_transactions(
    store: StoreDep,
    search: Optional[str] = Query(None, description="Case-insensitive match on description or category."),
    category: Optional[Category] = Query(None, description="Only this category."),
    date_from: Optional[date] = Query(None, description="Earliest date (inclusive)."),
    date_to: Optional[date] = Query(None, description="Latest date (inclusive)."),
) -> List[Transaction]:
    logger.info(f"GET /transactions called. search={search!r} category={category} range={date_from}..{date_to}")
    return transactions_service.list_transactions(store, search, category, date_from, date_to)


@router.post("/transactions", response_model=Transaction, status_code=201, summary="Add Transaction")
async def add_transaction(store: StoreDep, request: Request, data: Annotated[TransactionInput, Body(...)]) -> Transaction:
    logger.info(f"POST /transactions called: {data.type} {data.amount} '{data.description[:50]}'")
    try:
        return await transactions_service.create_transaction(store, get_classifier(request), data)
    except ValueError as ve:
        logger.error(f"ValueError adding transaction: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.exception(f"Unexpected error adding transaction: {e}")
        raise HTTPException(status_code=500, detail="An unexpected server error occurred while adding the transaction.")


@router.put("/transactions/{tx_id}", response_model=Transaction, summary="Edit Transaction")
async def edit_transaction(tx_id: str, store: StoreDep, request: Request, data: Annotated[TransactionInput, Body(...)]) -> Transaction:
    logger.info(f"PUT /transactions/{tx_id} called.")
    try:
        return await transactions_service.update_transaction(store, get_classifier(request), tx_id, data)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except Exception as e:
        logger.exception(f"Unexpected error editing transaction {tx_id}: {e}")
        raise HTTPException(status_code=500, detail="An unexpected server error occurred while editing the transaction.")


@router.delete("/transactions/{tx_id}", summary="Delete Transaction")
async def delete_transaction(tx_id: str, store: StoreDep):
    logger.info(f"DELETE /transactions/{tx_id} called.")
    try:
        transactions_service.delete_transaction(store, tx_id)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    return {"status": "success", "deleted_id": tx_id}


@router.post("/transactions/import", summary="Import CSV", description="Uploads a CSV file of transactions and prepends them to the list.")
async def import_transactions(store: StoreDep, request: Request, response: Response, file: UploadFile = File(...)):
    """
    Handles uploading of a single CSV file.
    Only the first rows are categorized through the AI service; the rest default to Other.
    """
    logger.info(f"POST /transactions/import called for file: {file.filename}")

    if file.content_type not in ["text/csv", "text/plain", "application/vnd.ms-excel"] and not (file.filename or "").lower().endswith('.csv'):
        logger.warning(f"Invalid file type attempted upload: {file.filename} ({file.content_type})")
        raise HTTPException(status_code=400, detail=f"Invalid file type: {file.content_type}. Please upload a CSV file.")

    try:
        content = await file.read()
        if not content:
            raise HTTPException(status_code=400, detail="File is empty.")
        try:
            text = content.decode('utf-8-sig')
        except UnicodeDecodeError:
            logger.error(f"Could not decode file {file.filename}. Ensure UTF-8 encoding.")
            raise HTTPException(status_code=400, detail="Could not read file. Ensure UTF-8 encoding.")

        result = await csv_service.import_csv(store, get_classifier(request), text, date.today())
    finally:
        await file.close()

    logger.info(f"File {file.filename} processed. Status: {result['status']}")
    if result["status"] == "error":
        raise HTTPException(status_code=400, detail=result)
    if result["status"] == "partial_success":
        response.status_code = 207
    return result


@router.get("/transactions/export", summary="Export CSV")
async def export_transactions(store: StoreDep):
    content = csv_service.export_csv(store.transactions)
    filename = csv_service.export_filename(date.today())
    logger.info(f"GET /transactions/export: {len(store.transactions)} rows as {filename}")
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --- AI features ---

@router.post("/categorize", summary="Categorize Description")
@limiter.limit(AI_RATE_LIMIT)
async def categorize_description(request: Request, data: Annotated[CategorizeInput, Body(...)]):
    category = await get_classifier(request).classify(data.description, data.amount)
    return {"description": data.description, "category": category.value}


@router.get("/insights", response_model=List[Insight], summary="Financial Insights")
@limiter.limit(AI_RATE_LIMIT)
async def get_insights(
    request: Request,
    store: StoreDep,
    local: bool = Query(False, description="Skip the AI service and use the rule-based summary."),
) -> List[Insight]:
    summarizer = get_summarizer(request)
    now = datetime.now()
    if local:
        return await summarizer.local.summarize(store.transactions, now)
    return await summarizer.summarize(store.transactions, now)


@router.post("/chat", summary="Ask About Your Finances")
@limiter.limit(AI_RATE_LIMIT)
async def chat(request: Request, store: StoreDep, data: Annotated[ChatInput, Body(...)]):
    if not data.query.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty.")
    logger.info(f"POST /chat called with query: {data.query[:50]}...")
    reply = await assistant_service.answer(data.query, store.transactions, request.state.chat_call)
    return {"reply": reply}


# --- Budgets ---

@router.get("/budgets", response_model=List[BudgetProgress], summary="List Budgets")
async def get_budgets(store: StoreDep) -> List[BudgetProgress]:
    return list_budget_progress(store.snapshot.budgets, store.transactions, date.today())


@router.post("/budgets", response_model=BudgetProgress, status_code=201, summary="Create Budget")
async def create_budget(store: StoreDep, budget: Annotated[Budget, Body(...)]) -> BudgetProgress:
    try:
        store.add_budget(budget)
    except ValueError as ve:
        raise HTTPException(status_code=409, detail=str(ve))
    logger.info(f"Budget created: {budget.category.value} limit {budget.limit}")
    return budget_progress(budget, store.transactions, date.today())


@router.put("/budgets/{category}", response_model=BudgetProgress, summary="Update Budget Limit")
async def update_budget(category: Category, store: StoreDep, data: Annotated[BudgetLimit, Body(...)]) -> BudgetProgress:
    try:
        budget = store.update_budget(category, data.limit)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    return budget_progress(budget, store.transactions, date.today())


@router.delete("/budgets/{category}", summary="Delete Budget")
async def delete_budget(category: Category, store: StoreDep):
    try:
        store.remove_budget(category)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    return {"status": "success", "deleted_category": category.value}


# --- Savings goals ---

@router.get("/goals", response_model=List[GoalProgress], summary="List Savings Goals")
async def get_goals(store: StoreDep) -> List[GoalProgress]:
    today = date.today()
    return [goal_progress(goal, today) for goal in store.snapshot.goals]


@router.post("/goals", response_model=SavingGoal, status_code=201, summary="Create Savings Goal")
async def create_goal(store: StoreDep, data: Annotated[SavingGoalInput, Body(...)]) -> SavingGoal:
    goal = SavingGoal(id=str(uuid.uuid4()), **data.model_dump())
    store.add_goal(goal)
    logger.info(f"Goal created: {goal.name} target {goal.target_amount}")
    return goal


@router.put("/goals/{goal_id}", response_model=SavingGoal, summary="Edit Savings Goal")
async def update_goal(goal_id: str, store: StoreDep, data: Annotated[SavingGoalInput, Body(...)]) -> SavingGoal:
    try:
        return store.update_goal(SavingGoal(id=goal_id, **data.model_dump()))
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))


@router.delete("/goals/{goal_id}", summary="Delete Savings Goal")
async def delete_goal(goal_id: str, store: StoreDep):
    try:
        store.remove_goal(goal_id)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    return {"status": "success", "deleted_id": goal_id}


# --- Profile & notifications ---

@router.get("/profile", response_model=UserProfile, summary="Get Profile")
async def get_profile(store: StoreDep) -> UserProfile:
    return store.snapshot.profile


@router.put("/profile", response_model=UserProfile, summary="Update Profile")
async def update_profile(store: StoreDep, profile: Annotated[UserProfile, Body(...)]) -> UserProfile:
    return store.update_profile(profile)


@router.get("/notifications", summary="List Notifications")
async def get_notifications(store: StoreDep):
    notifications = store.snapshot.notifications
    return {
        "notifications": [n.model_dump() for n in notifications],
        "unread_count": sum(1 for n in notifications if not n.read),
    }


@router.post("/notifications/{notification_id}/read", response_model=AppNotification, summary="Mark Notification Read")
async def mark_notification_read(notification_id: str, store: StoreDep) -> AppNotification:
    try:
        return store.mark_notification_read(notification_id)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))


@router.delete("/notifications/{notification_id}", summary="Delete Notification")
async def delete_notification(notification_id: str, store: StoreDep):
    try:
        store.remove_notification(notification_id)
    except NotFoundError as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    return {"status": "success", "deleted_id": notification_id}


@router.delete("/notifications", summary="Clear Notifications")
async def clear_notifications(store: StoreDep):
    logger.warning("DELETE /notifications called. This will clear all notifications.")
    return {"status": "success", "deleted_count": store.clear_notifications()}


# --- Dashboard & reset ---

@router.get("/dashboard", summary="Dashboard Summary")
async def get_dashboard(store: StoreDep):
    return build_dashboard(store.snapshot, date.today())


@router.post("/reset", summary="Reset Data", description="Restores the generated demo data, default budgets, goals and notifications.")
async def reset_data(store: StoreDep):
    logger.warning("POST /reset endpoint called. All changes will be discarded.")
    snapshot = store.reset()
    return {"status": "success", "transaction_count": len(snapshot.transactions)}
