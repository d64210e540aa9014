"""Pydantic models for transactions and their categories"""
from enum import Enum
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Closed set of spending/income categories."""
    FOOD = "Food"
    RENT = "Rent"
    TRAVEL = "Travel"
    SHOPPING = "Shopping"
    SUBSCRIPTIONS = "Subscriptions"
    UTILITIES = "Utilities"
    SALARY = "Salary"
    INVESTMENTS = "Investments"
    HEALTH = "Health"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"


CATEGORY_LABELS = [category.value for category in Category]

TransactionType = Literal['income', 'expense']


class Transaction(BaseModel):
    """
    Represents a single income or expense transaction.
    The sign lives in `type`; `amount` is never negative.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, from_attributes=True)

    id: str
    date: date
    description: str
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    category: Category
    type: TransactionType


class TransactionInput(BaseModel):
    """Fields a user submits when adding or editing a transaction."""
    date: date
    description: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    type: TransactionType = 'expense'
