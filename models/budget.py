"""Pydantic models for monthly category budgets"""
from pydantic import BaseModel, ConfigDict, Field

from models.transaction import Category


class Budget(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    limit: float = Field(..., gt=0, allow_inf_nan=False)


class BudgetLimit(BaseModel):
    limit: float = Field(..., gt=0, allow_inf_nan=False)


class BudgetProgress(BaseModel):
    """A budget together with how much of it this month's expenses used."""
    category: Category
    limit: float
    spent: float
    percentage: float
    remaining: float
    is_over: bool
    is_near: bool
