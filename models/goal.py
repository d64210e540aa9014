"""Pydantic models for savings goals"""
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class SavingGoal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    target_amount: float = Field(..., gt=0, allow_inf_nan=False)
    current_amount: float = Field(..., ge=0, allow_inf_nan=False)
    deadline: date


class SavingGoalInput(BaseModel):
    name: str = Field(..., min_length=1)
    target_amount: float = Field(..., gt=0, allow_inf_nan=False)
    current_amount: float = Field(0.0, ge=0, allow_inf_nan=False)
    deadline: date


class GoalProgress(BaseModel):
    goal: SavingGoal
    percentage: float
    remaining: float
    days_left: int
