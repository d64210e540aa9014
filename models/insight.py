"""Pydantic model for computed insights"""
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class Insight(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    type: Literal['alert', 'success', 'info']


class InsightList(BaseModel):
    """Structured output expected from the insight analyst agent."""
    insights: List[Insight] = Field(..., description="Three key insights, patterns or savings recommendations.")
