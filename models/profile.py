"""Pydantic models for the user profile and in-app notifications"""
from typing import Literal

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    member_since: str
    currency: str = "USD"


class AppNotification(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    message: str
    type: Literal['info', 'alert', 'success']
    read: bool = False
    time: str = ""
