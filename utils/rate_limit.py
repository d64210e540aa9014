"""Shared slowapi limiter for the endpoints that reach the AI service."""
import os

from dotenv import load_dotenv
from slowapi import Limiter
from slowapi.util import get_remote_address

load_dotenv()

AI_RATE_LIMIT = os.getenv("AI_RATE_LIMIT", "15/minute")

# In-memory storage; limits reset when the process restarts
limiter = Limiter(key_func=get_remote_address)
