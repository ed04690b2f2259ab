"""Rewards API."""
from fastapi import APIRouter

from app.api.rewards import routes_rewards

router = APIRouter()

router.include_router(routes_rewards.router, prefix="/rewards", tags=["rewards"])
