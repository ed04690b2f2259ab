"""Seed the redeemable rewards catalog. Idempotent: existing catalog names are skipped."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.domain.rewards.services import RewardService
from app.infra.db.base import Base
from app.infra.db.models import RewardModel
from app.infra.db.repositories.reward_repo import RewardRepositoryImpl
from app.infra.db.repositories.transaction_repo import TransactionRepository
from app.infra.db.session import AsyncSessionLocal, engine


CATALOG = [
    {
        "name": "Reusable Shopping Bag",
        "cost": 20,
        "description": "A sturdy tote made from recycled bottles.",
        "collection_info": "Pick up at any partner recycling center.",
    },
    {
        "name": "Coffee Voucher",
        "cost": 35,
        "description": "One free coffee at a participating cafe.",
        "collection_info": "Voucher code is emailed after redemption.",
    },
    {
        "name": "Tree Planting",
        "cost": 50,
        "description": "We plant a tree in your name.",
        "collection_info": "Certificate is emailed within a week.",
    },
    {
        "name": "Compost Bin",
        "cost": 120,
        "description": "Home compost bin for organic waste.",
        "collection_info": "Delivered to your address within two weeks.",
    },
]


async def seed_catalog() -> int:
    """Insert missing catalog rewards. Returns how many were created."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    created = 0
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(RewardModel.name).where(RewardModel.user_id.is_(None)))
        existing = set(result.scalars().all())
        service = RewardService(RewardRepositoryImpl(session), TransactionRepository(session), session)
        for item in CATALOG:
            if item["name"] in existing:
                print(f"   skip  {item['name']} (exists)")
                continue
            reward = await service.create_catalog_reward(
                name=item["name"],
                cost=item["cost"],
                collection_info=item["collection_info"],
                description=item["description"],
            )
            created += 1
            print(f"✅ added {reward.name} (id {reward.id}, cost {reward.points:g})")
    await engine.dispose()
    return created


if __name__ == "__main__":
    count = asyncio.run(seed_catalog())
    print(f"\nSeeded {count} catalog reward(s).")
