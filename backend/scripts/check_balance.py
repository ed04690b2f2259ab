"""Compare a user's ledger balance with their transaction log."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.domain.rewards.services import RewardService
from app.infra.db.repositories.reward_repo import RewardRepositoryImpl
from app.infra.db.repositories.transaction_repo import TransactionRepository
from app.infra.db.repositories.user_repo import UserRepositoryImpl
from app.infra.db.session import AsyncSessionLocal, engine


async def check_balance(email: str) -> bool:
    """Print ledger vs. log for the user. Returns True when they agree."""
    async with AsyncSessionLocal() as session:
        user = await UserRepositoryImpl(session).get_by_email(email.strip().lower())
        if not user:
            print(f"❌ User with email '{email}' NOT FOUND.")
            return False

        rewards = RewardService(RewardRepositoryImpl(session), TransactionRepository(session), session)
        result = await rewards.reconcile_balance(user.id)
        earned, redeemed = await rewards.transactions.totals(user.id)

        print(f"User {user.id} ({user.email}, {user.name})")
        print(f"   Ledger balance:   {result.ledger_points:g}")
        print(f"   Earned (log):     {earned:g}")
        print(f"   Redeemed (log):   {redeemed:g}")
        print(f"   Log balance:      {result.transaction_total:g}")
        if result.in_sync:
            print("✅ Ledger and transaction log agree.")
        else:
            print(f"⚠️  Drift of {result.ledger_points - result.transaction_total:g} points.")
    await engine.dispose()
    return result.in_sync


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/check_balance.py <email>")
        sys.exit(1)
    ok = asyncio.run(check_balance(sys.argv[1]))
    sys.exit(0 if ok else 1)
