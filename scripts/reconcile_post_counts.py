import asyncio
import sys
import os
from uuid import UUID

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inkwell.core.logging import configure_logging
from inkwell.db.session import async_session_maker
from inkwell.services.user_service import reconcile_post_counts


async def reconcile(user_id: UUID | None):
    async with async_session_maker() as session:
        drifted = await reconcile_post_counts(session, user_id)
    if not drifted:
        print("All post counters are consistent.")
        return
    print(f"Repaired {len(drifted)} counter(s):")
    for uid, (stored, actual) in drifted.items():
        print(f"- {uid}: {stored} -> {actual}")


if __name__ == "__main__":
    if len(sys.argv) > 2:
        print("Usage: python scripts/reconcile_post_counts.py [user_id]")
        sys.exit(1)
    configure_logging()
    asyncio.run(reconcile(UUID(sys.argv[1]) if len(sys.argv) == 2 else None))
