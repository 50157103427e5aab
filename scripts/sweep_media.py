import asyncio
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inkwell.core.logging import configure_logging
from inkwell.db.session import async_session_maker
from inkwell.services.maintenance_service import find_missing_thumbnails, sweep_orphaned_media
from inkwell.services.storage_service import get_storage


async def sweep(dry_run: bool):
    storage = get_storage()
    async with async_session_maker() as session:
        orphans = await sweep_orphaned_media(session, storage, dry_run=dry_run)
        missing = await find_missing_thumbnails(session, storage)
    verb = "Would delete" if dry_run else "Deleted"
    print(f"{verb} {len(orphans)} orphaned file(s)")
    for name in orphans:
        print(f"- {name}")
    if missing:
        print(f"{len(missing)} post(s) reference a missing thumbnail:")
        for post_id in missing:
            print(f"- {post_id}")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] != "--dry-run":
        print("Usage: python scripts/sweep_media.py [--dry-run]")
        sys.exit(1)
    configure_logging()
    asyncio.run(sweep(dry_run="--dry-run" in sys.argv))
