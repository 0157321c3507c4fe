"""Script to seed the bootstrap admin (and optionally sample devices) into the database."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the parent directory to the path so we can import from app
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings
from app.db.db import init_db, close_db, db_session
from app.db.seed import ensure_bootstrap_admin, ensure_sample_devices


async def seed(with_devices: bool) -> None:
    await init_db()
    try:
        async with db_session() as session:
            user = await ensure_bootstrap_admin(session)
            print("=" * 50)
            print(f"Bootstrap admin: {user.username} (role: {user.role}, id: {user.id})")
            if with_devices:
                added = await ensure_sample_devices(session)
                print(f"Sample devices added: {added}")
            print("=" * 50)
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Seed the device console database")
    parser.add_argument("--with-devices", action="store_true", help="also register the sample devices")
    args = parser.parse_args()

    print(f"Seeding {settings.APP_NAME} database...")
    asyncio.run(seed(args.with_devices))
    print("Done!")


if __name__ == "__main__":
    main()
