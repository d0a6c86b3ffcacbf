"""
Migration 001: Create the SwipeChef tables

Creates:
- recipes, liked_recipes
- households, household_members, household_invitations
- user_settings
- meal_plans

Existing tables are left alone.

Run with: python -m migrations.001_create_core_tables [down]
"""

import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from swipechef.db.database import Base, engine
import swipechef.models  # noqa: F401  (registers every table on Base.metadata)


async def upgrade():
    """Create every table that doesn't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print(f"✅ Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def downgrade():
    """Drop every SwipeChef table."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    print("✅ Downgrade complete: removed all tables")


async def main(direction: str):
    try:
        await (downgrade() if direction == "down" else upgrade())
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "up"))
