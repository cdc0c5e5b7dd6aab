"""
Seed script: creates a demo admin and one employee with a Mon-Fri weekly template.

Usage (inside container):
    python -m timeclock.db.seed
"""

import asyncio

from sqlalchemy import select

from timeclock.core.security import create_access_token
from timeclock.db.models import User
from timeclock.db.session import AsyncSessionLocal
from timeclock.services.schedule_resolver import WeeklyDay
from timeclock.services.schedule_store import SqlScheduleStore

DEMO_WEEK = [
    WeeklyDay(day_of_week=0, start_time="00:00", end_time="00:00", is_day_off=True),
    *[
        WeeklyDay(day_of_week=d, start_time="09:00", end_time="17:00", is_day_off=False)
        for d in range(1, 6)
    ],
    WeeklyDay(day_of_week=6, start_time="00:00", end_time="00:00", is_day_off=True),
]


async def get_or_create_user(session, email: str, full_name: str, role: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"User {email} already exists, skipping.")
        return user

    user = User(email=email, full_name=full_name, role=role, is_active=True)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    print(f"Created {role} user: id={user.id}")
    return user


async def main():
    async with AsyncSessionLocal() as session:
        admin = await get_or_create_user(session, "admin@example.com", "System Administrator", "admin")
        employee = await get_or_create_user(session, "employee@example.com", "Demo Employee", "employee")

        store = SqlScheduleStore(session)
        if await store.get_weekly_template(employee.id) is None:
            await store.upsert_weekly_template(employee.id, DEMO_WEEK)
            print("Created Mon-Fri 09:00-17:00 template for demo employee.")

        print("Admin token:", create_access_token({"sub": str(admin.id), "role": "admin"}))
        print("Employee token:", create_access_token({"sub": str(employee.id), "role": "employee"}))
        print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(main())
