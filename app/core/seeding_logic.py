from sqlmodel import select
from sqlalchemy import func
from loguru import logger
from app.models.room import Room
from app.models.enums import UserRole
from app.services.auth_service import get_user_by_email, create_user
from app.core.database import AsyncSessionLocal
from app.core.config import settings

# ----------------------------------------------------------------
# 1. STATIC DATA
# ----------------------------------------------------------------

# floor -> (room numbers, beds per room, room type)
STARTER_ROOMS = {
    "1": ([f"1{n:02d}" for n in range(1, 11)], 2, "Double"),
    "2": ([f"2{n:02d}" for n in range(1, 11)], 2, "Double"),
    "3": ([f"3{n:02d}" for n in range(1, 6)], 3, "Triple"),
    "4": ([f"4{n:02d}" for n in range(1, 6)], 1, "Single"),
}


# ----------------------------------------------------------------
# 2. SEEDING FUNCTIONS
# ----------------------------------------------------------------

async def seed_all():
    """Master function to run all seeding logic."""
    async with AsyncSessionLocal() as session:
        try:
            await seed_admin_user(session)
            if settings.SEED_ROOMS:
                await seed_rooms(session)
            logger.success("Seeding complete.")
        except Exception as e:
            logger.error(f"Seeding failed: {e}")
            await session.rollback()


async def seed_admin_user(session):
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
        return

    existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
    if existing:
        logger.info("Super Admin already exists. Skipping.")
        return

    logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
    await create_user(
        session=session,
        name=settings.SUPER_ADMIN_NAME or "Super Admin",
        email=settings.SUPER_ADMIN_EMAIL,
        password=settings.SUPER_ADMIN_PASSWORD,
        role=UserRole.Admin,
    )
    logger.success("Super Admin created successfully.")


async def seed_rooms(session):
    """Only seeds an empty inventory; existing rooms are never touched."""
    existing = (await session.execute(select(func.count(Room.id)))).scalar_one()
    if existing:
        logger.info(f"{existing} room(s) already present. Skipping room seeding.")
        return

    for floor, (numbers, beds, room_type) in STARTER_ROOMS.items():
        for number in numbers:
            session.add(Room(room_number=number, floor=floor, max_occupancy=beds, room_type=room_type))
        logger.info(f"Creating {len(numbers)} room(s) on floor {floor}")

    await session.commit()
