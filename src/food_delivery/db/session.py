from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from food_delivery.config import settings

# Async engine
engine = create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, future=True)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
