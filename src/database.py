import os
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from dotenv import load_dotenv
from asyncpg import Connection
from uuid import uuid4
from sqlalchemy import Column, Integer, String, func, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

load_dotenv()

POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_DB = os.getenv("POSTGRES_DB_URL", "localhost:5432/club")

class Base(DeclarativeBase): pass

postgres_file_name = f"{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_DB}"

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{postgres_file_name}"
    )

class FixedConnection(Connection):
    def _get_unique_id(self, prefix: str) -> str:
        return f'__asyncpg_{prefix}_{uuid4()}__'


engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args={
        "statement_cache_size": 0,
        "prepared_statement_cache_size": 0,
        "connection_class": FixedConnection,
    }
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def get_session():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def generate_id():
    return str(uuid4())[:8]


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

#ORM
# Generated documents are stored whole; updates replace the JSON value.

class ScheduleORM(Base):
    __tablename__ = "schedules"

    id         = Column(String, primary_key=True)
    name       = Column(String, nullable=False)
    courts     = Column(Integer, nullable=False)
    num_rounds = Column(Integer, nullable=False)
    rounds     = Column(JSONB, nullable=False)   # list[RoundAssignment.to_dict()]
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class BracketORM(Base):
    __tablename__ = "brackets"

    id              = Column(String, primary_key=True)
    name            = Column(String, nullable=False)
    game_type       = Column(String, nullable=False, default="doubles")  # singles | doubles
    assignment_mode = Column(String, nullable=False, default="random")   # random | manual
    bracket_data    = Column(JSONB, nullable=False)   # Bracket.to_dict()
    created_at      = Column(DateTime(timezone=True), server_default=func.now())
