from fastapi import Request
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError
from src.adapter.database import create_db_engine

engine = create_db_engine(ApplicationConfig.DB_URI, echo=False)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_owner_id(request: Request) -> int:
    """Owner scope forwarded by the upstream authentication layer"""
    value = request.headers.get(ApplicationConfig.OWNER_HEADER, "")
    if not value.isdigit():
        raise ClientError(
            Error(
                code="OWNER_REQUIRED",
                message=f"Header {ApplicationConfig.OWNER_HEADER} with a numeric owner id is required",
            ),
            status_code=401,
        )
    return int(value)
