from sqlmodel import SQLModel
from storefront.db.connection import async_engine

# registers every table on SQLModel.metadata
import storefront.schema.full_schema  # noqa: F401


async def create_all_tables(engine=async_engine):
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_all_tables(engine=async_engine):
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
