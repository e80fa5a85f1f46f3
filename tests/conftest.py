from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.db.session import create_engine, create_schema, create_session_factory
from expense_categorizer.services.seeding import seed_default_categories


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_schema(engine)
    factory = create_session_factory(engine)
    await seed_default_categories(factory)
    yield factory
    await engine.dispose()
