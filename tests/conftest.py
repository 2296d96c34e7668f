import os
from datetime import datetime
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient

os.environ["ENV_STATE"] = "test"

from websiteapi.config import config  # noqa: E402
from websiteapi.database import (  # noqa: E402
    create_database,
    create_schema,
    field_table,
    form_table,
    formrecord_table,
    module_table,
    section_table,
    subform_table,
)
from websiteapi.main import create_app  # noqa: E402


class Seeder:
    """Inserts rows through the test's force-rollback connection."""

    def __init__(self, database):
        self.database = database

    async def module(self, name: str = "Website", description: Optional[str] = "Public website") -> int:
        query = module_table.insert().values(name=name, description=description)
        return await self.database.execute(query)

    async def form(self, module_id: int, name: str = "Homepage", is_published: bool = True) -> int:
        query = form_table.insert().values(
            name=name,
            module_id=module_id,
            is_published=is_published,
            created_at=datetime(2024, 1, 1, 9, 0, 0),
        )
        return await self.database.execute(query)

    async def homepage_form(self, is_published: bool = True) -> int:
        module_id = await self.module()
        return await self.form(module_id, is_published=is_published)

    async def section(self, form_id: int, order: int, title: Optional[str] = None) -> int:
        query = section_table.insert().values(form_id=form_id, order=order, title=title)
        return await self.database.execute(query)

    async def subform(self, section_id: int, order: int, name: str = "items") -> int:
        query = subform_table.insert().values(section_id=section_id, order=order, name=name)
        return await self.database.execute(query)

    async def field(
        self,
        name: str,
        order: int,
        section_id: Optional[int] = None,
        subform_id: Optional[int] = None,
        field_type: str = "text",
        options=None,
    ) -> int:
        values = dict(
            name=name,
            label=name.title(),
            field_type=field_type,
            order=order,
            section_id=section_id,
            subform_id=subform_id,
        )
        if options is not None:
            values["options"] = options
        query = field_table.insert().values(**values)
        return await self.database.execute(query)

    async def record(
        self,
        form_id: int,
        record_data,
        status: str = "published",
        submitted_at: Optional[datetime] = None,
        submitted_by: str = "editor@example.com",
    ) -> int:
        query = formrecord_table.insert().values(
            form_id=form_id,
            record_data=record_data,
            status=status,
            submitted_at=submitted_at or datetime(2024, 1, 1, 12, 0, 0),
            submitted_by=submitted_by,
        )
        return await self.database.execute(query)

    async def raw_record(self, form_id: int, stored_text: str, status: str = "published") -> int:
        """Stores ``stored_text`` verbatim, bypassing JSON encoding."""
        return await self.database.execute(
            query=(
                "INSERT INTO form_record (form_id, record_data, submitted_by, submitted_at, status) "
                "VALUES (:form_id, :record_data, :submitted_by, :submitted_at, :status)"
            ),
            values={
                "form_id": form_id,
                "record_data": stored_text,
                "submitted_by": "editor@example.com",
                "submitted_at": "2024-01-01 12:00:00",
                "status": status,
            },
        )


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def schema():
    create_schema(config.DATABASE_URL)


@pytest.fixture()
def app_config(request):
    overrides = getattr(request, "param", {})
    return config.model_copy(update=overrides)


@pytest.fixture()
def app(app_config):
    return create_app(app_config)


@pytest.fixture()
async def db(app) -> AsyncGenerator:
    database = create_database(config)
    await database.connect()
    app.state.database = database
    yield database
    await database.disconnect()


@pytest.fixture()
def seed(db) -> Seeder:
    return Seeder(db)


@pytest.fixture()
async def async_client(app, db) -> AsyncGenerator:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class FailingDatabase:
    """Stands in for a database whose every query fails."""

    def __init__(self, message: str = "connection refused"):
        self.message = message

    async def fetch_one(self, query, values=None):
        raise ConnectionError(self.message)

    async def fetch_all(self, query, values=None):
        raise ConnectionError(self.message)


@pytest.fixture()
async def failing_client(app) -> AsyncGenerator:
    app.state.database = FailingDatabase()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
