"""Document store adapter tests.

The contract tests run against both the SQLAlchemy adapter (SQLite in
memory) and the in-memory fake used by the service tests.
"""

import uuid

import pytest
import pytest_asyncio
from sqlalchemy import text

from core.config import Settings
from core.database import create_collection, create_engine, create_session_maker
from repositories.blog_repository import (
    BlogDocumentStore,
    StoreError,
    StoreInternalError,
    StoreUnavailableError,
)
from tests.fakes import InMemoryBlogStore

FIELDS = {"author_id": "a", "title": "t", "content": "c"}


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request: pytest.FixtureRequest, test_settings: Settings):
    if request.param == "memory":
        yield InMemoryBlogStore()
        return

    engine = create_engine(test_settings)
    await create_collection(engine)
    yield BlogDocumentStore(create_session_maker(engine))
    await engine.dispose()


# =============================================================================
# CONTRACT TESTS
# =============================================================================


@pytest.mark.asyncio
class TestBlogStoreContract:
    """Behaviour every BlogStore implementation must share."""

    async def test_insert_returns_native_id(self, store):
        blog_id = await store.insert(**FIELDS)

        assert isinstance(blog_id, uuid.UUID)

    async def test_find_returns_inserted_fields(self, store):
        blog_id = await store.insert(**FIELDS)

        document = await store.find_by_id(blog_id)

        assert document is not None
        assert document.id == blog_id
        assert document.author_id == "a"
        assert document.title == "t"
        assert document.content == "c"

    async def test_find_missing_returns_none(self, store):
        assert await store.find_by_id(uuid.uuid4()) is None

    async def test_replace_overwrites_every_field(self, store):
        blog_id = await store.insert(**FIELDS)

        replaced = await store.replace_by_id(
            blog_id, author_id="a2", title="t2", content="c2"
        )
        document = await store.find_by_id(blog_id)

        assert replaced is True
        assert (document.author_id, document.title, document.content) == (
            "a2",
            "t2",
            "c2",
        )
        assert document.id == blog_id

    async def test_replace_missing_returns_false(self, store):
        replaced = await store.replace_by_id(uuid.uuid4(), **FIELDS)

        assert replaced is False

    async def test_delete_reports_count(self, store):
        blog_id = await store.insert(**FIELDS)

        assert await store.delete_by_id(blog_id) == 1
        assert await store.delete_by_id(blog_id) == 0
        assert await store.find_by_id(blog_id) is None

    async def test_delete_leaves_other_documents(self, store):
        keep = await store.insert(**FIELDS)
        drop = await store.insert(**FIELDS)

        await store.delete_by_id(drop)

        assert await store.find_by_id(keep) is not None

    async def test_identical_inserts_get_distinct_ids(self, store):
        ids = {await store.insert(**FIELDS) for _ in range(5)}

        assert len(ids) == 5


# =============================================================================
# SQL ADAPTER ERROR TRANSLATION
# =============================================================================


@pytest.mark.asyncio
class TestBlogDocumentStoreErrors:
    """Driver errors surface as StoreError subclasses."""

    async def test_unreachable_store_raises_unavailable(self):
        settings = Settings(
            database_url="sqlite+aiosqlite:////nonexistent-dir/missing/blog.db"
        )
        engine = create_engine(settings)
        store = BlogDocumentStore(create_session_maker(engine))

        with pytest.raises(StoreUnavailableError):
            await store.insert(**FIELDS)

        await engine.dispose()

    async def test_missing_collection_raises_store_error(self, test_settings):
        engine = create_engine(test_settings)
        store = BlogDocumentStore(create_session_maker(engine))

        with pytest.raises(StoreError):
            await store.find_by_id(uuid.uuid4())

        await engine.dispose()

    async def test_constraint_violation_raises_internal(self, sql_store):
        with pytest.raises(StoreInternalError):
            await sql_store.insert(author_id=None, title="t", content="c")

    async def test_store_usable_after_failure(self, sql_store):
        """A failed call doesn't poison the connection for the next one."""
        with pytest.raises(StoreInternalError):
            await sql_store.insert(author_id=None, title="t", content="c")

        blog_id = await sql_store.insert(**FIELDS)

        assert await sql_store.find_by_id(blog_id) is not None


# =============================================================================
# TEXT ENCODING
# =============================================================================


@pytest.mark.asyncio
class TestNulSafeText:
    """Postgres text can't hold U+0000, so field values are escaped at rest."""

    @pytest.mark.parametrize(
        "value", ["a\x00b", "\x00", "back\\slash", "\\0", "\\\x00\\", ""]
    )
    async def test_values_round_trip(self, store, value):
        blog_id = await store.insert(author_id=value, title=value, content=value)
        assert await store.replace_by_id(
            blog_id, author_id=value, title=value, content=value + "!"
        )

        document = await store.find_by_id(blog_id)

        assert (document.author_id, document.title, document.content) == (
            value,
            value,
            value + "!",
        )

    async def test_nul_never_reaches_the_database(self, test_engine, sql_store):
        await sql_store.insert(author_id="a", title="t", content="a\x00b")

        async with test_engine.connect() as conn:
            stored = (await conn.execute(text("SELECT content FROM blog"))).scalar_one()

        assert "\x00" not in stored
        assert stored == "a\\0b"
