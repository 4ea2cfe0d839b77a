import pytest
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Session, relationship

from cqrs_ddd_datagrid import FilterSpec, QueryProxy, StringOperatorType


class Base(DeclarativeBase):
    pass


class AuthorRecord(Base):
    __tablename__ = "authors"
    id = Column(Integer, primary_key=True)
    name = Column(String)


class BookRecord(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=True)
    author_id = Column(Integer, ForeignKey("authors.id"))
    author = relationship("AuthorRecord")


def seed():
    ann = AuthorRecord(id=1, name="Ann")
    bob = AuthorRecord(id=2, name="Bob")
    return [
        ann,
        bob,
        BookRecord(id=1, title="Alpha", author=ann),
        BookRecord(id=2, title="alpha", author=bob),
        BookRecord(id=3, title="Beta", author=ann),
        BookRecord(id=4, title=None, author=bob),
        BookRecord(id=5, title="Alpha", author=bob),
    ]


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(seed())
        session.commit()
        yield session
    engine.dispose()


def ids(books):
    return [book.id for book in books]


def test_unfiltered_query_returns_all_in_identifier_order(session):
    books = QueryProxy.from_entity(BookRecord).execute(session)

    assert ids(books) == [1, 2, 3, 4, 5]


def test_case_insensitive_equal(session):
    proxy = QueryProxy.from_entity(BookRecord)
    proxy.apply_filter(
        FilterSpec("title", case_sensitive=False), "ALPHA", StringOperatorType.EQUAL
    )

    assert ids(proxy.execute(session)) == [1, 2, 5]


def test_equal_is_exact(session):
    proxy = QueryProxy.from_entity(BookRecord)
    proxy.apply_filter(FilterSpec("title"), "Alpha", StringOperatorType.EQUAL)

    assert ids(proxy.execute(session)) == [1, 5]


def test_not_contains_keeps_null_rows(session):
    proxy = QueryProxy.from_entity(BookRecord)
    proxy.apply_filter(FilterSpec("title"), "a", StringOperatorType.NOT_CONTAINS)

    assert ids(proxy.execute(session)) == [4]


def test_not_equal_keeps_null_rows(session):
    proxy = QueryProxy.from_entity(BookRecord)
    proxy.apply_filter(FilterSpec("title"), "Alpha", StringOperatorType.NOT_EQUAL)

    assert ids(proxy.execute(session)) == [2, 3, 4]


def test_filter_through_association(session):
    proxy = QueryProxy.from_entity(BookRecord)
    spec = FilterSpec("author", field_name="name", parent_association_chain=["author"])
    proxy.apply_filter(spec, "Ann", StringOperatorType.EQUAL)

    assert ids(proxy.execute(session)) == [1, 3]


def test_pages_over_duplicate_sort_values_are_disjoint(session):
    proxy = QueryProxy.from_entity(BookRecord)
    proxy.set_sort([], "title", "DESC")

    pages = []
    for offset in (0, 2, 4):
        proxy.set_page_window(offset=offset, limit=2)
        pages.append(ids(proxy.execute(session)))

    seen = [book_id for page in pages for book_id in page]
    assert sorted(seen) == [1, 2, 3, 4, 5]
    assert [len(page) for page in pages] == [2, 2, 1]


def test_ties_broken_by_identifier(session):
    proxy = QueryProxy.from_entity(BookRecord)
    proxy.set_sort(["author"], "name", "ASC")

    assert ids(proxy.execute(session)) == [1, 3, 2, 4, 5]


@pytest.mark.asyncio
async def test_execute_async():
    engine = create_async_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(engine) as session:
        session.add_all(seed())
        await session.commit()

        proxy = QueryProxy.from_entity(BookRecord)
        proxy.apply_filter(FilterSpec("title"), "Alpha", StringOperatorType.EQUAL)
        proxy.set_sort([], "title", "ASC").set_page_window(offset=1, limit=5)

        books = await proxy.execute_async(session)

    await engine.dispose()
    assert ids(books) == [5]
