import copy

import pytest
from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship

from cqrs_ddd_datagrid import (
    DatagridSettings,
    FilterSpec,
    InvalidArgumentError,
    InvalidOrderError,
    PageWindow,
    QueryProxy,
    SortOrder,
    SQLAlchemyMetadataProvider,
    SQLAlchemyQueryBuilder,
    StringOperatorType,
    UnresolvedAssociationError,
)


class Base(DeclarativeBase):
    pass


class AuthorRecord(Base):
    __tablename__ = "authors"
    id = Column(Integer, primary_key=True)
    name = Column(String)


class BookRecord(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True)
    title = Column(String)
    isbn = Column(String)
    author_id = Column(Integer, ForeignKey("authors.id"))
    author = relationship("AuthorRecord")


class EditionRecord(Base):
    __tablename__ = "editions"
    book_id = Column(Integer, primary_key=True)
    number = Column(Integer, primary_key=True)
    label = Column(String)


@pytest.fixture
def proxy():
    return QueryProxy.from_entity(BookRecord)


def compiled(proxy: QueryProxy) -> str:
    return str(proxy.finalize().compile())


def order_by(proxy: QueryProxy) -> str:
    return compiled(proxy).split("ORDER BY ", 1)[1]


# -- Construction ------------------------------------------------------------


def test_from_entity_uses_settings():
    settings = DatagridSettings(root_alias="b", join_alias_prefix="j")
    proxy = QueryProxy.from_entity(BookRecord, settings=settings)

    assert proxy.query_builder.root_alias == "b"
    assert proxy.entity_join(["author"]) == "j_author"
    assert "FROM books AS b LEFT OUTER JOIN authors AS j_author" in compiled(proxy)


def test_wraps_existing_builder():
    builder = SQLAlchemyQueryBuilder(BookRecord)
    proxy = QueryProxy(builder, SQLAlchemyMetadataProvider())

    assert proxy.query_builder is builder
    assert proxy.sort_by is None
    assert proxy.sort_order is SortOrder.ASC


def test_default_sort_order_from_settings():
    settings = DatagridSettings(default_sort_order="desc")

    proxy = QueryProxy.from_entity(BookRecord, settings=settings)

    assert proxy.sort_order is SortOrder.DESC
    assert order_by(proxy) == "o.id DESC"


# -- Sorting -----------------------------------------------------------------


def test_finalize_without_sort_orders_by_identifier(proxy):
    assert order_by(proxy) == "o.id ASC"


def test_sort_by_root_field(proxy):
    proxy.set_sort([], "title", "desc")

    assert proxy.get_sort() == ("o.title", SortOrder.DESC)
    assert order_by(proxy) == "o.title DESC, o.id DESC"


def test_sort_by_associated_field_joins(proxy):
    proxy.set_sort(["author"], "name", SortOrder.ASC)

    sql = compiled(proxy)
    assert "LEFT OUTER JOIN authors AS s_author ON" in sql
    assert sql.endswith("ORDER BY s_author.name ASC, o.id ASC")


def test_sort_field_goes_before_existing_order_by(proxy):
    proxy.query_builder.add_order_by("o.isbn", "ASC")

    proxy.set_sort_by([], "title")
    proxy.set_sort_order("DESC")

    assert order_by(proxy) == "o.title DESC, o.isbn ASC, o.id DESC"


def test_sort_by_identifier_is_not_repeated(proxy):
    proxy.set_sort([], "id", "DESC")

    assert order_by(proxy) == "o.id DESC"


def test_identifier_already_in_order_by_is_not_repeated(proxy):
    proxy.query_builder.add_order_by("o.id", "DESC")

    assert order_by(proxy) == "o.id DESC"


def test_composite_identifier_appended_in_order():
    proxy = QueryProxy.from_entity(EditionRecord)
    proxy.set_sort([], "label", "asc")

    assert order_by(proxy) == "o.label ASC, o.book_id ASC, o.number ASC"


def test_finalize_is_repeatable(proxy):
    proxy.set_sort([], "title", "DESC")

    first = compiled(proxy)
    second = compiled(proxy)

    assert first == second
    assert proxy.query_builder.order_by_parts == ()


@pytest.mark.parametrize("sort_order", ["", "up", "descending", None, 1])
def test_invalid_sort_order(proxy, sort_order):
    with pytest.raises(InvalidOrderError) as exc_info:
        proxy.set_sort(["author"], "name", sort_order)

    assert exc_info.value.valid_orders == ["ASC", "DESC"]
    assert proxy.sort_by is None
    assert proxy.join_aliases == ()
    assert proxy.query_builder.joins == ()


def test_invalid_sort_order_message(proxy):
    with pytest.raises(InvalidOrderError) as exc_info:
        proxy.set_sort_order("up")

    assert str(exc_info.value) == (
        '"up" is not a valid sort order, valid values are "ASC, DESC"'
    )


def test_sort_on_unknown_association(proxy):
    with pytest.raises(UnresolvedAssociationError):
        proxy.set_sort(["editor"], "name", "ASC")

    assert proxy.query_builder.joins == ()
    assert proxy.get_sort()[0] is None


# -- Filters -----------------------------------------------------------------


def test_parameter_names_are_unique(proxy):
    assert proxy.next_parameter_name() == "0"
    assert proxy.next_parameter_name() == "1"
    assert proxy.parameter_counter == 2


def test_apply_filter(proxy):
    result = proxy.apply_filter(FilterSpec("title"), "dune")

    assert result.active is True
    assert "WHERE o.title LIKE :title_0" in compiled(proxy)
    assert proxy.finalize().compile().params == {"title_0": "%dune%"}


def test_apply_filter_with_operator_override(proxy):
    proxy.apply_filter(FilterSpec("isbn"), "978", StringOperatorType.STARTS_WITH)

    assert proxy.parameters == {"isbn_0": "978%"}


def test_apply_filter_on_association(proxy):
    spec = FilterSpec("author", field_name="name", parent_association_chain=["author"])

    result = proxy.apply_filter(spec, "Herbert", StringOperatorType.EQUAL)

    assert result.joins == ("s_author",)
    sql = compiled(proxy)
    assert "LEFT OUTER JOIN authors AS s_author ON" in sql
    assert "WHERE s_author.name = :name_0" in sql


def test_filter_and_sort_share_join(proxy):
    spec = FilterSpec("author", field_name="name", parent_association_chain=["author"])
    proxy.apply_filter(spec, "Herbert")
    proxy.set_sort(["author"], "name", "ASC")

    assert compiled(proxy).count("JOIN authors") == 1



def test_target_entity_does_not_join(proxy):
    assert proxy.target_entity(["author"]) is AuthorRecord
    assert proxy.target_entity([]) is BookRecord
    assert proxy.query_builder.joins == ()
    assert proxy.join_aliases == ()


def test_rejected_filter_leaves_no_trace(proxy):
    spec = FilterSpec("author", field_name="name", parent_association_chain=["author"])

    with pytest.raises(InvalidArgumentError):
        proxy.apply_filter(spec, "Herbert", operator_type=42)
    proxy.apply_filter(spec, "Herbert", StringOperatorType.EQUAL)

    sql = compiled(proxy)
    assert sql.count("JOIN authors") == 1
    assert "WHERE s_author.name = :name_0" in sql

# -- Pagination --------------------------------------------------------------


def test_page_window(proxy):
    proxy.set_page_window(offset=20, limit=10)

    assert proxy.get_page_window() == PageWindow(offset=20, limit=10)
    assert proxy.first_result == 20
    assert proxy.max_results == 10
    params = proxy.finalize().compile().params
    assert sorted(params.values()) == [10, 20]


def test_page_window_defaults_to_unbounded(proxy):
    assert proxy.get_page_window() == PageWindow(None, None)
    assert "LIMIT" not in compiled(proxy)


def test_first_and_max_results(proxy):
    proxy.set_first_result(5).set_max_results(15)

    assert proxy.get_page_window() == PageWindow(5, 15)

    proxy.set_max_results(None)
    assert proxy.get_page_window() == PageWindow(5, None)


@pytest.mark.parametrize("offset, limit", [(-1, 10), (0, -10)])
def test_negative_page_window_is_rejected(proxy, offset, limit):
    with pytest.raises(InvalidArgumentError):
        proxy.set_page_window(offset, limit)

    assert proxy.get_page_window() == PageWindow(None, None)


# -- Hints -------------------------------------------------------------------


def test_hints_become_execution_options(proxy):
    proxy.set_hint("populate_existing", True)

    assert proxy.hints == {"populate_existing": True}
    assert proxy.finalize().get_execution_options()["populate_existing"] is True


def test_hints_copy_is_detached(proxy):
    proxy.hints["populate_existing"] = True

    assert proxy.hints == {}


# -- Cloning -----------------------------------------------------------------


def test_clone_copies_builder(proxy):
    proxy.apply_filter(FilterSpec("title"), "dune")

    clone = proxy.clone()
    clone.apply_filter(FilterSpec("isbn"), "978")

    assert proxy.parameters == {"title_0": "%dune%"}
    assert clone.parameters == {"title_0": "%dune%", "isbn_1": "%978%"}
    assert len(proxy.query_builder.where_clauses) == 1


def test_clone_keeps_counter_sort_and_hints(proxy):
    proxy.next_parameter_name()
    proxy.set_sort([], "title", "DESC")
    proxy.set_hint("populate_existing", True)

    clone = copy.copy(proxy)

    assert isinstance(clone, QueryProxy)
    assert clone.query_builder is not proxy.query_builder
    assert clone.parameter_counter == 1
    assert clone.get_sort() == ("o.title", SortOrder.DESC)
    assert clone.hints == {"populate_existing": True}


def test_clone_keeps_join_aliases(proxy):
    proxy.entity_join(["author"])

    clone = proxy.clone()

    assert clone.join_aliases == ("s_author",)
    assert clone.entity_join(["author"]) == "s_author"
    assert len(clone.query_builder.joins) == 1
