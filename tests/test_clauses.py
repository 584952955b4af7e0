import pytest

from querylens.core.schema_model import SchemaModel
from querylens.translator.clauses import build_limit_clause, build_sort_clause, normalize


def test_normalize():
    assert normalize("  Show BOOKS ") == "show books"
    assert normalize(None) == ""


@pytest.mark.parametrize("q,expected", [
    ("show books", " LIMIT 20"),
    ("show books limit 5", " LIMIT 5"),
    ("show books limit   150", " LIMIT 150"),
    ("show books limit five", " LIMIT 20"),
    ("show books limit ٥", " LIMIT 20"),
    ("show books no limit", ""),
    ("unlimited books limit 5", ""),
])
def test_limit_clause(q, expected):
    assert build_limit_clause(q) == expected


def test_limit_clause_custom_default():
    assert build_limit_clause("show books", default_limit=7) == " LIMIT 7"


def test_sort_by_named_column(bookstore_schema):
    assert build_sort_clause(bookstore_schema, "books sort by price", "Book") == " ORDER BY price ASC"
    assert build_sort_clause(bookstore_schema, "books sort by price descending", "Book") == " ORDER BY price DESC"


def test_sort_by_unknown_column_falls_through(bookstore_schema):
    assert build_sort_clause(bookstore_schema, "books sort by rating", "Book") == ""
    assert build_sort_clause(bookstore_schema, "books sort by rating a-z", "Book") == " ORDER BY title ASC"


def test_sort_alphabetical(bookstore_schema):
    assert build_sort_clause(bookstore_schema, "authors alphabetically", "Author") == " ORDER BY name ASC"
    assert build_sort_clause(bookstore_schema, "authors a-z desc", "Author") == " ORDER BY name DESC"


def test_sort_reverse_alphabetical(bookstore_schema):
    assert build_sort_clause(bookstore_schema, "authors z-a", "Author") == " ORDER BY name DESC"


def test_direction_alone_emits_nothing(bookstore_schema):
    assert build_sort_clause(bookstore_schema, "books reverse", "Book") == ""


def test_sort_on_table_without_text_columns():
    schema = SchemaModel.from_dict({"N": {"columns": [{"name": "n", "type": "INTEGER"}]}})
    assert build_sort_clause(schema, "n a-z", "N") == ""
