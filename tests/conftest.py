import pytest
import yaml
from sqlalchemy import create_engine

from querylens.config import create_default_config
from querylens.core.schema_model import SchemaModel
from querylens.explorer import QueryExplorer
from querylens.translator.engine import LocalTranslator


BOOKSTORE = {
    "Author": {
        "columns": [
            {"name": "id", "type": "INTEGER", "primary_key": True},
            {"name": "name", "type": "TEXT"},
            {"name": "bio", "type": "TEXT"},
            {"name": "birth_year", "type": "INTEGER"},
        ],
        "foreign_keys": [],
    },
    "Book": {
        "columns": [
            {"name": "id", "type": "INTEGER", "primary_key": True},
            {"name": "isbn", "type": "VARCHAR(13)"},
            {"name": "title", "type": "VARCHAR(255)"},
            {"name": "price", "type": "REAL"},
            {"name": "year", "type": "INTEGER"},
            {"name": "author_id", "type": "INTEGER"},
        ],
        "foreign_keys": [
            {"source_column": "author_id", "target_table": "Author", "target_column": "id"},
        ],
    },
    "Purchase": {
        "columns": [
            {"name": "id", "type": "INTEGER", "primary_key": True},
            {"name": "book_id", "type": "INTEGER"},
            {"name": "quantity", "type": "INTEGER"},
            {"name": "amount", "type": "REAL"},
            {"name": "created_at", "type": "DATETIME"},
        ],
        "foreign_keys": [
            {"source_column": "book_id", "target_table": "Book", "target_column": "id"},
        ],
    },
}

# Book is created before Author so catalog order differs from alphabetical
BOOKSTORE_DDL = [
    """CREATE TABLE Book (
        id INTEGER PRIMARY KEY,
        isbn VARCHAR(13),
        title VARCHAR(255),
        price REAL,
        year INTEGER,
        author_id INTEGER REFERENCES Author(id),
        notes
    )""",
    """CREATE TABLE Author (
        id INTEGER PRIMARY KEY,
        name TEXT,
        bio TEXT,
        birth_year INTEGER
    )""",
    """CREATE TABLE Purchase (
        id INTEGER PRIMARY KEY,
        book_id INTEGER REFERENCES Book(id),
        quantity INTEGER,
        amount REAL,
        created_at DATETIME
    )""",
    "INSERT INTO Author VALUES (1, 'J.K. Rowling', 'British author', 1965)",
    "INSERT INTO Author VALUES (2, 'J.R.R. Tolkien', 'Philologist', 1892)",
    "INSERT INTO Book VALUES (1, '9780747532699', 'Harry Potter', 12.5, 1997, 1, NULL)",
    "INSERT INTO Book VALUES (2, '9780261103573', 'The Hobbit', 25.0, 1937, 2, NULL)",
    "INSERT INTO Book VALUES (3, '9780261102385', 'The Lord of the Rings', 45.0, 1954, 2, NULL)",
    "INSERT INTO Purchase VALUES (1, 1, 2, 25.0, '2024-01-05 10:00:00')",
    "INSERT INTO Purchase VALUES (2, 3, 1, 45.0, '2024-02-01 09:30:00')",
]


def _build_database(path, statements):
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        for statement in statements:
            conn.exec_driver_sql(statement)
    engine.dispose()
    return str(path)


@pytest.fixture
def bookstore_schema():
    return SchemaModel.from_dict(BOOKSTORE)


@pytest.fixture
def translator(bookstore_schema):
    return LocalTranslator(bookstore_schema)


@pytest.fixture
def db_path(tmp_path):
    return _build_database(tmp_path / "books.db", BOOKSTORE_DDL)


@pytest.fixture
def other_db_path(tmp_path):
    return _build_database(tmp_path / "pets.db", [
        "CREATE TABLE Pet (id INTEGER PRIMARY KEY, name TEXT, born DATE)",
        "INSERT INTO Pet VALUES (1, 'Rex', '2020-03-01')",
    ])


@pytest.fixture
def explorer(db_path):
    explorer = QueryExplorer(create_default_config(db_path=db_path))
    explorer.open()
    yield explorer
    explorer.close()


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(yaml.safe_dump(BOOKSTORE, sort_keys=False))
    return str(path)


@pytest.fixture
def loose_types_db_path(tmp_path):
    # Declared types SQLite accepts but SQLAlchemy maps to other affinities
    return _build_database(tmp_path / "loose.db", [
        "CREATE TABLE Book (label STRING, year INT, fee MONEY, notes)",
        "INSERT INTO Book VALUES ('first', 1990, 3, NULL)",
    ])
