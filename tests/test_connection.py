import pytest

from querylens.config import DatabaseConfig
from querylens.core.connection import DatabaseConnectionManager


@pytest.fixture
def manager(db_path):
    with DatabaseConnectionManager(DatabaseConfig(db_path=db_path)) as manager:
        yield manager


def test_connection_succeeds(manager):
    assert manager.test_connection() is True


def test_missing_file_fails_read_only(tmp_path):
    manager = DatabaseConnectionManager(DatabaseConfig(db_path=str(tmp_path / "missing.db")))
    assert manager.test_connection() is False
    result = manager.execute("SELECT 1;")
    assert not result.success
    assert result.error


def test_table_names_in_catalog_order(manager):
    assert manager.get_table_names() == ["Book", "Author", "Purchase"]


def test_execute_returns_rows(manager):
    result = manager.execute('SELECT * FROM "Book" WHERE price < 20 ORDER BY price ASC LIMIT 20;')
    assert result.success
    assert result.columns == ["id", "isbn", "title", "price", "year", "author_id", "notes"]
    assert result.row_count == 1
    assert result.rows[0][2] == "Harry Potter"


def test_execute_like_with_percent_signs(manager):
    result = manager.execute("SELECT * FROM \"Author\" WHERE name LIKE '%rowling%' LIMIT 20;")
    assert result.success
    assert [row[1] for row in result.rows] == ["J.K. Rowling"]


def test_execute_error_is_captured(manager):
    result = manager.execute('SELECT * FROM "Nope";')
    assert not result.success
    assert "no such table" in result.error


def test_max_rows(db_path):
    manager = DatabaseConnectionManager(DatabaseConfig(db_path=db_path, max_rows=2))
    result = manager.execute('SELECT * FROM "Book";')
    assert result.row_count == 2
    manager.close()


@pytest.mark.parametrize("sql", [
    "DROP TABLE Book;",
    "insert into Author values (3, 'x', 'y', 2000)",
    "SELECT * FROM Book; DELETE FROM Book;",
    "ATTACH DATABASE 'other.db' AS other",
    "",
])
def test_read_only_rejects(manager, sql):
    ok, error = manager.validate_sql(sql)
    assert not ok
    assert error
    result = manager.execute(sql)
    assert not result.success
    assert result.error == error


def test_read_only_accepts_single_select(manager):
    assert manager.validate_sql("SELECT count(*) FROM Book;") == (True, None)


@pytest.mark.parametrize("sql", [
    "SELECT * FROM \"Book\" WHERE title LIKE '%update%' LIMIT 20;",
    "SELECT replace(title, 'a', 'b') FROM Book",
    "SELECT * FROM Author WHERE bio = 'drop; it''s fine';",
    "SELECT \"delete\" FROM (SELECT 1 AS \"delete\")",
])
def test_read_only_ignores_keywords_inside_quotes(manager, sql):
    assert manager.validate_sql(sql) == (True, None)


def test_read_only_rejects_replace_into(manager):
    ok, _ = manager.validate_sql("REPLACE INTO Author VALUES (1, 'x', 'y', 2000)")
    assert not ok


def test_writes_allowed_when_not_read_only(db_path):
    manager = DatabaseConnectionManager(DatabaseConfig(db_path=db_path, read_only=False))
    result = manager.execute("INSERT INTO Author VALUES (3, 'Ursula K. Le Guin', 'Novelist', 1929)")
    assert result.success
    assert result.columns == []
    count = manager.execute('SELECT COUNT(*) as Total FROM "Author";')
    assert count.rows == [[3]]
    manager.close()


def test_in_memory_database():
    manager = DatabaseConnectionManager(DatabaseConfig())
    assert manager.test_connection()
    assert manager.get_table_names() == []
    manager.close()
