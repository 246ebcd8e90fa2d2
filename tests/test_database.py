# ABOUTME: Tests for database initialization
# ABOUTME: Validates that init_db creates the property and cache tables

from sqlalchemy import create_engine, inspect


def test_init_db_creates_tables():
    """Test init_db creates the properties and cache_entries tables."""
    test_engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})

    # Temporarily replace the engine in the module
    import classlog.database
    original_engine = classlog.database.engine
    classlog.database.engine = test_engine

    try:
        classlog.database.init_db()

        tables = inspect(test_engine).get_table_names()
        assert "properties" in tables
        assert "cache_entries" in tables
    finally:
        classlog.database.engine = original_engine
