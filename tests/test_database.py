from wedding_backfill.database import MAX_OVERFLOW, POOL_SIZE, _engine_options


class TestEngineOptions:
    def test_sqlite_has_no_pool_settings(self):
        options = _engine_options("sqlite:///./wedding_backfill.db")
        assert options == {"pool_pre_ping": True, "echo": False}

    def test_server_database_gets_pool_settings(self):
        options = _engine_options("postgresql+psycopg://user:pw@db/wedding")
        assert options["pool_pre_ping"] is True
        assert options["pool_size"] == POOL_SIZE
        assert options["max_overflow"] == MAX_OVERFLOW
        assert "pool_timeout" not in options
