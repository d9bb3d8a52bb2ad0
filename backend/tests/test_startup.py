"""
Store selection at startup, demo seeding and CLI commands.
"""

import pytest
from sqlalchemy import inspect

from facturador import create_app
from facturador.config import Config, TestConfig
from facturador.extensions import db
from facturador.models import CUSTOMERS, PRODUCTS
from facturador.services.seed_service import DEMO_CUSTOMERS, DEMO_PRODUCTS, seed_demo_data
from facturador.storage import (
    GATEWAY_EXTENSION_KEY,
    MemoryDocumentStore,
    PersistenceError,
    SqlDocumentStore,
)


def _unreachable_uri(tmp_path):
    # SQLite cannot create a database file inside a missing directory
    return f"sqlite:///{tmp_path / 'missing' / 'facturador.sqlite3'}"


class TestSelectGateway:
    def test_sql_backend_when_database_answers(self, app):
        assert isinstance(app.extensions[GATEWAY_EXTENSION_KEY], SqlDocumentStore)

    def test_memory_backend_when_configured(self):
        class MemoryConfig(TestConfig):
            STORAGE_BACKEND = "memory"

        app = create_app(MemoryConfig)
        assert isinstance(app.extensions[GATEWAY_EXTENSION_KEY], MemoryDocumentStore)

    def test_auto_falls_back_to_memory(self, tmp_path):
        class AutoConfig(TestConfig):
            STORAGE_BACKEND = "auto"
            SQLALCHEMY_DATABASE_URI = _unreachable_uri(tmp_path)

        app = create_app(AutoConfig)
        assert isinstance(app.extensions[GATEWAY_EXTENSION_KEY], MemoryDocumentStore)

    def test_forced_sql_fails_when_unreachable(self, tmp_path):
        class SqlConfig(TestConfig):
            STORAGE_BACKEND = "sql"
            SQLALCHEMY_DATABASE_URI = _unreachable_uri(tmp_path)

        with pytest.raises(PersistenceError):
            create_app(SqlConfig)

    def test_startup_leaves_schema_to_migrations(self, tmp_path):
        class FileConfig(TestConfig):
            SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'facturador.sqlite3'}"
            AUTO_CREATE_TABLES = Config.AUTO_CREATE_TABLES

        assert Config.AUTO_CREATE_TABLES is False

        app = create_app(FileConfig)

        assert isinstance(app.extensions[GATEWAY_EXTENSION_KEY], SqlDocumentStore)
        with app.app_context():
            assert "documents" not in inspect(db.engine).get_table_names()

    def test_unknown_backend_rejected(self):
        class BadConfig(TestConfig):
            STORAGE_BACKEND = "redis"

        with pytest.raises(ValueError):
            create_app(BadConfig)


class TestDemoSeed:
    def test_seed_fills_empty_collections_once(self):
        store = MemoryDocumentStore()

        first = seed_demo_data(store)
        second = seed_demo_data(store)

        assert first == {"products": len(DEMO_PRODUCTS), "customers": len(DEMO_CUSTOMERS)}
        assert second == {"products": 0, "customers": 0}
        assert len(store.list_all(PRODUCTS)) == len(DEMO_PRODUCTS)

    def test_seed_leaves_existing_catalog_alone(self):
        store = MemoryDocumentStore()
        store.upsert(PRODUCTS, "mine", {"name": "Mine", "price": 1})

        seeded = seed_demo_data(store)

        assert seeded["products"] == 0
        assert [p["id"] for p in store.list_all(PRODUCTS)] == ["mine"]
        assert len(store.list_all(CUSTOMERS)) == len(DEMO_CUSTOMERS)

    def test_app_seeds_when_enabled(self):
        class DemoConfig(TestConfig):
            STORAGE_BACKEND = "memory"
            DEMO_SEED_ENABLED = True

        app = create_app(DemoConfig)
        with app.test_client() as client:
            assert client.get("/api/products").get_json()["count"] == len(DEMO_PRODUCTS)


class TestCli:
    def test_seed_and_storage_info(self):
        class CliConfig(TestConfig):
            STORAGE_BACKEND = "memory"

        app = create_app(CliConfig)
        runner = app.test_cli_runner()

        # Commands run against whichever app context is current
        with app.app_context():
            result = runner.invoke(args=["seed", "demo"])
            assert result.exit_code == 0
            assert "Seeded 3 products and 2 customers." in result.output

            result = runner.invoke(args=["system", "storage-info"])
            assert result.exit_code == 0
            assert "Backend: memory" in result.output
            assert "products: 3" in result.output

    def test_seed_targets_the_invoked_app(self, app):
        class CliConfig(TestConfig):
            STORAGE_BACKEND = "memory"

        # The session app's SQL store already holds a product
        app.extensions[GATEWAY_EXTENSION_KEY].upsert(PRODUCTS, "existing", {"name": "Existing", "price": 1})
        cli_app = create_app(CliConfig)

        with cli_app.app_context():
            result = cli_app.test_cli_runner().invoke(args=["seed", "demo"])

        assert "Seeded 3 products" in result.output
        assert len(cli_app.extensions[GATEWAY_EXTENSION_KEY].list_all(PRODUCTS)) == len(DEMO_PRODUCTS)

        app.extensions[GATEWAY_EXTENSION_KEY].delete(PRODUCTS, "existing")
