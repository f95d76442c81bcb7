"""Pytest configuration and fixtures."""

import os

# Keep test runs from writing rotating log files into the working directory
os.environ.setdefault("STOCKROOM_LOG_TO_FILE", "false")

import pytest

from stockroom.models.product import Product
from stockroom.services.inventory_service import InventoryService
from stockroom.storage.credential_store import CredentialStore
from stockroom.storage.product_store import ProductStore
from stockroom.utils.config import AuthConfig, get_config


# Low iteration count keeps hashing fast in tests
TEST_HASH_ITERATIONS = 1000


@pytest.fixture
def auth_config():
    """Auth settings with a cheap password hash."""
    return AuthConfig(hash_iterations=TEST_HASH_ITERATIONS)


@pytest.fixture
def products_path(tmp_path):
    return tmp_path / "inventory.dat"


@pytest.fixture
def users_path(tmp_path):
    return tmp_path / "users.dat"


@pytest.fixture
def product_store(products_path):
    """Create an empty ProductStore backed by a temporary file."""
    return ProductStore(products_path)


@pytest.fixture
def credential_store(users_path, auth_config):
    """Create a CredentialStore holding only the bootstrap account."""
    return CredentialStore(users_path, auth_config=auth_config)


@pytest.fixture
def sample_products():
    """Create multiple sample Products for testing."""
    return [
        Product(name="widget-7", product_id="W-007", quantity=3, price=2.50),
        Product(name="Gadget", product_id="G-001", quantity=0, price=100.00),
        Product(name="Super Widget", product_id="W-100", quantity=11, price=1.25),
    ]


@pytest.fixture
def service(product_store, credential_store):
    """Create an InventoryService over temporary stores."""
    return InventoryService(credential_store=credential_store, product_store=product_store)


@pytest.fixture
def logged_in_service(service):
    """InventoryService with the default account logged in."""
    result = service.login("admin", "admin123")
    assert result.success
    return service


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    """Point the cached app config at a YAML file with a cheap password hash."""
    config_file = tmp_path / "config.yml"
    config_file.write_text(f"auth:\n  hash_iterations: {TEST_HASH_ITERATIONS}\n")
    monkeypatch.setenv("STOCKROOM_CONFIG_FILE", str(config_file))

    get_config.cache_clear()
    yield get_config()
    get_config.cache_clear()
