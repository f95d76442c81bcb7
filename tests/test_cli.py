"""Tests for the command-line interface."""

import click
import pytest
from click.testing import CliRunner

from stockroom.cli import cli
from stockroom.models.product import Product
from stockroom.storage.credential_store import CredentialStore
from stockroom.storage.product_store import ProductStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def store_args(products_path, users_path):
    return ["--products-file", str(products_path), "--users-file", str(users_path)]


def _lines(*values):
    return "\n".join(str(v) for v in values) + "\n"


class TestRunCommand:
    """Tests for the interactive session."""

    def test_exit_from_authentication_menu(self, runner, store_args, cli_config, users_path):
        result = runner.invoke(cli, store_args + ["run"], input=_lines(3))

        assert result.exit_code == 0
        assert "Default account created" in result.output
        assert "Exiting program..." in result.output
        assert users_path.exists()

    def test_login_add_and_total(self, runner, store_args, cli_config, products_path):
        """Test a full session: login, add a product, show total, logout."""
        session = _lines(
            1, "admin", "admin123",
            1, "W-007", "widget-7", 3, 2.5,
            9,
            10,
        )

        result = runner.invoke(cli, store_args + ["run"], input=session)

        assert result.exit_code == 0, result.output
        assert "Login successful! Welcome, admin!" in result.output
        assert "Product added successfully!" in result.output
        assert "Total Inventory Value: $7.50" in result.output
        assert "Goodbye, admin!" in result.output
        assert ProductStore(products_path).find_by_id("W-007") == Product(
            name="widget-7", product_id="W-007", quantity=3, price=2.5
        )

    def test_invalid_login_then_exit(self, runner, store_args, cli_config):
        session = _lines(1, "bob", "whatever", 3)

        result = runner.invoke(cli, store_args + ["run"], input=session)

        assert result.exit_code == 0
        assert "Invalid username or password." in result.output

    def test_prompts_reject_negative_numbers(self, runner, store_args, cli_config, products_path):
        session = _lines(
            1, "admin", "admin123",
            1, "N-1", "Nut", -4, 4, -1, 0.5,
            10,
        )

        result = runner.invoke(cli, store_args + ["run"], input=session)

        assert result.exit_code == 0, result.output
        product = ProductStore(products_path).find_by_id("N-1")
        assert product.quantity == 4
        assert product.price == 0.5

    def test_price_prompt_rejects_infinity(self, runner, store_args, cli_config, products_path):
        session = _lines(
            1, "admin", "admin123",
            1, "I-1", "Infinite", 2, "inf", "nan", 1.25,
            10,
        )

        result = runner.invoke(cli, store_args + ["run"], input=session)

        assert result.exit_code == 0, result.output
        assert "not a finite price" in result.output
        assert ProductStore(products_path).find_by_id("I-1").price == 1.25

    def test_search_miss_is_not_shown_as_success(self, runner, store_args, cli_config):
        session = _lines(1, "admin", "admin123", 3, "NOPE", 10)

        result = runner.invoke(cli, store_args + ["run"], input=session, color=True)

        assert result.exit_code == 0, result.output
        assert "Product not found: NOPE" in result.output
        assert click.style("Product not found: NOPE", fg="green") not in result.output

    def test_password_spaces_survive_between_commands(self, runner, store_args, cli_config):
        """Test that an account registered by command can log in interactively."""
        registered = runner.invoke(cli, store_args + ["register", "alice", "--password", "secret1 "])
        assert registered.exit_code == 0, registered.output

        result = runner.invoke(cli, store_args + ["run"], input=_lines(1, "alice", "secret1 ", 10))

        assert result.exit_code == 0, result.output
        assert "Login successful! Welcome, alice!" in result.output

    def test_interactive_registration_keeps_spaces(self, runner, store_args, cli_config):
        """Test that an account registered interactively can be used by report."""
        registered = runner.invoke(cli, store_args + ["run"], input=_lines(2, "bob", "  abcdefg  ", 3))
        assert "User registered successfully!" in registered.output

        result = runner.invoke(
            cli,
            store_args + ["report", "--username", "bob", "--password", "  abcdefg  "]
        )

        assert result.exit_code == 0, result.output
        assert "Inventory is empty." in result.output

    def test_whitespace_only_password_is_reprompted(self, runner, store_args, cli_config):
        result = runner.invoke(cli, store_args + ["run"], input=_lines(1, "admin", "   ", "admin123", 10))

        assert result.exit_code == 0, result.output
        assert "Input cannot be empty" in result.output
        assert "Login successful! Welcome, admin!" in result.output

    def test_update_search_and_delete(self, runner, store_args, cli_config, products_path):
        store = ProductStore(products_path)
        store.add(Product(name="widget-7", product_id="W-007", quantity=3, price=2.5))
        store.add(Product(name="Gadget", product_id="G-001", quantity=40, price=1.0))

        session = _lines(
            1, "admin", "admin123",
            4, "WID",
            5, "W-007", 20, 3.0,
            6, "G-001", "y",
            7,
            10,
        )

        result = runner.invoke(cli, store_args + ["run"], input=session)

        assert result.exit_code == 0, result.output
        assert "Search Results (1 products found):" in result.output
        assert "Product updated successfully!" in result.output
        assert "Product deleted successfully!" in result.output
        assert "No low stock items found." in result.output

        reloaded = ProductStore(products_path)
        assert reloaded.find_by_id("W-007").quantity == 20
        assert reloaded.find_by_id("G-001") is None

    def test_corrupt_store_exits_with_error(self, runner, store_args, cli_config, users_path):
        users_path.write_bytes(b"\x01")

        result = runner.invoke(cli, store_args + ["run"], input=_lines(3))

        assert result.exit_code == 1
        assert "Fatal error" in result.output


class TestRegisterCommand:
    """Tests for the register command."""

    def test_register(self, runner, store_args, cli_config, users_path, auth_config):
        result = runner.invoke(
            cli,
            store_args + ["register", "alice"],
            input=_lines("secret1", "secret1")
        )

        assert result.exit_code == 0, result.output
        assert "User registered successfully!" in result.output
        assert "alice" in CredentialStore(users_path, auth_config=auth_config).usernames()

    def test_register_weak_password(self, runner, store_args, cli_config):
        result = runner.invoke(cli, store_args + ["register", "alice", "--password", "abc"])

        assert result.exit_code == 1
        assert "at least 6 characters" in result.output


class TestReportCommand:
    """Tests for the report command."""

    @pytest.fixture
    def stocked(self, products_path):
        store = ProductStore(products_path)
        store.add(Product(name="Ten", product_id="T10", quantity=10, price=1.0))
        store.add(Product(name="Eleven", product_id="T11", quantity=11, price=2.0))

    def test_inventory_report(self, runner, store_args, cli_config, stocked):
        result = runner.invoke(
            cli,
            store_args + ["report", "--username", "admin", "--password", "admin123"]
        )

        assert result.exit_code == 0, result.output
        assert "INVENTORY LIST" in result.output
        assert "Total Products: 2" in result.output
        assert "Total Inventory Value: $32.00" in result.output

    def test_low_stock_report(self, runner, store_args, cli_config, stocked):
        result = runner.invoke(
            cli,
            store_args + ["report", "--username", "admin", "--password", "admin123", "--low-stock"]
        )

        assert result.exit_code == 0, result.output
        assert "LOW STOCK ALERT (Threshold: 10)" in result.output
        assert "T10" in result.output
        assert "T11" not in result.output

    def test_report_bad_credentials(self, runner, store_args, cli_config, stocked):
        result = runner.invoke(
            cli,
            store_args + ["report", "--username", "admin", "--password", "nope"]
        )

        assert result.exit_code == 1
        assert "Invalid username or password." in result.output


class TestConfigInfo:
    """Tests for config-info."""

    def test_config_info(self, runner, cli_config):
        result = runner.invoke(cli, ["config-info"])

        assert result.exit_code == 0
        assert "Low stock at:    10" in result.output
        assert "Hash iterations: 1000" in result.output
