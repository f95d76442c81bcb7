"""Command-line interface for the inventory management system."""

import math
import sys
from typing import List, Optional

import click

from .models.operation_result import OperationResult
from .models.product import MAX_QUANTITY, Product
from .services.inventory_service import InventoryService
from .utils.config import get_config
from .utils.exceptions import BaseAppException


RULE_WIDTH = 85
MENU_WIDTH = 50

TABLE_HEADER = (
    f"{'Product ID':<15}{'Product Name':<25}{'Quantity':<12}"
    f"{'Price':<12}{'Total Value':<15}Status"
)


class NonEmptyText(click.ParamType):
    """
    Text input that must contain something other than whitespace.

    With ``strip=False`` the value is returned exactly as typed, which
    credentials need so every entry point hashes the same string.
    """

    name = "text"

    def __init__(self, strip: bool = True):
        self.strip = strip

    def convert(self, value, param, ctx):
        value = str(value)
        if not value.strip():
            self.fail("Input cannot be empty. Please try again.", param, ctx)
        return value.strip() if self.strip else value


class Price(click.FloatRange):
    """Non-negative, finite price."""

    def __init__(self):
        super().__init__(min=0)

    def convert(self, value, param, ctx):
        price = super().convert(value, param, ctx)
        if not math.isfinite(price):
            self.fail(f"{value} is not a finite price.", param, ctx)
        return price


NON_EMPTY_TEXT = NonEmptyText()
CREDENTIAL_TEXT = NonEmptyText(strip=False)
QUANTITY = click.IntRange(0, MAX_QUANTITY)
PRICE = Price()
MENU_CHOICE = click.IntRange(min=0)


def _echo_result(result: OperationResult):
    """Display an operation result, green on success and red on failure."""
    if not result.message:
        return

    if result.success:
        click.echo(click.style(result.message, fg="green"))
    else:
        click.echo(click.style(f"Error: {result.message}", fg="red"), err=True)


def _format_product(product: Product, threshold: int) -> str:
    row = (
        f"{product.product_id:<15}{product.name:<25}{product.quantity:<12}"
        f"{product.price:<12.2f}{product.total_value:<15.2f}"
    )
    if product.is_low_stock(threshold):
        row += " [LOW STOCK]"
    return row


def _echo_products(products: List[Product], threshold: int):
    click.echo(TABLE_HEADER)
    click.echo("-" * RULE_WIDTH)
    for product in products:
        click.echo(_format_product(product, threshold))
    click.echo("-" * RULE_WIDTH)


def _open_service(ctx: click.Context) -> InventoryService:
    service = InventoryService(
        products_file=ctx.obj.get("products_file"),
        users_file=ctx.obj.get("users_file")
    )
    for notice in service.startup_notices():
        click.echo(click.style(notice, fg="yellow", bold=True))
    return service


# Reports

def show_inventory_report(service: InventoryService):
    """Display every product with totals."""
    result = service.list_products()
    if not result.success:
        _echo_result(result)
        return

    data = result.data
    if not data["count"]:
        click.echo("Inventory is empty.")
        return

    threshold = service.products.low_stock_threshold
    click.echo()
    click.echo("=" * RULE_WIDTH)
    click.echo("INVENTORY LIST".center(RULE_WIDTH))
    click.echo("=" * RULE_WIDTH)
    _echo_products(data["products"], threshold)
    click.echo(f"Total Products: {data['count']}")
    click.echo(f"Total Inventory Value: ${data['total_value']:.2f}")
    click.echo("=" * RULE_WIDTH)


def show_low_stock_report(service: InventoryService, threshold: Optional[int] = None):
    """Display products at or below the low stock threshold."""
    result = service.low_stock_report(threshold)
    if not result.success:
        _echo_result(result)
        return

    data = result.data
    click.echo()
    click.echo("=" * RULE_WIDTH)
    click.echo(f"LOW STOCK ALERT (Threshold: {data['threshold']})".center(RULE_WIDTH))
    click.echo("=" * RULE_WIDTH)
    if data["products"]:
        _echo_products(data["products"], data["threshold"])
    else:
        click.echo("No low stock items found.")
    click.echo("=" * RULE_WIDTH)


# Interactive menu actions

def _add_product(service: InventoryService):
    click.echo("\n--- Add New Product ---")
    product_id = click.prompt("Enter Product ID", type=NON_EMPTY_TEXT)
    name = click.prompt("Enter Product Name", type=NON_EMPTY_TEXT)
    quantity = click.prompt("Enter Quantity", type=QUANTITY)
    price = click.prompt("Enter Price $", type=PRICE)
    _echo_result(service.add_product(name, product_id, quantity, price))


def _show_product(service: InventoryService, product_id: str) -> Optional[Product]:
    result = service.find_by_id(product_id)
    if not result.success:
        _echo_result(result)
        return None
    if result.data is None:
        click.echo(result.message)
        return None
    _echo_products([result.data], service.products.low_stock_threshold)
    return result.data


def _search_by_id(service: InventoryService):
    click.echo("\n--- Search Product by ID ---")
    product_id = click.prompt("Enter Product ID", type=NON_EMPTY_TEXT)
    _show_product(service, product_id)


def _search_by_name(service: InventoryService):
    click.echo("\n--- Search Product by Name ---")
    name = click.prompt("Enter Product Name (partial match supported)", type=NON_EMPTY_TEXT)
    result = service.find_by_name(name)
    if not result.success or not result.data:
        click.echo(result.message)
        return

    click.echo(f"\nSearch Results ({len(result.data)} products found):")
    _echo_products(result.data, service.products.low_stock_threshold)


def _update_product(service: InventoryService):
    click.echo("\n--- Update Product ---")
    product_id = click.prompt("Enter Product ID to update", type=NON_EMPTY_TEXT)
    if _show_product(service, product_id) is None:
        return

    quantity = click.prompt("Enter New Quantity", type=QUANTITY)
    price = click.prompt("Enter New Price $", type=PRICE)
    _echo_result(service.update_product(product_id, quantity, price))


def _delete_product(service: InventoryService):
    click.echo("\n--- Delete Product ---")
    product_id = click.prompt("Enter Product ID to delete", type=NON_EMPTY_TEXT)
    if _show_product(service, product_id) is None:
        return

    if click.confirm("Are you sure you want to delete this product?", default=False):
        _echo_result(service.delete_product(product_id))
    else:
        click.echo("Deletion cancelled.")


def _show_total_value(service: InventoryService):
    result = service.total_value()
    if result.success:
        click.echo(f"\n{result.message}")
    else:
        _echo_result(result)


def _login(service: InventoryService):
    username = click.prompt("Enter username", type=CREDENTIAL_TEXT)
    password = click.prompt("Enter password", type=CREDENTIAL_TEXT, hide_input=True)
    _echo_result(service.login(username, password))


def _register(service: InventoryService):
    config = get_config()
    username = click.prompt("Enter new username", type=CREDENTIAL_TEXT)
    password = click.prompt(
        f"Enter new password (min {config.auth.min_password_length} characters)",
        type=CREDENTIAL_TEXT,
        hide_input=True
    )
    _echo_result(service.register(username, password))


def authentication_menu(service: InventoryService) -> bool:
    """
    Loop until the user logs in or chooses to exit.

    Returns:
        True once logged in, False if the user exits
    """
    while not service.is_logged_in:
        click.echo("\n" + "=" * MENU_WIDTH)
        click.echo("     AUTHENTICATION")
        click.echo("=" * MENU_WIDTH)
        click.echo("1. Login")
        click.echo("2. Register New User")
        click.echo("3. Exit")
        click.echo("=" * MENU_WIDTH)

        choice = click.prompt("Enter your choice", type=MENU_CHOICE)
        if choice == 1:
            _login(service)
        elif choice == 2:
            _register(service)
        elif choice == 3:
            return False
        else:
            click.echo("Invalid choice. Please try again.")
    return True


INVENTORY_ACTIONS = {
    1: ("Add New Product", _add_product),
    2: ("Display All Products", show_inventory_report),
    3: ("Search Product by ID", _search_by_id),
    4: ("Search Product by Name", _search_by_name),
    5: ("Update Product", _update_product),
    6: ("Delete Product", _delete_product),
    7: ("Generate Low Stock Report", show_low_stock_report),
    8: ("Generate Inventory Report", show_inventory_report),
    9: ("Display Total Inventory Value", _show_total_value),
}
LOGOUT_CHOICE = 10


def inventory_menu(service: InventoryService):
    """Dispatch inventory actions until the user logs out."""
    while True:
        click.echo("\n" + "=" * MENU_WIDTH)
        click.echo("     INVENTORY MANAGEMENT SYSTEM")
        click.echo("=" * MENU_WIDTH)
        for number, (label, _) in INVENTORY_ACTIONS.items():
            click.echo(f"{str(number) + '.':<4}{label}")
        click.echo(f"{str(LOGOUT_CHOICE) + '.':<4}Logout")
        click.echo("=" * MENU_WIDTH)

        choice = click.prompt("Enter your choice", type=MENU_CHOICE)
        if choice == LOGOUT_CHOICE:
            _echo_result(service.logout())
            click.echo("Logging out...")
            return

        action = INVENTORY_ACTIONS.get(choice)
        if action is None:
            click.echo("Invalid choice. Please try again.")
            continue
        action[1](service)


@click.group()
@click.version_option(version="1.0.0")
@click.option(
    "--products-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Product store file (default from STOCKROOM_PRODUCTS_FILE or inventory.dat)"
)
@click.option(
    "--users-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="User store file (default from STOCKROOM_USERS_FILE or users.dat)"
)
@click.pass_context
def cli(ctx: click.Context, products_file: Optional[str], users_file: Optional[str]):
    """
    Inventory Management System CLI.

    Manage products, stock levels and users stored in local binary files.
    """
    ctx.ensure_object(dict)
    ctx.obj["products_file"] = products_file
    ctx.obj["users_file"] = users_file


@cli.command()
@click.pass_context
def run(ctx: click.Context):
    """Start an interactive session: log in, then manage the inventory."""
    click.echo("=" * 78)
    click.echo("INVENTORY MANAGEMENT SYSTEM".center(78))
    click.echo("=" * 78)

    try:
        with _open_service(ctx) as service:
            if not authentication_menu(service):
                click.echo("Exiting program...")
                return

            click.echo("\nWelcome to the Inventory Management System!")
            inventory_menu(service)

        click.echo("\nThank you for using the Inventory Management System!")

    except BaseAppException as e:
        click.echo(click.style(f"✗ Fatal error: {e.message}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="New password")
@click.pass_context
def register(ctx: click.Context, username: str, password: str):
    """
    Register a new user.

    USERNAME: Name of the account to create
    """
    try:
        with _open_service(ctx) as service:
            result = service.register(username, password)
            _echo_result(result)
        sys.exit(0 if result.success else 1)

    except BaseAppException as e:
        click.echo(click.style(f"✗ Error: {e.message}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option("--username", prompt=True, help="Account to log in with")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.option("--low-stock", is_flag=True, help="Only show products at or below the threshold")
@click.option("--threshold", type=click.IntRange(min=0), default=None, help="Low stock threshold")
@click.pass_context
def report(ctx: click.Context, username: str, password: str, low_stock: bool, threshold: Optional[int]):
    """Print the inventory report or the low stock report."""
    try:
        with _open_service(ctx) as service:
            result = service.login(username, password)
            if not result.success:
                _echo_result(result)
                sys.exit(1)

            if low_stock:
                show_low_stock_report(service, threshold)
            else:
                show_inventory_report(service)

    except BaseAppException as e:
        click.echo(click.style(f"✗ Error: {e.message}", fg="red"), err=True)
        sys.exit(1)


@cli.command("config-info")
@click.pass_context
def config_info(ctx: click.Context):
    """Display current configuration settings."""
    try:
        config = get_config()

        click.echo("Configuration Settings:")
        click.echo("=" * 60)
        click.echo()

        click.echo("Environment:")
        click.echo(f"  Environment:     {config.env.environment}")
        click.echo(f"  Log level:       {config.logging.level}")
        click.echo(f"  Log to file:     {config.env.log_to_file}")
        click.echo()

        click.echo("Stores:")
        click.echo(f"  Products file:   {ctx.obj.get('products_file') or config.env.products_file}")
        click.echo(f"  Users file:      {ctx.obj.get('users_file') or config.env.users_file}")
        click.echo()

        click.echo("Inventory:")
        click.echo(f"  Low stock at:    {config.inventory.low_stock_threshold}")
        click.echo()

        click.echo("Authentication:")
        click.echo(f"  Min password:    {config.auth.min_password_length} characters")
        click.echo(f"  Hash iterations: {config.auth.hash_iterations}")
        click.echo(f"  Default account: {config.auth.default_username if config.auth.bootstrap_default_account else 'disabled'}")
        click.echo()

    except BaseAppException as e:
        click.echo(click.style(f"✗ Error loading config: {e.message}", fg="red"), err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
