"""Session-level orchestrator for authentication and inventory operations."""

from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from ..models.operation_result import OperationResult
from ..models.product import Product
from ..storage.credential_store import CredentialStore
from ..storage.product_store import ProductStore
from ..utils.exceptions import BaseAppException, NotAuthenticatedError, StorageError
from ..utils.logger import get_error_logger, get_inventory_logger


class InventoryService:
    """
    Main orchestrator for a single user session.

    Owns one CredentialStore and one ProductStore. Inventory operations
    are only available while a user is logged in. Every operation returns
    an OperationResult; recoverable application errors become failed
    results and leave state unchanged.
    """

    def __init__(
        self,
        products_file: Optional[Union[str, Path]] = None,
        users_file: Optional[Union[str, Path]] = None,
        credential_store: Optional[CredentialStore] = None,
        product_store: Optional[ProductStore] = None
    ):
        self.logger = get_inventory_logger()
        self.error_logger = get_error_logger()

        # Stores define __len__, so an empty injected store is falsy
        if credential_store is None:
            credential_store = CredentialStore(users_file)
        if product_store is None:
            product_store = ProductStore(products_file)

        self.credentials = credential_store
        self.products = product_store

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def _execute(
        self,
        action: str,
        operation: Callable[[], Any],
        success_message: Union[str, Callable[[Any], str]] = "",
        require_login: bool = True
    ) -> OperationResult:
        try:
            if require_login and not self.credentials.is_logged_in:
                raise NotAuthenticatedError("Please log in first.")

            data = operation()

        except StorageError as e:
            self.error_logger.error(f"{action} failed: {e.message}", extra={"details": e.details})
            return OperationResult.from_error(e)
        except BaseAppException as e:
            self.logger.info(f"{action} rejected: {e.message}")
            return OperationResult.from_error(e)

        message = success_message(data) if callable(success_message) else success_message
        return OperationResult.ok(message, data=data)

    def startup_notices(self) -> List[str]:
        """Informational notices produced while opening the stores."""
        notice = self.credentials.bootstrap_notice
        return [notice] if notice else []

    @property
    def current_user(self) -> Optional[str]:
        return self.credentials.current_user

    @property
    def is_logged_in(self) -> bool:
        return self.credentials.is_logged_in

    # Authentication

    def register(self, username: str, password: str) -> OperationResult:
        return self._execute(
            "Registration",
            lambda: self.credentials.register(username, password),
            "User registered successfully!",
            require_login=False
        )

    def login(self, username: str, password: str) -> OperationResult:
        return self._execute(
            "Login",
            lambda: self.credentials.login(username, password),
            lambda user: f"Login successful! Welcome, {user}!",
            require_login=False
        )

    def logout(self) -> OperationResult:
        username = self.credentials.logout()
        if username is None:
            return OperationResult.ok("No user is logged in.")
        return OperationResult.ok(f"Goodbye, {username}!", data=username)

    # Inventory

    def add_product(self, name: str, product_id: str, quantity: int, price: float) -> OperationResult:
        return self._execute(
            "Add product",
            lambda: self.products.add(
                Product(name=name, product_id=product_id, quantity=quantity, price=price)
            ),
            "Product added successfully!"
        )

    def update_product(self, product_id: str, new_quantity: int, new_price: float) -> OperationResult:
        return self._execute(
            "Update product",
            lambda: self.products.update(product_id, new_quantity, new_price),
            "Product updated successfully!"
        )

    def delete_product(self, product_id: str) -> OperationResult:
        return self._execute(
            "Delete product",
            lambda: self.products.delete(product_id),
            "Product deleted successfully!"
        )

    def find_by_id(self, product_id: str) -> OperationResult:
        return self._execute(
            "Search by ID",
            lambda: self.products.find_by_id(product_id),
            lambda product: "Product found." if product else f"Product not found: {product_id}"
        )

    def find_by_name(self, substring: str) -> OperationResult:
        return self._execute(
            "Search by name",
            lambda: self.products.find_by_name(substring),
            lambda found: (
                f"{len(found)} product(s) found." if found
                else f'No products found matching "{substring}".'
            )
        )

    def list_products(self) -> OperationResult:
        """All products with count and total value, for the inventory report."""
        return self._execute(
            "List products",
            lambda: {
                "products": self.products.all(),
                "count": self.products.count(),
                "total_value": self.products.total_value()
            },
            lambda data: "Inventory is empty." if not data["count"] else f"{data['count']} product(s)."
        )

    def low_stock_report(self, threshold: Optional[int] = None) -> OperationResult:
        if threshold is None:
            threshold = self.products.low_stock_threshold
        return self._execute(
            "Low stock report",
            lambda: {"threshold": threshold, "products": self.products.low_stock(threshold)},
            lambda data: (
                f"{len(data['products'])} low stock item(s)." if data["products"]
                else "No low stock items found."
            )
        )

    def total_value(self) -> OperationResult:
        return self._execute(
            "Total value",
            self.products.total_value,
            lambda value: f"Total Inventory Value: ${value:.2f}"
        )

    def shutdown(self):
        """
        End the session and write final snapshots of both stores.

        Raises:
            StorageError: If a snapshot cannot be written
        """
        self.credentials.logout()
        self.credentials.save()
        self.products.save()
        self.logger.info("Stores saved on shutdown")
