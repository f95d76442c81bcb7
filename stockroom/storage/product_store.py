"""Product store: CRUD, search and reporting over product records."""

from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from .codec import BinaryRecordCodec
from .snapshot_store import SnapshotStore
from ..models.product import Product
from ..utils.config import get_config
from ..utils.exceptions import DuplicateIDError, EmptyFieldError, NotFoundError
from ..utils.logger import get_inventory_logger


class ProductStore(SnapshotStore[Product]):
    """
    Products keyed by product ID, persisted after every mutation.

    Listing and search results are ordered by product ID and are copies,
    so callers cannot change stored records outside of store operations.
    """

    record_label = "product"

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        low_stock_threshold: Optional[int] = None,
        codec: Optional[BinaryRecordCodec] = None
    ):
        """
        Initialize and load the product store.

        Args:
            path: Snapshot file, defaults to the configured products file
            low_stock_threshold: Default threshold for ``low_stock``
            codec: Optional codec instance
        """
        config = get_config()
        super().__init__(path or config.env.products_file, codec)
        self.logger = get_inventory_logger()

        if low_stock_threshold is None:
            low_stock_threshold = config.inventory.low_stock_threshold
        self.low_stock_threshold = low_stock_threshold

        self.load()

    def _encode_record(self, stream: BinaryIO, record: Product):
        self.codec.encode_product(stream, record)

    def _decode_record(self, stream: BinaryIO) -> Product:
        return self.codec.decode_product(stream)

    def _key(self, record: Product) -> str:
        return record.product_id

    def add(self, product: Product) -> Product:
        """
        Insert a new product and persist the store.

        Args:
            product: Product to insert; the store keeps its own copy

        Returns:
            Copy of the stored product

        Raises:
            DuplicateIDError: If the product ID is already present
            EmptyFieldError: If the product ID or name is empty
        """
        if product.product_id in self._records:
            raise DuplicateIDError(
                f"Product ID already exists: {product.product_id}",
                details={"product_id": product.product_id}
            )

        if not product.product_id or not product.name:
            raise EmptyFieldError("Product ID and name cannot be empty")

        records = dict(self._records)
        records[product.product_id] = product.copy()
        self._commit(records)

        self.logger.info(f"Added product {product.product_id} ({product.name})")
        return product.copy()

    def update(self, product_id: str, new_quantity: int, new_price: float) -> Product:
        """
        Replace quantity and price of an existing product and persist the store.

        Both values are validated before anything changes.

        Returns:
            Copy of the updated product

        Raises:
            NotFoundError: If the product ID is absent
            InvalidValueError: If either value is negative
        """
        current = self._records.get(product_id)
        if current is None:
            raise NotFoundError(f"Product not found: {product_id}", details={"product_id": product_id})

        updated = current.copy()
        updated.set_quantity(new_quantity)
        updated.set_price(new_price)

        records = dict(self._records)
        records[product_id] = updated
        self._commit(records)

        self.logger.info(
            f"Updated product {product_id}: quantity {current.quantity} -> {updated.quantity}, "
            f"price {current.price:.2f} -> {updated.price:.2f}"
        )
        return updated.copy()

    def delete(self, product_id: str) -> Product:
        """
        Remove a product and persist the store.

        Returns:
            The removed product

        Raises:
            NotFoundError: If the product ID is absent
        """
        if product_id not in self._records:
            raise NotFoundError(f"Product not found: {product_id}", details={"product_id": product_id})

        records = dict(self._records)
        removed = records.pop(product_id)
        self._commit(records)

        self.logger.info(f"Deleted product {product_id}")
        return removed

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """Exact ID lookup; None when absent."""
        product = self._records.get(product_id)
        return product.copy() if product is not None else None

    def find_by_name(self, substring: str) -> List[Product]:
        """Case-insensitive partial match on product names, in ID order."""
        needle = substring.lower()
        return [
            product.copy()
            for product in self._sorted_records()
            if needle in product.name.lower()
        ]

    def all(self) -> List[Product]:
        """Every product in ID order."""
        return [product.copy() for product in self._sorted_records()]

    def total_value(self) -> float:
        """Sum of quantity x price over every product."""
        return sum((product.total_value for product in self._records.values()), 0.0)

    def low_stock(self, threshold: Optional[int] = None) -> List[Product]:
        """Products with quantity at or below the threshold, in ID order."""
        if threshold is None:
            threshold = self.low_stock_threshold
        return [
            product.copy()
            for product in self._sorted_records()
            if product.is_low_stock(threshold)
        ]
