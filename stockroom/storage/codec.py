"""
Binary record codec for store snapshots.

Snapshot layout, all integers little-endian:

    [record_count: u64]
    Product record:
        [name_len: u64][name utf-8][id_len: u64][id utf-8][quantity: i32][price: f64]
    Credential record:
        [username_len: u64][username utf-8][token_len: u64][token utf-8]

There is no version field and no checksum. The declared count and complete
reads of every field are the only integrity checks.
"""

import io
import struct
from typing import BinaryIO, Callable, Iterable, List, TypeVar

from ..models.credential import CredentialRecord
from ..models.product import Product
from ..utils.exceptions import CorruptSnapshotError, InvalidValueError, TruncatedInputError


T = TypeVar("T")

LENGTH = struct.Struct("<Q")
QUANTITY = struct.Struct("<i")
PRICE = struct.Struct("<d")

READ_CHUNK_SIZE = 65536


class BinaryRecordCodec:
    """Encodes and decodes store records to and from a byte stream."""

    @staticmethod
    def read_exact(stream: BinaryIO, size: int, field: str) -> bytes:
        """
        Read exactly ``size`` bytes.

        Raises:
            TruncatedInputError: If the stream ends first
        """
        # Read in chunks so a corrupt length cannot force one huge allocation
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = stream.read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)

        if remaining:
            raise TruncatedInputError(
                f"Unexpected end of data while reading {field}",
                details={"field": field, "expected": size, "received": size - remaining}
            )
        return b"".join(chunks)

    def encode_text(self, stream: BinaryIO, text: str):
        """Write a length-prefixed UTF-8 string."""
        raw = text.encode("utf-8")
        stream.write(LENGTH.pack(len(raw)))
        stream.write(raw)

    def decode_text(self, stream: BinaryIO, field: str = "text") -> str:
        """
        Read a length-prefixed UTF-8 string.

        Raises:
            TruncatedInputError: If fewer bytes are available than declared
            CorruptSnapshotError: If the bytes are not valid UTF-8
        """
        (length,) = LENGTH.unpack(self.read_exact(stream, LENGTH.size, f"{field} length"))
        raw = self.read_exact(stream, length, field)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptSnapshotError(
                f"Invalid text in {field}",
                details={"field": field, "error": str(e)}
            )

    def encode_product(self, stream: BinaryIO, product: Product):
        """Write one product record."""
        self.encode_text(stream, product.name)
        self.encode_text(stream, product.product_id)
        stream.write(QUANTITY.pack(product.quantity))
        stream.write(PRICE.pack(product.price))

    def decode_product(self, stream: BinaryIO) -> Product:
        """Read one product record."""
        name = self.decode_text(stream, "product name")
        product_id = self.decode_text(stream, "product id")
        (quantity,) = QUANTITY.unpack(self.read_exact(stream, QUANTITY.size, "quantity"))
        (price,) = PRICE.unpack(self.read_exact(stream, PRICE.size, "price"))

        try:
            return Product(name=name, product_id=product_id, quantity=quantity, price=price)
        except InvalidValueError as e:
            raise CorruptSnapshotError(
                f"Invalid product record {product_id!r}: {e.message}",
                details={"product_id": product_id, **e.details}
            )

    def encode_credential(self, stream: BinaryIO, record: CredentialRecord):
        """Write one credential record."""
        self.encode_text(stream, record.username)
        self.encode_text(stream, record.password_token)

    def decode_credential(self, stream: BinaryIO) -> CredentialRecord:
        """Read one credential record."""
        username = self.decode_text(stream, "username")
        token = self.decode_text(stream, "password token")
        return CredentialRecord(username=username, password_token=token)

    def write_snapshot(
        self,
        stream: BinaryIO,
        records: List[T],
        encoder: Callable[[BinaryIO, T], None]
    ):
        """Write a count-prefixed sequence of records."""
        stream.write(LENGTH.pack(len(records)))
        for record in records:
            encoder(stream, record)

    def read_snapshot(
        self,
        stream: BinaryIO,
        decoder: Callable[[BinaryIO], T]
    ) -> List[T]:
        """
        Read a count-prefixed sequence of records.

        Raises:
            TruncatedInputError: If the stream holds fewer records than declared
            CorruptSnapshotError: If a record holds an invalid value
        """
        (count,) = LENGTH.unpack(self.read_exact(stream, LENGTH.size, "record count"))
        records = []
        for _ in range(count):
            records.append(decoder(stream))
        return records

    def encode_snapshot(self, records: Iterable[T], encoder: Callable[[BinaryIO, T], None]) -> bytes:
        """Encode records into a single snapshot byte string."""
        buffer = io.BytesIO()
        self.write_snapshot(buffer, list(records), encoder)
        return buffer.getvalue()
