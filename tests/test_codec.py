"""Tests for the binary record codec."""

import io
import struct

import pytest

from stockroom.models.credential import CredentialRecord
from stockroom.models.product import Product
from stockroom.storage.codec import BinaryRecordCodec
from stockroom.utils.exceptions import CorruptSnapshotError, TruncatedInputError


@pytest.fixture
def codec():
    return BinaryRecordCodec()


def _roundtrip_product(codec, product):
    buffer = io.BytesIO()
    codec.encode_product(buffer, product)
    buffer.seek(0)
    return codec.decode_product(buffer)


class TestTextFields:
    """Tests for length-prefixed text."""

    def test_layout(self, codec):
        """Test that text is a little-endian u64 byte length followed by UTF-8."""
        buffer = io.BytesIO()

        codec.encode_text(buffer, "héllo")

        raw = "héllo".encode("utf-8")
        assert buffer.getvalue() == struct.pack("<Q", len(raw)) + raw

    def test_empty_text(self, codec):
        buffer = io.BytesIO()
        codec.encode_text(buffer, "")

        assert buffer.getvalue() == b"\x00" * 8
        buffer.seek(0)
        assert codec.decode_text(buffer) == ""

    def test_declared_length_longer_than_data(self, codec):
        """Test that a short payload raises TruncatedInputError."""
        buffer = io.BytesIO(struct.pack("<Q", 10) + b"abc")

        with pytest.raises(TruncatedInputError) as exc_info:
            codec.decode_text(buffer, "product name")

        assert exc_info.value.details["expected"] == 10
        assert exc_info.value.details["received"] == 3

    def test_truncated_length_prefix(self, codec):
        with pytest.raises(TruncatedInputError):
            codec.decode_text(io.BytesIO(b"\x01\x00"))

    def test_invalid_utf8(self, codec):
        buffer = io.BytesIO(struct.pack("<Q", 2) + b"\xff\xfe")

        with pytest.raises(CorruptSnapshotError):
            codec.decode_text(buffer)

    def test_huge_declared_length_is_truncation(self, codec):
        buffer = io.BytesIO(struct.pack("<Q", 2 ** 62) + b"abc")

        with pytest.raises(TruncatedInputError):
            codec.decode_text(buffer)


class TestProductRecords:
    """Tests for product record encoding."""

    def test_roundtrip(self, codec):
        product = Product(name="widget-7", product_id="W-007", quantity=3, price=2.5)

        assert _roundtrip_product(codec, product) == product

    def test_roundtrip_empty_fields_and_zero_values(self, codec):
        product = Product(name="", product_id="", quantity=0, price=0.0)

        assert _roundtrip_product(codec, product) == product

    def test_layout(self, codec):
        """Test exact field order and widths."""
        buffer = io.BytesIO()

        codec.encode_product(buffer, Product(name="Nut", product_id="N1", quantity=7, price=0.25))

        expected = (
            struct.pack("<Q", 3) + b"Nut"
            + struct.pack("<Q", 2) + b"N1"
            + struct.pack("<i", 7)
            + struct.pack("<d", 0.25)
        )
        assert buffer.getvalue() == expected

    def test_negative_quantity_on_disk_is_corrupt(self, codec):
        raw = (
            struct.pack("<Q", 1) + b"A"
            + struct.pack("<Q", 1) + b"1"
            + struct.pack("<i", -5)
            + struct.pack("<d", 1.0)
        )

        with pytest.raises(CorruptSnapshotError, match="Quantity cannot be negative"):
            codec.decode_product(io.BytesIO(raw))

    def test_missing_price_is_truncation(self, codec):
        buffer = io.BytesIO()
        codec.encode_product(buffer, Product(name="A", product_id="1", quantity=1, price=1.0))

        with pytest.raises(TruncatedInputError, match="price"):
            codec.decode_product(io.BytesIO(buffer.getvalue()[:-3]))


class TestCredentialRecords:
    """Tests for credential record encoding."""

    def test_roundtrip(self, codec):
        record = CredentialRecord(username="alice", password_token="pbkdf2_sha256$1000$ab$cd")
        buffer = io.BytesIO()

        codec.encode_credential(buffer, record)
        buffer.seek(0)

        assert codec.decode_credential(buffer) == record

    def test_roundtrip_empty_fields(self, codec):
        record = CredentialRecord(username="", password_token="")
        buffer = io.BytesIO()

        codec.encode_credential(buffer, record)
        buffer.seek(0)

        assert codec.decode_credential(buffer) == record


class TestSnapshots:
    """Tests for count-prefixed snapshots."""

    def test_snapshot_roundtrip(self, codec, sample_products):
        data = codec.encode_snapshot(sample_products, codec.encode_product)

        assert data[:8] == struct.pack("<Q", len(sample_products))
        assert codec.read_snapshot(io.BytesIO(data), codec.decode_product) == sample_products

    def test_empty_snapshot(self, codec):
        data = codec.encode_snapshot([], codec.encode_credential)

        assert data == struct.pack("<Q", 0)
        assert codec.read_snapshot(io.BytesIO(data), codec.decode_credential) == []

    def test_fewer_records_than_declared(self, codec, sample_products):
        data = codec.encode_snapshot(sample_products[:1], codec.encode_product)
        tampered = struct.pack("<Q", 2) + data[8:]

        with pytest.raises(TruncatedInputError):
            codec.read_snapshot(io.BytesIO(tampered), codec.decode_product)

    def test_empty_stream(self, codec):
        with pytest.raises(TruncatedInputError, match="record count"):
            codec.read_snapshot(io.BytesIO(b""), codec.decode_product)
