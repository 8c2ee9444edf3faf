"""Tests for the address and flaky resource repositories.

Test Organization:
- TestLoadAddresses: Built-in data and JSON file loading
- TestInMemoryAddressRepository: Lookup and ordering
- TestRandomlyFailingFlakyRepository: Injected failures
"""

import asyncio
import json
from pathlib import Path

import pytest
from hypothesis import given
from pydantic import ValidationError

from src.domain.exceptions import FlakyResourceUnavailableError
from src.domain.models.address import Address
from src.infrastructure.repositories import (
    InMemoryAddressRepository,
    RandomlyFailingFlakyRepository,
    load_addresses,
)
from src.infrastructure.repositories.address_repository import DEFAULT_ADDRESSES
from src.infrastructure.repositories.flaky_repository import DEFAULT_FLAKY_RESOURCES
from tests.factories import address_factory, address_json, flaky_factory
from tests.strategies import address_sets


# ============================================================================
# Loading Tests
# ============================================================================


class TestLoadAddresses:
    """Test loading address records."""

    def test_returns_builtin_data_without_path(self) -> None:
        """Test built-in addresses are used when no file is configured."""
        # Act
        addresses = load_addresses(None)

        # Assert
        assert addresses == list(DEFAULT_ADDRESSES)
        assert len({address.id for address in addresses}) == len(addresses)

    def test_loads_json_array_file(self, tmp_path: Path) -> None:
        """Test addresses are read from a JSON array file.

        Arrange: File with two address objects
        Act: Load from the file
        Assert: Domain objects in file order
        """
        # Arrange
        records = [address_factory(id=9, city="Lyon"), address_factory(id=3)]
        path = tmp_path / "addresses.json"
        path.write_text(json.dumps([address_json(record) for record in records]))

        # Act
        addresses = load_addresses(str(path))

        # Assert
        assert addresses == records
        assert all(isinstance(address, Address) for address in addresses)

    def test_rejects_malformed_file(self, tmp_path: Path) -> None:
        """Test a file that is not a list of addresses fails loudly."""
        # Arrange
        path = tmp_path / "addresses.json"
        path.write_text(json.dumps([{"id": "not-a-number"}]))

        # Act & Assert
        with pytest.raises(ValidationError):
            load_addresses(str(path))

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Test a configured but missing file is an error, not an empty set."""
        with pytest.raises(FileNotFoundError):
            load_addresses(str(tmp_path / "missing.json"))


# ============================================================================
# Address Repository Tests
# ============================================================================


class TestInMemoryAddressRepository:
    """Test in-memory address lookups."""

    @pytest.mark.asyncio
    async def test_get_by_id_returns_address(self) -> None:
        """Test known id returns its address."""
        # Arrange
        address = address_factory(id=42)
        repository = InMemoryAddressRepository([address])

        # Act
        result = await repository.get_by_id(42)

        # Assert
        assert result == address

    @pytest.mark.asyncio
    @pytest.mark.parametrize("address_id", [0, -1, 999_999, 2**63])
    async def test_get_by_id_returns_none_for_unknown(self, address_id: int) -> None:
        """Test any unknown integer id yields None rather than an error."""
        # Arrange
        repository = InMemoryAddressRepository([address_factory(id=1)])

        # Act
        result = await repository.get_by_id(address_id)

        # Assert
        assert result is None

    @given(records=address_sets())
    def test_get_all_is_sorted_by_id_whatever_the_load_order(self, records: list[Address]) -> None:
        """Test listing order is stable and independent of insertion order.

        Arrange: Addresses with unique ids in arbitrary order
        Act: List all
        Assert: Same records, ascending by id
        """
        # Arrange
        repository = InMemoryAddressRepository(records)

        # Act
        result = asyncio.run(repository.get_all())

        # Assert
        assert [address.id for address in result] == sorted(address.id for address in records)
        assert set(result) == set(records)


# ============================================================================
# Flaky Repository Tests
# ============================================================================


class TestRandomlyFailingFlakyRepository:
    """Test failure injection."""

    @pytest.mark.asyncio
    async def test_never_fails_with_zero_rate(self) -> None:
        """Test rate 0 serves every request.

        Arrange: Repository with failure rate 0
        Act: Fetch by code and list repeatedly
        Assert: No failures, resources returned sorted by code
        """
        # Arrange
        repository = RandomlyFailingFlakyRepository(failure_rate=0.0)

        # Act
        found = [await repository.get_by_code("FLK-002") for _ in range(20)]
        listed = await repository.get_all()

        # Assert
        assert all(resource is not None and resource.code == "FLK-002" for resource in found)
        assert [resource.code for resource in listed] == sorted(
            resource.code for resource in DEFAULT_FLAKY_RESOURCES
        )
        assert repository.calls == 21

    @pytest.mark.asyncio
    async def test_always_fails_with_rate_one(self) -> None:
        """Test rate 1 fails every request with the unavailable error."""
        # Arrange
        repository = RandomlyFailingFlakyRepository(failure_rate=1.0)

        # Act & Assert
        with pytest.raises(FlakyResourceUnavailableError):
            await repository.get_by_code("FLK-001")
        with pytest.raises(FlakyResourceUnavailableError):
            await repository.get_all()

    @pytest.mark.asyncio
    async def test_unknown_code_returns_none(self) -> None:
        """Test unknown codes are absent when the call does not fail."""
        # Arrange
        repository = RandomlyFailingFlakyRepository(
            failure_rate=0.0, resources=[flaky_factory("A")]
        )

        # Act & Assert
        assert await repository.get_by_code("B") is None

    @pytest.mark.asyncio
    async def test_seed_makes_failure_sequence_reproducible(self) -> None:
        """Test two repositories with the same seed fail on the same calls.

        Arrange: Two repositories, rate 0.5, same seed
        Act: Call each 30 times, recording which calls failed
        Assert: Identical failure patterns containing both outcomes
        """

        # Arrange
        async def pattern(repository: RandomlyFailingFlakyRepository) -> list[bool]:
            outcomes = []
            for _ in range(30):
                try:
                    await repository.get_by_code("FLK-001")
                    outcomes.append(False)
                except FlakyResourceUnavailableError:
                    outcomes.append(True)
            return outcomes

        # Act
        first = await pattern(RandomlyFailingFlakyRepository(failure_rate=0.5, seed=7))
        second = await pattern(RandomlyFailingFlakyRepository(failure_rate=0.5, seed=7))

        # Assert
        assert first == second
        assert True in first
        assert False in first
