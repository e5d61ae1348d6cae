"""Shared type definitions for reserve engine models.

Addresses are Sui-style: ``0x`` followed by 64 hex characters. Shorter
hex strings (``0x2``) are accepted and left-padded, matching how the
hosting runtime prints short addresses.
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

from reserve_engine.errors import InvalidAddress
from reserve_engine.safe_int import U64_MAX

ADDRESS_HEX_LENGTH = 64

# Null sentinel (``@0x0``)
NULL_ADDRESS = "0x" + "0" * ADDRESS_HEX_LENGTH


def normalize_address(address: str) -> str:
    """Normalize an address to lowercase, 0x-prefixed, 64 hex chars.

    Args:
        address: Hex address with or without 0x prefix, possibly short

    Returns:
        Canonical address form

    Raises:
        InvalidAddress: If the input is not a hex string or is too long
    """
    if not isinstance(address, str):
        raise InvalidAddress(f"Address must be a string, got {type(address).__name__}")
    addr = address.lower()
    if addr.startswith("0x"):
        addr = addr[2:]
    if not addr or len(addr) > ADDRESS_HEX_LENGTH:
        raise InvalidAddress(f"Invalid address length: {address!r}")
    try:
        int(addr, 16)
    except ValueError as err:
        raise InvalidAddress(f"Address is not hex: {address!r}") from err
    return "0x" + addr.rjust(ADDRESS_HEX_LENGTH, "0")


def is_valid_address(address: Any) -> bool:
    """Check if a value can be normalized to an address."""
    try:
        normalize_address(address)
    except InvalidAddress:
        return False
    return True


def is_null_address(address: str) -> bool:
    """True if the address normalizes to the null sentinel."""
    return normalize_address(address) == NULL_ADDRESS


def _validate_address(value: Any) -> str:
    # pydantic only converts ValueError/AssertionError into validation errors
    try:
        return normalize_address(value)
    except InvalidAddress as err:
        raise ValueError(str(err)) from err


def _validate_u64(value: int) -> int:
    if value < 0:
        raise ValueError(f"U64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"U64 overflow: {value} > 2^64-1")
    return value


# Canonical Sui address
Address = Annotated[str, BeforeValidator(_validate_address)]

# 64-bit unsigned integer
U64 = Annotated[
    int,
    AfterValidator(_validate_u64),
    Field(description="64-bit unsigned integer"),
]
