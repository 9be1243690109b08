"""
Constructor argument validation and ABI encoding.

Arguments are checked positionally against the constructor inputs of the
artifact ABI.  Count or type disagreement raises ArgumentMismatchError;
values are never silently coerced.  The only conversions performed are
the explicit spellings a Solidity toolchain also accepts: decimal or hex
strings for integer types, hex strings for ``bytes``, and any-case hex
strings for addresses (returned checksummed).
"""

from __future__ import annotations

import re
from typing import Any, Sequence

from eth_abi import encode
from eth_utils import is_hex_address, to_checksum_address

from ..errors import ArgumentMismatchError
from .artifacts import ContractArtifact

_ARRAY_RE = re.compile(r"^(?P<base>.+)\[(?P<size>\d*)\]$")
_INT_RE = re.compile(r"^(?P<signed>u?)int(?P<bits>\d*)$")
_BYTES_N_RE = re.compile(r"^bytes(?P<size>\d+)$")
_DECIMAL_RE = re.compile(r"^-?\d+$")
_HEX_RE = re.compile(r"^0x[0-9a-fA-F]*$")


def constructor_inputs(artifact: ContractArtifact) -> list[dict[str, Any]]:
    constructor = artifact.constructor()
    if constructor is None:
        return []
    return list(constructor.get("inputs", []))


def normalize_arguments(
    inputs: Sequence[dict[str, Any]],
    args: Sequence[Any],
    contract_name: str = "contract",
) -> list[Any]:
    """
    Validate ``args`` against ABI ``inputs`` and return encoder-ready values.

    Raises:
        ArgumentMismatchError: On count or type disagreement
    """
    if isinstance(args, (str, bytes)) or not isinstance(args, Sequence):
        raise ArgumentMismatchError(
            f"Constructor arguments for {contract_name} must be a list, got {type(args).__name__}"
        )
    if len(args) != len(inputs):
        signature = ", ".join(_describe(inp) for inp in inputs) or "no parameters"
        raise ArgumentMismatchError(
            f"{contract_name} constructor takes {len(inputs)} argument(s) ({signature}), "
            f"got {len(args)}"
        )
    return [
        _normalize(inp, value, label=_describe(inp) if inp.get("name") else f"#{index}")
        for index, (inp, value) in enumerate(zip(inputs, args))
    ]


def encode_constructor_args(artifact: ContractArtifact, args: Sequence[Any]) -> bytes:
    inputs = constructor_inputs(artifact)
    values = normalize_arguments(inputs, args, contract_name=artifact.contract_name)
    if not inputs:
        return b""
    types = [canonical_type(inp) for inp in inputs]
    return encode(types, values)


def deployment_data(artifact: ContractArtifact, args: Sequence[Any]) -> str:
    """Creation bytecode followed by the encoded constructor arguments."""
    encoded = encode_constructor_args(artifact, args)
    return artifact.bytecode + encoded.hex()


def canonical_type(inp: dict[str, Any]) -> str:
    abi_type = inp["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    suffix = abi_type[len("tuple"):]
    inner = ",".join(canonical_type(c) for c in inp.get("components", []))
    return f"({inner}){suffix}"


def _describe(inp: dict[str, Any]) -> str:
    name = inp.get("name")
    return f"{inp['type']} {name}" if name else inp["type"]


def _mismatch(label: str, abi_type: str, value: Any, reason: str = "") -> ArgumentMismatchError:
    detail = f": {reason}" if reason else ""
    return ArgumentMismatchError(
        f"Argument {label} expects {abi_type}, got {type(value).__name__} {value!r}{detail}"
    )


def _normalize(inp: dict[str, Any], value: Any, label: str) -> Any:
    abi_type = inp["type"]

    array = _ARRAY_RE.match(abi_type)
    if array:
        if not isinstance(value, (list, tuple)):
            raise _mismatch(label, abi_type, value)
        size = array.group("size")
        if size and len(value) != int(size):
            raise _mismatch(label, abi_type, value, f"expected {size} items")
        element = dict(inp, type=array.group("base"))
        return [_normalize(element, item, f"{label}[{i}]") for i, item in enumerate(value)]

    if abi_type == "tuple":
        components = inp.get("components", [])
        if not isinstance(value, (list, tuple)) or len(value) != len(components):
            raise _mismatch(label, abi_type, value, f"expected {len(components)} components")
        return tuple(
            _normalize(comp, item, f"{label}.{comp.get('name') or i}")
            for i, (comp, item) in enumerate(zip(components, value))
        )

    integer = _INT_RE.match(abi_type)
    if integer:
        return _normalize_int(abi_type, value, label, signed=not integer.group("signed"),
                              bits=int(integer.group("bits") or 256))

    if abi_type == "address":
        if not isinstance(value, str) or not is_hex_address(value):
            raise _mismatch(label, abi_type, value)
        return to_checksum_address(value)

    if abi_type == "bool":
        if not isinstance(value, bool):
            raise _mismatch(label, abi_type, value)
        return value

    if abi_type == "string":
        if not isinstance(value, str):
            raise _mismatch(label, abi_type, value)
        return value

    if abi_type == "bytes" or _BYTES_N_RE.match(abi_type):
        raw = _to_bytes(value)
        if raw is None:
            raise _mismatch(label, abi_type, value)
        fixed = _BYTES_N_RE.match(abi_type)
        if fixed and len(raw) != int(fixed.group("size")):
            raise _mismatch(label, abi_type, value, f"expected {fixed.group('size')} bytes")
        return raw

    # fixed-point and other exotic types go to the encoder unchanged
    return value


def _normalize_int(abi_type: str, value: Any, label: str, signed: bool, bits: int) -> int:
    if isinstance(value, bool):
        raise _mismatch(label, abi_type, value)
    if isinstance(value, str):
        if _DECIMAL_RE.match(value):
            number = int(value)
        elif _HEX_RE.match(value) and len(value) > 2:
            number = int(value, 16)
        else:
            raise _mismatch(label, abi_type, value)
    elif isinstance(value, int):
        number = value
    else:
        raise _mismatch(label, abi_type, value)

    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= number <= high:
        raise _mismatch(label, abi_type, value, "out of range")
    return number


def _to_bytes(value: Any) -> bytes | None:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str) and _HEX_RE.match(value) and len(value) % 2 == 0:
        return bytes.fromhex(value[2:])
    return None
