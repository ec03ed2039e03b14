"""Constructor-argument encoding shared by deployment and verification."""

from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from web3 import Web3

from .exceptions import ConstructorArgsMismatchError


def constructor_abi(abi: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the constructor entry of a contract ABI, if it declares one."""
    return next((item for item in abi if item.get("type") == "constructor"), None)


def _abi_type(param: Dict[str, Any]) -> str:
    # Tuples are spelled out from their components, keeping any array suffix
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_abi_type(c) for c in param.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def constructor_types(abi: List[Dict[str, Any]]) -> List[str]:
    """
    Get the canonical ABI types of the constructor inputs.

    Args:
        abi: Contract ABI

    Returns:
        List of type strings, empty if the contract has no constructor
    """
    ctor = constructor_abi(abi)
    if ctor is None:
        return []
    return [_abi_type(p) for p in ctor.get("inputs", [])]


def _normalize_arg(abi_type: str, value: Any) -> Any:
    # JSON unit files carry bytes as hex strings and big integers as strings
    if abi_type.endswith("]"):
        element_type = abi_type[: abi_type.rindex("[")]
        return [_normalize_arg(element_type, v) for v in value]
    if abi_type.startswith("("):
        component_types = _split_tuple_types(abi_type[1:-1])
        return tuple(_normalize_arg(t, v) for t, v in zip(component_types, value))
    if abi_type.startswith("bytes") and isinstance(value, str):
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    if abi_type.startswith(("uint", "int")) and isinstance(value, str):
        return int(value, 0)
    if abi_type == "address" and isinstance(value, str):
        return Web3.to_checksum_address(value)
    return value


def _split_tuple_types(inner: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current = ""
    for char in inner:
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        parts.append(current)
    return parts


def encode_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> bytes:
    """
    ABI-encode constructor arguments.

    This is the only encoder used for both the deployment transaction and the
    verification request, so both see identical bytes.

    Args:
        abi: Contract ABI
        args: Ordered constructor arguments

    Returns:
        Encoded arguments (empty for a constructor without inputs)

    Raises:
        ConstructorArgsMismatchError: If the arguments do not fit the constructor
    """
    types = constructor_types(abi)
    if len(types) != len(args):
        raise ConstructorArgsMismatchError(
            f"Constructor expects {len(types)} arguments, got {len(args)}"
        )
    if not types:
        return b""

    try:
        values = [_normalize_arg(t, v) for t, v in zip(types, args)]
        return encode(types, values)
    except (EncodingError, TypeError, ValueError) as e:
        raise ConstructorArgsMismatchError(
            f"Cannot encode constructor arguments {list(args)!r} as {types}: {e}"
        ) from e


def args_hash(encoded_args: bytes) -> str:
    """Keccak-256 of encoded constructor arguments, as 0x-prefixed hex."""
    return Web3.to_hex(Web3.keccak(encoded_args))


def bytecode_hash(bytecode: str) -> str:
    """Keccak-256 of creation bytecode, as 0x-prefixed hex."""
    return Web3.to_hex(Web3.keccak(hexstr=bytecode))


def deployment_data(bytecode: str, encoded_args: bytes) -> str:
    """Creation transaction data: bytecode followed by the encoded arguments."""
    prefix = bytecode if bytecode.startswith("0x") else f"0x{bytecode}"
    return prefix + encoded_args.hex()


def to_json_args(args: Sequence[Any]) -> List[Any]:
    """
    Convert constructor arguments into a JSON-serializable list.

    Args:
        args: Constructor arguments

    Returns:
        List with bytes as 0x-hex strings and tuples as lists
    """
    result: List[Any] = []
    for value in args:
        if isinstance(value, (bytes, bytearray)):
            result.append("0x" + bytes(value).hex())
        elif isinstance(value, (list, tuple)):
            result.append(to_json_args(value))
        else:
            result.append(value)
    return result
