import hashlib
from typing import Union


def sha256_hex(data: Union[bytes, bytearray, memoryview]) -> str:
    return hashlib.sha256(bytes(data)).hexdigest()


def content_key(*, prefix: str, data: Union[bytes, bytearray, memoryview], suffix: str) -> str:
    # Identical artifacts land on the same key.
    name = f"{sha256_hex(data)}{suffix}"
    prefix = str(prefix or "").strip("/")
    return f"{prefix}/{name}" if prefix else name
