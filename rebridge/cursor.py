from __future__ import annotations

from typing import Any, Generator

from pydantic import ConfigDict, JsonValue, TypeAdapter, ValidationError

from .errors import InvalidUsage, UnsupportedOperation
from .gateway import DocumentGateway, encode

_JSON = TypeAdapter(JsonValue, config=ConfigDict(allow_inf_nan=False))

# Attribute names that would read as list manipulation; only push/pop are supported.
SEQUENCE_METHODS = frozenset(
    name for name in dir(list) if not name.startswith("_") and name not in ("pop",)
)


def _json_value(value: Any) -> Any:
    try:
        value = _JSON.validate_python(value)
    except ValidationError as e:
        raise InvalidUsage(f"Value is not JSON-serializable: {e.errors()[0]['msg']}") from e
    # raises InvalidUsage for NaN and Infinity
    encode(value)
    return value


class Cursor:
    """
    A root document name plus a path into it.

    Navigating never touches the store and always returns a new cursor::

        db.users.alice.age        # attribute access
        db.users["alice"]["set"]  # subscripts reach fields named like methods

    Nothing happens until a terminal operation is awaited::

        await db.users.alice.age              # read, None if missing
        await db.users.alice.age.set(31)      # -> 31
        await db.users.delete("alice")        # -> True / False
        await db.users.alice.tags.push("x")   # -> new length
        await db.users.alice.tags.pop()       # -> removed element
    """

    __slots__ = ("_gateway", "_root", "_path")

    def __init__(self, gateway: DocumentGateway, root: str, path: tuple[str, ...] = ()):
        object.__setattr__(self, "_gateway", gateway)
        object.__setattr__(self, "_root", root)
        object.__setattr__(self, "_path", tuple(path))

    @property
    def root(self) -> str:
        return self._root

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    def field(self, name: str) -> "Cursor":
        if not isinstance(name, str):
            raise UnsupportedOperation(
                f"Indexing Rebridge objects with {type(name).__name__} is not supported; field names must be strings"
            )
        return Cursor(self._gateway, self._root, self._path + (name,))

    def __getattr__(self, name: str) -> "Cursor":
        if name.startswith("_"):
            raise AttributeError(name)
        if name in SEQUENCE_METHODS:
            raise UnsupportedOperation(f"Calling {name} on Rebridge objects is not yet supported.")
        return self.field(name)

    def __getitem__(self, name: str) -> "Cursor":
        return self.field(name)

    # Terminal operations

    async def get(self) -> Any:
        return await self._gateway.read(self._root, self._path)

    def __await__(self) -> Generator[Any, None, Any]:
        return self.get().__await__()

    async def set(self, value: Any) -> Any:
        return await self._gateway.set(self._root, self._path, _json_value(value))

    async def delete(self, key: str) -> bool:
        if not isinstance(key, str):
            raise InvalidUsage("delete() takes the name of the field to remove")
        return await self._gateway.delete(self._root, self._path, key)

    async def push(self, value: Any) -> int:
        return await self._gateway.push(self._root, self._path, _json_value(value))

    async def pop(self) -> Any:
        return await self._gateway.pop(self._root, self._path)

    # Native mutation syntax is rejected outright

    def __setattr__(self, name: str, value: Any) -> None:
        raise InvalidUsage("Can't assign values to Rebridge objects, use the .set() coroutine instead")

    def __setitem__(self, name: str, value: Any) -> None:
        raise InvalidUsage("Can't assign values to Rebridge objects, use the .set() coroutine instead")

    def __delattr__(self, name: str) -> None:
        raise InvalidUsage("The del statement isn't supported for Rebridge objects, use the .delete() coroutine instead")

    def __delitem__(self, name: str) -> None:
        raise InvalidUsage("The del statement isn't supported for Rebridge objects, use the .delete() coroutine instead")

    def __contains__(self, item: Any) -> bool:
        raise InvalidUsage("The `in` operator isn't supported for Rebridge objects.")

    def __iter__(self):
        raise InvalidUsage("Rebridge objects can't be iterated; await the cursor to read its value.")

    def __repr__(self) -> str:
        return f"<Cursor {'.'.join((self._root,) + self._path)}>"
