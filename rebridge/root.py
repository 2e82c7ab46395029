from __future__ import annotations

from typing import Any

from .cursor import Cursor
from .errors import InvalidUsage, UnsupportedOperation
from .gateway import DEFAULT_NAMESPACE, DocumentGateway
from .settings import Settings, get_settings
from .stores import create_store
from .stores.interfaces import HashStore


class Rebridge:
    """
    The virtual root document. Each first-level field is one root document in the store::

        db = Rebridge(MemoryHashStore())
        await db.foo.bar.set(1)   # store now holds {"bar": 1} under "foo"
    """

    __slots__ = ("_gateway",)

    def __init__(
        self,
        store: HashStore,
        namespace: str = DEFAULT_NAMESPACE,
        *,
        optimistic: bool = False,
        max_retries: int = 3,
    ):
        gateway = DocumentGateway(store, namespace, optimistic=optimistic, max_retries=max_retries)
        object.__setattr__(self, "_gateway", gateway)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Rebridge":
        settings = settings or get_settings()
        return cls(
            create_store(settings),
            settings.namespace,
            optimistic=settings.optimistic,
            max_retries=settings.max_retries,
        )

    def __getattr__(self, name: str) -> Cursor:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __getitem__(self, name: str) -> Cursor:
        if not isinstance(name, str):
            raise UnsupportedOperation("Root document names must be strings")
        if name == "set":
            raise UnsupportedOperation("You can't call .set on the root object. Syntax: db.foo.set(bar)")
        return Cursor(self._gateway, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise InvalidUsage("Can't assign values to Rebridge objects, use the .set() coroutine instead")

    def __setitem__(self, name: str, value: Any) -> None:
        raise InvalidUsage("Can't assign values to Rebridge objects, use the .set() coroutine instead")

    def __delattr__(self, name: str) -> None:
        raise InvalidUsage("The del statement isn't supported for Rebridge objects.")

    def __delitem__(self, name: str) -> None:
        raise InvalidUsage("The del statement isn't supported for Rebridge objects.")

    def __contains__(self, item: Any) -> bool:
        raise InvalidUsage("The `in` operator isn't supported for Rebridge objects.")

    def __iter__(self):
        raise InvalidUsage("Rebridge objects can't be iterated.")

    def __repr__(self) -> str:
        return f"<Rebridge namespace={self._gateway.namespace!r}>"
