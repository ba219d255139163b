"""Runtime instances of declared classes."""

from __future__ import annotations

import inspect
import types
from typing import Any

from traitkit.types import ClassDefinition, is_reserved


class Instance:
    """An object created by instantiating a declared class.

    Attribute reads go through the definition's getters first (accessor
    mode), then the instance's own data, then the definition's fields.
    Writes go through a setter when one is registered, otherwise they are
    stored on the instance.
    """

    __slots__ = ("__class_name__", "__definition__", "__deleted__", "__data__")

    def __init__(self, definition: ClassDefinition) -> None:
        object.__setattr__(self, "__class_name__", definition.name)
        object.__setattr__(self, "__definition__", definition)
        object.__setattr__(self, "__deleted__", False)
        object.__setattr__(self, "__data__", {})

    def __getattr__(self, key: str) -> Any:
        if is_reserved(key):
            raise AttributeError(key)
        definition: ClassDefinition = self.__definition__
        getters = definition.getters
        if getters is not None:
            getter = getters.get(key)
            if getter is not None:
                return getter(self)

        data = self.__data__
        if key in data:
            return data[key]

        try:
            value = definition.fields[key]
        except KeyError:
            raise AttributeError(
                f"'{definition.name}' instance has no attribute '{key}'"
            ) from None
        if inspect.isfunction(value):
            return types.MethodType(value, self)
        return value

    def __setattr__(self, key: str, value: Any) -> None:
        if key in Instance.__slots__:
            object.__setattr__(self, key, value)
            return
        setters = self.__definition__.setters
        if setters is not None:
            setter = setters.get(key)
            if setter is not None:
                setter(self, value)
                return
        self.__data__[key] = value

    def __delattr__(self, key: str) -> None:
        try:
            del self.__data__[key]
        except KeyError:
            raise AttributeError(key) from None

    def __repr__(self) -> str:
        state = " (deleted)" if self.__deleted__ else ""
        return f"<{self.__class_name__} instance{state}>"


def class_name_of(value: Any) -> str | None:
    """Return the class tag of an instance, or None for any other value."""
    if isinstance(value, Instance):
        return value.__class_name__
    return None
