"""Named enumerations of trace-specific types, such as hierarchy types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Hashable, List, Optional, TypeVar

from spantrace.options import TraceError

__all__ = ["TypeEnumerationData", "TypeEnumeration"]

T = TypeVar("T", bound=Hashable)


@dataclass
class TypeEnumerationData(Generic[T]):
    """One enumerated type, with its short name and description."""

    type: T
    name: str
    description: str


class _TypeAliases:
    """Maps alias strings onto the primary strings they stand for."""

    def __init__(self, case_sensitive: bool) -> None:
        self._alias_to_primary: Dict[str, str] = {}
        self._case_sensitive = case_sensitive

    def _key(self, s: str) -> str:
        return s if self._case_sensitive else s.upper()

    def lookup(self, s: str) -> str:
        return self._alias_to_primary.get(self._key(s), s)

    def with_aliases(self, primary: str, *aliases: str) -> "_TypeAliases":
        for alias in aliases:
            self._alias_to_primary[self._key(alias)] = primary
        return self


class TypeEnumeration(Generic[T]):
    """An ordered set of enumerated types; the first defined is the default."""

    def __init__(self) -> None:
        self._data_by_type: Dict[T, TypeEnumerationData[T]] = {}
        self._ordered: List[TypeEnumerationData[T]] = []
        # A value of None marks a name or description shared by several types.
        self._by_name: Dict[str, Optional[TypeEnumerationData[T]]] = {}
        self._by_description: Dict[str, Optional[TypeEnumerationData[T]]] = {}
        self._description_aliases = _TypeAliases(case_sensitive=False)

    def with_type(self, type_: T, name: str, description: str) -> "TypeEnumeration[T]":
        """Define a type with its name and description; returns self."""
        return self.with_type_data(TypeEnumerationData(type_, name, description))

    def with_description_aliases(self, description: str, *args: str) -> "TypeEnumeration[T]":
        """Let each alias in args stand for the given description."""
        self._description_aliases.with_aliases(description, *args)
        return self

    def with_type_data(self, data: TypeEnumerationData[T]) -> "TypeEnumeration[T]":
        """Define the given type data; returns self."""
        self._data_by_type[data.type] = data
        self._by_name[data.name] = None if data.name in self._by_name else data
        self._by_description[data.description] = (
            None if data.description in self._by_description else data
        )
        self._ordered.append(data)
        return self

    def type_data(self, type_: T) -> Optional[TypeEnumerationData[T]]:
        """Return the data for the given type, or None."""
        return self._data_by_type.get(type_)

    def ordered_type_data(self) -> List[TypeEnumerationData[T]]:
        """Return all type data in definition order."""
        return list(self._ordered)

    def default(self) -> Optional[TypeEnumerationData[T]]:
        """Return the first-defined type data, or None if there is none."""
        return self._ordered[0] if self._ordered else None

    def by_name(self, name: str) -> TypeEnumerationData[T]:
        """Return the type data with the given name.

        Raises TraceError if no type, or more than one, has that name.
        """
        if name not in self._by_name:
            names = ", ".join(td.name for td in self._ordered)
            raise TraceError(f"no types match name '{name}' (expected one of [{names}])")
        data = self._by_name[name]
        if data is None:
            raise TraceError(f"multiple types match name '{name}'")
        return data

    def by_description(self, description: str) -> Optional[TypeEnumerationData[T]]:
        """Return the type data with the given description or alias, or None.

        Raises TraceError if more than one type has that description.
        """
        key = self._description_aliases.lookup(description)
        if key not in self._by_description:
            return None
        data = self._by_description[key]
        if data is None:
            raise TraceError(f"multiple types match description '{description}'")
        return data