"""
Flatten nested JSON documents into a single-level dictionary.

A Flattener is configured once and can then be used for any number of
documents. Each call walks the document depth-first and builds keys from the
path to every terminal value:

    >>> Flattener().flatten({"a": {"b": 1}, "c": [True, None]})
    {'a.b': 1, 'c.0': True, 'c.1': None}

    >>> Flattener().with_array_formatting(Surrounded("[", "]")).flatten({"c": [1]})
    {'c[0]': 1}

Two source paths that end up with the same key raise KeyWillBeOverwritten
instead of silently replacing the first value.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .constants import DEFAULT_ARRAY_END, DEFAULT_ARRAY_START, DEFAULT_KEY_SEPARATOR
from .errors import (
    FirstLevelMustBeAnObject,
    InvalidConfiguration,
    KeyWillBeOverwritten,
    MaxDepthExceeded,
)
from .type_inference import infer_type

ValueTransform = Callable[[Any], Any]


@dataclass(frozen=True)
class Plain:
    """Array indices are appended with the key separator, e.g. ``a.0``"""


@dataclass(frozen=True)
class Surrounded:
    """Array indices are wrapped in ``start`` and ``end``, e.g. ``a[0]``"""

    start: str = DEFAULT_ARRAY_START
    end: str = DEFAULT_ARRAY_END

    def __post_init__(self):
        if not isinstance(self.start, str) or not isinstance(self.end, str):
            raise InvalidConfiguration("Surrounded start and end must be strings")


ArrayFormatting = Union[Plain, Surrounded]


def json_type_name(value: Any) -> str:
    """Name the JSON type of a parsed value, for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def build_key(parent_key: str, segment: str, depth: int, key_separator: str,
              array_formatting: Optional[ArrayFormatting] = None) -> str:
    """
    Build the key of a child from its parent's key.

    Args:
        parent_key: Key of the container being visited
        segment: Object key or array index (as a string) of the child
        depth: Depth of the container being visited (0 for the root object)
        key_separator: Separator between object keys
        array_formatting: Formatting of array indices, None for object keys

    Returns:
        The child's full key. Children of the root use the bare segment, so
        keys never start with a separator.
    """
    if depth == 0:
        return segment
    if isinstance(array_formatting, Surrounded):
        return f"{parent_key}{array_formatting.start}{segment}{array_formatting.end}"
    return f"{parent_key}{key_separator}{segment}"


@dataclass(frozen=True)
class Flattener:
    """
    Immutable flattening configuration.

    Attributes:
        key_separator: Placed between a parent key and an object key (and a
            plain array index)
        array_formatting: Plain() or Surrounded(start, end)
        preserve_empty_arrays: Keep empty arrays as ``[]`` values instead of
            dropping them
        preserve_empty_objects: Keep empty nested objects as ``{}`` values
            instead of dropping them
        value_transform: Called with every terminal value right before it
            is stored; its return value is stored instead
        max_depth: Deepest nesting level allowed, children of the root
            being level 1. None means no limit beyond the interpreter's.

    Use the ``with_*`` methods to derive a new configuration; an instance is
    never modified, so one Flattener can be shared between threads.
    """

    key_separator: str = DEFAULT_KEY_SEPARATOR
    array_formatting: ArrayFormatting = field(default_factory=Plain)
    preserve_empty_arrays: bool = False
    preserve_empty_objects: bool = False
    value_transform: Optional[ValueTransform] = None
    max_depth: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.key_separator, str):
            raise InvalidConfiguration("key_separator must be a string")
        if not isinstance(self.array_formatting, (Plain, Surrounded)):
            raise InvalidConfiguration("array_formatting must be Plain() or Surrounded(start, end)")
        if self.value_transform is not None and not callable(self.value_transform):
            raise InvalidConfiguration("value_transform must be callable")
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
                raise InvalidConfiguration("max_depth must be a positive integer or None")

    def with_key_separator(self, key_separator: str) -> "Flattener":
        return dataclasses.replace(self, key_separator=key_separator)

    def with_array_formatting(self, array_formatting: ArrayFormatting) -> "Flattener":
        return dataclasses.replace(self, array_formatting=array_formatting)

    def with_preserve_empty_arrays(self, preserve: bool = True) -> "Flattener":
        return dataclasses.replace(self, preserve_empty_arrays=preserve)

    def with_preserve_empty_objects(self, preserve: bool = True) -> "Flattener":
        return dataclasses.replace(self, preserve_empty_objects=preserve)

    def with_value_transform(self, value_transform: Optional[ValueTransform]) -> "Flattener":
        return dataclasses.replace(self, value_transform=value_transform)

    def with_type_inference(self) -> "Flattener":
        """Shorthand for with_value_transform(infer_type)."""
        return self.with_value_transform(infer_type)

    def with_max_depth(self, max_depth: Optional[int]) -> "Flattener":
        return dataclasses.replace(self, max_depth=max_depth)

    def flatten(self, value: Any) -> Dict[str, Any]:
        """
        Flatten a parsed JSON document.

        Args:
            value: The document; must be an object (dict)

        Returns:
            A new dict mapping full keys to terminal values, in traversal order

        Raises:
            FirstLevelMustBeAnObject: If value is not a dict
            KeyWillBeOverwritten: If two paths produce the same key
            MaxDepthExceeded: If the document nests too deeply
        """
        if not isinstance(value, dict):
            raise FirstLevelMustBeAnObject(json_type_name(value))

        flat: Dict[str, Any] = {}
        try:
            self._flatten_value(value, "", 0, flat)
        except RecursionError:
            raise MaxDepthExceeded() from None
        return flat

    def _flatten_value(self, node: Any, parent_key: str, depth: int, flat: Dict[str, Any]) -> None:
        if self.max_depth is not None and depth > self.max_depth:
            raise MaxDepthExceeded(parent_key, self.max_depth)

        if isinstance(node, dict):
            # The root is never stored, even when empty
            if not node and self.preserve_empty_objects and depth > 0:
                self._insert(parent_key, {}, flat)
            else:
                self._flatten_object(node, parent_key, depth, flat)
        elif isinstance(node, list):
            if not node and self.preserve_empty_arrays and depth > 0:
                self._insert(parent_key, [], flat)
            else:
                self._flatten_array(node, parent_key, depth, flat)
        else:
            if self.value_transform is not None:
                node = self.value_transform(node)
            self._insert(parent_key, node, flat)

    def _flatten_object(self, node: Dict[str, Any], parent_key: str, depth: int,
                        flat: Dict[str, Any]) -> None:
        for key, value in node.items():
            child_key = build_key(parent_key, str(key), depth, self.key_separator)
            self._flatten_value(value, child_key, depth + 1, flat)

    def _flatten_array(self, node: List[Any], parent_key: str, depth: int,
                       flat: Dict[str, Any]) -> None:
        for index, item in enumerate(node):
            child_key = build_key(parent_key, str(index), depth, self.key_separator,
                                  self.array_formatting)
            self._flatten_value(item, child_key, depth + 1, flat)

    @staticmethod
    def _insert(key: str, value: Any, flat: Dict[str, Any]) -> None:
        if key in flat:
            raise KeyWillBeOverwritten(key)
        flat[key] = value


def flatten(value: Any, **options: Any) -> Dict[str, Any]:
    """
    Flatten a document with a one-off Flattener.

    Keyword arguments are Flattener fields, e.g.
    ``flatten(doc, key_separator="/", preserve_empty_arrays=True)``.
    """
    return Flattener(**options).flatten(value)
