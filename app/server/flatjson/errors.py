"""
Exceptions raised while flattening documents.

Every error is terminal for the call that raised it: flattening is pure, so
repeating a call with the same input and configuration fails the same way.
"""

from typing import Optional


class FlattenError(Exception):
    """Base class for all flattening errors"""


class FirstLevelMustBeAnObject(FlattenError, TypeError):
    """The root value handed to flatten() is not an object"""

    def __init__(self, found_type: str):
        self.found_type = found_type
        super().__init__(f"First level must be an object, found {found_type}")


class KeyWillBeOverwritten(FlattenError):
    """Two distinct source paths flatten to the same key"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key {key!r} will be overwritten")


class MaxDepthExceeded(FlattenError):
    """The document nests deeper than the configured (or interpreter) limit"""

    def __init__(self, path: Optional[str] = None, max_depth: Optional[int] = None):
        self.path = path
        self.max_depth = max_depth
        if max_depth is None:
            message = "Document is nested too deeply to flatten"
        else:
            message = f"Maximum depth of {max_depth} exceeded at {path!r}"
        super().__init__(message)


class InvalidConfiguration(FlattenError, ValueError):
    """A Flattener was built with unusable settings"""


class SerializationError(FlattenError):
    """Parsing input text or serializing a flattened result failed"""
