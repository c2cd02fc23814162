"""
Constants configuration for flattening.

This module contains the default values used by the flattener and by the
row-oriented exporters built on top of it.

Usage Patterns:
    - Nested objects: {"user": {"address": {"city": "NYC"}}} → user.address.city
    - Array elements (plain): {"items": [{"id": 1}]} → items.0.id
    - Array elements (surrounded): {"items": [{"id": 1}]} → items[0].id
"""

import os

# Separator placed between a parent path and a child object key or plain index
# Example: {"user": {"name": "John"}} becomes {"user.name": "John"}
DEFAULT_KEY_SEPARATOR = "."

# Strings placed around an array index when surrounded formatting is used
# Example: {"tags": ["a", "b"]} becomes {"tags[0]": "a", "tags[1]": "b"}
DEFAULT_ARRAY_START = "["
DEFAULT_ARRAY_END = "]"

# SQLite database written by the loaders
DEFAULT_DATABASE_PATH = os.path.join("db", "database.db")

# Number of rows returned as sample_data after a load
SAMPLE_ROW_LIMIT = 5

# Bounds of a 64-bit signed integer, used when inferring types from strings
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
