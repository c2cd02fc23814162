"""
SQL identifier validation for the SQLite loaders.

Table and column names cannot be bound as query parameters, so they are
validated against a strict pattern and double-quoted before being formatted
into a query. Values are always bound as parameters.
"""

import re
import sqlite3
from typing import Any, Dict, Optional, Sequence

IDENTIFIER_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

# Keywords that cannot be used as bare table names without confusing readers
SQLITE_KEYWORDS = {
    'abort', 'add', 'all', 'alter', 'and', 'as', 'begin', 'between', 'by',
    'case', 'check', 'column', 'commit', 'create', 'cross', 'default', 'delete',
    'distinct', 'drop', 'else', 'end', 'exists', 'from', 'group', 'having',
    'in', 'index', 'inner', 'insert', 'into', 'is', 'join', 'key', 'left',
    'like', 'limit', 'not', 'null', 'on', 'or', 'order', 'pragma', 'primary',
    'references', 'rollback', 'select', 'set', 'table', 'then', 'to',
    'transaction', 'union', 'unique', 'update', 'values', 'view', 'when',
    'where', 'with',
}


class SQLSecurityError(Exception):
    """Raised when an identifier or query is not safe to execute"""


def validate_identifier(name: str, kind: str = "identifier") -> str:
    """
    Validate a table or column name.

    Args:
        name: The identifier to check
        kind: What the identifier names, used in error messages

    Returns:
        The identifier, unchanged

    Raises:
        SQLSecurityError: If the identifier is not a plain SQL name
    """
    if not isinstance(name, str) or not IDENTIFIER_RE.fullmatch(name):
        raise SQLSecurityError(f"Invalid {kind} name: {name!r}")
    if name.lower() in SQLITE_KEYWORDS:
        raise SQLSecurityError(f"Invalid {kind} name: {name!r} is a reserved word")
    return name


def quote_identifier(name: str, kind: str = "identifier") -> str:
    return f'"{validate_identifier(name, kind)}"'


def execute_query_safely(conn: sqlite3.Connection, query: str,
                         params: Optional[Sequence[Any]] = None,
                         identifier_params: Optional[Dict[str, str]] = None) -> sqlite3.Cursor:
    """
    Execute a query whose identifiers are filled in from identifier_params.

    Example:
        execute_query_safely(conn, "SELECT * FROM {table} LIMIT ?",
                             params=(5,), identifier_params={'table': 'users'})
    """
    if identifier_params:
        quoted = {
            placeholder: quote_identifier(name, placeholder)
            for placeholder, name in identifier_params.items()
        }
        query = query.format(**quoted)
    return conn.execute(query, tuple(params or ()))
