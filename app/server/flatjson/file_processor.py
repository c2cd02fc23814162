import io
import json
import logging
import re
import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Set, TextIO

import pandas as pd

from .constants import DEFAULT_DATABASE_PATH, SAMPLE_ROW_LIMIT
from .errors import FlattenError, MaxDepthExceeded, SerializationError
from .flattener import Flattener
from .sql_security import SQLSecurityError, execute_query_safely, validate_identifier

# Configure logging
logger = logging.getLogger(__name__)


def flatten_line(line: str, flattener: Optional[Flattener] = None) -> str:
    """
    Flatten one JSON document given as text.

    Args:
        line: A complete JSON document
        flattener: Configuration to use (defaults to Flattener())

    Returns:
        The flattened document as compact JSON text, without a newline

    Raises:
        SerializationError: If the text is not valid JSON or the result cannot
            be written as JSON
        MaxDepthExceeded: If the text nests too deeply to parse or flatten
        FlattenError: If flattening itself fails
    """
    try:
        value = json.loads(line)
    except ValueError as e:
        # JSONDecodeError, and integer literals over the interpreter digit limit
        raise SerializationError(f"Invalid JSON: {e}") from e
    except RecursionError:
        raise MaxDepthExceeded() from None

    flat = (flattener or Flattener()).flatten(value)

    try:
        return json.dumps(flat, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize flattened document: {e}") from e


def process_stream(input_stream: Iterable[str], output_stream: TextIO,
                   flattener: Optional[Flattener] = None) -> int:
    """
    Flatten a stream holding one JSON document per line.

    Every non-blank input line produces exactly one output line. The first
    line that fails stops processing: it is logged and the error re-raised.

    Returns:
        Number of documents written
    """
    flattener = flattener or Flattener()
    written = 0

    for line_num, line in enumerate(input_stream, start=1):
        if not line.strip():
            continue
        try:
            flat_line = flatten_line(line, flattener)
        except FlattenError:
            logger.error(f"Line {line_num} could not be flattened: {line.rstrip()}")
            raise
        output_stream.write(flat_line + "\n")
        written += 1

    logger.info(f"Reached end of input, flattened {written} documents")
    return written


def flatten_records(records: Iterable[Dict[str, Any]],
                    flattener: Optional[Flattener] = None) -> List[Dict[str, Any]]:
    """Flatten many documents with the same configuration."""
    flattener = flattener or Flattener()
    return [flattener.flatten(record) for record in records]


def sanitize_table_name(table_name: str) -> str:
    """
    Turn a file or user supplied name into a valid SQLite table name
    """
    # Drop a file extension
    if '.' in table_name:
        table_name = table_name.rsplit('.', 1)[0]

    sanitized = re.sub(r'[^a-zA-Z0-9_]', '_', table_name)

    if sanitized and not sanitized[0].isalpha() and sanitized[0] != '_':
        sanitized = '_' + sanitized

    if not sanitized:
        sanitized = 'data'

    try:
        validate_identifier(sanitized, "table")
    except SQLSecurityError:
        # Only reserved words get here
        sanitized = f"{sanitized}_table"

    return sanitized


def clean_column_name(col_name: str) -> str:
    """
    Clean and normalize a flattened key for use as a SQLite column name.

    Separators and array decorations become underscores, so ``user.name``
    becomes ``user_name`` and ``tags[0]`` becomes ``tags_0_``.

    Args:
        col_name: Flattened key

    Returns:
        Cleaned column name safe for SQLite
    """
    cleaned = col_name.lower().replace(' ', '_').replace('-', '_')
    cleaned = re.sub(r'[^a-z0-9_]', '_', cleaned)

    if cleaned and not cleaned[0].isalpha() and cleaned[0] != '_':
        cleaned = '_' + cleaned

    if not cleaned:
        cleaned = 'column'

    return cleaned


def deduplicate_columns(columns: Iterable[str]) -> List[str]:
    """
    Suffix repeated column names with _1, _2, ... in order of appearance.

    A suffix never reuses a name that is already taken or that appears
    elsewhere in columns, so ["a", "a", "a_1"] becomes ["a", "a_2", "a_1"].
    """
    columns = list(columns)
    reserved = set(columns)
    taken: Set[str] = set()
    last_suffix: Dict[str, int] = {}
    final_columns = []
    for col in columns:
        name = col
        if name in taken:
            suffix = last_suffix.get(col, 0)
            while name in taken or name in reserved:
                suffix += 1
                name = f"{col}_{suffix}"
            last_suffix[col] = suffix
        taken.add(name)
        final_columns.append(name)
    return final_columns


def parse_jsonl_records(jsonl_content: bytes) -> List[Dict[str, Any]]:
    """
    Parse JSON Lines content into a list of objects.

    Blank lines are ignored. Lines that are not valid JSON, or that hold
    something other than an object, are skipped with a warning.

    Raises:
        ValueError: If the content is empty or holds no valid object
    """
    content_str = jsonl_content.decode('utf-8')
    lines = content_str.strip().split('\n')

    if not lines or (len(lines) == 1 and not lines[0].strip()):
        raise ValueError("JSONL file is empty")

    records = []
    skipped_lines = 0

    for line_num, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue

        try:
            record = json.loads(line)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Line {line_num} contains invalid JSON, skipping: {str(e)}")
            skipped_lines += 1
            continue

        if not isinstance(record, dict):
            logger.warning(f"Line {line_num} is not a JSON object, skipping")
            skipped_lines += 1
            continue

        records.append(record)

    if not records:
        raise ValueError("No valid JSON objects found in JSONL file")

    if skipped_lines > 0:
        logger.info(f"Skipped {skipped_lines} invalid lines in JSONL file")

    return records


def _to_cell(value: Any) -> Any:
    # Preserved empty containers are stored as their JSON text
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def build_dataframe(flattened_records: List[Dict[str, Any]],
                    clean_columns: bool = True) -> pd.DataFrame:
    """
    Build a DataFrame with one column per flattened key.

    Columns appear in the order their keys are first seen across records;
    records that lack a key get None in that column. With clean_columns the
    keys are turned into SQLite-safe column names.
    """
    all_fields = list(dict.fromkeys(key for record in flattened_records for key in record))

    rows = [
        {field: _to_cell(record.get(field)) for field in all_fields}
        for record in flattened_records
    ]
    df = pd.DataFrame(rows, columns=all_fields)

    if clean_columns:
        df.columns = deduplicate_columns(clean_column_name(col) for col in df.columns)
    return df


def write_dataframe_to_sqlite(df: pd.DataFrame, table_name: str,
                              db_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Replace table_name with the contents of df and describe the result.

    Returns:
        Dictionary with table_name, schema, row_count, and sample_data
    """
    conn = sqlite3.connect(db_path or DEFAULT_DATABASE_PATH)
    try:
        df.to_sql(table_name, conn, if_exists='replace', index=False)

        columns_info = execute_query_safely(
            conn,
            "PRAGMA table_info({table})",
            identifier_params={'table': table_name}
        ).fetchall()
        schema = {col[1]: col[2] for col in columns_info}  # column_name: data_type

        sample_rows = execute_query_safely(
            conn,
            "SELECT * FROM {table} LIMIT ?",
            params=(SAMPLE_ROW_LIMIT,),
            identifier_params={'table': table_name}
        ).fetchall()
        column_names = [col[1] for col in columns_info]
        sample_data = [dict(zip(column_names, row)) for row in sample_rows]

        row_count = execute_query_safely(
            conn,
            "SELECT COUNT(*) FROM {table}",
            identifier_params={'table': table_name}
        ).fetchone()[0]
    finally:
        conn.close()

    return {
        'table_name': table_name,
        'schema': schema,
        'row_count': row_count,
        'sample_data': sample_data
    }


def convert_json_to_sqlite(json_content: bytes, table_name: str,
                           flattener: Optional[Flattener] = None,
                           db_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Flatten a JSON array of objects into a SQLite table.

    Raises:
        Exception: If the content is not a non-empty array of objects, if
            any object fails to flatten, or if the load fails
    """
    try:
        table_name = sanitize_table_name(table_name)

        data = json.loads(json_content.decode('utf-8'))

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ValueError("JSON must be an array of objects")

        if not data:
            raise ValueError("JSON array is empty")

        df = build_dataframe(flatten_records(data, flattener))
        return write_dataframe_to_sqlite(df, table_name, db_path)

    except Exception as e:
        raise Exception(f"Error converting JSON to SQLite: {str(e)}") from e


def convert_jsonl_to_sqlite(jsonl_content: bytes, table_name: str,
                            flattener: Optional[Flattener] = None,
                            db_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Flatten a JSON Lines file into a SQLite table.

    Parses one JSON object per line, flattens each, and creates a table whose
    columns are every key found across all records.

    Args:
        jsonl_content: Raw bytes content of JSONL file
        table_name: Desired name for the SQLite table
        flattener: Flattening configuration (defaults to Flattener())
        db_path: SQLite database file (defaults to DEFAULT_DATABASE_PATH)

    Returns:
        Dictionary with table_name, schema, row_count, and sample_data

    Raises:
        Exception: If the file is empty, holds no valid object, a record
            fails to flatten, or the load fails
    """
    try:
        table_name = sanitize_table_name(table_name)

        records = parse_jsonl_records(jsonl_content)
        df = build_dataframe(flatten_records(records, flattener))
        result = write_dataframe_to_sqlite(df, table_name, db_path)

        logger.info(
            f"Successfully converted JSONL to SQLite table '{table_name}' "
            f"with {result['row_count']} rows"
        )
        return result

    except Exception as e:
        raise Exception(f"Error converting JSONL to SQLite: {str(e)}") from e


def convert_jsonl_to_csv(jsonl_content: bytes, flattener: Optional[Flattener] = None) -> str:
    """
    Flatten a JSON Lines file into CSV text whose header row holds the
    flattened keys as they are.
    """
    try:
        records = parse_jsonl_records(jsonl_content)
        df = build_dataframe(flatten_records(records, flattener), clean_columns=False)

        buffer = io.StringIO()
        df.to_csv(buffer, index=False)
        return buffer.getvalue()

    except Exception as e:
        raise Exception(f"Error converting JSONL to CSV: {str(e)}") from e
