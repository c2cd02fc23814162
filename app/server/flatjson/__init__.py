"""
flatjson: flatten nested JSON documents into single-level objects.

Functions:
    * flatten:                 flatten a document with a one-off configuration
    * infer_type:              value transform turning numeric/boolean strings into numbers/booleans
    * flatten_line:            flatten one JSON document given as text
    * process_stream:          flatten a JSON Lines stream
    * convert_json_to_sqlite:  load a flattened JSON array into SQLite
    * convert_jsonl_to_sqlite: load a flattened JSON Lines file into SQLite
    * convert_jsonl_to_csv:    export a flattened JSON Lines file as CSV

Classes:
    * Flattener:   immutable flattening configuration
    * Plain:       array indices joined with the key separator
    * Surrounded:  array indices wrapped in start/end strings
"""

from .errors import (
    FirstLevelMustBeAnObject,
    FlattenError,
    InvalidConfiguration,
    KeyWillBeOverwritten,
    MaxDepthExceeded,
    SerializationError,
)
from .flattener import ArrayFormatting, Flattener, Plain, Surrounded, flatten
from .type_inference import infer_type
from .file_processor import (
    convert_json_to_sqlite,
    convert_jsonl_to_csv,
    convert_jsonl_to_sqlite,
    flatten_line,
    process_stream,
)

__version__ = '0.1.0'
