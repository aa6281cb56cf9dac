"""
Serializer Module.

Encodes collected points into a byte payload for export and decodes them
back for import. Two formats are supported:

* **Arrow** (default): an Arrow IPC stream holding one RecordBatch whose
  schema is built from `DataPoint.__vf_pyarrow_struct__`.
* **JSON**: a UTF-8 document `{"version": 1, "points": [...]}`.

Decoding is all-or-nothing: either every point validates, or
`MalformedDataError` is raised and nothing is returned.
"""

import logging as log
from pathlib import Path
from typing import Iterable, List, Literal, Optional, Union

import pyarrow as pa
from pydantic import ValidationError

from ..enum import SerializationFormat
from ..models.base_model import BaseModel
from ..models.data_point import DataPoint

FORMAT_VERSION = "1"
_VERSION_KEY = b"visualfield.format_version"

_SUFFIX_FORMATS = {
    ".arrow": SerializationFormat.Arrow,
    ".ipc": SerializationFormat.Arrow,
    ".json": SerializationFormat.JSON,
}


class MalformedDataError(ValueError):
    """
    Raised when a payload cannot be decoded into valid data points.
    The underlying pyarrow or pydantic error is chained as `__cause__`.
    """


class _JsonDocument(BaseModel):
    version: Literal[1] = 1
    points: List[DataPoint]


def _arrow_schema() -> pa.Schema:
    struct = DataPoint.__vf_pyarrow_struct__
    return pa.schema(
        [struct.field(i) for i in range(struct.num_fields)],
        metadata={_VERSION_KEY: FORMAT_VERSION.encode()},
    )


# --- Encoding ---


def _encode_arrow(points: List[DataPoint]) -> bytes:
    schema = _arrow_schema()
    batch = pa.RecordBatch.from_pylist([p.model_dump() for p in points], schema=schema)

    sink = pa.BufferOutputStream()
    with pa.ipc.new_stream(sink, schema) as writer:
        writer.write_batch(batch)
    return sink.getvalue().to_pybytes()


def _encode_json(points: List[DataPoint]) -> bytes:
    return _JsonDocument(points=points).model_dump_json().encode("utf-8")


def encode(
    points: Iterable[DataPoint],
    format: SerializationFormat = SerializationFormat.Arrow,
) -> bytes:
    """
    Serializes the points, in order, into a self-describing payload.

    Args:
        points (Iterable[DataPoint]): Typically `store.snapshot()`.
        format (SerializationFormat): Arrow IPC (default) or JSON.

    Returns:
        bytes: The payload. Encoding the same points twice yields the same bytes.
    """
    points = list(points)
    if format == SerializationFormat.Arrow:
        return _encode_arrow(points)
    if format == SerializationFormat.JSON:
        return _encode_json(points)
    raise ValueError(f"Unsupported serialization format '{format}'.")


# --- Decoding ---


def _validate_rows(rows: List[dict]) -> List[DataPoint]:
    points = []
    for idx, row in enumerate(rows):
        try:
            points.append(DataPoint.model_validate(row))
        except ValidationError as e:
            raise MalformedDataError(f"Invalid data point at index {idx}: {e}") from e
    return points


def _decode_arrow(payload: bytes) -> List[DataPoint]:
    try:
        reader = pa.ipc.open_stream(pa.py_buffer(payload))
        table = reader.read_all()
    except (pa.ArrowException, OSError) as e:
        raise MalformedDataError(f"Payload is not a valid Arrow IPC stream: {e}") from e

    expected = _arrow_schema()
    if not table.schema.equals(expected, check_metadata=False):
        raise MalformedDataError(
            f"Unexpected payload schema.\nExpected:\n{expected}\nGot:\n{table.schema}"
        )

    metadata = table.schema.metadata or {}
    version = metadata.get(_VERSION_KEY)
    if version != FORMAT_VERSION.encode():
        raise MalformedDataError(
            f"Unsupported format version {version!r} (expected '{FORMAT_VERSION}')."
        )

    return _validate_rows(table.to_pylist())


def _decode_json(payload: bytes) -> List[DataPoint]:
    try:
        # Strict: no bool or string coercion into numeric fields.
        document = _JsonDocument.model_validate_json(payload, strict=True)
    except ValidationError as e:
        raise MalformedDataError(f"Invalid JSON payload: {e}") from e
    return list(document.points)


def decode(
    payload: bytes,
    format: SerializationFormat = SerializationFormat.Arrow,
) -> List[DataPoint]:
    """
    Parses a payload produced by `encode`.

    Args:
        payload (bytes): The encoded points.
        format (SerializationFormat): The format the payload was encoded with.

    Returns:
        List[DataPoint]: The points, in encoding order.

    Raises:
        MalformedDataError: If the payload does not parse, does not carry the
            data point schema, or any point fails validation (missing or null
            fields, non-finite numbers, invalid rotations).
    """
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise MalformedDataError(
            f"Payload must be bytes, got '{type(payload).__name__}'."
        )
    payload = bytes(payload)

    if format == SerializationFormat.Arrow:
        return _decode_arrow(payload)
    if format == SerializationFormat.JSON:
        return _decode_json(payload)
    raise ValueError(f"Unsupported serialization format '{format}'.")


# --- File helpers ---


def format_for_path(path: Union[str, Path]) -> SerializationFormat:
    """
    Infers the serialization format from the file suffix.

    Raises:
        ValueError: If the suffix is not one of `.arrow`, `.ipc`, `.json`.
    """
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_FORMATS[suffix]
    except KeyError:
        raise ValueError(
            f"Cannot infer serialization format from suffix '{suffix}'. "
            f"Use one of {sorted(_SUFFIX_FORMATS)}."
        )


def save(
    path: Union[str, Path],
    points: Iterable[DataPoint],
    format: Optional[SerializationFormat] = None,
) -> int:
    """
    Writes the points to `path`.

    Returns:
        int: The number of points written.
    """
    path = Path(path)
    fmt = format or format_for_path(path)
    points = list(points)
    path.write_bytes(encode(points, fmt))
    log.info(f"Exported {len(points)} points to '{path}' ({fmt.value}).")
    return len(points)


def load(
    path: Union[str, Path], format: Optional[SerializationFormat] = None
) -> List[DataPoint]:
    """
    Reads the points stored at `path`.

    Raises:
        MalformedDataError: If the file content is not a valid payload.
    """
    path = Path(path)
    fmt = format or format_for_path(path)
    points = decode(path.read_bytes(), fmt)
    log.info(f"Imported {len(points)} points from '{path}' ({fmt.value}).")
    return points
