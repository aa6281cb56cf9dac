from enum import StrEnum


class SerializationFormat(StrEnum):
    """
    Defines the interchange format used when exporting or importing a batch
    of data points.
    """

    Arrow = "arrow"
    """
    Arrow IPC stream holding a single record batch with the data point schema.
    Compact, typed, and readable by any Arrow-aware analysis tool.
    """

    JSON = "json"
    """
    UTF-8 JSON document `{"version": 1, "points": [...]}`.
    Human-readable, suited to clipboard or share-sheet exchange.
    """
