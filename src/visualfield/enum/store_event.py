from enum import Enum


class StoreEventKind(Enum):
    """
    Kind of mutation reported to point store listeners.
    """

    Appended = "appended"
    Cleared = "cleared"
    Replaced = "replaced"
