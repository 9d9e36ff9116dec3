from enum import Enum


class EntityKind(str, Enum):
    TRANSACTION = "transaction"
    ADDRESS = "address"
    OBJECT = "object"
    UNKNOWN = "unknown"


class SearchState(str, Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    DISPATCHING = "dispatching"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"
