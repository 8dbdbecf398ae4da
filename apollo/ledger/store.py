"""
Record Store

Keyed table of protocol records. Records are frozen pydantic models, so
snapshotting the table is a shallow copy.
"""
from typing import Dict, Iterator, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from apollo.core.errors import RecordNotFound

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore:
    """In-memory keyed record table."""

    def __init__(self):
        self._records: Dict[str, BaseModel] = {}

    def get(self, key: str, record_type: Type[RecordT]) -> Optional[RecordT]:
        """Return the record at ``key`` or None. Raises if the type differs."""
        record = self._records.get(key)
        if record is None:
            return None
        if not isinstance(record, record_type):
            raise RecordNotFound(f"Record {key} is not a {record_type.__name__}")
        return record

    def require(self, key: str, record_type: Type[RecordT]) -> RecordT:
        record = self.get(key, record_type)
        if record is None:
            raise RecordNotFound(f"{record_type.__name__} {key} not found")
        return record

    def exists(self, key: str) -> bool:
        return key in self._records

    def put(self, key: str, record: BaseModel) -> None:
        self._records[key] = record

    def items(self, record_type: Type[RecordT]) -> Iterator[Tuple[str, RecordT]]:
        """Iterate (key, record) pairs of one type in insertion order."""
        for key, record in self._records.items():
            if isinstance(record, record_type):
                yield key, record

    def snapshot(self) -> Dict[str, BaseModel]:
        return dict(self._records)

    def restore(self, snapshot: Dict[str, BaseModel]) -> None:
        self._records = dict(snapshot)
