"""Pytest configuration and fixtures.

``FakeSupabase`` stands in for the supabase client: it keeps rows in memory and
evaluates the subset of the PostgREST query builder the hint store uses.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

from geometa.hints import Hint, HintStore

ILIKE_PATTERN = re.compile(r'(\w+)\.ilike\."%((?:[^"\\]|\\.)*)%"')


@dataclass
class FakeResponse:
    data: List[Dict[str, Any]]
    count: Optional[int] = None


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table = table
        self.columns = "*"
        self.filters: List[tuple] = []
        self.ordering: Optional[tuple] = None
        self.row_limit: Optional[int] = None
        self.row_range: Optional[tuple] = None
        self.pending_insert: Optional[Dict[str, Any]] = None

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self.columns = columns
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("eq", column, value))
        return self

    def or_(self, expression: str) -> "FakeQuery":
        self.filters.append(("or", expression))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.ordering = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self.row_range = (start, end)
        return self

    def insert(self, row: Dict[str, Any]) -> "FakeQuery":
        self.pending_insert = dict(row)
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        for entry in self.filters:
            if entry[0] == "eq" and row.get(entry[1]) != entry[2]:
                return False
            if entry[0] == "or":
                terms = [
                    (field, value.replace('\\"', '"').replace("\\\\", "\\"))
                    for field, value in ILIKE_PATTERN.findall(entry[1])
                ]
                if not any(value.lower() in str(row.get(field, "")).lower() for field, value in terms):
                    return False
        return True

    def execute(self) -> FakeResponse:
        self.client.calls.append(self)
        if self.client.error is not None and len(self.client.calls) > self.client.calls_before_error:
            raise self.client.error

        if self.pending_insert is not None:
            return FakeResponse(data=[self.client.add_row(self.pending_insert)])

        rows = [row for row in self.client.rows if self._matches(row)]
        if self.ordering:
            column, desc = self.ordering
            rows.sort(key=lambda row: str(row.get(column, "")), reverse=desc)
        if self.row_range is not None:
            start, end = self.row_range
            rows = rows[start : end + 1]
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        if self.client.max_rows is not None:
            rows = rows[: self.client.max_rows]
        if self.columns != "*":
            wanted = [name.strip() for name in self.columns.split(",")]
            rows = [{name: row.get(name) for name in wanted} for row in rows]
        return FakeResponse(data=[dict(row) for row in rows], count=len(rows))


class FakeSupabase:
    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        max_rows: Optional[int] = None,
    ) -> None:
        self.rows: List[Dict[str, Any]] = [dict(row) for row in rows or []]
        self.calls: List[FakeQuery] = []
        self.tables: List[str] = []
        self.error: Optional[Exception] = None
        # Number of successful executes before ``error`` starts being raised.
        self.calls_before_error = 0
        # Server-side cap on rows per response, like PostgREST max-rows.
        self.max_rows = max_rows

    def table(self, name: str) -> FakeQuery:
        self.tables.append(name)
        return FakeQuery(self, name)

    def add_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored.setdefault("image_url", None)
        stored["id"] = f"h{len(self.rows) + 1:03d}"
        stored["created_at"] = f"2024-06-{len(self.rows) + 1:02d}T12:00:00+00:00"
        self.rows.append(stored)
        return dict(stored)


def make_row(
    hint_id: str,
    country: str = "France",
    meta_type: str = "bollards",
    description: str = "White bollards with a red reflector",
    continent: str = "Europe",
    created_at: str = "2024-01-01T00:00:00+00:00",
    image_url: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "id": hint_id,
        "country": country,
        "continent": continent,
        "meta_type": meta_type,
        "description": description,
        "image_url": image_url,
        "created_at": created_at,
    }


def make_hint(hint_id: str, **fields: Any) -> Hint:
    return Hint.from_dict(make_row(hint_id, **fields))


@pytest.fixture
def sample_rows() -> List[Dict[str, Any]]:
    return [
        make_row(
            "h001",
            country="France",
            meta_type="bollards",
            description="White bollards with a red reflector",
            created_at="2024-01-01T00:00:00+00:00",
        ),
        make_row(
            "h002",
            country="Brazil",
            meta_type="utility_poles",
            description="Blue pole base with concrete top",
            continent="South America",
            created_at="2024-01-02T00:00:00+00:00",
        ),
        make_row(
            "h003",
            country="Brazil",
            meta_type="license_plates",
            description="Blue strip on top of the plate",
            continent="South America",
            created_at="2024-01-03T00:00:00+00:00",
        ),
        make_row(
            "h004",
            country="Kenya",
            meta_type="utility_poles",
            description="Wooden pole leaning, blue tape band near the top",
            continent="Africa",
            created_at="2024-01-04T00:00:00+00:00",
        ),
        make_row(
            "h005",
            country="France",
            meta_type="license_plates",
            description="Blue EU band on the left, yellow plates absent",
            created_at="2024-01-05T00:00:00+00:00",
        ),
    ]


@pytest.fixture
def fake_client(sample_rows) -> FakeSupabase:
    return FakeSupabase(sample_rows)


@pytest.fixture
def store(fake_client) -> HintStore:
    return HintStore(fake_client)
