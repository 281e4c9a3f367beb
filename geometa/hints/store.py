from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from .. import config
from .errors import HintStoreError
from .models import Hint, HintDraft, validate_draft
from .utils import clean_labels

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("description", "country", "meta_type")
ORDERINGS = {
    "created_at": {"column": "created_at", "desc": True},
    "id": {"column": "id", "desc": False},
}


def _quote_filter_value(value: str) -> str:
    # PostgREST treats , . : ( ) as reserved inside or=() unless double-quoted.
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def substring_filter(text: str, fields: Sequence[str] = SEARCH_FIELDS) -> str:
    """Build an ``or`` filter matching ``text`` case-insensitively in any of ``fields``."""
    pattern = _quote_filter_value(f"%{text}%")
    return ",".join(f"{field}.ilike.{pattern}" for field in fields)


class HintStore:
    """Thin client over the remote ``hints`` table."""

    def __init__(
        self,
        client: Client,
        table: str = config.HINTS_TABLE,
        page_size: int = config.STORE_PAGE_SIZE,
    ) -> None:
        if page_size <= 0:
            raise ValueError("Page size must be positive")

        self.client = client
        self.table = table
        self.page_size = page_size

    def _table(self):
        return self.client.table(self.table)

    def _execute(self, builder, action: str):
        try:
            return builder.execute()
        except (APIError, httpx.HTTPError) as exc:
            message = getattr(exc, "message", None) or str(exc)
            logger.warning("Hint store failed to %s: %s", action, message)
            raise HintStoreError(f"Failed to {action}: {message}") from exc

    def _fetch_pages(self, build_query: Callable[[], Any], action: str) -> List[Dict[str, Any]]:
        """Read every row of ``build_query()`` one page at a time.

        Each page is a fresh builder with its own ``range``; reading stops at the
        first page shorter than ``page_size``.
        """
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            query = build_query().range(start, start + self.page_size - 1)
            page = self._execute(query, action).data or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size

        logger.debug("Read %d rows to %s in %d pages", len(rows), action, start // self.page_size + 1)
        return rows

    @staticmethod
    def _to_hints(rows: Optional[Sequence[Mapping[str, Any]]]) -> List[Hint]:
        try:
            return [Hint.from_dict(row) for row in rows or []]
        except (KeyError, TypeError) as exc:
            raise HintStoreError(f"Malformed hint row: {exc}") from exc

    def fetch_hints(
        self,
        country: Optional[str] = None,
        meta_type: Optional[str] = None,
        continent: Optional[str] = None,
        text: Optional[str] = None,
        limit: Optional[int] = None,
        order: str = "created_at",
    ) -> List[Hint]:
        """Return hints matching every given filter.

        ``country``, ``meta_type`` and ``continent`` are exact matches; ``text`` is a
        case-insensitive substring matched against description, country or meta type.
        Rows come back newest first unless ``order="id"`` is requested. Without a
        ``limit`` every matching row is read, page by page.
        """
        if order not in ORDERINGS:
            raise ValueError(f"Unsupported ordering: {order}")

        ordering = ORDERINGS[order]

        def build_query():
            query = self._table().select("*")
            if country is not None:
                query = query.eq("country", country)
            if meta_type is not None:
                query = query.eq("meta_type", meta_type)
            if continent is not None:
                query = query.eq("continent", continent)
            if text:
                query = query.or_(substring_filter(text))
            return query.order(ordering["column"], desc=ordering["desc"])

        logger.debug(
            "Fetching hints country=%r meta_type=%r continent=%r text=%r limit=%r",
            country,
            meta_type,
            continent,
            text,
            limit,
        )
        if limit is not None:
            response = self._execute(build_query().limit(limit), "fetch hints")
            return self._to_hints(response.data)
        return self._to_hints(self._fetch_pages(build_query, "fetch hints"))

    def all_hints(self) -> List[Hint]:
        return self.fetch_hints()

    def hints_for_country(self, country: str) -> List[Hint]:
        return self.fetch_hints(country=country)

    def hints_for_meta_type(self, meta_type: str) -> List[Hint]:
        return self.fetch_hints(meta_type=meta_type)

    def sample_hints(self, limit: int = config.QUIZ_SAMPLE_SIZE) -> List[Hint]:
        return self.fetch_hints(limit=limit, order="id")

    def insert_hint(self, data: Union[HintDraft, Mapping[str, Any]]) -> Hint:
        draft = validate_draft(data)
        row: Dict[str, object] = draft.to_row()
        if "continent" not in row:
            row["continent"] = self.continent_for(draft.country)

        response = self._execute(self._table().insert(row), "insert hint")
        created = self._to_hints(response.data)
        if not created:
            raise HintStoreError("Insert returned no row")

        logger.info(
            "Added hint %s (%s / %s)", created[0].id, created[0].country, created[0].meta_type
        )
        return created[0]

    def distinct_values(self, field: str, continent: Optional[str] = None) -> List[str]:
        """Return the sorted, non-blank distinct values of a catalog column."""
        if field not in config.CATALOG_FIELDS:
            raise ValueError(f"Unsupported catalog field: {field}")

        def build_query():
            query = self._table().select(field)
            if continent is not None:
                query = query.eq("continent", continent)
            return query.order(field)

        rows = self._fetch_pages(build_query, f"list {field} values")
        values = clean_labels(row.get(field) for row in rows)
        return sorted(set(values))

    def continents(self) -> List[str]:
        return self.distinct_values("continent")

    def countries(self, continent: Optional[str] = None) -> List[str]:
        return self.distinct_values("country", continent=continent)

    def meta_types(self) -> List[str]:
        return self.distinct_values("meta_type")

    def continent_for(self, country: str) -> str:
        query = (
            self._table()
            .select("continent")
            .eq("country", country)
            .order("created_at", desc=True)
            .limit(1)
        )
        response = self._execute(query, "look up continent")
        known = clean_labels(row.get("continent") for row in response.data or [])
        return known[0] if known else config.UNKNOWN_CONTINENT


def create_store(settings: Optional[config.Settings] = None) -> HintStore:
    settings = settings or config.get_settings()
    url, key = settings.require_credentials()
    logger.info("Connecting to hint store table %r", settings.hints_table)
    return HintStore(create_client(url, key), table=settings.hints_table)
