"""Authenticated client for the hosted record store (Airtable REST API).

Two read operations are exposed: a single-record GET and a formula-filtered
list GET. Each call issues exactly one request; there are no retries and
pagination offsets are not followed.

API Documentation: https://airtable.com/developers/web/api/introduction
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..pipeline.models import RawRecord, SortSpec

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.airtable.com/v0"
REQUEST_TIMEOUT = (10, 30)

# Maximum characters of an error body kept on exceptions and in logs
MAX_ERROR_BODY_LENGTH = 2_000

# Error types in a 404 body that mean "no such record" rather than a bad
# base or table id
RECORD_NOT_FOUND_ERRORS = ("NOT_FOUND", "MODEL_ID_NOT_FOUND")


class RecordStoreError(Exception):
    """Base class for record store failures."""
    def __init__(self, table: str, message: str, original_error: Optional[Exception] = None):
        self.table = table
        self.message = message
        self.original_error = original_error
        super().__init__(f"{table}: {message}")


class StoreUnavailableError(RecordStoreError):
    """Transport-level failure (DNS, connect, timeout, TLS)."""
    pass


class RemoteRejectedError(RecordStoreError):
    """The store answered with a non-success HTTP status."""
    def __init__(self, table: str, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(table, f"request rejected with HTTP {status}")


class MalformedResponseError(RecordStoreError):
    """The response body does not have the expected shape."""
    pass


def _error_type(response: requests.Response) -> Optional[str]:
    """Airtable error type from a body like {"error": "NOT_FOUND"} or {"error": {"type": ...}}."""
    try:
        data = response.json()
    except ValueError:
        return None
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        error = error.get("type")
    return error if isinstance(error, str) else None


def _build_session() -> requests.Session:
    # Zero retries: one failed call fails the request
    retry = Retry(total=0, allowed_methods=["GET"], raise_on_status=False)
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def parse_record(table: str, payload: Any) -> RawRecord:
    """Validate one {id, fields} payload.

    Raises:
        MalformedResponseError: If the payload is not a record
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError(table, f"expected a record object, got {type(payload).__name__}")

    record_id = payload.get("id")
    fields = payload.get("fields")
    if not isinstance(record_id, str) or not record_id:
        raise MalformedResponseError(table, "record is missing a string 'id'")
    if not isinstance(fields, dict):
        raise MalformedResponseError(table, f"record {record_id} is missing a 'fields' object")

    created_time = payload.get("createdTime")
    return RawRecord(
        id=record_id,
        fields=dict(fields),
        created_time=created_time if isinstance(created_time, str) else None,
    )


class RecordStoreClient:
    """Read-only access to one record store base."""

    def __init__(
        self,
        base_id: str,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: Tuple[float, float] = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if not base_id:
            raise ValueError("base_id must be non-empty")
        if not api_key:
            raise ValueError("api_key must be non-empty")
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._owns_session = session is None
        self._session = session if session is not None else _build_session()

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "RecordStoreClient":
        return cls(
            base_id=settings.base_id,
            api_key=settings.api_key,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
            session=session,
        )

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "RecordStoreClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _table_url(self, table: str) -> str:
        return f"{self.api_url}/{quote(self.base_id, safe='')}/{quote(table, safe='')}"

    def _get(self, table: str, url: str, params: Optional[List[Tuple[str, Any]]] = None) -> requests.Response:
        logger.debug(f"GET {url} params={params}")
        try:
            return self._session.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StoreUnavailableError(table, f"request failed: {e}", e) from e

    def _check_status(self, table: str, response: requests.Response) -> None:
        if 200 <= response.status_code < 300:
            return
        body = (response.text or "")[:MAX_ERROR_BODY_LENGTH]
        logger.warning(f"Record store rejected request for {table}: HTTP {response.status_code}: {body}")
        raise RemoteRejectedError(table, response.status_code, body)

    def _json(self, table: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(table, f"response is not valid JSON: {e}", e) from e

    def fetch_one(self, table: str, record_id: str) -> Optional[RawRecord]:
        """Fetch a single record by id.

        Args:
            table: Table id or name
            record_id: Store-assigned record id

        Returns:
            The record, or None if the store reports the record does not exist.
            A 404 for a missing base or table raises RemoteRejectedError.

        Raises:
            StoreUnavailableError, RemoteRejectedError, MalformedResponseError
        """
        url = f"{self._table_url(table)}/{quote(record_id, safe='')}"
        response = self._get(table, url)

        if response.status_code == 404 and _error_type(response) in RECORD_NOT_FOUND_ERRORS:
            logger.info(f"Record {record_id} not found in {table}")
            return None

        self._check_status(table, response)
        return parse_record(table, self._json(table, response))

    def fetch_many(
        self,
        table: str,
        predicate: Optional[str] = None,
        page_size: Optional[int] = None,
        sort: Optional[SortSpec] = None,
        view: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> List[RawRecord]:
        """List records from a table, optionally filtered by a formula.

        Only the first page is read; ``page_size`` bounds how many records
        come back.

        Args:
            table: Table id or name
            predicate: Filter formula, or None to list without filtering
            page_size: Records per page
            sort: Optional single-field sort
            view: Optional named view (applies the view's filters and order)
            max_records: Optional cap on total records

        Returns:
            Records in the order the store returned them

        Raises:
            StoreUnavailableError, RemoteRejectedError, MalformedResponseError
        """
        params: List[Tuple[str, Any]] = []
        if predicate:
            params.append(("filterByFormula", predicate))
        if page_size is not None:
            params.append(("pageSize", page_size))
        if sort is not None:
            params.append(("sort[0][field]", sort.field))
            params.append(("sort[0][direction]", sort.direction))
        if view:
            params.append(("view", view))
        if max_records is not None:
            params.append(("maxRecords", max_records))

        response = self._get(table, self._table_url(table), params=params or None)
        self._check_status(table, response)
        data = self._json(table, response)

        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise MalformedResponseError(table, "response is missing a 'records' list")

        records = [parse_record(table, item) for item in data["records"]]
        if data.get("offset"):
            logger.debug(f"{table}: more records available beyond first page, not followed")
        logger.debug(f"{table}: fetched {len(records)} record(s)")
        return records
