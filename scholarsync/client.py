"""Client for the remote generic-record API."""

import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .exceptions import (
	ScholarSyncAPIError,
	ScholarSyncAuthError,
	ScholarSyncConnectionError,
	ScholarSyncDataError,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_HEADERS = {
	"Accept": "application/json",
	"Content-Type": "application/json; charset=UTF-8",
	"User-Agent": "scholarsync/1.0",
}


class ScholarSyncClient:
	"""Client for a generic table API: tables of rows addressed by column name.

	Every response is an envelope ``{"success": bool, ...}``. Queries answer
	with ``data`` (a list of rows), mutations with ``results`` (one entry per
	submitted row, each with its own ``success`` flag).
	"""

	def __init__(self, base_url: str, api_key: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None):
		"""Initialise client.

		Args:
			base_url: Root URL of the API, e.g. https://api.example.com/v1
			api_key: Optional bearer token sent with every request
			session: Optional aiohttp session. If None, one is created on entry.
		"""
		self._base_url = base_url.rstrip("/")
		self._api_key = api_key
		self._session = session
		self._own_session = session is None

	async def __aenter__(self):
		"""Async context manager entry."""
		if self._own_session and self._session is None:
			self._session = aiohttp.ClientSession()
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		"""Async context manager exit."""
		await self.close()

	async def close(self) -> None:
		"""Close the session if this client created it."""
		if self._own_session and self._session:
			await self._session.close()
			self._session = None

	async def fetch_records(
		self,
		table: str,
		fields: List[str],
		where: Optional[List[Dict[str, Any]]] = None,
		order_by: Optional[List[Dict[str, str]]] = None,
	) -> List[Dict[str, Any]]:
		"""Query rows of a table.

		Args:
			table: Table name
			fields: Columns to return; ``Id`` always comes back
			where: Optional filters, e.g. [{"field": "period", "operator": "EqualTo", "value": 1}]
			order_by: Optional sort, e.g. [{"field": "created_at", "direction": "DESC"}]

		Returns:
			List of rows keyed by column name
		"""
		payload: Dict[str, Any] = {"fields": list(fields)}
		if where:
			payload["where"] = where
		if order_by:
			payload["orderBy"] = order_by

		data = await self._request("POST", f"/tables/{table}/query", payload=payload)
		rows = data.get("data") or []
		if not isinstance(rows, list):
			raise ScholarSyncDataError(f"Expected a list of {table} rows, got {type(rows).__name__}")
		_LOGGER.debug(f"Fetched {len(rows)} rows from {table}")
		return rows

	async def get_record(self, table: str, record_id: Any, fields: List[str]) -> Optional[Dict[str, Any]]:
		"""Fetch one row by id.

		Returns:
			The row, or None when the table has no row with that id
		"""
		params = {"fields": ",".join(fields)}
		data = await self._request("GET", f"/tables/{table}/records/{record_id}", params=params, allow_not_found=True)
		if data is None:
			return None
		row = data.get("data")
		if row is not None and not isinstance(row, dict):
			raise ScholarSyncDataError(f"Expected a {table} row, got {type(row).__name__}")
		return row or None

	async def create_records(self, table: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
		"""Create rows; returns one result entry per submitted row."""
		data = await self._request("POST", f"/tables/{table}/records", payload={"records": records})
		return self._results(data, table, len(records))

	async def update_records(self, table: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
		"""Update rows (each must carry its ``Id``); returns one result per row."""
		data = await self._request("PATCH", f"/tables/{table}/records", payload={"records": records})
		return self._results(data, table, len(records))

	async def delete_records(self, table: str, record_ids: List[Any]) -> List[Dict[str, Any]]:
		"""Delete rows by id; returns one result per id."""
		data = await self._request("DELETE", f"/tables/{table}/records", payload={"RecordIds": record_ids})
		return self._results(data, table, len(record_ids))

	def _results(self, data: Dict[str, Any], table: str, submitted: int) -> List[Dict[str, Any]]:
		results = data.get("results")
		if not isinstance(results, list):
			raise ScholarSyncDataError(f"Mutation on {table} returned no results")
		if len(results) != submitted:
			_LOGGER.warning(f"Submitted {submitted} {table} rows but got {len(results)} results")
		return results

	async def _request(
		self,
		method: str,
		path: str,
		payload: Optional[Dict[str, Any]] = None,
		params: Optional[Dict[str, Any]] = None,
		allow_not_found: bool = False,
	) -> Optional[Dict[str, Any]]:
		"""Send one request and unwrap the response envelope.

		Raises:
			ScholarSyncAuthError: HTTP 401/403
			ScholarSyncAPIError: any other HTTP error, or ``success: false``
			ScholarSyncConnectionError: the request could not be completed
			ScholarSyncDataError: the body is not a JSON envelope
		"""
		if self._session is None:
			raise ScholarSyncAPIError("Client not properly initialised, open it with `async with` first")

		url = f"{self._base_url}{path}"
		headers = DEFAULT_HEADERS.copy()
		if self._api_key:
			headers["Authorization"] = f"Bearer {self._api_key}"

		try:
			async with self._session.request(method, url, headers=headers, json=payload, params=params) as resp:
				if resp.status in (401, 403):
					raise ScholarSyncAuthError(f"Not authorised for {method} {path}: HTTP {resp.status}")
				if resp.status == 404 and allow_not_found:
					return None
				if resp.status != 200:
					text = await resp.text()
					_LOGGER.warning(f"{method} {path} failed: HTTP {resp.status} {text[:200]}")
					raise ScholarSyncAPIError(f"Request failed: HTTP {resp.status}")

				# Check content type before attempting JSON decode
				content_type = resp.headers.get("content-type", "").lower()
				if "text/html" in content_type:
					raise ScholarSyncDataError(f"Got HTML instead of JSON from {path}")

				try:
					data = await resp.json()
				except aiohttp.ContentTypeError as e:
					# Content-type header is wrong but the body might still be JSON
					text = await resp.text()
					_LOGGER.warning(f"Content-type error for {path}, attempting manual JSON parse: {e}")
					try:
						data = json.loads(text)
					except json.JSONDecodeError as err:
						_LOGGER.error(f"Response doesn't look like JSON: {text[:200]}...")
						raise ScholarSyncDataError(f"Invalid JSON response from {path}") from err
		except aiohttp.ClientError as e:
			raise ScholarSyncConnectionError(f"Connection error: {e}") from e

		if not isinstance(data, dict):
			raise ScholarSyncDataError(f"Unexpected response from {path}: {type(data).__name__}")
		if not data.get("success", False):
			message = data.get("message") or f"{method} {path} was not successful"
			raise ScholarSyncAPIError(message)
		return data
