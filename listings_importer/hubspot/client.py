"""HubSpot CRM v3 store for the listings object."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Iterable, Mapping
from urllib.parse import quote

from listings_importer.common.http import HttpClient, HttpRequestError
from listings_importer.common.models import CreateOperation, Operation, UpdateOperation
from listings_importer.hubspot.properties import listings_object_schema


class HubSpotListingsStore:
    def __init__(
        self,
        access_token: str,
        *,
        base_url: str,
        object_type: str,
        identifier_property: str,
        http_client: HttpClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.object_type = object_type
        self.identifier_property = identifier_property
        self.owns_client = http_client is None
        self.client = http_client or HttpClient(logger=logger)
        self.logger = logger

    def close(self) -> None:
        if self.owns_client:
            self.client.close()

    def __enter__(self) -> "HubSpotListingsStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def _url(self, *parts: str) -> str:
        suffix = "/".join(quote(str(part), safe="") for part in parts)
        return f"{self.base_url}/crm/v3/{suffix}"

    def lookup_by_identifier(self, identifier: str) -> Mapping[str, Any] | None:
        body = {
            "filterGroups": [
                {
                    "filters": [
                        {
                            "propertyName": self.identifier_property,
                            "operator": "EQ",
                            "value": identifier,
                        }
                    ]
                }
            ],
            "properties": [self.identifier_property],
            "limit": 1,
        }
        payload = self.client.post_json(
            self._url("objects", self.object_type, "search"),
            body=body,
            headers=self._headers(),
        )
        results = payload.get("results") or []
        return results[0] if results else None

    def submit(self, operation: Operation) -> Mapping[str, Any]:
        if isinstance(operation, UpdateOperation):
            result = self.client.patch_json(
                self._url("objects", self.object_type, operation.record_id),
                body={"properties": operation.payload},
                headers=self._headers(),
            )
        elif isinstance(operation, CreateOperation):
            result = self.client.post_json(
                self._url("objects", self.object_type),
                body={"properties": operation.payload},
                headers=self._headers(),
            )
        else:
            raise TypeError(f"Unsupported operation: {type(operation).__name__}")

        if self.logger is not None:
            identifier = operation.payload.get(self.identifier_property) or getattr(operation, "record_id", None)
            self.logger.debug(
                f"{operation.kind} listing {identifier}",
                extra={"event": operation.kind.upper(), "status": "ok", "external_listing_id": identifier},
            )
        return result

    def ensure_object(self) -> Mapping[str, Any]:
        """Return the listings object schema, creating it on a 404."""
        try:
            return self.client.get_json(self._url("schemas", self.object_type), headers=self._headers())
        except HttpRequestError as exc:
            if exc.status_code != 404:
                raise
        schema = self.client.post_json(
            self._url("schemas"),
            body=listings_object_schema(self.object_type, self.identifier_property),
            headers=self._headers(),
        )
        if self.logger is not None:
            self.logger.info(
                f"Created custom object: {self.object_type}",
                extra={"event": "OBJECT_CREATED", "status": "ok"},
            )
        return schema

    def get_existing_properties(self) -> list[dict]:
        payload = self.client.get_json(self._url("properties", self.object_type), headers=self._headers())
        return list(payload.get("results") or [])

    def ensure_properties(self, definitions: Iterable[Mapping[str, Any]]) -> list[str]:
        existing = {prop.get("name") for prop in self.get_existing_properties()}
        created: list[str] = []
        for definition in definitions:
            if definition["name"] in existing:
                continue
            self.client.post_json(
                self._url("properties", self.object_type),
                body=dict(definition),
                headers=self._headers(),
            )
            created.append(definition["name"])
            if self.logger is not None:
                self.logger.info(
                    f"Created property: {definition['name']}",
                    extra={"event": "PROPERTY_CREATED", "status": "ok"},
                )
        return created
