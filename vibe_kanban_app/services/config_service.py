#!/usr/bin/env python3
"""
Configuration persistence services.

``HttpConfigService`` talks to the configuration endpoint of the persistence
service over HTTP. ``InMemoryConfigService`` keeps the record in process and
enforces the same version rule, for offline sessions and tests.

Wire format (both directions):
    {"config": {<configuration record>}, "version": <int>}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord, VersionedConfig
from vibe_kanban_app.core.exceptions import (
    ConfigLoadError,
    ConfigSaveError,
    ConfigValidationError,
    ErrorCodes,
    StaleConfigVersionError,
)

if TYPE_CHECKING:
    from vibe_kanban_app.config import ClientSettings

logger = logging.getLogger(__name__)


def parse_versioned_payload(payload: Any) -> VersionedConfig:
    """
    Parse a ``{"config": ..., "version": ...}`` response body.

    Raises:
        ConfigValidationError: If the payload is not a well-formed versioned record.

    """
    if not isinstance(payload, dict) or "config" not in payload:
        msg = "Response is missing the 'config' object"
        raise ConfigValidationError(msg, ErrorCodes.INVALID_FORMAT)
    version = payload.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        msg = f"Invalid config version: {version!r}"
        raise ConfigValidationError(msg, ErrorCodes.INVALID_FORMAT)
    return VersionedConfig(record=ConfigurationRecord.from_dict(payload["config"]), version=version)


class HttpConfigService:
    """
    Persistence client for the configuration resource.

    The client owns its ``httpx.AsyncClient`` unless one is passed in, in
    which case closing it stays the caller's job.
    """

    def __init__(
        self,
        base_url: str,
        *,
        endpoint: str = "/api/v1/config",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> HttpConfigService:
        """Build a client from ``ClientSettings``."""
        return cls(
            settings.service_url,
            endpoint=settings.config_endpoint,
            timeout=settings.request_timeout_seconds,
        )

    async def load_config(self) -> VersionedConfig:
        try:
            response = await self._client.get(self._endpoint)
            response.raise_for_status()
            versioned = parse_versioned_payload(response.json())
        except httpx.HTTPStatusError as e:
            msg = f"Config service returned HTTP {e.response.status_code}"
            raise ConfigLoadError(msg, ErrorCodes.CONFIG_LOAD_FAILED, {"status_code": e.response.status_code}) from e
        except httpx.TimeoutException as e:
            msg = f"Timed out loading config: {e}"
            raise ConfigLoadError(msg, ErrorCodes.TIMEOUT) from e
        except httpx.HTTPError as e:
            msg = f"Config service unreachable: {e}"
            raise ConfigLoadError(msg, ErrorCodes.SERVICE_UNREACHABLE) from e
        except (ValueError, ConfigValidationError) as e:
            # ValueError covers an undecodable JSON body
            msg = f"Malformed config record: {e}"
            raise ConfigLoadError(msg, ErrorCodes.INVALID_FORMAT) from e

        logger.info("Loaded config version %d", versioned.version)
        return versioned

    async def save_config(self, record: ConfigurationRecord, version: int) -> int:
        body = {"config": record.to_dict(), "version": version}
        try:
            response = await self._client.put(self._endpoint, json=body)
            if response.status_code == httpx.codes.CONFLICT:
                detail = _json_or_none(response)
                current = _current_version_from_conflict(detail)
                msg = f"Config version {version} rejected as stale (current: {current})"
                raise StaleConfigVersionError(msg, attempted_version=version, current_version=current)
            response.raise_for_status()
            acknowledged = parse_versioned_payload(response.json()).version
        except httpx.HTTPStatusError as e:
            msg = f"Config service returned HTTP {e.response.status_code}"
            raise ConfigSaveError(msg, ErrorCodes.CONFIG_SAVE_FAILED, {"status_code": e.response.status_code}) from e
        except httpx.TimeoutException as e:
            msg = f"Timed out saving config: {e}"
            raise ConfigSaveError(msg, ErrorCodes.TIMEOUT) from e
        except httpx.HTTPError as e:
            msg = f"Config service unreachable: {e}"
            raise ConfigSaveError(msg, ErrorCodes.SERVICE_UNREACHABLE) from e
        except (ValueError, ConfigValidationError) as e:
            msg = f"Malformed save acknowledgement: {e}"
            raise ConfigSaveError(msg, ErrorCodes.INVALID_FORMAT) from e

        logger.info("Saved config version %d", acknowledged)
        return acknowledged

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class InMemoryConfigService:
    """In-process persistence with the same version rule as the HTTP service."""

    def __init__(self, record: ConfigurationRecord | None = None, version: int = 0) -> None:
        self._record = record or ConfigurationRecord.create_default()
        self._version = version
        self.save_count = 0

    @property
    def record(self) -> ConfigurationRecord:
        return self._record

    @property
    def version(self) -> int:
        return self._version

    async def load_config(self) -> VersionedConfig:
        return VersionedConfig(record=self._record, version=self._version)

    async def save_config(self, record: ConfigurationRecord, version: int) -> int:
        if version <= self._version:
            msg = f"Config version {version} rejected as stale (current: {self._version})"
            raise StaleConfigVersionError(msg, attempted_version=version, current_version=self._version)
        self._record = record
        self._version = version
        self.save_count += 1
        logger.debug("Stored config version %d in memory", version)
        return version

    async def aclose(self) -> None:
        return None


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _current_version_from_conflict(payload: Any) -> int | None:
    """Pull ``detail.current_version`` out of a 409 body, if present."""
    if not isinstance(payload, dict):
        return None
    detail = payload.get("detail")
    if isinstance(detail, dict) and isinstance(detail.get("current_version"), int):
        return detail["current_version"]
    return None
