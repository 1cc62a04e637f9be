from __future__ import annotations

import json
import logging
from typing import Any

from license_console.backend.client import BackendClient, decode_items, decode_record
from license_console.backend.models import License, LicenseKeyPair

logger = logging.getLogger(__name__)


def _pairs_from_list(items: list[Any]) -> list[LicenseKeyPair]:
    out: list[LicenseKeyPair] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        key = item.get("key")
        if key is None:
            continue
        value = item.get("value")
        out.append(LicenseKeyPair(key=str(key), value="" if value is None else str(value)))
    return out


def parse_license_key(raw: Any) -> list[LicenseKeyPair]:
    """Normalise a ``license_key`` value into key/value pairs.

    The backend stores either a list of ``{key, value}`` objects, a JSON string
    of such a list, or a JSON string of a plain object.
    """

    if raw is None:
        return []
    if isinstance(raw, list):
        return _pairs_from_list(raw)
    if isinstance(raw, dict):
        return [LicenseKeyPair(key=str(k), value=str(v)) for k, v in raw.items()]
    if not isinstance(raw, str) or not raw.strip():
        return []

    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Could not parse license_key value as JSON")
        return []

    if isinstance(decoded, list):
        return _pairs_from_list(decoded)
    if isinstance(decoded, dict):
        return [LicenseKeyPair(key=str(k), value=str(v)) for k, v in decoded.items()]
    return []


async def list_licenses(client: BackendClient) -> list[License]:
    env = await client.call("GET", "/licenses", failure_message="Failed to load licenses")
    return decode_items(License, env.data, what="license")


async def get_license(client: BackendClient, license_id: str | int) -> License:
    env = await client.call(
        "GET", f"/licenses/{license_id}", failure_message="Failed to load license"
    )
    return decode_record(License, env.data, what="license")


async def create_license(client: BackendClient, payload: dict[str, Any]) -> str | None:
    env = await client.call(
        "POST", "/licenses", json=payload, failure_message="Failed to register license"
    )
    return env.message


async def update_license(
    client: BackendClient, license_id: str | int, payload: dict[str, Any]
) -> str | None:
    env = await client.call(
        "PUT",
        f"/licenses/{license_id}",
        json=payload,
        failure_message="Failed to update license",
    )
    return env.message


async def delete_license(client: BackendClient, license_id: str | int) -> str | None:
    env = await client.call(
        "DELETE", f"/licenses/{license_id}", failure_message="Failed to delete license"
    )
    return env.message
