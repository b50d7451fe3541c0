"""
OpenChargeMap POI client.

One request per corridor segment, bounded by the segment's box and
pre-filtered server-side to >=100 kW sites; the stricter HPC threshold is
applied by the ingestion rules.  HTTP failures are raised as
``httpx.HTTPError`` for the caller to handle; a 200 whose body is not a
JSON list of POIs (rate-limit pages, quota errors) raises
``OpenChargeMapError``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from echarger.config import settings
from echarger.domain.corridor import Segment

logger = logging.getLogger(__name__)


class OpenChargeMapError(Exception):
    """The provider answered, but not with a list of POIs."""


class OpenChargeMapClient:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: str = settings.openchargemap_url,
        api_key: str = settings.openchargemap_api_key,
        min_power_kw: int = settings.openchargemap_min_power_kw,
        max_results: int = settings.openchargemap_max_results,
        timeout: float = settings.openchargemap_timeout_seconds,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.base_url = base_url
        self.api_key = api_key
        self.min_power_kw = min_power_kw
        self.max_results = max_results

    def segment_params(self, segment: Segment) -> dict[str, str]:
        box = segment.bbox
        params = {
            "output": "json",
            "boundingbox": f"({box.min_lat},{box.min_lng}),({box.max_lat},{box.max_lng})",
            "minpowerkw": str(self.min_power_kw),
            "maxresults": str(self.max_results),
            "compact": "false",
            "verbose": "false",
        }
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def fetch_segment(self, segment: Segment) -> list[dict[str, Any]]:
        """Return the raw POIs inside *segment*'s bounding box."""
        response = await self.client.get(
            self.base_url, params=self.segment_params(segment)
        )
        response.raise_for_status()
        try:
            pois = response.json()
        except ValueError as exc:
            raise OpenChargeMapError(
                f"Non-JSON response for {segment.id.value}"
            ) from exc
        if not isinstance(pois, list) or not all(isinstance(p, dict) for p in pois):
            raise OpenChargeMapError(
                f"Unexpected payload for {segment.id.value}: {type(pois).__name__}"
            )
        logger.debug("OpenChargeMap %s: %d POIs", segment.id.value, len(pois))
        return pois

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "OpenChargeMapClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
