"""Async client for the release host's "latest release" endpoint."""

from __future__ import annotations

import re
from typing import Any

import httpx

from .errors import ReleaseCheckError
from .models import ReleaseInfo

_VERSION_PART = re.compile(r"\d+")


def version_key(version: str) -> tuple[int, ...]:
    """Numeric sort key for tags like ``v0.2.0`` or ``1.4``; pre-release suffixes are ignored."""
    core = version.strip().lstrip("vV").split("-", 1)[0].split("+", 1)[0]
    return tuple(int(m.group()) for m in (_VERSION_PART.match(p) for p in core.split(".")) if m)


def is_newer(candidate: str, current: str) -> bool:
    return version_key(candidate) > version_key(current)


class ReleaseChecker:
    """Thin wrapper around GitHub's REST API for one repository."""

    def __init__(
        self,
        *,
        api_url: str,
        repo: str,
        current_version: str,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._repo = repo
        self._current_version = current_version
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Accept": "application/vnd.github+json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def latest_release(self) -> dict[str, Any] | None:
        """Return the latest release payload, or None when the repo has no releases."""
        path = f"/repos/{self._repo}/releases/latest"
        try:
            resp = await self._client.get(path)
        except httpx.TransportError as exc:
            raise ReleaseCheckError(
                status_code=0,
                url=str(self._client.base_url).rstrip("/") + path,
                response_text=str(exc),
            ) from exc

        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            raise ReleaseCheckError(
                status_code=resp.status_code,
                url=str(resp.request.url),
                response_text=(resp.text or "").strip(),
            )

        data = resp.json()
        if not isinstance(data, dict):
            raise ReleaseCheckError(
                status_code=resp.status_code,
                url=str(resp.request.url),
                response_text=f"Unexpected JSON type: {type(data).__name__}",
            )
        return data

    async def check(self) -> ReleaseInfo:
        release = await self.latest_release()
        if release is None:
            return ReleaseInfo(current_version=self._current_version)

        latest = str(release.get("tag_name") or "")
        return ReleaseInfo(
            current_version=self._current_version,
            latest_version=latest or None,
            url=release.get("html_url"),
            update_available=bool(latest) and is_newer(latest, self._current_version),
        )
