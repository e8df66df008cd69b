"""Version information and the release update check."""

from __future__ import annotations

import json
import re
import urllib.request
from dataclasses import dataclass
from typing import Any

SOFTWARE_NAME = "SerialKit"
MAIN_VERSION = "1.4.0Alpha"
BUILD_VERSION = "87564M"
SOFTWARE_VERSION = MAIN_VERSION

_INT_RE = re.compile(r"\s*[+-]?\d+\s*")


def software_title(debug: bool = False) -> str:
    """Window title; debug builds also show the build identifier."""
    title = f"{SOFTWARE_NAME} V{SOFTWARE_VERSION}"
    if debug:
        title += f" (Build {BUILD_VERSION}-Debug)"
    return title


def _to_int(text: str) -> int:
    return int(text) if _INT_RE.fullmatch(text) else 0


def _version_number(version: str) -> int | None:
    parts = re.sub(r"[a-zA-Z]", "", version).split(".")
    if len(parts) != 3:
        return None
    major, minor, patch = (_to_int(p) for p in parts)
    return (major << 16) | (minor << 8) | patch


def compare_version(network_version: str, local_version: str) -> bool:
    """Return True when ``network_version`` is newer than ``local_version``.

    Letters are ignored; both versions must have three dot-separated parts.
    """
    network = _version_number(network_version)
    local = _version_number(local_version)
    if network is None or local is None:
        return False
    return network > local


@dataclass(frozen=True)
class ReleaseInfo:
    """The parts of a published release that the update check uses."""

    name: str
    body: str
    download_url: str
    updated_date: str


def _text(obj: dict, key: str) -> str:
    value = obj.get(key)
    return value if isinstance(value, str) else ""


def parse_release(data: str | bytes) -> ReleaseInfo:
    """Parse a release description in JSON.

    The last asset whose name contains ``.exe`` supplies the download URL
    and date. Raises ValueError when the data is not a JSON object.
    """
    document: Any = json.loads(data)
    if not isinstance(document, dict):
        raise ValueError("release description must be a JSON object")

    download_url = ""
    updated_date = ""
    assets = document.get("assets")
    for asset in assets if isinstance(assets, list) else []:
        if isinstance(asset, dict) and asset and ".exe" in _text(asset, "name").lower():
            download_url = _text(asset, "browser_download_url")
            updated_date = _text(asset, "updated_at").split("T")[0]

    return ReleaseInfo(
        name=_text(document, "name"),
        body=_text(document, "body"),
        download_url=download_url,
        updated_date=updated_date,
    )


def check_update(
    data: str | bytes, local_version: str = SOFTWARE_VERSION
) -> ReleaseInfo | None:
    """Return the release when it is newer and downloadable, else None."""
    release = parse_release(data)
    if compare_version(release.name, local_version) and release.download_url:
        return release
    return None


def fetch_latest_release(url: str, timeout: float = 10.0) -> ReleaseInfo:
    """Download and parse the release description found at ``url``."""
    request = urllib.request.Request(
        url,
        headers={
            "Accept": "application/json",
            "User-Agent": f"{SOFTWARE_NAME}/{SOFTWARE_VERSION}",
        },
    )
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return parse_release(response.read())