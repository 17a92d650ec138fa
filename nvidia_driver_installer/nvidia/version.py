"""NVIDIA driver version selection.

Either uses the pinned version as-is, or scrapes the "Unix drivers" page for
the latest long-lived branch and insists on exactly one answer.
"""

import http.client
import re
import urllib.request

from ..config import DRIVERS_PAGE_URL, VERSION_LABEL
from ..errors import AmbiguousVersionResolution
from ..utils.logging import log_info

_TAG_PATTERN = re.compile(r"<[^>]*>")
_FETCH_TIMEOUT = 15  # seconds


def fetch_url_text(url: str, timeout: int = _FETCH_TIMEOUT) -> str:
    """Download a page and return it as text."""
    req = urllib.request.Request(
        url, headers={"User-Agent": "nvidia-driver-installer/1.0"}
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        charset = resp.headers.get_content_charset() or "utf-8"
        return resp.read().decode(charset, errors="replace")


def extract_versions(page: str, label: str = VERSION_LABEL) -> list[str]:
    """Distinct values following ``label`` on the page, in page order.

    Markup is removed, everything up to ``label:`` is dropped and all
    whitespace is squeezed out of what remains.
    """
    values: list[str] = []
    for line in page.splitlines():
        if label not in line:
            continue
        text = _TAG_PATTERN.sub("", line)
        value = "".join(text.split(label, 1)[-1].split()).lstrip(":")
        if value not in values:
            values.append(value)
    return values


class VersionResolver:
    """Decides which driver version to download."""

    def __init__(self, fetch_page=fetch_url_text, page_url: str = DRIVERS_PAGE_URL,
                 label: str = VERSION_LABEL, timeout: int = _FETCH_TIMEOUT):
        self.fetch_page = fetch_page
        self.page_url = page_url
        self.label = label
        self.timeout = timeout

    def resolve(self, explicit: str | None = None) -> str:
        """Return ``explicit`` unchanged when set, otherwise the scraped version.

        Raises:
            AmbiguousVersionResolution: the page could not be fetched, or did
                not yield exactly one distinct version
        """
        if explicit:
            return explicit

        log_info(f"Looking up the latest driver version at {self.page_url}")
        try:
            page = self.fetch_page(self.page_url, timeout=self.timeout)
        except (OSError, ValueError, LookupError, http.client.HTTPException) as exc:
            # URLError and socket timeouts are OSError subclasses; a truncated
            # body is an HTTPException and an unknown charset a LookupError
            raise AmbiguousVersionResolution(
                f"Unable to fetch {self.page_url}: {exc}"
            ) from exc

        values = [v for v in extract_versions(page, self.label) if v]
        if len(values) != 1:
            found = ", ".join(values) if values else "none"
            raise AmbiguousVersionResolution(
                f"Unable to find the latest NVIDIA driver from {self.page_url} "
                f"(candidates: {found})"
            )

        log_info(f"Latest driver version: {values[0]}")
        return values[0]
