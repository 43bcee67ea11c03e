"""Typed records for wiki pages and their attachments."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import MalformedResponseError


@dataclass(frozen=True)
class WikiFile:
    """An attachment of a wiki page.

    Attributes:
        url: Path of the file relative to the wiki host
        name: File name to save the attachment under
    """
    url: str
    name: str


@dataclass
class PageData:
    """Page data returned by the get-item endpoint.

    Attributes:
        title: Page identifier the data was requested for
        html: Rendered page markup
        files: Attachments, in the order the service returned them
    """
    title: str
    html: str
    files: List[WikiFile] = field(default_factory=list)

    @classmethod
    def from_response(cls, title: str, payload: Any) -> "PageData":
        """
        Build page data from a decoded JSON response.

        Args:
            title: Page identifier the response belongs to
            payload: Decoded JSON body

        Returns:
            PageData instance

        Raises:
            MalformedResponseError: If expected fields are missing or mistyped
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(title, "response is not a JSON object")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise MalformedResponseError(title, "missing 'data' object")
        html = data.get("html")
        if not isinstance(html, str):
            raise MalformedResponseError(title, "missing 'data.html' string")

        raw_files = data.get("files") or []
        if not isinstance(raw_files, list):
            raise MalformedResponseError(title, "'data.files' is not a list")

        files = []
        for index, item in enumerate(raw_files):
            if not isinstance(item, dict):
                raise MalformedResponseError(title, f"file #{index} is not an object")
            url = item.get("url")
            name = item.get("name")
            if not isinstance(url, str) or not isinstance(name, str):
                raise MalformedResponseError(
                    title, f"file #{index} needs string 'url' and 'name'"
                )
            files.append(WikiFile(url=url, name=name))

        return cls(title=title, html=html, files=files)


@dataclass
class WikiPage:
    """A discovered wiki page and the subtree resolved beneath it.

    Attributes:
        title: Page identifier
        files: Attachments of the page
        links: Page identifiers linked from the page, duplicates included
        children: Child pages keyed by identifier, in discovery order
        html: Raw page markup, kept for Markdown export
    """
    title: str
    files: List[WikiFile] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    children: Dict[str, "WikiPage"] = field(default_factory=dict)
    html: str = field(default="", repr=False)

    @classmethod
    def from_page_data(cls, data: PageData, links: List[str]) -> "WikiPage":
        return cls(
            title=data.title,
            files=list(data.files),
            links=list(links),
            html=data.html,
        )

    def count(self) -> int:
        """Number of pages in this subtree, including this one."""
        total = 0
        stack = [self]
        while stack:
            page = stack.pop()
            total += 1
            stack.extend(page.children.values())
        return total
