"""
Core implementation: discover a wiki page tree and replay it onto disk
"""

import os
import re
import requests
from bs4 import BeautifulSoup
import html2text
from urllib.parse import quote, unquote
from typing import List, Optional, Set
import logging

from .errors import MalformedResponseError
from .models import PageData, WikiPage

PAGE_ENDPOINT = "/api/v2/wiki/get-item/"
WIKI_PREFIX = "wiki/"

# Characters encodeURIComponent leaves as-is besides alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


class WikiMirror:
    """
    Mirrors a wiki's page hierarchy onto local disk.

    Pages are discovered by following links in their rendered markup,
    starting from a root page. Each page becomes a directory holding the
    page's attachments and one subdirectory per child page.
    """

    def __init__(
        self,
        host: str,
        token: str,
        timeout: Optional[float] = None,
        save_markdown: bool = False,
    ):
        """
        Initialize the mirror.

        Args:
            host: Base URL of the wiki host (e.g. https://wiki.example.com)
            token: API bearer token
            timeout: Request timeout in seconds (default: None, wait forever)
            save_markdown: Also write each page's content as index.md
        """
        self.host = host.rstrip("/")
        self.timeout = timeout
        self.save_markdown = save_markdown
        self.logger = logging.getLogger(__name__)

        # One keep-alive session for every request
        self.session = requests.Session()
        self.session.headers.update({"X-Cbr-Authorization": f"Bearer {token}"})

        self.html2text = html2text.HTML2Text()
        self.html2text.ignore_links = False
        self.html2text.ignore_images = False
        self.html2text.body_width = 0  # Don't wrap text

    def page_url(self, title: str) -> str:
        """API URL of the page with the given identifier."""
        return f"{self.host}{PAGE_ENDPOINT}{quote(title, safe=_URI_COMPONENT_SAFE)}"

    def fetch_page(self, title: str) -> Optional[PageData]:
        """
        Fetch a page's data from the wiki API.

        Args:
            title: Page identifier

        Returns:
            PageData or None if the fetch failed or the response was malformed
        """
        url = self.page_url(title)
        try:
            self.logger.info(f"Fetching page: {title}")
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError as e:
                raise MalformedResponseError(title, f"invalid JSON ({e})")
            return PageData.from_response(title, payload)
        except requests.RequestException as e:
            self.logger.error(f"Error fetching page {title} ({url}): {e}")
            return None
        except MalformedResponseError as e:
            self.logger.error(str(e))
            return None

    def extract_wiki_links(self, html: str) -> List[str]:
        """
        Extract wiki page identifiers from page markup.

        An href is an internal link if it starts with "wiki/" or with
        "{host}/wiki/"; the identifier is the URL-decoded remainder.

        Args:
            html: Page markup

        Returns:
            Identifiers in document order, duplicates included
        """
        if not html:
            return []

        host_prefix = f"{self.host}/{WIKI_PREFIX}"
        soup = BeautifulSoup(html, "lxml")
        links = []
        for anchor in soup.find_all("a", href=True):
            href = anchor["href"]
            if href.startswith(WIKI_PREFIX):
                links.append(unquote(href[len(WIKI_PREFIX):]))
            elif href.startswith(host_prefix):
                links.append(unquote(href[len(host_prefix):]))
        return links

    def _visit(self, title: str, visited: Set[str]) -> Optional[WikiPage]:
        """Mark a page visited and fetch it, unless it was already visited."""
        if title in visited:
            self.logger.debug(f"Already visited: {title}")
            return None

        # Marked before fetching so a failed page is never retried
        visited.add(title)

        data = self.fetch_page(title)
        if data is None:
            return None

        links = self.extract_wiki_links(data.html)
        self.logger.debug(f"Page {title} links to {len(links)} pages")
        return WikiPage.from_page_data(data, links)

    def build_tree(self, title: str, visited: Optional[Set[str]] = None) -> Optional[WikiPage]:
        """
        Build the page tree reachable from a page.

        Links are resolved depth-first in the order they appear on each
        page. A page reachable through several links becomes a child of the
        first page whose traversal reaches it.

        Args:
            title: Identifier of the root page
            visited: Identifiers already visited; updated in place

        Returns:
            Root WikiPage, or None if the root was already visited or
            could not be fetched
        """
        if visited is None:
            visited = set()

        root = self._visit(title, visited)
        if root is None:
            return None

        stack = [(root, iter(root.links))]
        while stack:
            page, pending = stack[-1]
            link = next(pending, None)
            if link is None:
                stack.pop()
                continue

            child = self._visit(link, visited)
            if child is not None:
                page.children[link] = child
                stack.append((child, iter(child.links)))

        return root

    def crawl_wiki(self, start_title: str) -> Optional[WikiPage]:
        """Build the page tree from start_title, logging progress."""
        self.logger.info(f"Start crawl wiki: {start_title}")
        tree = self.build_tree(start_title)
        total = tree.count() if tree else 0
        self.logger.info(f"Wiki crawl complete. Total pages: {total}")
        return tree

    @staticmethod
    def _sanitize_filename(name: str) -> str:
        """
        Sanitize a page title for use as a directory name.
        Replaces / \\ ? % * : | " < > and each whitespace run with "_".
        """
        name = re.sub(r'[/\\?%*:|"<>]', '_', name)
        return re.sub(r'\s+', '_', name)

    @staticmethod
    def _is_safe_file_name(name: str) -> bool:
        """True if name stays inside the directory it is joined to."""
        if name in ("", ".", ".."):
            return False
        separators = [os.sep] + ([os.altsep] if os.altsep else [])
        return not any(sep in name for sep in separators)

    def download_file(self, url: str, path: str) -> bool:
        """
        Download a file and write it to path, overwriting any existing file.

        Args:
            url: Absolute URL of the file
            path: Destination file path

        Returns:
            True if the file was written, False if the download failed
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            with open(path, "wb") as f:
                f.write(response.content)
            self.logger.info(f"Saved: {path}")
            return True
        except (requests.RequestException, OSError, ValueError) as e:
            self.logger.error(f"Failed to download {url}: {e}")
            return False

    def html_to_markdown(self, html_content: str) -> str:
        """Convert page markup to Markdown."""
        return self.html2text.handle(html_content).strip()

    def _write_markdown(self, page: WikiPage, node_path: str):
        file_path = os.path.join(node_path, "index.md")
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(f"# {page.title}\n\n{self.html_to_markdown(page.html)}\n")
            self.logger.info(f"Saved: {file_path}")
        except OSError as e:
            self.logger.error(f"Failed to write {file_path}: {e}")

    def _process_node(self, page: WikiPage, current_path: str) -> str:
        """Create a page's directory and fill it; returns the directory path."""
        node_path = os.path.join(current_path, self._sanitize_filename(page.title))
        if not os.path.isdir(node_path):
            os.makedirs(node_path, exist_ok=True)
            self.logger.info(f"Created directory: {node_path}")

        if self.save_markdown:
            self._write_markdown(page, node_path)

        for wiki_file in page.files:
            url = self.host + wiki_file.url
            if not self._is_safe_file_name(wiki_file.name):
                self.logger.error(f"Skipping {url}: unsafe file name {wiki_file.name!r}")
                continue
            self.download_file(url, os.path.join(node_path, wiki_file.name))

        return node_path

    def sync_tree(self, root: Optional[WikiPage], output_dir: str):
        """
        Replay a page tree onto disk under output_dir.

        Each page becomes a directory named after its sanitized title,
        containing its attachments and one subdirectory per child page.
        Pages are written depth-first, children in discovery order.
        Failed downloads are logged and skipped.

        Args:
            root: Root of the page tree; None is a no-op
            output_dir: Directory to create the tree in
        """
        if root is None:
            self.logger.warning("Nothing to sync: wiki tree is empty")
            return

        os.makedirs(output_dir, exist_ok=True)
        stack = [(root, output_dir)]
        while stack:
            page, current_path = stack.pop()
            node_path = self._process_node(page, current_path)
            # Reversed so the first child is written first
            for child in reversed(list(page.children.values())):
                stack.append((child, node_path))
        self.logger.info(f"Sync complete: {output_dir}")

    def mirror(self, start_title: str, output_dir: str) -> Optional[WikiPage]:
        """Crawl the wiki from start_title and write the tree to output_dir."""
        tree = self.crawl_wiki(start_title)
        self.sync_tree(tree, output_dir)
        return tree
