# browser.py
# Browser-control collaborator over the Playwright sync API.
#
# One session, possibly many tabs. The "current page" is the first tab, in
# enumeration order, whose document reports itself visible. Operations that
# depend on it degrade to no-ops when no tab qualifies.

import base64
from typing import Callable

from playwright.sync_api import Browser, BrowserContext, ElementHandle, Page
from playwright.sync_api import Error as PlaywrightError

from browser_pilot.models import BrowserState, Tab
from browser_pilot.sanitize import sanitize_html

NAVIGATION_TIMEOUT_MS = 10_000
SELECTOR_TIMEOUT_MS = 1_000

DATA_URL_CONTENT_TYPES = ("text/html", "text/plain")


class BrowserSession:
    def __init__(
        self,
        context: BrowserContext,
        browser: Browser | None = None,
        sanitizer: Callable[[str], str] = sanitize_html,
    ) -> None:
        self._context = context
        self._browser = browser
        self._sanitize = sanitizer

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    def pages(self) -> list[Page]:
        return list(self._context.pages)

    def is_visible(self, page: Page) -> bool:
        try:
            page.wait_for_selector("html", state="attached")
            return bool(page.evaluate("() => !document.hidden"))
        except PlaywrightError:
            return False

    def visibility(self) -> list[bool]:
        # Every check resolves before the next tab is inspected.
        return [self.is_visible(page) for page in self.pages()]

    def current_tab_index(self) -> int:
        for index, visible in enumerate(self.visibility()):
            if visible:
                return index
        return -1

    def current_page(self) -> Page | None:
        pages = self.pages()
        for page in pages:
            if self.is_visible(page):
                return page
        return None

    def tabs(self) -> list[Tab]:
        return [Tab(url=page.url, title=self._title(page)) for page in self.pages()]

    def _title(self, page: Page) -> str:
        try:
            return page.title()
        except PlaywrightError:
            return ""

    def snapshot(self) -> BrowserState:
        pages = self.pages()
        visible = [self.is_visible(page) for page in pages]
        index = visible.index(True) if True in visible else -1
        tabs = [Tab(url=page.url, title=self._title(page)) for page in pages]

        if index < 0:
            return BrowserState(tabs=tabs, current_tab_index=-1)

        page = pages[index]
        try:
            content = self._sanitize(page.content())
        except PlaywrightError:
            content = ""
        return BrowserState(
            url=page.url,
            title=tabs[index].title,
            tabs=tabs,
            current_tab_index=index,
            content=content,
        )

    def open_new_tab(self) -> Page:
        page = self._context.new_page()
        page.bring_to_front()
        return page

    def close_tab(self) -> None:
        page = self.current_page()
        if page is not None:
            page.close()

    def switch_tab(self, index: int) -> None:
        """Bring the tab at `index` (1-based) to the front."""
        pages = self.pages()
        if not 1 <= index <= len(pages):
            raise IndexError(f"Tab index {index} out of bounds (1 - {len(pages)})")
        pages[index - 1].bring_to_front()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_to_url(self, url: str) -> None:
        page = self.current_page()
        if page is not None:
            page.goto(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)

    def go_to_data_url(self, content: str, content_type: str = "text/plain") -> None:
        if content_type not in DATA_URL_CONTENT_TYPES:
            raise ValueError(
                f"Unsupported content type {content_type!r}; "
                f"expected one of {', '.join(DATA_URL_CONTENT_TYPES)}."
            )
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        self.go_to_url(f"data:{content_type};base64,{encoded}")

    def go_back(self) -> None:
        page = self.current_page()
        if page is not None:
            page.go_back()

    def reload(self) -> None:
        page = self.current_page()
        if page is not None:
            page.reload()

    # ------------------------------------------------------------------
    # Page interaction
    # ------------------------------------------------------------------

    def select(self, selector: str) -> ElementHandle | None:
        page = self.current_page()
        if page is None:
            return None
        return page.wait_for_selector(selector, timeout=SELECTOR_TIMEOUT_MS)

    def scroll(self, amount: int) -> None:
        page = self.current_page()
        if page is not None:
            page.evaluate("(pixels) => window.scrollBy(0, pixels)", amount)

    def click(self, selector: str) -> None:
        handle = self.select(selector)
        if handle is not None:
            handle.click()

    def type_text(self, selector: str, value: str, clear_first: bool = True) -> None:
        handle = self.select(selector)
        if handle is None:
            raise LookupError(f"Element {selector} not found")
        if clear_first:
            handle.fill("")
        handle.click()
        handle.type(value)

    def press_key(self, selector: str, key: str) -> None:
        handle = self.select(selector)
        if handle is not None:
            handle.press(key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._context.close()
        if self._browser is not None:
            self._browser.close()
