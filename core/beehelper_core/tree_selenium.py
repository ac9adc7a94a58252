from __future__ import annotations

from typing import Hashable, Iterable, Optional, Sequence

from selenium.common.exceptions import (
    InvalidSelectorException,
    StaleElementReferenceException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from beehelper_core.engine_logger import log_engine
from beehelper_core.tree import EMPTY_BOUNDS, Bounds

_RECT_SCRIPT = (
    "const r = arguments[0].getBoundingClientRect();"
    "return [r.left, r.top, r.width, r.height];"
)
_SET_VALUE_SCRIPT = (
    "const el = arguments[0];"
    "el.value = arguments[1];"
    "el.setAttribute('value', arguments[1]);"
    "el.dispatchEvent(new Event('input', {bubbles: true}));"
    "el.dispatchEvent(new Event('change', {bubbles: true}));"
    "el.dispatchEvent(new KeyboardEvent('keyup', {bubbles: true}));"
)
_HIGHLIGHT_SCRIPT = "arguments[0].classList.add('wh-highlighted', 'wh-correct');"
_CLEAR_SCRIPT = (
    "document.querySelectorAll('.wh-highlighted').forEach("
    "el => el.classList.remove('wh-highlighted', 'wh-correct', 'wh-hint'));"
    "document.querySelectorAll('[data-wh-hint]').forEach(el => el.removeAttribute('data-wh-hint'));"
)
_HINT_SCRIPT = (
    "arguments[0].setAttribute('data-wh-hint', arguments[1]);"
    "arguments[0].setAttribute('title', arguments[1]);"
    "arguments[0].classList.add('wh-hint');"
)


class SeleniumPageTree:
    selector_errors = (InvalidSelectorException,)

    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    @property
    def driver(self) -> WebDriver:
        return self._driver

    def select(self, selector: str, root: Optional[WebElement] = None) -> Sequence[WebElement]:
        scope = root if root is not None else self._driver
        try:
            return scope.find_elements(By.CSS_SELECTOR, selector)
        except StaleElementReferenceException:
            return ()

    def iter_nodes(self) -> Iterable[WebElement]:
        try:
            return self._driver.find_elements(By.CSS_SELECTOR, "*")
        except WebDriverException as exc:
            log_engine(f"Page scan failed: {exc}")
            return []

    def node_key(self, node: WebElement) -> Hashable:
        return node.id

    def tag(self, node: WebElement) -> str:
        try:
            return str(node.tag_name or "").lower()
        except WebDriverException:
            return ""

    def text(self, node: WebElement) -> str:
        try:
            value = node.get_attribute("textContent") or node.text or ""
        except WebDriverException:
            return ""
        return value.strip()

    def class_name(self, node: WebElement) -> str:
        return self.attribute(node, "class") or ""

    def attribute(self, node: WebElement, name: str) -> Optional[str]:
        try:
            return node.get_attribute(name)
        except WebDriverException:
            return None

    def child_count(self, node: WebElement) -> int:
        try:
            return len(node.find_elements(By.XPATH, "./*"))
        except WebDriverException:
            return 0

    def bounds(self, node: WebElement) -> Bounds:
        try:
            left, top, width, height = self._driver.execute_script(_RECT_SCRIPT, node)
        except (WebDriverException, TypeError, ValueError):
            return EMPTY_BOUNDS
        return Bounds(left=float(left), top=float(top), width=float(width), height=float(height))

    def font_size(self, node: WebElement) -> Optional[float]:
        try:
            raw = node.value_of_css_property("font-size")
        except WebDriverException:
            return None
        try:
            return float(str(raw).replace("px", "").strip())
        except ValueError:
            return None

    def input_value(self, node: WebElement) -> str:
        return self.attribute(node, "value") or ""

    def viewport_height(self) -> float:
        try:
            return float(self._driver.execute_script("return window.innerHeight;") or 0)
        except WebDriverException:
            return 0.0

    def visible_text_length(self) -> int:
        try:
            return len(self._driver.execute_script("return document.body ? document.body.innerText : '';") or "")
        except WebDriverException:
            return 0


class SeleniumRenderer:
    def __init__(self, driver: WebDriver) -> None:
        self._driver = driver

    def highlight(self, node: WebElement) -> None:
        self._run(_HIGHLIGHT_SCRIPT, node)

    def set_input_value(self, node: WebElement, text: str) -> None:
        self._run(_SET_VALUE_SCRIPT, node, text)

    def click(self, node: WebElement) -> None:
        try:
            node.click()
        except WebDriverException:
            self._run("arguments[0].click();", node)

    def clear_highlights(self) -> None:
        self._run(_CLEAR_SCRIPT)

    def show_hint(self, node: Optional[WebElement], text: str) -> None:
        if node is not None:
            self._run(_HINT_SCRIPT, node, text)

    def show_status(self, text: str) -> None:
        log_engine(text)

    def _run(self, script: str, *args: object) -> None:
        try:
            self._driver.execute_script(script, *args)
        except WebDriverException as exc:
            log_engine(f"Renderer script failed: {exc}")
