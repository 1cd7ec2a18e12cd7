"""In-process slide renderer built on markdown-it-py."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from markdown_it import MarkdownIt
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

MATH_TYPESETTINGS = ('mathjax', 'katex')

THEME_NAME_PATTERN = re.compile(r'/\*\s*@theme\s+([^\s*]+)')

BASE_CSS = (
    "div#__marp-vscode > div[data-marp-vscode-slide-wrapper] > section {"
    "width:1280px;height:720px;box-sizing:border-box;overflow:hidden;"
    "padding:78.5px;background:#fff;}"
)


@dataclass(frozen=True)
class RenderedSlides:
    """HTML and CSS produced for one markdown document."""

    html: str
    css: str
    slide_count: int = 0


class ThemeSet:
    """Appendable collection of CSS theme documents."""

    def __init__(self):
        self._themes: List[str] = []
        self.names: List[str] = []

    def add(self, css: str) -> Optional[str]:
        """Add a theme document and return its ``@theme`` name if it declares one."""
        self._themes.append(css)
        match = THEME_NAME_PATTERN.search(css)
        name = match.group(1) if match else None
        if name:
            self.names.append(name)
        return name

    @property
    def css(self) -> str:
        return '\n'.join(self._themes)

    def __len__(self) -> int:
        return len(self._themes)


class SlideRenderer:
    """
    Renders slide markdown to HTML sections.

    Slides are separated by horizontal rules (``---``). Front matter is
    consumed and not rendered.
    """

    def __init__(
        self,
        html: bool = False,
        math: Union[str, bool] = 'mathjax',
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger('marp_slides_export.renderers.slide_renderer')
        self.math = math if math in MATH_TYPESETTINGS else False
        self.theme_set = ThemeSet()

        self._md = MarkdownIt(
            "commonmark",
            {"html": bool(html), "linkify": False, "typographer": False},
        ).enable("table").enable("strikethrough")
        self._md.use(front_matter_plugin)
        if self.math:
            self._md.use(dollarmath_plugin)

    def use(self, plugin: Callable[..., Any], *args: Any, **kwargs: Any) -> 'SlideRenderer':
        """Register a markdown-it plugin; returns self for chaining."""
        self._md.use(plugin, *args, **kwargs)
        return self

    def render(self, markdown_text: str) -> RenderedSlides:
        """Render a markdown document into slide sections and the active CSS."""
        tokens = self._md.parse(markdown_text)
        env: dict = {}

        slides: List[List[Any]] = [[]]
        for token in tokens:
            if token.type == 'hr' and token.level == 0:
                slides.append([])
                continue
            if token.type == 'front_matter':
                continue
            slides[-1].append(token)

        sections = []
        for index, slide_tokens in enumerate(slides, start=1):
            body = self._md.renderer.render(slide_tokens, self._md.options, env)
            sections.append(
                f'<div data-marp-vscode-slide-wrapper=""><section id="{index}">{body}</section></div>'
            )

        html = f'<div id="__marp-vscode">{"".join(sections)}</div>'
        css = BASE_CSS
        if len(self.theme_set):
            css = f"{BASE_CSS}\n{self.theme_set.css}"

        self.logger.debug(f"Rendered {len(slides)} slide(s)")
        return RenderedSlides(html=html, css=css, slide_count=len(slides))


__all__ = ['MATH_TYPESETTINGS', 'RenderedSlides', 'SlideRenderer', 'ThemeSet']
