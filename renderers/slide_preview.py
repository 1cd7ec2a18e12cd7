"""Live slide preview rendered in-process against the original content tree."""

import logging
import re
from typing import Any, Dict, Optional

from mdit_py_plugins.container import container_plugin

from config_loader import get_nested
from content_store import ContentStore
from exporters.rewrite_strategy import ContentProcessor
from exporters.vault_paths import VaultPaths
from models import Document, ExportJob, ExportTarget
from .slide_renderer import SlideRenderer

# Relative background images; absolute http(s) URLs are left alone
BACKGROUND_URL_PATTERN = re.compile(r'(?!background-image:url\(&quot;http)background-image:url\(&quot;')


def build_renderer(config: Dict[str, Any], logger: Optional[logging.Logger] = None) -> SlideRenderer:
    """Create a renderer configured from the ``marp`` settings."""
    renderer = SlideRenderer(
        html=bool(get_nested(config, 'marp.enable_html', False)),
        math=get_nested(config, 'marp.math_typesetting', 'mathjax'),
        logger=logger
    )
    if get_nested(config, 'marp.enable_markdown_it_plugins', False):
        renderer.use(container_plugin, "container")
    return renderer


class SlidePreview:
    """Builds preview HTML pages for slide documents."""

    def __init__(
        self,
        config: Dict[str, Any],
        store: ContentStore,
        renderer: Optional[SlideRenderer] = None,
        processor: Optional[ContentProcessor] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.store = store
        self.logger = logger or logging.getLogger('marp_slides_export.renderers.slide_preview')
        self.paths = VaultPaths(config, store=store, logger=self.logger)
        self.renderer = renderer or build_renderer(config, logger=self.logger)
        self.processor = processor or ContentProcessor(logger=self.logger)
        self.themes_loaded = 0

    def load_themes(self) -> int:
        """
        Add every theme file in the configured theme folder to the renderer.

        Returns:
            Number of themes loaded
        """
        folder = self.paths.theme_folder()
        if not folder:
            return 0

        for stored in self.store.list_files(folder):
            self.renderer.theme_set.add(stored.read())
            self.themes_loaded += 1

        self.logger.info(f"Loaded {self.themes_loaded} theme(s) from '{folder}'")
        return self.themes_loaded

    def render(self, document: Document) -> Optional[str]:
        """
        Render ``document`` to a standalone preview page.

        Image references are rewritten relative to the content root; nothing
        is copied. Returns None if the document text is not a string.
        """
        if not isinstance(document.content, str):
            self.logger.error("Error: markdown text is not a string")
            return None

        job = ExportJob(document=document, target=ExportTarget.LIVE_PREVIEW, staging_directory='')
        context = self.paths.resolution_context(document)
        processed = self.processor.process(document.content, context, job, in_place=True)

        base_path = self.paths.preview_base_path()
        rendered = self.renderer.render(processed.text)
        html = BACKGROUND_URL_PATTERN.sub(f'background-image:url(&quot;{base_path}', rendered.html)

        return (
            "<!DOCTYPE html>\n"
            "<html>\n"
            "<head>\n"
            f'<base href="{base_path}"></base>\n'
            f'<style id="__marp-vscode-style">{rendered.css}</style>\n'
            "</head>\n"
            f"<body>{html}</body>\n"
            "</html>\n"
        )

    def render_path(self, path: str) -> Optional[str]:
        """Read a document from the content store and render its preview."""
        document = Document(path=path, content=self.store.read_file(path), content_root=self.paths.content_root())
        return self.render(document)


__all__ = ['BACKGROUND_URL_PATTERN', 'SlidePreview', 'build_renderer']
