"""Host-side path derivation for the content tree and the Marp renderer."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from config_loader import get_nested
from content_store import ContentStore, normalize_path
from models import Document, ResolutionContext


class VaultPaths:
    """
    Derives every filesystem location the pipeline needs from configuration.

    The content root is determined once here and injected into the
    resolution context; nothing downstream probes for it.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        store: Optional[ContentStore] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.store = store
        self.logger = logger or logging.getLogger('marp_slides_export.exporters.vault_paths')
        self._content_root: Optional[str] = None

    def content_root(self) -> str:
        """
        Absolute base directory for author-relative asset paths.

        Looks at ``vault.content_root``, then the content store's base path,
        then the parent of ``vault.config_dir``. Returns an empty string if
        none is usable.
        """
        if self._content_root is not None:
            return self._content_root

        root = get_nested(self.config, 'vault.content_root') or ''
        if not root and self.store is not None and isinstance(self.store.base_path, str):
            root = self.store.base_path
        if not root:
            config_dir = get_nested(self.config, 'vault.config_dir') or ''
            if isinstance(config_dir, str) and os.path.isabs(config_dir):
                root = os.path.dirname(config_dir.rstrip('/\\'))

        if root and isinstance(root, str):
            root = os.path.abspath(os.path.expanduser(root))
        else:
            self.logger.warning("Could not determine content root from configuration")
            root = ''

        self._content_root = root
        return root

    def attachment_folder(self) -> str:
        folder = get_nested(self.config, 'vault.attachment_folder') or ''
        if not isinstance(folder, str):
            return ''
        folder = folder.strip()
        if folder in ('', '/', './'):
            return ''
        return folder.rstrip('/\\')

    def resolution_context(self, document: Document) -> ResolutionContext:
        """Build the read-only resolution context for one document."""
        root = self.content_root()
        location = document.absolute_path if root else ''
        return ResolutionContext(
            content_root=root,
            document_location=location,
            attachment_folder_hint=self.attachment_folder()
        )

    def theme_folder(self) -> str:
        """Theme folder as a normalized logical path, or an empty string."""
        theme = get_nested(self.config, 'marp.theme_path') or ''
        if not theme:
            return ''
        return normalize_path(theme)

    def theme_path(self) -> str:
        """Absolute theme folder for ``--theme-set``, or an empty string."""
        folder = self.theme_folder()
        root = self.content_root()
        if not folder or not root:
            return ''
        if folder == '/':
            return root
        return os.path.join(root, *folder.split('/'))

    def resources_directory(self) -> Optional[str]:
        """Working directory for the renderer process."""
        resources = get_nested(self.config, 'marp.resources_directory') or ''
        if not resources:
            return None
        resources = os.path.expanduser(resources)
        if not os.path.isabs(resources) and self.content_root():
            resources = os.path.join(self.content_root(), resources)
        return resources

    def engine_path(self) -> str:
        """Value passed to ``--engine`` when markdown-it plugins are enabled."""
        engine = get_nested(self.config, 'marp.engine_path') or ''
        if engine and not os.path.isabs(engine) and self.content_root():
            return os.path.join(self.content_root(), engine)
        return engine

    def preview_base_path(self) -> str:
        """
        ``file://`` URL of the content root, used as the preview base href.

        Preview image links are written relative to the content root, so the
        page resolves them against it.
        """
        root = self.content_root()
        if not root:
            return ''
        return Path(root).as_uri() + '/'


__all__ = ['VaultPaths']
