"""Resolution of raw image paths against the content tree."""

import logging
import os
from typing import List, Optional

from models import NOT_FOUND, ResolutionContext, ResolvedAsset

DEFAULT_ATTACHMENTS_FOLDER = "Attachments"
ARCHIVED_ATTACHMENTS_FOLDER = ("Archived", "Attachments")


class AssetResolver:
    """
    Finds the file an image reference points at.

    Candidate locations are probed in a fixed order and the first existing
    file wins:

    1. the raw path relative to the content root
    2. the file name inside the configured attachment folder
    3. the raw path relative to the owning document's directory
    4. the file name inside ``Attachments/``
    5. the file name inside ``Archived/Attachments/``

    Resolution only reads the filesystem and keeps no state between calls.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('marp_slides_export.exporters.asset_resolver')

    def candidates(self, raw_path: str, context: ResolutionContext) -> List[str]:
        """
        Build the ordered list of absolute candidate paths.

        Returns an empty list when the context is unusable.
        """
        if not self.is_valid_context(context):
            return []
        if not raw_path or not isinstance(raw_path, str):
            return []

        root = context.content_root
        name = os.path.basename(raw_path.replace('\\', '/').rstrip('/'))
        search_paths = [os.path.normpath(os.path.join(root, raw_path))]

        if context.attachment_folder_hint and isinstance(context.attachment_folder_hint, str):
            search_paths.append(
                os.path.normpath(os.path.join(root, context.attachment_folder_hint, name))
            )

        document_dir = os.path.dirname(os.path.join(root, context.document_location))
        search_paths.append(os.path.normpath(os.path.join(document_dir, raw_path)))
        search_paths.append(os.path.normpath(os.path.join(root, DEFAULT_ATTACHMENTS_FOLDER, name)))
        search_paths.append(os.path.normpath(os.path.join(root, *ARCHIVED_ATTACHMENTS_FOLDER, name)))
        return search_paths

    def resolve(self, raw_path: str, context: ResolutionContext) -> ResolvedAsset:
        """
        Resolve ``raw_path`` to an existing file.

        Args:
            raw_path: Path as written in the document
            context: Content root, document location and attachment hint

        Returns:
            ResolvedAsset with the absolute path, or NOT_FOUND
        """
        for search_path in self.candidates(raw_path, context):
            if os.path.isfile(search_path) and os.access(search_path, os.R_OK):
                self.logger.debug(f"Resolved '{raw_path}' -> {search_path}")
                return ResolvedAsset(absolute_path=search_path)
        return NOT_FOUND

    def is_valid_context(self, context: ResolutionContext) -> bool:
        if context is None:
            self.logger.debug("Resolution context is missing")
            return False
        if not context.content_root or not isinstance(context.content_root, str):
            self.logger.debug(f"Content root is invalid: {context.content_root!r}")
            return False
        if not context.document_location or not isinstance(context.document_location, str):
            self.logger.debug(f"Document location is invalid: {context.document_location!r}")
            return False
        return True


__all__ = ['AssetResolver', 'ARCHIVED_ATTACHMENTS_FOLDER', 'DEFAULT_ATTACHMENTS_FOLDER']
