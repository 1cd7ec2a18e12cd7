"""Target-dependent rewriting of image references."""

import logging
import os
import shutil
from typing import List, Optional, Tuple

from models import (
    AssetReference,
    ExportJob,
    ExportTarget,
    ProcessedContent,
    ResolutionContext,
    ResolvedAsset,
)
from .asset_resolver import AssetResolver
from .reference_extractor import extract_references, splice, strip_wikilinks


def canonical_reference(alt_text: str, path: str) -> str:
    """Format an image reference in the ``![alt](path)`` syntax."""
    return f"![{alt_text}]({path})"


def to_posix(path: str) -> str:
    return path.replace('\\', '/')


class RewriteStrategy:
    """
    Decides how a resolved image reference is written for an export target.

    - web document: the image stays where it is; the link is made relative to
      the attachment folder so it keeps working next to the source document
    - image set, slide document, presentation package and the renderer's
      preview mode: the image is copied into the staging directory and
      referenced by file name
    - in-place (the in-process live preview): the image stays where it is and
      is referenced relative to the content root

    Every replacement uses the ``![alt](path)`` syntax.
    """

    def __init__(
        self,
        context: ResolutionContext,
        logger: Optional[logging.Logger] = None,
        in_place: bool = False
    ):
        self.context = context
        self.logger = logger or logging.getLogger('marp_slides_export.exporters.rewrite_strategy')
        self.in_place = in_place

    def rewrite(
        self,
        reference: AssetReference,
        resolved: ResolvedAsset,
        job: ExportJob
    ) -> Optional[str]:
        """
        Produce replacement text for one reference.

        Args:
            reference: Reference found in the original text
            resolved: Result of resolving the reference
            job: Export job the rewrite belongs to

        Returns:
            Replacement text, or None to leave the original text unchanged
        """
        if not resolved.found:
            return None

        if self.in_place:
            return canonical_reference(reference.alt_text, self._preview_path(resolved))

        if job.target is ExportTarget.WEB_DOCUMENT:
            return canonical_reference(reference.alt_text, self._web_path(reference, resolved))

        if not self._copy_to_staging(resolved, job.staging_directory):
            return None
        return canonical_reference(reference.alt_text, resolved.basename)

    def _web_path(self, reference: AssetReference, resolved: ResolvedAsset) -> str:
        hint = to_posix(self.context.attachment_folder_hint).strip('/')
        if hint and not to_posix(reference.raw_path).startswith(hint + '/'):
            return f"{hint}/{resolved.basename}"
        return reference.raw_path

    def _preview_path(self, resolved: ResolvedAsset) -> str:
        root = os.path.abspath(self.context.content_root)
        asset = os.path.abspath(resolved.absolute_path)
        try:
            inside_root = os.path.commonpath([root, asset]) == root
        except ValueError:
            # Paths on different drives
            inside_root = False
        if inside_root:
            return to_posix(os.path.relpath(asset, root))
        return resolved.basename

    def _copy_to_staging(self, resolved: ResolvedAsset, staging_directory: str) -> bool:
        destination = os.path.join(staging_directory, resolved.basename)
        try:
            shutil.copyfile(resolved.absolute_path, destination)
        except OSError as e:
            self.logger.error(f"Failed to copy image {resolved.absolute_path}: {e}")
            return False
        self.logger.debug(f"Copied image {resolved.absolute_path} -> {destination}")
        return True


class ContentProcessor:
    """
    Runs extraction, resolution and rewriting over a whole document.

    References are always taken from the original text and spliced back by
    offset in one pass. The generic ``[[text]]`` rewrite runs last, after
    every image reference has been handled.
    """

    def __init__(self, resolver: Optional[AssetResolver] = None, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('marp_slides_export.exporters.content_processor')
        self.resolver = resolver or AssetResolver()

    def process(
        self,
        content: str,
        context: ResolutionContext,
        job: ExportJob,
        in_place: bool = False
    ) -> ProcessedContent:
        """
        Rewrite every image reference in ``content`` for ``job``.

        Unresolved references stay byte-identical and produce one warning each.
        With ``in_place`` nothing is copied and links point into the content
        root, for rendering against the original tree.
        """
        result = ProcessedContent(text=content)

        if not self.resolver.is_valid_context(context):
            self.logger.error("Content root is not available, skipping image processing")
            for reference in extract_references(content):
                self.logger.warning(f"Image not found: {reference.raw_path}")
                result.unresolved += 1
            result.text = strip_wikilinks(content)
            return result

        strategy = RewriteStrategy(context, logger=self.logger, in_place=in_place)
        replacements: List[Tuple[AssetReference, str]] = []

        for reference in extract_references(content):
            resolved = self.resolver.resolve(reference.raw_path, context)
            if not resolved.found:
                self.logger.warning(f"Image not found: {reference.raw_path}")
                result.unresolved += 1
                continue

            replacement = strategy.rewrite(reference, resolved, job)
            if replacement is None:
                continue

            replacements.append((reference, replacement))
            if job.target.copies_assets and not in_place:
                result.copied_files.append(os.path.join(job.staging_directory, resolved.basename))

        result.rewritten = len(replacements)
        result.text = strip_wikilinks(splice(content, replacements))

        self.logger.debug(
            f"Rewrote {result.rewritten} image reference(s) for '{job.document.path}', "
            f"{result.unresolved} unresolved"
        )
        return result


__all__ = ['ContentProcessor', 'RewriteStrategy', 'canonical_reference']
