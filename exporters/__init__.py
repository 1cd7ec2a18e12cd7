"""Image reference handling for slide exports.

Package Structure:
- reference_extractor: Finds ``![[image]]`` and ``![alt](image)`` references
- asset_resolver: Locates referenced files in the content tree
- rewrite_strategy: Rewrites references per export target, copying into staging
- vault_paths: Derives content root, theme, engine and resources locations

Configuration Referenced:
- vault.content_root: Base directory for relative asset paths
- vault.attachment_folder: Default attachment folder hint
- marp.theme_path, marp.engine_path, marp.resources_directory
"""

from .asset_resolver import AssetResolver
from .reference_extractor import extract_references, strip_wikilinks
from .rewrite_strategy import ContentProcessor, RewriteStrategy
from .vault_paths import VaultPaths

__all__ = [
    'AssetResolver',
    'ContentProcessor',
    'RewriteStrategy',
    'VaultPaths',
    'extract_references',
    'strip_wikilinks'
]
