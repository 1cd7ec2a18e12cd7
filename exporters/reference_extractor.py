"""Extraction of embedded image references from markdown text."""

import re
from typing import Iterator, List, Tuple

from models import AssetReference, ReferenceKind

IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'svg', 'webp', 'bmp')

_EXTENSION_GROUP = '|'.join(IMAGE_EXTENSIONS)

# ![[image.png]]
WIKILINK_IMAGE_PATTERN = re.compile(
    r'!\[\[([^\[\]]*\.(?:' + _EXTENSION_GROUP + r'))\]\]',
    re.IGNORECASE
)

# ![alt](image.png)
MARKDOWN_IMAGE_PATTERN = re.compile(
    r'!\[([^\]]*)\]\(([^)]*\.(?:' + _EXTENSION_GROUP + r'))\)',
    re.IGNORECASE
)

# [[Some Page]], but never the embed form ![[...]]
WIKILINK_PATTERN = re.compile(r'(?<!!)\[\[([^\]]+)\]\]')


class ReferenceScan:
    """
    Restartable view over the image references of one text.

    Every iteration re-scans the text it was created with. Both syntaxes are
    matched against that original text, never against rewritten output:
    wikilink embeds first, then standard markdown images.
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[AssetReference]:
        for match in WIKILINK_IMAGE_PATTERN.finditer(self.text):
            yield AssetReference(
                raw_path=match.group(1),
                alt_text='',
                match_span=match.group(0),
                kind=ReferenceKind.WIKILINK,
                start=match.start(),
                end=match.end()
            )

        for match in MARKDOWN_IMAGE_PATTERN.finditer(self.text):
            yield AssetReference(
                raw_path=match.group(2),
                alt_text=match.group(1),
                match_span=match.group(0),
                kind=ReferenceKind.MARKDOWN,
                start=match.start(),
                end=match.end()
            )

    def __repr__(self) -> str:
        return f"ReferenceScan(length={len(self.text)})"


def extract_references(text: str) -> ReferenceScan:
    """Return a lazy, restartable sequence of image references in ``text``."""
    return ReferenceScan(text or '')


def splice(text: str, replacements: List[Tuple[AssetReference, str]]) -> str:
    """
    Apply replacements by original offset in a single pass.

    Replacements whose span overlaps an earlier accepted one are dropped, so
    no replacement can consume bytes belonging to another reference.
    """
    pieces = []
    cursor = 0
    for reference, replacement in sorted(replacements, key=lambda item: item[0].start):
        if reference.start < cursor:
            continue
        pieces.append(text[cursor:reference.start])
        pieces.append(replacement)
        cursor = reference.end
    pieces.append(text[cursor:])
    return ''.join(pieces)


def strip_wikilinks(text: str) -> str:
    """Replace generic ``[[text]]`` links with their bare text."""
    return WIKILINK_PATTERN.sub(r'\1', text)


__all__ = [
    'IMAGE_EXTENSIONS',
    'ReferenceScan',
    'extract_references',
    'splice',
    'strip_wikilinks'
]
