"""Data models for the slide image resolution and Marp export pipeline."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger('marp_slides_export')


class ExportError(Exception):
    """Base exception for export pipeline errors."""
    pass


class ExportTarget(Enum):
    """Output formats and modes for one export job."""
    IMAGE_SET = "image-set"
    SLIDE_DOCUMENT = "slide-document"
    WEB_DOCUMENT = "web-document"
    PRESENTATION_PACKAGE = "presentation-package"
    LIVE_PREVIEW = "live-preview"

    @property
    def cli_flags(self) -> Tuple[str, ...]:
        """Marp CLI flags selecting this target."""
        return _TARGET_FLAGS[self]

    @property
    def extension(self) -> Optional[str]:
        """Output file extension, or None for targets without an output file."""
        return _TARGET_EXTENSIONS[self]

    @property
    def copies_assets(self) -> bool:
        """Whether resolved assets are copied into the staging directory for the renderer."""
        return self is not ExportTarget.WEB_DOCUMENT

    @classmethod
    def parse(cls, value: Any) -> 'ExportTarget':
        """
        Parse a target from its name or the short format alias.

        Accepts ``ExportTarget`` members, values such as ``"slide-document"``
        and the short aliases ``png``, ``pdf``, ``html``, ``pptx`` and
        ``preview``.

        Raises:
            ValueError: If the value names no known target
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in _TARGET_ALIASES:
            return _TARGET_ALIASES[text]
        return cls(text)


_TARGET_FLAGS = {
    ExportTarget.IMAGE_SET: ('--images', 'png'),
    ExportTarget.SLIDE_DOCUMENT: ('--pdf',),
    ExportTarget.WEB_DOCUMENT: ('--html',),
    ExportTarget.PRESENTATION_PACKAGE: ('--pptx',),
    ExportTarget.LIVE_PREVIEW: ('--preview',),
}

_TARGET_EXTENSIONS = {
    ExportTarget.IMAGE_SET: 'png',
    ExportTarget.SLIDE_DOCUMENT: 'pdf',
    ExportTarget.WEB_DOCUMENT: 'html',
    ExportTarget.PRESENTATION_PACKAGE: 'pptx',
    ExportTarget.LIVE_PREVIEW: None,
}

_TARGET_ALIASES = {
    'png': ExportTarget.IMAGE_SET,
    'pdf': ExportTarget.SLIDE_DOCUMENT,
    'html': ExportTarget.WEB_DOCUMENT,
    'pptx': ExportTarget.PRESENTATION_PACKAGE,
    'preview': ExportTarget.LIVE_PREVIEW,
}


class ReferenceKind(Enum):
    """Supported image reference syntaxes."""
    WIKILINK = "wikilink"    # ![[image.png]]
    MARKDOWN = "markdown"    # ![alt](image.png)


class JobState(Enum):
    """Lifecycle of a single export call."""
    IDLE = "idle"
    STAGING_CREATED = "staging_created"
    CONTENT_MATERIALIZED = "content_materialized"
    RENDERER_INVOKED = "renderer_invoked"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExportStatus(Enum):
    """Final outcome reported for an export call."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Document:
    """A markdown document addressed by its logical path inside the content root."""

    path: str
    content: str
    content_root: str

    @property
    def basename(self) -> str:
        """File name without extension."""
        return PurePosixPath(self.path).stem

    @property
    def absolute_path(self) -> str:
        return os.path.join(self.content_root, *PurePosixPath(self.path).parts)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.absolute_path)


@dataclass(frozen=True)
class AssetReference:
    """One embedded image occurrence in the original document text."""

    raw_path: str
    alt_text: str
    match_span: str
    kind: ReferenceKind
    start: int
    end: int


@dataclass(frozen=True)
class ResolutionContext:
    """Base locations against which raw asset paths are resolved."""

    content_root: str
    document_location: str
    attachment_folder_hint: str = ""


@dataclass(frozen=True)
class ResolvedAsset:
    """Absolute path of an existing asset, or the not-found sentinel."""

    absolute_path: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.absolute_path is not None

    @property
    def basename(self) -> str:
        if self.absolute_path is None:
            return ""
        return os.path.basename(self.absolute_path)

    def __bool__(self) -> bool:
        return self.found


NOT_FOUND = ResolvedAsset()


@dataclass
class ExportJob:
    """State owned by the orchestrator for one export call."""

    document: Document
    target: ExportTarget
    staging_directory: str
    output_location: Optional[str] = None
    staging_document: Optional[str] = None
    state: JobState = JobState.IDLE

    def advance(self, state: JobState) -> None:
        """Move the job to its next lifecycle state."""
        logger.debug(
            f"Export job for '{self.document.path}' ({self.target.value}): "
            f"{self.state.value} -> {state.value}"
        )
        self.state = state


@dataclass(frozen=True)
class RendererInvocation:
    """Arguments, environment overrides and working directory for one renderer call."""

    argv: Tuple[str, ...]
    env_overrides: Mapping[str, str] = field(default_factory=dict)
    cwd: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'argv', tuple(self.argv))
        object.__setattr__(self, 'env_overrides', MappingProxyType(dict(self.env_overrides)))

    def build_env(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Return a child-process environment: ``base`` (default ``os.environ``) plus overrides."""
        env = dict(os.environ if base is None else base)
        env.update(self.env_overrides)
        return env


@dataclass
class ExportResult:
    """Outcome of one export call."""

    document_path: str
    target: ExportTarget
    status: ExportStatus
    exit_code: Optional[int] = None
    staging_directory: Optional[str] = None
    staging_document: Optional[str] = None
    output_path: Optional[str] = None
    references_rewritten: int = 0
    references_unresolved: int = 0
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ExportStatus.SUCCEEDED


@dataclass
class ProcessedContent:
    """Document text after image rewriting, with per-run counters."""

    text: str
    rewritten: int = 0
    unresolved: int = 0
    copied_files: List[str] = field(default_factory=list)


__all__ = [
    'AssetReference',
    'Document',
    'ExportError',
    'ExportJob',
    'ExportResult',
    'ExportStatus',
    'ExportTarget',
    'JobState',
    'NOT_FOUND',
    'ProcessedContent',
    'ReferenceKind',
    'RendererInvocation',
    'ResolutionContext',
    'ResolvedAsset'
]
