"""
Export orchestrator driving one Marp export end to end.

Each call moves through a fixed sequence of states:
Idle → StagingCreated → ContentMaterialized → RendererInvoked → Succeeded/Failed.
A failure before the renderer is invoked propagates to the caller; renderer
failures are classified and reported on the returned ExportResult.
"""

import logging
import os
import secrets
import sys
import tempfile
import time
from typing import Any, Dict, List, Optional

from config_loader import get_nested
from content_store import ContentStore
from exporters.rewrite_strategy import ContentProcessor
from exporters.vault_paths import VaultPaths
from models import (
    Document,
    ExportError,
    ExportJob,
    ExportResult,
    ExportStatus,
    ExportTarget,
    JobState,
    RendererInvocation,
)
from renderers.marp_cli import CLIError, CLIErrorCode, MarpCliRunner

BROWSER_ENV_VAR = "CHROME_PATH"
STAGING_PREFIX = "marp"
STAGING_DOCUMENT_PREFIX = "temp"


class StagingError(ExportError):
    """Raised when the staging directory or staging document cannot be prepared."""
    pass


class MarpCLIError(ExportError):
    """Raised when the renderer needs a browser that is not installed."""
    pass


def unique_suffix() -> str:
    """``<timestamp>_<random>`` suffix for staging names."""
    return f"{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def browser_requirement_message(platform: Optional[str] = None) -> str:
    """Remediation text listing browsers the renderer can use."""
    platform = platform or sys.platform
    browsers = ["[Google Chrome](https://www.google.com/chrome/)"]
    if platform.startswith("linux"):
        browsers.append("[Chromium](https://www.chromium.org/)")
    browsers.append("[Microsoft Edge](https://www.microsoft.com/edge)")

    listed = f"{', '.join(browsers[:-1])} or {browsers[-1]}"
    return f"It requires to install {listed} for exporting."


class ExportOrchestrator:
    """Coordinates staging, image rewriting and the Marp renderer for exports."""

    def __init__(
        self,
        config: Dict[str, Any],
        store: ContentStore,
        runner: Optional[MarpCliRunner] = None,
        processor: Optional[ContentProcessor] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Configuration dictionary
            store: Content store the documents are read from
            runner: Renderer process boundary (defaults to the Marp CLI)
            processor: Image reference processor
            logger: Optional logger instance
        """
        self.config = config
        self.store = store
        self.logger = logger or logging.getLogger('marp_slides_export.orchestrator')
        self.paths = VaultPaths(config, store=store, logger=self.logger)
        self.runner = runner or MarpCliRunner(
            executable=get_nested(config, 'marp.executable', 'marp'),
            logger=self.logger
        )
        self.processor = processor or ContentProcessor(logger=self.logger)

        self.export_path = get_nested(config, 'export.export_path') or ''
        self.staging_root = get_nested(config, 'export.staging_root') or tempfile.gettempdir()
        self.enable_plugins = bool(get_nested(config, 'marp.enable_markdown_it_plugins', False))
        self.chrome_path = get_nested(config, 'marp.chrome_path') or ''

    async def export(self, document_path: str, target: Any) -> ExportResult:
        """
        Export one document.

        Args:
            document_path: Logical path of the document inside the content root
            target: ExportTarget or a value accepted by ``ExportTarget.parse``

        Returns:
            ExportResult; ``status`` is FAILED for renderer failures

        Raises:
            ContentReadError: If the document cannot be read
            StagingError: If staging cannot be prepared
            MarpCLIError: If no usable browser is installed
        """
        target = ExportTarget.parse(target)
        content = self.store.read_file(document_path)
        document = Document(path=document_path, content=content, content_root=self.paths.content_root())

        job = ExportJob(
            document=document,
            target=target,
            staging_directory=self._create_staging_directory()
        )
        job.advance(JobState.STAGING_CREATED)

        processed = self._materialize(job)
        job.advance(JobState.CONTENT_MATERIALIZED)

        invocation = self.build_invocation(job)
        result = ExportResult(
            document_path=document.path,
            target=target,
            status=ExportStatus.FAILED,
            staging_directory=job.staging_directory,
            staging_document=job.staging_document,
            output_path=job.output_location,
            references_rewritten=processed.rewritten,
            references_unresolved=processed.unresolved
        )

        job.advance(JobState.RENDERER_INVOKED)
        try:
            exit_code = await self.runner.run(invocation)
        except CLIError as e:
            if e.error_code is CLIErrorCode.NOT_FOUND_BROWSER:
                job.advance(JobState.FAILED)
                raise MarpCLIError(browser_requirement_message()) from e
            self.logger.error(f"CLIError code: {e.error_code.name}, message: {e.message}")
            result.error_message = e.message
        except Exception as e:
            self.logger.error(f"Generic Error! {type(e).__name__}: {e}")
            result.error_message = "Renderer invocation failed"
        else:
            result.exit_code = exit_code
            if exit_code == 0:
                result.status = ExportStatus.SUCCEEDED
            else:
                self.logger.error(f"Failure (Exit status: {exit_code})")
                result.error_message = f"Renderer exited with status {exit_code}"

        job.advance(JobState.SUCCEEDED if result.succeeded else JobState.FAILED)
        if result.succeeded:
            self.logger.info(f"Exported '{document.path}' as {target.value}")
        return result

    def build_invocation(self, job: ExportJob) -> RendererInvocation:
        """
        Build argv, environment overrides and working directory for the renderer.

        Sets ``job.output_location`` for targets that write a file.
        """
        argv: List[str] = [job.staging_document, "--allow-local-files"]

        if self.enable_plugins:
            argv.extend(["--engine", self.paths.engine_path()])

        theme_path = self.paths.theme_path()
        if theme_path != "":
            argv.extend(["--theme-set", theme_path])

        argv.extend(job.target.cli_flags)
        if job.target.extension is not None:
            job.output_location = self.output_path(job.document, job.target)
            argv.extend(["-o", job.output_location])

        env_overrides = {}
        browser = self.chrome_path or os.environ.get(BROWSER_ENV_VAR)
        if browser:
            env_overrides[BROWSER_ENV_VAR] = browser

        return RendererInvocation(
            argv=tuple(argv),
            env_overrides=env_overrides,
            cwd=self.paths.resources_directory()
        )

    def output_path(self, document: Document, target: ExportTarget) -> str:
        """Output file for ``target``: under the export path if set, else next to the source."""
        filename = f"{document.basename}.{target.extension}"
        if self.export_path != "":
            return f"{self.export_path}{filename}"
        return os.path.join(document.directory, filename)

    def _create_staging_directory(self) -> str:
        try:
            os.makedirs(self.staging_root, exist_ok=True)
            staging = tempfile.mkdtemp(
                prefix=f"{STAGING_PREFIX}_{unique_suffix()}_",
                dir=self.staging_root
            )
        except OSError as e:
            self.logger.error(f"Failed to create staging directory: {e}")
            raise StagingError(f"Failed to create staging directory: {e}") from e

        self.logger.debug(f"Created staging directory {staging}")
        return staging

    def _materialize(self, job: ExportJob):
        context = self.paths.resolution_context(job.document)
        processed = self.processor.process(job.document.content, context, job)

        filename = f"{STAGING_DOCUMENT_PREFIX}_{job.document.basename}_{unique_suffix()}.md"
        staging_document = os.path.join(job.staging_directory, filename)
        try:
            with open(staging_document, 'w', encoding='utf-8') as f:
                f.write(processed.text)
        except OSError as e:
            self.logger.error(f"Failed to write staging document: {e}")
            raise StagingError(f"Failed to write staging document: {e}") from e

        if not os.access(staging_document, os.F_OK):
            self.logger.error(f"Staging document does not exist: {staging_document}")
            raise StagingError(f"Staging document does not exist: {staging_document}")

        job.staging_document = staging_document
        return processed


__all__ = [
    'ExportOrchestrator',
    'MarpCLIError',
    'StagingError',
    'browser_requirement_message'
]
