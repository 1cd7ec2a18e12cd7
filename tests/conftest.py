"""Shared fixtures for export pipeline tests."""

import pytest

from config_loader import ConfigLoader
from content_store import LocalContentStore
from models import Document, ExportJob, ExportTarget, ResolutionContext

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 16


class FakeRunner:
    """Stand-in for the Marp CLI runner that records invocations."""

    def __init__(self, exit_code=0, error=None):
        self.exit_code = exit_code
        self.error = error
        self.calls = []

    async def run(self, invocation):
        self.calls.append(invocation)
        if self.error is not None:
            raise self.error
        return self.exit_code


def write_image(path, data=PNG_BYTES):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def vault(tmp_path):
    """Content root with a deck under Talks/."""
    root = tmp_path / "vault"
    (root / "Talks").mkdir(parents=True)
    (root / "Talks" / "deck.md").write_text("# Deck\n", encoding='utf-8')
    return root


@pytest.fixture
def staging_root(tmp_path):
    return tmp_path / "staging"


@pytest.fixture
def config(vault, staging_root):
    return ConfigLoader.with_defaults({
        'vault': {'content_root': str(vault), 'attachment_folder': 'Attachments'},
        'export': {'staging_root': str(staging_root)},
    })


@pytest.fixture
def store(vault):
    return LocalContentStore(str(vault))


@pytest.fixture
def context(vault):
    return ResolutionContext(
        content_root=str(vault),
        document_location=str(vault / "Talks" / "deck.md"),
        attachment_folder_hint="Attachments"
    )


@pytest.fixture
def make_job(vault, tmp_path):
    """Build an export job for Talks/deck.md with its own staging directory."""
    def _make_job(target, content="# Deck\n"):
        staging = tmp_path / f"job_{target.name.lower()}"
        staging.mkdir(exist_ok=True)
        document = Document(path="Talks/deck.md", content=content, content_root=str(vault))
        return ExportJob(document=document, target=ExportTarget.parse(target), staging_directory=str(staging))
    return _make_job
