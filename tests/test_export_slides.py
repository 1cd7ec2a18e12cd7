"""Tests for the command line entry point."""

import logging
import sys

import pytest

import export_slides
from conftest import FakeRunner, write_image
from models import ExportTarget
from orchestrator import ExportOrchestrator


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger('marp_slides_export')
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


def run_main(monkeypatch, *argv):
    monkeypatch.setattr(sys, 'argv', ['export_slides.py', *argv])
    return export_slides.main()


class TestMain:
    """Test argument handling and exit codes."""

    def test_preview_page(self, monkeypatch, tmp_path, vault):
        write_image(vault / "Attachments" / "pic.png")
        (vault / "Talks" / "deck.md").write_text("![[pic.png]]\n", encoding='utf-8')
        output = tmp_path / "preview.html"

        exit_code = run_main(
            monkeypatch,
            '--config', str(tmp_path / "missing.yaml"),
            '--content-root', str(vault),
            '--attachment-folder', 'Attachments',
            '--preview-html', str(output),
            'Talks/deck.md'
        )

        assert exit_code == 0
        assert 'src="Attachments/pic.png"' in output.read_text(encoding='utf-8')

    def test_configuration_error(self, monkeypatch, tmp_path):
        exit_code = run_main(
            monkeypatch,
            '--config', str(tmp_path / "missing.yaml"),
            '--content-root', str(tmp_path / "no-such-root"),
            'Talks/deck.md'
        )

        assert exit_code == 2

    def test_export_failures_give_exit_code_one(self, monkeypatch, tmp_path, vault):
        monkeypatch.setattr(
            export_slides, 'ExportOrchestrator',
            lambda config, store, logger=None: _orchestrator(config, store, FakeRunner(exit_code=1))
        )

        exit_code = run_main(
            monkeypatch,
            '--config', str(tmp_path / "missing.yaml"),
            '--content-root', str(vault),
            'Talks/deck.md'
        )

        assert exit_code == 1

    def test_missing_document_is_counted_as_failure(self, monkeypatch, tmp_path, vault):
        monkeypatch.setattr(
            export_slides, 'ExportOrchestrator',
            lambda config, store, logger=None: _orchestrator(config, store, FakeRunner())
        )

        exit_code = run_main(
            monkeypatch,
            '--config', str(tmp_path / "missing.yaml"),
            '--content-root', str(vault),
            'Talks/deck.md', 'Talks/missing.md'
        )

        assert exit_code == 1

    def test_success(self, monkeypatch, tmp_path, vault):
        runner = FakeRunner()
        monkeypatch.setattr(
            export_slides, 'ExportOrchestrator',
            lambda config, store, logger=None: _orchestrator(config, store, runner)
        )

        exit_code = run_main(
            monkeypatch,
            '--config', str(tmp_path / "missing.yaml"),
            '--content-root', str(vault),
            '--target', 'pptx',
            'Talks/deck.md'
        )

        assert exit_code == 0
        assert "--pptx" in runner.calls[0].argv


def _orchestrator(config, store, runner):
    config['export']['staging_root'] = str(store.root.parent / "staging")
    return ExportOrchestrator(config, store, runner=runner)


class TestArgumentParser:
    """Test parser choices."""

    def test_target_aliases_are_accepted(self):
        parser = export_slides.create_argument_parser()

        for target in ['png', 'pdf', 'html', 'pptx', 'preview'] + [t.value for t in ExportTarget]:
            assert parser.parse_args(['--target', target, 'deck.md']).target == target
