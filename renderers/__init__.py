"""Slide renderers: the Marp CLI process boundary and the in-process preview renderer."""

from .marp_cli import CLIError, CLIErrorCode, MarpCliRunner
from .slide_preview import SlidePreview, build_renderer
from .slide_renderer import RenderedSlides, SlideRenderer, ThemeSet

__all__ = [
    'CLIError',
    'CLIErrorCode',
    'MarpCliRunner',
    'RenderedSlides',
    'SlidePreview',
    'SlideRenderer',
    'ThemeSet',
    'build_renderer'
]
