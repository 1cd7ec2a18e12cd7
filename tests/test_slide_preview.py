"""Tests for the in-process slide renderer and live preview."""

import logging

from conftest import write_image
from models import Document
from renderers import RenderedSlides, SlidePreview, SlideRenderer, ThemeSet, build_renderer


class StubRenderer(SlideRenderer):
    """Renderer returning fixed HTML."""

    def __init__(self, html):
        super().__init__()
        self.fixed_html = html

    def render(self, markdown_text):
        return RenderedSlides(html=self.fixed_html, css="", slide_count=1)


class TestSlideRenderer:
    """Test slide splitting and rendering."""

    def test_slides_split_on_rules(self):
        rendered = SlideRenderer().render("---\nmarp: true\n---\n\n# One\n\n---\n\n# Two\n")

        assert rendered.slide_count == 2
        assert '<section id="1"><h1>One</h1>\n</section>' in rendered.html
        assert '<section id="2"><h1>Two</h1>\n</section>' in rendered.html
        assert "marp: true" not in rendered.html
        assert rendered.html.startswith('<div id="__marp-vscode">')

    def test_raw_html_is_escaped_by_default(self):
        rendered = SlideRenderer().render("<b>bold</b>\n")

        assert "<b>" not in rendered.html
        assert "&lt;b&gt;" in rendered.html

    def test_raw_html_when_enabled(self):
        rendered = SlideRenderer(html=True).render("<b>bold</b>\n")

        assert "<b>bold</b>" in rendered.html

    def test_tables(self):
        rendered = SlideRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |\n")

        assert "<table>" in rendered.html

    def test_theme_css_is_appended(self):
        renderer = SlideRenderer()
        renderer.theme_set.add("/* @theme gaia-dark */\nsection { color: red; }")

        rendered = renderer.render("# Slide\n")

        assert "section { color: red; }" in rendered.css
        assert renderer.theme_set.names == ["gaia-dark"]


class TestThemeSet:
    """Test theme collection."""

    def test_theme_without_name(self):
        themes = ThemeSet()

        assert themes.add("section { color: blue; }") is None
        assert len(themes) == 1
        assert themes.names == []


class TestBuildRenderer:
    """Test renderer construction from configuration."""

    def test_plugins_only_when_enabled(self, config):
        source = "::: container\nhi\n:::\n"
        assert "<div class=\"container\">" not in build_renderer(config).render(source).html

        config['marp']['enable_markdown_it_plugins'] = True

        assert "<div class=\"container\">" in build_renderer(config).render(source).html


class TestSlidePreview:
    """Test preview page generation."""

    def test_images_resolve_relative_to_content_root(self, vault, config, store):
        write_image(vault / "Attachments" / "pic.png")
        (vault / "Talks" / "deck.md").write_text("# Deck\n\n![[pic.png]]\n", encoding='utf-8')
        preview = SlidePreview(config, store)

        page = preview.render_path("Talks/deck.md")

        assert f'<base href="{vault.as_uri()}/"></base>' in page
        assert 'src="Attachments/pic.png"' in page
        assert '<style id="__marp-vscode-style">' in page

    def test_nothing_is_staged(self, vault, config, store, staging_root):
        write_image(vault / "Attachments" / "pic.png")
        (vault / "Talks" / "deck.md").write_text("![[pic.png]]\n", encoding='utf-8')

        SlidePreview(config, store).render_path("Talks/deck.md")

        assert not staging_root.exists()

    def test_relative_background_images_are_rebased(self, vault, config, store):
        html = (
            '<section style="background-image:url(&quot;img/bg.png&quot;)"></section>'
            '<section style="background-image:url(&quot;https://example.com/bg.png&quot;)"></section>'
        )
        preview = SlidePreview(config, store, renderer=StubRenderer(html))

        page = preview.render(Document(path="Talks/deck.md", content="", content_root=str(vault)))

        assert f"background-image:url(&quot;{vault.as_uri()}/img/bg.png&quot;)" in page
        assert "background-image:url(&quot;https://example.com/bg.png&quot;)" in page

    def test_non_string_content(self, vault, config, store, caplog):
        caplog.set_level(logging.ERROR)

        page = SlidePreview(config, store).render(
            Document(path="Talks/deck.md", content=None, content_root=str(vault))
        )

        assert page is None
        assert any("not a string" in r.getMessage() for r in caplog.records)

    def test_load_themes_from_direct_children(self, vault, config, store):
        themes = vault / "Themes"
        (themes / "nested").mkdir(parents=True)
        (themes / "a.css").write_text("/* @theme a */", encoding='utf-8')
        (themes / "b.css").write_text("/* @theme b */", encoding='utf-8')
        (themes / "nested" / "c.css").write_text("/* @theme c */", encoding='utf-8')
        config['marp']['theme_path'] = "Themes/"
        preview = SlidePreview(config, store)

        assert preview.load_themes() == 2
        assert preview.renderer.theme_set.names == ["a", "b"]

    def test_load_themes_without_theme_path(self, config, store):
        assert SlidePreview(config, store).load_themes() == 0
