"""Markdown and syntax-highlighting filters available to page templates."""

from __future__ import annotations

import re
from html import escape

from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
_EXTENSIONS = ("fenced_code", "codehilite", "tables", "sane_lists")


class MarkdownRenderer:
    """Render markdown and code snippets with a shared Pygments style."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str) -> str:
        """Render markdown into HTML; blank input renders to an empty string."""
        if not text.strip():
            return ""
        md = Markdown(
            extensions=list(_EXTENSIONS),
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(text)
        return self._annotate_languages(html, text)

    def code_block(self, code: str, language: str | None = None) -> str:
        """Highlight ``code``, falling back to plain text for unknown lexers."""
        lang = language or "text"
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = get_lexer_by_name("text")
        html = highlight(code, lexer, self._formatter)
        safe_lang = escape(lang, quote=True)
        return CODEHILITE_OPEN_TAG.sub(
            f'<div class="codehilite" data-language="{safe_lang}">', html, 1
        )

    @staticmethod
    def _annotate_languages(html: str, source: str) -> str:
        """Attach a ``data-language`` attribute to each highlighted block."""
        languages = iter(
            match.group(1) or "text" for match in CODE_BLOCK_PATTERN.finditer(source)
        )

        def _repl(_match: re.Match[str]) -> str:
            lang = escape(next(languages, "text"), quote=True)
            return f'<div class="codehilite" data-language="{lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html)


__all__ = ["MarkdownRenderer"]
