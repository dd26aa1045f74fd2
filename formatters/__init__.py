from .terminal import format_terminal
from .markdown import format_markdown
from .json import format_json

FORMATS = ("terminal", "markdown")

__all__ = ["format_terminal", "format_markdown", "format_json", "FORMATS"]
