"""Document rendering, token estimation and the disk sink."""

from kubemix.output.render import RenderContext, render_output
from kubemix.output.tokens import count_tokens
from kubemix.output.tree import build_tree
from kubemix.output.writer import write_output

__all__ = [
    "RenderContext",
    "build_tree",
    "count_tokens",
    "render_output",
    "write_output",
]
