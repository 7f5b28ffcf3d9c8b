"""WGSL minifier: shrink shader text before it's embedded in a pipeline.

This is a textual pass, not a compiler: it drops comments, collapses
whitespace and removes the spaces punctuation doesn't need. Identifiers
and numbers are left alone, so the output is the same program.
"""
from __future__ import annotations

import re

_COMMENT_RE = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
# `+ - & |` keep their spaces: joining them could form `++`, `--`, `&&` or `||`.
_PUNCTUATION_RE = re.compile(r" ?([{}()\[\];,:=*/<>!]) ?")


def minify_wgsl(shader: str) -> str:
    """Minify WGSL source. Comments and layout are not preserved."""
    text = _COMMENT_RE.sub(" ", shader)
    text = _WHITESPACE_RE.sub(" ", text)
    text = _PUNCTUATION_RE.sub(r"\1", text)
    return text.strip()
