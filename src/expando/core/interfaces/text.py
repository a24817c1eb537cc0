from __future__ import annotations
"""Text substitution protocol definitions."""

from typing import Optional, Protocol, Sequence, runtime_checkable

from expando.core.models import SpamMatch


@runtime_checkable
class ReplaceEngineProtocol(Protocol):
    """Protocol for rule-driven string rewriting.

    Implementations are expected to:
      * Rewrite a string with the first matching (pattern, template) rule.
      * Evaluate a scored rule list and return the expanded annotation.

    Methods:
        apply_replace: Rewrite `source` with the first matching rule.
        match_spam: Report whether a rule matches and the expanded template.
    """

    def apply_replace(self, source: Optional[str], rules: Sequence, dlen: Optional[int] = None) -> str:
        ...

    def match_spam(self, source: Optional[str], rules: Sequence, textsize: int = ...) -> SpamMatch:
        ...
