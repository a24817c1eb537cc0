import logging
import re
from typing import Iterable, List, NamedTuple, Optional

from expando.logging.helpers import get_logger
from expando.processing.regex_rules import RegexCompileError, ReplaceList

_FLAG_LETTERS = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
}


class RuleSpec(NamedTuple):
    pattern: str
    template: str
    flags: int


def split_delimited(body: str, delim: str) -> List[str]:
    """Split *body* on *delim*; ``\\<delim>`` is a literal delimiter.

    Any other backslash pair is kept as written so regex escapes such as
    ``\\d`` reach the compiler untouched.
    """
    fields: List[str] = []
    current: List[str] = []
    i, n = 0, len(body)
    while i < n:
        ch = body[i]
        if ch == '\\' and i + 1 < n:
            nxt = body[i + 1]
            current.append(nxt if nxt == delim else ch + nxt)
            i += 2
            continue
        if ch == delim:
            fields.append(''.join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append(''.join(current))
    return fields


class RuleSpecParser:
    def __init__(self, *, logger: Optional[logging.Logger] = None, regex_delim: str = '/') -> None:
        """Turn '/pattern/template/flags' command-line specs into replace rules."""
        if not isinstance(regex_delim, str) or len(regex_delim) != 1:
            raise ValueError('regex_delim must be a single character string')
        self._log = logger or get_logger('processing.rules')
        self._delim = regex_delim

    def parse(self, spec: str) -> Optional[RuleSpec]:
        """Split one spec into its parts; malformed specs are logged and yield None.

        ``/pat/`` has an empty template; ``/pat/tmpl/flags`` accepts the
        flag letters ``i``, ``m`` and ``s``. The spec may be wrapped in a
        matching pair of quotes. The pattern is compiled when the rule is
        added to a list (see :meth:`build_list`).
        """
        if len(spec) >= 2 and spec[0] in ('"', "'") and spec[-1] == spec[0]:
            spec = spec[1:-1]
        if not spec.startswith(self._delim):
            self._log.warning('⚠  rule spec must start with %r: %r', self._delim, spec)
            return None

        fields = split_delimited(spec[1:], self._delim)
        if len(fields) == 2:
            pattern, template, letters = fields[0], '', ''
        elif len(fields) == 3:
            pattern, template, letters = fields
        else:
            self._log.warning('⚠  rule spec needs 2 or 3 delimiters: %r', spec)
            return None

        flags = 0
        for letter in letters:
            flags |= _FLAG_LETTERS.get(letter, 0)

        return RuleSpec(pattern, template, flags)

    def build_list(self, specs: Optional[Iterable[str]]) -> ReplaceList:
        """ReplaceList of every spec that parses, in the given order."""
        rules = ReplaceList(logger=self._log)
        for spec in specs or ():
            parsed = self.parse(spec)
            if parsed is None:
                continue
            try:
                rules.add(parsed.pattern, parsed.template, parsed.flags)
            except RegexCompileError as exc:
                self._log.warning('⚠  %s', exc)
        return rules
