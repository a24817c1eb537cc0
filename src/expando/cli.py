from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List, NoReturn, Optional, Sequence

from expando.core.models import FormatFlag, RenderOptions
from expando.logging.factory import DefaultLoggerFactory
from expando.logging.helpers import get_logger
from expando.processing.replace import ReplaceEngine
from expando.processing.rule_specs import RuleSpecParser
from expando.rendering.fields import MappingCallback
from expando.rendering.interpreter import FormatInterpreter

logger = get_logger('expando')


def _configure_logging(enable_json: bool, verbose: bool = False) -> None:
    """Configure process-wide logging once, either JSON or plain text."""
    mode = (bool(enable_json), bool(verbose))
    prev = getattr(_configure_logging, '_configured_mode', None)
    if prev is not None and prev == mode:
        return
    level = logging.DEBUG if verbose else logging.INFO
    factory = DefaultLoggerFactory(json_logs=enable_json, level=level)
    lg = factory.get_logger('expando')
    global logger
    logger = lg
    setattr(_configure_logging, '_configured_mode', mode)


def _fatal(msg: str, code: int = 1) -> NoReturn:
    """Exit the process with a logged error."""
    logger.error(msg)
    sys.exit(code)


def _parse_vars(items: Optional[List[str]]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for itm in items or []:
        if '=' not in itm:
            _fatal(f"--var expects CODE=VALUE (got '{itm}')")
        code, val = itm.split('=', 1)
        if len(code) != 1:
            _fatal(f"--var code must be a single character (got '{code}')")
        values[code] = val
    return values


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='expando',
        description='Render expando format templates and apply rewrite rules.',
    )
    p.add_argument('--json-logs', action='store_true', help='emit logs as JSON lines')
    p.add_argument('--verbose', action='store_true', help='enable debug logging')
    sub = p.add_subparsers(dest='command', required=True)

    fmt = sub.add_parser('format', help='expand a format template')
    fmt.add_argument('template')
    fmt.add_argument('-v', '--var', action='append', metavar='CODE=VALUE',
                     help='value for a single-character expando code (repeatable)')
    fmt.add_argument('--cols', type=int, default=None, help='screen columns')
    fmt.add_argument('--buflen', type=int, default=None, help='capacity in bytes')
    fmt.add_argument('--col', type=int, default=0, help='starting column')
    fmt.add_argument('--no-pipe', action='store_true', help='never run a trailing | as a command')

    rep = sub.add_parser('replace', help='rewrite text with the first matching rule')
    rep.add_argument('text')
    rep.add_argument('-r', '--rule', action='append', metavar='/PATTERN/TEMPLATE/FLAGS', required=True)
    rep.add_argument('--chain', action='store_true', help='let every matching rule rewrite in turn')
    rep.add_argument('--dlen', type=int, default=None)

    spam = sub.add_parser('spam', help='report the annotation of the first matching rule')
    spam.add_argument('text')
    spam.add_argument('-r', '--rule', action='append', metavar='/PATTERN/TEMPLATE/FLAGS', required=True)
    spam.add_argument('--textsize', type=int, default=None)
    return p


class ExpandoCli:
    """Top-level façade for command-style execution."""

    @staticmethod
    def run(argv: Sequence[str]) -> str:
        """Run the tool with an argv-like sequence and return the produced text."""
        ns = _build_parser().parse_args(list(argv))
        json_logs = ns.json_logs or os.getenv('EXPANDO_JSON_LOGS') == '1'
        _configure_logging(json_logs, ns.verbose)

        if ns.command == 'format':
            opts = RenderOptions.from_env().with_overrides(cols=ns.cols, buflen=ns.buflen)
            interp = FormatInterpreter(options=opts, logger=get_logger('format'))
            flags = FormatFlag.NOFILTER if ns.no_pipe else FormatFlag.NONE
            return interp.render(ns.template, MappingCallback(_parse_vars(ns.var)), col=ns.col, flags=flags)

        rules = RuleSpecParser(logger=get_logger('processing.rules')).build_list(ns.rule)
        if not rules:
            _fatal('no valid rules given')
        engine = ReplaceEngine(logger=get_logger('replace'))

        if ns.command == 'replace':
            return engine.apply_replace(ns.text, rules, ns.dlen, chain=ns.chain)

        kwargs = {} if ns.textsize is None else {'textsize': ns.textsize}
        result = engine.match_spam(ns.text, rules, **kwargs)
        if not result:
            _fatal('no rule matched', code=2)
        return result.text


def main() -> NoReturn:
    """Entry point for the `expando` console script."""
    try:
        out = ExpandoCli.run(sys.argv[1:])
        sys.stdout.write(out + '\n')
        raise SystemExit(0)
    except KeyboardInterrupt:
        logger.error('Interrupted by user.')
        raise SystemExit(130)
    except BrokenPipeError:
        raise SystemExit(0)
    except Exception as exc:
        if os.getenv('DEBUG') == '1':
            raise
        logger.error('Unexpected error: %s', exc)
        raise SystemExit(1)


if __name__ == '__main__':
    main()
