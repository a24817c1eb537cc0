from .commands import CommandRunnerProtocol
from .logging import LoggerFactoryProtocol, LoggerLikeProtocol
from .templating import FieldCallback, FieldCallbackResult, FormatInterpreterProtocol
from .text import ReplaceEngineProtocol

__all__ = [
    'CommandRunnerProtocol',
    'FieldCallback',
    'FieldCallbackResult',
    'FormatInterpreterProtocol',
    'LoggerFactoryProtocol',
    'LoggerLikeProtocol',
    'ReplaceEngineProtocol',
]
