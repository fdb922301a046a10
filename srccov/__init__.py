VERSION='1.0.0'

###

import logging, sys
import pyclbr, os

BLACK, RED, GREEN, YELLOW, BLUE, MAGENTA, CYAN, WHITE = range(8)

RESET_SEQ = "\033[0m"
COLOR_SEQ = "\033[1;%dm"
BOLD_SEQ = "\033[1m"

COLORS = {
    'DEBUG': CYAN,
    'INFO': WHITE,
    'WARNING': YELLOW,
    'CRITICAL': MAGENTA,
    'ERROR': RED
}

class ColoredFormatter(logging.Formatter):
    def __init__(self, msg, use_color, **kwargs):
        super().__init__(msg, **kwargs)
        self.use_color = use_color

    def format(self, record):
        levelname = record.levelname
        if self.use_color and levelname in COLORS:
            msg_colored = f"{COLOR_SEQ % (30 + COLORS[levelname])} {record.msg} {RESET_SEQ}"
            record.msg = msg_colored
        return logging.Formatter.format(self, record)

class PowerfulLogRecordFactory(logging.LogRecord):
    def lookup_className(self):
        # ref: https://code.activestate.com/lists/python-list/727185
        if self.funcName in ['<module>']:
            return '<no-class>'
        if not self.pathname.startswith(self.lookup_root):
            return '<no-class>'

        relpath = os.path.relpath(os.path.splitext(self.pathname)[0],
            os.path.dirname(self.lookup_root))
        modname = relpath.replace(os.sep, '.')
        try:
            m = pyclbr.readmodule_ex(modname)
        except Exception:
            # never let logging break the operation being logged
            return '<no-class>'

        for className, cls in m.items():
            # get rid of imported classes
            if getattr(cls, 'file', None) != self.pathname:
                continue
            if self.lineno >= cls.lineno and self.lineno <= cls.end_lineno:
                return className

        return '<no-class>'

    def __init__(self, name, level, pathname, lineno, msg, args, exc_info, func, sinfo):
        super().__init__(name, level, pathname, lineno, msg, args, exc_info, func, sinfo)
        self.lookup_root = os.path.dirname(__file__)
        self.className = self.lookup_className()
        if self.className in ['CoverageStore', 'CoverageConfig']:
            indent = 0
        elif self.className in ['PerSourceCoverage']:
            indent = 2
        else:
            indent = 1
        self.msg = ' ' * 4 * indent + str(msg)

def is_own_logger(name):
    return name == __name__ or name.startswith(__name__ + '.')

_base_record_factory = logging.getLogRecordFactory()

def record_factory(name, *args, **kwargs):
    # records of the host application are left untouched
    if is_own_logger(name):
        return PowerfulLogRecordFactory(name, *args, **kwargs)
    return _base_record_factory(name, *args, **kwargs)

class ColoredLogger(logging.Logger):
    FORMAT = "%(asctime)s [$BOLD%(name)-12s$RESET][%(levelname)-8s] %(message)s " \
             "($BOLD%(className)s$RESET::%(funcName)s()) ($BOLD%(filename)s$RESET:%(lineno)d)"

    def __init__(self, name, level=logging.NOTSET):
        super().__init__(name, level)
        use_color = sys.stdout.isatty()
        color_fmt = self.formatter_message(self.FORMAT, use_color=use_color)
        color_formatter = ColoredFormatter(color_fmt, use_color=use_color, datefmt='%m/%d/%Y %I:%M:%S %p')

        console = logging.StreamHandler()
        console.setFormatter(color_formatter)
        self.addHandler(console)
        # the host's root handlers would print every message a second time
        self.propagate = False

    @staticmethod
    def formatter_message(message, use_color):
        if use_color:
            message = message.replace("$RESET", RESET_SEQ).replace("$BOLD", BOLD_SEQ)
        else:
            message = message.replace("$RESET", "").replace("$BOLD", "")
        return message

logging.setLogRecordFactory(record_factory)

_host_logger_class = logging.getLoggerClass()
logging.setLoggerClass(ColoredLogger)
try:
    logger = logging.getLogger(__name__)
finally:
    logging.setLoggerClass(_host_logger_class)
logger.setLevel(logging.WARNING)

for func in ('debug', 'info', 'warning', 'error', 'critical'):
    setattr(sys.modules[__name__], func, getattr(logger, func))

###

from . import exceptions
from . import core

from .core import *
from .exceptions import *

__all__ = core.__all__ + exceptions.__all__
