import sys, logging
logger = logging.getLogger("srccov.core")
for func in ('debug', 'info', 'warning', 'error', 'critical'):
    setattr(sys.modules[__name__], func, getattr(logger, func))

from .profiler import *
from .types import *
from .store import *
from .config import *

__all__ = (profiler.__all__ + types.__all__ + store.__all__ + config.__all__)
