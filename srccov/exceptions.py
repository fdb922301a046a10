__all__ = [
    'MalformedRangeException', 'FrozenCoverageException',
    'UnloadedRangeException', 'ConfigurationException'
]

class MalformedRangeException(ValueError):
    def __init__(self, msg, source=None, start_line=None, end_line=None):
        super().__init__(msg)
        self.source = source
        self.start_line = start_line
        self.end_line = end_line

class FrozenCoverageException(RuntimeError):
    def __init__(self, msg, source=None):
        super().__init__(msg)
        self.source = source

class UnloadedRangeException(RuntimeError):
    def __init__(self, msg, section):
        super().__init__(msg)
        self.section = section

class ConfigurationException(RuntimeError):
    pass
