"""
Per-run log file.

Service functions accept an optional ``logger`` callable taking one message.
RunLog is that callable: it appends timestamped lines to the run's log file
and echoes them to a stream.
"""

import os
from datetime import datetime

LEVEL_INFO = 'INFO'
LEVEL_WARN = 'WARN'
LEVEL_ERROR = 'ERROR'


def format_line(message, level=LEVEL_INFO, now=None):
    timestamp = (now or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    return f'{timestamp} [{level}] {message}'


class RunLog:
    """
    Callable logger writing to a file and, optionally, a stream.

    Args:
        log_path: File to append to. None disables file output.
        stream: Object with a write() method (e.g. a command's stdout). None disables echo.
        echo_info: When False, only WARN and ERROR lines are echoed to the stream.
    """

    def __init__(self, log_path=None, stream=None, echo_info=True):
        self.log_path = log_path
        self.stream = stream
        self.echo_info = echo_info

    def __call__(self, message, level=LEVEL_INFO):
        line = format_line(message, level)

        if self.log_path:
            log_dir = os.path.dirname(self.log_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            with open(self.log_path, 'a') as f:
                f.write(line + '\n')

        if self.stream is not None and (self.echo_info or level != LEVEL_INFO):
            self.stream.write(line + '\n')

    def warn(self, message):
        self(message, LEVEL_WARN)

    def error(self, message):
        self(message, LEVEL_ERROR)
