"""
Console - the live, tagged output stream.

Every line is printed with the same tag so it can be grepped out of a busy
terminal. Multi-line blocks are printed under one lock so concurrent
requests never interleave.
"""

import sys
import threading

TAG = "[NetworkLogger]"


class Console:
    def __init__(self, stream=None, tag: str = TAG):
        self.stream = stream
        self.tag = tag
        self._lock = threading.Lock()

    def emit(self, message: str):
        self.emit_lines(message.split("\n"))

    def emit_lines(self, lines):
        out = self.stream or sys.stdout
        with self._lock:
            for line in lines:
                print(f"{self.tag} {line}", file=out, flush=True)
