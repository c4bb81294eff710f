"""
Trace record - one finished (or failed) HTTP exchange, as handed to the Recorder.
"""

from dataclasses import dataclass, field


@dataclass
class TraceRecord:
    method: str
    url: str
    request_headers: list[tuple[str, str]] = field(default_factory=list)
    request_body: bytes | None = None
    status_code: int | None = None
    response_headers: list[tuple[str, str]] | None = None
    response_body: bytes | None = None
    elapsed: float = 0.0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None
