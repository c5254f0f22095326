"""Errors raised by the workload core."""


class NotFoundError(Exception):
    """Raised when a referenced Developer, Task, or AppSetting does not exist."""

    def __init__(self, kind: str, key) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} not found")
