from __future__ import annotations


class ShellError(Exception):
    """Recoverable failure scoped to one artifact (directory, I/O, merge).

    The orchestrator turns these into warnings and moves on to the next artifact.
    """


class MergeError(ShellError):
    pass


class NameSpaceExhausted(RuntimeError):
    """Every candidate of a unique rename collided; the pass cannot continue."""

    def __init__(self, directory: str, file_name: str, attempts: int):
        self.directory = directory
        self.file_name = file_name
        self.attempts = attempts
        super().__init__(
            f"Cannot generate unique file name for {file_name} in directory {directory} "
            f"(tried {attempts - 1} alternatives)"
        )


class MalformedNamespace(ValueError):
    def __init__(self, namespace: str, levels: int):
        self.namespace = namespace
        self.levels = levels
        super().__init__(
            f"Namespace {namespace!r} has too few segments to strip {levels} level(s)"
        )


class PublishCancelled(Exception):
    """Raised by a progress callback when the caller cancels the pass.

    The orchestrator attaches the partial ``PublishResult`` as ``result``.
    """

    result = None
