from __future__ import annotations


class ImageProcessingError(Exception):
    """
    A transform failed for a single image.

    Attributes:
        stage: pipeline stage that failed ("decode", "resize", "line_art",
            "quantize", "palette", "assemble"; "process" marks an
            unexpected failure caught by the batch builder).
        cause: the underlying exception, if any.
    """

    def __init__(self, stage: str, cause: BaseException | None = None, message: str | None = None):
        self.stage = stage
        self.cause = cause
        if message is None:
            message = f"{stage} failed: {cause}" if cause is not None else f"{stage} failed"
        super().__init__(message)


class DecodeError(ImageProcessingError):
    """The input could not be decoded into a bitmap."""

    def __init__(self, cause: BaseException | None = None, message: str | None = None):
        super().__init__("decode", cause, message)


class BookError(ImageProcessingError):
    """
    No photo of a batch produced a page. ``statuses`` holds the
    per-photo outcomes so callers can still report each failure.
    """

    def __init__(self, statuses: list, message: str | None = None):
        self.statuses = list(statuses)
        if message is None:
            message = f"No photo could be processed ({len(self.statuses)} failed)"
        super().__init__("assemble", message=message)
