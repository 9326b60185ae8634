from __future__ import annotations

EXIT_FAILURE = 1
EXIT_PERMISSION = 13
EXIT_USAGE = 22


class SiteError(Exception):
    """Fatal condition that stops the whole run."""

    def __init__(self, message: str, exit_code: int = EXIT_FAILURE) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class HeaderError(Exception):
    """A record header that cannot be read or parsed; the record is skipped."""
