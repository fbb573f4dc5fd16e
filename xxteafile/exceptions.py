"""
Error Types

Every failure the file tools report derives from XXTEAFileError and
carries the path it concerns.
"""

from typing import Optional


class XXTEAFileError(Exception):
    """Base class for key and file processing failures."""

    message = "Processing of '{path}' failed."

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or self.message.format(path=path))


class KeyFileError(XXTEAFileError):
    """The key file cannot be opened, read or written."""

    message = "No key file '{path}' found."


class KeyFormatError(KeyFileError, ValueError):
    """The key content is not exactly 32 hexadecimal characters."""

    message = "Key file '{path}' is not a valid key."


class InputFileError(XXTEAFileError):
    """The input file cannot be opened or read."""

    message = "No input file '{path}' found."


class OutputFileError(XXTEAFileError):
    """The output file cannot be created."""

    message = "Output file '{path}' can't be created."


class ShortWriteError(OutputFileError):
    """A block could not be written in full."""

    message = "Error while writing into '{path}'."
