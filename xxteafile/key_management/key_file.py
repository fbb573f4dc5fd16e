"""
Key Files and Key Handling

This module implements the 128-bit key type together with the plain text
key file format: a first line of exactly 32 hexadecimal characters, read
as four 8-character groups, each one a 32-bit word written most
significant digit first.
"""

import re
import operator
import logging
import secrets
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from ..exceptions import KeyFileError, KeyFormatError
from ..key_schedule.xxtea_schedule import KEY_WORDS, MASK32

logger = logging.getLogger(__name__)

KEY_HEX_LENGTH = 32
KEY_PART_LENGTH = 8
KEY_SIZE = 16  # bytes

_KEY_PATTERN = re.compile(r'[0-9A-Fa-f]{%d}' % KEY_HEX_LENGTH)


@dataclass(frozen=True)
class CipherKey:
    """Four unsigned 32-bit key words."""
    words: Tuple[int, int, int, int]

    def __post_init__(self):
        words = tuple(self.words)
        if len(words) != KEY_WORDS:
            raise ValueError(f"Key must be exactly {KEY_WORDS} words, got {len(words)}")
        for word in words:
            if not isinstance(word, int) or not 0 <= word <= MASK32:
                raise ValueError(f"Key word out of 32-bit range: {word!r}")
        object.__setattr__(self, 'words', words)

    @classmethod
    def from_hex(cls, text: str) -> 'CipherKey':
        """
        Build a key from 32 hexadecimal characters.

        Args:
            text: The hex string, without separators or prefix

        Returns:
            The parsed key

        Raises:
            ValueError: If text is not exactly 32 hex characters
        """
        if not _KEY_PATTERN.fullmatch(text):
            raise ValueError(f"Key must be exactly {KEY_HEX_LENGTH} hexadecimal characters")
        return cls(tuple(int(text[i:i + KEY_PART_LENGTH], 16)
                         for i in range(0, KEY_HEX_LENGTH, KEY_PART_LENGTH)))

    @classmethod
    def from_bytes(cls, data: bytes) -> 'CipherKey':
        """Build a key from 16 bytes, each word big-endian."""
        if len(data) != KEY_SIZE:
            raise ValueError(f"Key must be exactly {KEY_SIZE} bytes")
        return cls(tuple(int.from_bytes(data[i:i + 4], byteorder='big')
                         for i in range(0, KEY_SIZE, 4)))

    @classmethod
    def coerce(cls, value: Union['CipherKey', Iterable[int]]) -> 'CipherKey':
        """Accept either a CipherKey or a sequence of four words."""
        if isinstance(value, cls):
            return value
        try:
            words = tuple(operator.index(word) for word in value)
        except TypeError as e:
            raise ValueError(f"Key must be a sequence of {KEY_WORDS} integer words") from e
        return cls(words)

    def hex(self) -> str:
        return ''.join(f'{word:08x}' for word in self.words)

    def to_bytes(self) -> bytes:
        return b''.join(word.to_bytes(4, byteorder='big') for word in self.words)

    def __len__(self) -> int:
        return KEY_WORDS

    def __getitem__(self, index: int) -> int:
        return self.words[index]

    def __repr__(self) -> str:
        # Keep key material out of logs and tracebacks
        return 'CipherKey(<128-bit>)'


def parse_key(text: str, source: str = '<string>') -> CipherKey:
    """
    Parse the content of a key file.

    Only the first line is considered and it must hold exactly 32
    hexadecimal characters; a trailing line terminator is allowed.

    Args:
        text: Key file content
        source: Name reported in errors

    Returns:
        The parsed key

    Raises:
        KeyFormatError: If the first line is not a valid key
    """
    first_line = text.split('\n', 1)[0].rstrip('\r')
    try:
        return CipherKey.from_hex(first_line)
    except ValueError as e:
        raise KeyFormatError(source) from e


def load_key(path: str) -> CipherKey:
    """
    Load a key from a key file.

    Args:
        path: Path of the key file

    Returns:
        The key stored in the file

    Raises:
        KeyFileError: If the file cannot be opened or read
        KeyFormatError: If its content is not a valid key
    """
    try:
        with open(path, 'rb') as f:
            # Room for the key, a CRLF terminator and one byte to spot overlong lines
            raw_line = f.readline(KEY_HEX_LENGTH + 3)
    except OSError as e:
        raise KeyFileError(path) from e

    try:
        first_line = raw_line.decode('ascii')
    except UnicodeDecodeError as e:
        raise KeyFormatError(path) from e

    key = parse_key(first_line, source=path)
    logger.debug(f"Loaded key from '{path}'")
    return key


def format_key(key: Union[CipherKey, Iterable[int]]) -> str:
    """Render a key in the key file format, without line terminator."""
    return CipherKey.coerce(key).hex()


def generate_key() -> CipherKey:
    """
    Generate a cryptographically secure random key.

    Returns:
        A random 128-bit key
    """
    return CipherKey.from_bytes(secrets.token_bytes(KEY_SIZE))


def save_key(key: Union[CipherKey, Iterable[int]], path: str, overwrite: bool = False) -> None:
    """
    Write a key file.

    An existing file is left untouched and reported unless overwrite is set.

    Args:
        key: The key to store
        path: Destination path
        overwrite: Replace the file if it already exists

    Raises:
        KeyFileError: If the file exists or cannot be written
    """
    line = format_key(key) + '\n'
    try:
        with open(path, 'w' if overwrite else 'x', encoding='ascii') as f:
            f.write(line)
    except FileExistsError as e:
        raise KeyFileError(path, f"Key file '{path}' already exists.") from e
    except OSError as e:
        raise KeyFileError(path, f"Key file '{path}' can't be written.") from e
    logger.info(f"Wrote new key file '{path}'")


if __name__ == "__main__":
    key = generate_key()
    text = format_key(key)
    print(f"Generated key: {text}")

    assert parse_key(text + '\n') == key
    assert parse_key(text.upper()) == key

    for bad in ('', text[:-1], text + '0', 'g' + text[1:], '0x' + text[2:]):
        try:
            parse_key(bad)
            print(f"ERROR: accepted invalid key {bad!r}")
        except KeyFormatError as e:
            print(f"Correctly rejected invalid key: {e}")

    print("Key file tests completed successfully!")
