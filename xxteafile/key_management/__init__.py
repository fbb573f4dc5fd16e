"""
Key Management Package

This package implements the 128-bit cipher key and the plain text key
file format used by the command line tool.
"""

from .key_file import (CipherKey, parse_key, load_key, format_key,
                       generate_key, save_key, KEY_HEX_LENGTH)

__all__ = ['CipherKey', 'parse_key', 'load_key', 'format_key',
           'generate_key', 'save_key', 'KEY_HEX_LENGTH']
