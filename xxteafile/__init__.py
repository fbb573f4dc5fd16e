"""
xxteafile - XXTEA File Encryption

This library encrypts and decrypts files with the XXTEA block cipher
(Wheeler and Needham, "Correction to XTEA", 1998) under a 128-bit key.

Key Features:
- Files processed as independent 512-byte blocks of 128 words
- Final partial block padded with ASCII '0' on encryption
- Trailing partial block ignored on decryption
- Plain text key files of 32 hexadecimal characters
- Command line tool (`xxteafile` or `python -m xxteafile`)

"""

from .cipher_core import scramble, unscramble
from .exceptions import (XXTEAFileError, KeyFileError, KeyFormatError,
                         InputFileError, OutputFileError, ShortWriteError)
from .file_mode import encrypt_file, decrypt_file, encrypt_data, decrypt_data
from .key_management import CipherKey, load_key, parse_key, generate_key, save_key

__version__ = '0.1.0'
__author__ = 'xxteafile developers'

__all__ = ['scramble', 'unscramble',
           'encrypt_file', 'decrypt_file', 'encrypt_data', 'decrypt_data',
           'CipherKey', 'load_key', 'parse_key', 'generate_key', 'save_key',
           'XXTEAFileError', 'KeyFileError', 'KeyFormatError',
           'InputFileError', 'OutputFileError', 'ShortWriteError']
