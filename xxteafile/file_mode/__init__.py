"""
File Mode Package

This package applies the block cipher to whole files and buffers, one
independent 512-byte block at a time.
"""

from .block_pipeline import (XXTEAFileCipher, encrypt_file, decrypt_file,
                             encrypt_data, decrypt_data,
                             BLOCK_SIZE, BLOCK_WORDS, PADDING_BYTE)

__all__ = ['XXTEAFileCipher', 'encrypt_file', 'decrypt_file',
           'encrypt_data', 'decrypt_data',
           'BLOCK_SIZE', 'BLOCK_WORDS', 'PADDING_BYTE']
