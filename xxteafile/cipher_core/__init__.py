"""
Cipher Core Package

This package implements the core block transform, operating in place on
blocks of 32-bit words, and a byte oriented wrapper around it.
"""

from .block_cipher import (XXTEABlockCipher, scramble, unscramble,
                           encrypt_block, decrypt_block)

__all__ = ['XXTEABlockCipher', 'scramble', 'unscramble',
           'encrypt_block', 'decrypt_block']
