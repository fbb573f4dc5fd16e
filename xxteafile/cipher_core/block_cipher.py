"""
Block Cipher Implementation

This module provides the XXTEA block transform (Wheeler and Needham,
"Correction to XTEA", 1998). A block is a list of unsigned 32-bit words
that is updated in place; each word is mixed with both of its neighbours,
so a single changed bit spreads over the whole block within a few rounds.
"""

from typing import MutableSequence, Sequence

import numpy as np

from ..key_schedule.xxtea_schedule import (DELTA, MASK32, KEY_WORDS, round_count,
                                           key_selector, mix, total_after_rounds)

# Bytes are read as little-endian words
WORD_DTYPE = np.dtype('<u4')
WORD_SIZE = WORD_DTYPE.itemsize


def _check_arguments(block: Sequence[int], word_count: int, key: Sequence[int]) -> None:
    if word_count < 2:
        raise ValueError(f"Block must hold at least 2 words, got {word_count}")
    if len(block) != word_count:
        raise ValueError(f"Block holds {len(block)} words, expected {word_count}")
    if len(key) != KEY_WORDS:
        raise ValueError(f"Key must be exactly {KEY_WORDS} words")
    if any(not 0 <= word <= MASK32 for word in key):
        raise ValueError("Key words must be unsigned 32-bit values")


def scramble(block: MutableSequence[int], word_count: int, key: Sequence[int]) -> None:
    """
    Encrypt a block of 32-bit words in place.

    Args:
        block: The words to encrypt, replaced with the ciphertext
        word_count: Number of words in the block (at least 2)
        key: The four key words
    """
    _check_arguments(block, word_count, key)
    n = word_count
    last = n - 1
    z = block[last]
    total = 0

    for _ in range(round_count(n)):
        total = (total + DELTA) & MASK32
        e = key_selector(total)
        for p in range(last):
            y = block[p + 1]
            block[p] = (block[p] + mix(z, y, total, key, p, e)) & MASK32
            z = block[p]
        y = block[0]
        block[last] = (block[last] + mix(z, y, total, key, last, e)) & MASK32
        z = block[last]


def unscramble(block: MutableSequence[int], word_count: int, key: Sequence[int]) -> None:
    """
    Decrypt a block of 32-bit words in place.

    Args:
        block: The words to decrypt, replaced with the plaintext
        word_count: Number of words in the block (at least 2)
        key: The four key words
    """
    _check_arguments(block, word_count, key)
    n = word_count
    last = n - 1
    y = block[0]
    total = total_after_rounds(round_count(n))

    while total != 0:
        e = key_selector(total)
        for p in range(last, 0, -1):
            z = block[p - 1]
            block[p] = (block[p] - mix(z, y, total, key, p, e)) & MASK32
            y = block[p]
        z = block[last]
        block[0] = (block[0] - mix(z, y, total, key, 0, e)) & MASK32
        y = block[0]
        total = (total - DELTA) & MASK32


class XXTEABlockCipher:
    """
    Byte oriented front end for the word transform with a fixed block size.
    """

    def __init__(self, block_size: int = 512):
        """
        Initialize the block cipher with specified parameters.

        Args:
            block_size: Block size in bytes (default: 512)
        """
        if block_size % WORD_SIZE or block_size // WORD_SIZE < 2:
            raise ValueError(f"Block size must be a multiple of {WORD_SIZE} bytes "
                             f"holding at least 2 words, got {block_size}")
        self.block_size = block_size
        self.word_count = block_size // WORD_SIZE

    def _to_words(self, data: bytes, what: str) -> list:
        if len(data) != self.block_size:
            raise ValueError(f"{what} must be exactly {self.block_size} bytes")
        return np.frombuffer(data, dtype=WORD_DTYPE).tolist()

    @staticmethod
    def _to_bytes(words: Sequence[int]) -> bytes:
        return np.array(words, dtype=WORD_DTYPE).tobytes()

    def encrypt_block(self, plaintext: bytes, key: Sequence[int]) -> bytes:
        """
        Encrypt a single block of plaintext.

        Args:
            plaintext: The plaintext block (must be block_size bytes)
            key: The four key words

        Returns:
            The encrypted ciphertext block
        """
        words = self._to_words(plaintext, "Plaintext")
        scramble(words, self.word_count, key)
        return self._to_bytes(words)

    def decrypt_block(self, ciphertext: bytes, key: Sequence[int]) -> bytes:
        """
        Decrypt a single block of ciphertext.

        Args:
            ciphertext: The ciphertext block (must be block_size bytes)
            key: The four key words

        Returns:
            The decrypted plaintext block
        """
        words = self._to_words(ciphertext, "Ciphertext")
        unscramble(words, self.word_count, key)
        return self._to_bytes(words)


def encrypt_block(plaintext: bytes, key: Sequence[int], block_size: int = 512) -> bytes:
    """
    Convenience function to encrypt a single block.

    Args:
        plaintext: The plaintext block to encrypt
        key: The four key words
        block_size: Block size in bytes (default: 512)

    Returns:
        The encrypted ciphertext block
    """
    return XXTEABlockCipher(block_size=block_size).encrypt_block(plaintext, key)


def decrypt_block(ciphertext: bytes, key: Sequence[int], block_size: int = 512) -> bytes:
    """
    Convenience function to decrypt a single block.

    Args:
        ciphertext: The ciphertext block to decrypt
        key: The four key words
        block_size: Block size in bytes (default: 512)

    Returns:
        The decrypted plaintext block
    """
    return XXTEABlockCipher(block_size=block_size).decrypt_block(ciphertext, key)


if __name__ == "__main__":
    # Known answer: all-zero key and block
    words = [0, 0]
    scramble(words, 2, [0, 0, 0, 0])
    print(f"Ciphertext: {words[0]:08x} {words[1]:08x}")
    assert words == [0x053704AB, 0x575D8C80]
    unscramble(words, 2, [0, 0, 0, 0])
    assert words == [0, 0]

    key = [0x01234567, 0x89ABCDEF, 0xFEDCBA98, 0x76543210]
    block = bytes(range(256)) * 2
    ciphertext = encrypt_block(block, key)
    assert ciphertext != block
    assert decrypt_block(ciphertext, key) == block

    print("Block cipher tests completed successfully!")
