"""
XXTEA Round Schedule

This module holds the arithmetic shared by the forward and inverse block
transforms: the golden-ratio round constant, the round-count rule, the
key word selector and the mixing function applied to every word update.
"""

from typing import Sequence

# Golden-ratio derived round constant
DELTA = 0x9E3779B9

MASK32 = 0xFFFFFFFF

KEY_WORDS = 4


def round_count(word_count: int) -> int:
    """
    Number of full passes over a block of the given size.

    Args:
        word_count: Number of 32-bit words in the block

    Returns:
        6 + 52 // word_count

    Raises:
        ValueError: If the block holds fewer than two words
    """
    if word_count < 2:
        raise ValueError(f"Block must hold at least 2 words, got {word_count}")
    return 6 + 52 // word_count


def key_selector(total: int) -> int:
    """Two-bit selector taken from the running sum."""
    return (total >> 2) & 3


def mix(z: int, y: int, total: int, key: Sequence[int], p: int, e: int) -> int:
    """
    Compute the mixing value added to (or subtracted from) word p.

    Args:
        z: The word preceding p in traversal order
        y: The word following p in traversal order
        total: The running multiple of DELTA
        key: The four key words
        p: Index of the word being updated
        e: Key selector for this round

    Returns:
        The 32-bit mixing value
    """
    left = (((z >> 5) ^ (y << 2)) & MASK32) + (((y >> 3) ^ (z << 4)) & MASK32)
    right = (total ^ y) + (key[(p & 3) ^ e] ^ z)
    return (left ^ right) & MASK32


def total_after_rounds(rounds: int) -> int:
    """Value of the running sum after the given number of rounds."""
    return (rounds * DELTA) & MASK32


def test_key_schedule():
    """
    Test the schedule helpers.
    """
    assert round_count(2) == 32
    assert round_count(128) == 6
    assert total_after_rounds(32) == 0xC6EF3720

    # Every step of the sum selects a key word in range
    total = 0
    for _ in range(64):
        total = (total + DELTA) & MASK32
        assert 0 <= key_selector(total) < KEY_WORDS

    value = mix(MASK32, MASK32, MASK32, [MASK32] * KEY_WORDS, 3, 3)
    assert 0 <= value <= MASK32, f"Mix escaped 32 bits: {value:#x}"

    print("Key schedule test passed!")


if __name__ == "__main__":
    test_key_schedule()
