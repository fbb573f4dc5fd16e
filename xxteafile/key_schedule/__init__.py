"""
Key Schedule Package

This package implements the round schedule of the block cipher: the
round constant, the number of rounds, the key word selector and the
mixing function.
"""

from .xxtea_schedule import DELTA, MASK32, round_count, key_selector, mix

__all__ = ['DELTA', 'MASK32', 'round_count', 'key_selector', 'mix']
