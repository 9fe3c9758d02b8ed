"""
Commitment scheme for the coin-flip secrets
===========================================

Each party picks a 512-bit secret, split into 16 words of 32 bits, and
publishes only ``commit(words)``, a Poseidon digest in [0, r).

The flip itself reads one bit of each secret at a 9-bit index from the
randomness oracle:

    word_index = index // 32, bit_offset = index % 32
    bit = (words[word_index] >> bit_offset) & 1
    outcome = player_bit XOR house_bit     (1: player wins)

Example:
    >>> player = list(range(1, 17)); house = list(range(100, 116))
    >>> split_index(137)                      # (4, 9)
    >>> expected_outcome(player, house, 137)  # 0
"""

import secrets

from zkflip.plonk.field import CURVE_ORDER
from zkflip.fairness.poseidon import poseidon_hash


NUM_WORDS = 16
WORD_BITS = 32
INDEX_BITS = 9
MAX_INDEX = NUM_WORDS * WORD_BITS - 1


def validate_preimage(words):
    """Return the words as ints, or raise ValueError.

    Exactly 16 integers in [0, 2^32) are accepted; bools and other types are
    rejected.
    """
    if not isinstance(words, (list, tuple)) or len(words) != NUM_WORDS:
        raise ValueError(f"preimage must be a list of {NUM_WORDS} words")
    result = []
    for i, word in enumerate(words):
        if isinstance(word, bool) or not isinstance(word, int):
            raise ValueError(f"preimage word {i} is not an integer")
        if not 0 <= word < (1 << WORD_BITS):
            raise ValueError(f"preimage word {i} is outside [0, 2^32)")
        result.append(word)
    return result


def commit(words):
    """Poseidon commitment of a 16-word preimage."""
    return poseidon_hash(validate_preimage(words))


def is_commitment(value):
    """True for ints in the scalar field range [0, r)."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < CURVE_ORDER


def random_preimage():
    """Fresh 512-bit secret drawn from the OS CSPRNG."""
    return [secrets.randbits(WORD_BITS) for _ in range(NUM_WORDS)]


def random_index():
    return secrets.randbelow(MAX_INDEX + 1)


def split_index(index):
    """(word_index, bit_offset) of a bit index in [0, 511].

    Raises:
        ValueError: index out of range
    """
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= MAX_INDEX:
        raise ValueError(f"bit index must be in [0, {MAX_INDEX}]")
    return index // WORD_BITS, index % WORD_BITS


def extract_bit(words, index):
    word_index, bit_offset = split_index(index)
    words = validate_preimage(words)
    return (words[word_index] >> bit_offset) & 1


def expected_outcome(player_words, house_words, index):
    """player_bit XOR house_bit at `index`."""
    return extract_bit(player_words, index) ^ extract_bit(house_words, index)
