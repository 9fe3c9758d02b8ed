"""
Commitments over 16-word preimages and bit extraction
"""
import pytest

from zkflip.plonk.field import CURVE_ORDER
from zkflip.fairness.commitment import (
    MAX_INDEX,
    NUM_WORDS,
    commit,
    expected_outcome,
    extract_bit,
    is_commitment,
    random_index,
    random_preimage,
    split_index,
    validate_preimage,
)
from zkflip.fairness.poseidon import poseidon_hash

PLAYER = list(range(1, 17))
HOUSE = list(range(100, 116))


class TestPreimage:
    def test_accepts_valid(self):
        """16 words in [0, 2^32) pass through unchanged."""
        words = [0] * 15 + [2 ** 32 - 1]
        assert validate_preimage(words) == words

    @pytest.mark.parametrize("words", [
        list(range(15)),
        list(range(17)),
        [0] * 15 + [2 ** 32],
        [0] * 15 + [-1],
        [0] * 15 + [True],
        [0] * 15 + ["7"],
        "not a list",
    ])
    def test_rejects_invalid(self, words):
        """Wrong length, out-of-range or non-int words raise ValueError."""
        with pytest.raises(ValueError):
            validate_preimage(words)

    def test_random_preimage(self):
        """Fresh secrets are valid and differ between draws."""
        a, b = random_preimage(), random_preimage()
        assert validate_preimage(a) == a
        assert len(a) == NUM_WORDS
        assert a != b


class TestCommit:
    def test_is_poseidon_of_words(self):
        """commit() is the Poseidon sponge over the 16 words."""
        assert commit(PLAYER) == poseidon_hash(PLAYER)

    def test_deterministic_and_binding(self):
        """Same words, same commitment; one changed word, a different one."""
        changed = list(PLAYER)
        changed[15] += 1
        assert commit(PLAYER) == commit(list(PLAYER))
        assert commit(PLAYER) != commit(changed)

    def test_rejects_invalid_preimage(self):
        """Invalid input is refused rather than hashed."""
        with pytest.raises(ValueError):
            commit([1, 2, 3])

    @pytest.mark.parametrize("value,ok", [
        (0, True),
        (CURVE_ORDER - 1, True),
        (CURVE_ORDER, False),
        (-1, False),
        (True, False),
        ("5", False),
    ])
    def test_is_commitment(self, value, ok):
        """Only ints in [0, r) are commitments."""
        assert is_commitment(value) is ok


class TestBitExtraction:
    def test_worked_example(self):
        """Index 137: word 4, offset 9, both bits 0, outcome 0."""
        assert split_index(137) == (4, 9)
        assert extract_bit(PLAYER, 137) == 0
        assert extract_bit(HOUSE, 137) == 0
        assert expected_outcome(PLAYER, HOUSE, 137) == 0

    def test_low_bits(self):
        """Index 0 reads the lowest bit of word 0."""
        assert extract_bit(PLAYER, 0) == 1        # word 1
        assert extract_bit(HOUSE, 0) == 0         # word 100
        assert expected_outcome(PLAYER, HOUSE, 0) == 1

    def test_last_index(self):
        """Index 511 reads the top bit of word 15."""
        words = [0] * 15 + [2 ** 31]
        assert extract_bit(words, MAX_INDEX) == 1

    @pytest.mark.parametrize("index", [-1, 512, 1.5, True])
    def test_bad_index(self, index):
        """Indices outside [0, 511] or not int raise ValueError."""
        with pytest.raises(ValueError):
            split_index(index)

    def test_random_index_range(self):
        """Random indices stay in [0, 511]."""
        assert all(0 <= random_index() <= MAX_INDEX for _ in range(50))
