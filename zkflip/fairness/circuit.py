"""
Fairness circuit
================

Proves, without revealing either secret, that

  1. Poseidon(player_preimage) == player_commit
  2. Poseidon(house_preimage)  == house_commit
  3. bit_index < 512, split into word_index (high 4 bits) and bit_offset
     (low 5 bits) by a 9-bit boolean decomposition
  4. player_bit = bit bit_offset of player_preimage[word_index]
  5. house_bit likewise
  6. outcome == player_bit XOR house_bit

Public inputs, in row order: [player_commit, house_commit, bit_index, outcome].

Word and bit selection use one-hot selectors built from the index bits, so
the gate layout is the same for every witness.

Poseidon costs 3 gates per S-box (round constant folded into the squaring
and the final product) and 2 per MDS output row.
"""

from zkflip.plonk.field import FR
from zkflip.fairness.builder import CircuitBuilder
from zkflip.fairness.commitment import (
    NUM_WORDS,
    WORD_BITS,
    INDEX_BITS,
    commit,
    validate_preimage,
)
from zkflip.fairness.poseidon import DEFAULT_PARAMS, is_full_round


NUM_PUBLIC_INPUTS = 4
OFFSET_BITS = 5


def _sbox(builder, s, rc):
    """(s + rc)^5 in three gates."""
    sq = builder.custom(s, s, q_l=2 * rc, q_m=1, q_c=rc * rc)
    quad = builder.mul(sq, sq)
    return builder.custom(quad, s, q_l=rc, q_m=1)


def _mix(builder, values, constants, mds):
    """out_i = Σ_j mds[i][j]·(values[j] + constants[j]).

    constants[j] is the round constant still to be added to values[j]
    (0 when the S-box already consumed it).
    """
    outputs = []
    for row in mds:
        k = sum(m * c for m, c in zip(row, constants))
        tmp = builder.linear(values[0], values[1], row[0], row[1], k)
        outputs.append(builder.linear(tmp, values[2], 1, row[2]))
    return outputs


def poseidon_permutation_gadget(builder, state, params=DEFAULT_PARAMS):
    """In-circuit Poseidon permutation of a width-3 state of variables."""
    if params.t != 3:
        raise ValueError("the permutation gadget supports t = 3 only")
    for r in range(params.R_F + params.R_P):
        rc = params.rc[r]
        if is_full_round(r, params):
            state = [_sbox(builder, s, c) for s, c in zip(state, rc)]
            pending = [0, 0, 0]
        else:
            state = [_sbox(builder, state[0], rc[0]), state[1], state[2]]
            pending = [0, rc[1], rc[2]]
        state = _mix(builder, state, pending, params.mds)
    return state


def poseidon_gadget(builder, inputs, params=DEFAULT_PARAMS):
    """In-circuit sponge hash matching poseidon.poseidon_hash."""
    capacity = builder.constant(len(inputs))
    state = [capacity, None, None]
    rate = params.rate
    for start in range(0, len(inputs), rate):
        for offset, word in enumerate(inputs[start:start + rate]):
            slot = 1 + offset
            state[slot] = word if state[slot] is None else builder.add(state[slot], word)
        state = [s if s is not None else builder.constant(0) for s in state]
        state = poseidon_permutation_gadget(builder, state, params)
    return state[1]


def select_bit(builder, words, word_selectors, offset_selectors):
    """Bit `offset` of words[word_index], both given as one-hot selectors."""
    word = builder.inner_product(word_selectors, words)
    bits = builder.to_bits(word, WORD_BITS)
    return builder.inner_product(offset_selectors, bits)


def build_fairness_circuit(player_preimage, house_preimage, bit_index,
                           outcome=None, player_commit=None, house_commit=None):
    """Build the fairness circuit and its witness.

    Args:
        player_preimage, house_preimage: 16 words each, in [0, 2^32)
        bit_index: the oracle index (public)
        outcome: claimed outcome; defaults to the honest XOR
        player_commit, house_commit: claimed commitments; default to the
            Poseidon digests of the preimages

    Overriding a claim with a wrong value yields a builder whose check()
    fails, and no valid proof can be produced for it.

    Returns:
        CircuitBuilder
    """
    player_preimage = validate_preimage(player_preimage)
    house_preimage = validate_preimage(house_preimage)
    if player_commit is None:
        player_commit = commit(player_preimage)
    if house_commit is None:
        house_commit = commit(house_preimage)

    index_value = int(bit_index)
    if outcome is None:
        word_index = (index_value >> OFFSET_BITS) % NUM_WORDS
        offset = index_value % WORD_BITS
        outcome = (
            ((player_preimage[word_index] >> offset) & 1)
            ^ ((house_preimage[word_index] >> offset) & 1)
        )

    builder = CircuitBuilder()

    player_commit_var = builder.public_input(player_commit)
    house_commit_var = builder.public_input(house_commit)
    index_var = builder.public_input(index_value)
    outcome_var = builder.public_input(outcome)

    player_words = [builder.private(w) for w in player_preimage]
    house_words = [builder.private(w) for w in house_preimage]

    builder.assert_equal(poseidon_gadget(builder, player_words), player_commit_var)
    builder.assert_equal(poseidon_gadget(builder, house_words), house_commit_var)

    index_bits = builder.to_bits(index_var, INDEX_BITS)
    offset_selectors = builder.one_hot(index_bits[:OFFSET_BITS])
    word_selectors = builder.one_hot(index_bits[OFFSET_BITS:])

    player_bit = select_bit(builder, player_words, word_selectors, offset_selectors)
    house_bit = select_bit(builder, house_words, word_selectors, offset_selectors)

    builder.assert_equal(builder.xor(player_bit, house_bit), outcome_var)
    return builder


def circuit_template():
    """The fairness circuit filled with a dummy witness; its structure is what
    setup preprocesses."""
    zeros = [0] * NUM_WORDS
    return build_fairness_circuit(zeros, zeros, 0)


def public_inputs(player_commit, house_commit, bit_index, outcome):
    """The ordered public-input vector as field elements."""
    return [FR(player_commit), FR(house_commit), FR(bit_index), FR(outcome)]
