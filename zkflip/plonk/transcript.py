"""
Fiat-Shamir transcript
======================

The prover and verifier append the same labelled messages in the same order
and derive identical challenges from a SHA-256 hash of the running state.

  public inputs    → (absorbed first)
  Round 1 → β, γ
  Round 2 → α
  Round 3 → ζ
  Round 4 → v
  Round 5 → u (verifier only)
"""

import hashlib

from zkflip.plonk.field import FR, CURVE_ORDER


class Transcript:
    """SHA-256 based Fiat-Shamir transcript."""

    def __init__(self, label=b"plonk"):
        self.state = bytearray()
        self.state.extend(label)

    def append_scalar(self, label, scalar):
        """Append a field element as 32 big-endian bytes."""
        self.state.extend(label)
        val = int(scalar) % CURVE_ORDER
        self.state.extend(val.to_bytes(32, "big"))

    def append_point(self, label, point):
        """Append a G1 point as x || y; the point at infinity is 64 zero bytes."""
        self.state.extend(label)
        if point is None:
            self.state.extend(b"\x00" * 64)
        else:
            x, y = point
            self.state.extend(int(x).to_bytes(32, "big"))
            self.state.extend(int(y).to_bytes(32, "big"))

    def challenge_scalar(self, label):
        """Hash the state into a challenge and chain the digest back in."""
        self.state.extend(label)
        h = hashlib.sha256(bytes(self.state)).digest()
        challenge = FR(int.from_bytes(h, "big") % CURVE_ORDER)
        self.state.extend(h)
        return challenge
