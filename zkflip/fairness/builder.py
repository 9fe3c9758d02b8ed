"""
Circuit builder: variables on top of raw PLONK gates
====================================================

``Circuit`` only knows rows and wire positions. The builder adds named
values (variables) and does the wiring bookkeeping:

  - every variable remembers the first wire position it was placed on
  - each later use adds one copy constraint back to that first position,
    so every constraint joins a fresh position to an existing cycle
  - each helper computes the witness value while it emits the gate, so a
    finished builder holds both the circuit and a full assignment

The gate layout depends only on the sequence of calls, never on the values,
which lets one preprocessing serve every witness of the same shape.

Usage:
    >>> b = CircuitBuilder()
    >>> out = b.public_input(35)
    >>> x = b.private(3)
    >>> x3 = b.mul(b.mul(x, x), x)
    >>> b.assert_equal(b.add_constant(b.add(x3, x), 5), out)
    >>> b.check()   # True
    >>> circuit, a, b_, c, pub = b.build()
"""

from zkflip.plonk.field import FR
from zkflip.plonk.circuit import Circuit

WIRE_A = 0
WIRE_B = 1
WIRE_C = 2


class Variable:
    """A value in the circuit; `first` is (gate, wire) once placed."""

    __slots__ = ("value", "first")

    def __init__(self, value):
        self.value = value if isinstance(value, FR) else FR(value)
        self.first = None

    def __int__(self):
        return int(self.value)

    def __repr__(self):
        return f"Variable({int(self.value)})"


class CircuitBuilder:
    """Collects gates, copy constraints and the matching witness."""

    def __init__(self):
        self.circuit = Circuit()
        self.a_vals = []
        self.b_vals = []
        self.c_vals = []
        self.public_values = []
        self._constants = {}

    @property
    def num_gates(self):
        return self.circuit.n

    # ─────────────────────────────────────────────────────────────────
    # Gate emission
    # ─────────────────────────────────────────────────────────────────

    def _place(self, var, row, wire):
        if var is None:
            return FR(0)
        if var.first is None:
            var.first = (row, wire)
        else:
            self.circuit.add_copy_constraint(var.first[0], var.first[1], row, wire)
        return var.value

    def _emit(self, selectors, a=None, b=None, c=None, public=False):
        if public:
            row = self.circuit.add_public_input_gate()
        else:
            row = self.circuit.add_gate(*selectors)
        self.a_vals.append(self._place(a, row, WIRE_A))
        self.b_vals.append(self._place(b, row, WIRE_B))
        self.c_vals.append(self._place(c, row, WIRE_C))
        return row

    # ─────────────────────────────────────────────────────────────────
    # Inputs
    # ─────────────────────────────────────────────────────────────────

    def public_input(self, value):
        """Public value bound to the next public-input row (c = x_i)."""
        var = Variable(value)
        self._emit(None, c=var, public=True)
        self.public_values.append(var.value)
        return var

    def private(self, value):
        """Private value; it enters the circuit at its first use."""
        return Variable(value)

    def constant(self, value):
        """Variable pinned to `value` by -c + k = 0; one gate per distinct k."""
        value = value if isinstance(value, FR) else FR(value)
        key = int(value)
        if key not in self._constants:
            var = Variable(value)
            self._emit((0, 0, -1, 0, value), c=var)
            self._constants[key] = var
        return self._constants[key]

    # ─────────────────────────────────────────────────────────────────
    # Arithmetic
    # ─────────────────────────────────────────────────────────────────

    def custom(self, x, y, q_l=0, q_r=0, q_m=0, q_c=0):
        """Output var = q_l·x + q_r·y + q_m·x·y + q_c (x or y may be None)."""
        q_l, q_r, q_m, q_c = (FR(v) if not isinstance(v, FR) else v
                              for v in (q_l, q_r, q_m, q_c))
        xv = x.value if x is not None else FR(0)
        yv = y.value if y is not None else FR(0)
        out = Variable(q_l * xv + q_r * yv + q_m * xv * yv + q_c)
        self._emit((q_l, q_r, -1, q_m, q_c), a=x, b=y, c=out)
        return out

    def add(self, x, y):
        return self.custom(x, y, q_l=1, q_r=1)

    def mul(self, x, y):
        return self.custom(x, y, q_m=1)

    def add_constant(self, x, k):
        return self.custom(x, None, q_l=1, q_c=k)

    def linear(self, x, y, kx, ky, k=0):
        """kx·x + ky·y + k."""
        return self.custom(x, y, q_l=kx, q_r=ky, q_c=k)

    def one_minus(self, x):
        return self.custom(x, None, q_l=-1, q_c=1)

    # ─────────────────────────────────────────────────────────────────
    # Assertions
    # ─────────────────────────────────────────────────────────────────

    def assert_equal(self, x, y):
        """x - y = 0."""
        self._emit((1, -1, 0, 0, 0), a=x, b=y)

    def assert_boolean(self, x):
        """x·x - x = 0, so x ∈ {0, 1}."""
        self._emit((-1, 0, 0, 1, 0), a=x, b=x)

    # ─────────────────────────────────────────────────────────────────
    # Gadgets
    # ─────────────────────────────────────────────────────────────────

    def to_bits(self, x, num_bits):
        """Little-endian boolean decomposition of x.

        Also forces x < 2^num_bits: a larger witness value cannot satisfy the
        recomposition and the builder check fails.
        """
        raw = int(x.value)
        bits = [self.private((raw >> i) & 1) for i in range(num_bits)]
        for bit in bits:
            self.assert_boolean(bit)
        acc = bits[0]
        for i in range(1, num_bits):
            acc = self.linear(acc, bits[i], 1, 1 << i)
        self.assert_equal(acc, x)
        return bits

    def one_hot(self, bits):
        """Selectors s_k = 1 iff Σ bits[i]·2^i == k, for k < 2^len(bits).

        bits must already be constrained boolean.
        """
        selectors = [self.one_minus(bits[0]), bits[0]]
        for bit in bits[1:]:
            low = [self.custom(s, bit, q_l=1, q_m=-1) for s in selectors]
            high = [self.mul(s, bit) for s in selectors]
            selectors = low + high
        return selectors

    def inner_product(self, xs, ys):
        """Σ xs[i]·ys[i]."""
        terms = [self.mul(x, y) for x, y in zip(xs, ys)]
        acc = terms[0]
        for term in terms[1:]:
            acc = self.add(acc, term)
        return acc

    def xor(self, x, y):
        """x + y - 2xy, the XOR of two boolean variables."""
        return self.custom(x, y, q_l=1, q_r=1, q_m=-2)

    # ─────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────

    def check(self):
        """True when the collected witness satisfies every gate and copy constraint."""
        return self.circuit.check_witness(
            self.a_vals, self.b_vals, self.c_vals, self.public_values
        )

    def build(self):
        """Return (circuit, a_vals, b_vals, c_vals, public_inputs).

        Same tuple shape as Circuit.x3_plus_x_plus_5_eq_35(); padding to a
        power of two happens in preprocess() and prove().
        """
        return (
            self.circuit,
            list(self.a_vals),
            list(self.b_vals),
            list(self.c_vals),
            list(self.public_values),
        )
