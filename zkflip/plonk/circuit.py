"""
PLONK circuit representation
============================

A computation is expressed as rows of gates plus copy constraints between
wires.

**Gate equation** (one row, wires a, b, c):

    q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI = 0

  | kind         | q_L | q_R | q_O | q_M | q_C | meaning     |
  |--------------|-----|-----|-----|-----|-----|-------------|
  | multiply     |  0  |  0  | -1  |  1  |  0  | a·b = c     |
  | add          |  1  |  1  | -1  |  0  |  0  | a + b = c   |
  | add constant |  1  |  0  | -1  |  0  |  k  | a + k = c   |
  | public input |  0  |  0  |  1  |  0  |  0  | c = x_i     |

PI(ωⁱ) = -x_i on the public-input rows, so those rows force c = x_i and the
verifier recomputes PI(ζ) from the public values alone.

**Copy constraints**:
  "gate i1 wire j1 == gate i2 wire j2", encoded as the permutation σ.

Usage:
    >>> circuit, a, b, c, pub = Circuit.x3_plus_x_plus_5_eq_35()
"""

from zkflip.plonk.field import FR, CURVE_ORDER


class Gate:
    """One arithmetic gate (a row of selector values)."""

    def __init__(self, q_l, q_r, q_o, q_m, q_c):
        self.q_l = q_l if isinstance(q_l, FR) else FR(q_l)
        self.q_r = q_r if isinstance(q_r, FR) else FR(q_r)
        self.q_o = q_o if isinstance(q_o, FR) else FR(q_o)
        self.q_m = q_m if isinstance(q_m, FR) else FR(q_m)
        self.q_c = q_c if isinstance(q_c, FR) else FR(q_c)

    def check(self, a, b, c, pi=0):
        """Return True when q_L·a + q_R·b + q_O·c + q_M·a·b + q_C + pi == 0.

        Args:
            a, b, c: wire values (int or FR)
            pi: public-input polynomial value at this row (0 off PI rows)
        """
        if not isinstance(a, FR):
            a = FR(a)
        if not isinstance(b, FR):
            b = FR(b)
        if not isinstance(c, FR):
            c = FR(c)
        if not isinstance(pi, FR):
            pi = FR(pi)
        result = (
            self.q_l * a
            + self.q_r * b
            + self.q_o * c
            + self.q_m * (a * b)
            + self.q_c
            + pi
        )
        return result == FR(0)


class Circuit:
    """PLONK arithmetic circuit: a list of gates and their wiring.

    Attributes:
        gates: list of Gate
        copy_constraints: (gate1, wire1, gate2, wire2) tuples,
            wire 0 = a, 1 = b, 2 = c
        num_public_inputs: number of public-input rows; they occupy rows
            0 .. num_public_inputs-1
    """

    def __init__(self):
        self.gates = []
        self.copy_constraints = []
        self.num_public_inputs = 0

    @property
    def n(self):
        """Number of gates (before padding)."""
        return len(self.gates)

    def add_gate(self, q_l, q_r, q_o, q_m, q_c):
        """Append a gate with arbitrary selectors and return its row."""
        self.gates.append(Gate(q_l, q_r, q_o, q_m, q_c))
        return len(self.gates) - 1

    def add_multiplication_gate(self):
        """a · b = c."""
        return self.add_gate(0, 0, CURVE_ORDER - 1, 1, 0)

    def add_addition_gate(self):
        """a + b = c."""
        return self.add_gate(1, 1, CURVE_ORDER - 1, 0, 0)

    def add_constant_gate(self, constant):
        """a + constant = c."""
        return self.add_gate(1, 0, CURVE_ORDER - 1, 0, constant)

    def add_public_input_gate(self):
        """c = x_i, where x_i is the next public input.

        Public-input rows must come before every other gate because the
        verifier places public value i at row i.

        Raises:
            ValueError: a non public-input gate was already added
        """
        if len(self.gates) != self.num_public_inputs:
            raise ValueError("public input gates must precede all other gates")
        self.num_public_inputs += 1
        return self.add_gate(0, 0, 1, 0, 0)

    def add_copy_constraint(self, gate1, wire1, gate2, wire2):
        """Require gate1.wire1 == gate2.wire2.

        >>> circuit.add_copy_constraint(0, 2, 1, 0)  # gate0.c == gate1.a
        """
        self.copy_constraints.append((gate1, wire1, gate2, wire2))

    def get_selector_polynomials(self):
        """Return the selector columns (q_L, q_R, q_O, q_M, q_C) as FR lists."""
        q_l = [g.q_l for g in self.gates]
        q_r = [g.q_r for g in self.gates]
        q_o = [g.q_o for g in self.gates]
        q_m = [g.q_m for g in self.gates]
        q_c = [g.q_c for g in self.gates]
        return q_l, q_r, q_o, q_m, q_c

    def build_copy_constraints(self):
        """Build the wiring permutation σ over the 3n wire positions.

        Position numbering: a_i = i, b_i = n + i, c_i = 2n + i.

        Each constraint merges the cycles of its two positions by swapping
        their successors. Swapping merges only when the two positions sit in
        different cycles, so every constraint should link a fresh position
        to one already wired (CircuitBuilder always does).

        Returns:
            list[int]: sigma of length 3n
        """
        n = self.n
        sigma = list(range(3 * n))

        for g1, w1, g2, w2 in self.copy_constraints:
            pos1 = w1 * n + g1
            pos2 = w2 * n + g2
            sigma[pos1], sigma[pos2] = sigma[pos2], sigma[pos1]

        return sigma

    def public_input_evaluations(self, public_inputs, n=None):
        """Evaluations of PI over the (padded) domain: -x_i on row i, else 0."""
        if n is None:
            n = self.n
        evals = [FR(0)] * n
        for i, val in enumerate(public_inputs):
            evals[i] = FR(0) - (val if isinstance(val, FR) else FR(val))
        return evals

    def check_witness(self, a_vals, b_vals, c_vals, public_inputs=()):
        """Return True when every gate and every copy constraint holds."""
        if len(public_inputs) != self.num_public_inputs:
            return False
        pi = self.public_input_evaluations(public_inputs, len(self.gates))
        for i, gate in enumerate(self.gates):
            if not gate.check(a_vals[i], b_vals[i], c_vals[i], pi[i]):
                return False
        wires = (a_vals, b_vals, c_vals)
        for g1, w1, g2, w2 in self.copy_constraints:
            if FR(wires[w1][g1]) != FR(wires[w2][g2]):
                return False
        return True

    @staticmethod
    def x3_plus_x_plus_5_eq_35():
        """Toy circuit proving knowledge of x with x³ + x + 5 = 35 (x = 3).

          row 0 (public): c = 35
          row 1 (mul):    x · x   = x²
          row 2 (mul):    x² · x  = x³
          row 3 (add):    x³ + x  = x³+x
          row 4 (add+5):  (x³+x) + 5 = 35

        Returns:
            tuple: (circuit, a_vals, b_vals, c_vals, public_inputs)
        """
        circuit = Circuit()

        circuit.add_public_input_gate()
        circuit.add_multiplication_gate()
        circuit.add_multiplication_gate()
        circuit.add_addition_gate()
        circuit.add_constant_gate(5)

        # x at 1.a, 1.b, 2.b, 3.b
        circuit.add_copy_constraint(1, 0, 1, 1)
        circuit.add_copy_constraint(1, 0, 2, 1)
        circuit.add_copy_constraint(1, 0, 3, 1)
        # x²
        circuit.add_copy_constraint(1, 2, 2, 0)
        # x³
        circuit.add_copy_constraint(2, 2, 3, 0)
        # x³+x
        circuit.add_copy_constraint(3, 2, 4, 0)
        # the result equals the public output
        circuit.add_copy_constraint(0, 2, 4, 2)

        x = FR(3)
        x2 = x * x
        x3 = x2 * x
        x3_plus_x = x3 + x
        result = x3_plus_x + FR(5)

        a_vals = [FR(0), x, x2, x3, x3_plus_x]
        b_vals = [FR(0), x, x, x, FR(0)]
        c_vals = [result, x2, x3, x3_plus_x, result]

        public_inputs = [FR(35)]

        return circuit, a_vals, b_vals, c_vals, public_inputs
