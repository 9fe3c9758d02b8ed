"""
PLONK prover round 4: evaluations at ζ
======================================

Opens ā = a(ζ), b̄, c̄, s̄_σ1 = S_σ1(ζ), s̄_σ2 and z̄_ω = z(ζω). z(ζ) itself
stays inside the linearisation of round 5.
"""


def execute(state):
    state.zeta = state.transcript.challenge_scalar(b"zeta")
    zeta = state.zeta
    pp = state.preprocessed
    proof = state.proof

    proof.a_eval = state.a_poly.evaluate(zeta)
    proof.b_eval = state.b_poly.evaluate(zeta)
    proof.c_eval = state.c_poly.evaluate(zeta)
    proof.s_sigma1_eval = pp.s_sigma1_poly.evaluate(zeta)
    proof.s_sigma2_eval = pp.s_sigma2_poly.evaluate(zeta)
    proof.z_omega_eval = state.z_poly.evaluate(zeta * state.omega)

    state.transcript.append_scalar(b"a_eval", proof.a_eval)
    state.transcript.append_scalar(b"b_eval", proof.b_eval)
    state.transcript.append_scalar(b"c_eval", proof.c_eval)
    state.transcript.append_scalar(b"s_sigma1_eval", proof.s_sigma1_eval)
    state.transcript.append_scalar(b"s_sigma2_eval", proof.s_sigma2_eval)
    state.transcript.append_scalar(b"z_omega_eval", proof.z_omega_eval)
