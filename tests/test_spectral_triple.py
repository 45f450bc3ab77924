"""Tests for construction, validation and the Dirac operator."""
import numpy as np
import pytest

from connes import (
    ConnesError,
    NonPositiveEpsilon,
    NotSquare,
    RowSumsNotOne,
    RowSumsNotZero,
    SpectralTriple,
    StationaryNonPositive,
    StationaryNotNormalized,
    stationary_from_null_space,
)


# ---------------------------------------------------------------------------
# Construction and validation
# ---------------------------------------------------------------------------

class TestConstruction:

    def test_new_accepts_valid_inputs(self, two_state_generator):
        st = SpectralTriple(two_state_generator, [0.25, 0.75], 1e-3)
        assert st.n == 2
        assert len(st) == 2
        assert st.epsilon == 1e-3
        np.testing.assert_allclose(st.stationary, [0.25, 0.75])

    def test_non_square_generator(self):
        with pytest.raises(NotSquare) as exc:
            SpectralTriple.from_generator(np.zeros((2, 3)), 1e-3)
        assert exc.value.rows == 2
        assert exc.value.cols == 3
        assert "2x3" in str(exc.value)

    def test_non_square_transition(self):
        with pytest.raises(NotSquare):
            SpectralTriple.from_transition(np.full((3, 2), 0.5), 1e-3)

    def test_vector_input_is_not_square(self):
        with pytest.raises(NotSquare):
            SpectralTriple.from_transition([1.0, 0.0], 1e-3)

    def test_generator_row_sums(self):
        L = np.array([[-0.3, 0.2], [0.1, -0.1]])
        with pytest.raises(RowSumsNotZero) as exc:
            SpectralTriple.from_generator(L, 1e-3)
        assert exc.value.max_abs == pytest.approx(0.1)

    def test_generator_row_sums_within_tolerance(self, two_state_generator):
        L = two_state_generator.copy()
        L[0, 0] += 5e-10
        st = SpectralTriple.from_generator(L, 1e-3)
        assert st.n == 2

    def test_transition_row_sums(self, preset_p):
        P = preset_p.copy()
        P[1, 1] = 0.5
        with pytest.raises(RowSumsNotOne) as exc:
            SpectralTriple.from_transition(P, 1e-3)
        assert exc.value.max_abs == pytest.approx(0.44)

    def test_generator_passed_as_transition(self, two_state_generator):
        with pytest.raises(RowSumsNotOne):
            SpectralTriple.from_transition(two_state_generator, 1e-3)

    @pytest.mark.parametrize("eps", [0.0, -1e-3, float("nan")])
    def test_non_positive_epsilon(self, preset_p, eps):
        with pytest.raises(NonPositiveEpsilon):
            SpectralTriple.from_transition(preset_p, eps)

    def test_non_positive_epsilon_payload(self, two_state_generator):
        with pytest.raises(NonPositiveEpsilon) as exc:
            SpectralTriple(two_state_generator, [0.25, 0.75], -2.0)
        assert exc.value.value == -2.0

    def test_stationary_non_positive(self, two_state_generator):
        with pytest.raises(StationaryNonPositive):
            SpectralTriple(two_state_generator, [0.0, 1.0], 1e-3)

    def test_stationary_not_normalized(self, two_state_generator):
        with pytest.raises(StationaryNotNormalized) as exc:
            SpectralTriple(two_state_generator, [0.5, 0.6], 1e-3)
        assert exc.value.sum == pytest.approx(1.1)

    def test_stationary_length_mismatch(self, two_state_generator):
        with pytest.raises(NotSquare):
            SpectralTriple(two_state_generator, [0.2, 0.3, 0.5], 1e-3)

    def test_first_violated_invariant_wins(self):
        # Bad generator and bad epsilon: the generator is checked first
        with pytest.raises(RowSumsNotZero):
            SpectralTriple([[1.0, 0.0], [0.0, 1.0]], [0.5, 0.5], 0.0)

    def test_errors_share_base_class(self):
        for err in (NotSquare(1, 2), RowSumsNotZero(0.1), RowSumsNotOne(0.1),
                    StationaryNonPositive(), StationaryNotNormalized(2.0),
                    NonPositiveEpsilon(0.0)):
            assert isinstance(err, ConnesError)
            assert isinstance(err, ValueError)

    def test_triple_is_read_only(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        with pytest.raises(ValueError):
            st.generator[0, 0] = 1.0
        with pytest.raises(ValueError):
            st.stationary[0] = 1.0
        with pytest.raises(AttributeError):
            st.epsilon = 1.0

    def test_inputs_are_copied(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        before = st.generator.copy()
        preset_p[0, 0] = 0.0
        np.testing.assert_array_equal(st.generator, before)


# ---------------------------------------------------------------------------
# Stationary distribution
# ---------------------------------------------------------------------------

class TestStationary:

    def test_recovers_preset_distribution(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        expected = np.array([2.0, 5.0, 4.0]) / 11.0
        err = np.abs(st.stationary - expected).sum()
        assert err < 1e-2, f"L1 error too large: {err}"

    def test_preset_is_accurate(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        np.testing.assert_allclose(st.stationary, [2 / 11, 5 / 11, 4 / 11], atol=1e-10)

    def test_generator_from_transition(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        np.testing.assert_allclose(st.generator, preset_p - np.eye(3))

    def test_from_generator(self, two_state_generator):
        st = SpectralTriple.from_generator(two_state_generator, 1e-3)
        np.testing.assert_allclose(st.stationary, [0.25, 0.75], atol=1e-10)

    def test_stationary_is_invariant(self):
        from numerics.chains import random_stochastic
        P = random_stochastic(6, seed=7)
        st = SpectralTriple.from_transition(P, 1e-3)
        np.testing.assert_allclose(st.stationary @ P, st.stationary, atol=1e-10)
        assert st.stationary.sum() == pytest.approx(1.0, abs=1e-12)

    def test_null_space_sign_is_irrelevant(self, two_state_generator):
        pi_a = stationary_from_null_space(two_state_generator.T)
        pi_b = stationary_from_null_space(-two_state_generator.T)
        np.testing.assert_allclose(pi_a, pi_b, atol=1e-12)
        assert np.all(pi_a > 0)

    def test_negative_null_vector_is_oriented(self, monkeypatch):
        # All-negative singular vector: flooring alone would give uniform
        v = -np.array([1.0, 3.0]) / np.sqrt(10.0)
        fake_vh = np.array([[v[1], -v[0]], v])

        def fake_svd(A):
            return np.eye(2), np.array([1.0, 0.0]), fake_vh

        monkeypatch.setattr('connes.spectral_triple.svd', fake_svd)
        pi = stationary_from_null_space(np.zeros((2, 2)))
        np.testing.assert_allclose(pi, [0.25, 0.75], atol=1e-12)

    def test_reducible_chain_stays_positive(self):
        # Absorbing state: raw null vector has exact zeros, floored to 1e-15
        P = np.array([[0.5, 0.5], [0.0, 1.0]])
        st = SpectralTriple.from_transition(P, 1e-3)
        assert np.all(st.stationary > 0)
        assert st.stationary[1] == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Symmetrization and Dirac operator
# ---------------------------------------------------------------------------

class TestDiracOperator:

    def test_symmetrized_generator_is_symmetric(self):
        from numerics.chains import random_stochastic
        st = SpectralTriple.from_transition(random_stochastic(5, seed=3), 1e-3)
        Ls = st.symmetrized_generator()
        np.testing.assert_allclose(Ls, Ls.T, atol=1e-14)

    def test_symmetrization_of_reversible_chain(self, preset_p):
        # Birth-death chains satisfy detailed balance, so Π^½ L Π^-½ is
        # already symmetric and equals L_sym
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        s = np.sqrt(st.stationary)
        expected = np.diag(s) @ st.generator @ np.diag(1 / s)
        np.testing.assert_allclose(st.symmetrized_generator(), expected, atol=1e-12)

    def test_symmetrization_of_symmetric_generator(self):
        L = np.array([[-0.2, 0.1, 0.1], [0.1, -0.3, 0.2], [0.1, 0.2, -0.3]])
        st = SpectralTriple(L, np.full(3, 1 / 3), 1e-3)
        np.testing.assert_allclose(st.symmetrized_generator(), L, atol=1e-14)

    def test_dirac_is_symmetric(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        D = st.compute_dirac_operator()
        np.testing.assert_allclose(D, D.T, rtol=0, atol=1e-10)

    def test_dirac_is_symmetric_for_irreversible_chain(self):
        from numerics.chains import random_stochastic
        st = SpectralTriple.from_transition(random_stochastic(8, seed=11), 0.05)
        D = st.compute_dirac_operator()
        np.testing.assert_allclose(D, D.T, rtol=0, atol=1e-10)

    def test_eigenvalues_ascending_with_stationary_mode(self, preset_p):
        st = SpectralTriple.from_transition(preset_p, 1e-3)
        eigs = st.eigenvalues()
        assert np.all(np.diff(eigs) >= 0)
        assert abs(eigs[0]) < 1e-10
        # Birth-death chain: spectrum of I - P is {0, 0.05, 0.11}
        np.testing.assert_allclose(eigs, [0.0, 0.05, 0.11], atol=1e-10)

    def test_stationary_mode_is_amplified(self, preset_p):
        eps = 1e-3
        st = SpectralTriple.from_transition(preset_p, eps)
        D = st.compute_dirac_operator()
        psi = np.sqrt(st.stationary)
        np.testing.assert_allclose(D @ psi, psi / eps, rtol=1e-6)

    def test_dirac_is_resolvent(self, preset_p):
        # With a non-negative spectrum, D = (εI - L_sym)^-1
        eps = 0.5
        st = SpectralTriple.from_transition(preset_p, eps)
        expected = np.linalg.inv(eps * np.eye(3) - st.symmetrized_generator())
        np.testing.assert_allclose(st.compute_dirac_operator(), expected, atol=1e-10)

    def test_dirac_is_deterministic(self, preset_p):
        a = SpectralTriple.from_transition(preset_p, 1e-3).compute_dirac_operator()
        b = SpectralTriple.from_transition(preset_p, 1e-3).compute_dirac_operator()
        np.testing.assert_array_equal(a, b)
