import jax
import jax.numpy as jnp
import numpy as np
import pytest

import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# Test surfaces
# -------------------------------------------------------------------------------------------------------------------- #
# Bilinear patch over the unit square, P[:, i, j] is the corner (i, j)
P_BILINEAR = jnp.array([
    [[0.0, 0.0], [1.0, 1.0]],
    [[0.0, 1.0], [0.0, 1.0]],
    [[0.0, 0.0], [0.0, 0.0]],
])
U_LINEAR = jnp.array([0.0, 0.0, 1.0, 1.0])

# Quarter of a cylinder with unit radius and height 2 (circle along u, extrusion along v)
P_CYLINDER = jnp.array([
    [[1.0, 1.0], [1.0, 1.0], [0.0, 0.0]],
    [[0.0, 0.0], [1.0, 1.0], [1.0, 1.0]],
    [[0.0, 2.0], [0.0, 2.0], [0.0, 2.0]],
])
W_CYLINDER = jnp.array([[1.0, 1.0], [1.0 / jnp.sqrt(2.0), 1.0 / jnp.sqrt(2.0)], [1.0, 1.0]])
U_ARC = jnp.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])

# Biquadratic x bicubic freeform patch with non-uniform weights
_rng = np.random.default_rng(seed=7)
P_FREEFORM = jnp.asarray(_rng.uniform(-1.0, 1.0, size=(3, 5, 6)))
W_FREEFORM = jnp.asarray(_rng.uniform(0.5, 2.0, size=(5, 6)))
U_FREEFORM = jnp.array([0.0, 0.0, 0.0, 0.3, 0.65, 1.0, 1.0, 1.0])
V_FREEFORM = jnp.array([0.0, 0.0, 0.0, 0.0, 0.4, 0.55, 1.0, 1.0, 1.0, 1.0])

U_SAMPLES = jnp.array([0.0, 0.12, 0.3, 0.5, 0.77, 1.0])
V_SAMPLES = jnp.array([0.0, 0.48, 0.9, 0.25, 0.55, 1.0])


# -------------------------------------------------------------------------------------------------------------------- #
# Scenarios
# -------------------------------------------------------------------------------------------------------------------- #
def test_bilinear_surface_point():
    S = nrb.surface_point(P_BILINEAR, 1, 1, U_LINEAR, U_LINEAR, 0.5, 0.5)
    assert S.shape == (3, 1)
    np.testing.assert_allclose(S[:, 0], [0.5, 0.5, 0.0], atol=1e-15)


def test_bilinear_surface_derivatives():
    ders = nrb.surface_derivatives(P_BILINEAR, 1, 1, U_LINEAR, U_LINEAR, 0.5, 0.5, 2)
    assert ders.shape == (3, 3, 3, 1)
    assert jnp.all(ders[2, :] == 0.0)
    assert jnp.all(ders[:, 2] == 0.0)
    np.testing.assert_allclose(ders[0, 0, :, 0], [0.5, 0.5, 0.0], atol=1e-15)
    np.testing.assert_allclose(ders[1, 0, :, 0], [1.0, 0.0, 0.0], atol=1e-15)
    np.testing.assert_allclose(ders[0, 1, :, 0], [0.0, 1.0, 0.0], atol=1e-15)
    np.testing.assert_allclose(ders[1, 1, :, 0], [0.0, 0.0, 0.0], atol=1e-15)


def test_bilinear_surface_with_unit_weights():
    S = nrb.rational_surface_point(P_BILINEAR, jnp.ones((2, 2)), 1, 1, U_LINEAR, U_LINEAR, 0.5, 0.5)
    np.testing.assert_allclose(S[:, 0], [0.5, 0.5, 0.0], atol=1e-15)


def test_cylinder_points_lie_on_cylinder():
    S = nrb.rational_surface_point(P_CYLINDER, W_CYLINDER, 2, 1, U_ARC, U_LINEAR, U_SAMPLES, V_SAMPLES)
    np.testing.assert_allclose(S[0] ** 2 + S[1] ** 2, 1.0, atol=1e-12)
    np.testing.assert_allclose(S[2], 2.0 * V_SAMPLES, atol=1e-14)


def test_parameters_are_broadcast():
    S = nrb.surface_point(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, 0.5)
    S_full = nrb.surface_point(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, jnp.full(U_SAMPLES.shape, 0.5))
    assert S.shape == (3, U_SAMPLES.size)
    np.testing.assert_allclose(S, S_full, atol=1e-15)


# -------------------------------------------------------------------------------------------------------------------- #
# Properties
# -------------------------------------------------------------------------------------------------------------------- #
def test_order_zero_matches_point():
    S = nrb.surface_point(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES)
    ders = nrb.surface_derivatives(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, 2)
    np.testing.assert_allclose(ders[0, 0], S, atol=1e-14)

    S = nrb.rational_surface_point(P_FREEFORM, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES)
    ders = nrb.rational_surface_derivatives(
        P_FREEFORM, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, 2
    )
    np.testing.assert_allclose(ders[0, 0], S, atol=1e-14)


@pytest.mark.parametrize("num_ders", [0, 1, 2, 4])
def test_unit_weights_match_polynomial_surface(num_ders):
    W = jnp.ones(P_FREEFORM.shape[1:])
    np.testing.assert_allclose(
        nrb.rational_surface_point(P_FREEFORM, W, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES),
        nrb.surface_point(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES),
        atol=1e-14,
    )
    np.testing.assert_allclose(
        nrb.rational_surface_derivatives(P_FREEFORM, W, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, num_ders),
        nrb.surface_derivatives(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, num_ders),
        atol=1e-9,
    )


def test_derivatives_above_degree_are_zero():
    ders = nrb.surface_derivatives(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, 5)
    assert ders.shape == (6, 6, 3, U_SAMPLES.size)
    assert jnp.all(ders[3:, :] == 0.0)
    assert jnp.all(ders[:, 4:] == 0.0)


@pytest.mark.parametrize("rational", [False, True])
def test_entries_above_total_order_are_zero(rational):
    num_ders = 3
    if rational:
        ders = nrb.rational_surface_derivatives(
            P_FREEFORM, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, num_ders
        )
    else:
        ders = nrb.surface_derivatives(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES, num_ders)
    for k in range(num_ders + 1):
        for l in range(num_ders + 1):
            if k + l > num_ders:
                assert jnp.all(ders[k, l] == 0.0)


def test_two_stage_reduction_matches_direct_sum():
    u, v = 0.41, 0.63
    ders = nrb.surface_derivatives(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, u, v, 3)

    span_u = nrb.find_span(2, U_FREEFORM, u)
    span_v = nrb.find_span(3, V_FREEFORM, v)
    Nu = nrb.compute_basis_derivatives(2, span_u, U_FREEFORM, u, 3)
    Nv = nrb.compute_basis_derivatives(3, span_v, V_FREEFORM, v, 3)
    P_local = P_FREEFORM[:, int(span_u) - 2 : int(span_u) + 1, int(span_v) - 3 : int(span_v) + 1]
    for k in range(3):
        for l in range(4 - k):
            expected = jnp.einsum("i,dij,j->d", Nu[k], P_local, Nv[l])
            np.testing.assert_allclose(ders[k, l, :, 0], expected, atol=1e-12)


def test_point_is_invariant_under_translation():
    shift = jnp.array([3.0, -1.5, 0.25])[:, None, None]
    S = nrb.rational_surface_point(P_FREEFORM, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES)
    S_shift = nrb.rational_surface_point(
        P_FREEFORM + shift, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES
    )
    np.testing.assert_allclose(S_shift, S + shift[:, :, 0], atol=1e-13)

    S = nrb.surface_point(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES)
    S_shift = nrb.surface_point(P_FREEFORM + shift, 2, 3, U_FREEFORM, V_FREEFORM, U_SAMPLES, V_SAMPLES)
    np.testing.assert_allclose(S_shift, S + shift[:, :, 0], atol=1e-13)


def test_cylinder_mixed_derivatives():
    # S(u, v) = (c(u), 2v) so every mixed partial derivative vanishes
    ders = nrb.rational_surface_derivatives(P_CYLINDER, W_CYLINDER, 2, 1, U_ARC, U_LINEAR, U_SAMPLES, V_SAMPLES, 3)
    np.testing.assert_allclose(ders[0, 1], jnp.array([[0.0], [0.0], [2.0]]) * jnp.ones(U_SAMPLES.size), atol=1e-12)
    for k, l in [(1, 1), (2, 1), (1, 2), (0, 2), (0, 3)]:
        np.testing.assert_allclose(ders[k, l], 0.0, atol=1e-10)


# -------------------------------------------------------------------------------------------------------------------- #
# Analytic derivatives against automatic differentiation
# -------------------------------------------------------------------------------------------------------------------- #
def _autodiff_surface_derivative(fun, k, l):
    f = lambda uu, vv: fun(uu, vv)[:, 0]
    for _ in range(k):
        f = jax.jacfwd(f, argnums=0)
    for _ in range(l):
        f = jax.jacfwd(f, argnums=1)
    return f


@pytest.mark.parametrize("u, v", [(0.15, 0.2), (0.41, 0.63), (0.8, 0.47)])
def test_bspline_surface_derivatives_against_autodiff(u, v):
    u, v = jnp.asarray(u), jnp.asarray(v)
    ders = nrb.surface_derivatives(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, u, v, 3)
    fun = lambda uu, vv: nrb.compute_bspline_surface_coordinates(P_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, uu, vv)
    for k in range(4):
        for l in range(4 - k):
            expected = _autodiff_surface_derivative(fun, k, l)(u, v)
            np.testing.assert_allclose(ders[k, l, :, 0], expected, rtol=1e-8, atol=1e-8)


@pytest.mark.parametrize("u, v", [(0.15, 0.2), (0.41, 0.63), (0.8, 0.47)])
def test_nurbs_surface_derivatives_against_autodiff(u, v):
    u, v = jnp.asarray(u), jnp.asarray(v)
    ders = nrb.rational_surface_derivatives(P_FREEFORM, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, u, v, 3)
    fun = lambda uu, vv: nrb.compute_nurbs_surface_coordinates(
        P_FREEFORM, W_FREEFORM, 2, 3, U_FREEFORM, V_FREEFORM, uu, vv
    )
    for k in range(4):
        for l in range(4 - k):
            expected = _autodiff_surface_derivative(fun, k, l)(u, v)
            np.testing.assert_allclose(ders[k, l, :, 0], expected, rtol=1e-8, atol=1e-8)
