import jax.numpy as jnp
import numpy as np
import pytest

import nurbseval as nrb


# Quarter of a circle with radius 2
R = 2.0
P_ARC = R * jnp.array([[1.0, 1.0, 0.0], [0.0, 1.0, 1.0]])
W_ARC = jnp.array([1.0, 1.0 / jnp.sqrt(2.0), 1.0])
U_ARC = jnp.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])

# Straight segment with collinear, unevenly spaced control points
P_LINE = jnp.array([[0.0, 1.0, 3.0], [0.0, 2.0, 6.0], [0.0, -2.0, -6.0]])
U_LINE = jnp.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])

u = jnp.linspace(0.0, 1.0, 21)


def test_circle_tangent():
    C = nrb.rational_curve_point(P_ARC, W_ARC, 2, U_ARC, u)
    t = nrb.compute_curve_tangent(P_ARC, W_ARC, 2, U_ARC, u)
    np.testing.assert_allclose(jnp.linalg.norm(t, axis=0), 1.0, atol=1e-12)
    np.testing.assert_allclose(t, jnp.stack((-C[1], C[0])) / R, atol=1e-12)


def test_circle_curvature():
    curvature = nrb.compute_curve_curvature(P_ARC, W_ARC, 2, U_ARC, u)
    assert curvature.shape == (u.size,)
    np.testing.assert_allclose(curvature, 1.0 / R, rtol=1e-10)


def test_circle_arclength():
    L = nrb.compute_curve_arclength(P_ARC, W_ARC, 2, U_ARC)
    assert float(L) == pytest.approx(jnp.pi * R / 2, rel=1e-8)


@pytest.mark.parametrize("n_points", [24, 44])
def test_arclength_quadrature_order(n_points):
    L = nrb.compute_curve_arclength(P_ARC, W_ARC, 2, U_ARC, n_points=n_points)
    assert float(L) == pytest.approx(jnp.pi * R / 2, rel=1e-6)


@pytest.mark.parametrize("n_points", [41, 0, -4, 2.0])
def test_arclength_rejects_invalid_quadrature_order(n_points):
    with pytest.raises(nrb.NurbsEvaluationError):
        nrb.compute_curve_arclength(P_ARC, W_ARC, 2, U_ARC, n_points=n_points)


def test_arclength_of_partial_interval():
    L = nrb.compute_curve_arclength(P_LINE, None, 2, U_LINE, 0.0, 0.5)
    assert float(L) == pytest.approx(3.0 * (2.0 * 0.5 + 0.5**2), rel=1e-10)


def test_straight_line_without_weights():
    assert float(nrb.compute_curve_arclength(P_LINE, None, 2, U_LINE)) == pytest.approx(
        float(jnp.linalg.norm(P_LINE[:, -1])), rel=1e-10
    )
    np.testing.assert_allclose(nrb.compute_curve_curvature(P_LINE, None, 2, U_LINE, u), 0.0, atol=1e-10)


@pytest.mark.parametrize("theta", [0.1, jnp.pi / 5, jnp.pi / 3, 1.4])
def test_project_point_to_circle(theta):
    Q = 3.0 * jnp.array([jnp.cos(theta), jnp.sin(theta)])
    u_star = nrb.project_point_to_curve(P_ARC, W_ARC, 2, U_ARC, Q)
    assert 0.0 <= float(u_star) <= 1.0
    C = nrb.rational_curve_point(P_ARC, W_ARC, 2, U_ARC, u_star)
    np.testing.assert_allclose(C[:, 0], R * jnp.array([jnp.cos(theta), jnp.sin(theta)]), atol=1e-8)


def test_project_point_beyond_the_end_is_clamped():
    u_star = nrb.project_point_to_curve(P_ARC, W_ARC, 2, U_ARC, jnp.array([-1.0, 3.0]))
    assert float(u_star) == pytest.approx(1.0, abs=1e-12)


def test_project_point_with_wrong_dimension():
    messages = []
    handler_id = nrb.enable_logging("ERROR", sink=messages.append)
    try:
        with pytest.raises(nrb.InvalidDimensionError):
            nrb.project_point_to_curve(P_ARC, W_ARC, 2, U_ARC, jnp.array([1.0, 1.0, 1.0]))
    finally:
        nrb.disable_logging(handler_id)
    assert any("[NURBS]" in message and "3 coordinates" in message for message in messages)


def test_project_point_on_unclamped_curve_stays_in_domain():
    # Uniform knots: the parametric domain is [U[2], U[4]] = [2, 4] and C(u) = (u - 1.5, 0)
    P = jnp.array([[0.0, 1.0, 2.0, 3.0], [0.0, 0.0, 0.0, 0.0]])
    U = jnp.arange(7.0)
    u_star = nrb.project_point_to_curve(P, None, 2, U, jnp.array([-5.0, 0.0]))
    assert float(u_star) == pytest.approx(2.0, abs=1e-12)
    u_star = nrb.project_point_to_curve(P, None, 2, U, jnp.array([1.25, 1.0]))
    assert float(u_star) == pytest.approx(2.75, abs=1e-8)


def test_curvature_requires_at_most_three_dimensions():
    with pytest.raises(nrb.InvalidDimensionError):
        nrb.compute_curve_curvature(jnp.zeros((4, 3)), None, 2, U_ARC, u)


def test_cylinder_normal():
    P = jnp.array([
        [[1.0, 1.0], [1.0, 1.0], [0.0, 0.0]],
        [[0.0, 0.0], [1.0, 1.0], [1.0, 1.0]],
        [[0.0, 1.0], [0.0, 1.0], [0.0, 1.0]],
    ])
    W = jnp.array([[1.0, 1.0], [1.0 / jnp.sqrt(2.0), 1.0 / jnp.sqrt(2.0)], [1.0, 1.0]])
    U = jnp.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
    V = jnp.array([0.0, 0.0, 1.0, 1.0])
    v = jnp.linspace(0.0, 1.0, u.size)

    S = nrb.rational_surface_point(P, W, 2, 1, U, V, u, v)
    normal = nrb.compute_surface_normal(P, W, 2, 1, U, V, u, v)
    np.testing.assert_allclose(normal, jnp.stack((S[0], S[1], jnp.zeros_like(S[2]))), atol=1e-12)


def test_surface_normal_requires_three_dimensions():
    P = jnp.zeros((2, 2, 2))
    U = jnp.array([0.0, 0.0, 1.0, 1.0])
    with pytest.raises(nrb.InvalidDimensionError):
        nrb.compute_surface_normal(P, None, 1, 1, U, U, 0.5, 0.5)
