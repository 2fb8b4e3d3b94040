import numbers

import jax.numpy as jnp
from loguru import logger

from .exceptions import (
    NurbsEvaluationError,
    InvalidDerivativeOrderError,
    InvalidDimensionError,
    InvalidTopologyError,
    NonPositiveWeightError,
)


def is_valid_relation(degree, num_knots, num_ctrl_pts):
    """
    Check the relation between degree, number of knots and number of control points.

    A NURBS of degree `p` with `n+1` control points requires `r+1 = n+p+2` knots.

    Parameters
    ----------
    degree : int
        Degree of the basis polynomials.
    num_knots : int
        Number of knot values.
    num_ctrl_pts : int
        Number of control points along the direction of the knot vector.

    Returns
    -------
    valid : bool
        Whether the relationship holds.
    """
    return num_knots == num_ctrl_pts + degree + 1


def _fail(error_class, message):
    logger.error(f"[NURBS] {message}")
    raise error_class(message)


def check_degree(p, name="degree"):
    if isinstance(p, bool) or not isinstance(p, numbers.Integral):
        _fail(InvalidTopologyError, f"{name} must be a scalar integer, got {p!r}")
    if p < 0:
        _fail(InvalidTopologyError, f"{name} must be non-negative, got {p}")


def check_derivative_order(num_ders):
    if isinstance(num_ders, bool) or not isinstance(num_ders, numbers.Integral):
        _fail(InvalidDerivativeOrderError, f"num_ders must be a scalar integer, got {num_ders!r}")
    if num_ders < 0:
        _fail(InvalidDerivativeOrderError, f"num_ders must be non-negative, got {num_ders}")


def check_knot_vector(U, p, num_ctrl_pts, direction="u"):
    U = jnp.asarray(U)
    if U.ndim != 1:
        _fail(InvalidTopologyError, f"{direction}-knots must be 1D (r+1,)")
    if not is_valid_relation(p, U.shape[0], num_ctrl_pts):
        _fail(
            InvalidTopologyError,
            f"{direction}-knot vector length {U.shape[0]} does not match "
            f"n+p+2={num_ctrl_pts + p + 1} (n+1={num_ctrl_pts} control points, degree p={p})",
        )
    if jnp.any(jnp.diff(U) < 0):
        _fail(InvalidTopologyError, f"{direction}-knot vector must be non-decreasing")
    if U[p] == U[num_ctrl_pts]:
        _fail(InvalidTopologyError, f"{direction}-knot vector has no span of non-zero width")


def check_weights(W, net_shape):
    W = jnp.asarray(W)
    if W.shape != tuple(net_shape):
        _fail(
            NonPositiveWeightError,
            f"Mismatch between the control net {tuple(net_shape)} and the weights {W.shape}",
        )
    if not bool(jnp.all(jnp.isfinite(W) & (W > 0.0))):
        _fail(NonPositiveWeightError, "All the weights must be finite and strictly positive")


def check_curve_inputs(P, p, U, W=None):
    """Validate the arguments of a curve evaluation before any computation takes place."""
    P = jnp.asarray(P)
    if P.ndim != 2:
        _fail(InvalidTopologyError, "control_points must have shape (ndim, n+1)")
    check_degree(p)
    check_knot_vector(U, p, P.shape[1])
    if W is not None:
        check_weights(W, P.shape[1:])


def check_surface_inputs(P, p, q, U, V, W=None):
    """Validate the arguments of a surface evaluation before any computation takes place."""
    P = jnp.asarray(P)
    if P.ndim != 3:
        _fail(InvalidTopologyError, "control_points must have shape (ndim, n+1, m+1)")
    check_degree(p, "degree_u")
    check_degree(q, "degree_v")
    check_knot_vector(U, p, P.shape[1], direction="u")
    check_knot_vector(V, q, P.shape[2], direction="v")
    if W is not None:
        check_weights(W, P.shape[1:])


def check_spatial_dimension(ndim, allowed, quantity):
    """Check that `ndim` spatial coordinates are supported when computing `quantity`."""
    if ndim not in allowed:
        _fail(
            InvalidDimensionError,
            f"The {quantity} is only defined for {' or '.join(str(d) for d in allowed)} dimensions, got {ndim}",
        )


def check_point_dimension(Q, ndim):
    """Check that the point `Q` has as many coordinates as the control points."""
    if Q.shape[0] != ndim:
        _fail(InvalidDimensionError, f"Point has {Q.shape[0]} coordinates but the curve has {ndim}")


def check_quadrature_order(n_points):
    """Check that `n_points` is a valid order for the closed Clenshaw-Curtis rule."""
    if isinstance(n_points, bool) or not isinstance(n_points, numbers.Integral) or n_points <= 0 or n_points % 4:
        _fail(NurbsEvaluationError, f"n_points must be a positive multiple of 4, got {n_points!r}")
