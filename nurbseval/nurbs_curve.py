import jax
import jax.numpy as jnp
from loguru import logger

from .homogeneous import binomial_coeff, to_cartesian, to_homogeneous, truncate_homogeneous
from .nurbs_basis_functions import compute_basis_derivatives, compute_basis_values, find_span
from .validation import check_curve_inputs, check_derivative_order


# ----------------------------------------------------------- #
# Single parameter kernels
# ----------------------------------------------------------- #
def _bspline_point_single_u(P, p, U, u):
    """Evaluate a polynomial B-spline curve at a single scalar u (Algorithm A3.1)."""

    # Find the span and the corresponding non-zero basis functions
    span = find_span(p, U, u)
    N = compute_basis_values(p, span, U, u)

    # Weighted sum of the p+1 control points P[span-p], ..., P[span]
    P_local = jax.lax.dynamic_slice_in_dim(P, span - p, p + 1, axis=1)
    return P_local @ N


def _bspline_derivatives_single_u(P, p, U, u, num_ders):
    """Evaluate the derivatives of a polynomial B-spline curve at a single scalar u (Algorithm A3.2)."""

    # Find the span and the corresponding basis function derivatives
    span = find_span(p, U, u)
    N_ders = compute_basis_derivatives(p, span, U, u, num_ders)
    P_local = jax.lax.dynamic_slice_in_dim(P, span - p, p + 1, axis=1)

    # Derivatives of order higher than the degree are zero
    du = min(num_ders, p)
    ders = jnp.zeros((num_ders + 1, P.shape[0]), dtype=P.dtype)
    return ders.at[: du + 1].set(N_ders[: du + 1] @ P_local.T)


# ----------------------------------------------------------- #
# Standalone functions to compute values
# ----------------------------------------------------------- #
def compute_bspline_coordinates(P, p, U, u):
    """
    Evaluate the coordinates of a B-spline curve for a given parameter `u`.

    This function computes the coordinates of a polynomial B-spline curve using
    the standard basis expansion (Equation 3.1 in The NURBS Book).
    Only the p+1 non-zero basis functions at each parameter value are evaluated
    and the scalar evaluation is vectorized over `u` with `jax.vmap`.

    Parameters
    ----------
    P : ndarray (ndim, n+1)
        Array of control point coordinates.
        The first dimension spans spatial coordinates `(x, y, z, ...)`,
        and the second spans the control points along the curve `(0, 1, ..., n)`.

    p : int
        Degree of the B-spline basis functions.

    U : ndarray (r+1 = n + p + 2,)
        Knot vector in the u-direction.

    u : scalar or ndarray (N,)
        Parametric coordinate(s) at which to evaluate the curve.

    Returns
    -------
    C : ndarray (ndim, N)
        Coordinates of the evaluated B-spline curve points.
        The first dimension spans the spatial coordinates,
        and the second spans the parametric evaluation points `u`.

    Notes
    -----
    - The inputs are not validated. Use `curve_point` for the checked entry point.
    - For rational curves (NURBS), use `compute_nurbs_coordinates` instead.
    """
    P = jnp.asarray(P, dtype=jnp.float64)
    U = jnp.asarray(U, dtype=jnp.float64)
    u = jnp.atleast_1d(jnp.asarray(u, dtype=U.dtype))

    # Shape (N, ndim) transposed to (ndim, N)
    C = jax.vmap(lambda uu: _bspline_point_single_u(P, p, U, uu))(u)
    return jnp.transpose(C)

# Apply JIT compilation
compute_bspline_coordinates = jax.jit(
    compute_bspline_coordinates,
    static_argnames=('p',),
)


def compute_nurbs_coordinates(P, W, p, U, u):
    """
    Evaluate the coordinates of a NURBS (Non-Uniform Rational B-Spline) curve for a given parameter `u`.

    This function computes the coordinates of the NURBS curve in *homogeneous space* using
    the standard B-spline basis and the control point weights (Equation 4.5 in The NURBS Book),
    and then maps them back to ordinary space via the rational perspective division (Equation 1.16).
    The implementation corresponds to Algorithm A4.1 from The NURBS Book.

    Parameters
    ----------
    P : ndarray (ndim, n+1)
        Array of control point coordinates.

    W : ndarray (n+1,)
        Weights associated with each control point.

    p : int
        Degree of the B-spline basis functions.

    U : ndarray (r+1 = n + p + 2,)
        Knot vector in the u-direction.

    u : scalar or ndarray (N,)
        Parametric coordinate(s) at which to evaluate the curve.

    Returns
    -------
    C : ndarray (ndim, N)
        Coordinates of the evaluated curve points.
    """
    # Map control points to homogeneous space and evaluate the polynomial curve there
    P_w = to_homogeneous(jnp.asarray(P, dtype=jnp.float64), W)
    C_w = compute_bspline_coordinates(P_w, p, U, u)

    # Project back to Euclidean space
    return to_cartesian(C_w)

# Apply JIT compilation
compute_nurbs_coordinates = jax.jit(
    compute_nurbs_coordinates,
    static_argnames=('p',),
)


# ----------------------------------------------------------- #
# Standalone functions to compute derivatives
# ----------------------------------------------------------- #
def compute_all_bspline_derivatives(P, p, U, u, up_to_order):
    """
    Compute all analytic derivatives of a polynomial B-spline curve up to a specified order.

    For each derivative order `k`, the derivative of the curve is given by

        C^(k)(u) = Σ_i P_i * d^k N_{i,p}(u) / du^k

    where the sum runs over the p+1 control points with non-zero basis functions.
    Derivatives of order higher than `p` are identically zero.

    Parameters
    ----------
    P : ndarray (ndim, n+1)
        Control point coordinates.
    p : int
        Degree of the B-spline.
    U : ndarray (n+p+2,)
        Knot vector.
    u : scalar or ndarray (Nu,)
        Parametric evaluation points.
    up_to_order : int
        Maximum derivative order to compute. Any non-negative integer is allowed.

    Returns
    -------
    bspline_derivatives : ndarray (up_to_order+1, ndim, Nu)
        Derivatives of the B-spline curve, where
        `bspline_derivatives[k, :, :] = d^k C(u) / du^k`.
    """
    P = jnp.asarray(P, dtype=jnp.float64)
    U = jnp.asarray(U, dtype=jnp.float64)
    u = jnp.atleast_1d(jnp.asarray(u, dtype=U.dtype))

    ders = jax.vmap(lambda uu: _bspline_derivatives_single_u(P, p, U, uu, up_to_order))(u)

    # Transpose shape (Nu, up_to_order+1, ndim) to (up_to_order+1, ndim, Nu)
    return jnp.transpose(ders, (1, 2, 0))

# Apply JIT compilation
compute_all_bspline_derivatives = jax.jit(
    compute_all_bspline_derivatives,
    static_argnames=('p', 'up_to_order'),
)


def compute_all_nurbs_derivatives(P, W, p, U, u, up_to_order):
    """
    Compute all analytic derivatives of a NURBS curve up to a specified order.

    This function extends the polynomial B-spline derivative computation
    to rational NURBS curves by applying the quotient rule recursively,
    following Algorithm A4.2 from The NURBS Book (Piegl & Tiller, 2nd ed.):

        C^(k) = (A^(k) - Σ_{i=1..k} binom(k, i) * w^(i) * C^(k-i)) / w

    where A and w are the spatial and weight components of the curve in homogeneous space.
    The derivatives are filled in increasing order because each one depends on all the lower ones.

    Parameters
    ----------
    P : ndarray (ndim, n+1)
        Control point coordinates.

    W : ndarray (n+1,)
        Control point weights.

    p : int
        Degree of the NURBS.

    U : ndarray (n+p+2,)
        Knot vector.

    u : scalar or ndarray (Nu,)
        Parametric evaluation points.

    up_to_order : int
        Maximum derivative order to compute. Rational derivatives of order higher
        than the degree are in general not zero and are computed as well.

    Returns
    -------
    nurbs_derivatives : ndarray (up_to_order+1, ndim, Nu)
        Derivatives of the NURBS curve

    """
    # Map control points to homogeneous coordinates: P_w = (x*w, y*w, z*w, w)
    P_w = to_homogeneous(jnp.asarray(P, dtype=jnp.float64), W)

    # Compute all B-spline derivatives in homogeneous space → (up_to_order+1, ndim+1, Nu)
    bspline_derivatives = compute_all_bspline_derivatives(P_w, p, U, u, up_to_order)

    # Split spatial and weight components
    A_ders = jax.vmap(truncate_homogeneous)(bspline_derivatives)  # shape (up_to_order+1, ndim, Nu)
    w_ders = bspline_derivatives[:, -1:, :]  # shape (up_to_order+1, 1, Nu)

    # Zeroth derivative: C(u) = A0 / w0
    nurbs_derivatives = jnp.zeros_like(A_ders)
    nurbs_derivatives = nurbs_derivatives.at[0].set(A_ders[0] / w_ders[0])

    # Recursive computation for higher-order derivatives
    def outer_body(order, nurbs_derivatives):
        # Start with the corresponding derivative of A (homogeneous numerator)
        temp_num = A_ders[order]

        # Subtract recursive terms involving lower derivatives
        def inner_body(i, temp_num):
            coeff = binomial_coeff(order, i)
            return temp_num - coeff * w_ders[i] * nurbs_derivatives[order - i]

        temp_num = jax.lax.fori_loop(1, order + 1, inner_body, temp_num)

        # Divide by zeroth weight derivative to get ordinary-space derivative
        return nurbs_derivatives.at[order].set(temp_num / w_ders[0])

    return jax.lax.fori_loop(1, up_to_order + 1, outer_body, nurbs_derivatives)

# Apply JIT compilation
compute_all_nurbs_derivatives = jax.jit(
    compute_all_nurbs_derivatives,
    static_argnames=('p', 'up_to_order'),
)


# ----------------------------------------------------------- #
# Validated entry points
# ----------------------------------------------------------- #
def curve_point(P, p, U, u):
    """Evaluate a point on a non-rational B-spline curve after validating the inputs.

    Returns an array with shape (ndim, N), see `compute_bspline_coordinates`.
    """
    check_curve_inputs(P, p, U)
    logger.debug(f"[NURBS] B-spline curve point: degree={p}, control points={jnp.shape(P)[1]}")
    return compute_bspline_coordinates(P, int(p), U, u)


def curve_derivatives(P, p, U, u, num_ders):
    """Evaluate the derivatives of a non-rational B-spline curve after validating the inputs.

    Returns an array with shape (num_ders+1, ndim, N), see `compute_all_bspline_derivatives`.
    """
    check_curve_inputs(P, p, U)
    check_derivative_order(num_ders)
    logger.debug(f"[NURBS] B-spline curve derivatives: degree={p}, num_ders={num_ders}")
    return compute_all_bspline_derivatives(P, int(p), U, u, int(num_ders))


def rational_curve_point(P, W, p, U, u):
    """Evaluate a point on a rational NURBS curve after validating the inputs.

    Returns an array with shape (ndim, N), see `compute_nurbs_coordinates`.
    """
    check_curve_inputs(P, p, U, W)
    logger.debug(f"[NURBS] NURBS curve point: degree={p}, control points={jnp.shape(P)[1]}")
    return compute_nurbs_coordinates(P, W, int(p), U, u)


def rational_curve_derivatives(P, W, p, U, u, num_ders):
    """Evaluate the derivatives of a rational NURBS curve after validating the inputs.

    Returns an array with shape (num_ders+1, ndim, N), see `compute_all_nurbs_derivatives`.
    """
    check_curve_inputs(P, p, U, W)
    check_derivative_order(num_ders)
    logger.debug(f"[NURBS] NURBS curve derivatives: degree={p}, num_ders={num_ders}")
    return compute_all_nurbs_derivatives(P, W, int(p), U, u, int(num_ders))
