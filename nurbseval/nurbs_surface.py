import jax
import jax.numpy as jnp
from loguru import logger

from .homogeneous import binomial_coeff, to_cartesian, to_homogeneous, truncate_homogeneous
from .nurbs_basis_functions import compute_basis_derivatives, compute_basis_values, find_span
from .validation import check_derivative_order, check_surface_inputs


# ----------------------------------------------------------- #
# Single parameter kernels
# ----------------------------------------------------------- #
def _local_control_net(P, p, q, span_u, span_v):
    """Slice the (p+1) x (q+1) control points that influence the spans (span_u, span_v)."""
    return jax.lax.dynamic_slice(
        P, (jnp.zeros_like(span_u), span_u - p, span_v - q), (P.shape[0], p + 1, q + 1)
    )


def _bspline_surface_point_single_uv(P, p, q, U, V, u, v):
    """Evaluate a polynomial B-spline surface at a single (u, v) pair (Algorithm A3.5)."""

    # Find the spans and the non-zero basis functions in each direction
    span_u = find_span(p, U, u)
    span_v = find_span(q, V, v)
    Nu = compute_basis_values(p, span_u, U, u)
    Nv = compute_basis_values(q, span_v, V, v)

    # S = Σ_i Σ_j N_i,p(u) * N_j,q(v) * P_ij
    P_local = _local_control_net(P, p, q, span_u, span_v)
    return jnp.einsum("i,dij,j->d", Nu, P_local, Nv)


def _bspline_surface_derivatives_single_uv(P, p, q, U, V, u, v, num_ders):
    """Evaluate the partial derivatives of a polynomial B-spline surface at a single (u, v) pair (Algorithm A3.6)."""

    # Find the spans and the basis function derivatives in each direction
    span_u = find_span(p, U, u)
    span_v = find_span(q, V, v)
    Nu_ders = compute_basis_derivatives(p, span_u, U, u, num_ders)
    Nv_ders = compute_basis_derivatives(q, span_v, V, v, num_ders)
    P_local = _local_control_net(P, p, q, span_u, span_v)

    # Number of non-zero derivatives is <= degree
    du = min(num_ders, p)
    dv = min(num_ders, q)

    # Contract the u-direction once per order k, leaving q+1 vectors per row
    temp = jnp.einsum("kr,drs->kds", Nu_ders[: du + 1], P_local)  # (du+1, ndim, q+1)

    # Contract each row with the v-direction derivatives for k+l <= num_ders
    ders = jnp.zeros((num_ders + 1, num_ders + 1, P.shape[0]), dtype=P.dtype)
    for k in range(du + 1):
        dd = min(num_ders - k, dv)
        ders = ders.at[k, : dd + 1].set(Nv_ders[: dd + 1] @ temp[k].T)

    return ders


def _broadcast_parameters(u, v, dtype):
    u = jnp.atleast_1d(jnp.asarray(u, dtype=dtype))
    v = jnp.atleast_1d(jnp.asarray(v, dtype=dtype))
    return jnp.broadcast_arrays(u, v)


# ----------------------------------------------------------- #
# Standalone functions to compute values
# ----------------------------------------------------------- #
def compute_bspline_surface_coordinates(P, p, q, U, V, u, v):
    """
    Evaluate the coordinates of a polynomial B-spline surface for the input (u, v) parametrization.

    The surface is the tensor product expansion of Equation 3.11 in The NURBS Book.
    The parameters `u` and `v` are evaluated pairwise (they are broadcast against each other).

    Parameters
    ----------
    P : ndarray (ndim, n+1, m+1)
        Array of control point coordinates.
        The first dimension spans the coordinates of the control points `(x, y, z, ...)`.
        The second dimension spans the u-direction control points `(0, 1, ..., n)`.
        The third dimension spans the v-direction control points `(0, 1, ..., m)`.

    p, q : int
        Degree of the basis polynomials in the u- and v-directions.

    U : ndarray (r+1 = n + p + 2,)
        Knot vector in the u-direction.

    V : ndarray (s+1 = m + q + 2,)
        Knot vector in the v-direction.

    u, v : scalar or ndarray (N,)
        Parametric coordinates at which to evaluate the surface.

    Returns
    -------
    S : ndarray (ndim, N)
        Coordinates of the surface points.
    """
    P = jnp.asarray(P, dtype=jnp.float64)
    U = jnp.asarray(U, dtype=jnp.float64)
    V = jnp.asarray(V, dtype=jnp.float64)
    u, v = _broadcast_parameters(u, v, U.dtype)

    S = jax.vmap(lambda uu, vv: _bspline_surface_point_single_uv(P, p, q, U, V, uu, vv))(u, v)
    return jnp.transpose(S)

# Apply JIT compilation
compute_bspline_surface_coordinates = jax.jit(
    compute_bspline_surface_coordinates,
    static_argnames=('p', 'q'),
)


def compute_nurbs_surface_coordinates(P, W, p, q, U, V, u, v):
    """
    Evaluate the coordinates of a NURBS surface for the input (u, v) parametrization.

    The control net is lifted to homogeneous space, the polynomial surface is evaluated
    there and the result is projected back by the perspective division (Algorithm A4.3).

    Parameters
    ----------
    P : ndarray (ndim, n+1, m+1)
        Array of control point coordinates.
    W : ndarray (n+1, m+1)
        Array of control point weights.
    p, q, U, V, u, v
        See `compute_bspline_surface_coordinates`.

    Returns
    -------
    S : ndarray (ndim, N)
        Coordinates of the surface points.
    """
    P_w = to_homogeneous(jnp.asarray(P, dtype=jnp.float64), W)
    S_w = compute_bspline_surface_coordinates(P_w, p, q, U, V, u, v)
    return to_cartesian(S_w)

# Apply JIT compilation
compute_nurbs_surface_coordinates = jax.jit(
    compute_nurbs_surface_coordinates,
    static_argnames=('p', 'q'),
)


# ----------------------------------------------------------- #
# Standalone functions to compute derivatives
# ----------------------------------------------------------- #
def compute_all_bspline_surface_derivatives(P, p, q, U, V, u, v, up_to_order):
    """
    Compute the partial derivatives of a polynomial B-spline surface up to a specified order.

    Entry `[k, l]` holds the derivative of order `k` with respect to `u` and order `l`
    with respect to `v`. Only the entries with k + l <= up_to_order are computed, the
    remaining entries of the table are zero. Entries with k > p or l > q vanish identically.

    The control net is first reduced along the u-direction for each order k, and the
    resulting row of q+1 vectors is then reduced along the v-direction for each order l,
    so that the u-direction contraction is not repeated for every (k, l) pair.

    Parameters
    ----------
    P : ndarray (ndim, n+1, m+1)
        Array of control point coordinates.
    p, q : int
        Degree of the basis polynomials in the u- and v-directions.
    U, V : ndarray
        Knot vectors in the u- and v-directions.
    u, v : scalar or ndarray (N,)
        Parametric coordinates at which to evaluate the derivatives.
    up_to_order : int
        Maximum total derivative order k + l.

    Returns
    -------
    surface_derivatives : ndarray (up_to_order+1, up_to_order+1, ndim, N)
        Partial derivatives of the surface.
    """
    P = jnp.asarray(P, dtype=jnp.float64)
    U = jnp.asarray(U, dtype=jnp.float64)
    V = jnp.asarray(V, dtype=jnp.float64)
    u, v = _broadcast_parameters(u, v, U.dtype)

    ders = jax.vmap(
        lambda uu, vv: _bspline_surface_derivatives_single_uv(P, p, q, U, V, uu, vv, up_to_order)
    )(u, v)

    # Transpose shape (N, d+1, d+1, ndim) to (d+1, d+1, ndim, N)
    return jnp.transpose(ders, (1, 2, 3, 0))

# Apply JIT compilation
compute_all_bspline_surface_derivatives = jax.jit(
    compute_all_bspline_surface_derivatives,
    static_argnames=('p', 'q', 'up_to_order'),
)


def compute_all_nurbs_surface_derivatives(P, W, p, q, U, V, u, v, up_to_order):
    """
    Compute the partial derivatives of a NURBS surface up to a specified order.

    The derivatives of the homogeneous surface S_w = (A, w) are computed first. The rational
    derivatives are then recovered with the two-index generalization of the quotient rule
    (Algorithm A4.4 from The NURBS Book):

        S^(k,l) = (A^(k,l) - Σ_{j=1..l} binom(l,j) w^(0,j) S^(k,l-j)
                           - Σ_{i=1..k} binom(k,i) w^(i,0) S^(k-i,l)
                           - Σ_{i=1..k} binom(k,i) Σ_{j=1..l} binom(l,j) w^(i,j) S^(k-i,l-j)) / w

    The table is filled with k ascending and l ascending within each k, so that every
    entry on the right-hand side is known when S^(k,l) is computed.

    Parameters
    ----------
    P : ndarray (ndim, n+1, m+1)
        Array of control point coordinates.
    W : ndarray (n+1, m+1)
        Array of control point weights.
    p, q, U, V, u, v, up_to_order
        See `compute_all_bspline_surface_derivatives`.

    Returns
    -------
    nurbs_derivatives : ndarray (up_to_order+1, up_to_order+1, ndim, N)
        Partial derivatives of the NURBS surface. Entries with k + l > up_to_order are zero.
    """
    # Derivatives of the surface in homogeneous space → (d+1, d+1, ndim+1, N)
    P_w = to_homogeneous(jnp.asarray(P, dtype=jnp.float64), W)
    homo_ders = compute_all_bspline_surface_derivatives(P_w, p, q, U, V, u, v, up_to_order)

    # Split spatial and weight components
    A_ders = jax.vmap(jax.vmap(truncate_homogeneous))(homo_ders)  # (d+1, d+1, ndim, N)
    w_ders = homo_ders[:, :, -1:, :]  # (d+1, d+1, 1, N)

    # Forward-filled table of rational derivatives
    d = up_to_order
    S = [[None] * (d + 1) for _ in range(d + 1)]
    for k in range(d + 1):
        for l in range(d - k + 1):
            der = A_ders[k, l]

            # Pure v-direction weight contributions
            for j in range(1, l + 1):
                der = der - binomial_coeff(l, j) * w_ders[0, j] * S[k][l - j]

            # Pure u-direction and mixed weight contributions
            for i in range(1, k + 1):
                der = der - binomial_coeff(k, i) * w_ders[i, 0] * S[k - i][l]
                cross = jnp.zeros_like(der)
                for j in range(1, l + 1):
                    cross = cross + binomial_coeff(l, j) * w_ders[i, j] * S[k - i][l - j]
                der = der - binomial_coeff(k, i) * cross

            S[k][l] = der / w_ders[0, 0]

    nurbs_derivatives = jnp.zeros_like(A_ders)
    for k in range(d + 1):
        for l in range(d - k + 1):
            nurbs_derivatives = nurbs_derivatives.at[k, l].set(S[k][l])

    return nurbs_derivatives

# Apply JIT compilation
compute_all_nurbs_surface_derivatives = jax.jit(
    compute_all_nurbs_surface_derivatives,
    static_argnames=('p', 'q', 'up_to_order'),
)


# ----------------------------------------------------------- #
# Validated entry points
# ----------------------------------------------------------- #
def surface_point(P, p, q, U, V, u, v):
    """Evaluate a point on a non-rational B-spline surface after validating the inputs.

    Returns an array with shape (ndim, N), see `compute_bspline_surface_coordinates`.
    """
    check_surface_inputs(P, p, q, U, V)
    logger.debug(f"[NURBS] B-spline surface point: degrees=({p}, {q}), control net={jnp.shape(P)[1:]}")
    return compute_bspline_surface_coordinates(P, int(p), int(q), U, V, u, v)


def surface_derivatives(P, p, q, U, V, u, v, num_ders):
    """Evaluate the partial derivatives of a non-rational B-spline surface after validating the inputs.

    Returns an array with shape (num_ders+1, num_ders+1, ndim, N),
    see `compute_all_bspline_surface_derivatives`.
    """
    check_surface_inputs(P, p, q, U, V)
    check_derivative_order(num_ders)
    logger.debug(f"[NURBS] B-spline surface derivatives: degrees=({p}, {q}), num_ders={num_ders}")
    return compute_all_bspline_surface_derivatives(P, int(p), int(q), U, V, u, v, int(num_ders))


def rational_surface_point(P, W, p, q, U, V, u, v):
    """Evaluate a point on a rational NURBS surface after validating the inputs.

    Returns an array with shape (ndim, N), see `compute_nurbs_surface_coordinates`.
    """
    check_surface_inputs(P, p, q, U, V, W)
    logger.debug(f"[NURBS] NURBS surface point: degrees=({p}, {q}), control net={jnp.shape(P)[1:]}")
    return compute_nurbs_surface_coordinates(P, W, int(p), int(q), U, V, u, v)


def rational_surface_derivatives(P, W, p, q, U, V, u, v, num_ders):
    """Evaluate the partial derivatives of a rational NURBS surface after validating the inputs.

    Returns an array with shape (num_ders+1, num_ders+1, ndim, N),
    see `compute_all_nurbs_surface_derivatives`.
    """
    check_surface_inputs(P, p, q, U, V, W)
    check_derivative_order(num_ders)
    logger.debug(f"[NURBS] NURBS surface derivatives: degrees=({p}, {q}), num_ders={num_ders}")
    return compute_all_nurbs_surface_derivatives(P, W, int(p), int(q), U, V, u, v, int(num_ders))
