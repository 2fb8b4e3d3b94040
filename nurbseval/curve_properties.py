import equinox as eqx
import jax.numpy as jnp
import optimistix as optx
import quadax
from loguru import logger

from .nurbs_curve import compute_all_nurbs_derivatives, compute_nurbs_coordinates
from .nurbs_surface import compute_all_nurbs_surface_derivatives
from .validation import (
    check_curve_inputs,
    check_point_dimension,
    check_quadrature_order,
    check_spatial_dimension,
    check_surface_inputs,
)


def _unit_weights(P):
    return jnp.ones(jnp.shape(P)[1:], dtype=jnp.float64)


def _embed_3d(X, ndim):
    return jnp.pad(X, ((0, 3 - ndim), (0, 0)))


# ---------------------------------------------------------------------------------------------------------------- #
# Differential geometry of curves
# ---------------------------------------------------------------------------------------------------------------- #
def compute_curve_tangent(P, W, p, U, u):
    """
    Evaluate the unit tangent vector along the curve for the given u-parameterization.

    The tangent is defined as:
        t(u) = C'(u) / ||C'(u)||

    Parameters
    ----------
    P : ndarray (ndim, n+1)
        Control point coordinates.
    W : ndarray (n+1,) or None
        Control point weights. Use None for a polynomial B-spline.
    p : int
        Degree of the curve.
    U : ndarray (n+p+2,)
        Knot vector.
    u : scalar or ndarray (N,)
        Parametric coordinates.

    Returns
    -------
    tangent : ndarray (ndim, N)
        Unit tangent vectors.
    """
    W = _unit_weights(P) if W is None else W
    check_curve_inputs(P, p, U, W)
    return _curve_tangent(jnp.asarray(P), jnp.asarray(W), int(p), jnp.asarray(U), u)


@eqx.filter_jit
def _curve_tangent(P, W, p, U, u):
    dC = compute_all_nurbs_derivatives(P, W, p, U, u, 1)[1]
    norm = jnp.linalg.norm(dC, axis=0, keepdims=True)
    return dC / norm


def compute_curve_curvature(P, W, p, U, u):
    """Evaluate the curvature of the curve for the input u-parametrization

    The definition of the curvature is given by equation 10.7 (Farin's textbook)

        kappa(u) = ||C'(u) x C''(u)|| / ||C'(u)||^3

    Curves with one or two coordinates are embedded in 3D to compute the cross product.

    Returns
    -------
    curvature : ndarray with shape (N, )
        Array containing the curvature of the curve
    """
    W = _unit_weights(P) if W is None else W
    check_curve_inputs(P, p, U, W)
    check_spatial_dimension(jnp.shape(P)[0], (1, 2, 3), "curvature")
    return _curve_curvature(jnp.asarray(P), jnp.asarray(W), int(p), jnp.asarray(U), u)


@eqx.filter_jit
def _curve_curvature(P, W, p, U, u):
    ders = compute_all_nurbs_derivatives(P, W, p, U, u, 2)
    ndim = P.shape[0]
    dC3 = _embed_3d(ders[1], ndim)
    ddC3 = _embed_3d(ders[2], ndim)

    # Cross product and norms
    num = jnp.linalg.norm(jnp.cross(dC3, ddC3, axisa=0, axisb=0, axisc=0), axis=0)
    denom = jnp.linalg.norm(dC3, axis=0) ** 3
    denom = jnp.where(denom == 0.0, 1.0, denom)
    return num / denom


def compute_curve_arclength(P, W, p, U, u1=None, u2=None, n_points=40):
    """Compute the arc length of the curve in the interval [u1,u2] using numerical quadrature

    The definition of the arc length is given by equation 10.3 (Farin's textbook).
    The integrand ||C'(u)|| is evaluated with the analytic derivatives and integrated
    with a fixed Clenshaw-Curtis rule.

    Parameters
    ----------
    u1, u2 : scalar, optional
        Limits of integration for the arc length computation.
        Default to the ends U[p] and U[n+1] of the parametric domain.
    n_points : int
        Order of the closed Clenshaw-Curtis rule, a positive multiple of 4

    Returns
    -------
    L : scalar
        Arc length of the curve in the interval [u1, u2]
    """
    W = _unit_weights(P) if W is None else W
    check_curve_inputs(P, p, U, W)
    check_quadrature_order(n_points)
    U = jnp.asarray(U, dtype=jnp.float64)
    u1 = U[p] if u1 is None else u1
    u2 = U[-p - 1] if u2 is None else u2
    return _curve_arclength(jnp.asarray(P), jnp.asarray(W), int(p), U, u1, u2, int(n_points))


@eqx.filter_jit
def _curve_arclength(P, W, p, U, u1, u2, n_points):

    # Define the integrand
    def integrand(u, *args):
        dC = compute_all_nurbs_derivatives(P, W, p, U, u, 1)[1]  # (ndim, len(u))
        return jnp.linalg.norm(dC, axis=0)  # ||C'(u)||

    # Perform fixed quadrature over [u1, u2]
    rule = quadax.ClenshawCurtisRule(n_points)
    arclength, err, *_ = rule.integrate(integrand, u1, u2, args=())
    return jnp.asarray(arclength).squeeze()


# ---------------------------------------------------------------------------------------------------------------- #
# Point projection
# ---------------------------------------------------------------------------------------------------------------- #
def project_point_to_curve(P, W, p, U, Q, max_iters=32, n_samples=101):
    """
    Project a point onto the curve by solving the orthogonality condition.

    The projection point `C(u*)` minimizes the squared Euclidean distance to `Q`:

        f(u) = ||C(u) - Q||²

    The stationary condition is obtained from:

        f'(u) = 2 (C(u) - Q) · C'(u) = 0

    The nonlinear equation is solved with a bounded Newton method (`optimistix.Newton`),
    ensuring that `u_star` remains within the parametric domain [U[p], U[n+1]] of the knot vector.
    The initial guess is the closest of `n_samples` uniformly spaced curve points.

    Parameters
    ----------
    Q : array_like, shape (ndim,)
        Coordinates of the point to be projected onto the curve.
    max_iters : int, optional
        Maximum number of Newton iterations used by the solver. Default is 32.

    Returns
    -------
    u_star : float
        Parameter value corresponding to the orthogonal projection of `Q` onto the curve.
    """
    W = _unit_weights(P) if W is None else W
    check_curve_inputs(P, p, U, W)
    Q = jnp.asarray(Q, dtype=jnp.float64).reshape(-1)
    check_point_dimension(Q, jnp.shape(P)[0])
    logger.debug(f"[NURBS] Projecting point {Q} onto curve of degree {p}")
    return _project_point_to_curve(
        jnp.asarray(P), jnp.asarray(W), int(p), jnp.asarray(U, dtype=jnp.float64), Q, max_iters, n_samples
    )


@eqx.filter_jit
def _project_point_to_curve(P, W, p, U, Q, max_iters, n_samples):

    # Function whose root defines orthogonality condition
    def residual(u, args):
        C = compute_nurbs_coordinates(P, W, p, U, u)[:, 0]
        dC = compute_all_nurbs_derivatives(P, W, p, U, u, 1)[1, :, 0]
        return jnp.atleast_1d(jnp.sum((C - Q) * dC))

    # Greedy initial guess from uniformly spaced samples
    u_min, u_max = U[p], U[-p - 1]
    u_candidates = jnp.linspace(u_min, u_max, n_samples)
    C_candidates = compute_nurbs_coordinates(P, W, p, U, u_candidates)
    dist2 = jnp.sum((C_candidates - Q[:, None]) ** 2, axis=0)
    u0 = jnp.atleast_1d(u_candidates[jnp.argmin(dist2)])

    # Run bounded Newton solver
    solver = optx.Newton(rtol=1e-10, atol=1e-12)
    result = optx.root_find(
        residual,
        solver=solver,
        y0=u0,
        options={"lower": u_min, "upper": u_max},
        throw=False,
        max_steps=max_iters,
    )
    return result.value.squeeze()


# ---------------------------------------------------------------------------------------------------------------- #
# Differential geometry of surfaces
# ---------------------------------------------------------------------------------------------------------------- #
def compute_surface_normal(P, W, p, q, U, V, u, v):
    """
    Evaluate the unit normal vector of a surface with three coordinates.

        n(u, v) = (S_u x S_v) / ||S_u x S_v||

    Returns
    -------
    normal : ndarray (3, N)
        Unit normal vectors. Degenerate points (parallel partial derivatives) return zero.
    """
    W = _unit_weights(P) if W is None else W
    check_surface_inputs(P, p, q, U, V, W)
    check_spatial_dimension(jnp.shape(P)[0], (3,), "surface normal")
    return _surface_normal(jnp.asarray(P), jnp.asarray(W), int(p), int(q), jnp.asarray(U), jnp.asarray(V), u, v)


@eqx.filter_jit
def _surface_normal(P, W, p, q, U, V, u, v):
    ders = compute_all_nurbs_surface_derivatives(P, W, p, q, U, V, u, v, 1)
    S_u, S_v = ders[1, 0], ders[0, 1]
    n_num = jnp.cross(S_u, S_v, axisa=0, axisb=0, axisc=0)

    # Normalize safely (avoid division by zero)
    n_norm = jnp.linalg.norm(n_num, axis=0, keepdims=True)
    n_norm = jnp.where(n_norm == 0.0, 1.0, n_norm)
    return n_num / n_norm
