import jax
import jax.numpy as jnp


# -------------------------------------------------------------------------------------------------------------------- #
# Conversion between ordinary and homogeneous coordinates
# -------------------------------------------------------------------------------------------------------------------- #
def to_homogeneous(P, W):
    """
    Map control points to homogeneous space: P_w = (x*w, y*w, z*w, w)

    Parameters
    ----------
    P : ndarray (ndim, ...)
        Control point coordinates. The first dimension spans the spatial coordinates and the
        remaining dimensions span the control net, e.g. `(ndim, n+1)` for a curve
        or `(ndim, n+1, m+1)` for a surface.

    W : ndarray (...)
        Weights associated with each control point, with the shape of the control net.

    Returns
    -------
    P_w : ndarray (ndim+1, ...)
        Homogeneous control points. The last coordinate holds the weight.
    """
    P = jnp.asarray(P)
    W = jnp.asarray(W, dtype=P.dtype)
    return jnp.concatenate((P * W[None, ...], W[None, ...]), axis=0)


def to_cartesian(P_w):
    """
    Project homogeneous points back to ordinary space: (x, y, z) = (x*w, y*w, z*w) / w

    This is the perspective division of Equation 1.16 in The NURBS Book.
    """
    return P_w[:-1, ...] / P_w[-1:, ...]


def truncate_homogeneous(P_w):
    """Drop the weight coordinate of homogeneous points without dividing by it."""
    return P_w[:-1, ...]


def binomial_coeff(n, k):
    """JAX-compatible binomial coefficient C(n, k) using the gamma function."""
    n = jnp.asarray(n, dtype=jnp.float64)
    k = jnp.asarray(k, dtype=jnp.float64)
    return jnp.round(
        jnp.exp(
            jax.scipy.special.gammaln(n + 1)
            - jax.scipy.special.gammaln(k + 1)
            - jax.scipy.special.gammaln(n - k + 1)
        )
    )
