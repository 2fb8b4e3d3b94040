import jax
import jax.numpy as jnp


# -------------------------------------------------------------------------------------------------------------------- #
# Knot span location
# -------------------------------------------------------------------------------------------------------------------- #
def find_span(p, U, u):
    """
    Determine the index of the knot span containing the parameter `u`.

    The span `i` satisfies U[i] <= u < U[i+1] and has non-zero width. The index is clamped to
    the first and last spans of non-zero width inside [U[p], U[n+1]], where n = len(U) - p - 2,
    so that the end parameter u = U[n+1] belongs to the last non-degenerate span even when
    U[n] == U[n+1], and parameters outside the domain are assigned to the first or last span.
    This replaces the binary search of Algorithm A2.1 from The NURBS Book with `jnp.searchsorted`,
    which is traceable by JAX.

    Parameters
    ----------
    p : int
        Degree of the basis polynomials.
    U : ndarray (r+1 = n + p + 2,)
        Knot vector.
    u : scalar or ndarray
        Parametric coordinate(s).

    Returns
    -------
    span : int ndarray with the shape of `u`
        Knot span index for each parameter value.
    """
    U = jnp.asarray(U)
    n = U.shape[0] - p - 2

    # First and last spans of non-zero width inside [U[p], U[n+1]]
    first = jnp.searchsorted(U, U[p], side="right") - 1
    last = jnp.searchsorted(U, U[n + 1], side="left") - 1

    span = jnp.searchsorted(U, u, side="right") - 1
    return jnp.clip(span, first, last).astype(jnp.int32)


# -------------------------------------------------------------------------------------------------------------------- #
# Non-zero basis functions at a single parameter value
# -------------------------------------------------------------------------------------------------------------------- #
def compute_basis_values(p, span, U, u):
    """
    Evaluate the p+1 non-zero B-spline basis functions N_{span-p,p}(u), ..., N_{span,p}(u).

    The implementation corresponds to Algorithm A2.2 from The NURBS Book. The loops run over the
    degree, which is static, so they are unrolled when the function is traced by JAX.

    Parameters
    ----------
    p : int
        Degree of the basis polynomials.
    span : int
        Knot span index of `u` as returned by `find_span`.
    U : ndarray (r+1,)
        Knot vector.
    u : scalar
        Parametric coordinate.

    Returns
    -------
    N : ndarray (p+1,)
        Values of the non-zero basis functions. They always sum to one.
    """
    U = jnp.asarray(U, dtype=jnp.float64)
    u = jnp.asarray(u, dtype=U.dtype)
    zero = jnp.zeros_like(u)
    left = [zero] * (p + 1)
    right = [zero] * (p + 1)
    N = [jnp.ones_like(u)] + [zero] * p

    for j in range(1, p + 1):
        left[j] = u - U[span + 1 - j]
        right[j] = U[span + j] - u
        saved = zero
        for r in range(j):
            temp = N[r] / (right[r + 1] + left[j - r])
            N[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        N[j] = saved

    return jnp.stack(N)


def compute_basis_derivatives(p, span, U, u, num_ders):
    """
    Evaluate the non-zero B-spline basis functions and their derivatives up to order `num_ders`.

    The implementation corresponds to Algorithm A2.3 from The NURBS Book. The table `ndu` stores
    the basis functions of all degrees in its upper triangle and the knot differences in its
    lower triangle. Derivatives of order higher than the degree vanish identically.

    Parameters
    ----------
    p : int
        Degree of the basis polynomials.
    span : int
        Knot span index of `u` as returned by `find_span`.
    U : ndarray (r+1,)
        Knot vector.
    u : scalar
        Parametric coordinate.
    num_ders : int
        Highest derivative order to compute.

    Returns
    -------
    ders : ndarray (num_ders+1, p+1)
        ders[k, j] is the k-th derivative of N_{span-p+j,p} at u.
    """
    U = jnp.asarray(U, dtype=jnp.float64)
    u = jnp.asarray(u, dtype=U.dtype)
    zero = jnp.zeros_like(u)
    one = jnp.ones_like(u)

    # Basis functions and knot differences
    ndu = [[zero] * (p + 1) for _ in range(p + 1)]
    ndu[0][0] = one
    left = [zero] * (p + 1)
    right = [zero] * (p + 1)
    for j in range(1, p + 1):
        left[j] = u - U[span + 1 - j]
        right[j] = U[span + j] - u
        saved = zero
        for r in range(j):
            # Lower triangle
            ndu[j][r] = right[r + 1] + left[j - r]
            temp = ndu[r][j - 1] / ndu[j][r]
            # Upper triangle
            ndu[r][j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        ndu[j][j] = saved

    # Orders above the degree stay zero
    ders = [[zero] * (p + 1) for _ in range(num_ders + 1)]
    for j in range(p + 1):
        ders[0][j] = ndu[j][p]

    # Derivatives of each basis function using the alternating rows of `a`
    du = min(num_ders, p)
    for r in range(p + 1):
        s1, s2 = 0, 1
        a = [[zero] * (p + 1) for _ in range(2)]
        a[0][0] = one
        for k in range(1, du + 1):
            d = zero
            rk = r - k
            pk = p - k
            if r >= k:
                a[s2][0] = a[s1][0] / ndu[pk + 1][rk]
                d = a[s2][0] * ndu[rk][pk]
            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else p - r
            for j in range(j1, j2 + 1):
                a[s2][j] = (a[s1][j] - a[s1][j - 1]) / ndu[pk + 1][rk + j]
                d = d + a[s2][j] * ndu[rk + j][pk]
            if r <= pk:
                a[s2][k] = -a[s1][k - 1] / ndu[pk + 1][r]
                d = d + a[s2][k] * ndu[r][pk]
            ders[k][r] = d
            s1, s2 = s2, s1

    # Multiply through by the factor p!/(p-k)!
    factor = p
    for k in range(1, du + 1):
        ders[k] = [factor * value for value in ders[k]]
        factor *= p - k

    return jnp.stack([jnp.stack(row) for row in ders])


# -------------------------------------------------------------------------------------------------------------------- #
# Vectorized evaluation over several parameter values
# -------------------------------------------------------------------------------------------------------------------- #
def compute_basis_polynomials(p, U, u):
    """
    Evaluate the non-zero basis functions of degree `p` for a set of parameter values `u`.

    The scalar evaluation is vectorized over the u-values with `jax.vmap`.

    Parameters
    ----------
    p : int
        Degree of the basis polynomials.
    U : array_like (r+1,)
        Knot vector.
    u : float or array_like (Nu,)
        Parameter values where the basis functions are evaluated.

    Returns
    -------
    N : ndarray (p+1, Nu)
        Non-zero basis functions. Column `s` holds N_{span[s]-p,p}, ..., N_{span[s],p}.
    span : int ndarray (Nu,)
        Knot span index of each parameter value.
    """
    U = jnp.asarray(U, dtype=jnp.float64)
    u = jnp.atleast_1d(jnp.asarray(u, dtype=U.dtype))
    span = find_span(p, U, u)
    N = jax.vmap(lambda s, uu: compute_basis_values(p, s, U, uu))(span, u)
    return jnp.transpose(N), span

# Apply JIT compilation
compute_basis_polynomials = jax.jit(
    compute_basis_polynomials,
    static_argnames=('p',),
)


def compute_basis_polynomials_derivatives(p, U, u, num_ders):
    """
    Evaluate the derivatives of the non-zero basis functions for a set of parameter values `u`.

    Returns
    -------
    ders : ndarray (num_ders+1, p+1, Nu)
        ders[k, j, s] is the k-th derivative of N_{span[s]-p+j,p} at u[s].
    span : int ndarray (Nu,)
        Knot span index of each parameter value.
    """
    U = jnp.asarray(U, dtype=jnp.float64)
    u = jnp.atleast_1d(jnp.asarray(u, dtype=U.dtype))
    span = find_span(p, U, u)
    ders = jax.vmap(lambda s, uu: compute_basis_derivatives(p, s, U, uu, num_ders))(span, u)

    # Transpose shape (Nu, num_ders+1, p+1) to (num_ders+1, p+1, Nu)
    return jnp.transpose(ders, (1, 2, 0)), span

# Apply JIT compilation
compute_basis_polynomials_derivatives = jax.jit(
    compute_basis_polynomials_derivatives,
    static_argnames=('p', 'num_ders'),
)
