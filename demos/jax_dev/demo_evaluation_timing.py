""" Example timing the jitted basis, curve and surface derivative kernels """


# -------------------------------------------------------------------------------------------------------------------- #
# Importing packages
# -------------------------------------------------------------------------------------------------------------------- #
import time
import jax
import jax.numpy as jnp
import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# Problem definition
# -------------------------------------------------------------------------------------------------------------------- #
# Maximum index of the basis polynomials (counting from zero) and degree
n = 9
p = 3

# Clamped knot vector with n-p+2 equispaced breakpoints between 0 and 1
U = jnp.concatenate((jnp.zeros(p), jnp.linspace(0, 1, n - p + 2), jnp.ones(p)))

# Random curve and surface data
key_P, key_W, key_S = jax.random.split(jax.random.PRNGKey(0), 3)
P = jax.random.uniform(key_P, (3, n + 1))
W = jax.random.uniform(key_W, (n + 1,), minval=0.5, maxval=2.0)
S = jax.random.uniform(key_S, (3, n + 1, n + 1))
W_surf = jnp.outer(W, W)

# Parameter samples
Nu = 1000
u = jnp.linspace(0.00, 1.00, Nu)
v = jnp.linspace(1.00, 0.00, Nu)


# -------------------------------------------------------------------------------------------------------------------- #
# Timing: 20 steady-state runs
# -------------------------------------------------------------------------------------------------------------------- #
def timed(f, *args, **kwargs):
    t0 = time.perf_counter()
    out = f(*args, **kwargs)
    jax.block_until_ready(out)
    return out, (time.perf_counter() - t0) * 1e3


print("Timing 20 steady-state runs (in milliseconds):")
print(" idx |   Basis    |   dN, ddN    |  C^(k) B-spline | C^(k) NURBS | S^(k,l) NURBS ")
print("-----|------------|--------------|-----------------|-------------|---------------")

for k in range(20):
    _, t_basis = timed(nrb.compute_basis_polynomials, p, U, u)
    _, t_ders = timed(nrb.compute_basis_polynomials_derivatives, p, U, u, num_ders=2)
    _, t_curve = timed(nrb.compute_all_bspline_derivatives, P, p, U, u, up_to_order=2)
    _, t_nurbs = timed(nrb.compute_all_nurbs_derivatives, P, W, p, U, u, up_to_order=2)
    _, t_surf = timed(nrb.compute_all_nurbs_surface_derivatives, S, W_surf, p, p, U, U, u, v, up_to_order=2)
    print(f"{k:4d} | {t_basis:10.3f} | {t_ders:12.3f} | {t_curve:15.3f} | {t_nurbs:11.3f} | {t_surf:13.3f}")
