"""
Verification of analytic vs automatic differentiation for NURBS curve and surface derivatives
"""

# -------------------------------------------------------------------------------------------------------------------- #
# Imports
# -------------------------------------------------------------------------------------------------------------------- #
import jax
import jax.numpy as jnp
import matplotlib.pyplot as plt
import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# Define control points, weights and knots
# -------------------------------------------------------------------------------------------------------------------- #
P = jnp.array([
    [0.20, 0.40, 0.80, 0.60, 0.40],  # x-coordinates
    [0.50, 0.70, 0.60, 0.20, 0.20],  # y-coordinates
])
W = jnp.array([1.0, 1.3, 0.8, 1.2, 1.0])
p = 3
U = jnp.array([0.0, 0.0, 0.0, 0.0, 0.4, 1.0, 1.0, 1.0, 1.0])


# -------------------------------------------------------------------------------------------------------------------- #
# Function for comparing analytic vs autodiff derivatives
# -------------------------------------------------------------------------------------------------------------------- #
def verify_derivative_order(u, order, tol=1e-9, plot=True):
    """
    Compare analytic and JAX autodiff derivatives for the specified order.
    """

    # Analytic curve derivatives
    dC_analytic = nrb.rational_curve_derivatives(P, W, p, U, u, order)[order]

    # Define scalar curve evaluation
    def curve_eval_single(u_scalar):
        """Evaluate curve coordinates for a single scalar u."""
        return nrb.compute_nurbs_coordinates(P, W, p, U, u_scalar)[:, 0]

    # Nested jacfwd for arbitrary derivative order
    f = curve_eval_single
    for _ in range(order):
        f = jax.jacfwd(f)

    # Vectorize across u
    dC_autodiff = jax.vmap(f)(u).T  # shape (ndim, N)

    # Compute RMS absolute errors
    abs_err = jnp.sqrt(jnp.mean((dC_analytic - dC_autodiff) ** 2, axis=1))

    print(f"\n--- Derivative order {order} ---")
    print("RMS absolute error:", abs_err)

    # Assertions to ensure analytic and AD results match closely
    assert jnp.all(abs_err < tol), (
        f"Mismatch detected for order {order}.\n"
        f"Absolute RMS error: {abs_err}\n"
    )

    # Plot comparison if requested
    if plot:
        fig, ax = plt.subplots(figsize=(5, 4))
        colors = ["r", "b", "g"]
        labels = ["x", "y", "z"]
        for dim in range(dC_analytic.shape[0]):
            c = colors[dim % len(colors)]
            label = labels[dim % len(labels)]
            ax.plot(u, dC_analytic[dim], f"{c}-", markersize=3.5,
                    label=rf"$\frac{{d^{order}}}{{du^{order}}}{label}_{{\mathrm{{analytic}}}}$")
            ax.plot(u, dC_autodiff[dim], f"{c}o", markersize=3.5,
                    label=rf"$\frac{{d^{order}}}{{du^{order}}}{label}_{{\mathrm{{autodiff}}}}$")

        ax.legend(ncols=2, fontsize=11, loc="lower right")
        fig.tight_layout(pad=1)


# -------------------------------------------------------------------------------------------------------------------- #
# Run verification for multiple derivative orders
# -------------------------------------------------------------------------------------------------------------------- #
# Avoid the interior knot, where the derivatives of order p and above are discontinuous
u = jnp.concatenate((jnp.linspace(0.0, 0.38, 20), jnp.linspace(0.42, 1.0, 30)))

for order in range(1, 6):
    verify_derivative_order(u, order, tol=1e-7, plot=True)

print("\nAll curve derivative orders verified successfully!")


# -------------------------------------------------------------------------------------------------------------------- #
# Mixed partial derivatives of a rational surface
# -------------------------------------------------------------------------------------------------------------------- #
key_P, key_W = jax.random.split(jax.random.PRNGKey(0))
P_surf = jax.random.uniform(key_P, (3, 4, 5), minval=-1.0, maxval=1.0)
W_surf = jax.random.uniform(key_W, (4, 5), minval=0.5, maxval=2.0)
Us = jnp.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])
Vs = jnp.array([0.0, 0.0, 0.0, 0.0, 0.3, 1.0, 1.0, 1.0, 1.0])
u0, v0 = jnp.asarray(0.37), jnp.asarray(0.71)
d = 3

ders = nrb.rational_surface_derivatives(P_surf, W_surf, 2, 3, Us, Vs, u0, v0, d)
surface_eval = lambda uu, vv: nrb.compute_nurbs_surface_coordinates(P_surf, W_surf, 2, 3, Us, Vs, uu, vv)[:, 0]

print("\n k  l | max abs error")
for k in range(d + 1):
    for l in range(d - k + 1):
        f = surface_eval
        for _ in range(k):
            f = jax.jacfwd(f, argnums=0)
        for _ in range(l):
            f = jax.jacfwd(f, argnums=1)
        err = jnp.max(jnp.abs(ders[k, l, :, 0] - f(u0, v0)))
        print(f" {k}  {l} | {err:.3e}")

plt.show()
