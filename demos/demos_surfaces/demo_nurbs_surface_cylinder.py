"""Example showing how to represent a cylindrical patch using a NURBS surface and plot its normal vectors."""

# -------------------------------------------------------------------------------------------------------------------- #
# Imports
# -------------------------------------------------------------------------------------------------------------------- #
import numpy as np
import matplotlib.pyplot as plt
import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# Quarter cylinder of radius R and height H
# -------------------------------------------------------------------------------------------------------------------- #
R, H = 1.0, 2.0
w = np.sqrt(2) / 2

# Control net (3, 3, 2): circular arc in u, straight line in v
arc = np.array([[R, R, 0.0],
                [0.0, R, R]])
P = np.zeros((3, 3, 2))
P[0:2, :, 0] = arc
P[0:2, :, 1] = arc
P[2, :, 1] = H
W = np.array([[1.0, 1.0], [w, w], [1.0, 1.0]])
p, q = 2, 1
U = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
V = np.array([0.0, 0.0, 1.0, 1.0])

# Evaluate the surface on a grid
Nu, Nv = 41, 21
uu, vv = np.meshgrid(np.linspace(0, 1, Nu), np.linspace(0, 1, Nv), indexing="ij")
S = np.asarray(nrb.rational_surface_point(P, W, p, q, U, V, uu.ravel(), vv.ravel())).reshape(3, Nu, Nv)

# Radius error and mixed partial derivatives
radius = np.sqrt(S[0] ** 2 + S[1] ** 2)
ders = nrb.rational_surface_derivatives(P, W, p, q, U, V, uu.ravel(), vv.ravel(), 2)
print("\n=== Cylinder patch check ===")
print(f"Radius RMS error            : {np.sqrt(np.mean((radius - R) ** 2)):.3e}")
print(f"Max |S_v - (0, 0, H)|       : {np.max(np.abs(ders[0, 1] - np.array([[0.0], [0.0], [H]]))):.3e}")
print(f"Max |S_uv|                  : {np.max(np.abs(ders[1, 1])):.3e}")

# Unit normals on a coarser grid
us, vs = np.meshgrid(np.linspace(0, 1, 7), np.linspace(0, 1, 4), indexing="ij")
S_n = nrb.rational_surface_point(P, W, p, q, U, V, us.ravel(), vs.ravel())
N_n = nrb.compute_surface_normal(P, W, p, q, U, V, us.ravel(), vs.ravel())


# -------------------------------------------------------------------------------------------------------------------- #
# Plot the surface and normals
# -------------------------------------------------------------------------------------------------------------------- #
fig = plt.figure(figsize=(6, 5))
ax = fig.add_subplot(111, projection="3d")
ax.plot_surface(S[0], S[1], S[2], color="lightgray", alpha=0.6, edgecolor="k", linewidth=0.2)
ax.quiver(S_n[0], S_n[1], S_n[2], N_n[0], N_n[1], N_n[2], length=0.3, color="r")
ax.plot(P[0].ravel(), P[1].ravel(), P[2].ravel(), linestyle="none", color="red", marker="o", markerfacecolor="w")
ax.set_xlabel("$x$ axis", fontsize=12, color="k", labelpad=12)
ax.set_ylabel("$y$ axis", fontsize=12, color="k", labelpad=12)
ax.set_zlabel("$z$ axis", fontsize=12, color="k", labelpad=12)
plt.tight_layout(pad=1.0)
plt.show()
