""" Example showing how to compute a family of basis polynomials """


# -------------------------------------------------------------------------------------------------------------------- #
# Importing packages
# -------------------------------------------------------------------------------------------------------------------- #
import numpy as np
import nurbseval as nrb
import matplotlib.pyplot as plt


# -------------------------------------------------------------------------------------------------------------------- #
# Basis polynomials and derivatives example
# -------------------------------------------------------------------------------------------------------------------- #
# Maximum index of the basis polynomials (counting from zero)
n = 4

# Define the order of the basis polynomials
p = 3

# Define the knot vector (clamped spline)
# p+1 zeros, n-p equispaced points between 0 and 1, and p+1 ones. In total r+1 points where r=n+p+1
U = np.concatenate((np.zeros(p), np.linspace(0, 1, n - p + 2), np.ones(p)))

# Define a new u-parametrization suitable for finite differences
u = np.linspace(0.00, 1.00, 1001)       # Make sure that the limits [0, 1] also work when making changes

# Compute the non-zero basis polynomials and derivatives at each u
ders, span = nrb.compute_basis_polynomials_derivatives(p, U, u, num_ders=2)
ders, span = np.asarray(ders), np.asarray(span)

# Scatter the p+1 local functions into the full family of n+1 functions
N_all = np.zeros((3, n + 1, u.size))
for j in range(p + 1):
    N_all[:, span - p + j, np.arange(u.size)] = ders[:, j, :]


# -------------------------------------------------------------------------------------------------------------------- #
# Plot the basis polynomials
# -------------------------------------------------------------------------------------------------------------------- #
# Create the figure
fig = plt.figure(figsize=(15, 4.5))
titles = ['Zeroth derivative', 'First derivative', 'Second derivative']

for order, title in enumerate(titles):
    ax = fig.add_subplot(1, 3, order + 1)
    ax.set_title(title, fontsize=12, color='k', pad=12)
    ax.set_xlabel('$u$ parameter', fontsize=12, color='k', labelpad=12)
    ax.set_ylabel('Function value', fontsize=12, color='k', labelpad=12)
    for i in range(n+1):
        line, = ax.plot(u, N_all[order, i, :])
        line.set_linewidth(1.25)
        line.set_linestyle("-")
        line.set_marker(" ")
        line.set_label('index ' + str(i))

# Create legend
ax.legend(ncol=1, loc='right', bbox_to_anchor=(1.60, 0.50), fontsize=10, edgecolor='k', framealpha=1.0)

# Adjust pad
plt.tight_layout(pad=1.)

# Show the figure
plt.show()
