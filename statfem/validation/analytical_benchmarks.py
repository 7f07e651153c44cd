"""
Analytical Benchmarks for Static FEM Validation
=================================================

Small problems with closed-form (or symmetry-based) reference answers,
used to check element kernels, load distribution and boundary
conditions end to end.

Benchmarks:
    1. Axial bar under a tip load (Bar2, exact)
    2. Plane stress cantilever under a distributed load (Quad4, Euler-Bernoulli)
    3. Cube under its own weight (Hex8, monotonic and symmetric settlement)
    4. Uniform tension patch test (Tri3, exact constant stress)
    5. Tube under uniform external pressure (ShellQuad4, membrane hoop solution)

Every benchmark returns a dict with at least:
    'name', 'computed', 'analytical', 'rel_error', 'passed'
"""

import numpy as np

from ..mesh.generators import box_mesh, cylinder_shell_mesh, line_mesh, rectangle_mesh
from ..parameters import Direction
from ..solvers.static import StaticFEM


def _nearest(mesh, point):
    return int(np.argmin(np.linalg.norm(mesh.nodes - np.asarray(point), axis=1)))


def _summary(name, computed, analytical, tolerance, **extra):
    rel_error = abs(computed - analytical) / abs(analytical)
    res = {
        'name': name,
        'computed': float(computed),
        'analytical': float(analytical),
        'rel_error': float(rel_error),
        'tolerance': tolerance,
        'passed': bool(rel_error <= tolerance),
    }
    res.update(extra)
    return res


def benchmark_axial_bar(n_elements=10, num_threads=1):
    """Benchmark: bar on [0, 1] fixed at x = 0, unit load at x = 1.

    u(x) = P x / (E A) with E = A = P = 1, so u(1) = 1 and Sxx = 1.
    """
    fem = StaticFEM(verbose=False)
    fem.set_mesh(line_mesh(1.0, n_elements))
    fem.set_num_threads(num_threads)
    fem.add_young_modulus("1")
    fem.add_thickness("1")
    fem.add_boundary_condition("0", "x == 0", Direction.X)
    fem.add_point_load("1", "x == 1", Direction.X)
    fem.calculate()

    tip = _nearest(fem.mesh, [1.0])
    sxx = fem.get_result("Sxx")
    return _summary('Axial bar (Bar2)', fem.get_result("U")[tip], 1.0, 1e-10,
                    stress_error=float(np.max(np.abs(sxx - 1.0))))


def benchmark_cantilever(nx=320, ny=2, num_threads=1, solver="dense"):
    """Benchmark: plane stress cantilever with a uniform load on its top edge.

    Beam 10 x 0.5, unit thickness, clamped at x = 0, q = 1 per unit
    length downward on y = 0.25. Euler-Bernoulli tip deflection:

        v_tip = q L^4 / (8 E I),   I = t h^3 / 12

    Quad4 with full integration is slightly too stiff in bending; slender
    elements along x keep the error within a few percent.
    """
    E, nu, L, h = 203200.0, 0.27, 10.0, 0.5
    fem = StaticFEM(verbose=False)
    fem.set_mesh(rectangle_mesh(L, h, nx, ny, origin=(0.0, -h / 2)))
    fem.set_num_threads(num_threads)
    fem.set_solver(solver)
    fem.add_young_modulus(str(E))
    fem.add_poisson_ratio(str(nu))
    fem.add_thickness("1")
    fem.add_boundary_condition("0", "x == 0", Direction.X | Direction.Y)
    fem.add_surface_load("-1", "y == 0.25", Direction.Y)
    fem.calculate()

    I = h ** 3 / 12.0
    analytical = -L ** 4 / (8.0 * E * I)
    tip = _nearest(fem.mesh, [L, 0.0])
    return _summary('Cantilever (Quad4)', fem.get_result("V")[tip], analytical, 0.05)


def benchmark_cube_gravity(n=4, num_threads=1):
    """Benchmark: unit Hex8 cube clamped at z = 0 under a body load -0.5 along z.

    No closed form with a clamped base. The top settlement on the axis is
    bracketed by the laterally free column and the laterally confined one:

        g L^2 / (2 M)  <=  |w(1)|  <=  g L^2 / (2 E)

    with M = E (1 - nu) / ((1 + nu)(1 - 2 nu)) the constrained modulus.
    Both bounds get 5% slack for the coarse mesh. The settlement must also
    grow monotonically with z along the axis and be symmetric in x and y.
    """
    E, nu, g = 203200.0, 0.27, 0.5
    fem = StaticFEM(verbose=False)
    fem.set_mesh(box_mesh(1.0, 1.0, 1.0, n, n, n))
    fem.set_num_threads(num_threads)
    fem.add_young_modulus(str(E))
    fem.add_poisson_ratio(str(nu))
    fem.add_boundary_condition("0", "z == 0", Direction.X | Direction.Y | Direction.Z)
    fem.add_volume_load(str(-g), "", Direction.Z)
    fem.calculate()

    mesh = fem.mesh
    W = fem.get_result("W")
    axis = [_nearest(mesh, [0.5, 0.5, z]) for z in np.linspace(0.0, 1.0, n + 1)]
    profile = W[axis]
    monotonic = bool(np.all(np.diff(profile) < 0.0))

    mirror_x = [_nearest(mesh, [1.0 - x, y, z]) for x, y, z in mesh.nodes]
    mirror_y = [_nearest(mesh, [x, 1.0 - y, z]) for x, y, z in mesh.nodes]
    scale = np.max(np.abs(W))
    symmetric = bool(np.max(np.abs(W - W[mirror_x])) <= 1e-8 * scale
                     and np.max(np.abs(W - W[mirror_y])) <= 1e-8 * scale)

    M = E * (1.0 - nu) / ((1.0 + nu) * (1.0 - 2.0 * nu))
    free, confined = -g / (2.0 * E), -g / (2.0 * M)
    bracketed = bool(0.95 * abs(confined) <= abs(profile[-1]) <= 1.05 * abs(free))

    res = _summary('Cube under gravity (Hex8)', profile[-1], free, 0.25,
                   confined=confined, profile=profile.tolist(),
                   monotonic=monotonic, symmetric=symmetric, bracketed=bracketed)
    res['passed'] = monotonic and symmetric and bracketed
    return res


def benchmark_patch_test(nx=4, ny=3, num_threads=1):
    """Benchmark: Tri3 rectangle 2 x 1 in uniform tension.

    Traction sigma = 10 on x = 2, x = 0 held in X, the origin held in Y.
    Exact solution: Sxx = sigma, Syy = Sxy = 0, u = sigma x / E.
    """
    E, nu, sigma = 1000.0, 0.3, 10.0
    fem = StaticFEM(verbose=False)
    fem.set_mesh(rectangle_mesh(2.0, 1.0, nx, ny, fe_type="fe2d3"))
    fem.set_num_threads(num_threads)
    fem.add_young_modulus(str(E))
    fem.add_poisson_ratio(str(nu))
    fem.add_thickness("1")
    fem.add_boundary_condition("0", "x == 0", Direction.X)
    fem.add_boundary_condition("0", "x == 0 and y == 0", Direction.Y)
    fem.add_surface_load(str(sigma), "x == 2", Direction.X)
    fem.calculate()

    sxx = fem.get_result("Sxx")
    tip = _nearest(fem.mesh, [2.0, 0.0])
    return _summary('Patch test (Tri3)', fem.get_result("U")[tip], 2.0 * sigma / E, 1e-8,
                    stress_error=float(np.max(np.abs(sxx - sigma)) / sigma))


def benchmark_pressurized_tube(n_circ=24, n_axial=16, num_threads=1):
    """Benchmark: faceted ShellQuad4 tube under uniform external pressure.

    R = 1, L = 4.014, t = 0.0369, ends held in X, Y and Z. Away from the
    ends the wall is in membrane hoop compression with no axial strain:

        u_r = -p R^2 (1 - nu^2) / (E t)

    compared with the mean radial displacement at mid-length.
    """
    E, nu, t, R, L, p = 203200.0, 0.27, 0.0369, 1.0, 4.014, 1.0
    fem = StaticFEM(verbose=False)
    fem.set_mesh(cylinder_shell_mesh(R, L, n_circ, n_axial))
    fem.set_num_threads(num_threads)
    fem.add_young_modulus(str(E))
    fem.add_poisson_ratio(str(nu))
    fem.add_thickness(str(t))
    fem.add_boundary_condition("0", f"z == 0 or z == {L}",
                               Direction.X | Direction.Y | Direction.Z)
    # element normals point outward, so inward pressure is negative
    fem.add_pressure_load(str(-p))
    fem.calculate()

    mesh = fem.mesh
    mid = np.flatnonzero(np.isclose(mesh.nodes[:, 2], mesh.nodes[n_axial // 2 * n_circ, 2]))
    x, y = mesh.nodes[mid, 0], mesh.nodes[mid, 1]
    ur = (fem.get_result("U")[mid] * x + fem.get_result("V")[mid] * y) / np.hypot(x, y)
    analytical = -p * R ** 2 * (1.0 - nu ** 2) / (E * t)
    W = fem.get_result("W")
    return _summary('Pressurized tube (ShellQuad4)', float(np.mean(ur)), analytical, 0.10,
                    uz_min=float(W.min()), uz_max=float(W.max()))


BENCHMARKS = (
    ('axial_bar', benchmark_axial_bar),
    ('cantilever', benchmark_cantilever),
    ('cube_gravity', benchmark_cube_gravity),
    ('patch_test', benchmark_patch_test),
    ('pressurized_tube', benchmark_pressurized_tube),
)


def run_all_benchmarks(verbose=True):
    """Run all benchmarks and print a results table.

    A benchmark that raises is reported as failed with its error message.

    Returns
    -------
    all_results : dict
        Maps benchmark key -> results dict.
    """
    if verbose:
        print("=" * 70)
        print("Static FEM Validation Benchmarks")
        print("=" * 70)
        print(f"{'Benchmark':<32}{'computed':>13}{'analytical':>13}{'error':>9}  ")

    all_results = {}
    for key, func in BENCHMARKS:
        try:
            res = func()
        except Exception as e:
            res = {'name': key, 'passed': False, 'error': f"{type(e).__name__}: {e}"}
        all_results[key] = res
        if not verbose:
            continue
        if 'error' in res:
            print(f"{res['name']:<32}FAILED: {res['error']}")
        else:
            status = 'PASS' if res['passed'] else 'FAIL'
            print(f"{res['name']:<32}{res['computed']:>13.5e}{res['analytical']:>13.5e}"
                  f"{res['rel_error']:>9.2%}  {status}")

    if verbose:
        n_pass = sum(1 for r in all_results.values() if r['passed'])
        print("=" * 70)
        print(f"{n_pass}/{len(all_results)} benchmarks passed.")
    return all_results
