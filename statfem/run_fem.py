"""
Top-Level Driver for the Static FEM Engine
============================================

Executes one static analysis described by a JSON problem file:
    1. Load the problem file and the mesh it names
    2. Apply command line overrides (threads, eps, solver, output)
    3. Assemble, solve and recover nodal results
    4. Save the result file and, optionally, a contour plot of one field
    5. Print summary results

Usage:
    # Installed entry point:
    statfem beam.json --threads 4 --output beam.res --plot Sxx

    # Or as a module:
    python -m statfem.run_fem --benchmark

    # Or programmatically:
    from statfem.run_fem import run_fem_analysis
    results = run_fem_analysis("beam.json", threads=4)
"""

import argparse
import logging
import os
import sys

from .config import SOLVERS, load_problem
from .errors import FEMError

log = logging.getLogger(__name__)


def run_fem_analysis(problem_path, output=None, threads=None, eps=None,
                     solver=None, plot=None, verbose=True):
    """Run a complete analysis.

    Parameters
    ----------
    problem_path : str
        JSON problem file.
    output : str or None
        Result file; overrides the problem's ``output``.
    threads : int or None
        Producer threads per stage; overrides the problem's ``threads``.
    eps : float or None
        Zero threshold; overrides the problem's ``eps``.
    solver : str or None
        'dense' or 'sparse'; overrides the problem's ``solver``.
    plot : str or None
        Field name to draw as a contour plot next to the result file
        (planar meshes only).
    verbose : bool
        Print banners, progress bars and the summary.

    Returns
    -------
    results : dict
        Keys: 'mesh_info', 'fields' (name -> (min, max)), 'elapsed',
        'output', 'figure'.
    """
    from .postprocessing.field_output import field_summary

    problem = load_problem(problem_path)
    if threads is not None:
        problem.threads = threads
    if eps is not None:
        problem.eps = eps
    if solver is not None:
        problem.solver = solver
    if output is not None:
        problem.output = output

    fem = problem.build(verbose=verbose)
    fem.calculate()

    results = {
        'mesh_info': {
            'fe_type': fem.mesh.fe_name,
            'n_nodes': fem.mesh.n_nodes,
            'n_elements': fem.mesh.n_elements,
            'n_boundary': fem.mesh.n_boundary,
        },
        'fields': {name: (lo, hi)
                   for name, lo, hi in field_summary(fem.result_names(), fem.result)},
        'elapsed': fem.elapsed,
        'output': None,
        'figure': None,
    }

    if problem.output:
        fem.save_result(problem.output)
        results['output'] = problem.output
        if verbose:
            print(f"Results saved to {problem.output}")

    if plot:
        results['figure'] = _plot_field(fem, plot, problem.output or problem_path)
        if verbose:
            print(f"Figure saved to {results['figure']}")
    return results


def _plot_field(fem, name, base_path):
    """Contour plot of one result field, saved as <base>_<name>.png."""
    from .postprocessing.visualization import plot_field, plt

    field = fem.get_result(name)
    fig, _ = plot_field(fem.mesh, field, title=name, label=name,
                        displacement=fem.displacement())
    path = f"{os.path.splitext(base_path)[0]}_{name}.png"
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    log.info("figure written: %s", path)
    return path


def main(argv=None):
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description='Static linear elastic FEM analysis',
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        'problem', nargs='?',
        help='JSON problem file (mesh, parameters, options)'
    )
    parser.add_argument(
        '--output', type=str, default=None,
        help='Result file (default: "output" of the problem file)'
    )
    parser.add_argument(
        '--threads', type=int, default=None,
        help='Producer threads per assembly stage'
    )
    parser.add_argument(
        '--eps', type=float, default=None,
        help='Zero threshold for results and the singularity check'
    )
    parser.add_argument(
        '--solver', type=str, default=None, choices=SOLVERS,
        help='Linear system backend:\n'
             '  dense  = Cholesky on a full matrix (default)\n'
             '  sparse = sparse direct solver'
    )
    parser.add_argument(
        '--plot', type=str, default=None, metavar='FIELD',
        help='Save a contour plot of FIELD (e.g. Sxx), planar meshes only'
    )
    parser.add_argument(
        '--quiet', action='store_true',
        help='No banners, progress bars or summary'
    )
    parser.add_argument(
        '--log-level', type=str, default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: WARNING)'
    )
    parser.add_argument(
        '--benchmark', action='store_true',
        help='Run analytical benchmarks instead of a problem file'
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(levelname)s %(name)s: %(message)s')

    if args.benchmark:
        from .validation.analytical_benchmarks import run_all_benchmarks
        results = run_all_benchmarks(verbose=not args.quiet)
        return 0 if all(r['passed'] for r in results.values()) else 1

    if args.problem is None:
        parser.error('a problem file is required unless --benchmark is given')

    try:
        run_fem_analysis(
            args.problem,
            output=args.output,
            threads=args.threads,
            eps=args.eps,
            solver=args.solver,
            plot=args.plot,
            verbose=not args.quiet,
        )
    except (FEMError, KeyError) as e:
        print(f"FEM error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
