"""
Nodal result fields of the static analysis.

The result table has one row per field and one column per node. Rows are
the nodal DOFs followed by the averaged strains and stresses:

    Bar2            U, Exx, Sxx
    Tri3, Quad4     U, V, Exx, Eyy, Exy, Sxx, Syy, Sxy
    Tet4, Hex8      U, V, W, Exx, Eyy, Ezz, Exy, Exz, Eyz,
                    Sxx, Syy, Szz, Sxy, Sxz, Syz
    shells          U, V, W, Tx, Ty, Tz, then as Tet4/Hex8

Functions:
    result_names:   field names for an element type
    nodal_average:  per-node sums / incident element counts, small values -> 0
    field_summary:  (name, min, max) per field
    format_summary: the summary as printed after a run
"""

import numpy as np

from ..elements.types import SHELL_TYPES, FeType

_STRAIN_3D = ["Exx", "Eyy", "Ezz", "Exy", "Exz", "Eyz"]
_STRESS_3D = ["Sxx", "Syy", "Szz", "Sxy", "Sxz", "Syz"]

RESULT_NAMES = {
    FeType.BAR2: ["U", "Exx", "Sxx"],
    FeType.TRI3: ["U", "V", "Exx", "Eyy", "Exy", "Sxx", "Syy", "Sxy"],
    FeType.QUAD4: ["U", "V", "Exx", "Eyy", "Exy", "Sxx", "Syy", "Sxy"],
    FeType.TET4: ["U", "V", "W"] + _STRAIN_3D + _STRESS_3D,
    FeType.HEX8: ["U", "V", "W"] + _STRAIN_3D + _STRESS_3D,
}
for _t in SHELL_TYPES:
    RESULT_NAMES[_t] = ["U", "V", "W", "Tx", "Ty", "Tz"] + _STRAIN_3D + _STRESS_3D


def result_names(fe_type):
    """List of field names, in row order, for an element type."""
    if not isinstance(fe_type, FeType):
        fe_type = FeType.from_tag(fe_type)
    return list(RESULT_NAMES[fe_type])


def nodal_average(sums, counts, eps):
    """Divide nodal sums by the number of contributing elements.

    Parameters
    ----------
    sums : ndarray, shape (M, N_nodes)
        Summed element contributions.
    counts : ndarray, shape (N_nodes,)
        Number of elements that contributed to each node. Nodes without
        elements keep a zero value.
    eps : float
        Values with magnitude below eps are set to exactly 0.

    Returns
    -------
    averaged : ndarray, shape (M, N_nodes)
    """
    sums = np.asarray(sums, dtype=np.float64)
    counts = np.asarray(counts, dtype=np.float64)
    averaged = sums / np.maximum(counts, 1.0)
    averaged[np.abs(averaged) < eps] = 0.0
    return averaged


def field_summary(names, result):
    """(name, min, max) of every row of the result table."""
    result = np.asarray(result)
    if result.shape[1] == 0:
        return [(name, 0.0, 0.0) for name in names]
    return [(name, float(row.min()), float(row.max()))
            for name, row in zip(names, result)]


def format_summary(names, result):
    lines = ["-" * 46, "Fun:\tmin\t\tmax"]
    for name, lo, hi in field_summary(names, result):
        lines.append(f"{name}\t{lo:+e}\t{hi:+e}")
    return "\n".join(lines)
