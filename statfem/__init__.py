"""
statfem - Static Linear Elastic Finite Element Engine

Solves K u = f for meshes of a single element type, with material data,
loads and prescribed displacements given as expressions of the nodal
coordinates, and reports nodal displacements, strains and stresses.

Element library:
    - Bar2:        2-node bar (1D)
    - Tri3, Quad4: plane stress triangle and quadrilateral (2D)
    - Tet4, Hex8:  linear tetrahedron and trilinear hexahedron (3D)
    - ShellTri3, ShellQuad4: flat Mindlin shells with 6 DOFs per node

Mesh formats:
    - native .mesh, Netgen .vol, Gmsh 4.x ASCII .msh

Solvers:
    - dense Cholesky (scipy.linalg), sparse direct (scipy.sparse)
"""

__version__ = "0.1.0"

from .errors import (
    FEMError,
    MeshFormatError,
    ParseError,
    EvaluationError,
    ConfigError,
    NumericError,
    FEMIOError,
)
from .expression import Expression, compile_expression, evaluate
from .elements.types import FeType, FE_INFO
from .mesh.nodes import Mesh
from .mesh.readers import load_mesh, save_mesh
from .mesh.generators import line_mesh, rectangle_mesh, box_mesh, cylinder_shell_mesh
from .parameters import Direction, ParamType, Parameter, FEMParameters
from .solvers.static import StaticFEM
from .postprocessing.field_output import result_names
from .postprocessing.result_file import save_result, load_result
from .config import ProblemConfig, load_problem
