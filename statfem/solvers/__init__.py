from .base import Solver
from .dense import DenseSolver
from .sparse import SparseSolver
from .factory import create_solver
from .static import StaticFEM
