from .nodes import Mesh
from .readers import load_mesh, read_native, read_vol, read_msh, save_mesh
from .generators import line_mesh, rectangle_mesh, box_mesh, cylinder_shell_mesh
