from .parallel import run_stage, partition
from .assembler import (
    element_dofs,
    check_material,
    element_parameters,
    assemble_stiffness,
    apply_point_loads,
    apply_volume_loads,
    apply_surface_loads,
    apply_boundary_conditions,
    recover_results,
)
