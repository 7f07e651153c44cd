from .analytical_benchmarks import (
    BENCHMARKS,
    benchmark_axial_bar,
    benchmark_cantilever,
    benchmark_cube_gravity,
    benchmark_patch_test,
    benchmark_pressurized_tube,
    run_all_benchmarks,
)
