from .field_output import (
    RESULT_NAMES,
    result_names,
    nodal_average,
    field_summary,
    format_summary,
)
from .result_file import save_result, load_result
