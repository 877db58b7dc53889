from image_codemod.core.batch import discover_files, run_batch, run_file
from image_codemod.core.errors import CodemodError, EditConflictError, HostSyntaxError, QuerySyntaxError
from image_codemod.core.transform import transform_file, transform_source

__all__ = [
    "CodemodError",
    "EditConflictError",
    "HostSyntaxError",
    "QuerySyntaxError",
    "discover_files",
    "run_batch",
    "run_file",
    "transform_file",
    "transform_source",
]
