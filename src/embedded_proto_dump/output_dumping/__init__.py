"""Output dumping exports."""

from .dump_models import DumpStatus, FileDumpResult
from .load_order_manifest import render_load_order_manifest, write_load_order_manifest
from .output_dumper import BACKUP_SUFFIX, OutputDumpError, dump_all, dump_file

__all__ = [
    "BACKUP_SUFFIX",
    "DumpStatus",
    "FileDumpResult",
    "OutputDumpError",
    "dump_all",
    "dump_file",
    "render_load_order_manifest",
    "write_load_order_manifest",
]
