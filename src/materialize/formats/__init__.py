from .analyze import analyze_attachment, analyze_attachments
from .litematic import analyze_litematic, read_litematic
from .versions import UNKNOWN_VERSION, VersionTable, load_version_table
from .worldsave import analyze_world_save, read_descriptor_version

__all__ = [
    "UNKNOWN_VERSION",
    "VersionTable",
    "analyze_attachment",
    "analyze_attachments",
    "analyze_litematic",
    "analyze_world_save",
    "load_version_table",
    "read_descriptor_version",
    "read_litematic",
]
