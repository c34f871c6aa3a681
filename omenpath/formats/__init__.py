from omenpath.formats.base import FieldSpec, FormatDescriptor, FormatKind
from omenpath.formats.registry import FORMATS, FORMATS_BY_ID, get_format

__all__ = [
    "FORMATS",
    "FORMATS_BY_ID",
    "FieldSpec",
    "FormatDescriptor",
    "FormatKind",
    "get_format",
]
