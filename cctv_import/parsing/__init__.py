from .reader import FileFormat, ParsedFile, detect_format, parse_file
from .template import write_template

__all__ = ["FileFormat", "ParsedFile", "detect_format", "parse_file", "write_template"]
