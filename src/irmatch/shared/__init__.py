"""
Shared components: source locations and error reporting.
"""

from .source_location import SourceLocation
from .errors import Error, ErrorReporter, IRMatchError, IRSourceError, InvalidPatternError
