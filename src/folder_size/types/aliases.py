"""Type aliases using modern PEP 695 syntax.

This module defines type aliases for common type patterns
throughout the application.
"""

import os
from collections.abc import MutableMapping

# Path → computed size in bytes
# Keys are native path strings; absence means "not yet computed"
type PathSizeCache = MutableMapping[str, int]

# Anything accepted where a filesystem path is expected
type StrPath = str | os.PathLike[str]
