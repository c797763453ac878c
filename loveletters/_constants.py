"""Common literal values used across loveletters.

These constants keep filenames, reserved directory names, and environment
variable names centralized so discovery, rendering, bundling, and tests import
the same values without drifting. Intended for internal use within the
loveletters package.

Examples
--------
>>> from loveletters import _constants
>>> _constants.REGISTRY_ARCHIVE_TEMPLATE.format(
...     registry="https://packages.example", namespace="preview",
...     name="theme", version="0.1.0",
... )
'https://packages.example/preview/theme-0.1.0.tar.gz'
"""

PROJECT_CONFIG_FILENAME = "loveletters.toml"
CONTENT_DIRNAME = "content"
PROJECT_PACKAGES_DIRNAME = "packages"

INDEX_DIRNAME = "_index"
POSTS_DIRNAME = "posts"
RESERVED_DIRNAMES = frozenset({INDEX_DIRNAME, POSTS_DIRNAME, "static", "assets"})

OUTPUT_FILENAME = "index.html"

PROJECT_NAMESPACE = "loveletters"
DEFAULT_REGISTRY_URL = "https://packages.typst.org"
REGISTRY_ARCHIVE_TEMPLATE = "{registry}/{namespace}/{name}-{version}.tar.gz"
CACHE_DIR_ENV = "CACHE_DIRECTORY"
