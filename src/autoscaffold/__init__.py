"""
autoscaffold - Live Boilerplate for New Empty Files
===================================================

Watches a project while you work on it and fills every newly created,
empty file with boilerplate taken from a template tree that mirrors the
project layout.

Features
--------
- **Path patterns**: ``[name]`` and ``[...path]`` tokens in template file names
- **Specificity**: the most specific matching template wins
- **Nested scopes**: any directory may carry its own ``.scaffold`` folder
- **Presets**: built-in collections for Vue, Vue Router, Pinia and Pinia Colada
- **Live templates**: edits to templates apply without restarting

Quick Start
-----------
```bash
mkdir -p .scaffold/src/components
echo '<template><div /></template>' > ".scaffold/src/components/[...path].vue"
autoscaffold watch
touch src/components/forms/Input.vue   # now contains the template
```

Example
-------
>>> from pathlib import Path
>>> from autoscaffold import ScaffoldOptions, ScaffoldSession
>>> session = ScaffoldSession(Path("."), ScaffoldOptions(presets=["vue"])).start()
>>> session.stop()

Architecture
------------
- ``patterns``: pattern parsing, matching and specificity ranking
- ``scopes``: template root discovery and loading
- ``store``: template set merging and the live registry
- ``presets``: built-in template collections
- ``watcher``: file-system watching and template application
- ``session``: start/stop surface for hosts
- ``models``: Pydantic configuration models
- ``cli``: Typer command line interface
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from autoscaffold.errors import ScaffoldError, TemplateUnavailable, WriteFailed
from autoscaffold.models import PresetName, ScaffoldOptions, load_options
from autoscaffold.patterns import ParsedTemplate, match_file, parse_template_path, resolve_best
from autoscaffold.session import ScaffoldSession


__all__ = [
    "ParsedTemplate",
    "PresetName",
    "ScaffoldError",
    "ScaffoldOptions",
    "ScaffoldSession",
    "TemplateUnavailable",
    "WriteFailed",
    "__version__",
    "load_options",
    "match_file",
    "parse_template_path",
    "resolve_best",
]
