"""
autoscaffold test suite
=======================

Test Modules
------------
- test_patterns.py: Parsing, matching, specificity and watch-dir inference
- test_scopes.py: Template root discovery and loading
- test_store.py: Merging and the live registry
- test_presets.py: Built-in preset loading
- test_models.py: Configuration models and pyproject.toml integration
- test_watcher.py: Event handling, template application, live updates
- test_session.py: Session start/stop
- test_cli.py: Command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Skip the end-to-end watcher tests
    pytest -m "not slow"

    # Run specific module
    pytest tests/test_patterns.py
"""
