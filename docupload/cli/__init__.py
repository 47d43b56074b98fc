"""Command-line interface for docupload."""
