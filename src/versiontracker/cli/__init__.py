"""Command-line interface for VersionTracker."""
