"""Bundled data files for venvcleaner."""
