"""Core modules for venvcleaner."""
