"""Bundled content: the default damage table and a sample scenario."""
