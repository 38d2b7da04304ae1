"""Feature modules: scripts, operations and the dispatch journal."""
