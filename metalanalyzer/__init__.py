"""Editor tooling for Metal shader sources: symbols, include graph, formatting, diagnostics and workspace scanning."""

__version__ = "0.1.5"

__all__ = ["diagnostics", "formatting", "header_owners", "protocol", "symbols", "workspace"]