"""
tunnelrules - version-aware app rules for split tunneling.

Components:
- rules.version_rule: rule string language ("*", "150", ">=100", "[100-200]")
- rules.manager: built-in + runtime rule tables, match queries
- store: crash-consistent, lock-guarded single-value file storage
- resolver: installed-version lookup adapters
- selection: per-app tunnel selection helpers
"""

__version__ = "0.1.0"
