"""
Known-pattern library and matcher.

Modules
-------
library : DEFAULT_PATTERNS + load_patterns() / dump_patterns() for the
          JSON pattern file (falls back to the built-in library).
matcher : signal_matches() / match_pattern() / identify_patterns() and
          the false-positive check.
"""
