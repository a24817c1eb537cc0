"""Public API surface for expando.processing."""
__all__ = [
    "regex_rules",
    "replace",
    "rule_specs",
]
