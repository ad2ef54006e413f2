"""
Shared utilities module.

Sanitizers, number formatting and news filtering used by the upstream
clients and the API layer. Import from the submodules directly.
"""
