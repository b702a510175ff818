"""
L4 Execution — functions that WRITE to the system.

Subprocess calls, downloads, archive extraction, apt source lists,
and the scoped work directory.  Import from the modules directly.
"""
