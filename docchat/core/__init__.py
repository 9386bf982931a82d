"""
Core domain logic.

Pure upload validation, storage path derivation, the chat session state
machine and the exception hierarchy. No I/O happens in this package.
"""
