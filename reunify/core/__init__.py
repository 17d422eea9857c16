"""
Core Application Logic
======================

This package contains the foundational business logic for the Reunify
application: the editor session state machine, the shareable locket codec,
data URL helpers and global configuration.
"""
