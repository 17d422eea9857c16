"""
Reunify
=======

Desktop app that composites two photos into one shared moment with Gemini,
adds a letter and a voice message, and shares the result as a locket link.
"""

__version__ = "1.0.0"
