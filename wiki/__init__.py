"""
flatwiki: a small wiki storing each page as a text file.
"""

__version__ = "0.1.0"
