"""
Cadriciel Serveur
HTTP server composition root
"""

__version__ = "1.0.0"
