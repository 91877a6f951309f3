"""
espaces: núcleo cliente del marketplace de espacios de oficina.

Búsqueda, filtrado y caché de listings sobre el API REST de propiedades.
"""

__version__ = "0.1.0"
