"""Генератор TypeScript SDK из OpenAPI 3.x спецификаций"""

__version__ = "1.0.0"
