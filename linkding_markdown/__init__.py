"""
Утилита для выгрузки закладок Linkding в Markdown-документ.
"""

__version__ = "0.1.0"
