# Path: anki_lang/__init__.py
__version__ = "0.1.0"
