# fitz_patchwork/__init__.py
"""fitz-patchwork: turn free-form model output into validated project file edits."""

__version__ = "0.1.0"
