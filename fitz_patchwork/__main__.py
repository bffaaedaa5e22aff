# fitz_patchwork/__main__.py
"""Entry point for python -m fitz_patchwork."""

from fitz_patchwork.cli import app

if __name__ == "__main__":
    app()
