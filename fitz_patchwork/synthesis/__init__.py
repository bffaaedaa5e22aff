# fitz_patchwork/synthesis/__init__.py
"""
Text-to-file-plan synthesis.

Turns a raw model response into the ordered list of FileEdits to write:
identifier derivation, route resolution, block extraction, scaffold
synthesis, text normalization and schema merging. The pipeline module
runs the stages in order.
"""
