"""Front end for the Phi language: source tracking, diagnostics, tokens, syntax tree, parser and semantic checks."""

__version__ = "0.1.0"