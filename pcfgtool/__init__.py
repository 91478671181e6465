"""Induce probabilistic context-free grammars from treebanks (pcfg-tool).

Main components:

- A reader for phrase-structure trees in Penn Treebank bracket notation.
- Extraction of productions and relative frequency estimation of a PCFG,
  optionally using several processes.
- A command-line interface to write and inspect the resulting grammars.
"""
__version__ = '0.1.0'
