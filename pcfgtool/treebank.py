"""Read treebanks in bracket notation."""
import os
import logging
from glob import glob
from collections import OrderedDict
from .tree import Tree, MalformedTree
from .util import openread


class Item(object):
	"""A treebank item."""
	__slots__ = ('tree', 'block', 'lineno', 'filename')

	def __init__(self, tree, block, lineno, filename=None):
		self.tree = tree  # A Tree
		self.block = block  # a string with tree in original treebank format
		self.lineno = lineno  # line number where the record starts
		self.filename = filename  # None if read from an anonymous stream


class BracketCorpusReader(object):
	"""Corpus reader for phrase-structures in bracket notation.

	For example::

		(S (NP (NNP John)) (VP (VB is) (JJ rich)) (. .))

	Records are keyed by their line number; when several files are read,
	they are treated as a single stream, so line numbers continue across
	files. Malformed records are skipped and collected in ``errors``."""

	def __init__(self, path, encoding='utf8', ensureroot=None,
			multiline=False, strict=False):
		"""
		:param path: filename, pattern of corpus files (e.g., ``wsj*.mrg``),
			or ``'-'`` for standard input; or a list of these.
		:param ensureroot: add root node with given label if necessary;
			see :meth:`Tree.parse`.
		:param multiline: if True, a record may span several lines and ends
			when its brackets are balanced; otherwise, one record per line.
		:param strict: if True, raise MalformedTree on the first malformed
			record instead of skipping it."""
		self.ensureroot = ensureroot
		self.multiline = multiline
		self.strict = strict
		self.errors = []
		self._encoding = encoding
		self._filenames = []
		for pattern in [path] if isinstance(path, str) else path:
			if pattern == '-':
				self._filenames.append(pattern)
				continue
			filenames = sorted(glob(pattern))
			if not filenames:
				raise ValueError("no files matched pattern '%s' in %s" % (
						pattern, os.getcwd()))
			self._filenames.extend(filenames)
		if not self._filenames:
			raise ValueError('no input files given')
		self._trees_cache = None

	def itertrees(self, start=None, end=None):
		"""
		:returns: an iterator returning tuples ``(key, item)``
			of well-formed sentences in corpus, where ``item`` is an
			:py:class:Item instance. Useful when the dictionary of all trees
			in corpus would not fit in memory.
		:param start, end: only return records with keys in this range."""
		self.errors = []
		offset = 0
		for filename in self._filenames:
			numlines = [0]
			with openread(filename, encoding=self._encoding) as inp:
				for item in readtrees(_countlines(inp, numlines),
						ensureroot=self.ensureroot,
						multiline=self.multiline, strict=self.strict,
						errors=self.errors, filename=filename):
					key = offset + item.lineno
					if end is not None and key >= end:
						return
					if start is None or key >= start:
						yield key, item
			offset += numlines[0]

	def trees(self):
		"""
		:returns: an ordered dictionary of parse trees."""
		if self._trees_cache is None:
			self._trees_cache = OrderedDict(self.itertrees())
		return OrderedDict((n, a.tree) for n, a in self._trees_cache.items())

	def blocks(self):
		"""
		:returns: an ordered dictionary of strings containing the raw
			representation of well-formed trees in the original treebank."""
		if self._trees_cache is None:
			self._trees_cache = OrderedDict(self.itertrees())
		return OrderedDict((n, a.block) for n, a in self._trees_cache.items())


def _countlines(lines, result):
	"""Pass through lines while keeping count in ``result[0]``."""
	for line in lines:
		result[0] += 1
		yield line


def readtrees(lines, ensureroot=None, multiline=False, strict=False,
		errors=None, filename=None):
	"""Parse trees from an iterable of lines.

	Blank lines are skipped. A malformed record is logged and skipped;
	the exception is added to ``errors`` if given, with its ``lineno`` and
	``filename`` attributes set.

	:param lines: an iterable of strings (line endings optional).
	:param ensureroot, multiline, strict: cf. :class:`BracketCorpusReader`.
	:yields: :class:`Item` objects.

	>>> errors = []
	>>> items = readtrees(['(NN dog)', '', '(S (NP cat)', '(VB runs)'],
	...		errors=errors)
	>>> [(item.lineno, str(item.tree)) for item in items]
	[(1, '(NN dog)'), (4, '(VB runs)')]
	>>> [err.lineno for err in errors]
	[3]"""
	segment = segmentbrackets if multiline else segmentlines
	for lineno, block in segment(lines):
		try:
			tree = Tree.parse(block, ensureroot=ensureroot)
		except MalformedTree as err:
			err.lineno, err.filename = lineno, filename
			if strict:
				raise
			logging.error('skipping malformed tree: %s\n%s', err, block)
			if errors is not None:
				errors.append(err)
			continue
		yield Item(tree, block, lineno, filename)


def segmentlines(lines):
	"""Segment input with one record per line.

	:yields: tuples ``(lineno, block)`` for each non-blank line."""
	for lineno, line in enumerate(lines, 1):
		if line.strip():
			yield lineno, line.rstrip('\r\n')


def segmentbrackets(lines):
	"""Segment input where a record may span several lines.

	A record starts at the first non-blank line and ends at the first line
	where its brackets are balanced (or there is an excess of closing
	brackets). An unterminated record at the end of the input is yielded as
	well, so that the parser can report it.

	:yields: tuples ``(lineno, block)`` where ``lineno`` is the line on which
		the record starts.

	>>> list(segmentbrackets(['(S (NP John)', '   (VP runs))', '', '(A a)']))
	[(1, '(S (NP John)\\n   (VP runs))'), (4, '(A a)')]"""
	parens = 0  # number of open brackets
	block = []
	start = None
	for lineno, line in enumerate(lines, 1):
		if not block:
			if not line.strip():
				continue
			start = lineno
		block.append(line.rstrip('\r\n'))
		parens += line.count('(') - line.count(')')
		if parens <= 0:
			yield start, '\n'.join(block)
			block, parens = [], 0
	if block:
		yield start, '\n'.join(block)


__all__ = ['Item', 'BracketCorpusReader', 'readtrees', 'segmentlines',
		'segmentbrackets']
