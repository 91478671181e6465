"""Read off probabilistic context-free grammars from treebanks.

The productions implicit in each tree are counted, and the counts are turned
into relative frequency estimates, i.e., maximum likelihood probabilities:
``P(A -> B C) = count(A -> B C) / count(A)``."""
import logging
import multiprocessing
from math import fsum
from collections import Counter, namedtuple
import numpy as np
from .tree import Tree, MalformedTree
from .util import workerfunc, workload

NONLEXICAL, LEXICAL = 0, 1
# how to treat nodes with both words and constituents as children
MIXED = ('nonterminal', 'error')


class InternalInvariantFailure(AssertionError):
	"""Counts are inconsistent; this indicates a bug, not a data error."""


class Rule(namedtuple('Rule', ('lhs', 'rhs', 'kind'))):
	"""A production ``lhs -> rhs``.

	:param lhs: a non-terminal label.
	:param rhs: a non-empty tuple of child labels, or a 1-tuple with a word
		when ``kind`` is ``LEXICAL``.
	:param kind: ``NONLEXICAL`` or ``LEXICAL``."""
	__slots__ = ()

	def __str__(self):
		return '%s -> %s' % (self.lhs, ' '.join(self.rhs))


def sortkey(rule):
	"""Sort key: non-lexical before lexical rules, then by lhs and rhs."""
	return rule.kind, rule.lhs, rule.rhs


def productions(tree, mixed='nonterminal'):
	"""Read off the productions of a tree in pre-order.

	A node whose only child is a word gives a lexical rule, followed by the
	word itself; any other node gives a non-lexical rule with the labels of
	its children.

	:param mixed: policy for a node with more than one child of which some
		or all are words, e.g., ``(NP (DT the) dog)`` or ``(NP the dog)``:

		:'nonterminal': the words are used as if they were non-terminal
			labels in the rule of that node (``NP -> DT dog``); they do not
			give rules of their own and are not part of the vocabulary. This
			includes nodes with only words as children: ``(NP the dog)``
			gives ``NP -> the dog`` and no words.
		:'error': raise MalformedTree.
	:yields: :class:`Rule` objects and words (``str``).

	>>> tree = Tree('(S (NP (DT the) (NN dog)) (VP (VBZ runs)))')
	>>> for event in productions(tree):
	...		print(event)
	S -> NP VP
	NP -> DT NN
	DT -> the
	the
	NN -> dog
	dog
	VP -> VBZ
	VBZ -> runs
	runs"""
	if mixed not in MIXED:
		raise ValueError('Expected one of %r. Got: %r' % (MIXED, mixed))
	# Non-recursive version
	agenda = [tree]
	while agenda:
		node = agenda.pop()
		if not node:
			raise MalformedTree('node without children: %s' % node.label,
					text=str(tree))
		if len(node) == 1 and not isinstance(node[0], Tree):
			yield Rule(node.label, (node[0], ), LEXICAL)
			yield node[0]
			continue
		if mixed == 'error' and not all(
				isinstance(child, Tree) for child in node):
			raise MalformedTree('mixed terminal and non-terminal children:\n'
					'%s' % node, text=str(tree))
		yield Rule(node.label, tuple(child.label if isinstance(child, Tree)
				else child for child in node), NONLEXICAL)
		agenda.extend(child for child in node[::-1]
				if isinstance(child, Tree))


class CountTable(object):
	"""Frequencies of productions, their left hand sides, and words.

	A table is filled one tree at a time; tables with counts of different
	trees can be added together.

	>>> table = CountTable()
	>>> table.addtree(Tree('(NP (DT the) (NN dog))'))
	>>> table.addtree(Tree('(NP (DT the) (NNS dogs))'))
	>>> table.lhstotals['NP'], sorted(table.vocabulary)
	(2, ['dog', 'dogs', 'the'])
	>>> for rule, prob in table.estimates():
	...		print(rule, prob)
	NP -> DT NN 0.5
	NP -> DT NNS 0.5
	DT -> the 1.0
	NN -> dog 1.0
	NNS -> dogs 1.0"""
	__slots__ = ('rulecounts', 'lhstotals', 'vocabulary', 'roots', 'numtrees')

	def __init__(self):
		self.rulecounts = Counter()  # Rule => frequency
		self.lhstotals = Counter()  # lhs => frequency
		self.vocabulary = set()
		self.roots = Counter()  # root label => frequency
		self.numtrees = 0

	def add(self, events):
		"""Count a sequence of rules and words (cf. :func:`productions`).

		The events are collected before anything is counted, so an exception
		from ``events`` leaves the table unchanged."""
		events = list(events)
		for event in events:
			if isinstance(event, Rule):
				self.rulecounts[event] += 1
				self.lhstotals[event.lhs] += 1
			else:
				self.vocabulary.add(event)

	def addtree(self, tree, mixed='nonterminal'):
		"""Count the productions of a tree; cf. :func:`productions`."""
		self.add(productions(tree, mixed))
		self.roots[tree.label] += 1
		self.numtrees += 1

	def merge(self, other):
		"""Add the counts of another table to this one."""
		self.rulecounts.update(other.rulecounts)
		self.lhstotals.update(other.lhstotals)
		self.vocabulary.update(other.vocabulary)
		self.roots.update(other.roots)
		self.numtrees += other.numtrees
		return self

	def __iadd__(self, other):
		return self.merge(other)

	def __add__(self, other):
		return CountTable().merge(self).merge(other)

	def __eq__(self, other):
		if not isinstance(other, CountTable):
			return False
		return (self.rulecounts == other.rulecounts
				and self.lhstotals == other.lhstotals
				and self.vocabulary == other.vocabulary
				and self.roots == other.roots
				and self.numtrees == other.numtrees)

	def __ne__(self, other):
		return not self.__eq__(other)

	__hash__ = None

	def __len__(self):
		return len(self.rulecounts)

	def __repr__(self):
		return '<%s with %d trees, %d rules, %d words>' % (
				self.__class__.__name__, self.numtrees, len(self.rulecounts),
				len(self.vocabulary))

	@property
	def start(self):
		"""The most frequent root label, or None if there are no trees."""
		if not self.roots:
			return None
		return min(self.roots, key=lambda label: (-self.roots[label], label))

	def check(self):
		"""Verify that the lhs totals are the sums of the rule counts.

		:raises InternalInvariantFailure: if this is not the case."""
		totals = Counter()
		for rule, freq in self.rulecounts.items():
			if freq <= 0:
				raise InternalInvariantFailure(
						'non-positive count %r for %s' % (freq, rule))
			totals[rule.lhs] += freq
		if totals != self.lhstotals:
			diff = sorted(lhs for lhs in set(totals) | set(self.lhstotals)
					if totals[lhs] != self.lhstotals[lhs])
			raise InternalInvariantFailure(
					'lhs totals do not match rule counts for: %s'
					% ' '.join(diff))

	def estimates(self):
		"""Relative frequency estimates of the rules in this table.

		:returns: a list of ``(rule, probability)`` tuples, sorted with
			:func:`sortkey`; empty if no trees were counted."""
		self.check()
		rules = sorted(self.rulecounts, key=sortkey)
		if not rules:
			return []
		freqs = np.array([self.rulecounts[rule] for rule in rules],
				dtype=np.int64)
		totals = np.array([self.lhstotals[rule.lhs] for rule in rules],
				dtype=np.int64)
		probs = freqs / totals
		return [(rule, float(prob)) for rule, prob in zip(rules, probs)]

	def nonterminals(self):
		""":returns: sorted list of labels that appear in non-lexical rules or
			as lhs of a lexical rule."""
		labels = set(self.lhstotals)
		for rule in self.rulecounts:
			if rule.kind == NONLEXICAL:
				labels.update(rule.rhs)
		return sorted(labels)

	def terminals(self):
		""":returns: sorted list of words."""
		return sorted(self.vocabulary)


def _keyed(trees):
	"""Pair trees with their keys; trees without a key are numbered from 1."""
	if isinstance(trees, dict):
		return iter(trees.items())
	return (tree if isinstance(tree, tuple) else (n, tree)
			for n, tree in enumerate(trees, 1))


def _counttrees(items, mixed):
	"""Count an iterable of ``(key, tree)`` tuples; collect errors."""
	table = CountTable()
	errors = []
	for key, tree in items:
		try:
			table.addtree(tree, mixed)
		except MalformedTree as err:
			err.lineno = key
			errors.append(err)
	return table, errors


@workerfunc
def countworker(args):
	"""Count the productions in a chunk of trees in a worker process."""
	items, mixed = args
	return _counttrees(items, mixed)


def treebankgrammar(trees, mixed='nonterminal', numproc=1, errors=None):
	"""Count the productions, left hand sides and words in a treebank.

	:param trees: an iterable of Tree objects, or of ``(key, tree)`` tuples
		with keys such as line numbers, or a dictionary mapping keys to trees
		(e.g., ``reader.trees()``). With a single process the trees are
		consumed one at a time, so a generator need not fit in memory.
	:param mixed: cf. :func:`productions`.
	:param numproc: number of processes to use; pass 0 to use detected # CPUs.
		Chunks of trees are counted in separate tables which are then merged.
	:param errors: if a list is given, a tree that cannot be read off under
		the ``mixed`` policy is skipped and its MalformedTree exception
		(with ``lineno`` set to its key) is appended; otherwise the exception
		is raised and nothing is returned.
	:returns: a :class:`CountTable`; use its ``estimates()`` method to obtain
		probabilities."""
	if mixed not in MIXED:
		raise ValueError('Expected one of %r. Got: %r' % (MIXED, mixed))
	if numproc == 0:
		numproc = multiprocessing.cpu_count()
	if not numproc or numproc < 0:
		raise ValueError('numproc should be an integer > 0. got: %r' % numproc)
	items = _keyed(trees)
	if numproc > 1:
		items = list(items)
	if numproc == 1 or len(items) < 2:
		table, errs = _counttrees(items, mixed)
	else:
		work = workload(items, numproc)
		logging.info('counting productions of %d trees in %d chunks',
				len(items), len(work))
		with multiprocessing.Pool(processes=numproc) as pool:
			results = pool.map(countworker, [(chunk, mixed) for chunk in work])
		table = CountTable()
		errs = []
		for partial, partialerrs in results:
			table.merge(partial)
			errs.extend(partialerrs)
	if errs and errors is None:
		raise errs[0]
	for err in errs:
		logging.error('skipping tree: %s', err)
	if errors is not None:
		errors.extend(errs)
	return table


def writegrammar(grammar):
	"""Write a grammar in a simple text file format.

	Rules are written in the order as they appear in the sequence `grammar`;
	the words are sorted. Probabilities are written as decimals without an
	exponent, with enough digits to recover the exact value when read back.

	:param grammar: a sequence of ``(rule, probability)`` tuples, as produced
		by ``CountTable.estimates()``.
	:returns: tuple of strings ``(rules, lexicon, words)``, one record per line:

		:rules: ``LHS -> RHS1 ... RHSn PROB`` for non-lexical rules.
		:lexicon: ``LHS -> WORD PROB`` for lexical rules.
		:words: ``WORD``.

	>>> rules, lexicon, words = writegrammar(
	...		treebankgrammar([Tree('(S (NP (NN dog)) (VP (VBZ runs)))'),
	...			Tree('(S (NP (NN cat)))')]).estimates())
	>>> print(rules + lexicon + words, end='')
	NP -> NN 1.0
	S -> NP 0.5
	S -> NP VP 0.5
	VP -> VBZ 1.0
	NN -> cat 0.5
	NN -> dog 0.5
	VBZ -> runs 1.0
	cat
	dog
	runs"""
	rules, lexicon, words = [], [], set()
	for rule, prob in grammar:
		line = '%s %s\n' % (rule, np.format_float_positional(
				float(prob), trim='0'))
		if rule.kind == LEXICAL:
			lexicon.append(line)
			words.add(rule.rhs[0])
		else:
			rules.append(line)
	return (''.join(rules), ''.join(lexicon),
			''.join('%s\n' % word for word in sorted(words)))


def readgrammar(rules, lexicon):
	"""Read a grammar in the format produced by :func:`writegrammar`.

	:param rules, lexicon: strings or iterables of lines.
	:returns: a list of ``(rule, probability)`` tuples, in the order of the
		input, non-lexical rules first.
	:raises ValueError: for a malformed line.

	>>> readgrammar('S -> NP VP 1.0\\n', ['NN -> dog 1.0'])
	... # doctest: +NORMALIZE_WHITESPACE
	[(Rule(lhs='S', rhs=('NP', 'VP'), kind=0), 1.0),
	(Rule(lhs='NN', rhs=('dog',), kind=1), 1.0)]"""
	grammar = []
	for kind, lines in ((NONLEXICAL, rules), (LEXICAL, lexicon)):
		if isinstance(lines, str):
			lines = lines.splitlines()
		for n, line in enumerate(lines, 1):
			fields = line.split()
			if not fields:
				continue
			if (len(fields) < 4 or fields[1] != '->'
					or (kind == LEXICAL and len(fields) != 4)):
				raise ValueError('line %d: malformed %s:\n%s' % (
						n, 'lexical rule' if kind == LEXICAL else 'rule',
						line))
			try:
				prob = float(fields[-1])
			except ValueError:
				raise ValueError('line %d: malformed probability:\n%s' % (
						n, line))
			grammar.append((Rule(fields[0], tuple(fields[2:-1]), kind), prob))
	return grammar


def testgrammar(grammar, epsilon=1e-9):
	"""Test whether the probabilities of rules with the same lhs sum to 1.

	:param grammar: a sequence of ``(rule, probability)`` tuples.
	:returns: a tuple ``(result, msg)`` where result is a boolean."""
	mass = {}
	for rule, prob in grammar:
		mass.setdefault(rule.lhs, []).append(prob)
	wrong = [(lhs, fsum(probs)) for lhs, probs in sorted(mass.items())
			if abs(fsum(probs) - 1.0) > epsilon]
	if wrong:
		return False, 'Does not sum to 1 within %g: %s' % (epsilon,
				', '.join('%s (%r)' % a for a in wrong))
	return True, 'All left hand sides sum to 1 (%d labels)' % len(mass)


def grammarinfo(grammar):
	"""Summarize statistics of a grammar.

	:param grammar: a sequence of ``(rule, probability)`` tuples."""
	lhs = {rule.lhs for rule, _ in grammar}
	nonlexical = [rule for rule, _ in grammar if rule.kind == NONLEXICAL]
	rhs = {label for rule in nonlexical for label in rule.rhs}
	words = {rule.rhs[0] for rule, _ in grammar if rule.kind == LEXICAL}
	result = 'labels: %d' % len(lhs | rhs)
	result += ' of which preterminals: %d\n' % len(
			{rule.lhs for rule, _ in grammar if rule.kind == LEXICAL})
	result += 'rules: %d  lexical rules: %d' % (
			len(grammar), len(grammar) - len(nonlexical))
	result += ' non-lexical rules: %d  words: %d\n' % (
			len(nonlexical), len(words))
	result += 'start symbol candidates: %s' % (
			' '.join(sorted(lhs - rhs)) or '(none)')
	if nonlexical:
		n, rule = max((len(rule.rhs), rule) for rule in nonlexical)
		result += '\nmax rhs length: %d in %s' % (n, rule)
		result += ' mean: %g' % np.mean([len(rule.rhs) for rule in nonlexical])
	return result


def grammarstats(grammar):
	"""Tabulate the number of rules and probability mass per lhs.

	:param grammar: a sequence of ``(rule, probability)`` tuples.
	:returns: a string with one tab-separated line per lhs, sorted."""
	table = {}
	for rule, prob in grammar:
		table.setdefault(rule.lhs, []).append(prob)
	return 'LHS\t# rules\tprob. mass\n' + ''.join(
			'%s\t%d\t%g\n' % (lhs, len(probs), fsum(probs))
			for lhs, probs in sorted(table.items()))


__all__ = ['NONLEXICAL', 'LEXICAL', 'MIXED', 'InternalInvariantFailure',
		'Rule', 'sortkey', 'productions', 'CountTable', 'countworker',
		'treebankgrammar', 'writegrammar', 'readgrammar', 'testgrammar',
		'grammarinfo', 'grammarstats']
