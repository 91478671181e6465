"""Tree objects for representing phrase-structure trees."""
# This is an adaptation of the original tree.py file from NLTK.
# Removed: probabilistic, parented & immutable trees, binarization,
# drawing, &c.
# Original notice:
# Natural Language Toolkit: Text Trees
#
# Copyright (C) 2001-2010 NLTK Project
# Author: Edward Loper <edloper@gradient.cis.upenn.edu>
#         Steven Bird <sb@csse.unimelb.edu.au>
#         Nathan Bodenstab <bodenstab@cslu.ogi.edu> (tree transforms)
# URL: <http://www.nltk.org/>
# For license information, see LICENSE.TXT
import re

# a tree is printed with at most this many characters of context in errors
CONTEXT = 10


class MalformedTree(ValueError):
	"""A record that is not a well-formed tree in bracket notation.

	:param offset: character offset in ``text`` where the problem was found.
	:param expecting: description of what was expected at ``offset``.
	:param text: the offending record.

	A corpus reader fills in ``lineno`` and ``filename`` when available."""

	def __init__(self, msg, offset=None, expecting=None, text=None):
		super(MalformedTree, self).__init__(msg)
		self.offset = offset
		self.expecting = expecting
		self.text = text
		self.lineno = None
		self.filename = None

	def __str__(self):
		msg = super(MalformedTree, self).__str__()
		if self.lineno is None:
			return msg
		return '%s:%d: %s' % (self.filename or '<input>', self.lineno, msg)


class Tree(object):
	"""A labeled, n-ary tree structure.

	Each Tree represents a single constituent; its children are a list of
	leaves and subtrees, where a leaf is a word (a ``str``) and a subtree is a
	nested Tree. A node is a leaf iff it is not a Tree; an internal node has at
	least one child.

	Tree positions are defined as follows:

	- The tree position ``i`` specifies a Tree's ith child.
	- The tree position () specifies the Tree itself.
	- If ``p`` is the tree position of descendant ``d``, then
		``p + (i,)`` specifies the ith child of ``d``.

	The constructor can be called in two ways:

	- ``Tree(label, children)`` constructs a new tree with the specified label
		and list of children.
	- ``Tree(s)`` constructs a new tree by parsing the string s. Equivalent to
		calling the class method ``Tree.parse(s)``.

	>>> tree = Tree('(S (NP (DT the) (NN dog)) (VP (VBZ runs)))')
	>>> tree[0].label, tree[0, 1], tree.leaves()
	('NP', Tree('NN', ['dog']), ['the', 'dog', 'runs'])
	"""
	__slots__ = ('label', 'children')

	def __new__(cls, label_or_str=None, children=None):
		if label_or_str is None:
			return object.__new__(cls)  # used by copy.deepcopy & pickle
		if children is None:
			if not isinstance(label_or_str, str):
				raise TypeError("%s: Expected a label and child list "
						"or a single string; got: %s" % (
						cls.__name__, type(label_or_str)))
			return cls.parse(label_or_str)
		if isinstance(children, str) or not hasattr(children, '__iter__'):
			raise TypeError("%s() argument 2 should be a list, not a "
					"string" % cls.__name__)
		return object.__new__(cls)

	def __init__(self, label_or_str=None, children=None):
		# __new__ may delegate to Tree.parse(), in which case __init__ is
		# called a second time with only a string; skip that call.
		if children is None:
			return
		self.label = label_or_str
		self.children = list(children)

	# === Comparison operators ==================================
	def __eq__(self, other):
		if not isinstance(other, Tree):
			return False
		return (self.label == other.label
				and self.children == other.children)

	def __ne__(self, other):
		return not self.__eq__(other)

	__hash__ = None

	# === Delegated list operations ==============================
	def __iter__(self):
		return self.children.__iter__()

	def __len__(self):
		return self.children.__len__()

	# === Indexing (with support for tree positions) ============
	def __getitem__(self, index):
		if isinstance(index, (int, slice)):
			return self.children.__getitem__(index)
		else:
			if len(index) == 0:
				return self
			elif len(index) == 1:
				return self[int(index[0])]
			return self[int(index[0])][index[1:]]

	# === Basic tree operations =================================
	def leaves(self):
		""":returns: list containing this tree's leaves.

		The order reflects the order of the tree's hierarchical structure."""
		leaves = []
		agenda = [self]
		while agenda:
			node = agenda.pop()
			if isinstance(node, Tree):
				agenda.extend(node[::-1])
			else:
				leaves.append(node)
		return leaves

	def height(self):
		""":returns: The longest distance from this node to a leaf node.

		- the height of a tree containing only leaves is 2;
		- the height of any other tree is one plus the maximum of its
			children's heights."""
		result = 0
		agenda = [(self, 1)]
		while agenda:
			node, depth = agenda.pop()
			if isinstance(node, Tree):
				agenda.extend((child, depth + 1) for child in node)
			else:
				result = max(result, depth)
		return result

	def subtrees(self, condition=None):
		"""Yield subtrees of this tree in depth-first, pre-order traversal.

		:param condition: a function ``Tree -> bool`` to filter which nodes are
			yielded (does not affect whether children are visited)."""
		# Non-recursive version
		agenda = [self]
		while agenda:
			node = agenda.pop()
			if isinstance(node, Tree):
				if condition is None or condition(node):
					yield node
				agenda.extend(node[::-1])

	def pos(self):
		"""Collect preterminals (part-of-speech nodes).

		:returns: a list of ``(word, tag)`` tuples for each leaf whose parent
			is a preterminal, in the order of the sentence.

		>>> Tree('(S (NP (DT the) (NN dog)) (VP (VBZ runs)))').pos()
		[('the', 'DT'), ('dog', 'NN'), ('runs', 'VBZ')]"""
		return [(node[0], node.label) for node in self.subtrees(
				lambda n: len(n) == 1 and not isinstance(n[0], Tree))]

	# === Parsing ===============================================
	@classmethod
	def parse(cls, s, brackets='()', ensureroot=None):
		"""Parse a bracketed tree string and return the resulting tree.
		Trees are represented as nested bracketings, such as:
		``(S (NP (NNP John)) (VP (V runs)))``

		:param s: The string to parse; must contain exactly one tree.
		:param brackets: The two bracket characters used to mark the
			beginning and end of trees and subtrees.
		:param ensureroot: if given, a root node with an empty label gets this
			label, and a root with another label is put under a new node with
			this label; e.g., ``( (S ...) )`` becomes ``(ROOT (S ...))``.
			Without it, an empty label is an error.
		:raises MalformedTree: on unbalanced brackets, empty labels, nodes
			without children, words outside of brackets, or trailing input.
		:returns: A tree corresponding to the string representation s.

		>>> Tree.parse('( (NN dog))', ensureroot='ROOT')
		Tree('ROOT', [Tree('NN', ['dog'])])
		"""
		if not isinstance(brackets, str) or len(brackets) != 2:
			raise TypeError('brackets must be a length-2 string')
		if re.search(r'\s', brackets):
			raise TypeError('whitespace brackets not allowed')
		# Construct a regexp that will tokenize the string.
		open_b, close_b = brackets[:1], brackets[1:]
		open_pattern, close_pattern = (re.escape(open_b), re.escape(close_b))
		token_pattern = r'[^\s%s%s]+' % (open_pattern, close_pattern)
		token_re = re.compile(r'%s\s*(%s)?|%s|(%s)' % (
				open_pattern, token_pattern, close_pattern, token_pattern))
		# Walk through each token, updating a stack of trees.
		stack = [(None, [])]  # list of (label, children) tuples
		for match in token_re.finditer(s):
			token = match.group()
			if token[0] == open_b:  # Beginning of a tree/subtree
				if len(stack) == 1 and len(stack[0][1]) > 0:
					cls._parse_error(s, match, 'end-of-string')
				label = match.group(1)
				if label is None:
					if len(stack) > 1 or ensureroot is None:
						cls._parse_error(s, match, 'label')
					label = ''
				stack.append((label, []))
			elif token == close_b:  # End of a tree/subtree
				if len(stack) == 1:
					if len(stack[0][1]) == 0:
						cls._parse_error(s, match, open_b)
					else:
						cls._parse_error(s, match, 'end-of-string')
				label, children = stack.pop()
				if not children:
					cls._parse_error(s, match, 'child')
				stack[-1][1].append(cls(label, children))
			else:  # Leaf node
				if len(stack) == 1:
					cls._parse_error(s, match, open_b)
				stack[-1][1].append(token)
		# check that we got exactly one complete tree.
		if len(stack) > 1:
			cls._parse_error(s, 'end-of-string', close_b)
		elif len(stack[0][1]) == 0:
			cls._parse_error(s, 'end-of-string', open_b)
		tree = stack[0][1][0]
		if ensureroot is not None:
			if tree.label == '':
				tree.label = ensureroot
			elif tree.label != ensureroot:
				tree = cls(ensureroot, [tree])
		return tree

	@classmethod
	def _parse_error(cls, orig, match, expecting):
		"""Raise a friendly error message when parsing a tree string fails.

		:param orig: The string we're parsing.
		:param match: regexp match of the problem token.
		:param expecting: what we expected to see instead."""
		if match == 'end-of-string':
			pos, token = len(orig), 'end-of-string'
		else:
			pos, token = match.start(), match.group()
		msg = '%s.parse(): expected %r but got %r at index %d.' % (
				cls.__name__, expecting, token, pos)
		# Add a display showing the error token itself:
		s = orig.replace('\n', ' ').replace('\t', ' ')
		offset = pos
		if len(s) > pos + CONTEXT:
			s = s[:pos + CONTEXT] + '...'
		if pos > CONTEXT:
			s = '...' + s[pos - CONTEXT:]
			offset = CONTEXT + 3
		msg += '\n    "%s"\n     %s^' % (s, ' ' * offset)
		raise MalformedTree(msg, offset=pos, expecting=expecting, text=orig)

	# === String Representations ================================
	def __repr__(self):
		childstr = ", ".join(repr(c) for c in self)
		return '%s(%r, [%s])' % (self.__class__.__name__, self.label, childstr)

	def __str__(self):
		return self._pprint_flat('()')

	def _pprint_flat(self, brackets):
		"""Pretty-printing helper function."""
		# Non-recursive version; None marks the end of a constituent.
		result = []
		agenda = [self]
		while agenda:
			node = agenda.pop()
			if node is None:
				result.append(brackets[1])
			elif isinstance(node, Tree):
				result.append('%s%s' % (brackets[0], node.label))
				agenda.append(None)
				for child in reversed(node.children):
					agenda.append(child)
					agenda.append(' ')
				if not node.children:
					result.append(' ')
			else:
				result.append(node)
		return ''.join(result)


__all__ = ['MalformedTree', 'Tree']
