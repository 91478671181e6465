"""Command-line interfaces to modules."""
import sys
from sys import argv
from sys import exit as sysexit

COMMANDS = {
		'induce': 'Read off a PCFG from trees in bracket notation.',
		'info': 'Print statistics of a grammar and check its probabilities.',
	}


def main():
	"""Expose command-line interfaces."""
	from os.path import basename
	thiscmd = basename(argv[0])
	if len(argv) == 2 and argv[1] in ('-v', '--version'):
		from pcfgtool import __version__
		print(__version__)
	elif len(argv) <= 1 or argv[1] not in COMMANDS:
		print('Usage: %s <command> [arguments]\n' % thiscmd, file=sys.stderr)
		print('Command is one of:', file=sys.stderr)
		for a, b in sorted(COMMANDS.items()):
			print('   %s  %s' % (a.ljust(15), b), file=sys.stderr)
		print('for additional instructions issue: %s <command> --help'
			% thiscmd, file=sys.stderr)
		sysexit(2)
	else:
		globals()[argv[1]]()


def setuplogging(opts):
	"""Log messages to stderr; level depends on --quiet & --verbose."""
	import logging
	level = logging.INFO
	if '--quiet' in opts:
		level = logging.WARNING
	elif '--verbose' in opts:
		level = logging.DEBUG
	logging.basicConfig(level=level, format='%(message)s')


def induce(args=None):
	"""Read off a PCFG from trees in bracket notation.
Usage: pcfgtool induce [GRAMMAR] [options]

Trees are read from standard input, one tree per line, and the grammar is
written to standard output: the rules, followed by the lexicon and the words.
If GRAMMAR is given, the grammar is written to the files GRAMMAR.rules,
GRAMMAR.lexicon, and GRAMMAR.words instead.

Options:
  -i, --input=FILE  read trees from FILE instead of standard input; may be
                    given more than once; .gz files are decompressed.
  --inputenc=ENC    encoding of input [default: utf8].
  --outputenc=ENC   encoding of output files [default: utf8].
  --ensureroot=X    give empty root labels the label X, and add a root node
                    X to trees with another root label.
  --mixed=POLICY    nodes with both words and constituents as children:
                    'nonterminal': use words as labels in the rule [default];
                    'error': treat the tree as malformed.
  --multiline       a tree may span several lines; a tree ends when its
                    brackets are balanced.
  --strict          abort on the first malformed tree; nothing is written.
  --numproc=N       use N processes; 0 means all CPUs [default: 1].
  --gzip            compress output files with gzip.
  --quiet           only report warnings and errors.
  --verbose         report debugging information.

The exit status is 1 if any tree was malformed; malformed trees are skipped
and the grammar of the remaining trees is written. The exit status is 2 for
incorrect options and input files that cannot be read."""
	import logging
	from getopt import gnu_getopt, GetoptError
	from .tree import MalformedTree
	from .treebank import BracketCorpusReader
	from .grammar import treebankgrammar, writegrammar, grammarinfo, MIXED
	from .util import openwrite
	flags = ('help', 'strict', 'multiline', 'gzip', 'quiet', 'verbose')
	options = ('input=', 'inputenc=', 'outputenc=', 'ensureroot=', 'mixed=',
			'numproc=')
	if args is None:
		args = argv[2:]
	try:
		origopts, args = gnu_getopt(args, 'hi:', flags + options)
		if len(args) > 1:
			raise GetoptError('expected 0 or 1 positional arguments')
		opts = dict(origopts)
		mixed = opts.get('--mixed', 'nonterminal')
		if mixed not in MIXED:
			raise GetoptError('--mixed: expected one of %s; got: %r' % (
					', '.join(MIXED), mixed))
		numproc = int(opts.get('--numproc', 1))
		if numproc < 0:
			raise GetoptError('--numproc: expected integer >= 0')
	except (GetoptError, ValueError) as err:
		print('error:', err, file=sys.stderr)
		print(induce.__doc__, file=sys.stderr)
		sysexit(2)
	if '-h' in opts or '--help' in opts:
		print(induce.__doc__)
		return
	setuplogging(opts)
	inputs = [b for a, b in origopts if a in ('-i', '--input')] or '-'
	try:
		reader = BracketCorpusReader(
				inputs,
				encoding=opts.get('--inputenc', 'utf8'),
				ensureroot=opts.get('--ensureroot'),
				multiline='--multiline' in opts,
				strict='--strict' in opts)
	except ValueError as err:
		print('error:', err, file=sys.stderr)
		sysexit(2)
	errors = None if '--strict' in opts else []
	try:
		table = treebankgrammar(
				((key, item.tree) for key, item in reader.itertrees()),
				mixed=mixed, numproc=numproc, errors=errors)
	except MalformedTree as err:
		logging.error('error: %s\naborting; no grammar written.', err)
		sysexit(1)
	except (OSError, UnicodeDecodeError) as err:
		print('error:', err, file=sys.stderr)
		sysexit(2)
	numerrors = len(reader.errors) + len(errors or ())
	if not table.numtrees:
		logging.warning('warning: no well-formed trees in input; '
				'the grammar is empty.')
	grammar = table.estimates()
	rules, lexicon, words = writegrammar(grammar)
	if args:
		compress = '--gzip' in opts
		for ext, data in (('rules', rules), ('lexicon', lexicon),
				('words', words)):
			with openwrite('%s.%s' % (args[0], ext),
					encoding=opts.get('--outputenc', 'utf8'),
					compress=compress) as out:
				out.write(data)
		logging.info('wrote grammar to %s.{rules,lexicon,words}%s',
				args[0], '.gz' if compress else '')
	else:
		sys.stdout.write(rules)
		sys.stdout.write(lexicon)
		sys.stdout.write(words)
		sys.stdout.flush()
	logging.info('read %d trees; start symbol: %s', table.numtrees,
			table.start)
	if grammar:
		logging.info(grammarinfo(grammar))
	if numerrors:
		logging.error('%d malformed trees were skipped.', numerrors)
		sysexit(1)


def info(args=None):
	"""Print statistics of a grammar and check its probabilities.
Usage: pcfgtool info GRAMMAR

Reads GRAMMAR.rules and GRAMMAR.lexicon (or their .gz versions) as written by
'pcfgtool induce', and prints for each left hand side the number of rules and
their probability mass, followed by a summary. The exit status is 1 if the
probabilities of some left hand side do not sum to 1."""
	import os
	from .util import openread
	from .grammar import readgrammar, grammarinfo, grammarstats, testgrammar
	if args is None:
		args = argv[2:]
	if '-h' in args or '--help' in args:
		print(info.__doc__)
		return
	if len(args) != 1:
		print('error: incorrect number of arguments', file=sys.stderr)
		print(info.__doc__, file=sys.stderr)
		sysexit(2)
	filenames = []
	for ext in ('rules', 'lexicon'):
		filename = '%s.%s' % (args[0], ext)
		if not os.path.exists(filename) and os.path.exists(filename + '.gz'):
			filename += '.gz'
		filenames.append(filename)
	try:
		with openread(filenames[0]) as rules, \
				openread(filenames[1]) as lexicon:
			grammar = readgrammar(rules, lexicon)
	except OSError as err:
		print('error:', err, file=sys.stderr)
		sysexit(2)
	except ValueError as err:
		print('error: %s: %s' % (args[0], err), file=sys.stderr)
		sysexit(1)
	print(grammarstats(grammar), end='')
	if grammar:
		print(grammarinfo(grammar))
	result, msg = testgrammar(grammar)
	print(msg)
	if not result:
		sysexit(1)


if __name__ == "__main__":
	main()

__all__ = ['main', 'induce', 'info']
