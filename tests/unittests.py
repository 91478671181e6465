"""Unit tests for pcfgtool modules."""
# pylint: disable=C0111,W0232
import os
import gzip
import pickle
from itertools import permutations
import pytest
from pcfgtool import cli, __version__
from pcfgtool.tree import Tree, MalformedTree
from pcfgtool.treebank import BracketCorpusReader, readtrees
from pcfgtool.grammar import (Rule, CountTable, InternalInvariantFailure,
		NONLEXICAL, LEXICAL, productions, treebankgrammar, writegrammar,
		readgrammar, grammarinfo, grammarstats)
from pcfgtool import grammar as grammarmod

SAMPLE = '''(S (NP (DT the) (NN dog)) (VP (VBZ runs)))
(S (NP (DT a) (NN cat)) (VP (VBZ sleeps) (PP (IN on) (NP (DT the) (NN mat)))))
(S (NP (PRP it)) (VP (VBZ runs)))
(NP (DT the) (NNS dogs))
(S (NP (NNP John)) (VP (VBZ sees) (NP (DT a) (NN dog))) (. .))
'''


def induce(treestrs, **kwds):
	"""Return the output streams for a list of trees in bracket notation."""
	return writegrammar(treebankgrammar(
			[Tree(a) for a in treestrs], **kwds).estimates())


class Test_tree(object):
	def test_parse(self):
		treestr = '(S (NP (DT the) (NN dog)) (VP (VBZ runs)))'
		tree = Tree(treestr)
		assert str(tree) == treestr
		assert tree.label == 'S'
		assert tree[1, 0] == Tree('VBZ', ['runs'])
		assert tree[()] is tree
		assert tree.leaves() == ['the', 'dog', 'runs']
		assert tree.height() == 4
		assert [a.label for a in tree.subtrees()] == [
				'S', 'NP', 'DT', 'NN', 'VP', 'VBZ']
		assert Tree('(  NN\tdog )') == Tree('NN', ['dog'])
		assert Tree.parse('[S [A a]]', brackets='[]') == Tree('(S (A a))')

	def test_malformed(self):
		for treestr, expecting in (
				('(NN dog', ')'),
				('dog', '('),
				('', '('),
				('(NN dog))', 'end-of-string'),
				('(NN dog) (NN cat)', 'end-of-string'),
				('( (NN dog))', 'label'),
				('(S (NP dog) ( (VB x)))', 'label'),
				('(NN )', 'child'),
				('(S (NP ) (VP v))', 'child')):
			with pytest.raises(MalformedTree) as excinfo:
				Tree.parse(treestr)
			assert excinfo.value.expecting == expecting, treestr
			assert excinfo.value.text == treestr
		assert isinstance(excinfo.value, ValueError)

	def test_errorposition(self):
		with pytest.raises(MalformedTree) as excinfo:
			Tree('(S (NP dog) (VP ))')
		err = excinfo.value
		assert err.offset == 16
		assert 'index 16' in str(err)
		err.lineno, err.filename = 3, 'wsj.mrg'
		assert str(err).startswith('wsj.mrg:3: ')

	def test_ensureroot(self):
		assert str(Tree.parse('( (S (NP dog)) )', ensureroot='ROOT')) == (
				'(ROOT (S (NP dog)))')
		assert str(Tree.parse('(S (NP dog))', ensureroot='ROOT')) == (
				'(ROOT (S (NP dog)))')
		assert str(Tree.parse('(ROOT (S (NP dog)))', ensureroot='ROOT')) == (
				'(ROOT (S (NP dog)))')
		with pytest.raises(MalformedTree):
			Tree.parse('( (S ( dog)) )', ensureroot='ROOT')

	def test_deep(self):
		depth = 5000
		treestr = '(A ' * depth + '(B b)' + ')' * depth
		tree = Tree(treestr)
		assert tree.height() == depth + 2
		assert str(tree) == treestr
		assert str(Tree('NN', [])) == '(NN )'

	def test_pickle(self):
		tree = Tree('(S (NP (DT the) (NN dog)) (VP (VBZ runs)))')
		assert pickle.loads(pickle.dumps(tree)) == tree


class Test_treebank(object):
	def test_readtrees(self):
		errors = []
		items = list(readtrees(
				['(A a)', '(B', '   ', '(C c)  ', 'c', '(D d)'], errors=errors,
				filename='x.mrg'))
		assert [(a.lineno, a.block) for a in items] == [
				(1, '(A a)'), (4, '(C c)  '), (6, '(D d)')]
		assert [(err.lineno, err.filename) for err in errors] == [
				(2, 'x.mrg'), (5, 'x.mrg')]
		with pytest.raises(MalformedTree):
			list(readtrees(['(A a)', '(B'], strict=True))

	def test_multiline(self):
		data = '''( (S (NP-SBJ (NNP John))
		    (VP (VBZ runs))
		    (. .)) )

( (S (NP-SBJ (PRP It))
		    (VP (VBD rained))) )
'''
		items = list(readtrees(data.splitlines(), ensureroot='ROOT',
				multiline=True))
		assert [a.lineno for a in items] == [1, 5]
		assert str(items[0].tree) == (
				'(ROOT (S (NP-SBJ (NNP John)) (VP (VBZ runs)) (. .)))')
		assert items[1].tree.leaves() == ['It', 'rained']

	def test_reader(self, tmp_path):
		(tmp_path / 'a.mrg').write_text('(A a)\n\n(B b\n')
		with gzip.open(str(tmp_path / 'b.mrg.gz'), 'wt') as out:
			out.write('(C c)\n')
		reader = BracketCorpusReader(str(tmp_path / '*.mrg*'))
		trees = reader.trees()
		# line numbers continue across files
		assert list(trees) == [1, 4]
		assert trees[4] == Tree('C', ['c'])
		assert reader.blocks()[1] == '(A a)'
		assert [err.lineno for err in reader.errors] == [3]
		assert reader.errors[0].filename.endswith('a.mrg')
		assert [key for key, _ in reader.itertrees(start=2)] == [4]
		reader = BracketCorpusReader([str(tmp_path / '*.mrg*')])
		assert list(reader.trees()) == [1, 4]
		with pytest.raises(ValueError):
			BracketCorpusReader(str(tmp_path / '*.nonexistent'))

	def test_strictreader(self, tmp_path):
		(tmp_path / 'a.mrg').write_text('(A a)\n(B b\n')
		reader = BracketCorpusReader(str(tmp_path / 'a.mrg'), strict=True)
		with pytest.raises(MalformedTree) as excinfo:
			reader.trees()
		assert excinfo.value.lineno == 2


class Test_grammar(object):
	def test_productions(self):
		tree = Tree('(S (NP (DT the) (NN dog)) (VP (VBZ runs)))')
		events = list(productions(tree))
		assert events[:4] == [
				Rule('S', ('NP', 'VP'), NONLEXICAL),
				Rule('NP', ('DT', 'NN'), NONLEXICAL),
				Rule('DT', ('the', ), LEXICAL),
				'the']
		# restartable
		assert list(productions(tree)) == events
		assert str(events[0]) == 'S -> NP VP'

	def test_lexical(self):
		assert induce(['(NN dog)']) == ('', 'NN -> dog 1.0\n', 'dog\n')

	def test_sentence(self):
		rules, lexicon, words = induce(
				['(S (NP (DT the) (NN dog)) (VP (VBZ runs)))'])
		assert rules == 'NP -> DT NN 1.0\nS -> NP VP 1.0\nVP -> VBZ 1.0\n'
		assert lexicon == 'DT -> the 1.0\nNN -> dog 1.0\nVBZ -> runs 1.0\n'
		assert words == 'dog\nruns\nthe\n'

	def test_fractions(self):
		rules, lexicon, _ = induce(['(NP (DT the) (NN dog))',
				'(NP (DT a) (NNS dogs))', '(NP (DT the) (NN cat))'])
		assert rules == ('NP -> DT NN 0.6666666666666666\n'
				'NP -> DT NNS 0.3333333333333333\n')
		assert lexicon.splitlines()[:2] == [
				'DT -> a 0.3333333333333333', 'DT -> the 0.6666666666666666']
		assert 'NN -> cat 0.5\nNN -> dog 0.5\n' in lexicon

	def test_smallprobabilities(self):
		grammar = treebankgrammar(
				[Tree('NN', ['w%d' % n]) for n in range(20000)]).estimates()
		_, lexicon, _ = writegrammar(grammar)
		assert lexicon.splitlines()[0] == 'NN -> w0 0.00005'
		assert 'e-' not in lexicon
		assert readgrammar('', lexicon) == grammar

	def test_sumtoone(self):
		grammar = treebankgrammar(
				[Tree(a) for a in SAMPLE.splitlines()]).estimates()
		result, msg = grammarmod.testgrammar(grammar)
		assert result, msg
		# also after a round trip through the text format
		rules, lexicon, _ = writegrammar(grammar)
		result, msg = grammarmod.testgrammar(readgrammar(rules, lexicon))
		assert result, msg

	def test_words(self):
		_, lexicon, words = induce(SAMPLE.splitlines())
		assert sorted(set(line.split()[2] for line in lexicon.splitlines())
				) == words.splitlines()

	def test_deterministic(self):
		treestrs = SAMPLE.splitlines()
		expected = induce(treestrs)
		assert induce(treestrs) == expected
		for perm in permutations(treestrs):
			assert induce(perm) == expected

	def test_unarylexical(self):
		table = treebankgrammar([Tree('(S (NP the))')])
		assert table.rulecounts == {
				Rule('S', ('NP', ), NONLEXICAL): 1,
				Rule('NP', ('the', ), LEXICAL): 1}
		assert table.vocabulary == {'the'}

	def test_mixed(self):
		mixedtree = Tree('(NP (DT the) dog)')
		table = treebankgrammar([mixedtree])
		assert table.rulecounts == {
				Rule('NP', ('DT', 'dog'), NONLEXICAL): 1,
				Rule('DT', ('the', ), LEXICAL): 1}
		assert table.vocabulary == {'the'}

		goodtree = Tree('(NP (DT a) (NN cat))')
		errors = []
		table = treebankgrammar([goodtree, mixedtree, goodtree],
				mixed='error', errors=errors)
		assert [err.lineno for err in errors] == [2]
		assert table == treebankgrammar([goodtree, goodtree])
		with pytest.raises(MalformedTree):
			treebankgrammar([goodtree, mixedtree], mixed='error')
		with pytest.raises(ValueError):
			treebankgrammar([goodtree], mixed='foo')

	def test_onlywords(self):
		table = treebankgrammar([Tree('(NP the dog)')])
		assert table.rulecounts == {Rule('NP', ('the', 'dog'), NONLEXICAL): 1}
		assert table.vocabulary == set()
		assert induce(['(NP the dog)']) == ('NP -> the dog 1.0\n', '', '')
		with pytest.raises(MalformedTree):
			treebankgrammar([Tree('(NP the dog)')], mixed='error')

	def test_deepmixed(self):
		depth = 5000
		deep = Tree('(A ' * depth + '(B (C c) d)' + ')' * depth)
		errors = []
		table = treebankgrammar([deep, Tree('(NN dog)')], mixed='error',
				errors=errors)
		assert [err.lineno for err in errors] == [1]
		assert table == treebankgrammar([Tree('(NN dog)')])

	def test_keys(self):
		errors = []
		treebankgrammar({10: Tree('(A a)'), 20: Tree('(B (C c) d)')},
				mixed='error', errors=errors)
		assert errors[0].lineno == 20
		errors = []
		treebankgrammar([(7, Tree('(B (C c) d)'))], mixed='error',
				errors=errors)
		assert errors[0].lineno == 7

	def test_parallel(self):
		trees = [Tree(a) for a in SAMPLE.splitlines() * 5]
		trees.insert(7, Tree('(X (Y y) x)'))
		errors1, errors2 = [], []
		sequential = treebankgrammar(trees, mixed='error', errors=errors1)
		parallel = treebankgrammar(trees, mixed='error', numproc=2,
				errors=errors2)
		assert parallel == sequential
		assert parallel.estimates() == sequential.estimates()
		assert [err.lineno for err in errors2] == [
				err.lineno for err in errors1] == [8]

	def test_merge(self):
		trees = [Tree(a) for a in SAMPLE.splitlines()]
		table1 = treebankgrammar(trees[:2])
		table2 = treebankgrammar(trees[2:])
		assert table1 + table2 == table2 + table1 == treebankgrammar(trees)
		table1 += table2
		assert table1 == treebankgrammar(trees)
		assert table1.numtrees == 5
		assert table1.start == 'S'
		assert 'NP' in table1.nonterminals() and '.' in table1.nonterminals()
		assert table1.terminals()[0] == '.'

	def test_check(self):
		table = treebankgrammar([Tree('(NP (DT the) (NN dog))')])
		table.check()
		table.lhstotals['NP'] += 1
		with pytest.raises(InternalInvariantFailure):
			table.estimates()
		table.lhstotals['NP'] = 0
		with pytest.raises(AssertionError):
			table.estimates()

	def test_empty(self):
		table = treebankgrammar([])
		assert table == CountTable()
		assert table.estimates() == []
		assert table.start is None
		assert writegrammar(table.estimates()) == ('', '', '')
		assert grammarmod.testgrammar([])[0]

	def test_readgrammar(self):
		grammar = treebankgrammar(
				[Tree(a) for a in SAMPLE.splitlines()]).estimates()
		rules, lexicon, _ = writegrammar(grammar)
		assert readgrammar(rules, lexicon) == grammar
		with pytest.raises(ValueError):
			readgrammar('S -> NP\n', '')
		with pytest.raises(ValueError):
			readgrammar('', 'NN -> dog cat 1.0\n')
		with pytest.raises(ValueError):
			readgrammar('S NP VP 1.0\n', '')

	def test_testgrammar(self):
		grammar = [(Rule('S', ('NP', 'VP'), NONLEXICAL), 0.5),
				(Rule('NN', ('dog', ), LEXICAL), 1.0)]
		result, msg = grammarmod.testgrammar(grammar)
		assert not result
		assert 'S (0.5)' in msg

	def test_grammarinfo(self):
		grammar = treebankgrammar(
				[Tree(a) for a in SAMPLE.splitlines()]).estimates()
		info = grammarinfo(grammar)
		assert 'start symbol candidates: S' in info
		assert 'max rhs length: 3' in info
		stats = grammarstats(grammar)
		assert stats.splitlines()[0] == 'LHS\t# rules\tprob. mass'
		assert 'NP\t4\t1\n' in stats


class Test_cli(object):
	def test_induce(self, tmp_path):
		inp = tmp_path / 'sample.mrg'
		inp.write_text(SAMPLE)
		base = str(tmp_path / 'sample')
		cli.induce([base, '--input=%s' % inp, '--quiet'])
		rules, lexicon, words = induce(SAMPLE.splitlines())
		with open(base + '.rules') as rulesfile:
			assert rulesfile.read() == rules
		with open(base + '.lexicon') as lexiconfile:
			assert lexiconfile.read() == lexicon
		with open(base + '.words') as wordsfile:
			assert wordsfile.read() == words

		cli.info([base])

	def test_stdout(self, tmp_path, capsys):
		inp = tmp_path / 'sample.mrg'
		inp.write_text(SAMPLE)
		cli.induce(['-i', str(inp), '--numproc=2'])
		assert capsys.readouterr().out == ''.join(
				induce(SAMPLE.splitlines()))

	def test_malformed(self, tmp_path):
		inp = tmp_path / 'sample.mrg'
		inp.write_text('(NN dog)\n(S (NP the)\n(NN cat)\n(NP (DT a) dog)\n')
		base = str(tmp_path / 'out')
		with pytest.raises(SystemExit) as excinfo:
			cli.induce([base, '--input=%s' % inp, '--mixed=error'])
		assert excinfo.value.code == 1
		with open(base + '.lexicon') as lexiconfile:
			assert lexiconfile.read() == 'NN -> cat 0.5\nNN -> dog 0.5\n'

		with pytest.raises(SystemExit) as excinfo:
			cli.induce([base + '2', '--input=%s' % inp, '--strict'])
		assert excinfo.value.code == 1
		assert not os.path.exists(base + '2.rules')

	def test_gzip(self, tmp_path, capsys):
		inp = tmp_path / 'sample.mrg'
		inp.write_text(SAMPLE)
		base = str(tmp_path / 'sample')
		cli.induce([base, '--input=%s' % inp, '--gzip'])
		assert not os.path.exists(base + '.rules')
		with gzip.open(base + '.words.gz', 'rt') as wordsfile:
			assert wordsfile.read() == induce(SAMPLE.splitlines())[2]
		cli.info([base])
		out = capsys.readouterr().out
		assert 'All left hand sides sum to 1' in out

	def test_empty(self, tmp_path):
		inp = tmp_path / 'empty.mrg'
		inp.write_text('\n\n')
		base = str(tmp_path / 'empty')
		cli.induce([base, '--input=%s' % inp])
		for ext in ('rules', 'lexicon', 'words'):
			assert os.path.getsize('%s.%s' % (base, ext)) == 0

	def test_info(self, tmp_path):
		base = str(tmp_path / 'bad')
		with open(base + '.rules', 'w') as out:
			out.write('S -> NP VP 0.5\n')
		with open(base + '.lexicon', 'w') as out:
			out.write('NN -> dog 1.0\n')
		with pytest.raises(SystemExit) as excinfo:
			cli.info([base])
		assert excinfo.value.code == 1

	def test_glob(self, tmp_path):
		(tmp_path / 'wsj_01.mrg').write_text('(NN dog)\n')
		(tmp_path / 'wsj_02.mrg').write_text('(NN cat)\n')
		base = str(tmp_path / 'wsj')
		cli.induce([base, '--input=%s' % (tmp_path / 'wsj_*.mrg')])
		with open(base + '.words') as wordsfile:
			assert wordsfile.read() == 'cat\ndog\n'
		with open(base + '.lexicon') as lexiconfile:
			assert lexiconfile.read() == 'NN -> cat 0.5\nNN -> dog 0.5\n'

	def test_missingfiles(self, tmp_path, capsys):
		base = str(tmp_path / 'missing')
		with pytest.raises(SystemExit) as excinfo:
			cli.induce([base, '--input=%s' % (tmp_path / 'nonexistent.mrg')])
		assert excinfo.value.code == 2
		with pytest.raises(SystemExit) as excinfo:
			cli.info([base])
		assert excinfo.value.code == 2
		assert capsys.readouterr().err.count('error:') == 2
		with open(base + '.rules', 'w') as out:
			out.write('S NP 1.0\n')
		with open(base + '.lexicon', 'w') as out:
			out.write('')
		with pytest.raises(SystemExit) as excinfo:
			cli.info([base])
		assert excinfo.value.code == 1

	def test_usage(self, tmp_path, capsys, monkeypatch):
		for args in (['--mixed=foo'], ['--numproc=x'], ['a', 'b'],
				['--nonexistent']):
			with pytest.raises(SystemExit) as excinfo:
				cli.induce(args)
			assert excinfo.value.code == 2
		assert 'error:' in capsys.readouterr().err
		with pytest.raises(SystemExit) as excinfo:
			cli.info([])
		assert excinfo.value.code == 2

		monkeypatch.setattr(cli, 'argv', ['pcfgtool', '--version'])
		cli.main()
		assert capsys.readouterr().out.strip() == __version__
		monkeypatch.setattr(cli, 'argv', ['pcfgtool', 'nonexistent'])
		with pytest.raises(SystemExit) as excinfo:
			cli.main()
		assert excinfo.value.code == 2
		assert 'induce' in capsys.readouterr().err


def test_collected():
	"""Functions imported into this module are not collected as tests."""
	assert not [name for name, obj in globals().items()
			if name.startswith('test') and callable(obj)
			and obj.__module__ != __name__]
