""" Run doctests and other tests from all modules. """
from doctest import testmod, NORMALIZE_WHITESPACE, REPORT_NDIFF
from operator import itemgetter

MODULES = """tree treebank grammar util cli""".split()
MODULES = [__import__('pcfgtool.%s' % mod, globals(), locals(), [mod])
		for mod in MODULES]

results = {}
for mod in MODULES:
	modname = str(getattr(mod, '__file__', mod))
	print('running doctests of %s' % modname)
	results[modname] = fail, attempted = testmod(mod, verbose=False,
			optionflags=NORMALIZE_WHITESPACE | REPORT_NDIFF)
	assert fail == 0, modname
for modname, (fail, attempted) in sorted(results.items(), key=itemgetter(1)):
	if attempted:
		print('%s: %d doctests succeeded!' % (modname, attempted))
