"""Setup script for pcfg-tool."""
import sys
try:
	from setuptools import setup
	SETUPTOOLS = True
except ImportError:
	from distutils.core import setup
	SETUPTOOLS = False

from pcfgtool import __version__

with open('README.rst') as inp:
	README = inp.read()

REQUIRES = [
		'numpy',  # '>=1.6.1',
		]
METADATA = dict(name='pcfg-tool',
		version=__version__,
		description='Induce probabilistic context-free grammars from treebanks',
		long_description=README,
		classifiers=[
				'Development Status :: 4 - Beta',
				'Environment :: Console',
				'Intended Audience :: Science/Research',
				'Operating System :: POSIX',
				'Programming Language :: Python :: 3',
				'Topic :: Text Processing :: Linguistic',
		],
		requires=REQUIRES,
		packages=['pcfgtool'],
	)
if SETUPTOOLS:
	METADATA['install_requires'] = REQUIRES
	METADATA['extras_require'] = {'test': ['pytest']}
	METADATA['entry_points'] = {
			'console_scripts': ['pcfgtool = pcfgtool.cli:main']}

if __name__ == '__main__':
	if sys.version_info[:2] < (3, 5):
		raise RuntimeError('Python version 3.5+ required.')
	setup(**METADATA)
