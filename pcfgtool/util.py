"""Misc code to avoid cyclic imports."""
import sys
import gzip
import traceback
from functools import wraps


def workerfunc(func):
	"""Wrap a multiprocessing worker function to produce a full traceback."""
	@wraps(func)
	def wrapper(*args, **kwds):
		"""Apply decorated function."""
		try:
			return func(*args, **kwds)
		except Exception:  # pylint: disable=W0703
			# Put traceback as string into an exception and raise that
			raise Exception('in worker process\n%s' %
					''.join(traceback.format_exception(*sys.exc_info())))
	return wrapper


def openread(filename, encoding='utf8'):
	"""Open stdin/file for reading; decompress gz files on-the-fly.

	:param encoding: if None, mode is binary; otherwise, text."""
	mode = 'rb' if encoding is None else 'rt'
	if filename == '-':
		return open(sys.stdin.fileno(), mode=mode, encoding=encoding,
				closefd=False)
	if not isinstance(filename, int) and filename.endswith('.gz'):
		return gzip.open(filename, mode=mode, encoding=encoding)
	return open(filename, mode=mode, encoding=encoding)


def openwrite(filename, encoding='utf8', compress=False):
	"""Open a file for writing text.

	:param compress: if True, write a gzip file; a ``.gz`` extension is added
		to the filename if it does not have one already."""
	if compress:
		if not filename.endswith('.gz'):
			filename += '.gz'
		return gzip.open(filename, mode='wt', encoding=encoding)
	return open(filename, mode='wt', encoding=encoding)


def workload(items, numproc, mult=1):
	"""Divide a sequence in chunks for ``numproc`` worker processes.

	:param mult: create this many chunks per process.
	:returns: a list of lists, together containing all items in order.

	>>> workload(list(range(7)), 3)
	[[0, 1, 2], [3, 4, 5], [6]]"""
	numchunks = max(1, numproc * mult)
	chunk = len(items) // numchunks + (len(items) % numchunks != 0)
	if chunk == 0:
		return []
	return [items[n:n + chunk] for n in range(0, len(items), chunk)]


__all__ = ['workerfunc', 'openread', 'openwrite', 'workload']
