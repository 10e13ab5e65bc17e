# tests/fakes.py

from collections import Counter
from typing import Dict, List


class FlakyDataSource:
    """
    Wraps a real data source and makes selected methods raise.

    - Records every method name called, in order
    - Methods listed in `failures` raise the given exception instead of running
    - With `fail_on_call`, a method only raises on that call number (1-based)
    """

    def __init__(self, inner, failures: Dict[str, Exception] = None, fail_on_call: Dict[str, int] = None):
        self._inner = inner
        self._failures = failures or {}
        self._fail_on_call = fail_on_call or {}
        self._counts = Counter()
        self.calls: List[str] = []

    def __getattr__(self, name):
        attr = getattr(self._inner, name)
        if not callable(attr):
            return attr

        def call(*args, **kwargs):
            self.calls.append(name)
            self._counts[name] += 1
            if name in self._failures:
                nth = self._fail_on_call.get(name)
                if nth is None or nth == self._counts[name]:
                    raise self._failures[name]
            return attr(*args, **kwargs)

        return call
