import contextlib
import inspect
import sys
from collections import Counter
from typing import Any, Dict, List, Optional

COLORS = {
    'location': '\033[0;34m',
    'warning': '\033[0;33m',
    'error': '\033[0;31m',
    'clear': '\033[0m',
}


class GeneratorStats:
    """
    Collects the warnings and errors of a rewrite run. Every distinct message is
    printed to stderr once and counted for the summary.

    Messages are prefixed with the trace of the types currently being processed
    (base type > subtype) and the source file of the innermost class therein.
    """

    def __init__(self):
        self._counts: Dict[str, Counter] = {'warning': Counter(), 'error': Counter()}
        self._traces: List[Any] = []
        self._colors = dict.fromkeys(COLORS, '')
        self._silent: Optional[bool] = None

    @property
    def silent(self) -> bool:
        # settings are read lazily as this module is imported before Django is set up
        if self._silent is None:
            from drf_polymorphism.settings import polymorphism_settings
            self._silent = polymorphism_settings.DISABLE_ERRORS_AND_WARNINGS
        return self._silent

    @silent.setter
    def silent(self, value: bool) -> None:
        self._silent = value

    def __bool__(self):
        return any(self._counts.values())

    @contextlib.contextmanager
    def silence(self):
        previous, self.silent = self.silent, True
        try:
            yield
        finally:
            self.silent = previous

    def reset(self) -> None:
        for counts in self._counts.values():
            counts.clear()

    def enable_color(self) -> None:
        self._colors = dict(COLORS)

    def _get_prefix(self, severity: str) -> str:
        prefix = ''
        classes = [obj for obj in self._traces if inspect.isclass(obj)]
        sourcefile = _get_sourcefile(classes[-1]) if classes else None
        if sourcefile:
            prefix += f'{self._colors["location"]}{sourcefile}: '

        prefix += self._colors[severity] + severity.capitalize()
        if self._traces:
            prefix += ' [' + ' > '.join(_get_label(obj) for obj in self._traces) + ']'
        return prefix + ': ' + self._colors['clear']

    def emit(self, msg: str, severity: str) -> None:
        counts = self._counts[severity]
        msg = self._get_prefix(severity) + str(msg)
        if not self.silent and msg not in counts:
            print(msg, file=sys.stderr)
        counts[msg] += 1

    def emit_summary(self) -> None:
        if self.silent or not self:
            return
        warnings, errors = self._counts['warning'], self._counts['error']
        print(
            f'\nPolymorphism rewrite summary:\n'
            f'Warnings: {sum(warnings.values())} ({len(warnings)} unique)\n'
            f'Errors:   {sum(errors.values())} ({len(errors)} unique)\n',
            file=sys.stderr
        )


GENERATOR_STATS = GeneratorStats()


def warn(msg: str) -> None:
    GENERATOR_STATS.emit(msg, 'warning')


def error(msg: str) -> None:
    GENERATOR_STATS.emit(msg, 'error')


def reset_generator_stats() -> None:
    GENERATOR_STATS.reset()


@contextlib.contextmanager
def add_trace_message(obj: Any):
    """ Adds ``obj`` to the trace prefixed to warnings and errors emitted within. """
    GENERATOR_STATS._traces.append(obj)
    try:
        yield
    finally:
        GENERATOR_STATS._traces.pop()


def _get_label(obj) -> str:
    return obj.__name__ if inspect.isclass(obj) else str(obj)


def _get_sourcefile(obj) -> Optional[str]:
    try:
        return inspect.getsourcefile(obj)
    except (TypeError, OSError):
        return None
