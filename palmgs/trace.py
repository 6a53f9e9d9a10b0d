from .logger import logger

class Trace:
    def __init__(self):
        self.reset()

    def reset(self):
        self._stack = []

    @property
    def stack(self):
        return self._stack

    @property
    def indent(self):
        return len(self._stack) * ' ' * 2

    def push(self, v):
        self._stack.append(v)

    def pop(self):
        return self._stack.pop()

    def __call__(self, var, obj):
        self._mem = (var, obj)
        return self

    def __enter__(self):
        v, o = self._mem
        del self._mem
        self.push((v, o))
        logger.trace(f'{self.indent}> {o.__class__.__name__}.{v.__name__}')
        return self

    def __exit__(self, *excs):
        self.pop()

    def is_stacked(self, var, obj):
        return len([1 for v, o in self._stack if v is var and o is obj]) > 1
