from .statevar import statevar, system
from .unit import U
from collections import ChainMap
from functools import reduce

# ChainMap order is backwards like multiple inheritance
decorators = (statevar, system)

class TrackableMeta(type):
    def __new__(metacls, name, bases, namespace):
        # register each var and its aliases under every name it answers to
        def restruct(namespace, decorator):
            n1 = {k: v for k, v in namespace.items() if isinstance(v, decorator)}
            n2 = {a: v for v in n1.values() for a in v._alias_lst}
            return dict(n1, **n2)
        ns = {f'_{d.__name__}': restruct(namespace, d) for d in decorators}
        var_namespace = dict(ChainMap(*ns.values()))

        cls = type.__new__(metacls, name, bases, dict(ChainMap(var_namespace, namespace)))

        # merge with vars inherited from base classes
        def remember(cls, key, namespace):
            d = dict(getattr(cls, key, {}), **namespace)
            setattr(cls, key, d)
        remember(cls, '_trackable', var_namespace)
        [remember(cls, k, n) for k, n in ns.items()]
        return cls

class Trackable(metaclass=TrackableMeta):
    def __init__(self, **kwargs):
        self._kwargs = kwargs

    def __getattr__(self, name):
        if name == 'self':
            return self
        if name.startswith('__'):
            raise AttributeError(name)
        try:
            v = self._trackable[name]
        except KeyError:
            raise AttributeError(f"{self.__class__.__name__} has no attribute '{name}'.")
        else:
            return v.__get__(self, type(self))

    def update(self):
        # evaluate every var once, i.e. to surface errors early
        [v.__get__(self, type(self)) for v in dict.fromkeys(self._trackable.values())]
        return self

    def reset(self):
        [v.reset(self) for v in dict.fromkeys(self._statevar.values())]

class Configurable:
    def option(self, *keys, config):
        def expand(k):
            if isinstance(k, System):
                #HACK: populate base classes down to System (not inclusive) for section names
                S = k.__class__.mro()
                return [s.__name__ for s in S[:S.index(System)]]
            if isinstance(k, statevar):
                return [k.__name__] + k._alias_lst
            if callable(k):
                return k.__name__
            else:
                return k
        keys = [expand(k) for k in keys]
        return self._option(*keys, config=config)

    def _option(self, *keys, config):
        if not keys:
            return config
        key, *keys = keys
        if isinstance(key, list):
            for k in key:
                v = self._option(k, *keys, config=config)
                if v is not None:
                    return v
            return None
        try:
            return self._option(*keys, config=config[key])
        except (KeyError, TypeError):
            return None

class System(Trackable, Configurable):
    context = system()
    parent = system()

    def __getitem__(self, name):
        # support direct specification of value, i.e. 0
        # support string value with unit, i.e. '400 umol/mol'
        v = U(name)
        if isinstance(v, str):
            # support nested reference, i.e. 'measurement.table'
            return reduce(lambda o, k: getattr(o, k), [self] + v.split('.'))
        else:
            return v

    def __iter__(self):
        #HACK: prevent infinite loop due to generous __getitem__
        raise TypeError('System is not iterable.')

    def option(self, *keys, config=None):
        if config is None:
            context = self.context
            if context is None:
                return None
            config = context._config
        v = super().option(self, *keys, config=config)
        if not isinstance(v, str):
            return v
        try:
            return self[v]
        #HACK: plain strings (i.e. file names, formats) are passed through
        # a file name whose stem names a var, i.e. 'raw.csv', ends up in a cycle
        except (AttributeError, RecursionError):
            return v
