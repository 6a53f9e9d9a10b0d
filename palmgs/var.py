from .unit import U

import inspect

class var:
    def __init__(self, f=None, *, unit=None, nounit=None, alias=None, **kwargs):
        self._unit_var = unit
        self._nounit_lst = nounit.split(',') if nounit else []
        self._alias_lst = alias.split(',') if alias else []
        self._kwargs = kwargs
        self.__call__(f)

    def __call__(self, f):
        # accept a function, a reference to another var ('measurement.table') or a constant
        if callable(f):
            fun = f
        elif isinstance(f, str):
            fun = lambda self: self[f]
        else:
            fun = lambda self: f
        self._wrapped_fun = fun
        return self

    def __set_name__(self, owner, name):
        if name in self._alias_lst:
            return
        self.__name__ = name

    def __repr__(self):
        return f'<{self.__name__}>'

    def __get__(self, obj, objtype):
        if obj is None:
            return self
        return self.unit(obj, self.get(obj))

    def data(self, obj):
        n = '_trackable_data'
        try:
            #HACK: avoid hasattr() calling __getattr__() when n is not found in __dict__
            return obj.__dict__[n]
        except KeyError:
            d = obj.__dict__[n] = {}
            return d

    def unit(self, obj, v):
        u = self._unit_var
        if isinstance(u, str):
            # unit string may be held by another var
            try:
                u = getattr(obj, u)
            except AttributeError:
                pass
        return U(v, u)

    def init(self, obj, **kwargs):
        try:
            v = kwargs[self.__name__]
        except KeyError:
            v = self.compute(obj)
        self.set(obj, self.unit(obj, v))

    def get(self, obj):
        d = self.data(obj)
        try:
            return d[self]
        except KeyError:
            self.init(obj, **obj._kwargs)
            return d[self]

    def set(self, obj, value):
        self.data(obj)[self] = value

    def resolve(self, obj, fun, k, p):
        a = obj.option(fun, k)
        if a is not None:
            return a
        if p.default is not p.empty:
            return obj[p.default]
        if k in obj._trackable:
            return obj[k]
        raise KeyError(k)

    def compute(self, obj):
        fun = self._wrapped_fun
        ps = list(inspect.signature(fun).parameters.items())[1:]
        params = {}
        for k, p in ps:
            try:
                v = self.resolve(obj, fun, k, p)
            except KeyError:
                # left open for the caller, i.e. model(vpd, photo)
                continue
            params[k] = U.magnitude(v) if k in self._nounit_lst else v
        if len(ps) == len(params):
            return fun(obj, **params)
        def f(*args, **kwargs):
            a = dict(params, **kwargs)
            a.update(zip([k for k, _ in ps if k not in a], args))
            a = {k: U.magnitude(v) if k in self._nounit_lst else v for k, v in a.items()}
            return fun(obj, **a)
        return f
