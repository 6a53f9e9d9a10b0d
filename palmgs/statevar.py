from .trace import Trace
from .var import var

class system(var):
    def init(self, obj, **kwargs):
        try:
            s = kwargs[self.__name__]
        except KeyError:
            s = self.compute(obj)
        self.set(obj, s)

    def unit(self, obj, v):
        return v

    def compute(self, obj):
        cls = self._wrapped_fun
        #HACK: when System(s) to be returned were wrapped in __call__()
        if not isinstance(cls, type):
            cls = cls(obj)
        if isinstance(cls, type):
            # child systems share the context; extra kwargs name vars of the parent
            kw = {k: obj[v] for k, v in self._kwargs.items()}
            return cls(context=obj.context, parent=obj, **kw)
        return cls

class statevar(var):
    trace = Trace()

    def __init__(self, f=None, *, unit=None, alias=None, nounit=None, breakpoint=False):
        self._breakpoint_flg = breakpoint
        super().__init__(f, unit=unit, alias=alias, nounit=nounit)

    def get(self, obj):
        d = self.data(obj)
        try:
            return d[self]
        except KeyError:
            pass
        with self.trace(self, obj):
            # for debugging purpose
            if self._breakpoint_flg:
                breakpoint()
            if self.trace.is_stacked(self, obj):
                raise RecursionError(f'{self} stacked -- {self.trace.stack}')
            return super().get(obj)

    def reset(self, obj):
        self.data(obj).pop(self, None)

class derive(statevar):
    pass

class parameter(derive):
    def compute(self, obj):
        # allow override by external option
        v = obj.option(self)
        if v is None:
            v = super().compute(obj)
        return v

class drive(derive):
    def __init__(self, f=None, *, key=None, **kwargs):
        self._drive_key = key
        super().__init__(f, **kwargs)

    def compute(self, obj):
        d = super().compute(obj) # i.e. return df
        k = self._drive_key if self._drive_key else self.__name__
        return d[k]
