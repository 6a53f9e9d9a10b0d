import pint

class Unit:
    def __init__(self):
        r = pint.UnitRegistry(autoconvert_offset_to_baseunit=True)
        self.registry = r

    def __call__(self, v, unit=None):
        if v is None:
            return v
        # only strings starting with a number are read as quantities, i.e. '400 umol/mol'
        if isinstance(v, str) and v[:1] and (v[0].isdigit() or v[0] in '+-.'):
            try:
                v = self.registry(v)
            except Exception:
                pass
            # plain numbers come back dimensionless, i.e. '2'
            if isinstance(v, self.registry.Quantity) and v.unitless:
                v = v.magnitude
        if unit is None:
            return v
        Q = self.registry.Quantity
        if isinstance(v, Q):
            return v.to(unit)
        elif isinstance(v, str):
            return v
        elif callable(v):
            return lambda *a, **k: self(v(*a, **k), unit)
        else:
            return Q(v, unit)

    def magnitude(self, v, unit=None):
        Q = self.registry.Quantity
        if isinstance(v, Q):
            if unit:
                v = v.to(unit)
            return v.magnitude
        else:
            return v

U = Unit()
