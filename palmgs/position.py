from enum import Enum

class Position(Enum):
    """Leaflet sampling position along the rachis, from the tip (A) towards the base."""
    A = 'A'
    AB_HALF = '1/2_AB'
    B = 'B'
    BC_QUARTER = '1/4_BC'
    BC_HALF = '1/2_BC'

    @property
    def relative(self):
        return RELATIVE_POSITION[self]

    @classmethod
    def lookup(cls, label):
        if isinstance(label, str):
            label = label.strip()
        try:
            return cls(label)
        except ValueError:
            return None

RELATIVE_POSITION = {
    Position.A: 1,
    Position.AB_HALF: 5/6,
    Position.B: 2/3,
    Position.BC_QUARTER: 1/2,
    Position.BC_HALF: 1/3,
}

class Season(Enum):
    WET = 'wet'
    DRY = 'dry'

    @classmethod
    def lookup(cls, label):
        if isinstance(label, str):
            label = label.strip().lower()
        try:
            return cls(label)
        except ValueError:
            return None
