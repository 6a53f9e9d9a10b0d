from .system import System
from .statevar import derive, parameter
from .position import Position, Season
from .logger import logger

import pandas as pd

# source column -> canonical column
COLUMNS = {
    'Date': 'date',
    'HHMMSS': 'time_of_day',
    'Frond': 'frond_label',
    'Position': 'position_label',
    'Season': 'season',
    'Progeny': 'progeny',
    'VpdL': 'vpd',
    'gs': 'gs_h2o',
    'Photo': 'photo',
    'trans': 'transpiration',
}
TEXT = ['Date', 'HHMMSS', 'Frond', 'Position', 'Season', 'Progeny']
NUMERIC = ['vpd', 'gs_h2o', 'photo', 'transpiration']

# ratio of diffusivities of water vapour and CO2 in air
DIFFUSIVITY_RATIO = 1.57

class ParseError(ValueError):
    pass

def read(filename, sep=','):
    # text columns stay text so that leading zeros of HHMMSS survive
    df = pd.read_csv(filename, sep=sep, dtype={c: str for c in TEXT})
    logger.info(f'read {len(df)} rows from {filename}')
    return df

def _report(name, before, after):
    n = int((before.notna() & after.isna()).sum())
    if n > 0:
        logger.warning(f'{n} unparsable {name} value(s) set to null')

def parse_date(s, format='%d/%m/%Y'):
    d = pd.to_datetime(s, format=format, errors='coerce')
    _report('date', s, d)
    return d

def parse_hour(s, format='%H:%M:%S'):
    s = s.astype('string').str.strip()
    t = pd.to_datetime(s, format=format, errors='coerce')
    # compact HHMMSS without separators, i.e. '93015' for 09:30:15
    compact = pd.to_datetime(s.where(s.str.fullmatch(r'\d{1,6}').fillna(False)).str.zfill(6), format='%H%M%S', errors='coerce')
    h = t.fillna(compact).dt.hour.astype('Int64')
    _report('time', s, h)
    return h

def parse_rank(s, strict=False):
    """Leaf rank from the frond label, i.e. 'F17' -> 17.

    Leading non-digit characters are stripped. Labels without a numeric suffix
    become null, or raise ParseError when `strict`.
    """
    s = s.astype('string').str.strip()
    r = s.str.extract(r'^\D*(\d+)$', expand=False).astype('Int64')
    bad = s.notna() & r.isna()
    if bad.any():
        labels = sorted(set(s[bad]))
        if strict:
            raise ParseError(f'no numeric suffix in frond label(s): {labels}')
        logger.warning(f'{int(bad.sum())} frond label(s) without rank set to null: {labels}')
    return r

def relative_position(s):
    p = s.map(Position.lookup, na_action='ignore')
    r = p.map(lambda x: x.relative, na_action='ignore').astype(float)
    unknown = s.notna() & r.isna()
    if unknown.any():
        logger.warning(f'{int(unknown.sum())} unknown position label(s): {sorted(set(s[unknown].astype(str)))}')
    return r

def season(s):
    v = s.map(Season.lookup, na_action='ignore').map(lambda x: x.value, na_action='ignore')
    return pd.Categorical(v, categories=[x.value for x in Season])

def correct_transpiration(s, threshold=100, scale=100):
    # values above threshold were entered without the decimal point
    s = pd.to_numeric(s, errors='coerce')
    over = s > threshold
    if over.any():
        logger.warning(f'{int(over.sum())} transpiration value(s) above {threshold} divided by {scale}')
    return s.where(~over, s / scale)

def co2_conductance(gs, ratio=DIFFUSIVITY_RATIO):
    return gs / ratio

def clean(raw, date_format='%d/%m/%Y', time_format='%H:%M:%S', strict=False, threshold=100, scale=100, ratio=DIFFUSIVITY_RATIO):
    missing = [c for c in COLUMNS if c not in raw.columns]
    if missing:
        raise KeyError(f'missing column(s): {missing}')
    df = raw.rename(columns=COLUMNS)
    for c in NUMERIC:
        df[c] = pd.to_numeric(df[c], errors='coerce')
    df['date'] = parse_date(df['date'], date_format)
    df['hour'] = parse_hour(df['time_of_day'], time_format)
    df['rank'] = parse_rank(df['frond_label'], strict)
    df['relative_position'] = relative_position(df['position_label'])
    df['season'] = season(df['season'])
    df['progeny'] = df['progeny'].astype('category')
    df['transpiration'] = correct_transpiration(df['transpiration'], threshold, scale)
    df['gs_co2'] = co2_conductance(df['gs_h2o'], ratio)
    return df

class Measurement(System):
    @parameter
    def filename(self):
        return None

    @parameter
    def sep(self):
        return ','

    @parameter
    def date_format(self):
        return '%d/%m/%Y'

    @parameter
    def time_format(self):
        return '%H:%M:%S'

    # raise on frond labels without rank
    @parameter
    def strict(self):
        return False

    @parameter(alias='E_max', unit='mmol/m^2/s')
    def transpiration_threshold(self):
        return 100

    @parameter
    def transpiration_scale(self):
        return 100

    @parameter(alias='ratio')
    def diffusivity_ratio(self):
        return DIFFUSIVITY_RATIO

    @derive(alias='raw')
    def source(self, filename, sep):
        if filename is None:
            raise ValueError('no measurement file given')
        return read(filename, sep)

    @derive(alias='df', nounit='E_max')
    def table(self, raw, date_format, time_format, strict, E_max, transpiration_scale, ratio):
        df = clean(raw, date_format, time_format, strict, E_max, transpiration_scale, ratio)
        logger.info(f'cleaned {len(df)} observations')
        return df

    def __str__(self):
        return f'Measurement(filename = {self.filename})'
