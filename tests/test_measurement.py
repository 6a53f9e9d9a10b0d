from palmgs.context import instance
from palmgs.measurement import Measurement, ParseError, clean, co2_conductance, correct_transpiration, parse_date, parse_hour, parse_rank, read, relative_position, season
from palmgs.position import Position, Season

import numpy as np
import pandas as pd
import pytest
from pytest import approx

def test_position():
    assert Position('B').relative == approx(2/3)
    assert Position.lookup('1/2_AB') is Position.AB_HALF
    assert Position.lookup('C') is None
    assert Position.lookup(' B ') is Position.B
    assert sorted(p.relative for p in Position) == approx([1/3, 1/2, 2/3, 5/6, 1])
    assert Season.lookup(' Wet') is Season.WET and Season.lookup('monsoon') is None

def test_correct_transpiration():
    s = correct_transpiration(pd.Series([50, 100, 150, 250.5, np.nan]))
    assert s[:4].tolist() == approx([50, 100, 1.5, 2.505])
    assert np.isnan(s[4])

def test_correct_transpiration_with_threshold():
    s = correct_transpiration(pd.Series([5, 20, 800]), threshold=10, scale=10)
    assert s.tolist() == approx([5, 2, 80])

def test_relative_position():
    s = relative_position(pd.Series(['A', '1/2_AB', 'B', '1/4_BC', '1/2_BC', 'C', None]))
    assert s[:5].tolist() == approx([1, 5/6, 2/3, 0.5, 1/3])
    assert s[5:].isna().all()

def test_relative_position_with_padding():
    s = relative_position(pd.Series(['B ', ' A', ' 1/2_BC ']))
    assert s.tolist() == approx([2/3, 1, 1/3])

def test_co2_conductance():
    gs = pd.Series([0.3, 0.0, np.nan, 1.2])
    c = co2_conductance(gs)
    assert abs(c[0] - 0.3 / 1.57) < 1e-9 and c[1] == 0
    assert np.isnan(c[2])
    assert c[3] == approx(1.2 / 1.57, abs=1e-9)

def test_parse_date():
    d = parse_date(pd.Series(['15/03/2019', '02/09/2019', '31/02/2019', 'garbage', None]))
    assert d[0] == pd.Timestamp(2019, 3, 15) and d[1] == pd.Timestamp(2019, 9, 2)
    assert d[2:].isna().all()

def test_parse_hour():
    h = parse_hour(pd.Series(['10:25:30', '093015', '15:00:00', 'noon', None]))
    assert h[:3].tolist() == [10, 9, 15]
    assert h[3:].isna().all()

def test_parse_rank():
    r = parse_rank(pd.Series(['F9', 'F17', '17', 'Fx', None]))
    assert r[:3].tolist() == [9, 17, 17]
    assert r[3:].isna().all()

def test_parse_rank_strict():
    assert parse_rank(pd.Series(['F9', None]), strict=True)[0] == 9
    with pytest.raises(ParseError, match='Fx'):
        parse_rank(pd.Series(['F9', 'Fx']), strict=True)

def test_season():
    s = season(pd.Series(['wet', 'Dry', ' wet ', 'monsoon', None]))
    assert list(s.categories) == ['wet', 'dry']
    assert list(s[:3]) == ['wet', 'dry', 'wet']
    assert pd.isna(s[3]) and pd.isna(s[4])

def test_clean(raw):
    before = raw.copy()
    df = clean(raw)
    pd.testing.assert_frame_equal(raw, before)
    for c in ['date', 'hour', 'rank', 'relative_position', 'season', 'progeny', 'vpd', 'gs_h2o', 'gs_co2', 'photo', 'transpiration']:
        assert c in df
    assert len(df) == len(raw)
    assert np.allclose(df['gs_co2'], raw['gs'] / 1.57, rtol=0, atol=1e-9)
    levels = [1, 5/6, 2/3, 1/2, 1/3]
    assert df['relative_position'].map(lambda v: any(abs(v - x) < 1e-12 for x in levels)).all()
    assert df['date'].notna().all() and df['rank'].isin([9, 17, 25]).all()

def test_clean_keeps_extra_columns(raw):
    df = clean(raw.assign(Tleaf=30.5))
    assert (df['Tleaf'] == 30.5).all()

def test_clean_malformed(raw):
    raw = raw.astype({'VpdL': object, 'trans': object})
    raw.loc[0, 'VpdL'] = 'n/a'
    raw.loc[1, 'trans'] = 420
    raw.loc[2, 'Date'] = '2019-03-15'
    raw.loc[3, 'Position'] = 'tip'
    df = clean(raw)
    assert np.isnan(df.loc[0, 'vpd'])
    assert df.loc[1, 'transpiration'] == approx(4.2)
    assert pd.isna(df.loc[2, 'date'])
    assert np.isnan(df.loc[3, 'relative_position'])
    assert df['transpiration'].max() <= 100

def test_clean_missing_column(raw):
    with pytest.raises(KeyError, match='VpdL'):
        clean(raw.drop(columns=['VpdL']))

def test_read(csv, raw):
    df = read(csv)
    assert len(df) == len(raw) and list(df.columns) == list(raw.columns)
    assert df['HHMMSS'].map(type).eq(str).all()

def test_measurement(csv, raw):
    m = instance(Measurement, {'Measurement': {'filename': str(csv)}})
    assert len(m.raw) == len(raw)
    assert m.table is m.df
    assert np.allclose(m.table['gs_co2'], m.table['gs_h2o'] / 1.57)

def test_measurement_with_keyword(raw):
    m = instance(Measurement, source=raw)
    assert len(m.table) == len(raw)

def test_measurement_threshold(raw):
    raw = raw.assign(trans=[60.0, 50.0, 3.0] + [120.0] * (len(raw) - 3))
    m = instance(Measurement, {'Measurement': {'transpiration_threshold': '0.05 mol/m^2/s'}}, source=raw)
    assert m.table['transpiration'].tolist() == approx([0.6, 50.0, 3.0] + [1.2] * (len(raw) - 3))

def test_measurement_strict(raw):
    raw = raw.assign(Frond='leaf')
    assert instance(Measurement, source=raw).table['rank'].isna().all()
    m = instance(Measurement, {'Measurement': {'strict': True}}, source=raw)
    with pytest.raises(ParseError):
        m.table

def test_measurement_without_file():
    m = instance(Measurement)
    with pytest.raises(ValueError):
        m.table

def test_measurement_with_file_named_after_var(tmp_path, raw):
    for name in ['raw.csv', 'source.csv', 'table.csv', 'filename.csv']:
        raw.to_csv(tmp_path/name, index=False)
    with pytest.MonkeyPatch.context() as mp:
        mp.chdir(tmp_path)
        for name in ['raw.csv', 'source.csv', 'table.csv', 'filename.csv']:
            m = instance(Measurement, {'Measurement': {'filename': name}})
            assert m.filename == name
            assert len(m.table) == len(raw)
