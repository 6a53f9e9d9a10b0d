from synthetic import gasexchange

import pytest

@pytest.fixture
def raw():
    return gasexchange()

@pytest.fixture
def csv(tmp_path, raw):
    p = tmp_path/'gasexchange.csv'
    raw.to_csv(p, index=False)
    return p
