"""Medlyn et al. (2011) stomatal conductance model fitted to leaf gas exchange.

    gs = g0 + (1 + g1 / sqrt(D)) * A / Ca

with gs the stomatal conductance to CO2 (mol m-2 s-1), D the leaf vapour
pressure deficit (kPa), A the net photosynthesis (umol m-2 s-1) and Ca the
atmospheric CO2 concentration (umol mol-1).

Medlyn, B. E., Duursma, R. A., Eamus, D., Ellsworth, D. S., Prentice, I. C.,
Barton, C. V., ... & Wingate, L. (2011). Reconciling the optimal and empirical
approaches to modelling stomatal conductance. Global Change Biology, 17(6),
2134-2144.
"""

from .system import System
from .statevar import derive, drive, parameter, system
from .logger import logger

from collections import namedtuple
import numpy as np
import scipy.optimize

# starting values of the fit
G0 = 0.0033 # mol m-2 s-1
G1 = 12.5 # kPa^0.5
CA = 400 # umol mol-1

class ConvergenceError(RuntimeError):
    pass

Fit = namedtuple('Fit', ['g0', 'g1', 'sigma', 'g0_se', 'g1_se', 'ssr', 'n', 'df', 'r2'], defaults=[np.nan]*7)

def model(vpd, photo, g0, g1, ca=CA):
    return g0 + (1 + g1 / np.sqrt(vpd)) * (photo / ca)

def _array(x):
    return np.asarray(x, dtype=float)

def valid(vpd, photo, gs):
    vpd, photo, gs = _array(vpd), _array(photo), _array(gs)
    with np.errstate(invalid='ignore'):
        return np.isfinite(vpd) & np.isfinite(photo) & np.isfinite(gs) & (vpd > 0)

def fit(vpd, photo, gs, g0=G0, g1=G1, ca=CA, maxfev=1000):
    """Least squares estimates of g0 and g1 from the starting values given.

    Rows with missing values or non-positive `vpd` are left out. Raises
    ConvergenceError when fewer than three rows remain or the solver gives up
    within `maxfev` evaluations.
    """
    vpd, photo, gs = _array(vpd), _array(photo), _array(gs)
    m = valid(vpd, photo, gs)
    n = int(m.sum())
    if n < len(m):
        logger.warning(f'{len(m) - n} of {len(m)} observation(s) excluded from fit')
    if n < 3:
        raise ConvergenceError(f'{n} valid observation(s) left for fitting, at least 3 needed')
    x = np.vstack([vpd[m], photo[m]])
    y = gs[m]
    f = lambda x, g0, g1: model(x[0], x[1], g0, g1, ca)
    try:
        popt, pcov = scipy.optimize.curve_fit(f, x, y, p0=[g0, g1], maxfev=maxfev)
    except RuntimeError as e:
        raise ConvergenceError(str(e)) from e
    if not np.all(np.isfinite(popt)):
        raise ConvergenceError(f'non-finite estimates: {popt}')
    g0, g1 = (float(p) for p in popt)
    ssr = float(np.sum((y - f(x, g0, g1))**2))
    df = n - 2
    sst = float(np.sum((y - y.mean())**2))
    g0_se, g1_se = (float(v) for v in np.sqrt(np.diag(pcov)))
    r = Fit(
        g0=g0,
        g1=g1,
        sigma=np.sqrt(ssr / df),
        g0_se=g0_se,
        g1_se=g1_se,
        ssr=ssr,
        n=n,
        df=df,
        r2=1 - ssr / sst if sst > 0 else np.nan,
    )
    logger.info(f'fitted g0 = {r.g0:.4g} (se {r.g0_se:.2g}), g1 = {r.g1:.4g} (se {r.g1_se:.2g}), sigma = {r.sigma:.4g}, n = {n}')
    return r

def predict(fit, vpd, photo, ca=CA):
    vpd, photo = _array(vpd), _array(photo)
    with np.errstate(invalid='ignore', divide='ignore'):
        gs = model(vpd, photo, fit.g0, fit.g1, ca)
        return np.where(vpd > 0, gs, np.nan)

def residuals(fit, vpd, photo, gs, ca=CA):
    return _array(gs) - predict(fit, vpd, photo, ca)

class Medlyn(System):
    measurement = system(alias='m')

    @parameter(unit='mol/m^2/s')
    def g0(self):
        return G0

    @parameter(unit='kPa^0.5')
    def g1(self):
        return G1

    @parameter(alias='Ca', unit='umol/mol')
    def ca(self):
        return CA

    # solver budget in function evaluations
    @parameter
    def maxfev(self):
        return 1000

    @derive(alias='df')
    def table(self, measurement):
        if measurement is None:
            raise ValueError('no measurement to fit')
        return measurement.table

    vpd = drive('table', alias='D')
    photo = drive('table', alias='A')
    gs = drive('table', key='gs_co2')

    @derive
    def mask(self, vpd, photo, gs):
        return valid(vpd, photo, gs)

    @derive(alias='fit', nounit='g0,g1,ca')
    def estimate(self, vpd, photo, gs, g0, g1, ca, maxfev):
        return fit(vpd, photo, gs, g0=g0, g1=g1, ca=ca, maxfev=maxfev)

    @derive(alias='predicted', nounit='ca')
    def prediction(self, table, estimate, ca):
        gs = predict(estimate, table['vpd'], table['photo'], ca)
        return table.assign(gs_medlyn_co2=gs, residual=table['gs_co2'] - gs)

    def __str__(self):
        f = self.estimate
        return f'g0 = {f.g0:.4g}, g1 = {f.g1:.4g}, sigma = {f.sigma:.4g}'
