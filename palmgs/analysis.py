from .system import System
from .context import Context
from .statevar import derive, system
from .measurement import Measurement
from .medlyn import Medlyn
from .logger import logger
from . import report

class Analysis(System):
    @system(alias='m')
    def measurement(self):
        return Measurement

    @system(measurement='measurement')
    def medlyn(self):
        return Medlyn

    @derive(alias='df')
    def table(self, medlyn):
        return medlyn.predicted

    @derive
    def fit(self, medlyn):
        return medlyn.estimate

    @derive
    def summary(self, table):
        return report.summarize(table)

def run(filename=None, config=None, outdir=None):
    """Load, clean and fit one gas exchange file; write the report when `outdir` is given."""
    c = Context(config)
    kw = {}
    if filename is not None:
        kw['measurement'] = Measurement(context=c, parent=c, filename=filename)
    a = Analysis(context=c, parent=c, **kw)
    logger.info(f'Medlyn fit: {a.medlyn}')
    if outdir is not None:
        report.write(a, outdir)
    return a
