from .logger import logger

from pathlib import Path
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
import toml

VARIABLES = ['gs_co2', 'photo', 'vpd', 'transpiration']

def summarize(table, by=('season', 'progeny'), variables=VARIABLES):
    by = [b for b in by if b in table]
    variables = [v for v in variables if v in table]
    s = table.groupby(by, observed=True)[variables].agg(['count', 'mean', 'std'])
    s.columns = [f'{v}_{a}' for v, a in s.columns]
    return s.reset_index()

def _save(fig, path):
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info(f'saved {path}')
    return path

def plot_conductance_vs_vpd(table, path='Gs_vs_VPD.png'):
    fig, ax = plt.subplots(figsize=(7, 5))
    sns.scatterplot(data=table, x='vpd', y='gs_co2', hue='season', alpha=0.6, ax=ax)
    if 'gs_medlyn_co2' in table:
        d = table.dropna(subset=['vpd', 'gs_medlyn_co2'])
        ax.scatter(d['vpd'], d['gs_medlyn_co2'], s=10, marker='x', color='k', label='Medlyn')
        ax.legend()
    ax.set_xlabel('VPD (kPa)')
    ax.set_ylabel('$g_s$ CO$_2$ (mol m$^{-2}$ s$^{-1}$)')
    return _save(fig, path)

def plot_observed_vs_predicted(table, path='observed_vs_predicted.png'):
    d = table.dropna(subset=['gs_co2', 'gs_medlyn_co2'])
    fig, ax = plt.subplots(figsize=(5, 5))
    sns.scatterplot(data=d, x='gs_medlyn_co2', y='gs_co2', hue='season', alpha=0.6, ax=ax)
    if len(d) > 0:
        lim = [np.min(d[['gs_co2', 'gs_medlyn_co2']].values), np.max(d[['gs_co2', 'gs_medlyn_co2']].values)]
        ax.plot(lim, lim, 'k--', lw=1)
    ax.set_xlabel('predicted $g_s$ CO$_2$ (mol m$^{-2}$ s$^{-1}$)')
    ax.set_ylabel('observed $g_s$ CO$_2$ (mol m$^{-2}$ s$^{-1}$)')
    return _save(fig, path)

def plot_by_position(table, path='Gs_by_position.png'):
    fig, ax = plt.subplots(figsize=(7, 5))
    d = table.dropna(subset=['relative_position', 'gs_co2']).assign(relative_position=lambda d: d['relative_position'].round(2))
    sns.boxplot(data=d, x='relative_position', y='gs_co2', hue='season', ax=ax)
    ax.set_xlabel('relative position along rachis')
    ax.set_ylabel('$g_s$ CO$_2$ (mol m$^{-2}$ s$^{-1}$)')
    return _save(fig, path)

def write(analysis, outdir):
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    table = analysis.table
    fit = analysis.fit
    paths = {}

    paths['table'] = outdir/'gasexchange_clean.csv'
    table.to_csv(paths['table'], index=False)

    paths['summary'] = outdir/'summary.csv'
    analysis.summary.to_csv(paths['summary'], index=False)

    # fitted coefficients can be fed back as starting values, i.e. instance(Medlyn, toml)
    paths['fit'] = outdir/'medlyn.toml'
    d = {k: v.item() if isinstance(v, np.generic) else v for k, v in fit._asdict().items()}
    with open(paths['fit'], 'w') as f:
        toml.dump({'Medlyn': {'g0': d.pop('g0'), 'g1': d.pop('g1')}, 'Fit': d}, f)

    paths['gs_vs_vpd'] = plot_conductance_vs_vpd(table, outdir/'Gs_vs_VPD.png')
    paths['observed_vs_predicted'] = plot_observed_vs_predicted(table, outdir/'observed_vs_predicted.png')
    paths['gs_by_position'] = plot_by_position(table, outdir/'Gs_by_position.png')
    return paths
