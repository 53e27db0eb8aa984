"""
Tissue Catalog

Reference relaxation profiles of the tissues compared on every chart.
Times in ms; values are the simulator's fixed presets.
"""

from typing import Dict

from .primitives import TissueParams


TISSUES: Dict[str, TissueParams] = {
    'WM':  TissueParams(t1=600.,  t2=80.,   t2star=60.,  pd=0.72, name='White Matter'),
    'GM':  TissueParams(t1=950.,  t2=100.,  t2star=70.,  pd=0.86, name='Gray Matter'),
    'CSF': TissueParams(t1=4500., t2=2200., t2star=400., pd=1.00, name='Cerebrospinal Fluid'),
    'FAT': TissueParams(t1=250.,  t2=85.,   t2star=60.,  pd=0.95, name='Fat'),
}

TISSUE_COLORS = {
    'CSF': '#38bdf8',
    'FAT': '#ec4899',
    'GM': '#34d399',
    'WM': '#facc15',
    'Contrast': '#34d399',
}

# Tissue whose signal drives the chart cursor and Ernst marker
REFERENCE_TISSUE = 'GM'


def get_tissue(key: str, tissues: Dict[str, TissueParams] = None) -> TissueParams:
    """Look up a tissue by catalog key (case-insensitive)"""
    tissues = TISSUES if tissues is None else tissues
    for name, tissue in tissues.items():
        if name.lower() == str(key).lower():
            return tissue
    raise KeyError(f"No tissue '{key}' (available: {', '.join(tissues)})")
