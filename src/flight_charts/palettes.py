"""
palettes.py
-----------
Sequential color schemes for binned choropleth values.

Scheme ids 1-5 match the order of the scheme picker on the map page.
"""

from enum import Enum

import seaborn as sns
from matplotlib.colors import to_hex


class ColorScheme(Enum):
    BLUES = 1
    REDS = 2
    GREENS = 3
    ORANGES = 4
    PURPLES = 5

    @classmethod
    def from_id(cls, scheme_id: int) -> "ColorScheme":
        return cls(int(scheme_id))

    @property
    def palette_name(self) -> str:
        return self.name.capitalize()


def bin_colors(scheme: ColorScheme, n_bins: int) -> list:
    """One hex color per bin, lightest first."""
    return [to_hex(rgb) for rgb in sns.color_palette(scheme.palette_name, n_bins)]
