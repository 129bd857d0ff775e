"""SfmPriors: prior residuals for bundle adjustment with pyceres."""

from sfmpriors.core.config import enable_x64

enable_x64()
