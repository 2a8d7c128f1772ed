"""
ecosim -- simulation demos of OLS orthogonality and CATE estimation.

Each sub-module implements one demonstration using only numpy / scipy /
pandas, with no black-box econometrics packages.
"""

from .utils import (
    ols_fit, add_const, make_rng, SingularMatrixError, EmptySubsetError,
)
from . import ols
from . import fwl
from . import cate
