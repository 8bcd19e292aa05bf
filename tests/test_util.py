import math

import numpy as np
import pytest
from uncertainties import ufloat_fromstr

from marquardt.util import as_param_vector, format_value


@pytest.mark.parametrize(
    "value, stderr, digits, expected",
    [
        (1.5, 0.1, "auto", "1.50(10)"),
        (3.14159, 0.012, "auto", "3.142(12)"),
        (10.0, 0.5, "auto", "10.0(5)"),
        (-2.0, 0.2, 1, "-2.0(2)"),
        (12.34567, 0.00123, 2, "12.3457(12)"),
        (1.0, -0.1, 1, "1.0(1)"),
        (2.5, 0.0, "auto", "2.5(0)"),
    ],
)
def test_format_value(value, stderr, digits, expected):
    assert format_value(value, stderr, digits) == expected


def test_format_value_non_finite():
    assert format_value(math.nan, 1.0) == "nan(1)"
    assert format_value(1.0, math.inf) == "1(inf)"


@pytest.mark.parametrize("value, stderr", [(153.2871, 0.0412), (0.87654, 0.0031), (-42.5, 1.7)])
def test_formatted_value_reads_back(value, stderr):
    parsed = ufloat_fromstr(format_value(value, stderr))
    assert parsed.nominal_value == pytest.approx(value, abs=stderr / 10)
    assert parsed.std_dev == pytest.approx(stderr, rel=0.2)


def test_as_param_vector():
    v = as_param_vector(3)
    assert v.shape == (1,) and v[0] == 3.0
    src = [1.0, 2.0]
    out = as_param_vector(src)
    out[0] = 9.0
    assert src[0] == 1.0
    with pytest.raises(ValueError):
        as_param_vector([[1.0, 2.0]])
    with pytest.raises(ValueError):
        as_param_vector([1.0, np.nan])
