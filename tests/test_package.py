import pytest

import fastripple


def test_lazy_exports_resolve():
    for name in fastripple.__all__:
        if name == "__version__":
            continue
        assert getattr(fastripple, name) is not None


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        fastripple.does_not_exist


def test_top_level_detect():
    import numpy as np

    events = fastripple.detect_fast_ripples(np.zeros(4000), 2000.0, lambda x: x)
    assert events.shape == (0, 2)
