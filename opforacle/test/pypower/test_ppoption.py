# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.


import pytest

from opforacle.pypower.ppoption import ppoption, flow_lim_type


def test_defaults():
    ppopt = ppoption()
    assert ppopt["OPF_FLOW_LIM"] == "S"
    assert ppopt["OPF_HESS_CHECK"] is False
    assert ppopt["OPF_HESS_CHECK_STEP"] == 1e-5
    assert ppopt["OPF_HESS_STRUCT_VALUE"] == 1e-20


def test_override():
    ppopt = ppoption(OPF_FLOW_LIM="I")
    assert ppopt["OPF_FLOW_LIM"] == "I"
    ppopt = ppoption(ppopt, VERBOSE=0)
    assert ppopt["OPF_FLOW_LIM"] == "I"
    assert ppopt["VERBOSE"] == 0
    assert ppoption({"OPF_HESS_CHECK": True})["OPF_FLOW_LIM"] == "S"


@pytest.mark.parametrize("value, expected", [("S", "S"), ("s", "S"), ("P", "P"), ("2", "2"),
                                             ("I", "I"), (0, "S"), (1, "2"), (2, "I")])
def test_flow_lim_type(value, expected):
    assert flow_lim_type(ppoption(OPF_FLOW_LIM=value)) == expected


@pytest.mark.parametrize("value", ["X", "", 3, None])
def test_invalid_flow_lim(value):
    with pytest.raises(ValueError):
        flow_lim_type(ppoption(OPF_FLOW_LIM=value))


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
