# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.


import numpy as np
import pytest

import opforacle as oc
import opforacle.networks as pn


def test_create_empty_case():
    case = oc.create_empty_case(baseMVA=10., name="empty")
    assert case.baseMVA == 10.
    assert case.name == "empty"
    for table in ("bus", "gen", "branch", "poly_cost"):
        assert len(case[table]) == 0
    assert "const_z_percent" in case.bus.columns
    assert "rate_a_mva" in case.branch.columns


def test_create_elements():
    case = oc.create_empty_case()
    b0 = oc.create_bus(case, type="ref")
    b1 = oc.create_bus(case, p_mw=10., q_mvar=2.)
    assert (b0, b1) == (0, 1)

    g = oc.create_gen(case, b0, p_mw=12.)
    assert case.gen.at[g, "max_p_mw"] == 10 * case.baseMVA
    assert case.gen.at[g, "min_q_mvar"] == -10 * case.baseMVA
    assert case.gen.bus.dtype == np.int64
    assert case.gen.in_service.dtype == bool

    br = oc.create_branch(case, b0, b1, r_pu=0.01, x_pu=0.1, rate_a_mva=20.)
    assert case.branch.at[br, "to_bus"] == b1

    c = oc.create_poly_cost(case, g, cp1_eur_per_mw=5.)
    assert case.poly_cost.at[c, "gen"] == g
    assert case.poly_cost.at[c, "cp2_eur_per_mw2"] == 0.


def test_invalid_references():
    case = oc.create_empty_case()
    oc.create_bus(case)
    with pytest.raises(UserWarning):
        oc.create_gen(case, 3)
    with pytest.raises(UserWarning):
        oc.create_branch(case, 0, 1, r_pu=0., x_pu=0.1)
    with pytest.raises(UserWarning):
        oc.create_poly_cost(case, 0, cp1_eur_per_mw=1.)
    with pytest.raises(UserWarning):
        oc.create_bus(case, type="slack")
    with pytest.raises(UserWarning):
        oc.create_bus(case, const_z_percent=60., const_i_percent=50.)

    g = oc.create_gen(case, 0)
    oc.create_poly_cost(case, g, cp1_eur_per_mw=1.)
    with pytest.raises(UserWarning):
        oc.create_poly_cost(case, g, cp1_eur_per_mw=2.)


def test_networks():
    case = pn.case9()
    assert len(case.bus) == 9
    assert len(case.gen) == 3
    assert len(case.branch) == 9
    assert len(case.poly_cost) == 3
    assert case.bus.p_mw.sum() == pytest.approx(315.)
    assert list(case.bus.type[:3]) == ["ref", "pv", "pv"]

    case = pn.case2(rate_a_mva=50.)
    assert case.branch.rate_a_mva.at[0] == 50.
    # load and generation balance on the lossless line
    assert case.gen.p_mw.at[0] == pytest.approx(case.bus.p_mw.at[1])
    assert case.gen.q_mvar.at[0] == pytest.approx(-case.bus.q_mvar.at[1])


def test_deepcopy():
    case = pn.case2()
    case2 = case.deepcopy()
    case2.bus.loc[1, "p_mw"] = 0.
    assert case.bus.p_mw.at[1] != 0.


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
