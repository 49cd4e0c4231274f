# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.


import numpy as np
import pytest
from numpy.testing import assert_allclose

import opforacle as oc
import opforacle.networks as pn
from opforacle.pypower.opf_costfcn import cost_coefficients
from opforacle.pypower.polycost import polycost


def test_polycost():
    c = np.array([[1., 2., 3.], [0., 1., 0.]])
    c_before = c.copy()
    P = np.array([2., 5.])
    assert_allclose(polycost(c, P), [17., 5.])
    assert_allclose(polycost(c, P, 1), [14., 1.])
    assert_allclose(polycost(c, P, 2), [6., 0.])
    assert_allclose(polycost(c, P, 3), [0., 0.])
    assert_allclose(c, c_before)


def test_cost_coefficients_without_costs():
    case = pn.case9()
    case.poly_cost = case.poly_cost.iloc[1:]
    cp, cq = cost_coefficients(case.gen, case.poly_cost)
    assert_allclose(cp[0], 0.)
    assert_allclose(cp[1], [600., 1.2, 0.085])
    assert_allclose(cq, 0.)


def test_opf_costfcn_case2():
    om = oc.opf_setup(pn.case2())
    vv, _ = om.get_idx()
    x = om.getv()[0]
    iPg = vv["i1"]["Pg"]
    iQg = vv["i1"]["Qg"]
    p_mw = x[iPg] * 100.

    f, df, d2f = oc.opf_costfcn(x, om, return_hessian=True)
    assert f == pytest.approx(0.01 * p_mw ** 2 + 10. * p_mw)
    assert df[iPg] == pytest.approx(100. * (10. + 0.02 * p_mw))
    assert df[iQg] == 0.
    assert np.count_nonzero(df) == 1
    assert d2f[iPg, iPg] == pytest.approx(100. ** 2 * 0.02)
    assert d2f[iQg, iQg] == 0.
    assert d2f.shape == (len(x), len(x))

    f2, df2 = oc.opf_costfcn(x, om)
    assert f2 == f
    assert_allclose(df2, df)


def test_opf_costfcn_gradient_case9():
    case = pn.case9()
    case.poly_cost.loc[:, "cq2_eur_per_mvar2"] = 0.05
    case.poly_cost.loc[:, "cq1_eur_per_mvar"] = 0.5
    om = oc.opf_setup(case)
    x = om.getv()[0] + 0.01
    _, df, d2f = oc.opf_costfcn(x, om, return_hessian=True)
    step = 1e-6
    for i in range(len(x)):
        xp = x.copy()
        xm = x.copy()
        xp[i] += step
        xm[i] -= step
        fp, dfp = oc.opf_costfcn(xp, om)
        fm, dfm = oc.opf_costfcn(xm, om)
        assert df[i] == pytest.approx((fp - fm) / (2 * step), rel=1e-5, abs=1e-3)
        assert_allclose(d2f[:, i].toarray().ravel(), (dfp - dfm) / (2 * step), atol=1e-3)


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
