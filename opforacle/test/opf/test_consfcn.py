# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.


import logging

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

import opforacle as oc
import opforacle.networks as pn
from opforacle.pypower.opf_consfcn import max_abs_difference
from opforacle.pypower.ppoption import flow_lim_type
from opforacle.test.helper_functions import perturbed_x, add_zip_loads, numerical_jacobians

X_PU = 0.1
# angle difference giving an apparent power flow of 0.5 p.u. on the line of case2
DELTA = 2 * np.arcsin(0.025)


def _case2_model(va_to_rad=-0.05, rate_a_mva=0., ppopt=None, il=None):
    om = oc.opf_setup(pn.case2(x_pu=X_PU, va_to_rad=va_to_rad, rate_a_mva=rate_a_mva),
                      ppopt, il=il)
    vv, _ = om.get_idx()
    x = om.getv()[0].copy()
    x[vv["i1"]["Va"] + 1] = va_to_rad
    return om, x


def _evaluate(om, x, return_jacobian=True):
    Ybus, Yf, Yt, ppopt, il = oc.network_args(om)
    return oc.opf_consfcn(x, om, Ybus, Yf, Yt, ppopt, il, return_jacobian=return_jacobian)


def test_balanced_two_bus_case():
    om, x = _case2_model()
    h, g, dh, dg = _evaluate(om, x)
    assert_allclose(g, 0., atol=1e-10)
    assert h.shape == (0,)
    assert dh.shape == (len(x), 0)
    assert dg.shape == (len(x), 4)


def test_flow_at_limit():
    om, x = _case2_model(va_to_rad=-DELTA, rate_a_mva=50.)
    h, g, dh, dg = _evaluate(om, x)
    assert h.shape == (2,)
    assert_allclose(h, 0., atol=1e-12)
    assert_allclose(g, 0., atol=1e-10)


def test_unrated_branch_never_binding():
    om, x = _case2_model(va_to_rad=-DELTA, il=[0])
    h, g, dh, dg = _evaluate(om, x)
    assert h.shape == (2,)
    assert np.all(np.isneginf(h))
    assert dh.shape == (len(x), 2)


@pytest.mark.parametrize("flow_lim", ["S", "P", "2", "I", 0, 1, 2])
def test_flow_limit_modes(flow_lim):
    ppopt = oc.ppoption(OPF_FLOW_LIM=flow_lim)
    om, x = _case2_model(va_to_rad=-DELTA, rate_a_mva=50., ppopt=ppopt)
    h, g = _evaluate(om, x, return_jacobian=False)
    # lossless line with flat voltage magnitudes
    p_flow = np.sin(DELTA) / X_PU
    lim_type = flow_lim_type(ppopt)
    if lim_type in ("S", "I"):
        expected = [0., 0.]
    elif lim_type == "P":
        expected = [p_flow - 0.5, -p_flow - 0.5]
    else:
        expected = [p_flow ** 2 - 0.25, p_flow ** 2 - 0.25]
    assert_allclose(h, expected, atol=1e-12)


def test_return_jacobian_false(case9_om):
    x = perturbed_x(case9_om)
    res = _evaluate(case9_om, x, return_jacobian=False)
    assert len(res) == 2
    h, g, dh, dg = _evaluate(case9_om, x)
    assert_allclose(res[0], h)
    assert_allclose(res[1], g)


def test_jacobians_case9(flow_lim):
    om = oc.opf_setup(pn.case9(), oc.ppoption(OPF_FLOW_LIM=flow_lim))
    x = perturbed_x(om, seed=2)
    h, g, dh, dg = _evaluate(om, x)
    num_dh, num_dg = numerical_jacobians(om, x)
    assert dg.shape == (len(x), 18)
    assert dh.shape == (len(x), 18)
    assert_allclose(dg.toarray().T, num_dg, rtol=1e-6, atol=1e-6)
    assert_allclose(dh.toarray().T, num_dh, rtol=1e-6, atol=1e-6)


def test_jacobians_voltage_dependent_loads():
    om = oc.opf_setup(add_zip_loads(pn.case9()))
    x = perturbed_x(om, seed=4)
    h, g, dh, dg = _evaluate(om, x)
    num_dh, num_dg = numerical_jacobians(om, x)
    assert_allclose(dg.toarray().T, num_dg, rtol=1e-6, atol=1e-6)
    assert_allclose(dh.toarray().T, num_dh, rtol=1e-6, atol=1e-6)

    # the loads depend on the voltage magnitudes
    om_const = oc.opf_setup(pn.case9())
    g_const = _evaluate(om_const, x, return_jacobian=False)[1]
    assert not np.allclose(g, g_const)


def test_out_of_service_elements():
    case = pn.case9()
    case.gen.loc[2, "in_service"] = False
    case.branch.loc[[1, 6], "in_service"] = False
    om = oc.opf_setup(case)
    x = perturbed_x(om, seed=6)
    h, g, dh, dg = _evaluate(om, x)
    assert dg.shape == (len(x), 18)
    assert dh.shape == (len(x), 14)
    num_dh, num_dg = numerical_jacobians(om, x)
    assert_allclose(dg.toarray().T, num_dg, rtol=1e-6, atol=1e-6)
    assert_allclose(dh.toarray().T, num_dh, rtol=1e-6, atol=1e-6)


def test_no_mutation(case9):
    gen_before = case9.gen.copy()
    om = oc.opf_setup(case9)
    model_gen_before = om.get_case().gen.copy()
    _evaluate(om, perturbed_x(om))
    pd.testing.assert_frame_equal(case9.gen, gen_before)
    pd.testing.assert_frame_equal(om.get_case().gen, model_gen_before)


def test_additional_variables_have_zero_columns(case9_om):
    om = case9_om
    om.add_vars("z", 3, np.ones(3))
    vv, _ = om.get_idx()
    x = perturbed_x(om)
    h, g, dh, dg = _evaluate(om, x)
    assert dg.shape == (om.getN("var"), 18)
    assert dg[vv["i1"]["z"]:vv["iN"]["z"], :].nnz == 0
    assert dh[vv["i1"]["z"]:vv["iN"]["z"], :].nnz == 0
    # flows only depend on the voltages
    assert dh[vv["i1"]["Pg"]:vv["iN"]["Qg"], :].nnz == 0


def _alter(om, name, iseq, value_offset=0., jacobian_factor=1.):
    nln = om.nle if iseq else om.nli
    fcn = nln["data"]["fcn"][name]

    def altered(xx, return_jacobian=True):
        if not return_jacobian:
            return fcn(xx, False) + value_offset
        values, jac = fcn(xx, True)
        return values + value_offset, jac * jacobian_factor

    nln["data"]["fcn"][name] = altered


@pytest.mark.parametrize("name, iseq, value_offset, jacobian_factor, quantity", [
    ("Pmis", True, 1e-12, 1., "g"),
    ("Sf", False, 1e-12, 1., "h"),
    ("Pmis", True, 0., 2., "dg"),
    ("Sf", False, 0., 2., "dh"),
])
def test_guard_detects_divergence(case9_om, caplog, name, iseq, value_offset, jacobian_factor,
                                  quantity):
    _alter(case9_om, name, iseq, value_offset, jacobian_factor)
    x = perturbed_x(case9_om)
    with caplog.at_level(logging.ERROR, logger="opforacle.pypower.opf_consfcn"):
        with pytest.raises(oc.ConstraintMismatchError) as err:
            _evaluate(case9_om, x)
    assert err.value.quantity == quantity
    assert err.value.difference > 0
    assert isinstance(err.value, oc.OracleException)
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_guard_detects_wrong_monitored_branches(case9_om):
    Ybus, Yf, Yt, ppopt, il = oc.network_args(case9_om)
    x = perturbed_x(case9_om)
    with pytest.raises(oc.ConstraintMismatchError):
        oc.opf_consfcn(x, case9_om, Ybus, Yf[:4, :], Yt[:4, :], ppopt, il[:4])


def test_max_abs_difference():
    inf = np.inf
    assert max_abs_difference(np.array([-inf, 1.]), np.array([-inf, 1.])) == 0.
    assert max_abs_difference(np.array([-inf, 1.]), np.array([-inf, 1.5])) == 0.5
    assert max_abs_difference(np.array([-inf]), np.array([1.])) == inf
    assert max_abs_difference(np.zeros(0), np.zeros(0)) == 0.
    assert max_abs_difference(np.zeros(2), np.zeros(3)) == inf


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
