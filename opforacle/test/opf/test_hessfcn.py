# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.


import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

import opforacle as oc
import opforacle.networks as pn
from opforacle.test.helper_functions import perturbed_x, random_multipliers, add_zip_loads

HESS_LOGGER = "opforacle.opf.opf_hessfcn"


def _hessian_parts(om, x, lmbda, cost_mult=1.):
    _, _, d2f = oc.opf_costfcn(x, om, True)
    d2G = om.eval_nln_constraint_hess(x, lmbda["eqnonlin"], True)
    d2H = om.eval_nln_constraint_hess(x, lmbda["ineqnonlin"], False)
    return d2f * cost_mult, d2G, d2H


def test_hessian_shape_and_symmetry(case9_om):
    x = perturbed_x(case9_om)
    lmbda = random_multipliers(case9_om)
    Lxx = oc.opf_hessfcn(x, lmbda, 1., case9_om)
    nx = case9_om.getN("var")
    assert Lxx.shape == (nx, nx)
    assert abs(Lxx - Lxx.T).max() < 1e-10


def test_hessian_against_finite_differences(flow_lim, caplog):
    om = oc.opf_setup(pn.case9(), oc.ppoption(OPF_FLOW_LIM=flow_lim))
    x = perturbed_x(om, seed=3)
    lmbda = random_multipliers(om, seed=5)
    d2f, d2G, d2H = _hessian_parts(om, x, lmbda)
    with caplog.at_level(logging.WARNING, logger=HESS_LOGGER):
        d2f_err, d2G_err, d2H_err = oc.check_hessian_numerically(x, lmbda, 1., om, d2f, d2G,
                                                                 d2H)
    assert d2f_err < 1e-6
    assert d2G_err < 1e-5
    assert d2H_err < 1e-6
    assert not caplog.records


def test_hessian_voltage_dependent_loads():
    om = oc.opf_setup(add_zip_loads(pn.case9()))
    x = perturbed_x(om, seed=7)
    lmbda = random_multipliers(om, seed=8)
    d2f, d2G, d2H = _hessian_parts(om, x, lmbda)
    _, d2G_err, _ = oc.check_hessian_numerically(x, lmbda, 1., om, d2f, d2G, d2H)
    assert d2G_err < 1e-5

    # the constant impedance share changes the Vm-Vm block
    om_const = oc.opf_setup(pn.case9())
    d2G_const = om_const.eval_nln_constraint_hess(x, lmbda["eqnonlin"], True)
    vv, _ = om.get_idx()
    vm = slice(vv["i1"]["Vm"], vv["iN"]["Vm"])
    assert not np.allclose(d2G.toarray()[vm, vm], d2G_const.toarray()[vm, vm])


def test_cost_multiplier(case9_om):
    x = perturbed_x(case9_om)
    lmbda = random_multipliers(case9_om)
    L1 = oc.opf_hessfcn(x, lmbda, 1., case9_om)
    L2 = oc.opf_hessfcn(x, lmbda, 2., case9_om)
    _, _, d2f = oc.opf_costfcn(x, case9_om, True)
    assert_allclose((L2 - L1).toarray(), d2f.toarray(), rtol=1e-10, atol=1e-8)


def test_sparsity_structure(case9_om):
    Hs = oc.opf_hess_struct(case9_om)
    nx = case9_om.getN("var")
    assert Hs.shape == (nx, nx)
    # 9 buses with 9 distinct connections, 3 generators
    assert Hs.nnz == 4 * (9 + 2 * 9) + 2 * 3
    assert np.all(Hs.data == 1e-20)
    assert np.all(oc.opf_hess_struct(case9_om, value=1.).data == 1.)


def test_padding_keeps_structure(case9_om, caplog):
    x = perturbed_x(case9_om)
    lmbda = random_multipliers(case9_om)
    Hs = oc.opf_hess_struct(case9_om)
    ppopt = oc.ppoption(case9_om.userdata("ppopt"), OPF_HESS_STRUCT_CHECK=True)
    with caplog.at_level(logging.WARNING, logger=HESS_LOGGER):
        Lxx = oc.opf_hessfcn(x, lmbda, 1., case9_om, Hs, ppopt)
    assert not caplog.records
    Hr, Hc = Hs.nonzero()
    assert np.all(np.asarray(Lxx[Hr, Hc]).ravel() != 0)
    assert Lxx.nnz == Hs.nnz

    # zero multipliers and costs still give the full structure
    zero = {"eqnonlin": np.zeros(case9_om.getN("nle")),
            "ineqnonlin": np.zeros(case9_om.getN("nli"))}
    L0 = oc.opf_hessfcn(x, zero, 0., case9_om, Hs)
    assert L0.nnz == Hs.nnz
    assert_allclose(L0.data, 1e-20)


def test_structure_check_reports_missing_positions(case9_om, caplog):
    x = perturbed_x(case9_om)
    lmbda = random_multipliers(case9_om)
    vv, _ = case9_om.get_idx()
    Hs = oc.opf_hess_struct(case9_om).tolil()
    for i in range(vv["i1"]["Pg"], vv["iN"]["Pg"]):
        Hs[i, i] = 0.
    Hs = Hs.tocsr()
    ppopt = oc.ppoption(case9_om.userdata("ppopt"), OPF_HESS_STRUCT_CHECK=True)
    with caplog.at_level(logging.WARNING, logger=HESS_LOGGER):
        oc.opf_hessfcn(x, lmbda, 1., case9_om, Hs, ppopt)
    assert any("structure" in r.getMessage() for r in caplog.records)


def test_padding_of_structurally_zero_entries():
    om = oc.opf_setup(pn.case2())
    vv, _ = om.get_idx()
    x = om.getv()[0].copy()
    lmbda = random_multipliers(om)
    iQg = vv["i1"]["Qg"]
    Lxx = oc.opf_hessfcn(x, lmbda, 1., om)
    assert Lxx[iQg, iQg] == 0.
    Lxx = oc.opf_hessfcn(x, lmbda, 1., om, oc.opf_hess_struct(om))
    assert Lxx[iQg, iQg] == 1e-20


def test_hessian_check_option(case9_om, caplog):
    x = perturbed_x(case9_om)
    lmbda = random_multipliers(case9_om)
    ppopt = oc.ppoption(case9_om.userdata("ppopt"), OPF_HESS_CHECK=True)
    with caplog.at_level(logging.WARNING, logger=HESS_LOGGER):
        Lxx = oc.opf_hessfcn(x, lmbda, 1., case9_om, ppopt=ppopt)
    assert not caplog.records
    assert_allclose(Lxx.toarray(), oc.opf_hessfcn(x, lmbda, 1., case9_om).toarray())


def test_hessian_check_reports_wrong_hessian(case9_om, caplog):
    x = perturbed_x(case9_om)
    lmbda = random_multipliers(case9_om)
    d2f, d2G, d2H = _hessian_parts(case9_om, x, lmbda)
    with caplog.at_level(logging.WARNING, logger=HESS_LOGGER):
        _, d2G_err, _ = oc.check_hessian_numerically(x, lmbda, 1., case9_om, d2f, 2 * d2G, d2H)
    assert d2G_err > 1e-5
    assert any("d2G" in r.getMessage() for r in caplog.records)


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
