# -*- coding: utf-8 -*-

# Copyright 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

"""Constructs an OPF model object from an OPF case.
"""

import logging

from numpy import pi, inf, ones, asarray, int64, flatnonzero as find

from opforacle.opf.opf_model import opf_model
from opforacle.pypower.makeYbus import makeYbus
from opforacle.pypower.ppoption import ppoption, flow_lim_type
from opforacle.pypower.opf_power_balance import opf_power_balance_fcn, opf_power_balance_hess
from opforacle.pypower.opf_branch_flow import opf_branch_flow_fcn, opf_branch_flow_hess

logger = logging.getLogger(__name__)


def opf_setup(case, ppopt=None, il=None):
    """Constructs an OPF model object from an OPF case.

    Out of service generators and branches are removed from a copy of the
    case, which becomes the case of the model. The voltage angles C{Va},
    voltage magnitudes C{Vm}, active and reactive generation C{Pg} and C{Qg}
    (in p.u.) are added as variable sets, the reference bus angles are fixed
    by their bounds. The nonlinear power balance sets C{Pmis}, C{Qmis} and the
    branch flow sets C{Sf}, C{St} are registered for the generic constraint
    evaluation.

    The admittance matrices, the monitored branches and the options are
    stored as user data, see L{network_args}.

    INPUT:
        **case** - OPFCase built with the create functions

    OPTIONAL:
        **ppopt** (dict, None) - PYPOWER options, see L{ppoption}

        **il** (array, None) - positions of the monitored branches among the in service
        branches. By default all branches with a rating other than 0 and below 1e10 are
        monitored.

    OUTPUT:
        **om** - the OPF model object
    """
    ppopt = ppoption(ppopt)
    flow_lim_type(ppopt)  # fail early on an invalid flow limit option

    case = _select_in_service(case)
    baseMVA, bus, gen, branch = case["baseMVA"], case["bus"], case["gen"], case["branch"]

    ## data dimensions
    nb = bus.shape[0]    ## number of buses
    ng = gen.shape[0]    ## number of dispatchable injections

    ## branches with flow limits
    if il is None:
        rate = branch["rate_a_mva"].values
        il = find((rate != 0) & (rate < 1e10))
    else:
        il = asarray(il)
        if il.dtype == bool:
            il = find(il)
        il = il.astype(int64)
    nl2 = len(il)        ## number of constrained lines

    ## build admittance matrices
    Ybus, Yf, Yt = makeYbus(baseMVA, bus, branch)
    Yf, Yt = Yf[il, :], Yt[il, :]

    ## warn if there is more than one reference bus
    refs = find(bus["type"].values == "ref")
    if len(refs) > 1:
        logger.warning("opf_setup: Multiple reference buses. For a system with islands, a "
                       "reference bus in each island may help convergence, but in a fully "
                       "connected system such a situation is probably not reasonable.")

    ## set up initial variables and bounds
    gbus = gen["bus"].values.astype(int)
    Va = bus["va_degree"].values * (pi / 180.0)
    Vm = bus["vm_pu"].values.copy()
    Vm[gbus] = gen["vm_pu"].values   ## buses with gens, init Vm from gen data
    Pg = gen["p_mw"].values / baseMVA
    Qg = gen["q_mvar"].values / baseMVA
    Pmin = gen["min_p_mw"].values / baseMVA
    Pmax = gen["max_p_mw"].values / baseMVA
    Qmin = gen["min_q_mvar"].values / baseMVA
    Qmax = gen["max_q_mvar"].values / baseMVA

    Vau = inf * ones(nb)
    Val = -Vau
    Vau[refs] = Va[refs]
    Val[refs] = Va[refs]

    om = opf_model(case)
    om.add_vars('Va', nb, Va, Val, Vau)
    om.add_vars('Vm', nb, Vm, bus["min_vm_pu"].values, bus["max_vm_pu"].values)
    om.add_vars('Pg', ng, Pg, Pmin, Pmax)
    om.add_vars('Qg', ng, Qg, Qmin, Qmax)

    ## nonlinear constraints
    fcn_mis = lambda x, return_jacobian=True: \
        opf_power_balance_fcn(x, case, Ybus, ppopt, return_jacobian)
    hess_mis = lambda x, lam: opf_power_balance_hess(x, lam, case, Ybus, ppopt)
    fcn_flow = lambda x, return_jacobian=True: \
        opf_branch_flow_fcn(x, case, Yf, Yt, il, ppopt, return_jacobian)
    hess_flow = lambda x, lam: opf_branch_flow_hess(x, lam, case, Yf, Yt, il, ppopt)
    om.add_nln_constraints(['Pmis', 'Qmis'], [nb, nb], True, fcn_mis, hess_mis,
                           ['Va', 'Vm', 'Pg', 'Qg'])
    om.add_nln_constraints(['Sf', 'St'], [nl2, nl2], False, fcn_flow, hess_flow, ['Va', 'Vm'])

    om.userdata('Ybus', Ybus)
    om.userdata('Yf', Yf)
    om.userdata('Yt', Yt)
    om.userdata('il', il)
    om.userdata('ppopt', ppopt)

    logger.debug("opf_setup: built model with %d variables, %d equality and %d inequality "
                 "constraints" % (om.getN('var'), om.getN('nle'), om.getN('nli')))

    return om


def network_args(om):
    """Returns the network arguments of L{opf_consfcn} stored by L{opf_setup}.

    OUTPUT:
        **Ybus**, **Yf**, **Yt**, **ppopt**, **il**

    EXAMPLE:
        Ybus, Yf, Yt, ppopt, il = network_args(om)

        h, g, dh, dg = opf_consfcn(x, om, Ybus, Yf, Yt, ppopt, il)
    """
    return om.userdata('Ybus'), om.userdata('Yf'), om.userdata('Yt'), om.userdata('ppopt'), \
        om.userdata('il')


def _select_in_service(case):
    """Returns a copy of the case without out of service generators and branches.

    Generators and branches are renumbered consecutively from zero, the
    generator references of the costs follow the renumbering. Costs of
    removed generators are dropped.
    """
    case = case.deepcopy()
    gen_on = case["gen"][case["gen"]["in_service"].values.astype(bool)]
    lookup = {old: new for new, old in enumerate(gen_on.index.values)}
    case["gen"] = gen_on.reset_index(drop=True)

    branch_on = case["branch"][case["branch"]["in_service"].values.astype(bool)]
    case["branch"] = branch_on.reset_index(drop=True)

    cost = case["poly_cost"]
    cost = cost[cost["gen"].isin(list(lookup))]
    case["poly_cost"] = cost.assign(gen=cost["gen"].map(lookup).astype("int64")).reset_index(
        drop=True)
    return case
