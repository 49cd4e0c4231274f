# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Evaluates AC power balance constraints and their derivatives.
"""

from numpy import exp, conj, ones, r_
from scipy.sparse import csr_matrix as sparse, hstack, vstack

from opforacle.pypower.makeSbus import makeSbus, d2Sbus_dVm2
from opforacle.pypower.dSbus_dV import dSbus_dV
from opforacle.pypower.d2Sbus_dV2 import d2Sbus_dV2


def opf_power_balance_fcn(x, case, Ybus, ppopt, return_jacobian=True):
    """Evaluates AC power balance constraints and their gradients.

    Computes the active and reactive power balance equality constraints for
    AC optimal power flow, the nonlinear constraint set C{['Pmis', 'Qmis']}
    of the OPF model.

    @param x: list of the variable sets C{[Va, Vm, Pg, Qg]}
    @param case: OPF case (in-service elements only)
    @param Ybus: bus admittance matrix
    @param ppopt: PYPOWER options dict

    @return: C{g} - vector of the mismatches, C{[Pmis; Qmis]}, followed by
    C{dg} - (optional) sparse Jacobian w.r.t. the variable sets
    (2*nb x 2*nb + 2*ng)

    @see: L{opf_power_balance_hess}
    """
    ## unpack data
    Va, Vm, Pg, Qg = x
    baseMVA, bus = case["baseMVA"], case["bus"]
    nb = len(Va)
    ng = len(Pg)

    ## generator dispatch from the variables, in MW/MVAr
    gen = case["gen"].assign(p_mw=Pg * baseMVA, q_mvar=Qg * baseMVA)

    ## rebuild Sbus
    V = Vm * exp(1j * Va)
    Sbus = makeSbus(baseMVA, bus, gen, vm=Vm)

    ## evaluate power balance
    mis = V * conj(Ybus * V) - Sbus
    g = r_[mis.real,            ## active power mismatch
           mis.imag]            ## reactive power mismatch

    if not return_jacobian:
        return g

    ## w.r.t. voltage
    dSbus_dVm, dSbus_dVa = dSbus_dV(Ybus, V)
    _, neg_dSd_dVm = makeSbus(baseMVA, bus, gen, vm=Vm, return_derivative=True)
    dSbus_dVm = dSbus_dVm - neg_dSd_dVm

    ## w.r.t. generator injections
    neg_Cg = sparse((-ones(ng), (gen["bus"].values, range(ng))), (nb, ng))
    zero_Cg = sparse((nb, ng))

    dg = hstack([
        vstack([dSbus_dVa.real, dSbus_dVa.imag]),   ## Va
        vstack([dSbus_dVm.real, dSbus_dVm.imag]),   ## Vm
        vstack([neg_Cg, zero_Cg]),                  ## Pg
        vstack([zero_Cg, neg_Cg]),                  ## Qg
    ], format="csr")

    return g, dg


def opf_power_balance_hess(x, lmbda, case, Ybus, ppopt):
    """Evaluates Hessian of AC power balance constraints.

    Returns the sum of the Hessians of the active and reactive power
    mismatches weighted by the multipliers C{lmbda = [lamP; lamQ]}, w.r.t.
    the variable sets C{[Va, Vm, Pg, Qg]}. Only the voltage block is non-zero.
    The constant impedance share of the loads adds curvature w.r.t. voltage
    magnitude.

    @see: L{opf_power_balance_fcn}
    """
    ## unpack data
    Va, Vm, Pg, Qg = x
    baseMVA, bus = case["baseMVA"], case["bus"]
    nb = len(Va)
    ng = len(Pg)

    ## reconstruct V
    V = Vm * exp(1j * Va)

    ## ----- evaluate Hessian of power balance constraints -----
    nlam = len(lmbda) // 2
    lamP = lmbda[:nlam]
    lamQ = lmbda[nlam:nlam + nlam]
    Gpaa, Gpav, Gpva, Gpvv = d2Sbus_dV2(Ybus, V, lamP)
    Gqaa, Gqav, Gqva, Gqvv = d2Sbus_dV2(Ybus, V, lamQ)

    ## voltage dependent loads
    Gzvv = d2Sbus_dVm2(baseMVA, bus, lamP).real + d2Sbus_dVm2(baseMVA, bus, lamQ).imag

    d2G_VV = vstack([
        hstack([Gpaa.real + Gqaa.imag, Gpav.real + Gqav.imag]),
        hstack([Gpva.real + Gqva.imag, Gpvv.real + Gqvv.imag - Gzvv])
    ])

    d2G = vstack([
        hstack([d2G_VV, sparse((2 * nb, 2 * ng))]),
        sparse((2 * ng, 2 * nb + 2 * ng))
    ], format="csr")

    return d2G
