# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Evaluates nonlinear constraints and their Jacobian for OPF.
"""

import logging

from numpy import zeros, ones, conj, exp, r_, inf, arange, asarray, concatenate, errstate
from scipy.sparse import issparse, csr_matrix as sparse

from opforacle.auxiliary import ConstraintMismatchError
from opforacle.pypower.ppoption import flow_lim_type
from opforacle.pypower.makeSbus import makeSbus
from opforacle.pypower.dSbus_dV import dSbus_dV
from opforacle.pypower.dIbr_dV import dIbr_dV
from opforacle.pypower.dSbr_dV import dSbr_dV
from opforacle.pypower.dAbr_dV import dAbr_dV

logger = logging.getLogger(__name__)


def opf_consfcn(x, om, Ybus, Yf, Yt, ppopt, il=None, return_jacobian=True):
    """Evaluates nonlinear constraints and their Jacobian for OPF.

    Constraint evaluation function for AC optimal power flow. Computes
    constraint vectors and their gradients. Every computed quantity is checked
    against the generic evaluation of the nonlinear constraint sets registered
    in C{om}, any difference raises a L{ConstraintMismatchError}.

    @param x: optimization vector
    @param om: OPF model object
    @param Ybus: bus admittance matrix
    @param Yf: admittance matrix for "from" end of constrained branches
    @param Yt: admittance matrix for "to" end of constrained branches
    @param ppopt: PYPOWER options dict
    @param il: (optional) vector of branch indices corresponding to
    branches with flow limits (all others are assumed to be
    unconstrained). The default is C{range(nl)} (all branches).
    C{Yf} and C{Yt} contain only the rows corresponding to C{il}.
    @param return_jacobian: if False only C{h} and C{g} are returned

    @return: C{h} - vector of inequality constraint values (flow limits)
    flow^2 - limit^2, where the flow can be apparent power, real power or
    current, depending on value of C{OPF_FLOW_LIM} in C{ppopt} (only for
    constrained lines, C{'P'} uses flow - limit). C{g} - vector of equality
    constraint values (power balances). C{dh} - (optional) inequality
    constraint gradients, column j is gradient of h(j). C{dg} - (optional)
    equality constraint gradients.

    @see: L{opf_costfcn}, L{opf_hessfcn}

    @author: Carlos E. Murillo-Sanchez (PSERC Cornell & Universidad
    Autonoma de Manizales)
    @author: Ray Zimmerman (PSERC Cornell)
    """
    ##----- initialize -----

    ## unpack data
    lim_type = flow_lim_type(ppopt)
    case = om.get_case()
    baseMVA, bus, branch = case["baseMVA"], case["bus"], case["branch"]
    vv, _ = om.get_idx()

    ## problem dimensions
    nb = bus.shape[0]          ## number of buses
    nl = branch.shape[0]       ## number of branches
    ng = case["gen"].shape[0]  ## number of dispatchable injections
    nxyz = len(x)              ## total number of control vars of all types

    ## set default constrained lines
    if il is None:
        il = arange(nl)         ## all lines have limits by default
    nl2 = len(il)              ## number of constrained lines

    ## grab Pg & Qg
    Pg = x[vv["i1"]["Pg"]:vv["iN"]["Pg"]]  ## active generation in p.u.
    Qg = x[vv["i1"]["Qg"]:vv["iN"]["Qg"]]  ## reactive generation in p.u.

    ## put Pg & Qg in a copy of gen
    gen = case["gen"].assign(p_mw=Pg * baseMVA,     ## active generation in MW
                             q_mvar=Qg * baseMVA)   ## reactive generation in MVAr

    ## ----- evaluate constraints -----
    ## reconstruct V
    Va = x[vv["i1"]["Va"]:vv["iN"]["Va"]]
    Vm = x[vv["i1"]["Vm"]:vv["iN"]["Vm"]]
    V = Vm * exp(1j * Va)

    ## rebuild Sbus
    Sbus = makeSbus(baseMVA, bus, gen, vm=Vm)  ## net injected power in p.u.

    ## evaluate power flow equations
    mis = V * conj(Ybus * V) - Sbus

    ##----- evaluate constraint function values -----
    ## first, the equality constraints (power flow)
    g = r_[mis.real,            ## active power mismatch for all buses
           mis.imag]            ## reactive power mismatch for all buses

    ## then, the inequality constraints (branch flow limits)
    if nl2 > 0:
        branch = branch.iloc[il]
        flow_max = branch["rate_a_mva"].values / baseMVA
        flow_max[flow_max == 0] = inf
        if lim_type != 'P':
            flow_max = flow_max**2
        if lim_type == 'I':     ## current magnitude limit, |I|
            If = Yf * V
            It = Yt * V
            h = r_[(If * conj(If)).real - flow_max,     ## branch I limits (from bus)
                   (It * conj(It)).real - flow_max]     ## branch I limits (to bus)
        else:
            ## compute branch power flows
            ## complex power injected at "from" bus (p.u.)
            Sf = V[branch["from_bus"].values.astype(int)] * conj(Yf * V)
            ## complex power injected at "to" bus (p.u.)
            St = V[branch["to_bus"].values.astype(int)] * conj(Yt * V)
            if lim_type == '2':     ## active power limit, P squared
                h = r_[Sf.real**2 - flow_max,   ## branch P limits (from bus)
                       St.real**2 - flow_max]   ## branch P limits (to bus)
            elif lim_type == 'P':   ## active power limit, P
                h = r_[Sf.real - flow_max,
                       St.real - flow_max]
            else:                   ## apparent power limit, |S|
                h = r_[(Sf * conj(Sf)).real - flow_max,   ## branch S limits (from bus)
                       (St * conj(St)).real - flow_max]   ## branch S limits (to bus)
    else:
        h = zeros(0)

    ## compare with the generic evaluation of the model's constraint sets
    g_om = om.nonlin_constraints(x, True, return_jacobian)
    h_om = om.nonlin_constraints(x, False, return_jacobian)
    if return_jacobian:
        (g_om, dg_om), (h_om, dh_om) = g_om, h_om
    _check_consistency("g", g, g_om)
    _check_consistency("h", h, h_om)

    if not return_jacobian:
        return h, g

    ##----- evaluate partials of constraints -----
    ## index ranges
    iVa = vv["i1"]["Va"]
    iVm = vv["i1"]["Vm"]
    iPg = vv["i1"]["Pg"]
    iQg = vv["i1"]["Qg"]

    ## compute partials of injected bus powers
    dSbus_dVm, dSbus_dVa = dSbus_dV(Ybus, V)           ## w.r.t. V
    ## voltage dependent loads
    _, neg_dSd_dVm = makeSbus(baseMVA, bus, gen, vm=Vm, return_derivative=True)
    dSbus_dVm = dSbus_dVm - neg_dSd_dVm
    ## Pbus w.r.t. Pg, Qbus w.r.t. Qg
    neg_Cg = sparse((-ones(ng), (gen["bus"].values, range(ng))), (nb, ng))

    ## construct Jacobian of equality constraints (power flow)
    dg = _assemble((2 * nb, nxyz), [
        ## P mismatch w.r.t Va, Vm, Pg
        (dSbus_dVa.real, 0, iVa), (dSbus_dVm.real, 0, iVm), (neg_Cg, 0, iPg),
        ## Q mismatch w.r.t Va, Vm, Qg
        (dSbus_dVa.imag, nb, iVa), (dSbus_dVm.imag, nb, iVm), (neg_Cg, nb, iQg),
    ])
    _check_consistency("dg", dg, dg_om)

    if nl2 > 0:
        ## compute partials of Flows w.r.t. V
        if lim_type == 'I':     ## current
            dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm, Ff, Ft = \
                dIbr_dV(branch, Yf, Yt, V)
        else:                   ## power
            dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm, Ff, Ft = \
                dSbr_dV(branch, Yf, Yt, V)
        if lim_type in ('P', '2'):  ## real part of flow (active power)
            dFf_dVa = dFf_dVa.real
            dFf_dVm = dFf_dVm.real
            dFt_dVa = dFt_dVa.real
            dFt_dVm = dFt_dVm.real
            Ff = Ff.real
            Ft = Ft.real

        if lim_type == 'P':
            df_dVa, df_dVm, dt_dVa, dt_dVm = dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm
        else:
            ## squared magnitude of flow (of complex power or current, or real power)
            df_dVa, df_dVm, dt_dVa, dt_dVm = \
                dAbr_dV(dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm, Ff, Ft)

        ## construct Jacobian of inequality constraints (branch limits)
        dh = _assemble((2 * nl2, nxyz), [
            (df_dVa, 0, iVa), (df_dVm, 0, iVm),       ## "from" flow limit
            (dt_dVa, nl2, iVa), (dt_dVm, nl2, iVm),   ## "to" flow limit
        ])
    else:
        dh = sparse((0, nxyz))
    _check_consistency("dh", dh, dh_om)

    ## transpose, column j is the gradient of constraint j
    return h, g, dh.T.tocsr(), dg.T.tocsr()


def _assemble(shape, blocks):
    """Builds a sparse matrix of the given shape from sparse blocks.

    Each block is given as C{(matrix, row offset, column offset)}. The
    coordinates of all blocks are collected and converted once.
    """
    rows, cols, vals = [], [], []
    for block, i0, j0 in blocks:
        block = block.tocoo()
        rows.append(block.row + i0)
        cols.append(block.col + j0)
        vals.append(block.data)
    if not blocks:
        return sparse(shape)
    return sparse((concatenate(vals), (concatenate(rows), concatenate(cols))), shape)


def max_abs_difference(a, b):
    """Returns the largest absolute elementwise difference of two arrays.

    Works for dense and sparse arguments. Entries that are identical in both,
    including equal infinite values, count as zero. Arrays of different
    shape differ by C{inf}.
    """
    if a.shape != b.shape:
        return inf
    if issparse(a) or issparse(b):
        d = abs(sparse(a) - sparse(b))
        return d.max() if d.nnz else 0.
    a = asarray(a)
    b = asarray(b)
    if a.size == 0:
        return 0.
    with errstate(invalid="ignore"):
        d = abs(a - b)
    d[a == b] = 0.
    return d.max()


def _check_consistency(quantity, analytic, generic):
    difference = max_abs_difference(analytic, generic)
    if difference != 0:
        logger.error("%s of opf_consfcn (shape %s) differs from the generic model evaluation "
                     "(shape %s) by %g" % (quantity, analytic.shape, generic.shape, difference))
        raise ConstraintMismatchError(quantity, difference)
