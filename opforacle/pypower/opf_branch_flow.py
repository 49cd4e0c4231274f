# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Evaluates AC branch flow limit constraints and their derivatives.
"""

from numpy import exp, conj, ones, inf, r_
from scipy.sparse import csr_matrix as sparse, hstack, vstack

from opforacle.pypower.ppoption import flow_lim_type
from opforacle.pypower.dIbr_dV import dIbr_dV
from opforacle.pypower.dSbr_dV import dSbr_dV
from opforacle.pypower.dAbr_dV import dAbr_dV
from opforacle.pypower.d2Abr_dV2 import d2ASbr_dV2, d2AIbr_dV2
from opforacle.pypower.d2Sbr_dV2 import d2Sbr_dV2


def opf_branch_flow_fcn(x, case, Yf, Yt, il, ppopt, return_jacobian=True):
    """Evaluates AC branch flow constraints and their gradients.

    Computes the branch flow limit inequality constraints of the monitored
    branches C{il} for AC optimal power flow, the nonlinear constraint set
    C{['Sf', 'St']} of the OPF model. The flow quantity is selected by the
    C{OPF_FLOW_LIM} option. C{Yf} and C{Yt} hold the rows of the monitored
    branches only.

    @param x: list of the variable sets C{[Va, Vm]}

    @return: C{h} - vector of the flow constraint values (from end first),
    followed by C{dh} - (optional) sparse Jacobian w.r.t. the variable sets
    (2*nl2 x 2*nb)

    @see: L{opf_branch_flow_hess}
    """
    ## unpack data
    lim_type = flow_lim_type(ppopt)
    Va, Vm = x
    baseMVA = case["baseMVA"]
    branch = case["branch"].iloc[il]

    ## reconstruct V
    V = Vm * exp(1j * Va)

    ## squared flow limits, in p.u., 0 means unlimited
    flow_max = branch["rate_a_mva"].values / baseMVA
    flow_max[flow_max == 0] = inf
    if lim_type != 'P':
        flow_max = flow_max**2

    if lim_type == 'I':     ## current magnitude limit, |I|
        If = Yf * V
        It = Yt * V
        h = r_[(If * conj(If)).real - flow_max,     ## branch current limits (from bus)
               (It * conj(It)).real - flow_max]     ## branch current limits (to bus)
    else:
        ## compute branch power flows
        f = branch["from_bus"].values.astype(int)
        t = branch["to_bus"].values.astype(int)
        Sf = V[f] * conj(Yf * V)    ## complex power injected at "from" bus (p.u.)
        St = V[t] * conj(Yt * V)    ## complex power injected at "to" bus (p.u.)
        if lim_type == '2':         ## active power limit, P squared
            h = r_[Sf.real**2 - flow_max,
                   St.real**2 - flow_max]
        elif lim_type == 'P':       ## active power limit, P
            h = r_[Sf.real - flow_max,
                   St.real - flow_max]
        else:                       ## apparent power limit, |S|
            h = r_[(Sf * conj(Sf)).real - flow_max,
                   (St * conj(St)).real - flow_max]

    if not return_jacobian:
        return h

    if lim_type == 'I':
        dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm, Ff, Ft = dIbr_dV(branch, Yf, Yt, V)
    else:
        dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm, Ff, Ft = dSbr_dV(branch, Yf, Yt, V)
    if lim_type in ('P', '2'):
        dFf_dVa = dFf_dVa.real
        dFf_dVm = dFf_dVm.real
        dFt_dVa = dFt_dVa.real
        dFt_dVm = dFt_dVm.real
        Ff = Ff.real
        Ft = Ft.real

    if lim_type != 'P':
        ## squared magnitude of flow (of complex power or current, or real power)
        dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm = \
            dAbr_dV(dFf_dVa, dFf_dVm, dFt_dVa, dFt_dVm, Ff, Ft)

    dh = vstack([
        hstack([dFf_dVa, dFf_dVm]),     ## "from" flow limit
        hstack([dFt_dVa, dFt_dVm])      ## "to" flow limit
    ], format="csr")

    return h, dh


def opf_branch_flow_hess(x, lmbda, case, Yf, Yt, il, ppopt):
    """Evaluates Hessian of branch flow constraints.

    Returns the sum of the Hessians of the "from" and "to" end flow
    constraints weighted by the multipliers C{lmbda = [muF; muT]}, w.r.t. the
    variable sets C{[Va, Vm]}.

    @see: L{opf_branch_flow_fcn}
    """
    ## unpack data
    lim_type = flow_lim_type(ppopt)
    Va, Vm = x
    branch = case["branch"].iloc[il]
    nb = len(Va)
    nl2 = len(il)

    ## reconstruct V
    V = Vm * exp(1j * Va)

    nmu = len(lmbda) // 2
    muF = lmbda[:nmu]
    muT = lmbda[nmu:nmu + nmu]

    if lim_type == 'I':
        dIf_dVa, dIf_dVm, dIt_dVa, dIt_dVm, If, It = dIbr_dV(branch, Yf, Yt, V)
        Hfaa, Hfav, Hfva, Hfvv = d2AIbr_dV2(dIf_dVa, dIf_dVm, If, Yf, V, muF)
        Htaa, Htav, Htva, Htvv = d2AIbr_dV2(dIt_dVa, dIt_dVm, It, Yt, V, muT)
    else:
        f = branch["from_bus"].values.astype(int)
        t = branch["to_bus"].values.astype(int)
        ## connection matrix for line & from buses
        Cf = sparse((ones(nl2), (range(nl2), f)), (nl2, nb))
        ## connection matrix for line & to buses
        Ct = sparse((ones(nl2), (range(nl2), t)), (nl2, nb))
        if lim_type == 'P':
            Hfaa, Hfav, Hfva, Hfvv = d2Sbr_dV2(Cf, Yf, V, muF)
            Htaa, Htav, Htva, Htvv = d2Sbr_dV2(Ct, Yt, V, muT)
            Hfaa, Hfav, Hfva, Hfvv = Hfaa.real, Hfav.real, Hfva.real, Hfvv.real
            Htaa, Htav, Htva, Htvv = Htaa.real, Htav.real, Htva.real, Htvv.real
        else:
            dSf_dVa, dSf_dVm, dSt_dVa, dSt_dVm, Sf, St = dSbr_dV(branch, Yf, Yt, V)
            if lim_type == '2':
                dSf_dVa, dSf_dVm, Sf = dSf_dVa.real, dSf_dVm.real, Sf.real
                dSt_dVa, dSt_dVm, St = dSt_dVa.real, dSt_dVm.real, St.real
            Hfaa, Hfav, Hfva, Hfvv = d2ASbr_dV2(dSf_dVa, dSf_dVm, Sf, Cf, Yf, V, muF)
            Htaa, Htav, Htva, Htvv = d2ASbr_dV2(dSt_dVa, dSt_dVm, St, Ct, Yt, V, muT)

    d2H = vstack([
        hstack([Hfaa, Hfav]),
        hstack([Hfva, Hfvv])
    ], format="csr") + vstack([
        hstack([Htaa, Htav]),
        hstack([Htva, Htvv])
    ], format="csr")

    return d2H
