# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Evaluates objective function, gradient and Hessian for OPF.
"""

from numpy import zeros, r_
from scipy.sparse import csr_matrix as sparse

from opforacle.pypower.polycost import polycost

P_COST_COLUMNS = ["cp0_eur", "cp1_eur_per_mw", "cp2_eur_per_mw2"]
Q_COST_COLUMNS = ["cq0_eur", "cq1_eur_per_mvar", "cq2_eur_per_mvar2"]


def cost_coefficients(gen, poly_cost):
    """Returns the coefficient matrices of active and reactive power costs.

    Both matrices have one row per generator (in the order of C{gen}) and the
    constant, linear and quadratic coefficient in the columns. Generators
    without an entry in C{poly_cost} have zero cost.
    """
    ng = gen.shape[0]
    cp = zeros((ng, len(P_COST_COLUMNS)))
    cq = zeros((ng, len(Q_COST_COLUMNS)))
    pos = gen.index.get_indexer(poly_cost["gen"].values)
    known = pos >= 0
    cp[pos[known]] = poly_cost[P_COST_COLUMNS].values[known]
    cq[pos[known]] = poly_cost[Q_COST_COLUMNS].values[known]
    return cp, cq


def opf_costfcn(x, om, return_hessian=False):
    """Evaluates objective function, gradient and Hessian for OPF.

    Objective function evaluation routine for AC optimal power flow.
    Computes objective function value, gradient and Hessian of the polynomial
    generator costs.

    @param x: optimization vector
    @param om: OPF model object

    @return: C{F} - value of objective function. C{df} - gradient
    of objective function (1-D array). C{d2f} - (optional) Hessian of
    objective function (sparse matrix).

    @see: L{opf_consfcn}, L{opf_hessfcn}

    @author: Carlos E. Murillo-Sanchez (PSERC Cornell & Universidad
    Autonoma de Manizales)
    @author: Ray Zimmerman (PSERC Cornell)
    """
    ##----- initialize -----
    ## unpack data
    case = om.get_case()
    baseMVA, gen = case["baseMVA"], case["gen"]
    cp, cq = cost_coefficients(gen, case["poly_cost"])
    vv, _ = om.get_idx()

    ## problem dimensions
    nxyz = len(x)              ## total number of control vars of all types

    ## grab Pg & Qg
    Pg = x[vv["i1"]["Pg"]:vv["iN"]["Pg"]]  ## active generation in p.u.
    Qg = x[vv["i1"]["Qg"]:vv["iN"]["Qg"]]  ## reactive generation in p.u.

    ##----- evaluate objective function -----
    f = sum(polycost(cp, Pg * baseMVA)) + sum(polycost(cq, Qg * baseMVA))

    ##----- evaluate cost gradient -----
    ## index ranges
    iPg = range(vv["i1"]["Pg"], vv["iN"]["Pg"])
    iQg = range(vv["i1"]["Qg"], vv["iN"]["Qg"])

    df = zeros(nxyz)
    df[iPg] = baseMVA * polycost(cp, Pg * baseMVA, 1)
    df[iQg] = baseMVA * polycost(cq, Qg * baseMVA, 1)

    if not return_hessian:
        return f, df

    ## ---- evaluate cost Hessian -----
    d2f_dPg2 = baseMVA**2 * polycost(cp, Pg * baseMVA, 2)  ## w.r.t. p.u. Pg
    d2f_dQg2 = baseMVA**2 * polycost(cq, Qg * baseMVA, 2)  ## w.r.t. p.u. Qg
    i = r_[iPg, iQg]
    d2f = sparse((r_[d2f_dPg2, d2f_dQg2], (i, i)), (nxyz, nxyz))

    return f, df, d2f
