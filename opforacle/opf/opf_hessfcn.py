# -*- coding: utf-8 -*-

# Copyright 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

"""Evaluates Hessian of Lagrangian for AC OPF.
"""

import logging

from numpy import zeros
from scipy.sparse import csr_matrix as sparse

from opforacle.opf.opf_setup import network_args
from opforacle.pypower.opf_consfcn import opf_consfcn
from opforacle.pypower.opf_costfcn import opf_costfcn
from opforacle.pypower.ppoption import ppoption

logger = logging.getLogger(__name__)


def opf_hessfcn(x, lmbda, cost_mult, om, Hs=None, ppopt=None):
    """Evaluates Hessian of Lagrangian for AC OPF.

    Hessian evaluation function for AC optimal power flow. The Hessians of
    the power balance and branch flow constraints come from the nonlinear
    constraint sets of the model.

    Examples::
        Lxx = opf_hessfcn(x, lmbda, 1.0, om)
        Lxx = opf_hessfcn(x, lmbda, cost_mult, om, Hs)

    @param x: optimization vector
    @param lmbda: C{eqnonlin} - Lagrange multipliers on power balance
    equations. C{ineqnonlin} - Kuhn-Tucker multipliers on constrained
    branch flows.
    @param cost_mult: Scale factor to be applied to the cost (1 for none).
    @param om: OPF model object
    @param Hs: (optional) sparsity structure added to the result, see
    L{opf_hess_struct}
    @param ppopt: (optional) PYPOWER options, defaults to the options the
    model was built with. C{OPF_HESS_STRUCT_CHECK} compares the structure of
    the result with C{Hs}, C{OPF_HESS_CHECK} compares the result with finite
    differences of the gradients.

    @return: Hessian of the Lagrangian.

    @see: L{opf_costfcn}, L{opf_consfcn}

    @author: Ray Zimmerman (PSERC Cornell)
    @author: Carlos E. Murillo-Sanchez (PSERC Cornell & Universidad
    Autonoma de Manizales)
    @author: Richard Lincoln
    """
    ppopt = _get_options(om, ppopt)

    ## ----- evaluate d2f -----
    _, _, d2f = opf_costfcn(x, om, True)
    d2f = d2f * cost_mult

    ##----- evaluate Hessian of power balance constraints -----
    d2G = om.eval_nln_constraint_hess(x, lmbda["eqnonlin"], True)

    ##----- evaluate Hessian of flow constraints -----
    d2H = om.eval_nln_constraint_hess(x, lmbda["ineqnonlin"], False)

    ##-----  do numerical check using (central) finite differences  -----
    if ppopt["OPF_HESS_CHECK"]:
        check_hessian_numerically(x, lmbda, cost_mult, om, d2f, d2G, d2H,
                                  ppopt["OPF_HESS_CHECK_STEP"])

    Lxx = (d2f + d2G + d2H).tocsr()

    if Hs is not None:
        Lxx = Lxx + Hs
        if ppopt["OPF_HESS_STRUCT_CHECK"]:
            _check_structure(Lxx, Hs)

    return Lxx


def check_hessian_numerically(x, lmbda, cost_mult, om, d2f, d2G, d2H, step=1e-5):
    """Compares Hessians with central finite differences of the gradients.

    Each column of the numerical Hessians is built by perturbing one
    coordinate of C{x} by C{+-step/2} and differencing the analytic
    gradients of L{opf_costfcn} and L{opf_consfcn}. Differences above 1e-6
    (cost), 1e-5 (power balance) and 1e-6 (branch flows) are logged as
    warnings.

    @return: the maximum absolute differences of C{d2f}, C{d2G} and C{d2H}
    """
    Ybus, Yf, Yt, ppopt, il = network_args(om)
    nx = len(x)
    num_d2f = zeros((nx, nx))
    num_d2G = zeros((nx, nx))
    num_d2H = zeros((nx, nx))
    for i in range(nx):
        xp = x.copy()
        xm = x.copy()
        xp[i] = x[i] + step / 2
        xm[i] = x[i] - step / 2
        # evaluate cost & gradients
        _, dfp = opf_costfcn(xp, om)
        _, dfm = opf_costfcn(xm, om)
        # evaluate constraints & gradients
        _, _, dHp, dGp = opf_consfcn(xp, om, Ybus, Yf, Yt, ppopt, il)
        _, _, dHm, dGm = opf_consfcn(xm, om, Ybus, Yf, Yt, ppopt, il)
        num_d2f[:, i] = cost_mult * (dfp - dfm) / step
        num_d2G[:, i] = (dGp - dGm) * lmbda["eqnonlin"] / step
        num_d2H[:, i] = (dHp - dHm) * lmbda["ineqnonlin"] / step

    d2f_err = _max_abs(sparse(d2f).toarray() - num_d2f)
    d2G_err = _max_abs(sparse(d2G).toarray() - num_d2G)
    d2H_err = _max_abs(sparse(d2H).toarray() - num_d2H)
    if d2f_err > 1e-6:
        logger.warning('Max difference in d2f: %g' % d2f_err)
    if d2G_err > 1e-5:
        logger.warning('Max difference in d2G: %g' % d2G_err)
    if d2H_err > 1e-6:
        logger.warning('Max difference in d2H: %g' % d2H_err)

    return d2f_err, d2G_err, d2H_err


def _max_abs(a):
    return abs(a).max() if a.size else 0.


def _check_structure(Lxx, Hs):
    Lr, Lc = Lxx.nonzero()
    Hr, Hc = Hs.nonzero()
    lxx_pos = set(zip(Lr, Lc))
    hs_pos = set(zip(Hr, Hc))
    if lxx_pos != hs_pos:
        logger.warning("structure of the Hessian differs from Hs: %d positions outside Hs, "
                       "%d positions of Hs missing" % (len(lxx_pos - hs_pos),
                                                       len(hs_pos - lxx_pos)))


def _get_options(om, ppopt):
    if ppopt is None:
        ppopt = om.userdata('ppopt')
        if not isinstance(ppopt, dict):
            ppopt = None
    return ppoption(ppopt)
