# -*- coding: utf-8 -*-

# Copyright 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

"""Builds the sparsity structure of the Hessian of the Lagrangian.
"""

from numpy import ones, arange, full, concatenate
from scipy.sparse import csr_matrix as sparse, eye as speye

from opforacle.pypower.ppoption import ppoption


def opf_hess_struct(om, value=None):
    """Builds the sparsity structure of the Hessian of the Lagrangian.

    Returns a sparse C{nx x nx} matrix holding C{value} at every position the
    Hessian of the Lagrangian of the AC OPF model C{om} can take a non-zero
    value: the voltage angle and magnitude blocks of buses connected by a
    branch (or of the same bus) and the diagonal of the generator
    injections. Adding it to the Hessian keeps the structure of the result
    independent of the point of evaluation.

    The default C{value} is the C{OPF_HESS_STRUCT_VALUE} option.

    @see: L{opf_hessfcn}
    """
    if value is None:
        ppopt = om.userdata('ppopt')
        value = ppoption(ppopt if isinstance(ppopt, dict) else None)['OPF_HESS_STRUCT_VALUE']

    case = om.get_case()
    vv, _ = om.get_idx()
    nb = case["bus"].shape[0]
    nl = case["branch"].shape[0]
    nx = om.getN('var')

    ## bus connectivity of the branches
    f = case["branch"]["from_bus"].values.astype(int)
    t = case["branch"]["to_bus"].values.astype(int)
    Cf = sparse((ones(nl), (arange(nl), f)), (nl, nb))
    Ct = sparse((ones(nl), (arange(nl), t)), (nl, nb))
    Cl = Cf + Ct
    Cb = (Cl.T * Cl + speye(nb, nb)).tocoo()

    rows, cols = [], []
    for a in ('Va', 'Vm'):
        for b in ('Va', 'Vm'):
            rows.append(Cb.row + vv["i1"][a])
            cols.append(Cb.col + vv["i1"][b])
    for name in ('Pg', 'Qg'):
        idx = arange(vv["i1"][name], vv["iN"][name])
        rows.append(idx)
        cols.append(idx)

    rows = concatenate(rows)
    cols = concatenate(cols)
    return sparse((full(len(rows), value), (rows, cols)), (nx, nx))
