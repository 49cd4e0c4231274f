# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Computes 2nd derivatives of power injection w.r.t. voltage.
"""

from numpy import conj
from scipy.sparse import diags


def d2Sbus_dV2(Ybus, V, lam):
    """Computes 2nd derivatives of power injection w.r.t. voltage.

    Returns the 4 blocks C{Gaa, Gav, Gva, Gvv} of the second derivatives of
    C{lam' * (V .* conj(Ybus * V))} w.r.t. voltage angle and magnitude. All
    blocks are sparse with the structure of C{Ybus}.

    See MATPOWER Technical Note 2, "AC Power Flows, Generalized OPF Costs
    and their Derivatives using Complex Matrix Notation".
    """
    Ibus = Ybus * V
    diagV = diags(V)

    A = diags(lam * V)
    C = A * (Ybus * diagV).conj()
    D = Ybus.conj().T * diagV
    E = diags(conj(V)) * (D * diags(lam) - diags(D * lam))
    F = C - A * diags(conj(Ibus))
    invVm = diags(1 / abs(V))

    Gaa = (E + F).tocsr()
    Gva = (1j * invVm * (E - F)).tocsr()
    Gav = Gva.T.tocsr()
    Gvv = (invVm * (C + C.T) * invVm).tocsr()

    return Gaa, Gav, Gva, Gvv
