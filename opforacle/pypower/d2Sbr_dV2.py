# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Computes 2nd derivatives of complex power flow w.r.t. voltage.
"""

from numpy import conj
from scipy.sparse import diags


def d2Sbr_dV2(Cbr, Ybr, V, lam):
    """Computes 2nd derivatives of complex power flow w.r.t. voltage.

    Returns the 4 blocks C{Haa, Hav, Hva, Hvv} of the second derivatives of
    C{lam' * Sbr} w.r.t. voltage angle and magnitude, where
    C{Sbr = (Cbr * V) .* conj(Ybr * V)} are the complex power flows at one
    end of the branches given by the connection matrix C{Cbr}. With
    C{A = Ybr' * diag(lam) * Cbr} and C{B = diag(conj(V)) * A * diag(V)}::

        Haa = B + B.' - diag(A * V .* conj(V)) - diag(A.' * conj(V) .* V)
        Hva = j * diag(1 / abs(V)) * (B - B.' - diag(A * V .* conj(V)) + diag(A.' * conj(V) .* V))
        Hvv = diag(1 / abs(V)) * (B + B.') * diag(1 / abs(V))

    See MATPOWER Technical Note 2, "AC Power Flows, Generalized OPF Costs
    and their Derivatives using Complex Matrix Notation".
    """
    A = Ybr.conj().T * diags(lam, format="csr") * Cbr
    B = diags(conj(V)) * A * diags(V)
    D = diags((A * V) * conj(V))
    E = diags((A.T * conj(V)) * V)
    F = B + B.T
    invVm = diags(1 / abs(V))

    Haa = (F - D - E).tocsr()
    Hva = (1j * invVm * (B - B.T - D + E)).tocsr()
    Hav = Hva.T.tocsr()
    Hvv = (invVm * F * invVm).tocsr()

    return Haa, Hav, Hva, Hvv
