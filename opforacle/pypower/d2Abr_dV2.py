# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Computes 2nd derivatives of squared branch flow magnitudes w.r.t. V.
"""

from scipy.sparse import diags

from opforacle.pypower.d2Sbr_dV2 import d2Sbr_dV2
from opforacle.pypower.d2Ibr_dV2 import d2Ibr_dV2


def d2ASbr_dV2(dSbr_dVa, dSbr_dVm, Sbr, Cbr, Ybr, V, lam):
    """Computes 2nd derivatives of |complex power flow|**2 w.r.t. V.

    Returns the 4 blocks C{Haa, Hav, Hva, Hvv} of the Hessian of
    C{lam' * abs(Sbr)**2} w.r.t. voltage angle and magnitude. Passing the
    real parts of the flows and their derivatives yields the Hessian of the
    squared real power flows.

    @see: L{dSbr_dV}, L{d2Sbr_dV2}
    """
    return _d2Abr_dV2(dSbr_dVa, dSbr_dVm, Sbr, lam,
                      lambda mu: d2Sbr_dV2(Cbr, Ybr, V, mu))


def d2AIbr_dV2(dIbr_dVa, dIbr_dVm, Ibr, Ybr, V, lam):
    """Computes 2nd derivatives of |complex current|**2 w.r.t. V.

    Returns the 4 blocks C{Haa, Hav, Hva, Hvv} of the Hessian of
    C{lam' * abs(Ibr)**2} w.r.t. voltage angle and magnitude.

    @see: L{dIbr_dV}, L{d2Ibr_dV2}
    """
    return _d2Abr_dV2(dIbr_dVa, dIbr_dVm, Ibr, lam,
                      lambda mu: d2Ibr_dV2(Ybr, V, mu))


def _d2Abr_dV2(dF_dVa, dF_dVm, F, lam, d2F_dV2):
    ## d2(|F|^2) = 2 * real(d2F weighted by conj(F) * lam + dF' * diag(lam) * conj(dF))
    diaglam = diags(lam, format="csr")
    Faa, Fav, Fva, Fvv = d2F_dV2(F.conj() * lam)

    Haa = 2 * (Faa + dF_dVa.T * diaglam * dF_dVa.conj()).real
    Hva = 2 * (Fva + dF_dVm.T * diaglam * dF_dVa.conj()).real
    Hav = 2 * (Fav + dF_dVa.T * diaglam * dF_dVm.conj()).real
    Hvv = 2 * (Fvv + dF_dVm.T * diaglam * dF_dVm.conj()).real

    return Haa, Hav, Hva, Hvv
