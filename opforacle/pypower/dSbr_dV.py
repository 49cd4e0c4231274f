# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Computes partial derivatives of power flows w.r.t. voltage.
"""

from numpy import conj, arange
from scipy.sparse import csr_matrix as sparse, diags


def dSbr_dV(branch, Yf, Yt, V):
    """Computes partial derivatives of power flows w.r.t. voltage.

    Returns the partials of the complex branch power flows at the "from" and
    "to" ends w.r.t. voltage angle and magnitude, followed by the flows. With
    C{If = Yf * V}, C{Sf = diag(Vf) * conj(If)} and the incidence C{Cf} of
    the "from" buses::

        dSf/dVa = j * (diag(conj(If)) * Cf * diag(V) - diag(Vf) * conj(Yf * diag(V)))
        dSf/dVm = diag(Vf) * conj(Yf * diag(V / abs(V))) + diag(conj(If)) * Cf * diag(V / abs(V))

    The "to" end is the same with C{Yt} and C{Ct}.

    @param branch: branch table of the monitored branches, C{from_bus} and
    C{to_bus} give the bus positions

    @return: C{dSf_dVa, dSf_dVm, dSt_dVa, dSt_dVm, Sf, St}
    """
    f = branch["from_bus"].values.astype(int)
    t = branch["to_bus"].values.astype(int)
    Vnorm = V / abs(V)

    dSf_dVa, dSf_dVm, Sf = _dSend_dV(f, Yf, V, Vnorm)
    dSt_dVa, dSt_dVm, St = _dSend_dV(t, Yt, V, Vnorm)

    return dSf_dVa, dSf_dVm, dSt_dVa, dSt_dVm, Sf, St


def _dSend_dV(buses, Ybr, V, Vnorm):
    ## partials of the flows at the branch ends located at buses
    nl = len(buses)
    shape = (nl, len(V))
    il = arange(nl)

    Ibr = Ybr * V
    diagVbr = diags(V[buses])
    diagIbr_conj = diags(conj(Ibr))

    dS_dVa = 1j * (diagIbr_conj * sparse((V[buses], (il, buses)), shape)
                   - diagVbr * (Ybr * diags(V)).conj())
    dS_dVm = diagVbr * (Ybr * diags(Vnorm)).conj() \
        + diagIbr_conj * sparse((Vnorm[buses], (il, buses)), shape)

    return dS_dVa.tocsr(), dS_dVm.tocsr(), V[buses] * conj(Ibr)
