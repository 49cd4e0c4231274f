# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Computes partial derivatives of branch currents w.r.t. voltage.
"""

from scipy.sparse import diags


def dIbr_dV(branch, Yf, Yt, V):
    """Computes partial derivatives of branch currents w.r.t. voltage.

    Returns the partials of the complex currents C{If = Yf * V} and
    C{It = Yt * V} w.r.t. voltage angle and magnitude, followed by the
    currents::

        dIf/dVa = j * Yf * diag(V)
        dIf/dVm = Yf * diag(V / abs(V))

    C{branch} is accepted for the same call signature as L{dSbr_dV}.

    @return: C{dIf_dVa, dIf_dVm, dIt_dVa, dIt_dVm, If, It}
    """
    dV_dVa = diags(1j * V, format="csr")
    dV_dVm = diags(V / abs(V), format="csr")
    return Yf * dV_dVa, Yf * dV_dVm, Yt * dV_dVa, Yt * dV_dVm, Yf * V, Yt * V
