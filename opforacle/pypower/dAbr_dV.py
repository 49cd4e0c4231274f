# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Partial derivatives of squared flow magnitudes w.r.t voltage.
"""

from scipy.sparse import diags


def dAbr_dV(dSf_dVa, dSf_dVm, dSt_dVa, dSt_dVm, Sf, St):
    """Partial derivatives of squared flow magnitudes w.r.t voltage.

    Returns the partials of C{A = abs(F)**2} at the "from" and "to" ends of
    the branches w.r.t. voltage angle and magnitude, given the flows C{F}
    (complex power, real power or complex current) and their partials::

        dA/dx = 2 * diag(real(F)) * real(dF/dx) + 2 * diag(imag(F)) * imag(dF/dx)

    For real flows the second term vanishes, which gives the partials of the
    squared real flow.

    @return: C{dAf_dVa, dAf_dVm, dAt_dVa, dAt_dVm}, real and sparse
    @see: L{dIbr_dV}, L{dSbr_dV}
    """
    dAf_dVa, dAf_dVm = _dA_dV(dSf_dVa, dSf_dVm, Sf)
    dAt_dVa, dAt_dVm = _dA_dV(dSt_dVa, dSt_dVm, St)
    return dAf_dVa, dAf_dVm, dAt_dVa, dAt_dVm


def _dA_dV(dF_dVa, dF_dVm, F):
    dA_dP = diags(2 * F.real, format="csr")
    dA_dQ = diags(2 * F.imag, format="csr")
    return dA_dP * dF_dVa.real + dA_dQ * dF_dVa.imag, \
        dA_dP * dF_dVm.real + dA_dQ * dF_dVm.imag
