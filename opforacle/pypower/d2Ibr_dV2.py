# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Computes 2nd derivatives of complex branch current w.r.t. voltage.
"""

from numpy import ones
from scipy.sparse import csr_matrix as sparse


def d2Ibr_dV2(Ybr, V, lam):
    """Computes 2nd derivatives of complex branch current w.r.t. voltage.

    Returns 4 matrices containing the partial derivatives w.r.t. voltage
    angle and magnitude of the product of a vector C{lam} with the 1st partial
    derivatives of the complex branch currents. Takes sparse branch admittance
    matrix C{Ybr}, voltage vector C{V} and C{nl x 1} vector of multipliers
    C{lam}. Output matrices are sparse.

    The currents are linear in C{V}, so the second derivative w.r.t. voltage
    magnitude vanishes and the remaining blocks are diagonal.

    @see: L{dIbr_dV}

    @author: Ray Zimmerman (PSERC Cornell)
    """
    nb = len(V)
    ib = range(nb)

    diaginvVm = sparse((ones(nb) / abs(V), (ib, ib)), (nb, nb))

    Haa = sparse((-(Ybr.T * lam) * V, (ib, ib)), (nb, nb))
    Hva = -1j * Haa * diaginvVm
    Hav = Hva
    Hvv = sparse((nb, nb), dtype=complex)

    return Haa, Hav, Hva, Hvv
