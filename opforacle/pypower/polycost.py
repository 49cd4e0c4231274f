# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Evaluates polynomial generator cost & derivatives.
"""

from numpy import zeros, arange


def polycost(c, Pg, der=0):
    """Evaluates polynomial generator cost & derivatives.

    C{polycost(c, Pg, der)} returns the vector of the C{der}-th derivatives
    of the costs evaluated at C{Pg}, C{der=0} gives the costs themselves.

    C{c} is the coefficient matrix with one row per generator, column C{k}
    holds the coefficient of C{Pg**k}. C{c} is not modified.

    C{Pg} is in MW, not p.u. (works for C{Qg} too)
    """
    if c.ndim != 2 or c.shape[1] <= der:
        return zeros(Pg.shape)

    ## coefficients of the derivative polynomial
    for _ in range(der):
        c = c[:, 1:] * arange(1, c.shape[1])

    ## Horner scheme
    f = zeros(Pg.shape)
    for k in range(c.shape[1] - 1, -1, -1):
        f = f * Pg + c[:, k]
    return f
