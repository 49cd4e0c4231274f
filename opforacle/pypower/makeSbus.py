# Copyright 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Builds the vector of complex bus power injections.
"""

from numpy import ones, arange, zeros
from scipy.sparse import csr_matrix as sparse


def _get_Sbus(baseMVA, bus, gen_on, Cg, vm=None):
    # power injected by gens plus power injected by loads converted to p.u.
    S_load = _get_Sload(bus, vm)
    Sbus = (Cg * (gen_on["p_mw"].values + 1j * gen_on["q_mvar"].values)
            - S_load) / baseMVA
    return Sbus


def _get_load_shares(bus):
    ci = bus["const_i_percent"].values / 100.
    cz = bus["const_z_percent"].values / 100.
    return ci, cz


def _get_Sload(bus, vm):
    S_load = bus["p_mw"].values + 1j * bus["q_mvar"].values
    if vm is not None:
        ci, cz = _get_load_shares(bus)
        cp = (1 - ci - cz)
        volt_depend = cp + ci * vm + cz * vm ** 2
        S_load = S_load * volt_depend
    return S_load


def _get_Cg(gen_on, bus):
    gbus = gen_on["bus"].values  ## what buses are they at?

    ## form net complex bus power injection vector
    nb = bus.shape[0]
    ngon = gen_on.shape[0]
    return sparse((ones(ngon), (gbus, range(ngon))), (nb, ngon))


def makeSbus(baseMVA, bus, gen, vm=None, return_derivative=False):
    """Builds the vector of complex bus power injections.

    Returns the vector of complex bus power injections, that is, generation
    minus load. Power is expressed in per unit. If C{vm} is given, the
    constant current and constant impedance shares of the loads are scaled
    with the voltage magnitudes.

    With C{return_derivative=True} a tuple C{(Sbus, dSbus_dVm)} is returned,
    where C{dSbus_dVm} is the sparse diagonal partial derivative of the
    injections w.r.t. voltage magnitude. It is zero when C{vm} is None.

    @see: L{makeYbus}

    @author: Ray Zimmerman (PSERC Cornell)
    @author: Richard Lincoln
    """
    ## generator info
    gen_on = gen[gen["in_service"].values]  ## which generators are on?

    ## connection matrix, element i, j is 1 if gen on(j) at bus i is ON
    Cg = _get_Cg(gen_on, bus)

    ## power injected by gens plus power injected by loads converted to p.u.
    Sbus = _get_Sbus(baseMVA, bus, gen_on, Cg, vm)

    if not return_derivative:
        return Sbus

    nb = bus.shape[0]
    ib = arange(nb)
    if vm is None:
        dSbus_dVm = sparse((zeros(nb, dtype=complex), (ib, ib)), (nb, nb))
    else:
        ci, cz = _get_load_shares(bus)
        S_load = bus["p_mw"].values + 1j * bus["q_mvar"].values
        dSbus_dVm = sparse((-S_load * (ci + 2 * cz * vm) / baseMVA, (ib, ib)), (nb, nb))

    return Sbus, dSbus_dVm


def d2Sbus_dVm2(baseMVA, bus, lam):
    """Computes the 2nd derivative of the net injections w.r.t. Vm.

    Returns the sparse diagonal matrix of the second partial derivatives
    w.r.t. voltage magnitude of the product of the complex vector C{lam} with
    the net bus injections. Only the constant impedance share of the loads
    has a non-zero second derivative.
    """
    nb = bus.shape[0]
    ib = arange(nb)
    _, cz = _get_load_shares(bus)
    S_load = bus["p_mw"].values + 1j * bus["q_mvar"].values
    return sparse((-2 * cz * S_load * lam / baseMVA, (ib, ib)), (nb, nb))
