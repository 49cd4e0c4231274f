# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from numpy import sin, cos

from opforacle.create import create_empty_case, create_bus, create_gen, create_branch, \
    create_poly_cost


def case2(x_pu=0.1, va_to_rad=-0.05, rate_a_mva=0., baseMVA=100.):
    """
    Two bus case with a single lossless line between a generator bus and a
    load bus. The load is chosen such that the power balance is met exactly
    for flat voltage magnitudes and the angle difference given by
    **va_to_rad**.

    OPTIONAL:
        **x_pu** (float, 0.1) - series reactance of the line

        **va_to_rad** (float, -0.05) - voltage angle of the load bus in radians

        **rate_a_mva** (float, 0) - rating of the line, 0 means unlimited

        **baseMVA** (float, 100) - reference apparent power

    OUTPUT:
         **case** - Returns the two bus case

    EXAMPLE:
         import opforacle.networks as pn

         case = pn.case2(rate_a_mva=50.)
    """
    delta = -va_to_rad
    p_flow = sin(delta) / x_pu
    q_end = (1 - cos(delta)) / x_pu

    case = create_empty_case(baseMVA=baseMVA, name="case2")
    b0 = create_bus(case, type="ref")
    b1 = create_bus(case, p_mw=p_flow * baseMVA, q_mvar=-q_end * baseMVA)
    g0 = create_gen(case, b0, p_mw=p_flow * baseMVA, q_mvar=q_end * baseMVA, max_p_mw=200.)
    create_branch(case, b0, b1, r_pu=0., x_pu=x_pu, rate_a_mva=rate_a_mva)
    create_poly_cost(case, g0, cp1_eur_per_mw=10., cp2_eur_per_mw2=0.01)
    return case


def case9():
    """
    The 9 bus case of Anderson and Fouad's book 'Power System Control and
    Stability', with the data as distributed with PYPOWER.

    OUTPUT:
         **case** - Returns the case9 network

    EXAMPLE:
         import opforacle.networks as pn

         case = pn.case9()
    """
    case = create_empty_case(baseMVA=100., name="case9")
    loads = {4: (90., 30.), 6: (100., 35.), 8: (125., 50.)}
    for i in range(9):
        p, q = loads.get(i, (0., 0.))
        create_bus(case, type="ref" if i == 0 else "pv" if i in (1, 2) else "pq", p_mw=p,
                   q_mvar=q)

    gens = [(0, 72.3, 27.03, 250., (0.11, 5., 150.)),
            (1, 163., 6.54, 300., (0.085, 1.2, 600.)),
            (2, 85., -10.95, 270., (0.1225, 1., 335.))]
    for bus, p, q, pmax, (c2, c1, c0) in gens:
        g = create_gen(case, bus, p_mw=p, q_mvar=q, max_p_mw=pmax, min_p_mw=10.,
                       max_q_mvar=300., min_q_mvar=-300.)
        create_poly_cost(case, g, cp1_eur_per_mw=c1, cp0_eur=c0, cp2_eur_per_mw2=c2)

    branches = [(0, 3, 0., 0.0576, 0., 250.),
                (3, 4, 0.017, 0.092, 0.158, 250.),
                (4, 5, 0.039, 0.17, 0.358, 150.),
                (2, 5, 0., 0.0586, 0., 300.),
                (5, 6, 0.0119, 0.1008, 0.209, 150.),
                (6, 7, 0.0085, 0.072, 0.149, 250.),
                (7, 1, 0., 0.0625, 0., 250.),
                (7, 8, 0.032, 0.161, 0.306, 250.),
                (8, 3, 0.01, 0.085, 0.176, 250.)]
    for f, t, r, x, b, rate in branches:
        create_branch(case, f, t, r_pu=r, x_pu=x, b_pu=b, rate_a_mva=rate)
    return case
