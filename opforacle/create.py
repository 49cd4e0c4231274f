# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import pandas as pd
from numpy import dtype, nan, isnan

from opforacle.auxiliary import OPFCase, get_free_id, _preserve_dtypes

logger = logging.getLogger(__name__)


def create_empty_case(baseMVA=100., name=""):
    """
    This function initializes the opforacle datastructure.

    OPTIONAL:
        **baseMVA** (float, 100.) - reference apparent power for the per unit system

        **name** (string, "") - name for the case

    OUTPUT:
        **case** (attrdict) - OPFCase attrdict with empty tables

    EXAMPLE:
        case = create_empty_case()

    """
    case = OPFCase({
        "bus": [("name", dtype(object)),
                ("type", dtype(object)),
                ("p_mw", "f8"),
                ("q_mvar", "f8"),
                ("gs_mw", "f8"),
                ("bs_mvar", "f8"),
                ("vm_pu", "f8"),
                ("va_degree", "f8"),
                ("max_vm_pu", "f8"),
                ("min_vm_pu", "f8"),
                ("const_z_percent", "f8"),
                ("const_i_percent", "f8")],
        "gen": [("name", dtype(object)),
                ("bus", "i8"),
                ("p_mw", "f8"),
                ("q_mvar", "f8"),
                ("vm_pu", "f8"),
                ("max_p_mw", "f8"),
                ("min_p_mw", "f8"),
                ("max_q_mvar", "f8"),
                ("min_q_mvar", "f8"),
                ("in_service", "bool")],
        "branch": [("name", dtype(object)),
                   ("from_bus", "i8"),
                   ("to_bus", "i8"),
                   ("r_pu", "f8"),
                   ("x_pu", "f8"),
                   ("b_pu", "f8"),
                   ("rate_a_mva", "f8"),
                   ("tap", "f8"),
                   ("shift_degree", "f8"),
                   ("in_service", "bool")],
        "poly_cost": [("gen", "i8"),
                      ("cp0_eur", "f8"),
                      ("cp1_eur_per_mw", "f8"),
                      ("cp2_eur_per_mw2", "f8"),
                      ("cq0_eur", "f8"),
                      ("cq1_eur_per_mvar", "f8"),
                      ("cq2_eur_per_mvar2", "f8")],
        "baseMVA": baseMVA,
        "name": name,
    })
    for s in case:
        if isinstance(case[s], list):
            case[s] = pd.DataFrame(
                {col: pd.Series(dtype=dt) for col, dt in case[s]})
    return case


def _append_entries(case, table, index, entries):
    dtypes = case[table].dtypes
    row = pd.DataFrame([entries], index=[index], columns=case[table].columns)
    if case[table].empty:
        case[table] = row
    else:
        case[table] = pd.concat([case[table], row])
    _preserve_dtypes(case[table], dtypes)


def _check_bus(case, bus, element):
    if bus not in case["bus"].index.values:
        raise UserWarning("Cannot attach %s to bus %s, bus does not exist" % (element, bus))


def create_bus(case, name=None, type="pq", p_mw=0., q_mvar=0., gs_mw=0., bs_mvar=0.,
               vm_pu=1., va_degree=0., max_vm_pu=1.1, min_vm_pu=0.9,
               const_z_percent=0., const_i_percent=0.):
    """
    Adds one bus in table case["bus"].

    Buses are numbered consecutively from zero in the order of creation; the
    returned index is the bus position used by generators and branches.

    INPUT:
        **case** - The OPF case within which this bus should be created

    OPTIONAL:
        **type** (string, "pq") - "ref" for the angle reference bus, "pv" or "pq"

        **p_mw**, **q_mvar** (float, 0) - load demand at the bus

        **gs_mw**, **bs_mvar** (float, 0) - shunt conductance / susceptance at V = 1.0 p.u.

        **max_vm_pu**, **min_vm_pu** (float, 1.1 / 0.9) - voltage magnitude limits

        **const_z_percent**, **const_i_percent** (float, 0) - share of the load
        modelled as constant impedance / constant current

    OUTPUT:
        **index** (int) - The unique ID of the created bus

    EXAMPLE:
        create_bus(case, type="ref")
    """
    if type not in ("ref", "pv", "pq"):
        raise UserWarning("Unknown bus type %s" % type)
    if const_z_percent + const_i_percent > 100.:
        raise UserWarning("const_z_percent and const_i_percent must not exceed 100 percent")

    index = get_free_id(case["bus"])
    if index != len(case["bus"]):
        raise UserWarning("Bus table must be consecutively indexed from zero")

    _append_entries(case, "bus", index, {
        "name": name, "type": type, "p_mw": p_mw, "q_mvar": q_mvar, "gs_mw": gs_mw,
        "bs_mvar": bs_mvar, "vm_pu": vm_pu, "va_degree": va_degree, "max_vm_pu": max_vm_pu,
        "min_vm_pu": min_vm_pu, "const_z_percent": const_z_percent,
        "const_i_percent": const_i_percent})
    return index


def create_gen(case, bus, p_mw=0., q_mvar=0., vm_pu=1., max_p_mw=nan, min_p_mw=0.,
               max_q_mvar=nan, min_q_mvar=nan, name=None, in_service=True):
    """
    Adds a generator to the case["gen"] table.

    Missing limits are replaced by loose defaults: max_p_mw by 10 * baseMVA,
    max_q_mvar / min_q_mvar by +/- 10 * baseMVA.

    INPUT:
        **case** - The OPF case within which this generator should be created

        **bus** (int) - The bus id to which the generator is connected

    OUTPUT:
        **index** (int) - The unique ID of the created generator
    """
    _check_bus(case, bus, "gen")
    big = 10 * case["baseMVA"]
    index = get_free_id(case["gen"])
    _append_entries(case, "gen", index, {
        "name": name, "bus": bus, "p_mw": p_mw, "q_mvar": q_mvar, "vm_pu": vm_pu,
        "max_p_mw": big if isnan(max_p_mw) else max_p_mw, "min_p_mw": min_p_mw,
        "max_q_mvar": big if isnan(max_q_mvar) else max_q_mvar,
        "min_q_mvar": -big if isnan(min_q_mvar) else min_q_mvar,
        "in_service": bool(in_service)})
    return index


def create_branch(case, from_bus, to_bus, r_pu, x_pu, b_pu=0., rate_a_mva=0., tap=0.,
                  shift_degree=0., name=None, in_service=True):
    """
    Adds a branch (line or transformer in pi model) to the case["branch"] table.

    INPUT:
        **from_bus**, **to_bus** (int) - bus ids of the branch ends

        **r_pu**, **x_pu** (float) - series resistance / reactance

    OPTIONAL:
        **b_pu** (float, 0) - total line charging susceptance

        **rate_a_mva** (float, 0) - long term rating, 0 means unlimited

        **tap** (float, 0) - off nominal turns ratio, 0 means 1.0

        **shift_degree** (float, 0) - phase shift angle

    OUTPUT:
        **index** (int) - The unique ID of the created branch
    """
    for b in (from_bus, to_bus):
        _check_bus(case, b, "branch")
    index = get_free_id(case["branch"])
    _append_entries(case, "branch", index, {
        "name": name, "from_bus": from_bus, "to_bus": to_bus, "r_pu": r_pu, "x_pu": x_pu,
        "b_pu": b_pu, "rate_a_mva": rate_a_mva, "tap": tap, "shift_degree": shift_degree,
        "in_service": bool(in_service)})
    return index


def create_poly_cost(case, gen, cp1_eur_per_mw, cp0_eur=0., cp2_eur_per_mw2=0., cq0_eur=0.,
                     cq1_eur_per_mvar=0., cq2_eur_per_mvar2=0.):
    """
    Creates an entry for polynomial costs of a generator. The cost function is
    given by the coefficients of active and reactive generation in MW / MVAr:

        cp2 * P^2 + cp1 * P + cp0 + cq2 * Q^2 + cq1 * Q + cq0

    OUTPUT:
        **index** (int) - The unique ID of the created cost entry
    """
    if gen not in case["gen"].index.values:
        raise UserWarning("Cannot attach cost to gen %s, gen does not exist" % gen)
    if gen in case["poly_cost"]["gen"].values:
        raise UserWarning("There already exist costs for gen %s" % gen)
    index = get_free_id(case["poly_cost"])
    _append_entries(case, "poly_cost", index, {
        "gen": gen, "cp0_eur": cp0_eur, "cp1_eur_per_mw": cp1_eur_per_mw,
        "cp2_eur_per_mw2": cp2_eur_per_mw2, "cq0_eur": cq0_eur,
        "cq1_eur_per_mvar": cq1_eur_per_mvar, "cq2_eur_per_mvar2": cq2_eur_per_mvar2})
    return index
