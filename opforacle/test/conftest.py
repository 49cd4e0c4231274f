# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import pytest

import opforacle as oc
import opforacle.networks as pn


@pytest.fixture
def case9():
    return pn.case9()


@pytest.fixture
def case9_om(case9):
    return oc.opf_setup(case9)


@pytest.fixture(params=["S", "P", "2", "I"])
def flow_lim(request):
    return request.param
