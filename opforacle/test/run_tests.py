# -*- coding: utf-8 -*-

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.


import argparse
import logging
import os
from multiprocessing import cpu_count

import pytest

import opforacle

test_dir = os.path.abspath(os.path.join(opforacle.oracle_dir, "test"))

logger = logging.getLogger(__name__)


def run_all_tests(parallel=False, n_cpu=None):
    """ function executing all tests of opforacle

    Inputs:
    parallel (bool, False) - If true and pytest-xdist is installed, tests are run in parallel
    n_cpu (int, None) - number of processes for parallel runs, all CPUs but one by default
    """
    args = [test_dir, "-xs"]
    if parallel:
        if n_cpu is None:
            n_cpu = max(cpu_count() - 1, 1)
        args += ["-n", str(n_cpu)]
    err = pytest.main(args)
    if parallel and err == 4:
        raise ModuleNotFoundError("Parallel testing not possible. "
                                  "Please make sure that pytest-xdist is installed correctly.")
    elif err > 1:
        logger.error("Testing not successfully finished.")
    return err


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument('-n_cpu', type=int, default=1, help="runs the tests in parallel if n_cpu > 1")
    n_cpu = parser.parse_args().n_cpu
    run_all_tests(parallel=n_cpu > 1, n_cpu=n_cpu)
