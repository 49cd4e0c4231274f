import os
oracle_dir = os.path.dirname(os.path.realpath(__file__))

from opforacle._version import __version__
from opforacle.auxiliary import *
from opforacle.create import *
from opforacle.pypower.ppoption import ppoption
from opforacle.pypower.opf_consfcn import opf_consfcn
from opforacle.pypower.opf_costfcn import opf_costfcn
from opforacle.opf.opf_model import opf_model
from opforacle.opf.opf_setup import opf_setup, network_args
from opforacle.opf.opf_hess_struct import opf_hess_struct
from opforacle.opf.opf_hessfcn import opf_hessfcn, check_hessian_numerically

import opforacle.networks
