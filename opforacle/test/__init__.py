import os
from opforacle import oracle_dir

test_path = os.path.join(oracle_dir, 'test')

from opforacle.test.helper_functions import *
from opforacle.test.run_tests import *
