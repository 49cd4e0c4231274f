# Copyright (c) 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""Used to set and retrieve a PYPOWER options vector.
"""


OPF_OPTIONS = [
    ('opf_flow_lim', 'S', '''qty to limit for branch flow constraints:
'S' - apparent power flow (limit in MVA),
'P' - active power flow, implemented as P (limit in MW),
'2' - active power flow, implemented as P^2 (limit in MW),
'I' - current magnitude (limit in MVA at 1 p.u. voltage)
(the integer codes 0, 1 and 2 of older versions map to 'S', '2' and 'I')'''),

    ('opf_hess_check', False, '''check the analytic Hessian of the Lagrangian
against centered finite differences of the analytic gradients on every
evaluation (development aid, expensive)'''),

    ('opf_hess_check_step', 1e-5, 'step size of the finite difference '
     'Hessian check'),

    ('opf_hess_struct_check', False, '''compare the sparsity structure of
the padded Hessian of the Lagrangian against the supplied structure'''),

    ('opf_hess_struct_value', 1e-20, 'value stored at every position of '
     'the Hessian sparsity structure built by opf_hess_struct')
]

OUTPUT_OPTIONS = [
    ('verbose', 1, '''amount of progress info printed:
0 - print no progress info,
1 - print a little progress info,
2 - print a lot of progress info,
3 - print all progress info''')
]

## legacy integer codes of OPF_FLOW_LIM
FLOW_LIM_CODES = {0: 'S', 1: '2', 2: 'I'}


def ppoption(ppopt=None, **kw_args):
    """Used to set and retrieve a PYPOWER options vector.

    C{opt = ppoption()} returns the default options vector

    C{opt = ppoption(NAME1=VALUE1, NAME2=VALUE2, ...)} returns the default
    options vector with new values for the specified options, NAME# is the
    name of an option, and VALUE# is the new value.

    C{opt = ppoption(OPT, NAME1=VALUE1, NAME2=VALUE2, ...)} same as above
    except it uses the options vector OPT as a base instead of the default
    options vector.

    Examples::
        opt = ppoption(OPF_FLOW_LIM='I');
        opt = ppoption(opt, OPF_HESS_CHECK=True, VERBOSE=2)

    @author: Ray Zimmerman (PSERC Cornell)
    """

    default_ppopt = {}

    options = OPF_OPTIONS + OUTPUT_OPTIONS

    for name, default, _ in options:
        default_ppopt[name.upper()] = default

    ppopt = default_ppopt if ppopt is None else dict(default_ppopt, **ppopt)

    ppopt.update(kw_args)

    return ppopt


def flow_lim_type(ppopt):
    """Returns the branch flow limit type selected by C{OPF_FLOW_LIM}.

    One of C{'S'} (apparent power), C{'P'} (active power), C{'2'} (active
    power squared) or C{'I'} (current magnitude). Only the first character of
    a string option is significant, so C{'Sf'} and C{'s'} both select C{'S'}.
    """
    lim = ppopt['OPF_FLOW_LIM']
    if isinstance(lim, str):
        lim_type = lim[:1].upper()
    else:
        lim_type = FLOW_LIM_CODES.get(lim)
    if lim_type not in ('S', 'P', '2', 'I'):
        raise ValueError("unknown OPF_FLOW_LIM option %r" % (lim,))
    return lim_type
