# -*- coding: utf-8 -*-

# Copyright 1996-2015 PSERC. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# Copyright (c) 2016-2024 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

"""Implements the OPF model object used to encapsulate a given OPF
problem formulation.
"""

import logging

from numpy import array, zeros, ones, inf, arange, r_, concatenate
from scipy.sparse import csr_matrix as sparse

logger = logging.getLogger(__name__)


class opf_model(object):
    """This class implements the OPF model object used to encapsulate
    a given OPF problem formulation. It allows for access to optimization
    variables and nonlinear constraints in named blocks, keeping track of the
    ordering and indexing of the blocks as variables and constraints are
    added to the problem.

    Nonlinear equality and inequality constraints are registered as sets
    with an evaluation function and a Hessian function, each defined only in
    terms of the variable sets the constraints depend on.

    @author: Ray Zimmerman (PSERC Cornell)
    @author: Richard Lincoln
    """

    def __init__(self, case):
        #: OPF case used to build the object.
        self.case = case

        #: data for optimization variable sets that make up the
        #  full optimization variable x
        self.var = {
            'idx': {
                'i1': {},  ## starting index within x
                'iN': {},  ## ending index within x
                'N': {}    ## number of elements in this variable set
            },
            'N': 0,        ## total number of elements in x
            'NS': 0,       ## number of variable sets or named blocks
            'data': {      ## bounds and initial value data
                'v0': {},  ## vector of initial values
                'vl': {},  ## vector of lower bounds
                'vu': {},  ## vector of upper bounds
            },
            'order': []    ## list of names for variable blocks in the order they appear in x
        }

        #: data for nonlinear equality constraints g(x) = 0 (nle) and
        #  inequality constraints h(x) <= 0 (nli)
        self.nle = self._empty_nln()
        self.nli = self._empty_nln()

        self.user_data = {}

    @staticmethod
    def _empty_nln():
        return {
            'idx': {
                'i1': {},   ## starting index within g(x) / h(x)
                'iN': {},   ## ending index within g(x) / h(x)
                'N': {}     ## number of elements in this constraint set
            },
            'N': 0,         ## total number of elements in g(x) / h(x)
            'NS': 0,        ## number of nonlinear constraint sets or named blocks
            'data': {
                'fcn': {},      ## constraint function of the set
                'hess': {},     ## Hessian function of the set
                'include': {},  ## names of further blocks evaluated by the same function
                'vs': {}        ## list of variable sets that define xx for this set
            },
            'order': []     ## list of names for nonlinear constraint blocks in the order they appear
        }

    def __repr__(self):  # pragma: no cover
        """String representation of the object.
        """
        s = ''
        if self.var['NS']:
            s += '\n%-22s %5s %8s %8s %8s\n' % ('VARIABLES', 'name', 'i1', 'iN', 'N')
            s += '%-22s %5s %8s %8s %8s\n' % ('=========', '------', '-----', '-----', '------')
            for k in range(self.var['NS']):
                name = self.var['order'][k]
                idx = self.var['idx']
                s += '%15d:%12s %8d %8d %8d\n' % (k, name, idx['i1'][name], idx['iN'][name],
                                                 idx['N'][name])

            s += '%15s%31s\n' % (('var[\'NS\'] = %d' % self.var['NS']),
                                 ('var[\'N\'] = %d' % self.var['N']))
            s += '\n'
        else:
            s += '%s  :  <none>\n' % 'VARIABLES'

        for title, nln, tag in (('NONLIN EQUALITY', self.nle, 'nle'),
                                ('NONLIN INEQUALITY', self.nli, 'nli')):
            if nln['NS']:
                s += '\n%-22s %5s %8s %8s %8s\n' % (title, 'name', 'i1', 'iN', 'N')
                s += '%-22s %5s %8s %8s %8s\n' % ('=' * len(title), '------', '-----', '-----',
                                                  '------')
                for k in range(nln['NS']):
                    name = nln['order'][k]
                    idx = nln['idx']
                    s += '%15d:%12s %8d %8d %8d\n' % (k, name, idx['i1'][name], idx['iN'][name],
                                                     idx['N'][name])

                s += '%15s%31s\n' % (('%s.NS = %d' % (tag, nln['NS'])),
                                     ('%s.N = %d' % (tag, nln['N'])))
                s += '\n'
            else:
                s += '%s  :  <none>\n' % title

        s += '  userdata = '
        if len(self.user_data):
            s += '\n'
        for name in self.user_data:
            s += '    %s\n' % name

        return s

    def add_nln_constraints(self, name, N, iseq, fcn, hess, varsets=None):
        """Adds a set of nonlinear constraints to the model.

        Nonlinear constraints are of the form C{g(x) = 0} (C{iseq} True) or
        C{h(x) <= 0} (C{iseq} False). C{fcn(xx, return_jacobian)} returns the
        constraint values and, if requested, the sparse Jacobian, where C{xx}
        is the list of the variable sets named in C{varsets} (in the order
        given). C{hess(xx, lam)} returns the sparse Hessian of C{lam' * g(xx)}
        w.r.t. the same variables. If C{varsets} is empty, C{xx} is made of
        all variable sets.

        A list of names with a list of sizes adds consecutive blocks that
        are evaluated together by one function.

        Examples::
            om.add_nln_constraints('Pmis', nb, True, fcn, hess, ['Va', 'Vm'])
            om.add_nln_constraints(['Sf', 'St'], [nl2, nl2], False, fcn, hess)
        """
        nln = self.nle if iseq else self.nli
        if isinstance(name, str):
            names, sizes = [name], [N]
        else:
            names, sizes = list(name), list(N)
            if len(names) != len(sizes):
                raise ValueError("opf_model.add_nln_constraints: dimensions of names and sizes "
                                 "must match")

        ## prevent duplicate named constraint sets
        for n in names:
            if n in self.nle['idx']['N'] or n in self.nli['idx']['N']:
                raise ValueError("opf_model.add_nln_constraints: nonlinear constraint set named "
                                 "'%s' already exists" % n)

        if varsets is None or len(varsets) == 0:
            varsets = list(self.var['order'])
        for v in varsets:
            if v not in self.var['idx']['N']:
                raise ValueError("opf_model.add_nln_constraints: unknown variable set '%s'" % v)

        for n, Nk in zip(names, sizes):
            ## add info about this nonlinear constraint set
            nln['idx']['i1'][n] = nln['N']          ## starting index
            nln['idx']['iN'][n] = nln['N'] + Nk     ## ending index
            nln['idx']['N'][n] = Nk                 ## number of constraints

            ## update number of nonlinear constraints and constraint sets
            nln['N'] = nln['idx']['iN'][n]
            nln['NS'] = nln['NS'] + 1

            ## put name in ordered list of constraint sets
            nln['order'].append(n)

        nln['data']['fcn'][names[0]] = fcn
        nln['data']['hess'][names[0]] = hess
        nln['data']['include'][names[0]] = names[1:]
        nln['data']['vs'][names[0]] = varsets

    def add_vars(self, name, N, v0=None, vl=None, vu=None):
        """ Adds a set of variables to the model.

        Adds a set of variables to the model, where N is the number of
        variables in the set, C{v0} is the initial value of those variables,
        and C{vl} and C{vu} are the lower and upper bounds on the variables.
        The defaults for the last three arguments, which are optional,
        are for all values to be initialized to zero (C{v0 = 0}) and unbounded
        (C{VL = -inf, VU = inf}).
        """
        ## prevent duplicate named var sets
        if name in self.var["idx"]["N"]:
            raise ValueError("opf_model.add_vars: variable set named '%s' already exists" % name)

        if v0 is None or len(v0) == 0:
            v0 = zeros(N)           ## init to zero by default

        if vl is None or len(vl) == 0:
            vl = -inf * ones(N)     ## unbounded below by default

        if vu is None or len(vu) == 0:
            vu = inf * ones(N)      ## unbounded above by default

        ## add info about this var set
        self.var["idx"]["i1"][name] = self.var["N"]         ## starting index
        self.var["idx"]["iN"][name] = self.var["N"] + N     ## ending index
        self.var["idx"]["N"][name] = N                      ## number of vars
        self.var["data"]["v0"][name] = v0                   ## initial value
        self.var["data"]["vl"][name] = vl                   ## lower bound
        self.var["data"]["vu"][name] = vu                   ## upper bound

        ## update number of vars and var sets
        self.var["N"] = self.var["idx"]["iN"][name]
        self.var["NS"] = self.var["NS"] + 1

        ## put name in ordered list of var sets
        self.var["order"].append(name)

    def get_idx(self):
        """ Returns the idx struct for vars and nonlinear constraints.

        Returns a structure for each with the beginning and ending
        index value and the number of elements for each named block.
        The 'i1' field (that's a one) is a dict with all of the
        starting indices, 'iN' contains all the ending indices and
        'N' contains all the sizes. Each is a dict whose keys are
        the named blocks. The nonlinear constraint dict holds the blocks
        of both equality and inequality constraints, each indexed within
        its own class.

        Examples::
            vv, nn = om.get_idx()

        For a variable block named 'z' we have::
                vv['i1']['z'] - starting index for 'z' in optimization vector x
                vv['iN']['z'] - ending index for 'z' in optimization vector x
                vv['N']['z']  - number of elements in 'z'

        To extract a 'z' variable from x::
                z = x[vv['i1']['z']:vv['iN']['z']]
        """
        vv = self.var["idx"]
        nn = {key: dict(self.nle["idx"][key], **self.nli["idx"][key])
              for key in ("i1", "iN", "N")}

        return vv, nn

    def get_case(self):
        """Returns the OPF case.
        """
        return self.case

    def getN(self, selector, name=None):
        """Returns the number of variables or nonlinear constraints.

        Returns either the total number of variables/constraints or the
        number corresponding to a specified named block.

        Examples::
            N = om.getN('var')         : total number of variables
            N = om.getN('nle')         : total number of nonlinear equality constraints
            N = om.getN('nli')         : total number of nonlinear inequality constraints
            N = om.getN('var', name)   : number of variables in named set
            N = om.getN('nle', name)   : number of nonlinear eq. constraints in named set
        """
        if name is None:
            N = getattr(self, selector)["N"]
        else:
            if name in getattr(self, selector)["idx"]["N"]:
                N = getattr(self, selector)["idx"]["N"][name]
            else:
                N = 0
        return N

    def getv(self, name=None):
        """Returns initial value, lower bound and upper bound for opt variables.

        Returns the initial value, lower bound and upper bound for the full
        optimization variable vector, or for a specific named variable set.

        Examples::
            x, xmin, xmax = om.getv()
            Pg, Pmin, Pmax = om.getv('Pg')
        """
        if name is None:
            v0 = array([]); vl = array([]); vu = array([])
            for k in range(self.var["NS"]):
                name = self.var["order"][k]
                v0 = r_[v0, self.var["data"]["v0"][name]]
                vl = r_[vl, self.var["data"]["vl"][name]]
                vu = r_[vu, self.var["data"]["vu"][name]]
        else:
            if name in self.var["idx"]["N"]:
                v0 = self.var["data"]["v0"][name]
                vl = self.var["data"]["vl"][name]
                vu = self.var["data"]["vu"][name]
            else:
                v0 = array([])
                vl = array([])
                vu = array([])

        return v0, vl, vu

    def varsets_x(self, x, varsets=None):
        """Returns the list of the sub-vectors of C{x} for C{varsets}.

        If C{varsets} is empty the sub-vectors of all variable sets are
        returned, in the order they appear in C{x}.
        """
        if varsets is None or len(varsets) == 0:
            varsets = self.var["order"]
        idx = self.var["idx"]
        return [x[idx["i1"][v]:idx["iN"][v]] for v in varsets]

    def _varsets_cols(self, varsets):
        ## columns of x for the variables of varsets, in the order of xx
        idx = self.var["idx"]
        if len(varsets) == 0:
            return zeros(0, dtype=int)
        return concatenate([arange(idx["i1"][v], idx["iN"][v]) for v in varsets])

    def _evaluated_sets(self, nln):
        ## first block of each evaluated set with its row range
        for name in nln["order"]:
            if name not in nln["data"]["fcn"]:
                continue
            last = (nln["data"]["include"][name] or [name])[-1]
            i1, iN = nln["idx"]["i1"][name], nln["idx"]["iN"][last]
            if iN > i1:
                yield name, i1, iN

    def nonlin_constraints(self, x, iseq, return_jacobian=True):
        """Builds and returns the full set of nonlinear constraints.

        Evaluates the nonlinear equality (C{iseq} True) or inequality
        constraint sets added by L{add_nln_constraints} at C{x} and
        stacks them in the order they were added. The Jacobian of each set is
        placed in the columns of its variable sets, all other columns are
        zero. Sets with no constraints are skipped.

        @return: C{g} - vector of constraint values, followed by C{dg} -
        (optional) sparse Jacobian (number of constraints x C{len(x)})
        """
        nln = self.nle if iseq else self.nli
        nx = len(x)
        g = zeros(nln["N"])
        rows, cols, vals = [], [], []

        for name, i1, iN in self._evaluated_sets(nln):
            vs = nln["data"]["vs"][name]
            xx = self.varsets_x(x, vs)
            fcn = nln["data"]["fcn"][name]
            if return_jacobian:
                gk, dgk = fcn(xx, True)
                dgk = sparse(dgk).tocoo()
                rows.append(dgk.row + i1)
                cols.append(self._varsets_cols(vs)[dgk.col])
                vals.append(dgk.data)
            else:
                gk = fcn(xx, False)
            g[i1:iN] = gk

        if not return_jacobian:
            return g

        if rows:
            dg = sparse((concatenate(vals), (concatenate(rows), concatenate(cols))),
                        (nln["N"], nx))
        else:
            dg = sparse((nln["N"], nx))

        return g, dg

    def eval_nln_constraint_hess(self, x, lam, iseq):
        """Builds the Hessian of the weighted sum of nonlinear constraints.

        Returns the sparse C{nx x nx} Hessian of C{lam' * g(x)} for the
        equality (C{iseq} True) or inequality constraints, summing the
        Hessians of all sets, each placed in the rows and columns of its
        variable sets.
        """
        nln = self.nle if iseq else self.nli
        nx = len(x)
        rows, cols, vals = [], [], []

        for name, i1, iN in self._evaluated_sets(nln):
            vs = nln["data"]["vs"][name]
            xx = self.varsets_x(x, vs)
            hess = nln["data"]["hess"][name]
            d2Gk = sparse(hess(xx, lam[i1:iN])).tocoo()
            xcols = self._varsets_cols(vs)
            rows.append(xcols[d2Gk.row])
            cols.append(xcols[d2Gk.col])
            vals.append(d2Gk.data)

        if not rows:
            return sparse((nx, nx))

        return sparse((concatenate(vals), (concatenate(rows), concatenate(cols))), (nx, nx))

    def userdata(self, name, val=None):
        """Used to save or retrieve values of user data.

        This function allows the user to save any arbitrary data in the object
        for later use. This can be useful when using a user function to add
        variables, constraints, costs, etc. For example, suppose some special
        indexing is constructed when adding some variables or constraints.
        This indexing data can be stored and used later to "unpack" the results
        of the solved case.
        """
        if val is not None:
            self.user_data[name] = val
            return self
        else:
            if name in self.user_data:
                return self.user_data[name]
            else:
                return array([])
