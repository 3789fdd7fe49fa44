"""
Shared hypothesis strategies for the conformance suite.

An operation script is a list of plain tuples, replayed against a token
by run_script(). Scripts may contain operations the token rejects;
rejected operations must leave no trace, so run_script() simply moves on.
"""

from hypothesis import strategies as st

from dualledger import LedgerError

from tests.helpers import SCALE


HOLDERS = ["alice", "bob", "charlie", "pool"]


@st.composite
def operation(draw, toggles=False):
    """One transfer or unit transfer, plus whitelist toggles when asked for."""
    kinds = ["transfer", "transfer", "transfer", "transfer_unit"]
    if toggles:
        kinds.append("whitelist")
    kind = draw(st.sampled_from(kinds))
    src = draw(st.sampled_from(HOLDERS))
    dst = draw(st.sampled_from(HOLDERS))
    if kind == "transfer":
        amount = draw(st.one_of(
            st.integers(min_value=0, max_value=SCALE),
            st.integers(min_value=0, max_value=8 * SCALE),
        ))
        return ("transfer", src, dst, amount)
    if kind == "transfer_unit":
        return ("transfer_unit", src, dst, draw(st.integers(min_value=1, max_value=40)))
    return ("whitelist", src, draw(st.booleans()))


def scripts(max_size=30, toggles=False):
    return st.lists(operation(toggles=toggles), min_size=1, max_size=max_size)


def fund(token, units_each=3):
    """Issue units_each units to every holder; pool starts whitelisted."""
    token.set_whitelist("deployer", "pool", True)
    for holder in HOLDERS:
        token.issue("deployer", holder, units_each)
    return token


def run_script(token, script, after_each=None):
    """Replay script on token; returns the number of applied operations."""
    applied = 0
    for op in script:
        try:
            if op[0] == "transfer":
                token.transfer(op[1], op[2], op[3])
            elif op[0] == "transfer_unit":
                token.transfer_unit(op[1], op[2], op[3])
            else:
                token.set_whitelist("deployer", op[1], op[2])
        except LedgerError:
            pass
        else:
            applied += 1
        if after_each is not None:
            after_each(token, op)
    return applied
