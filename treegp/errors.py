"""
treegp/errors.py - Exceptions raised by the engine
"""


class ContractViolation(ValueError):
    """A precondition was broken by the caller or by a malformed grammar.

    These are never recovered from inside the engine: the operation that
    detected the problem is aborted and the exception propagates.
    """


def require(condition: bool, message: str) -> None:
    """Raise ContractViolation with `message` unless `condition` holds"""
    if not condition:
        raise ContractViolation(message)
