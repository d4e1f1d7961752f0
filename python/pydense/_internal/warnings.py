"""Warning categories raised by pydense matrices.

Lossy dtype conversions and the integral matmul overflow preflight report
through these, so callers can silence or escalate them with a
``warnings`` filter on ``PyDenseWarning`` alone.
"""


class PyDenseWarning(UserWarning):
    """Common base; filter on this to catch every pydense warning."""


class PyDenseDTypeWarning(PyDenseWarning):
    """A conversion dropped the fractional part of floating values."""


class PyDenseOverflowRiskWarning(PyDenseWarning):
    """An integral product may exceed the range of its output dtype."""
