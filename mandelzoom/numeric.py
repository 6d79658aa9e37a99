"""
Real number types for the Mandelbrot explorer.

All geometry and iteration code is written once against the Real
interface defined here. Two backends implement it:
- NativeReal: IEEE double precision (a thin wrapper around float)
- ArbitraryReal: GNU MPFR floats (via gmpy2) with a per-value bit precision

Both backends support the same operators, comparisons and conversions,
so a View or a render pass only needs to be told which class to use:

    from mandelzoom.numeric import get_backend
    Real = get_backend("arbitrary")
    x = Real(0.5, precision=256)

Precision policy (how many bits a deep zoom needs) lives outside this
module; the types only expose precision / set_precision.
"""

import functools
import math
import numbers
import operator

import gmpy2


NATIVE_PRECISION = 53   # Mantissa bits of an IEEE double
DEFAULT_PRECISION = 64  # Default mantissa bits for new ArbitraryReal values
MIN_PRECISION = 2       # Smallest precision MPFR accepts


class UnknownBackendError(ValueError):
    """Raised when a numeric backend name is not recognised."""


@functools.lru_cache(maxsize=None)
def _mpfr_context(precision):
    """Get a gmpy2 context computing with the given precision."""
    return gmpy2.context(precision=precision)


class Real:
    """
    Base class for the real number backends.

    Values are immutable from the outside: arithmetic always returns a
    new value and the in-place operators rebind. The one exception is
    set_precision(), which changes the working precision of a value in
    place.

    Subclasses provide:
        _unwrap(other): backend value for an operand, or NotImplemented
        _compute(name, a, b, other): result of a binary operation
        _wrap(value): new instance around a backend value
    """

    __slots__ = ("_value",)

    native = False

    # -- arithmetic --------------------------------------------------------

    def _binary(self, name, other, reflected=False):
        rhs = self._unwrap(other)
        if rhs is NotImplemented:
            return NotImplemented
        lhs = self._value
        if reflected:
            lhs, rhs = rhs, lhs
        return self._compute(name, lhs, rhs, other)

    def __add__(self, other):
        return self._binary("add", other)

    def __radd__(self, other):
        return self._binary("add", other, reflected=True)

    def __sub__(self, other):
        return self._binary("sub", other)

    def __rsub__(self, other):
        return self._binary("sub", other, reflected=True)

    def __mul__(self, other):
        return self._binary("mul", other)

    def __rmul__(self, other):
        return self._binary("mul", other, reflected=True)

    def __truediv__(self, other):
        return self._binary("div", other)

    def __rtruediv__(self, other):
        return self._binary("div", other, reflected=True)

    # Values are immutable, so the in-place forms rebind to a new value
    __iadd__ = __add__
    __isub__ = __sub__
    __imul__ = __mul__
    __itruediv__ = __truediv__

    def __pos__(self):
        return self.copy()

    def __pow__(self, exponent):
        if isinstance(exponent, Real):
            if exponent != int(exponent):
                return NotImplemented
            exponent = int(exponent)
        if not isinstance(exponent, numbers.Integral):
            return NotImplemented
        return self.ipow(int(exponent))

    def ipow(self, n):
        """
        Raise to an integer power using repeated squaring.

        Args:
            n: Integer exponent, may be negative

        Returns:
            A new value of the same type and precision
        """
        if n < 0:
            return 1 / self.ipow(-n)

        result = self._wrap_like(1)
        base = self
        while n > 0:
            if n % 2 == 1:
                result = result * base
            base = base * base
            n //= 2
        return result

    # -- comparison --------------------------------------------------------

    def _compare(self, op, other):
        rhs = self._unwrap(other)
        if rhs is NotImplemented:
            return NotImplemented
        return op(self._value, rhs)

    def __eq__(self, other):
        return self._compare(operator.eq, other)

    def __ne__(self, other):
        return self._compare(operator.ne, other)

    def __lt__(self, other):
        return self._compare(operator.lt, other)

    def __le__(self, other):
        return self._compare(operator.le, other)

    def __gt__(self, other):
        return self._compare(operator.gt, other)

    def __ge__(self, other):
        return self._compare(operator.ge, other)

    def __hash__(self):
        return hash(self._value)

    def __bool__(self):
        return self._value != 0

    # -- conversion --------------------------------------------------------

    def __float__(self):
        return float(self._value)

    def __int__(self):
        # Truncates toward zero on every backend
        return int(self._value)

    def to_double(self):
        """Narrow to a native double."""
        return float(self._value)

    def __format__(self, format_spec):
        return format(float(self._value), format_spec)

    def __str__(self):
        return str(self._value)

    def copy(self):
        """Get an independent copy with the same precision."""
        return self._wrap(self._value)

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()

    def _wrap_like(self, value):
        return type(self)(value, precision=self.precision)


class NativeReal(Real):
    """
    Double precision backend.

    The precision is fixed at 53 bits; set_precision() is accepted so
    callers need not care which backend is active, but has no effect.
    """

    __slots__ = ()

    native = True

    _OPERATIONS = {
        "add": operator.add,
        "sub": operator.sub,
        "mul": operator.mul,
        "div": operator.truediv,
    }

    def __init__(self, value=0.0, precision=None):
        if isinstance(value, str):
            value = float(value)
        self._value = float(value)

    @classmethod
    def _wrap(cls, value):
        obj = cls.__new__(cls)
        obj._value = value
        return obj

    @staticmethod
    def _unwrap(other):
        if isinstance(other, NativeReal):
            return other._value
        if isinstance(other, Real):
            # Let the arbitrary precision operand handle mixed arithmetic
            return NotImplemented
        if isinstance(other, numbers.Real):
            return float(other)
        return NotImplemented

    def _compute(self, name, a, b, other):
        return self._wrap(self._OPERATIONS[name](a, b))

    @property
    def precision(self):
        return NATIVE_PRECISION

    def set_precision(self, bits):
        pass

    def with_precision(self, bits):
        return self.copy()

    def __neg__(self):
        return self._wrap(-self._value)

    def __abs__(self):
        return self._wrap(abs(self._value))

    def exp2(self):
        """2 raised to this value."""
        return self._wrap(2.0 ** self._value)

    def log2(self):
        """Base 2 logarithm of this value."""
        return self._wrap(math.log2(self._value))

    def __repr__(self):
        return f"NativeReal({self._value!r})"


class ArbitraryReal(Real):
    """
    Arbitrary precision backend built on gmpy2's mpfr type.

    Each value carries its own precision in bits. The result of a binary
    operation is computed with the largest precision of its arbitrary
    precision operands. Division by zero follows MPFR and yields an
    infinity rather than raising.
    """

    __slots__ = ()

    def __init__(self, value=0.0, precision=None):
        if precision is None:
            if isinstance(value, ArbitraryReal):
                precision = value.precision
            else:
                precision = DEFAULT_PRECISION
        _check_precision(precision)
        if isinstance(value, Real):
            value = value._value
        self._value = gmpy2.mpfr(value, precision)

    @classmethod
    def _wrap(cls, value):
        obj = cls.__new__(cls)
        obj._value = value
        return obj

    @staticmethod
    def _unwrap(other):
        if isinstance(other, Real):
            return other._value
        if isinstance(other, numbers.Real):
            return other
        return NotImplemented

    def _compute(self, name, a, b, other):
        precision = self.precision
        if isinstance(other, ArbitraryReal):
            precision = max(precision, other.precision)
        context = _mpfr_context(precision)
        return self._wrap(getattr(context, name)(a, b))

    @property
    def precision(self):
        return self._value.precision

    def set_precision(self, bits):
        """
        Change the working precision of this value in place.

        Args:
            bits: New mantissa size in bits
        """
        _check_precision(bits)
        self._value = gmpy2.mpfr(self._value, bits)

    def with_precision(self, bits):
        """Get a copy of this value with a different precision."""
        _check_precision(bits)
        return self._wrap(gmpy2.mpfr(self._value, bits))

    def __neg__(self):
        return self._wrap(_mpfr_context(self.precision).minus(self._value))

    def __abs__(self):
        return self._wrap(_mpfr_context(self.precision).abs(self._value))

    def __int__(self):
        # int(mpfr) rounds to nearest
        return int(gmpy2.trunc(self._value))

    def exp2(self):
        """2 raised to this value, at this value's precision."""
        return self._wrap(_mpfr_context(self.precision).exp2(self._value))

    def log2(self):
        """Base 2 logarithm of this value, at this value's precision."""
        return self._wrap(_mpfr_context(self.precision).log2(self._value))

    def __repr__(self):
        return f"ArbitraryReal('{self._value}', precision={self.precision})"


def _check_precision(bits):
    if int(bits) != bits or bits < MIN_PRECISION:
        raise ValueError(f"Invalid precision: {bits!r} bits")


BACKENDS = {
    "native": NativeReal,
    "arbitrary": ArbitraryReal,
}


def get_backend(name):
    """
    Get a Real implementation by name.

    Args:
        name: Key from BACKENDS ("native" or "arbitrary")

    Returns:
        The Real subclass

    Raises:
        UnknownBackendError if name not found
    """
    try:
        return BACKENDS[name]
    except KeyError:
        raise UnknownBackendError(
            f"Unknown numeric backend {name!r}, expected one of {sorted(BACKENDS)}"
        ) from None


def list_backend_names():
    """Get list of available backend names."""
    return list(BACKENDS.keys())
