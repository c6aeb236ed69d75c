import logging
from collections import namedtuple
from enum import Enum
from numbers import Integral, Real as RealNumber
from operator import index

import numpy as np
from sympy import Matrix

# Split-complex (perplex, hyperbolic) numbers t + xh with h*h = 1, the four sectors of their plane,
# the Klein group {1, h, -1, -h} moving values between sectors and the hyperbolic polar form.

# Components are numpy floating scalars. Whatever precision the caller picks is carried through every
# operation, so float32 values stay float32 and Klein elements are built in the precision of the value.

# Functions known in closed form only on the Right sector (t > |x|) are lifted to the whole plane by
# mapping a value to Right with its Klein element, evaluating there and mapping back with the same element.

logger = logging.getLogger(__name__)

class PerplexError(ArithmeticError): pass
class NotInvertible(PerplexError, ZeroDivisionError): pass
class DomainError(PerplexError, ValueError): pass

class Real(object):
    # numpy ufuncs return the dtype they are given
    abs, sqrt, exp, ln = np.abs, np.sqrt, np.exp, np.log
    sin, cos, sinh, cosh = np.sin, np.cos, np.sinh, np.cosh
    tanh, atanh = np.tanh, np.arctanh
    isnan, isinf, isfinite = np.isnan, np.isinf, np.isfinite
    @staticmethod
    def dtype_of(*values):
        typed = [value for value in values if isinstance(value, np.floating)]
        if not typed: return np.dtype(np.float64)
        return np.result_type(*typed)
    @staticmethod
    def coerce(value, dtype=None):
        if isinstance(value, (complex, np.complexfloating)):
            raise TypeError("Perplex components must be real, got %r" % (value,))
        if dtype is None: dtype = Real.dtype_of(value)
        dtype = np.dtype(dtype)
        if dtype.kind != 'f': raise ValueError("Perplex components need a floating dtype, got %s" % dtype)
        return dtype.type(value)
    @staticmethod
    def zero(like): return type(like)(0)
    @staticmethod
    def epsilon(like): return np.finfo(type(like)).eps
    @staticmethod
    def is_normal(value):
        return bool(np.isfinite(value)) and abs(value) >= np.finfo(type(value)).tiny

def _is_real(value):
    return isinstance(value, RealNumber)

def _perplex(value):
    if isinstance(value, Perplex): return value
    return Perplex(value)

class Sector(Enum):
    RIGHT = 'Right'
    UP = 'Up'
    LEFT = 'Left'
    DOWN = 'Down'
    @property
    def light_like(sector): return False
    @property
    def time_like(sector): return sector in (Sector.RIGHT, Sector.LEFT)

class Diagonal(namedtuple('Diagonal', 't')):
    # light-like marker, keeps t so the value can be rebuilt from its polar form
    __slots__ = ()
    light_like = True
    time_like = False

class Perplex(object):
    __slots__ = ('t', 'x')
    _epsilon = None
    _precision = 2
    def __init__(px, *args, dtype=None):
        if len(args) == 1:
            arg = args[0]
            if isinstance(arg, Perplex):
                args = arg.t, arg.x
            elif getattr(arg, 'is_Matrix', 0) or np.ndim(arg) == 2:
                args = Perplex.from_matrix(arg, dtype).elements()
            elif np.ndim(arg) == 1:
                args = tuple(arg)
            else:
                args = arg, 0
        elif not args:
            args = 0, 0
        if len(args) != 2: raise ValueError("Incorrect number of arguments: %d" % len(args))
        t, x = args
        if dtype is None: dtype = Real.dtype_of(t, x)
        object.__setattr__(px, 't', Real.coerce(t, dtype))
        object.__setattr__(px, 'x', Real.coerce(x, dtype))
    def __setattr__(px, name, value):
        raise AttributeError("Perplex values are immutable")
    def __delattr__(px, name):
        raise AttributeError("Perplex values are immutable")
    def __reduce__(px):
        return type(px), (px.t, px.x)

    @classmethod
    def zero(cls, dtype=np.float64): return cls(0, 0, dtype=dtype)
    @classmethod
    def one(cls, dtype=np.float64): return cls(1, 0, dtype=dtype)
    @classmethod
    def h(cls, dtype=np.float64): return cls(0, 1, dtype=dtype)
    @classmethod
    def from_real(cls, t, dtype=None): return cls(t, 0, dtype=dtype)
    @classmethod
    def cis(cls, theta):
        # cosh(theta) + h sinh(theta), the point of the unit hyperbola at hyperbolic angle theta
        theta = Real.coerce(theta)
        return cls(Real.cosh(theta), Real.sinh(theta))
    @classmethod
    def from_matrix(cls, m, dtype=None):
        if getattr(m, 'is_Matrix', 0):
            if m.shape != (2, 2): raise ValueError("Mismatched matrix dimension")
            return cls(float(m[0, 0]), float(m[0, 1]), dtype=dtype)
        m = np.asarray(m)
        if m.shape != (2, 2): raise ValueError("Mismatched matrix dimension")
        return cls(m[0, 0], m[0, 1], dtype=dtype)

    @property
    def dtype(px): return px.t.dtype
    def real(px): return px.t
    def hyperbolic(px): return px.x
    def elements(px): return [px.t, px.x]
    def __iter__(px): return iter((px.t, px.x))
    def as_matrix(px):
        t, x = float(px.t), float(px.x)
        return Matrix([[t, x], [x, t]])
    def as_array(px):
        return np.array([[px.t, px.x], [px.x, px.t]], dtype=px.dtype)

    def _scalar(px, value):
        if isinstance(value, np.floating): return value
        return Real.coerce(value, px.dtype)
    def squared_distance(px):
        return px.t * px.t - px.x * px.x
    def modulus(px):
        return Real.sqrt(Real.abs(px.squared_distance()))
    def norm(px): return px.modulus()
    def magnitude(px): return px.modulus()
    def l1_norm(px): return Real.abs(px.t) + Real.abs(px.x)
    def l2_norm(px): return Real.sqrt(px.t * px.t + px.x * px.x)
    def max_norm(px): return max(Real.abs(px.t), Real.abs(px.x))
    def is_time_like(px): return bool(px.squared_distance() > 0)
    def is_space_like(px): return bool(px.squared_distance() < 0)
    def is_light_like(px): return bool(px.squared_distance() == 0)
    def conjugate(px):
        return Perplex(px.t, -px.x)
    def scale(px, factor):
        factor = px._scalar(factor)
        return Perplex(factor * px.t, factor * px.x)
    def inverse(px):
        plus, minus = px.t + px.x, px.t - px.x
        if not (plus and minus):
            logger.debug("no inverse for light-like %r", px)
            raise NotInvertible("Domain error: %s is light-like and has no inverse." % px)
        return _idempotent_map(plus, minus, lambda value: 1 / value)
    def mul_add(px, other, add):
        other, add = _perplex(other), _perplex(add)
        return Perplex(px.t * other.t + px.x * other.x + add.t, other.t * px.x + px.t * other.x + add.x)

    def is_zero(px): return bool(px.t == 0 and px.x == 0)
    def is_one(px): return bool(px.t == 1 and px.x == 0)
    def is_nan(px): return bool(Real.isnan(px.t) or Real.isnan(px.x))
    def is_infinite(px): return not px.is_nan() and bool(Real.isinf(px.t) or Real.isinf(px.x))
    def is_finite(px): return bool(Real.isfinite(px.t) and Real.isfinite(px.x))
    def is_normal(px): return Real.is_normal(px.t) and Real.is_normal(px.x)

    def sector(px): return classify(px)
    def klein(px): return klein_element_to_right(classify(px), px.dtype)
    def arg(px):
        t, x = px
        tabs, xabs = Real.abs(t), Real.abs(x)
        if tabs == xabs:
            # zero takes the angle of the identity; the diagonals x = t and x = -t map to +inf and -inf
            if not t: return Real.zero(t)
            return type(t)(np.inf) if t == x else type(t)(-np.inf)
        if tabs > xabs: return Real.atanh(x / t)
        return Real.atanh(t / x)
    def polar(px): return to_polar(px)

    def exp(px): return exp(px)
    def ln(px): return ln(px)
    def log(px, base=10): return log(px, base)
    def sqrt(px): return sqrt(px)
    def sin(px): return sin(px)
    def cos(px): return cos(px)
    def tan(px): return tan(px)
    def sinh(px): return sinh(px)
    def cosh(px): return cosh(px)
    def tanh(px): return tanh(px)
    def powu(px, n): return powu(px, n)
    def powi(px, n): return powi(px, n)
    def powf(px, p): return powf(px, p)

    def approx_eq(px1, px2, epsilon=None):
        px2 = _perplex(px2)
        if epsilon is None: epsilon = Perplex._epsilon
        if epsilon is None: epsilon = max(Real.epsilon(px1.t), Real.epsilon(px2.t))
        return bool(Real.abs(px1.t - px2.t) <= epsilon and Real.abs(px1.x - px2.x) <= epsilon)
    @staticmethod
    def settings(**kwargs):
        if kwargs.get('save'):
            save = {'epsilon':Perplex._epsilon, 'precision':Perplex._precision}
            if not hasattr(Perplex, '_saved'): Perplex._saved = []
            Perplex._saved.append(save)
            return
        if kwargs.get('restore'):
            if not hasattr(Perplex, '_saved'): raise AttributeError("No prior saved state to restore")
            restore = Perplex._saved.pop()
            if not Perplex._saved: del Perplex._saved
            Perplex._epsilon = restore['epsilon']
            Perplex._precision = restore['precision']
            return
        if kwargs.keys()-('epsilon','precision'): raise AttributeError('arg!=epsilon|precision')
        if 'epsilon' in kwargs:
            val = kwargs['epsilon']
            if val is not None and not (_is_real(val) and val >= 0):
                raise ValueError("epsilon!=None|non-negative number")
            Perplex._epsilon = val
        if 'precision' in kwargs:
            val = kwargs['precision']
            if isinstance(val, bool) or not isinstance(val, Integral) or val < 0:
                raise ValueError("precision!=non-negative integer")
            Perplex._precision = int(val)

    def __format__(px, spec):
        if not spec: spec = '.%df' % Perplex._precision
        sign = px.x < 0 and '-' or '+'
        return '%s %s %s h' % (format(float(px.t), spec), sign, format(float(abs(px.x)), spec))
    def __str__(px):
        return format(px, '')
    def __repr__(px):
        if px.dtype == np.float64: return 'Perplex(%r, %r)' % (float(px.t), float(px.x))
        return 'Perplex(%r, %r, dtype=%s)' % (float(px.t), float(px.x), px.dtype)

    def __add__(px, value):
        if isinstance(value, Perplex): return Perplex(px.t + value.t, px.x + value.x)
        if _is_real(value): return Perplex(px.t + px._scalar(value), px.x)
        return NotImplemented
    def __radd__(px, scalar):
        return px + scalar
    def __sub__(px, value):
        if isinstance(value, Perplex): return Perplex(px.t - value.t, px.x - value.x)
        if _is_real(value): return Perplex(px.t - px._scalar(value), px.x)
        return NotImplemented
    def __rsub__(px, scalar):
        return -px + scalar
    def __mul__(px1, px2):
        if isinstance(px2, Perplex):
            return Perplex(px1.t * px2.t + px1.x * px2.x, px1.t * px2.x + px2.t * px1.x)
        if _is_real(px2): return px1.scale(px2)
        return NotImplemented
    def __rmul__(px, scalar):
        return px * scalar
    def __truediv__(px1, px2):
        if isinstance(px2, Perplex):
            plus, minus = px2.t + px2.x, px2.t - px2.x
            if not (plus and minus):
                logger.debug("division by light-like %r", px2)
                raise NotInvertible("Domain error: division by light-like %s." % px2)
            return _from_idempotent((px1.t + px1.x) / plus, (px1.t - px1.x) / minus)
        if _is_real(px2):
            scalar = px1._scalar(px2)
            return Perplex(px1.t / scalar, px1.x / scalar)
        return NotImplemented
    def __rtruediv__(px, scalar):
        if not _is_real(scalar): return NotImplemented
        return px.inverse() * scalar
    def __invert__(px):
        return px.inverse()
    def __pow__(px, p):
        if isinstance(p, Integral): return powi(px, p)
        if _is_real(p): return powf(px, p)
        return NotImplemented
    def __neg__(px):
        return Perplex(-px.t, -px.x)
    def __pos__(px):
        return px
    def __abs__(px):
        return px.modulus()
    def __eq__(px1, px2):
        if isinstance(px2, Perplex): return bool(px1.t == px2.t and px1.x == px2.x)
        if _is_real(px2): return bool(px1.x == 0 and px1.t == px2)
        return NotImplemented
    def __hash__(px):
        if px.x == 0: return hash(px.t)
        return hash((px.t, px.x))
    def __bool__(px):
        return not px.is_zero()
SplitComplex = HyperbolicNumber = Perplex

def classify(px):
    t, x = _perplex(px)
    tabs, xabs = Real.abs(t), Real.abs(x)
    if tabs == xabs: return Diagonal(t)
    if tabs > xabs: return t > 0 and Sector.RIGHT or Sector.LEFT
    return x > 0 and Sector.UP or Sector.DOWN

_klein_elements = {Sector.RIGHT: (1, 0), Sector.UP: (0, 1), Sector.LEFT: (-1, 0), Sector.DOWN: (0, -1)}

def klein_element_to_right(sector, dtype=np.float64):
    if getattr(sector, 'light_like', False):
        raise DomainError("Domain error: light-like values lie on no sector and have no Klein element.")
    return Perplex(*_klein_elements[Sector(sector)], dtype=dtype)

def apply_klein(element, px):
    # every Klein element is its own inverse, applying it twice is the identity
    return element * px

def extend_to_plane(f_right, px, light_like=None):
    # f_right is valid on Right only: move there with the Klein element k, apply, move back with k.
    # Light-like values lie in no sector and go to light_like, when given.
    px = _perplex(px)
    sector = classify(px)
    if sector.light_like:
        if light_like is not None: return light_like(px)
        name = getattr(f_right, '__name__', repr(f_right))
        logger.debug("%s has no value on light-like %r", name, px)
        raise DomainError("Domain error: %s is light-like." % px)
    klein = klein_element_to_right(sector, px.dtype)
    return apply_klein(klein, f_right(apply_klein(klein, px)))

class HyperbolicPolar(namedtuple('HyperbolicPolar', 'rho theta sector')):
    __slots__ = ()
    @classmethod
    def default(cls, dtype=np.float64):
        one = Real.coerce(1, dtype)
        return cls(one, Real.zero(one), Sector.RIGHT)
    def perplex(polar):
        return from_polar(*polar)
    def powu(polar, n):
        n = index(n)
        if n < 0: raise ValueError("Negative exponent: %d" % n)
        if n == 0: return type(polar).default(Real.dtype_of(polar.rho))
        if n == 1: return polar
        rho, theta, sector = polar
        if sector.light_like:
            # (t +- th)^n = 2^(n-1) t^n (1 +- h)
            t = sector.t
            return type(polar)(rho, theta, Diagonal(t * (t + t) ** (n - 1)))
        # k^2 = 1 for every Klein element, so even powers land on Right
        return type(polar)(rho ** n, n * theta, n % 2 and sector or Sector.RIGHT)
    def __pow__(polar, n):
        return polar.powu(n)

def to_polar(px):
    px = _perplex(px)
    sector = classify(px)
    if px.is_zero(): sector = Sector.RIGHT
    return HyperbolicPolar(px.modulus(), px.arg(), sector)

def from_polar(rho, theta, sector):
    if getattr(sector, 'light_like', False):
        t = Real.coerce(sector.t, Real.dtype_of(rho, theta, sector.t))
        if theta == np.inf: return Perplex(t, t)
        return Perplex(t, -t)
    dtype = Real.dtype_of(rho, theta)
    rho, theta = Real.coerce(rho, dtype), Real.coerce(theta, dtype)
    return apply_klein(klein_element_to_right(sector, dtype), Perplex.cis(theta).scale(rho))

def inverse(px): return _perplex(px).inverse()

def _exp_right(px):
    t, x = px
    et = Real.exp(t)
    return Perplex(et * Real.cosh(x), et * Real.sinh(x))
def exp(px):
    return extend_to_plane(_exp_right, px, light_like=_exp_right)

def _ln_right(px):
    t, x = px
    # ln D / 2 with D = (t+x)(t-x), both factors positive on Right
    return Perplex((Real.ln(t + x) + Real.ln(t - x)) / 2, Real.atanh(x / t))
def ln(px):
    return extend_to_plane(_ln_right, px)

def log(px, base=10):
    base = Real.coerce(base, _perplex(px).dtype)
    if not base > 0 or base == 1: raise DomainError("Domain error: log base %s not defined." % base)
    return ln(px) / Real.ln(base)

def _right_closure(px, name):
    plus, minus = px.t + px.x, px.t - px.x
    if not (plus >= 0 and minus >= 0):
        logger.debug("%s outside the closed Right sector: %r", name, px)
        raise DomainError("Domain error: %s(%s) is only defined for t >= |x|." % (name, px))
    return plus, minus

def _from_idempotent(plus, minus):
    # t + xh = (t+x) e + (t-x) e' with e, e' = (1 +- h)/2
    return Perplex((plus + minus) / 2, (plus - minus) / 2)

def _idempotent_map(plus, minus, func):
    # analytic functions act on t+x and t-x separately
    return _from_idempotent(func(plus), func(minus))

def sqrt(px):
    plus, minus = _right_closure(_perplex(px), 'sqrt')
    return _idempotent_map(plus, minus, Real.sqrt)

def powu(px, n):
    px = _perplex(px)
    n = index(n)
    if n < 0: raise ValueError("Negative exponent: %d" % n)
    if n == 0: return Perplex.one(px.dtype)
    # seeded from the lowest set bit, the identity never enters a product
    result, base = None, px
    while True:
        if n % 2: result = base if result is None else result * base
        n //= 2
        if not n: return result
        base = base * base

def powi(px, n):
    px = _perplex(px)
    n = index(n)
    if n < 0: return powu(px.inverse(), -n)
    return powu(px, n)

def powf(px, p):
    px = _perplex(px)
    if isinstance(p, Integral): return powi(px, p)
    p = Real.coerce(p, px.dtype)
    if Real.isfinite(p) and float(p).is_integer(): return powi(px, int(p))
    plus, minus = _right_closure(px, 'powf')
    if p < 0 and not (plus and minus):
        logger.debug("negative power of light-like %r", px)
        raise NotInvertible("Domain error: %s is light-like, negative powers not defined." % px)
    return _idempotent_map(plus, minus, lambda value: value ** p)

def sinh(px):
    t, x = _perplex(px)
    return Perplex(Real.sinh(t) * Real.cosh(x), Real.cosh(t) * Real.sinh(x))
def cosh(px):
    t, x = _perplex(px)
    return Perplex(Real.cosh(t) * Real.cosh(x), Real.sinh(t) * Real.sinh(x))
def tanh(px):
    px = _perplex(px)
    return _idempotent_map(px.t + px.x, px.t - px.x, Real.tanh)

def sin(px):
    t, x = _perplex(px)
    return Perplex(Real.sin(t) * Real.cos(x), Real.cos(t) * Real.sin(x))
def cos(px):
    t, x = _perplex(px)
    return Perplex(Real.cos(t) * Real.cos(x), -Real.sin(t) * Real.sin(x))
def tan(px):
    try: return sin(px) / cos(px)
    except NotInvertible as err:
        raise DomainError("Domain error: tan(%s) not defined, cos is light-like." % _perplex(px)) from err
