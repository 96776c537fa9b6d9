"""Fixed-width 256-bit integers with wrapping and overflow-reporting arithmetic."""

from __future__ import annotations

import functools
from typing import Optional, Tuple, Union

_BITS = 256
_MODULUS = 1 << _BITS
_MASK = _MODULUS - 1
_U64_MASK = (1 << 64) - 1
_U128_MASK = (1 << 128) - 1
_U32_MAX = (1 << 32) - 1
_I256_MIN = -(1 << 255)
_I256_MAX = (1 << 255) - 1


def _check_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an int, got {type(value).__name__}")
    return value


@functools.total_ordering
class U256:
    """An unsigned 256-bit integer; ordinary operators wrap on overflow."""

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        value = _check_int(value)
        if not 0 <= value <= _MASK:
            raise ValueError(f"value out of range for U256: {value}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    @classmethod
    def zero(cls) -> "U256":
        return cls(0)

    @classmethod
    def one(cls) -> "U256":
        return cls(1)

    @classmethod
    def from_u128(cls, value: int) -> "U256":
        value = _check_int(value)
        if not 0 <= value <= _U128_MASK:
            raise ValueError(f"value out of range for u128: {value}")
        return cls(value)

    @classmethod
    def from_big_endian(cls, data: bytes) -> "U256":
        """Build from up to 32 big-endian bytes, left-padded with zeros."""
        data = bytes(data)
        if len(data) > 32:
            raise ValueError(f"at most 32 bytes expected, got {len(data)}")
        return cls(int.from_bytes(data, "big"))

    def to_big_endian(self) -> bytes:
        return self._value.to_bytes(32, "big")

    def as_u64(self) -> int:
        return self._value & _U64_MASK

    def as_u128(self) -> int:
        return self._value & _U128_MASK

    def as_u8(self) -> int:
        return self._value & 0xFF

    def is_zero(self) -> bool:
        return self._value == 0

    def overflowing_add(self, other: "U256") -> Tuple["U256", bool]:
        total = self._value + other._value
        return U256(total & _MASK), total > _MASK

    def overflowing_sub(self, other: "U256") -> Tuple["U256", bool]:
        diff = self._value - other._value
        return U256(diff & _MASK), diff < 0

    def overflowing_mul(self, other: "U256") -> Tuple["U256", bool]:
        product = self._value * other._value
        return U256(product & _MASK), product > _MASK

    def overflowing_pow(self, exp: int) -> Tuple["U256", bool]:
        """Square-and-multiply; the flag also records overflow while squaring the base."""
        exp = _check_int(exp)
        if not 0 <= exp <= _U32_MAX:
            raise ValueError(f"exponent out of range for u32: {exp}")
        if exp == 0:
            return U256.one(), False

        result = U256.one()
        base = self
        overflow = False
        while exp > 0:
            if exp % 2 == 1:
                result, flag = result.overflowing_mul(base)
                overflow |= flag
            base, flag = base.overflowing_mul(base)
            overflow |= flag
            exp //= 2
        return result, overflow

    def overflowing_pow_u256(self, exp: "U256") -> Tuple["U256", bool]:
        """Raise to a U256 power; exponents are clamped to the u32 range."""
        if exp.is_zero():
            return U256.one(), False
        return self.overflowing_pow(min(exp.as_u64(), _U32_MAX))

    def saturating_add(self, other: "U256") -> "U256":
        result, overflow = self.overflowing_add(other)
        return U256(_MASK) if overflow else result

    def saturating_sub(self, other: "U256") -> "U256":
        result, overflow = self.overflowing_sub(other)
        return U256.zero() if overflow else result

    def wrapping_add(self, other: "U256") -> "U256":
        return self.overflowing_add(other)[0]

    def wrapping_sub(self, other: "U256") -> "U256":
        return self.overflowing_sub(other)[0]

    def wrapping_mul(self, other: "U256") -> "U256":
        return self.overflowing_mul(other)[0]

    def leading_zeros(self) -> int:
        return _BITS - self._value.bit_length()

    # Operators

    def __add__(self, other: object) -> "U256":
        if not isinstance(other, U256):
            return NotImplemented
        return self.wrapping_add(other)

    def __sub__(self, other: object) -> "U256":
        if not isinstance(other, U256):
            return NotImplemented
        return self.wrapping_sub(other)

    def __mul__(self, other: object) -> "U256":
        if not isinstance(other, U256):
            return NotImplemented
        return self.wrapping_mul(other)

    def __floordiv__(self, other: object) -> "U256":
        """Integer division; dividing by zero yields zero."""
        if not isinstance(other, U256):
            return NotImplemented
        if other.is_zero():
            return U256.zero()
        return U256(self._value // other._value)

    def __mod__(self, other: object) -> "U256":
        """Remainder; a zero divisor yields zero."""
        if not isinstance(other, U256):
            return NotImplemented
        if other.is_zero():
            return U256.zero()
        return U256(self._value % other._value)

    def __and__(self, other: object) -> "U256":
        if not isinstance(other, U256):
            return NotImplemented
        return U256(self._value & other._value)

    def __or__(self, other: object) -> "U256":
        if not isinstance(other, U256):
            return NotImplemented
        return U256(self._value | other._value)

    def __xor__(self, other: object) -> "U256":
        if not isinstance(other, U256):
            return NotImplemented
        return U256(self._value ^ other._value)

    def __invert__(self) -> "U256":
        return U256(self._value ^ _MASK)

    @staticmethod
    def _shift_amount(shift: Union[int, "U256"]) -> int:
        if isinstance(shift, U256):
            return shift.as_u64()
        shift = _check_int(shift)
        if shift < 0:
            raise ValueError(f"negative shift amount: {shift}")
        return shift

    def __lshift__(self, shift: Union[int, "U256"]) -> "U256":
        amount = self._shift_amount(shift)
        if amount >= _BITS:
            return U256.zero()
        return U256((self._value << amount) & _MASK)

    def __rshift__(self, shift: Union[int, "U256"]) -> "U256":
        amount = self._shift_amount(shift)
        if amount >= _BITS:
            return U256.zero()
        return U256(self._value >> amount)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, U256):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, U256):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(("U256", self._value))

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __repr__(self) -> str:
        return f"U256({self._value})"

    def __str__(self) -> str:
        return str(self._value)


class I256:
    """A signed 256-bit integer in two's-complement range."""

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        value = _check_int(value)
        if not _I256_MIN <= value <= _I256_MAX:
            raise ValueError(f"value out of range for I256: {value}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    @classmethod
    def zero(cls) -> "I256":
        return cls(0)

    def is_positive(self) -> bool:
        return self._value > 0

    def is_negative(self) -> bool:
        return self._value < 0

    def is_zero(self) -> bool:
        return self._value == 0

    def to_u256(self) -> Optional[U256]:
        """The value as a U256, or None when it is negative."""
        if self.is_negative():
            return None
        return U256(self._value)

    def __int__(self) -> int:
        return self._value

    def __abs__(self) -> int:
        return abs(self._value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, I256):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(("I256", self._value))

    def __repr__(self) -> str:
        return f"I256({self._value})"

    def __str__(self) -> str:
        return str(self._value)