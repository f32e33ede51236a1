"""Amount-based base fee.

Notation: reference_amount = x0, cliff_fee_numerator = c, fee increment
numerator = i.

If input_amount <= x0 the fee rate is c. Otherwise write
input_amount = x0 + (a * x0 + b). Every further x0 of volume is charged
i more than the previous one:

    a < max_index:
        fee = x0 * (c + c*a + i*a*(a+1)/2) + b * (c + i*(a+1))

    a >= max_index (a = max_index + d):
        fee = x0 * (c + c*max_index + i*max_index*(max_index+1)/2)
              + (d * x0 + b) * MAX_FEE_NUMERATOR

Only quote-to-base trades inside the limiter window are affected. Outside
it the limiter charges the flat cliff fee.
"""

from __future__ import annotations

from dataclasses import dataclass

from bonding_curve.activation import ActivationType
from bonding_curve.constants import (
    FEE_DENOMINATOR,
    MAX_FEE_NUMERATOR,
    MAX_RATE_LIMITER_DURATION_IN_SECONDS,
    MAX_RATE_LIMITER_DURATION_IN_SLOTS,
    MIN_FEE_NUMERATOR,
    U64_MAX,
)
from bonding_curve.enums import CollectFeeMode, TradeDirection
from bonding_curve.errors import InvalidFeeRateLimiter, MathOverflow, RateLimiterUndetermined
from bonding_curve.math.fee_math import (
    get_excluded_fee_amount,
    get_included_fee_amount,
    to_numerator,
)
from bonding_curve.math.fixed_point import Rounding, safe_mul_div_cast_u64, sqrt_u256
from bonding_curve.safe_int import S


@dataclass(frozen=True)
class FeeRateLimiter:
    """Fee that grows with the traded amount during the launch window.

    Attributes:
        cliff_fee_numerator: Flat fee up to reference_amount
        fee_increment_bps: Extra fee per additional reference_amount
        max_limiter_duration: Points after activation the limiter stays on
        reference_amount: Volume step x0
    """

    cliff_fee_numerator: int
    fee_increment_bps: int = 0
    max_limiter_duration: int = 0
    reference_amount: int = 0

    def is_zero_rate_limiter(self) -> bool:
        return (
            self.reference_amount == 0
            and self.max_limiter_duration == 0
            and self.fee_increment_bps == 0
        )

    def is_non_zero_rate_limiter(self) -> bool:
        return (
            self.reference_amount != 0
            and self.max_limiter_duration != 0
            and self.fee_increment_bps != 0
        )

    def is_rate_limiter_applied(
        self,
        current_point: int,
        activation_point: int,
        trade_direction: TradeDirection,
    ) -> bool:
        if self.is_zero_rate_limiter():
            return False

        # Selling base is never rate limited
        if trade_direction == TradeDirection.BASE_TO_QUOTE:
            return False

        last_effective_point = activation_point + self.max_limiter_duration
        return current_point <= last_effective_point

    def _fee_increment_numerator(self) -> int:
        return to_numerator(self.fee_increment_bps, FEE_DENOMINATOR)

    def get_max_index(self) -> int:
        delta_numerator = S(MAX_FEE_NUMERATOR) - self.cliff_fee_numerator
        return (delta_numerator // self._fee_increment_numerator()).value

    # =========================================================================
    # Forward: included amount -> fee numerator
    # =========================================================================

    def _get_trading_fee(self, input_amount: int) -> int:
        """Total fee owed on input_amount, rounded up, for input_amount > x0."""
        c = self.cliff_fee_numerator
        x0 = self.reference_amount
        i = self._fee_increment_numerator()
        max_index = self.get_max_index()
        a, b = divmod(input_amount - x0, x0)

        if a < max_index:
            numerator_1 = c + c * a + i * a * (a + 1) // 2
            numerator_2 = c + i * (a + 1)
            trading_fee_numerator = x0 * numerator_1 + b * numerator_2
        else:
            numerator_1 = c + c * max_index + i * max_index * (max_index + 1) // 2
            d = a - max_index
            left_amount = d * x0 + b
            trading_fee_numerator = x0 * numerator_1 + left_amount * MAX_FEE_NUMERATOR

        return S(trading_fee_numerator).ceiling_div(FEE_DENOMINATOR).to_u64()

    def get_fee_numerator_from_included_fee_amount(self, input_amount: int) -> int:
        """Effective fee numerator charged on input_amount."""
        if input_amount <= self.reference_amount:
            return self.cliff_fee_numerator

        trading_fee = self._get_trading_fee(input_amount)
        # input_amount * numerator / FEE_DENOMINATOR = trading_fee
        return safe_mul_div_cast_u64(trading_fee, FEE_DENOMINATOR, input_amount, Rounding.UP)

    def _get_excluded_fee_amount(self, included_fee_amount: int) -> int:
        numerator = self.get_fee_numerator_from_included_fee_amount(included_fee_amount)
        excluded_fee_amount, _ = get_excluded_fee_amount(numerator, included_fee_amount)
        return excluded_fee_amount

    # =========================================================================
    # Inverse: excluded amount -> included amount
    # =========================================================================

    def get_included_fee_amount(self, excluded_fee_amount: int) -> int:
        """Included amount whose post-fee amount covers excluded_fee_amount.

        The closed form below is solved against the exact fee. The charged fee
        goes through a rounded-up numerator, so the estimate can fall a little
        short and is stepped up at the marginal rate until it covers.
        """
        included_fee_amount = self._estimate_included_fee_amount(excluded_fee_amount)
        excluded_after_fee = self._get_excluded_fee_amount(included_fee_amount)
        while excluded_after_fee < excluded_fee_amount:
            marginal_numerator = self._get_marginal_fee_numerator(included_fee_amount)
            step, _ = get_included_fee_amount(
                marginal_numerator, excluded_fee_amount - excluded_after_fee
            )
            included_fee_amount = (S(included_fee_amount) + step).to_u64()
            excluded_after_fee = self._get_excluded_fee_amount(included_fee_amount)
        return included_fee_amount

    def _get_marginal_fee_numerator(self, input_amount: int) -> int:
        """Fee numerator charged on the next unit after input_amount."""
        x0 = self.reference_amount
        if input_amount < x0:
            return self.cliff_fee_numerator
        a = (input_amount - x0) // x0
        if a < self.get_max_index():
            return self.cliff_fee_numerator + self._fee_increment_numerator() * (a + 1)
        return MAX_FEE_NUMERATOR

    def _estimate_included_fee_amount(self, excluded_fee_amount: int) -> int:
        """Closed-form inverse of the exact fee.

        Past x0 the fee is quadratic in the included amount I:

            i*I^2 - y*I + z = 0
            y = 2*DEN*x0 + i*x0 - 2*c*x0
            z = 2*excluded*DEN*x0

        The smaller root is the one on the increasing branch of the
        excluded-amount curve. Whole multiples of x0 are taken from the root
        and the remainder is grossed up at that segment's rate. Beyond the
        last fee step the tail is grossed up at MAX_FEE_NUMERATOR.
        """
        c = self.cliff_fee_numerator
        x0 = self.reference_amount

        excluded_at_reference = self._get_excluded_fee_amount(x0)
        if excluded_fee_amount <= excluded_at_reference:
            included_fee_amount, _ = get_included_fee_amount(c, excluded_fee_amount)
            return included_fee_amount

        max_index = self.get_max_index()
        checked_included = (max_index + 1) * x0
        overflow = checked_included > U64_MAX
        if overflow:
            checked_included = U64_MAX
        checked_excluded = self._get_excluded_fee_amount(checked_included)

        if excluded_fee_amount < checked_excluded:
            i = self._fee_increment_numerator()
            den = FEE_DENOMINATOR
            y = 2 * den * x0 + i * x0 - 2 * c * x0
            z = 2 * excluded_fee_amount * den * x0
            discriminant = S(y * y) - 4 * i * z
            root = (S(y) - sqrt_u256(discriminant.value)) // (2 * i)

            k = max((root // x0).value, 1)
            # floor(sqrt) can push the root just past a step boundary
            while k > 1 and self._get_excluded_fee_amount(k * x0) > excluded_fee_amount:
                k -= 1

            first_included = k * x0
            remaining_excluded = S(excluded_fee_amount) - self._get_excluded_fee_amount(
                first_included
            )
            segment_numerator = c + i * k
            remaining_included, _ = get_included_fee_amount(
                segment_numerator, remaining_excluded.value
            )
            return (S(first_included) + remaining_included).to_u64()

        if overflow:
            raise MathOverflow(f"Excluded amount {excluded_fee_amount} beyond the u64 fee range")

        remaining_excluded = S(excluded_fee_amount) - checked_excluded
        remaining_included, _ = get_included_fee_amount(MAX_FEE_NUMERATOR, remaining_excluded.value)
        return (S(checked_included) + remaining_included).to_u64()

    def get_fee_numerator_from_excluded_fee_amount(self, excluded_fee_amount: int) -> int:
        """Fee numerator of the included amount recovered from excluded_fee_amount.

        Raises:
            RateLimiterUndetermined: If the recovered numerator is below the cliff
        """
        included_fee_amount = self.get_included_fee_amount(excluded_fee_amount)
        fee_numerator = self.get_fee_numerator_from_included_fee_amount(included_fee_amount)
        if fee_numerator < self.cliff_fee_numerator:
            raise RateLimiterUndetermined(
                f"Recovered numerator {fee_numerator} below cliff {self.cliff_fee_numerator}"
            )
        return fee_numerator

    # =========================================================================
    # Base fee interface
    # =========================================================================

    def validate(self, collect_fee_mode: int, activation_type: int) -> None:
        """Check the limiter is usable for this pool.

        Raises:
            InvalidCollectFeeMode: If collect_fee_mode is unknown
            InvalidFeeRateLimiter: If any limiter parameter is out of range
        """
        if CollectFeeMode.parse(collect_fee_mode) is not CollectFeeMode.QUOTE_TOKEN:
            raise InvalidFeeRateLimiter("Rate limiter requires quote token fee collection")

        if self.is_zero_rate_limiter():
            return

        if not self.is_non_zero_rate_limiter():
            raise InvalidFeeRateLimiter("Rate limiter factors must be all zero or all nonzero")

        if ActivationType.parse(activation_type) is ActivationType.SLOT:
            max_duration = MAX_RATE_LIMITER_DURATION_IN_SLOTS
        else:
            max_duration = MAX_RATE_LIMITER_DURATION_IN_SECONDS
        if self.max_limiter_duration > max_duration:
            raise InvalidFeeRateLimiter(
                f"Limiter duration {self.max_limiter_duration} exceeds {max_duration}"
            )

        if self._fee_increment_numerator() >= FEE_DENOMINATOR:
            raise InvalidFeeRateLimiter(f"Fee increment too large: {self.fee_increment_bps} bps")

        if not MIN_FEE_NUMERATOR <= self.cliff_fee_numerator <= MAX_FEE_NUMERATOR:
            raise InvalidFeeRateLimiter(f"Cliff fee out of range: {self.cliff_fee_numerator}")

        min_fee_numerator = self.get_fee_numerator_from_included_fee_amount(0)
        max_fee_numerator = self.get_fee_numerator_from_included_fee_amount(U64_MAX)
        if min_fee_numerator < MIN_FEE_NUMERATOR or max_fee_numerator > MAX_FEE_NUMERATOR:
            raise InvalidFeeRateLimiter(
                f"Limiter fee range [{min_fee_numerator}, {max_fee_numerator}] out of bounds"
            )

    def get_base_fee_numerator_from_included_fee_amount(
        self,
        current_point: int,
        activation_point: int,
        trade_direction: TradeDirection,
        included_fee_amount: int,
    ) -> int:
        if self.is_rate_limiter_applied(current_point, activation_point, trade_direction):
            return self.get_fee_numerator_from_included_fee_amount(included_fee_amount)
        return self.cliff_fee_numerator

    def get_base_fee_numerator_from_excluded_fee_amount(
        self,
        current_point: int,
        activation_point: int,
        trade_direction: TradeDirection,
        excluded_fee_amount: int,
    ) -> int:
        if self.is_rate_limiter_applied(current_point, activation_point, trade_direction):
            return self.get_fee_numerator_from_excluded_fee_amount(excluded_fee_amount)
        return self.cliff_fee_numerator
