"""Tests for config parameter parsing and cross-field validation."""

import pytest
from pydantic import ValidationError

from bonding_curve.constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from bonding_curve.enums import MigrationFeeOption
from bonding_curve.errors import (
    ExceedMaxFeeBps,
    InvalidActivationType,
    InvalidBaseFeeMode,
    InvalidCollectFeeMode,
    InvalidCreatorTradingFeePercentage,
    InvalidCurve,
    InvalidFeePercentage,
    InvalidMigrationFeeOption,
    InvalidMigrationOption,
    InvalidMigratorFeePercentage,
    InvalidQuoteThreshold,
    InvalidTokenDecimals,
    InvalidTokenType,
    InvalidVestingParameters,
)
from bonding_curve.models.params import ConfigParameters
from tests.helpers import LIQUIDITY, ONE, make_config_parameters, make_config_payload


def point(sqrt_price: int, liquidity: int = LIQUIDITY) -> dict:
    return {"sqrtPrice": str(sqrt_price), "liquidity": str(liquidity)}


class TestParsing:
    """Tests for field parsing and width checks."""

    def test_defaults(self):
        """The default payload parses with string amounts."""
        params = make_config_parameters()
        assert params.migration_quote_threshold == 1_000_000_000_000
        assert params.sqrt_start_price == ONE
        assert params.token_supply is None
        assert params.pool_fees.dynamic_fee is None

    def test_snake_case_names(self):
        """Fields can be populated by their Python names too."""
        params = make_config_parameters()
        rebuilt = ConfigParameters.model_validate(params.model_dump())
        assert rebuilt == params

    def test_camel_case_dump(self):
        """Dumping by alias serializes wide integers as strings."""
        dumped = make_config_parameters().model_dump(by_alias=True)
        assert dumped["migrationQuoteThreshold"] == "1000000000000"
        assert dumped["tokenDecimal"] == 6

    @pytest.mark.parametrize(
        "overrides",
        [
            {"tokenDecimal": 256},
            {"tokenDecimal": True},
            {"migrationQuoteThreshold": "-1"},
            {"migrationQuoteThreshold": "1e12"},
            {"migrationQuoteThreshold": str(1 << 64)},
            {"sqrtStartPrice": 1.5},
        ],
    )
    def test_out_of_width(self, overrides):
        """Values that do not fit their width are rejected by pydantic."""
        with pytest.raises(ValidationError):
            ConfigParameters.model_validate(make_config_payload(**overrides))


class TestValidateConfig:
    """Tests for ConfigParameters.validate_config."""

    def test_default_is_valid(self):
        """The default payload passes every rule."""
        make_config_parameters().validate_config()

    def test_spl_2022_with_concentrated_migration(self):
        """Token-2022 base is allowed when migrating to concentrated liquidity."""
        make_config_parameters(tokenType=1, migrationOption=1).validate_config()

    @pytest.mark.parametrize(
        ("overrides", "error"),
        [
            ({"collectFeeMode": 5}, InvalidCollectFeeMode),
            ({"migrationOption": 2}, InvalidMigrationOption),
            ({"tokenType": 1}, InvalidTokenType),
            ({"activationType": 2}, InvalidActivationType),
            ({"tokenDecimal": 5}, InvalidTokenDecimals),
            ({"tokenDecimal": 10}, InvalidTokenDecimals),
            ({"partnerLpPercentage": 40}, InvalidFeePercentage),
            ({"creatorLockedLpPercentage": 1}, InvalidFeePercentage),
            ({"creatorTradingFeePercentage": 101}, InvalidCreatorTradingFeePercentage),
            ({"migrationFee": {"feePercentage": 51}}, InvalidMigratorFeePercentage),
            (
                {"migrationFee": {"feePercentage": 10, "creatorFeePercentage": 101}},
                InvalidMigratorFeePercentage,
            ),
            ({"migrationQuoteThreshold": "0"}, InvalidQuoteThreshold),
            (
                {"lockedVesting": {"amountPerPeriod": "10", "numberOfPeriod": "1"}},
                InvalidVestingParameters,
            ),
            ({"lockedVesting": {"frequency": "1"}}, InvalidVestingParameters),
            ({"migrationFeeOption": 6}, InvalidMigrationFeeOption),
        ],
    )
    def test_rejected(self, overrides, error):
        """Each rule names its own error."""
        with pytest.raises(error):
            make_config_parameters(**overrides).validate_config()

    @pytest.mark.parametrize(
        ("cliff_fee_numerator", "error"),
        [
            (50_000, ExceedMaxFeeBps),
            (999_000_000, ExceedMaxFeeBps),
        ],
    )
    def test_base_fee_out_of_range(self, cliff_fee_numerator, error):
        """Flat fees outside [0.01%, 99%] are rejected."""
        with pytest.raises(error):
            make_config_parameters(cliff_fee_numerator=cliff_fee_numerator).validate_config()

    def test_unknown_base_fee_mode(self):
        """Unknown base fee modes are rejected."""
        base_fee = {"cliffFeeNumerator": "10000000", "baseFeeMode": 3}
        with pytest.raises(InvalidBaseFeeMode):
            make_config_parameters(base_fee=base_fee).validate_config()


class TestCurveValidation:
    """Tests for the curve shape rules."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"sqrtStartPrice": str(MAX_SQRT_PRICE)},
            {"sqrtStartPrice": str(MIN_SQRT_PRICE - 1)},
            {"curve": []},
            {"curve": [point(ONE * (i + 2)) for i in range(16)] + [point(MAX_SQRT_PRICE)]},
            # First point not above the start price
            {"curve": [point(ONE), point(MAX_SQRT_PRICE)]},
            {"curve": [point(MAX_SQRT_PRICE, 0)]},
            {"curve": [point(3 * ONE), point(2 * ONE), point(MAX_SQRT_PRICE)]},
            {"curve": [point(2 * ONE), point(MAX_SQRT_PRICE, 0)]},
            {"curve": [point(2 * ONE)]},
        ],
    )
    def test_rejected(self, overrides):
        """Malformed curves are rejected."""
        with pytest.raises(InvalidCurve):
            make_config_parameters(**overrides).validate_config()

    def test_max_points(self):
        """Sixteen points is the limit."""
        curve = [point(ONE * (i + 2)) for i in range(15)] + [point(MAX_SQRT_PRICE)]
        make_config_parameters(curve=curve).validate_config()


class TestMigrationFeeOption:
    """Tests for MigrationFeeOption."""

    @pytest.mark.parametrize(
        ("option", "bps"),
        [
            (MigrationFeeOption.FIXED_BPS_25, 25),
            (MigrationFeeOption.FIXED_BPS_30, 30),
            (MigrationFeeOption.FIXED_BPS_100, 100),
            (MigrationFeeOption.FIXED_BPS_200, 200),
            (MigrationFeeOption.FIXED_BPS_400, 400),
            (MigrationFeeOption.FIXED_BPS_600, 600),
        ],
    )
    def test_bps(self, option, bps):
        """Each option maps to its destination pool fee."""
        assert option.bps == bps
        option.validate_base_fee(bps)

    def test_mismatched_base_fee(self):
        """A destination fee that differs from the option is rejected."""
        with pytest.raises(InvalidMigrationFeeOption):
            MigrationFeeOption.FIXED_BPS_100.validate_base_fee(25)

    def test_parse_unknown(self):
        """Unknown option values are rejected."""
        with pytest.raises(InvalidMigrationFeeOption):
            MigrationFeeOption.parse(6)
