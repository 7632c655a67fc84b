"""
Exceptions raised while building mining jobs and reconstructing shares.
"""


class StratumJobError(Exception):
    """Base class for every error raised by the job builder."""
    pass


class TemplateDecodeError(StratumJobError):
    """Raised when a block template field or raw transaction cannot be decoded."""
    pass


class InvalidCompactTarget(TemplateDecodeError):
    """Raised when a compact `bits` value does not describe a positive target."""
    pass


class UnsupportedHeightEncoding(StratumJobError):
    """Raised when the block height does not fit the coinbase height push."""
    pass


class CoinbaseScriptError(StratumJobError):
    """Raised when the coinbase input script falls outside consensus size limits."""
    pass


class InvalidPayoutAddress(StratumJobError):
    """Raised when a payout address cannot be converted to a witness program."""
    pass


class PayoutConfigError(StratumJobError):
    """Raised when the payout list cannot produce a valid set of outputs."""
    pass


class InvalidShareParameters(StratumJobError):
    """Raised when submitted share values are malformed."""
    pass


class ExtranonceLengthMismatch(InvalidShareParameters):
    """Raised when extranonce sizes differ from the ones the job was split for."""
    pass


class ConfigError(StratumJobError):
    """Raised when a job builder setting names something the builder does not support."""
    pass
