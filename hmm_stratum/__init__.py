"""
HMM-Local Stratum job builder.

Turns a node's block template into a Stratum v1 job (coinbase split,
merkle branch, mining.notify parameters) and rebuilds candidate blocks from
submitted shares for hash verification.
"""

from .block import CandidateBlock
from .config import JobBuilderConfig, load_config
from .difficulty import network_difficulty
from .errors import (
    CoinbaseScriptError,
    ConfigError,
    ExtranonceLengthMismatch,
    InvalidCompactTarget,
    InvalidPayoutAddress,
    InvalidShareParameters,
    PayoutConfigError,
    StratumJobError,
    TemplateDecodeError,
    UnsupportedHeightEncoding,
)
from .job import MiningJob, build_mining_job, new_job_id
from .share import ShareSubmission, reconstruct_block, try_share
from .template import BlockTemplate, PayoutAddress

__version__ = "0.3.0"

__all__ = [
    "BlockTemplate",
    "CandidateBlock",
    "CoinbaseScriptError",
    "ConfigError",
    "ExtranonceLengthMismatch",
    "InvalidCompactTarget",
    "InvalidPayoutAddress",
    "InvalidShareParameters",
    "JobBuilderConfig",
    "MiningJob",
    "PayoutAddress",
    "PayoutConfigError",
    "ShareSubmission",
    "StratumJobError",
    "TemplateDecodeError",
    "UnsupportedHeightEncoding",
    "build_mining_job",
    "load_config",
    "network_difficulty",
    "new_job_id",
    "reconstruct_block",
    "try_share",
]
