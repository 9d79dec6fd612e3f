"""Configuration module for lutpack decoders."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal

from .errors import ConfigurationError

QuantizationRule = Literal["nearest", "truncate"]
DegenerateDomainPolicy = Literal["error", "zero"]

QUANTIZATION_RULES = ("nearest", "truncate")
DEGENERATE_DOMAIN_POLICIES = ("error", "zero")


@dataclass
class DecoderConfig:
    """Configuration shared by the .cube and .3dl decoders.

    Attributes:
        quantization: Rule used to turn a [0, 1] channel into 8 bits.
            'nearest' is floor(v * 255 + 0.5), 'truncate' is floor(v * 255).
        max_lut_size: Largest cube edge length accepted before allocation
        default_mesh_bits: Bit depth assumed by .3dl files without a Mesh line
        degenerate_domain: What to do when DOMAIN_MIN == DOMAIN_MAX on a
            channel. 'error' aborts the decode, 'zero' writes 0 for that channel.
        encoding: Text encoding used to read LUT files
        max_recorded_issues: Diagnostics kept per decode; later ones are only counted
    """

    quantization: QuantizationRule = "nearest"
    max_lut_size: int = 256
    default_mesh_bits: int = 12
    degenerate_domain: DegenerateDomainPolicy = "error"
    encoding: str = "utf-8"
    max_recorded_issues: int = 1000

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.quantization not in QUANTIZATION_RULES:
            raise ConfigurationError(
                f"Invalid quantization '{self.quantization}'. "
                f"Must be one of: {QUANTIZATION_RULES}"
            )

        if self.degenerate_domain not in DEGENERATE_DOMAIN_POLICIES:
            raise ConfigurationError(
                f"Invalid degenerate_domain '{self.degenerate_domain}'. "
                f"Must be one of: {DEGENERATE_DOMAIN_POLICIES}"
            )

        if not isinstance(self.max_lut_size, int) or self.max_lut_size < 1:
            raise ConfigurationError("max_lut_size must be an integer >= 1")

        if not isinstance(self.default_mesh_bits, int) or not 1 <= self.default_mesh_bits <= 32:
            raise ConfigurationError("default_mesh_bits must be between 1 and 32")

        if not isinstance(self.max_recorded_issues, int) or self.max_recorded_issues < 0:
            raise ConfigurationError("max_recorded_issues must be an integer >= 0")

    @property
    def default_mesh_scale(self) -> float:
        """Divisor applied to .3dl samples when no Mesh line is present."""
        return float(2 ** self.default_mesh_bits)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DecoderConfig":
        """Create DecoderConfig from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
