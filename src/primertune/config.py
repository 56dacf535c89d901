# ================================================================================
# Configuration models for primer scoring, tuning and cloning primer design
#
# Uses Pydantic for runtime validation of configuration parameters. Nothing in
# the engine reads these as ambient state: every engine call receives the
# models it needs as explicit arguments.
# ================================================================================

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator

DATA_DIR = Path(__file__).parent / "data"

# Hard ceiling on how far a single primer end may be extended during tuning.
# Bounds the exhaustive search to (limit + 1) ** 2 candidates per junction primer.
MAX_EXTENSION_LIMIT = 64


class IonConcentrations(BaseModel):
    """Reaction conditions used by the thermodynamic model."""

    model_config = ConfigDict(frozen=True)

    potassium: float = Field(default=50.0, ge=0.0)  # mM
    sodium: float = Field(default=0.0, ge=0.0)  # mM
    magnesium: float = Field(default=1.5, ge=0.0)  # mM
    dntp: float = Field(default=0.6, ge=0.0)  # mM
    primer: float = Field(default=50.0, gt=0.0)  # nM, strand concentration

    @property
    def monovalent(self) -> float:
        """Combined K+ and Na+ concentration (mM)."""
        return self.potassium + self.sodium


class MetricWeights(BaseModel):
    """Weight of each metric kind in the aggregate quality score."""

    tm: float = Field(default=1.0, ge=0.0)
    gc: float = Field(default=1.0, ge=0.0)
    length: float = Field(default=1.5, ge=0.0)
    end_stability: float = Field(default=1.0, ge=0.0)
    repeats: float = Field(default=0.5, ge=0.0)
    dimer: float = Field(default=1.0, ge=0.0)

    @model_validator(mode="after")
    def validate_total_weight(self) -> MetricWeights:
        """At least one metric must carry weight."""
        if self.total() <= 0.0:
            raise ValueError("Metric weights must not all be zero")
        return self

    def total(self) -> float:
        return (
            self.tm
            + self.gc
            + self.length
            + self.end_stability
            + self.repeats
            + self.dimer
        )


class ScoringParameters(BaseModel):
    """Targets and weights for the fuzzy primer quality score."""

    weights: MetricWeights = Field(default_factory=MetricWeights)

    # Melting temperature (°C)
    tm_min: float = Field(default=57.0, ge=30.0, le=80.0)
    tm_max: float = Field(default=61.0, ge=30.0, le=85.0)
    tm_falloff: float = Field(default=18.0, gt=0.0, le=50.0)

    # GC content (%)
    gc_min: float = Field(default=40.0, ge=0.0, le=100.0)
    gc_max: float = Field(default=60.0, ge=0.0, le=100.0)
    gc_falloff: float = Field(default=40.0, gt=0.0, le=100.0)

    # Length (nt). Junction primers score each side against this range.
    length_min: int = Field(default=18, ge=5, le=60)
    length_max: int = Field(default=24, ge=5, le=80)
    length_falloff_short: float = Field(default=8.0, gt=0.0)
    length_falloff_long: float = Field(default=16.0, gt=0.0)

    # 3'-end stability: -dG (kcal/mol) of the terminal pentamer at which the
    # score saturates
    end_stability_window: int = Field(default=5, ge=2, le=10)
    end_stability_saturation: float = Field(default=6.5, gt=0.0, le=20.0)

    # Repeats: score lost per detected repeat occurrence
    repeat_penalty: float = Field(default=0.2, ge=0.0, le=1.0)

    # Self-dimer risk at which the dimer score reaches 0
    dimer_risk_cap: float = Field(default=6.0, gt=0.0)

    @model_validator(mode="after")
    def validate_tm_range(self) -> ScoringParameters:
        """Validate that tm_min <= tm_max."""
        if self.tm_min > self.tm_max:
            raise ValueError(
                f"Tm values must satisfy: min ({self.tm_min}) <= max ({self.tm_max})"
            )
        return self

    @model_validator(mode="after")
    def validate_gc_range(self) -> ScoringParameters:
        """Validate that gc_min <= gc_max."""
        if self.gc_min > self.gc_max:
            raise ValueError(
                f"GC values must satisfy: min ({self.gc_min}) <= max ({self.gc_max})"
            )
        return self

    @model_validator(mode="after")
    def validate_length_range(self) -> ScoringParameters:
        """Validate that length_min <= length_max."""
        if self.length_min > self.length_max:
            raise ValueError(
                f"Length values must satisfy: min ({self.length_min}) <= max ({self.length_max})"
            )
        return self


class TuningParameters(BaseModel):
    """Bounds and execution settings for the tuning search."""

    max_extension: int = Field(default=32, ge=0, le=MAX_EXTENSION_LIMIT)
    workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Threads used to evaluate candidates. 1 evaluates serially.",
    )


class CloningParameters(BaseModel):
    """Primer layout for SLIC / FastCloning primer design."""

    # Homology arm on insert primers (nt)
    overlap_min: int = Field(default=15, ge=8, le=40)
    overlap_max: int = Field(default=25, ge=8, le=50)

    # Template-binding region (nt) of insert and vector primers
    binding_min: int = Field(default=18, ge=10, le=40)
    binding_max: int = Field(default=28, ge=10, le=50)

    # Length limits for the assembled primers
    primer_max_length: int = Field(default=60, ge=20, le=120)

    # Shortest exact 3' match accepted when simulating amplification
    min_anneal: int = Field(default=12, ge=6, le=40)

    @model_validator(mode="after")
    def validate_overlap_range(self) -> CloningParameters:
        """Validate that overlap_min <= overlap_max."""
        if self.overlap_min > self.overlap_max:
            raise ValueError(
                f"Overlap values must satisfy: min ({self.overlap_min}) <= max ({self.overlap_max})"
            )
        return self

    @model_validator(mode="after")
    def validate_binding_range(self) -> CloningParameters:
        """Validate that binding_min <= binding_max."""
        if self.binding_min > self.binding_max:
            raise ValueError(
                f"Binding values must satisfy: min ({self.binding_min}) <= max ({self.binding_max})"
            )
        return self

    @model_validator(mode="after")
    def validate_arm_extension(self) -> CloningParameters:
        """Arms and binding regions are tuned by extension; keep them within the cap."""
        if self.overlap_max - self.overlap_min > MAX_EXTENSION_LIMIT:
            raise ValueError(
                f"Overlap range exceeds the extension limit of {MAX_EXTENSION_LIMIT}"
            )
        if self.binding_max - self.binding_min > MAX_EXTENSION_LIMIT:
            raise ValueError(
                f"Binding range exceeds the extension limit of {MAX_EXTENSION_LIMIT}"
            )
        return self


class EngineConfig(BaseModel):
    """Complete configuration for primer scoring, tuning and cloning design."""

    ion_concentrations: IonConcentrations = Field(default_factory=IonConcentrations)
    scoring_parameters: ScoringParameters = Field(default_factory=ScoringParameters)
    tuning_parameters: TuningParameters = Field(default_factory=TuningParameters)
    cloning_parameters: CloningParameters = Field(default_factory=CloningParameters)

    @classmethod
    def from_json_file(cls, file_path: str | Path) -> EngineConfig:
        """
        Load configuration from a JSON file.

        Parameters
        ----------
        file_path : str | Path
            Path to the JSON configuration file.

        Returns
        -------
        EngineConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError
            If the configuration file does not exist.
        ValidationError
            If the configuration fails validation.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> EngineConfig:
        """
        Load configuration from a dictionary.

        Raises
        ------
        ValidationError
            If the configuration fails validation.
        """
        return cls.model_validate(config_dict)

    @classmethod
    def from_preset(
        cls, preset: Literal["default", "lenient"] = "default"
    ) -> EngineConfig:
        """
        Load a preset configuration.

        Parameters
        ----------
        preset : str
            Preset name, either "default" or "lenient".

        Raises
        ------
        ValueError
            If the preset name is not recognized.
        """
        if preset == "default":
            config_path = DATA_DIR / "engine_default_config.json"
        elif preset == "lenient":
            config_path = DATA_DIR / "engine_lenient_config.json"
        else:
            raise ValueError(f"Unknown preset: {preset}. Use 'default' or 'lenient'.")

        return cls.from_json_file(config_path)

    def to_dict(self) -> dict[str, Any]:
        """Export configuration to a dictionary."""
        return self.model_dump()

    def to_json_file(self, file_path: str | Path) -> None:
        """Save configuration to a JSON file."""
        path = Path(file_path)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=4)
        logger.info(f"Configuration saved to: {path}")


def load_config(
    preset: str = "default",
    config_path: str | Path | None = None,
) -> EngineConfig:
    """
    Load and validate engine configuration.

    Priority order: config_path > preset

    Raises
    ------
    ValidationError
        If the configuration fails validation.
    FileNotFoundError
        If the specified config file does not exist.
    """
    if config_path is not None:
        logger.info(f"Loading config from: {config_path}")
        return EngineConfig.from_json_file(config_path)

    if preset not in ("default", "lenient"):
        logger.warning(
            f"Preset value `{preset}` must be either 'default' or 'lenient'. Using default instead."
        )
        preset = "default"

    logger.info(f"Loading preset configuration: {preset}")
    return EngineConfig.from_preset(preset)  # type: ignore[arg-type]
