# ================================================================================
# Tests for configuration loading and validation
# ================================================================================

import json
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from primertune.config import (
    MAX_EXTENSION_LIMIT,
    CloningParameters,
    EngineConfig,
    IonConcentrations,
    MetricWeights,
    ScoringParameters,
    TuningParameters,
    load_config,
)


class TestIonConcentrations:
    """Tests for IonConcentrations model."""

    def test_default_values(self):
        ions = IonConcentrations()
        assert ions.potassium == 50.0
        assert ions.sodium == 0.0
        assert ions.magnesium == 1.5
        assert ions.dntp == 0.6
        assert ions.primer == 50.0
        assert ions.monovalent == 50.0

    def test_negative_concentration_rejected(self):
        with pytest.raises(ValidationError):
            IonConcentrations(magnesium=-1.0)

    def test_zero_primer_rejected(self):
        with pytest.raises(ValidationError):
            IonConcentrations(primer=0.0)

    def test_immutable(self):
        ions = IonConcentrations()
        with pytest.raises(ValidationError):
            ions.potassium = 10.0


class TestScoringParameters:
    """Tests for ScoringParameters model."""

    def test_default_values(self):
        params = ScoringParameters()
        assert (params.tm_min, params.tm_max) == (57.0, 61.0)
        assert (params.gc_min, params.gc_max) == (40.0, 60.0)
        assert (params.length_min, params.length_max) == (18, 24)
        assert params.end_stability_saturation == 6.5
        assert params.weights == MetricWeights()

    def test_default_weights(self):
        weights = MetricWeights()
        assert weights.length == 1.5
        assert weights.repeats == 0.5
        assert weights.total() == pytest.approx(6.0)

    def test_tm_range_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            ScoringParameters(tm_min=65.0, tm_max=60.0)
        assert "Tm values must satisfy" in str(exc_info.value)

    def test_gc_range_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            ScoringParameters(gc_min=70.0, gc_max=50.0)
        assert "GC values must satisfy" in str(exc_info.value)

    def test_length_range_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            ScoringParameters(length_min=30, length_max=20)
        assert "Length values must satisfy" in str(exc_info.value)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            MetricWeights(tm=-1.0)


class TestTuningParameters:
    def test_defaults(self):
        tuning = TuningParameters()
        assert tuning.max_extension == 32
        assert tuning.workers == 1

    def test_extension_capped(self):
        TuningParameters(max_extension=MAX_EXTENSION_LIMIT)
        with pytest.raises(ValidationError):
            TuningParameters(max_extension=MAX_EXTENSION_LIMIT + 1)


class TestCloningParameters:
    def test_overlap_range_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            CloningParameters(overlap_min=30, overlap_max=20)
        assert "Overlap values must satisfy" in str(exc_info.value)

    def test_binding_range_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            CloningParameters(binding_min=30, binding_max=20)
        assert "Binding values must satisfy" in str(exc_info.value)


class TestEngineConfig:
    """Tests for the complete EngineConfig model."""

    def test_default_config(self):
        config = EngineConfig()
        assert isinstance(config.ion_concentrations, IonConcentrations)
        assert isinstance(config.scoring_parameters, ScoringParameters)
        assert isinstance(config.tuning_parameters, TuningParameters)
        assert isinstance(config.cloning_parameters, CloningParameters)

    def test_default_preset_matches_model_defaults(self):
        assert EngineConfig.from_preset("default") == EngineConfig()

    def test_lenient_preset(self):
        config = EngineConfig.from_preset("lenient")
        assert config.scoring_parameters.tm_min < 57.0
        assert config.scoring_parameters.gc_max > 60.0
        assert config.tuning_parameters.max_extension == 48

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            EngineConfig.from_preset("strict")

    def test_from_dict_partial(self):
        config = EngineConfig.from_dict({"ion_concentrations": {"magnesium": 3.0}})
        assert config.ion_concentrations.magnesium == 3.0
        assert config.ion_concentrations.potassium == 50.0

    def test_from_dict_invalid(self):
        with pytest.raises(ValidationError):
            EngineConfig.from_dict({"scoring_parameters": {"tm_min": 70, "tm_max": 60}})

    def test_json_round_trip(self):
        config = EngineConfig.from_dict({"tuning_parameters": {"workers": 4}})
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            config.to_json_file(path)
            with open(path) as f:
                data = json.load(f)
            assert data["tuning_parameters"]["workers"] == 4
            assert EngineConfig.from_json_file(path) == config

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_json_file("/nonexistent/config.json")


class TestLoadConfig:
    def test_default(self):
        assert load_config() == EngineConfig()

    def test_unknown_preset_falls_back_to_default(self):
        assert load_config(preset="aggressive") == EngineConfig()

    def test_config_path_takes_priority(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            EngineConfig.from_dict({"ion_concentrations": {"sodium": 10.0}}).to_json_file(path)
            config = load_config(preset="lenient", config_path=path)
        assert config.ion_concentrations.sodium == 10.0
        assert config.scoring_parameters.tm_min == 57.0
