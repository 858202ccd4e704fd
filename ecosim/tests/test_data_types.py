"""
Tests for kinds, the traits table, and configuration dataclasses.
"""

import pytest

from ecosim.data_types import (
    Kind, KIND_TRAITS, UnknownKindError, EcosimError,
    SimulationConfig, PopulationCaps, PopulationStats
)


class TestKindParsing:
    """Kind.parse accepts members and names, rejects anything else."""

    def test_parse_member_and_name(self):
        assert Kind.parse(Kind.CARNIVORE) is Kind.CARNIVORE
        assert Kind.parse('herbivore') is Kind.HERBIVORE
        assert Kind.parse('  Omnivore ') is Kind.OMNIVORE

    def test_unknown_kind_rejected(self):
        with pytest.raises(UnknownKindError):
            Kind.parse('fungus')

    def test_unknown_kind_is_value_error(self):
        """Callers catching ValueError or EcosimError both see it"""
        with pytest.raises(ValueError):
            Kind.parse('')
        with pytest.raises(EcosimError):
            Kind.parse(None)


class TestKindTraits:
    """Traits table matches the per-kind constants."""

    def test_sizes_and_speeds(self):
        assert KIND_TRAITS[Kind.PLANT].size == 10.0
        assert KIND_TRAITS[Kind.PLANT].speed == 0.0
        assert not KIND_TRAITS[Kind.PLANT].mobile

        for kind, speed in [(Kind.HERBIVORE, 0.8), (Kind.CARNIVORE, 1.2), (Kind.OMNIVORE, 1.0)]:
            assert KIND_TRAITS[kind].size == 15.0
            assert KIND_TRAITS[kind].speed == speed
            assert KIND_TRAITS[kind].mobile

    def test_config_traits_lookup(self):
        config = SimulationConfig()
        assert config.traits(Kind.CARNIVORE) is KIND_TRAITS[Kind.CARNIVORE]
        assert config.traits('omnivore').digest_ticks == 10.0
        with pytest.raises(UnknownKindError):
            config.traits('fungus')

    def test_interaction_radius(self):
        config = SimulationConfig()
        assert config.interaction_radius(Kind.HERBIVORE) == 25.0
        assert config.interaction_radius(Kind.CARNIVORE) == 20.0
        assert config.interaction_radius(Kind.OMNIVORE) == 20.0

    def test_hunger_thresholds(self):
        config = SimulationConfig()
        assert config.hunger_threshold(Kind.HERBIVORE) == 75.0
        assert config.hunger_threshold(Kind.CARNIVORE) == 37.5
        assert config.hunger_threshold(Kind.OMNIVORE) == 37.5

        config.energy.start_energy = 100.0
        assert config.hunger_threshold(Kind.HERBIVORE) == 150.0


class TestPopulationCaps:

    def test_for_kind_and_set(self):
        caps = PopulationCaps(plant=5)
        assert caps.for_kind('plant') == 5
        caps.set(Kind.CARNIVORE, 12)
        assert caps.for_kind(Kind.CARNIVORE) == 12

    def test_negative_cap_clamped(self):
        caps = PopulationCaps()
        caps.set('omnivore', -3)
        assert caps.omnivore == 0

    def test_configs_do_not_share_caps(self):
        a = SimulationConfig()
        b = SimulationConfig()
        a.caps.plant = 1
        assert b.caps.plant != 1


def test_stats_to_dict_uses_builtin_types():
    stats = PopulationStats(plant_count=3, total_count=3, cycle_count=7, mean_energy=41.25)
    data = stats.to_dict()

    assert data == {
        'plant_count': 3,
        'herbivore_count': 0,
        'carnivore_count': 0,
        'omnivore_count': 0,
        'cycle_count': 7,
        'total_count': 3,
        'mean_energy': 41.25,
    }
    assert type(data['mean_energy']) is float
    assert stats.count_for('plant') == 3
