import numpy as np
import pytest

from planet_terrain import noise
from planet_terrain.generator import FieldKind, NoiseField, NoiseSampler, NoiseValues, axis_coordinates
from planet_terrain.settings import NoiseConfig


def make_grid(origin=0.0, count=6, resolution=8):
    axis = axis_coordinates(origin, 0, count, resolution)
    return np.meshgrid(axis, axis)


def test_permutation_table_is_deterministic_and_doubled():
    first = noise.create_permutation_table(42)
    second = noise.create_permutation_table(42)
    assert np.array_equal(first, second)
    assert first.shape == (512,)
    assert np.array_equal(first[:256], first[256:])
    assert sorted(first[:256].tolist()) == list(range(256))


def test_different_seeds_shuffle_differently():
    assert not np.array_equal(noise.create_permutation_table(1), noise.create_permutation_table(2))


def test_perlin_is_zero_on_lattice_points():
    p = noise.create_permutation_table(42)
    for x, y in [(0.0, 0.0), (3.0, 7.0), (-2.0, 5.0)]:
        assert noise.perlin_2d(p, x, y) == 0.0


def test_fbm_is_normalised_and_keeps_shape():
    p = noise.create_permutation_table(42)
    x, y = np.meshgrid(np.linspace(0, 500, 20), np.linspace(0, 300, 10))
    values = noise.fbm_noise_2d(p, x, y, 5, 0.5, 2.0, 100.0)
    assert values.shape == (10, 20)
    assert np.all(np.abs(values) <= 1.0)


def test_sampler_is_deterministic():
    config = NoiseConfig.from_seed(42)
    x, y = make_grid()
    first = NoiseSampler(config, world_height=4).generate_grid(x, y, 1)
    second = NoiseSampler(config, world_height=4).generate_grid(x, y, 1)
    for a, b in zip(first, second):
        assert np.array_equal(a, b)


def test_grid_elements_equal_scalar_samples():
    sampler = NoiseSampler(NoiseConfig.from_seed(42), world_height=4, sample_scale=8)
    x, y = make_grid(origin=1.0)
    continentalness, temperature, altitude = sampler.generate_grid(x, y, 0)
    for row, col in [(0, 0), (2, 3), (5, 5)]:
        expected = NoiseValues(
            float(continentalness[row, col]), float(temperature[row, col]), float(altitude[row, col])
        )
        assert sampler.generate(float(x[row, col]), float(y[row, col]), 0) == expected


def test_seed_changes_the_field():
    x, y = make_grid(origin=0.3)
    a = NoiseSampler(NoiseConfig.from_seed(1), world_height=4).generate_grid(x, y, 0)[0]
    b = NoiseSampler(NoiseConfig.from_seed(2), world_height=4).generate_grid(x, y, 0)[0]
    assert not np.array_equal(a, b)


def test_temperature_follows_latitude_at_full_influence():
    config = NoiseConfig.from_dict({'seed': 42, 'latitude_influence': 1.0})
    field = NoiseField(FieldKind.TEMPERATURE, config.temperature, config, world_height=4.0, sample_scale=8)
    assert field.generate(1.5, 0.0, 0) == pytest.approx(-config.temperature_range)
    assert field.generate(1.5, 2.0, 0) == pytest.approx(0.0)
    assert field.generate(1.5, 3.0, 0) == pytest.approx(0.5 * config.temperature_range)


def test_temperature_ignores_latitude_at_zero_influence():
    config = NoiseConfig.from_dict({'seed': 42, 'latitude_influence': 0.0})
    temperature = NoiseField(FieldKind.TEMPERATURE, config.temperature, config, world_height=4.0, sample_scale=8)
    plain = NoiseField(FieldKind.CONTINENTALNESS, config.temperature, config, world_height=4.0, sample_scale=8)
    x, y = make_grid(origin=0.7)
    expected = plain.generate_grid(x, y, 0) * config.temperature_range
    assert np.allclose(temperature.generate_grid(x, y, 0), expected)


def test_altitude_is_clamped():
    config = NoiseConfig.from_dict({'seed': 9, 'mountain_weight': 50.0})
    field = NoiseField(FieldKind.ALTITUDE, config.altitude, config, world_height=4.0, sample_scale=32)
    x, y = make_grid(count=16, resolution=4)
    values = field.generate_grid(x, y, 1)
    assert values.min() >= -1.0
    assert values.max() <= 1.0


def test_continentalness_at_world_origin_is_zero():
    sampler = NoiseSampler(NoiseConfig.from_seed(42), world_height=4, sample_scale=8)
    assert sampler.generate(0.0, 0.0, 1).continentalness == 0.0


def test_negative_detail_level_is_rejected():
    sampler = NoiseSampler(NoiseConfig.from_seed(42), world_height=4)
    with pytest.raises(ValueError):
        sampler.generate(0.5, 0.5, -1)


def test_injected_permutation_table_is_used():
    config = NoiseConfig.from_seed(42)
    table = noise.create_permutation_table(777)
    field = NoiseField(FieldKind.CONTINENTALNESS, config.continentalness, config,
                       world_height=4.0, permutation_table=table)
    assert field.permutation_table is table


def test_mountain_seed_offset_changes_only_altitude():
    x, y = make_grid(origin=0.4, count=8, resolution=4)
    default = NoiseSampler(NoiseConfig.from_seed(42), world_height=4, sample_scale=32).generate_grid(x, y, 0)
    shifted_config = NoiseConfig.from_dict({'seed': 42, 'mountain_seed_offset': 1})
    shifted = NoiseSampler(shifted_config, world_height=4, sample_scale=32).generate_grid(x, y, 0)
    assert np.array_equal(shifted[0], default[0])
    assert np.array_equal(shifted[1], default[1])
    assert not np.array_equal(shifted[2], default[2])


def test_mountain_pass_uses_its_own_table():
    config = NoiseConfig.from_seed(42)
    field = NoiseField(FieldKind.ALTITUDE, config.altitude, config, world_height=4.0)
    assert np.array_equal(field._mountain_p, noise.create_permutation_table(config.mountain.seed))
    assert not np.array_equal(field._mountain_p, field.permutation_table)


def test_primitive_names_map_to_kernel_ids():
    assert noise.primitive_id('perlin') == noise.PRIMITIVE_PERLIN
    assert noise.primitive_id('worley') == noise.PRIMITIVE_WORLEY
    with pytest.raises(ValueError):
        noise.primitive_id('value')


def test_worley_is_deterministic_and_bounded():
    p = noise.create_permutation_table(42)
    x, y = np.meshgrid(np.linspace(0, 500, 20), np.linspace(0, 300, 10))
    first = noise.fbm_noise_2d(p, x, y, 4, 0.5, 2.0, 50.0, 1.0, noise.PRIMITIVE_WORLEY)
    second = noise.fbm_noise_2d(p, x, y, 4, 0.5, 2.0, 50.0, 1.0, noise.PRIMITIVE_WORLEY)
    assert np.array_equal(first, second)
    assert np.all(np.abs(first) <= 1.0)
    assert np.ptp(first) > 0.0

    for px, py in [(0.3, 0.7), (12.5, -4.25), (200.1, 3.9)]:
        assert -1.0 <= noise.worley_2d(p, px, py) <= 1.0


def test_worley_differs_from_perlin():
    x, y = make_grid(origin=0.3)
    config = NoiseConfig.from_seed(42)
    perlin = NoiseSampler(config, world_height=4).generate_grid(x, y, 0)[0]
    worley = NoiseSampler(config, world_height=4, primitive='worley').generate_grid(x, y, 0)[0]
    assert not np.array_equal(perlin, worley)


def test_sampler_primitive_matches_configured_primitive():
    x, y = make_grid(origin=0.6)
    from_argument = NoiseSampler(NoiseConfig.from_seed(42), world_height=4, primitive='worley')
    from_config = NoiseSampler(NoiseConfig.from_dict({'seed': 42, 'noise_primitive': 'worley'}), world_height=4)
    assert from_argument.noise_config == from_config.noise_config
    for a, b in zip(from_argument.generate_grid(x, y, 1), from_config.generate_grid(x, y, 1)):
        assert np.array_equal(a, b)


def test_worley_grid_elements_equal_scalar_samples():
    sampler = NoiseSampler(NoiseConfig.from_seed(42), world_height=4, sample_scale=8, primitive='worley')
    x, y = make_grid(origin=1.0)
    continentalness, temperature, altitude = sampler.generate_grid(x, y, 1)
    for row, col in [(0, 0), (1, 4), (5, 2)]:
        expected = NoiseValues(
            float(continentalness[row, col]), float(temperature[row, col]), float(altitude[row, col])
        )
        assert sampler.generate(float(x[row, col]), float(y[row, col]), 1) == expected


def test_unknown_sampler_primitive_is_rejected():
    with pytest.raises(ValueError):
        NoiseSampler(NoiseConfig.from_seed(42), world_height=4, primitive='simplex')
