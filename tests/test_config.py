from __future__ import annotations

import pytest

from engine.config import BuilderConfig, ImageProcessorOptions, PageSize


def test_defaults_are_valid():
    config = BuilderConfig.default()
    assert config.validate()
    assert config.default_page_dimensions == (595.0, 842.0)
    assert config.resource_collision_policy == "fail"


@pytest.mark.parametrize("overrides", [
    {"compression_level": -1},
    {"compression_level": 10},
    {"resource_collision_policy": "overwrite"},
    {"log_level": "CHATTY"},
    {"image_processor_options": {"png_compress_level": 11}},
])
def test_invalid_values(overrides):
    assert not BuilderConfig(**overrides).validate()


def test_from_dict_accepts_page_size_names_and_ignores_unknown_keys():
    config = BuilderConfig.from_dict({
        "default_page_size": "letter",
        "default_portrait": False,
        "no_such_option": 1,
    })
    assert config.default_page_size is PageSize.LETTER
    assert config.default_page_dimensions == (792.0, 612.0)


def test_from_dict_rejects_unknown_page_size():
    with pytest.raises(ValueError):
        BuilderConfig.from_dict({"default_page_size": "B7"})


def test_dict_round_trip():
    config = BuilderConfig(
        default_page_size=PageSize.A3,
        compress_content_streams=False,
        resource_collision_policy="merge",
        image_processor_options={"optimize_png": True},
    )
    assert BuilderConfig.from_dict(config.to_dict()) == config


def test_debug_flag_overrides_log_level():
    assert BuilderConfig(log_level="warning").effective_log_level == "WARNING"
    assert BuilderConfig(log_level="warning", enable_debug_logging=True).effective_log_level == "DEBUG"


def test_image_processor_options():
    options = ImageProcessorOptions.from_dict({"png_compress_level": 3, "unknown": True})
    assert options.png_compress_level == 3
    assert options.to_dict() == {"enabled": True, "png_compress_level": 3, "optimize_png": False}
    assert not ImageProcessorOptions(png_compress_level=-2).validate()


def test_page_size_orientation():
    assert PageSize.A4.to_dimensions(is_portrait=False) == (842.0, 595.0)
