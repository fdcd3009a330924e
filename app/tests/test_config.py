from pychip8.quirks import DrawWrap
from pychip8.util.config import DEFAULT_CONFIG, key_map_from_config, load_config, quirks_from_config


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "config.toml")
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_overrides_are_merged(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        '[general]\nscale = 4\n\n[quirks]\ndraw_wrap = "axis"\n\n[keyboard]\n"0" = "space"\n',
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg["general"]["scale"] == 4
    assert cfg["general"]["cycle_delay_us"] == 500
    assert quirks_from_config(cfg).draw_wrap is DrawWrap.AXIS
    keys = key_map_from_config(cfg)
    assert keys["space"] == 0x0
    assert keys["q"] == 0x4


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[general]\nscale = 0\n', encoding="utf-8")
    assert load_config(path) == DEFAULT_CONFIG

    path.write_text('[quirks]\ndraw_wrap = "diagonal"\n', encoding="utf-8")
    assert load_config(path) == DEFAULT_CONFIG

    path.write_text('[keyboard]\n"G" = "g"\n', encoding="utf-8")
    assert load_config(path) == DEFAULT_CONFIG


def test_malformed_toml_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general\nscale = ", encoding="utf-8")
    assert load_config(path) == DEFAULT_CONFIG


def test_default_key_map_covers_every_key():
    assert sorted(key_map_from_config(DEFAULT_CONFIG).values()) == list(range(16))
