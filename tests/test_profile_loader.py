from __future__ import annotations

from pathlib import Path

import pytest

from emuctl.core.errors import ProfileValidationError
from emuctl.core.profile_loader import load_profiles


def _write_profile(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_load_packaged_profile() -> None:
    loaded = load_profiles()
    assert "headless_ci" in loaded.profiles
    profile = loaded.profiles["headless_ci"]
    assert profile.avd == "ci_api_34"
    assert profile.boot_timeout_s == 600
    assert profile.options.no_window is True
    assert profile.options.memory_mb == 2048
    assert loaded.warnings == ()


def test_user_profile_overrides_packaged(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "config/emuctl/profiles/headless.yaml",
        """
id: headless_ci
name: My headless
avd: my_avd
options:
  accel: off
  no_window: false
  ports: [5580, 5581]
  dns_servers: ["1.1.1.1"]
""",
    )

    loaded = load_profiles()
    profile = loaded.profiles["headless_ci"]
    assert profile.avd == "my_avd"
    assert profile.boot_timeout_s == 0
    assert profile.options.accel == "off"
    assert profile.options.no_window is False
    assert profile.options.ports == (5580, 5581)
    assert profile.options.dns_servers == ("1.1.1.1",)
    assert loaded.warnings == ("User profile 'headless_ci' overrides packaged profile",)


def test_duplicate_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "data/emuctl/profiles/dup.yaml",
        "id: dup\nname: Dup\navd: a\navd: b\n",
    )
    with pytest.raises(ProfileValidationError, match="Duplicate key"):
        load_profiles()


def test_schema_violation_names_location(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "config/emuctl/profiles/bad.yml",
        "id: bad\nname: Bad\navd: a\noptions:\n  engine: turbo\n",
    )
    with pytest.raises(ProfileValidationError) as exc:
        load_profiles()
    assert "options.engine" in str(exc.value)


def test_identical_ports_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "config/emuctl/profiles/ports.yaml",
        "id: ports\nname: Ports\navd: a\noptions:\n  ports: [5554, 5554]\n",
    )
    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_root_must_be_mapping(tmp_path: Path) -> None:
    _write_profile(tmp_path / "config/emuctl/profiles/list.yaml", "- id: nope\n")
    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_duplicate_key_error_names_line(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "config/emuctl/profiles/dup.yaml",
        "id: dup\nname: Dup\navd: a\navd: b\n",
    )
    with pytest.raises(ProfileValidationError, match="Duplicate key 'avd' in YAML document at line 4"):
        load_profiles()


def test_later_user_profile_overrides_earlier_user_profile(tmp_path: Path) -> None:
    first = tmp_path / "config/emuctl/profiles/pixel.yaml"
    second = tmp_path / "data/emuctl/profiles/pixel.yaml"
    _write_profile(first, "id: pixel\nname: Config pixel\navd: from_config\n")
    _write_profile(second, "id: pixel\nname: Data pixel\navd: from_data\n")

    loaded = load_profiles()

    assert loaded.profiles["pixel"].avd == "from_data"
    assert loaded.warnings == (f"User profile 'pixel' in {second} overrides {first}",)


def test_yaml_switch_words_stay_strings(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "config/emuctl/profiles/switches.yaml",
        "id: switches\nname: Switches\navd: a\noptions:\n  accel: on\n  gpu: yes\n",
    )
    options = load_profiles().profiles["switches"].options
    assert options.accel == "on"
    assert options.gpu == "yes"
