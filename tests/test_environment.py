from __future__ import annotations

import pytest

from e2ecore import environment
from e2ecore.errors import ConfigurationError


def test_resolve_defaults() -> None:
    context = environment.resolve({})
    assert context.platform == "android"
    assert context.environment == "local"
    assert context.app_location == environment.DEFAULT_ANDROID_APP_PATH
    assert context.server_port == 4728
    assert context.is_android
    assert context.is_local


def test_resolve_ios_local_default_path() -> None:
    context = environment.resolve({"TEST_RN_PLATFORM": "iOS"})
    assert context.platform == "ios"
    assert context.app_location == environment.DEFAULT_IOS_APP_PATH


def test_local_path_overrides_are_per_platform() -> None:
    environ = {"ANDROID_APP_PATH": "/builds/app.apk", "IOS_APP_PATH": "/builds/app.app"}
    assert environment.resolve(environ).app_location == "/builds/app.apk"
    environ["TEST_RN_PLATFORM"] = "ios"
    assert environment.resolve(environ).app_location == "/builds/app.app"


def test_blank_override_uses_default() -> None:
    context = environment.resolve({"ANDROID_APP_PATH": "  "})
    assert context.app_location == environment.DEFAULT_ANDROID_APP_PATH


@pytest.mark.parametrize(
    ("platform", "expected"),
    [("android", "sauce-storage:Gutenberg.apk"), ("ios", "sauce-storage:Gutenberg.app.zip")],
)
@pytest.mark.parametrize("selector", ["sauce", "SAUCE", "remote", "saucelabs"])
def test_remote_app_location_is_storage_reference(platform: str, expected: str, selector: str) -> None:
    environ = {
        "TEST_RN_PLATFORM": platform,
        "TEST_ENV": selector,
        "ANDROID_APP_PATH": "/builds/app.apk",
        "IOS_APP_PATH": "/builds/app.app",
    }
    context = environment.resolve(environ)
    assert context.environment == environment.REMOTE
    assert not context.is_local
    assert context.app_location == expected


def test_unrecognized_values_fall_back_to_defaults() -> None:
    context = environment.resolve({"TEST_RN_PLATFORM": "andriod", "TEST_ENV": "cloudy", "APPIUM_PORT": "abc"})
    assert context.platform == "android"
    assert context.environment == "local"
    assert context.server_port == 4728


@pytest.mark.parametrize(
    "environ",
    [{"TEST_RN_PLATFORM": "andriod"}, {"TEST_ENV": "cloudy"}, {"APPIUM_PORT": "70000"}],
)
def test_strict_mode_rejects_unrecognized_values(environ: dict) -> None:
    with pytest.raises(ConfigurationError):
        environment.resolve(environ, strict=True)


def test_server_port_override() -> None:
    assert environment.resolve({"APPIUM_PORT": "4800"}).server_port == 4800


def test_context_is_immutable() -> None:
    context = environment.resolve({})
    with pytest.raises(AttributeError):
        context.platform = "ios"  # type: ignore[misc]
