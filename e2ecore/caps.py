"""
Base Appium capability profiles, one per supported platform.

The records below are read-only templates. `get_profile` hands out a deep copy
that the caller is free to fill in (the `app` location, remote run metadata...).
"""
try:
    import copy
    from types import MappingProxyType
    from e2ecore.errors import UnknownPlatform

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise

ANDROID = 'android'
IOS = 'ios'

IOS12 = MappingProxyType({
    'platformName': 'iOS',
    'platformVersion': '12.0',
    'deviceName': 'iPhone XR',
    'os': 'iOS',
    'deviceOrientation': 'portrait',
    'automationName': 'XCUITest',
    'appiumVersion': '1.9.1',
    'app': None,  # set per run
})

ANDROID8 = MappingProxyType({
    'platformName': 'Android',
    'platformVersion': '8.0',
    'deviceName': 'Android Emulator',
    'automationName': 'UiAutomator2',
    'os': 'Android',
    'appPackage': 'com.gutenberg',
    'appActivity': 'com.gutenberg.MainActivity',
    'deviceOrientation': 'portrait',
    'appiumVersion': '1.9.1',
    'app': None,  # set per run
})

PROFILES = MappingProxyType({
    ANDROID: ANDROID8,
    IOS: IOS12,
})


def supported_platforms():
    return tuple(PROFILES)


def get_profile(platform):
    """
    Get an independent copy of the base capability profile of a platform
    :param platform: (str) platform tag, `android` or `ios` (case-insensitive)
    :return: (dict) mutable capability profile
    """
    key = platform.lower() if isinstance(platform, str) else platform
    try:
        base = PROFILES[key]
    except (KeyError, TypeError):
        raise UnknownPlatform(platform) from None
    return copy.deepcopy(dict(base))
