"""
Resolve the execution context of a test run from environment variables.

Variables:
    TEST_RN_PLATFORM  android | ios (default android)
    TEST_ENV          local | sauce (default local)
    ANDROID_APP_PATH  local Android build, overrides DEFAULT_ANDROID_APP_PATH
    IOS_APP_PATH      local iOS build, overrides DEFAULT_IOS_APP_PATH
    APPIUM_PORT       port of the local Appium server (default 4728)

Unknown or malformed values fall back to the defaults and are logged as
warnings. Pass `strict=True` to get a ConfigurationError instead.
"""
try:
    from typing import NamedTuple
    from e2ecore import caps
    from e2ecore.errors import ConfigurationError
    from e2ecore.logger import Logger
    from e2ecore.utils import env_value

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise

LOCAL = 'local'
REMOTE = 'sauce'
REMOTE_ALIASES = ('sauce', 'saucelabs', 'remote')

DEFAULT_PLATFORM = caps.ANDROID
DEFAULT_ENVIRONMENT = LOCAL
DEFAULT_APPIUM_PORT = 4728

DEFAULT_ANDROID_APP_PATH = './android/app/build/outputs/apk/debug/app-debug.apk'
DEFAULT_IOS_APP_PATH = './ios/build/Build/Products/Debug-iphonesimulator/gutenberg.app'

# Apps have to be uploaded to Sauce storage before a remote run
REMOTE_APP_LOCATIONS = {
    caps.ANDROID: 'sauce-storage:Gutenberg.apk',
    caps.IOS: 'sauce-storage:Gutenberg.app.zip',
}

LOCAL_APP_PATHS = {
    caps.ANDROID: ('ANDROID_APP_PATH', DEFAULT_ANDROID_APP_PATH),
    caps.IOS: ('IOS_APP_PATH', DEFAULT_IOS_APP_PATH),
}


class ExecutionContext(NamedTuple):
    platform: str
    environment: str
    app_location: str
    server_port: int = DEFAULT_APPIUM_PORT

    @property
    def is_android(self) -> bool:
        return self.platform == caps.ANDROID

    @property
    def is_local(self) -> bool:
        return self.environment == LOCAL


def _fallback(logger, strict, message):
    if strict:
        raise ConfigurationError(message)
    logger.warning(f'{message}; using default')


def resolve_platform(environ=None, strict=False, logger=None):
    logger = logger or Logger()
    value = env_value(environ, 'TEST_RN_PLATFORM')
    if value is None:
        return DEFAULT_PLATFORM
    platform = value.lower()
    if platform not in caps.supported_platforms():
        _fallback(logger, strict, f'Unrecognized TEST_RN_PLATFORM={value!r}')
        return DEFAULT_PLATFORM
    return platform


def resolve_environment(environ=None, strict=False, logger=None):
    logger = logger or Logger()
    value = env_value(environ, 'TEST_ENV')
    if value is None:
        return DEFAULT_ENVIRONMENT
    environment = value.lower()
    if environment == LOCAL:
        return LOCAL
    if environment in REMOTE_ALIASES:
        return REMOTE
    _fallback(logger, strict, f'Unrecognized TEST_ENV={value!r}')
    return DEFAULT_ENVIRONMENT


def resolve_server_port(environ=None, strict=False, logger=None):
    logger = logger or Logger()
    value = env_value(environ, 'APPIUM_PORT')
    if value is None:
        return DEFAULT_APPIUM_PORT
    try:
        port = int(value)
    except ValueError:
        port = None
    if port is None or not 0 < port < 65536:
        _fallback(logger, strict, f'Invalid APPIUM_PORT={value!r}')
        return DEFAULT_APPIUM_PORT
    return port


def resolve_app_location(platform, environment, environ=None):
    """
    Where the app under test lives
    :param platform: (str) resolved platform tag
    :param environment: (str) resolved environment
    :param environ: (Mapping) environment variables, os.environ if None
    :return: (str) a local path for local runs, a storage reference for remote runs
    """
    if environment != LOCAL:
        return REMOTE_APP_LOCATIONS[platform]
    variable, default = LOCAL_APP_PATHS[platform]
    return env_value(environ, variable, default)


def resolve(environ=None, strict=False):
    """
    Build the execution context of this run
    :param environ: (Mapping) environment variables, os.environ if None
    :param strict: (bool) raise ConfigurationError on unrecognized values instead of falling back
    :return: (ExecutionContext)
    """
    logger = Logger()
    platform = resolve_platform(environ, strict, logger)
    environment = resolve_environment(environ, strict, logger)
    context = ExecutionContext(
        platform=platform,
        environment=environment,
        app_location=resolve_app_location(platform, environment, environ),
        server_port=resolve_server_port(environ, strict, logger),
    )
    logger.info(f'Resolved execution context: {context}')
    return context
