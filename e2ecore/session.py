try:
    import time
    from appium import webdriver
    from appium.options.android import UiAutomator2Options
    from appium.options.common.base import AppiumOptions
    from appium.options.ios import XCUITestOptions
    from selenium.common.exceptions import WebDriverException
    from urllib3.exceptions import HTTPError
    from e2ecore.errors import SessionCancelled, SessionInitError
    from e2ecore.logger import Logger

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise

OPTIONS_BY_PLATFORM = {
    'android': UiAutomator2Options,
    'ios': XCUITestOptions,
}


def options_for(capabilities):
    """
    Convert a capability profile to Appium options of the matching automation engine
    :param capabilities: (dict) capability profile
    :return: (AppiumOptions)
    """
    platform = str(capabilities.get('platformName', '')).lower()
    options_class = OPTIONS_BY_PLATFORM.get(platform, AppiumOptions)
    caps = {key: value for key, value in capabilities.items() if value is not None}
    return options_class().load_capabilities(caps)


class RemoteSession:
    """
    Remote-control session bound to one device/app instance.
    Thin wrapper over appium.webdriver.Remote; anything not defined here is
    delegated to the underlying driver, e.g. `session.find_element(...)`.
    """

    def __init__(self, command_executor, logger=None):
        self.command_executor = command_executor
        self.logger = logger or Logger()
        self.driver = None

    def init(self, capabilities):
        if self.driver is not None:
            raise SessionInitError('Session already initialized')
        self.logger.info(f'Requesting session with capabilities: {capabilities}')
        try:
            self.driver = webdriver.Remote(command_executor=self.command_executor,
                                           options=options_for(capabilities))
        except (WebDriverException, HTTPError, OSError) as ex:
            raise SessionInitError(f'Session initialization failed: {ex}') from ex
        self.logger.info(f'Session {self.driver.session_id} started')
        return self

    @property
    def session_id(self):
        return self.driver.session_id if self.driver is not None else None

    def status(self):
        return self.driver.get_status()

    def sleep(self, ms, cancel_event=None):
        """
        Client-side pause while the device works
        :param ms: (int) milliseconds
        :param cancel_event: (threading.Event) optional, cuts the pause short when set
        """
        if cancel_event is None:
            time.sleep(ms / 1000)
        elif cancel_event.wait(ms / 1000):
            raise SessionCancelled('Session setup cancelled')

    def set_implicit_wait_timeout(self, ms):
        self.driver.implicitly_wait(ms / 1000)

    def quit(self):
        """Quit the session. Safe to call more than once."""
        if self.driver is None:
            return
        try:
            self.logger.info(f'Quitting session {self.driver.session_id}')
            self.driver.quit()
        finally:
            self.driver = None

    def __getattr__(self, name):
        driver = self.__dict__.get('driver')
        if driver is None:
            raise AttributeError(name)
        return getattr(driver, name)

    def __repr__(self):
        return f'<RemoteSession {self.command_executor} session_id={self.session_id}>'
